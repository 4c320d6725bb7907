"""Request-scoped dependencies shared by the routers"""

from typing import Optional

from fastapi import Header, HTTPException, Request, Depends

from ..core.session import SessionManager, ShopperSession
from ..database.notifications import NotificationStore
from ..database.orders import OrderBackend
from ..database.products import ProductCatalog


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_order_backend(request: Request) -> OrderBackend:
    return request.app.state.order_backend


def get_catalog(request: Request) -> ProductCatalog:
    return request.app.state.catalog


def get_notifications(request: Request) -> NotificationStore:
    return request.app.state.notifications


def get_session(
    x_session_id: Optional[str] = Header(None),
    manager: SessionManager = Depends(get_session_manager),
) -> ShopperSession:
    """Resolve the shopper session named by the X-Session-Id header"""
    if not x_session_id:
        raise HTTPException(status_code=400, detail="X-Session-Id header is required")
    return manager.get_or_create_session(x_session_id)


def get_idle_session(session: ShopperSession = Depends(get_session)) -> ShopperSession:
    """Session whose cart may be changed; refused while its checkout runs"""
    if session.checkout.is_checking_out:
        raise HTTPException(status_code=409, detail="checkout already in progress")
    return session
