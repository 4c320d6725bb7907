"""Checkout API routes"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends

from ..core.session import ShopperSession
from ..database.notifications import NotificationStore
from ..database.products import ProductCatalog
from ..models.checkout import CheckoutRequest, CheckoutResponse
from ..security.auth import get_current_user
from ..security.roles import Identity, Capability, has_capability
from ..services.checkout import (
    AuthenticationRequired,
    CheckoutInProgress,
    CheckoutValidationError,
    RemoteWriteError,
)
from ..services.order_alerts import notify_order_placed
from .deps import get_catalog, get_notifications, get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    session: ShopperSession = Depends(get_session),
    identity: Optional[Identity] = Depends(get_current_user),
    catalog: ProductCatalog = Depends(get_catalog),
    notifications: NotificationStore = Depends(get_notifications),
):
    """
    Place an order from the session's cart.

    The ordered lines leave the cart only when the order and all its lines
    were written; on any failure the cart is left as it was.
    """
    if identity is not None and not has_capability(identity, Capability.PLACE_ORDER):
        raise HTTPException(status_code=403, detail="Only buyers can place orders")

    session.bind_identity(identity)

    try:
        result = await session.checkout.checkout(delivery_address=request.delivery_address)
    except AuthenticationRequired as e:
        raise HTTPException(status_code=401, detail=str(e))
    except CheckoutValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CheckoutInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RemoteWriteError as e:
        logger.warning(f"Checkout failed for session {session.session_id}: {e}")
        raise HTTPException(status_code=502, detail=f"checkout failed: {e}")

    notify_order_placed(
        notifications,
        catalog,
        order_id=result.order_id,
        buyer_id=identity.user_id,
        lines=result.lines,
        total_amount=result.summary.grand_total,
        currency=result.summary.currency,
    )

    return CheckoutResponse(
        success=True,
        order_id=result.order_id,
        summary=result.summary,
    )
