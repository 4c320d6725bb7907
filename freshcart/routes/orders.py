"""Order management routes for buyers, sellers and couriers"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from ..database.notifications import NotificationStore
from ..database.orders import OrderBackend, OrderNotFound, InvalidStatusTransition
from ..models.checkout import Order, OrderStatus, StatusUpdateRequest
from ..security.auth import require_order_access, require_status_update, require_courier
from ..security.roles import AppRole, Identity, can_set_status
from ..services.order_alerts import notify_status_change
from .deps import get_notifications, get_order_backend

router = APIRouter(prefix="/api/orders", tags=["Orders"])

CLOSED_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def _can_view(identity: Identity, order: Order) -> bool:
    if identity.role == AppRole.SELLER:
        return True
    if identity.role == AppRole.DELIVERY:
        if order.header.delivery_id is None:
            return order.header.status not in CLOSED_STATUSES
        return order.header.delivery_id == identity.user_id
    return order.header.buyer_id == identity.user_id


async def _get_visible_order(order_id: str, identity: Identity, backend: OrderBackend) -> Order:
    order = await backend.get_order(order_id)
    if not order or not _can_view(identity, order):
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("", response_model=list[Order])
async def list_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=200),
    identity: Identity = Depends(require_order_access),
    backend: OrderBackend = Depends(get_order_backend),
):
    """
    List orders visible to the caller.

    Buyers see their own orders, sellers see every order and couriers see
    unassigned open orders plus the ones assigned to them.
    """
    if identity.role == AppRole.BUYER:
        return await backend.list_orders(buyer_id=identity.user_id, status=status, limit=limit)

    orders = await backend.list_orders(status=status, limit=limit)
    return [o for o in orders if _can_view(identity, o)]


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    identity: Identity = Depends(require_order_access),
    backend: OrderBackend = Depends(get_order_backend),
):
    """Get order details"""
    return await _get_visible_order(order_id, identity, backend)


@router.post("/{order_id}/status", response_model=Order)
async def update_status(
    order_id: str,
    request: StatusUpdateRequest,
    identity: Identity = Depends(require_status_update),
    backend: OrderBackend = Depends(get_order_backend),
    notifications: NotificationStore = Depends(get_notifications),
):
    """Move an order to a new status"""
    if request.status == OrderStatus.ASSIGNED:
        raise HTTPException(status_code=400, detail="Use the assign endpoint to take an order")

    if not can_set_status(identity, request.status):
        raise HTTPException(
            status_code=403,
            detail=f"Role '{identity.role.value}' cannot set status {request.status.value}",
        )

    order = await _get_visible_order(order_id, identity, backend)
    if identity.role == AppRole.DELIVERY and order.header.delivery_id != identity.user_id:
        raise HTTPException(status_code=403, detail="Order is not assigned to you")

    try:
        updated = await backend.update_status(order_id, request.status)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    notify_status_change(notifications, order_id, updated)
    return updated


@router.post("/{order_id}/assign", response_model=Order)
async def assign_order(
    order_id: str,
    identity: Identity = Depends(require_courier),
    backend: OrderBackend = Depends(get_order_backend),
    notifications: NotificationStore = Depends(get_notifications),
):
    """Take an order for delivery"""
    try:
        updated = await backend.assign_delivery(order_id, identity.user_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    notify_status_change(notifications, order_id, updated)
    return updated
