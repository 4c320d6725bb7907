"""Notification inbox routes"""

from fastapi import APIRouter, HTTPException, Depends, Query

from ..database.notifications import NotificationStore, NotificationNotFound
from ..models.notification import Notification, NotificationList
from ..security.auth import get_authenticated_user
from ..security.roles import Identity
from .deps import get_notifications

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationList)
async def list_notifications(
    limit: int = Query(10, ge=1, le=50),
    identity: Identity = Depends(get_authenticated_user),
    store: NotificationStore = Depends(get_notifications),
):
    """Latest notifications with the unread count"""
    return NotificationList(
        notifications=store.list_for_user(identity.user_id, limit=limit),
        unread_count=store.unread_count(identity.user_id),
    )


@router.post("/read-all")
async def mark_all_read(
    identity: Identity = Depends(get_authenticated_user),
    store: NotificationStore = Depends(get_notifications),
):
    return {"marked_read": store.mark_all_read(identity.user_id)}


@router.post("/{notification_id}/read", response_model=Notification)
async def mark_read(
    notification_id: str,
    identity: Identity = Depends(get_authenticated_user),
    store: NotificationStore = Depends(get_notifications),
):
    try:
        return store.mark_read(identity.user_id, notification_id)
    except NotificationNotFound:
        raise HTTPException(status_code=404, detail="Notification not found")
