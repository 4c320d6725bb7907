"""Notification models for FreshCart"""

from datetime import datetime
from pydantic import BaseModel


class Notification(BaseModel):
    """Message shown in a user's notification menu"""
    id: str
    user_id: str
    title: str
    message: str
    is_read: bool = False
    created_at: datetime


class NotificationList(BaseModel):
    notifications: list[Notification]
    unread_count: int
