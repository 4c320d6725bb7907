"""Per-user notification inbox"""

import uuid
import logging
from datetime import datetime

from ..models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationNotFound(Exception):
    pass


class NotificationStore:
    """In-memory notifications, newest first per user"""

    def __init__(self):
        self.inboxes: dict[str, list[Notification]] = {}

    def notify(self, user_id: str, title: str, message: str) -> Notification:
        notification = Notification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            message=message,
            created_at=datetime.utcnow(),
        )
        self.inboxes.setdefault(user_id, []).insert(0, notification)
        logger.debug(f"Notified {user_id}: {title}")
        return notification

    def list_for_user(self, user_id: str, limit: int = 10) -> list[Notification]:
        return self.inboxes.get(user_id, [])[:limit]

    def unread_count(self, user_id: str) -> int:
        return sum(1 for n in self.inboxes.get(user_id, []) if not n.is_read)

    def mark_read(self, user_id: str, notification_id: str) -> Notification:
        """Mark one of the user's notifications as read"""
        inbox = self.inboxes.get(user_id, [])
        for index, notification in enumerate(inbox):
            if notification.id == notification_id:
                inbox[index] = notification.model_copy(update={"is_read": True})
                return inbox[index]
        raise NotificationNotFound(f"Notification {notification_id} not found")

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification as read; returns how many changed"""
        inbox = self.inboxes.get(user_id, [])
        unread = [i for i, n in enumerate(inbox) if not n.is_read]
        for index in unread:
            inbox[index] = inbox[index].model_copy(update={"is_read": True})
        return len(unread)
