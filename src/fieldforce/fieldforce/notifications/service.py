from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import Clock, now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.enums import NotificationPriority, NotificationType
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Append-only notification fan-out.

    Other services call ``notify`` inside their own transaction so the
    notification commits or rolls back with the state change that caused it.
    """

    def __init__(self, notifications: NotificationRepository, *, clock: Clock = now_local):
        self._notifications = notifications
        self._clock = clock

    def notify(
        self,
        *,
        user_id: int,
        title: str,
        body: str,
        type: NotificationType = NotificationType.GENERAL,
        related_id: Optional[int] = None,
        priority: NotificationPriority = NotificationPriority.NORMAL,
    ) -> int:
        kind = NotificationType(type)
        notification_id = self._notifications.create(
            user_id=int(user_id),
            title=require_non_empty(title, "Title"),
            body=body or "",
            type=kind,
            priority=NotificationPriority(priority),
            related_id=related_id,
            created_at=self._clock(),
        )
        logger.info("Notification %s (%s) queued for user %s", notification_id, kind.value, user_id)
        return notification_id

    def list_for(self, user_id: int, *, unread_only: bool = False, limit: int = DEFAULT_NOTIFICATION_LIMIT):
        return list(self._notifications.list_for_user(int(user_id), unread_only=unread_only, limit=limit))

    def unread_count(self, user_id: int) -> int:
        return self._notifications.count_unread(int(user_id))

    def _owned(self, user_id: int, notification_id: int) -> Notification:
        n = self._notifications.get_by_id(int(notification_id))
        if not n:
            raise NotFoundError("Notification not found")
        if n.user_id != int(user_id):
            raise AuthorizationError("Notification belongs to another user")
        return n

    def mark_read(self, *, user_id: int, notification_id: int) -> None:
        n = self._owned(user_id, notification_id)
        if not n.is_read:
            self._notifications.mark_read(n.notification_id)

    def mark_all_read(self, *, user_id: int) -> int:
        return self._notifications.mark_all_read(int(user_id))

    def delete(self, *, user_id: int, notification_id: int) -> None:
        n = self._owned(user_id, notification_id)
        self._notifications.delete(n.notification_id)
        logger.info("Notification %s deleted by user %s", n.notification_id, user_id)
