from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationPriority, NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    title: str
    body: str
    type: NotificationType
    priority: NotificationPriority
    is_read: bool
    created_at: datetime
    related_id: Optional[int] = None
