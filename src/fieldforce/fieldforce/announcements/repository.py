from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AnnouncementType, TargetRole
from .model import Announcement


class AnnouncementRepository(Protocol):
    def get_by_id(self, announcement_id: int) -> Optional[Announcement]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        content: str,
        type: AnnouncementType,
        target_role: TargetRole,
        restricted_start_date: Optional[date],
        restricted_end_date: Optional[date],
        created_by: int,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def set_active(self, announcement_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_active(self, *, type: Optional[AnnouncementType] = None) -> Sequence[Announcement]:
        raise NotImplementedError
