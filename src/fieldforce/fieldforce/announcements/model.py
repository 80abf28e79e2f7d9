from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AnnouncementType, TargetRole


@dataclass(frozen=True)
class Announcement:
    announcement_id: int
    title: str
    content: str
    type: AnnouncementType
    target_role: TargetRole
    created_by: int
    created_at: datetime
    restricted_start_date: Optional[date] = None
    restricted_end_date: Optional[date] = None
    is_active: bool = True

    @property
    def is_restriction(self) -> bool:
        return (
            self.is_active
            and self.type == AnnouncementType.RESTRICTION
            and self.restricted_start_date is not None
            and self.restricted_end_date is not None
        )


@dataclass(frozen=True)
class RestrictedPeriod:
    """Inclusive date range during which time off cannot be requested."""

    announcement_id: int
    title: str
    start_date: date
    end_date: date
