from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import Clock, now_local, ranges_intersect
from ..common.validators import require_non_empty
from ..core.enums import Action, AnnouncementType, Role, TargetRole
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import require
from .model import Announcement, RestrictedPeriod
from .repository import AnnouncementRepository

logger = logging.getLogger(__name__)


class AnnouncementService:
    def __init__(self, announcements: AnnouncementRepository, *, clock: Clock = now_local):
        self._announcements = announcements
        self._clock = clock

    def create_announcement(
        self,
        *,
        current_role: Role,
        created_by: int,
        title: str,
        content: str,
        type: AnnouncementType = AnnouncementType.GENERAL,
        target_role: TargetRole = TargetRole.ALL,
        restricted_start_date: Optional[date] = None,
        restricted_end_date: Optional[date] = None,
    ) -> Announcement:
        require(current_role, Action.MANAGE_ANNOUNCEMENTS)
        title = require_non_empty(title, "Title")
        content = require_non_empty(content, "Content")
        type = AnnouncementType(type)

        if type == AnnouncementType.RESTRICTION:
            if restricted_start_date is None or restricted_end_date is None:
                raise ValidationError("A restriction needs both a start and an end date")
            if restricted_end_date < restricted_start_date:
                raise ValidationError("Restriction end date must be on or after its start date")
        elif restricted_start_date is not None or restricted_end_date is not None:
            raise ValidationError("Only restriction announcements carry restricted dates")

        announcement_id = self._announcements.create(
            title=title,
            content=content,
            type=type,
            target_role=TargetRole(target_role),
            restricted_start_date=restricted_start_date,
            restricted_end_date=restricted_end_date,
            created_by=int(created_by),
            created_at=self._clock(),
        )
        logger.info("Announcement %s (%s) created by %s", announcement_id, type.value, created_by)
        return self.get_announcement(announcement_id)

    def get_announcement(self, announcement_id: int) -> Announcement:
        a = self._announcements.get_by_id(int(announcement_id))
        if not a:
            raise NotFoundError("Announcement not found")
        return a

    def deactivate_announcement(self, *, current_role: Role, announcement_id: int) -> None:
        require(current_role, Action.MANAGE_ANNOUNCEMENTS)
        a = self.get_announcement(announcement_id)
        self._announcements.set_active(a.announcement_id, is_active=False)
        logger.info("Announcement %s deactivated", a.announcement_id)

    def list_active(self, *, role: Role) -> list[Announcement]:
        visible = {TargetRole.ALL, TargetRole(Role(role).value)}
        return [a for a in self._announcements.list_active() if a.target_role in visible]

    def restricted_periods(self) -> list[RestrictedPeriod]:
        return [
            RestrictedPeriod(
                announcement_id=a.announcement_id,
                title=a.title,
                start_date=a.restricted_start_date,
                end_date=a.restricted_end_date,
            )
            for a in self._announcements.list_active(type=AnnouncementType.RESTRICTION)
            if a.is_restriction
        ]

    def find_restriction(self, start: date, end: date) -> Optional[RestrictedPeriod]:
        """First active restricted period intersecting [start, end], inclusive."""
        for period in self.restricted_periods():
            if ranges_intersect(start, end, period.start_date, period.end_date):
                return period
        return None
