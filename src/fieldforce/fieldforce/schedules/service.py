from __future__ import annotations

import logging
from datetime import date, time
from typing import Optional

from ..common.validators import optional_text, require_non_empty
from ..core.enums import Action, NotificationType, Role, ScheduleStatus
from ..core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ..core.permissions import require
from ..database.unit_of_work import UnitOfWork
from ..notifications.service import NotificationService
from ..sites.repository import SiteRepository
from ..users.repository import UserRepository
from .model import Schedule
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    def __init__(
        self,
        schedules: ScheduleRepository,
        users: UserRepository,
        sites: SiteRepository,
        notifications: NotificationService,
        uow: UnitOfWork,
    ):
        self._schedules = schedules
        self._users = users
        self._sites = sites
        self._notifications = notifications
        self._uow = uow

    def get_schedule(self, schedule_id: int) -> Schedule:
        schedule = self._schedules.get_by_id(int(schedule_id))
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    def create_schedule(
        self,
        *,
        current_role: Role,
        created_by: int,
        employee_id: int,
        site_id: int,
        title: str,
        start_date: date,
        end_date: date,
        start_time: time,
        end_time: time,
        description: Optional[str] = None,
    ) -> Schedule:
        require(current_role, Action.MANAGE_SCHEDULES)
        title = require_non_empty(title, "Title")
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")

        employee = self._users.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise ValidationError("Employee does not exist or is inactive")
        site = self._sites.get_by_id(int(site_id))
        if not site or not site.is_active:
            raise ValidationError("Site does not exist or is inactive")

        with self._uow.transaction():
            schedule_id = self._schedules.create(
                employee_id=employee.user_id,
                site_id=site.site_id,
                title=title,
                description=optional_text(description),
                start_date=start_date,
                end_date=end_date,
                start_time=start_time,
                end_time=end_time,
                created_by=int(created_by),
            )
            self._notifications.notify(
                user_id=employee.user_id,
                title="New schedule",
                body=f"{title} at {site.name}, {start_date.isoformat()} to {end_date.isoformat()}",
                type=NotificationType.SCHEDULE,
                related_id=schedule_id,
            )

        logger.info("Schedule %s created for employee %s at site %s", schedule_id, employee.user_id, site.site_id)
        return self.get_schedule(schedule_id)

    def cancel_schedule(self, *, current_role: Role, schedule_id: int) -> None:
        require(current_role, Action.MANAGE_SCHEDULES)
        schedule = self.get_schedule(schedule_id)
        if schedule.status == ScheduleStatus.CANCELLED:
            raise InvalidStateError("Schedule is already cancelled")

        with self._uow.transaction():
            self._schedules.set_status(schedule.schedule_id, ScheduleStatus.CANCELLED)
            self._notifications.notify(
                user_id=schedule.employee_id,
                title="Schedule cancelled",
                body=f"{schedule.title} ({schedule.start_date.isoformat()} to {schedule.end_date.isoformat()}) was cancelled",
                type=NotificationType.SCHEDULE,
                related_id=schedule.schedule_id,
            )
        logger.info("Schedule %s cancelled", schedule.schedule_id)

    def schedules_for(self, employee_id: int, *, start: Optional[date] = None, end: Optional[date] = None) -> list[Schedule]:
        return list(self._schedules.list_range(employee_id=int(employee_id), start=start, end=end))

    def list_schedules(
        self,
        *,
        current_role: Role,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        include_cancelled: bool = False,
    ) -> list[Schedule]:
        require(current_role, Action.MANAGE_SCHEDULES)
        return list(
            self._schedules.list_range(
                employee_id=employee_id, start=start, end=end, include_cancelled=include_cancelled
            )
        )
