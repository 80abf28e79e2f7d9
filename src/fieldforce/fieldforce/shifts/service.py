from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import Clock, now_local
from ..common.validators import optional_text, require_non_empty, require_non_negative
from ..core.enums import Action, NotificationType, Recurrence, Role, ShiftStatus
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..core.permissions import require
from ..database.unit_of_work import UnitOfWork
from ..notifications.service import NotificationService
from ..sites.repository import SiteRepository
from ..users.repository import UserRepository
from .model import Shift, ShiftView, derive_shift_status
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


class ShiftService:
    def __init__(
        self,
        shifts: ShiftRepository,
        users: UserRepository,
        sites: SiteRepository,
        notifications: NotificationService,
        uow: UnitOfWork,
        *,
        clock: Clock = now_local,
    ):
        self._shifts = shifts
        self._users = users
        self._sites = sites
        self._notifications = notifications
        self._uow = uow
        self._clock = clock

    def view(self, shift: Shift) -> ShiftView:
        return ShiftView(shift=shift, status=derive_shift_status(shift, self._clock()))

    def get_shift(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def create_shift(
        self,
        *,
        current_role: Role,
        employee_id: int,
        title: str,
        start_time: datetime,
        end_time: datetime,
        site_id: Optional[int] = None,
        recurrence: Recurrence = Recurrence.NONE,
        notes: Optional[str] = None,
    ) -> ShiftView:
        require(current_role, Action.MANAGE_SHIFTS)
        title = require_non_empty(title, "Title")
        if end_time <= start_time:
            raise ValidationError("Shift end must be after its start")

        employee = self._users.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise ValidationError("Employee does not exist or is inactive")
        if site_id is not None:
            site = self._sites.get_by_id(int(site_id))
            if not site or not site.is_active:
                raise ValidationError("Site does not exist or is inactive")

        with self._uow.transaction():
            self._users.lock(employee.user_id)
            clash = self._shifts.find_overlapping(
                employee_id=employee.user_id, start_time=start_time, end_time=end_time
            )
            if clash:
                raise ConflictError(f"Overlaps existing shift '{clash[0].title}' ({clash[0].shift_id})")

            shift_id = self._shifts.create(
                employee_id=employee.user_id,
                title=title,
                start_time=start_time,
                end_time=end_time,
                site_id=site_id,
                recurrence=Recurrence(recurrence),
                notes=optional_text(notes),
            )
            self._notifications.notify(
                user_id=employee.user_id,
                title="New shift assigned",
                body=f"{title}: {start_time:%Y-%m-%d %H:%M} - {end_time:%H:%M}",
                type=NotificationType.SHIFT,
                related_id=shift_id,
            )

        logger.info("Shift %s created for employee %s", shift_id, employee.user_id)
        return self.view(self.get_shift(shift_id))

    def cancel_shift(self, *, current_role: Role, shift_id: int) -> ShiftView:
        require(current_role, Action.MANAGE_SHIFTS)
        shift = self.get_shift(shift_id)
        if derive_shift_status(shift, self._clock()) in (ShiftStatus.CANCELLED, ShiftStatus.COMPLETED):
            raise InvalidStateError("Only upcoming or running shifts can be cancelled")

        with self._uow.transaction():
            self._shifts.set_status(shift.shift_id, ShiftStatus.CANCELLED)
            self._notifications.notify(
                user_id=shift.employee_id,
                title="Shift cancelled",
                body=f"{shift.title} on {shift.start_time:%Y-%m-%d} was cancelled",
                type=NotificationType.SHIFT,
                related_id=shift.shift_id,
            )
        logger.info("Shift %s cancelled", shift.shift_id)
        return self.view(self.get_shift(shift.shift_id))

    def complete_shift(self, *, current_role: Role, shift_id: int, overtime_hours: float = 0.0) -> ShiftView:
        require(current_role, Action.MANAGE_SHIFTS)
        overtime = require_non_negative(overtime_hours, "Overtime hours")
        shift = self.get_shift(shift_id)
        if shift.status != ShiftStatus.SCHEDULED:
            raise InvalidStateError(f"Shift is already {shift.status.value}")
        self._shifts.set_status(shift.shift_id, ShiftStatus.COMPLETED, overtime_hours=overtime)
        logger.info("Shift %s completed (overtime %.2fh)", shift.shift_id, overtime)
        return self.view(self.get_shift(shift.shift_id))

    def shifts_for(
        self,
        employee_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[ShiftView]:
        return [self.view(s) for s in self._shifts.list_range(employee_id=int(employee_id), start=start, end=end)]

    def list_shifts(
        self,
        *,
        current_role: Role,
        employee_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[ShiftView]:
        require(current_role, Action.MANAGE_SHIFTS)
        return [self.view(s) for s in self._shifts.list_range(employee_id=employee_id, start=start, end=end)]
