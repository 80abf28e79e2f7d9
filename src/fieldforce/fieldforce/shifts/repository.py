from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Recurrence, ShiftStatus
from .model import Shift


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        title: str,
        start_time: datetime,
        end_time: datetime,
        site_id: Optional[int],
        recurrence: Recurrence,
        notes: Optional[str],
    ) -> int:
        raise NotImplementedError

    def set_status(self, shift_id: int, status: ShiftStatus, *, overtime_hours: Optional[float] = None) -> bool:
        raise NotImplementedError

    def reassign(self, shift_id: int, *, from_employee_id: int, to_employee_id: int) -> bool:
        """Compare-and-set the owner; False when the shift is no longer ``from_employee_id``'s."""
        raise NotImplementedError

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_ids: Iterable[int] = (),
    ) -> Sequence[Shift]:
        """Non-cancelled shifts of the employee overlapping [start_time, end_time)."""
        raise NotImplementedError

    def list_range(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        include_cancelled: bool = True,
    ) -> Sequence[Shift]:
        raise NotImplementedError
