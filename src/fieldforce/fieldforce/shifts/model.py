from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Recurrence, ShiftStatus


@dataclass(frozen=True)
class Shift:
    """Domain entity: a concrete block of work assigned to one employee.

    ``status`` holds only what was stored explicitly (scheduled, cancelled,
    completed); the effective status comes from ``derive_shift_status``.
    """

    shift_id: int
    employee_id: int
    title: str
    start_time: datetime
    end_time: datetime
    site_id: Optional[int] = None
    recurrence: Recurrence = Recurrence.NONE
    status: ShiftStatus = ShiftStatus.SCHEDULED
    overtime_hours: float = 0.0
    notes: Optional[str] = None


@dataclass(frozen=True)
class ShiftView:
    shift: Shift
    status: ShiftStatus


def derive_shift_status(shift: Shift, now: datetime) -> ShiftStatus:
    if shift.status in (ShiftStatus.CANCELLED, ShiftStatus.COMPLETED):
        return shift.status
    if now < shift.start_time:
        return ShiftStatus.SCHEDULED
    if now < shift.end_time:
        return ShiftStatus.ACTIVE
    return ShiftStatus.COMPLETED


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap; back-to-back shifts do not overlap."""
    return a_start < b_end and b_start < a_end
