from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import ScheduleStatus


@dataclass(frozen=True)
class Schedule:
    """A recurring daily assignment of an employee to a site over a date range."""

    schedule_id: int
    employee_id: int
    site_id: int
    title: str
    start_date: date
    end_date: date
    start_time: time
    end_time: time
    created_by: int
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    description: Optional[str] = None

    def covers(self, day: date) -> bool:
        return self.status == ScheduleStatus.SCHEDULED and self.start_date <= day <= self.end_date
