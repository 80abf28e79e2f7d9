from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import ScheduleStatus
from .model import Schedule


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        site_id: int,
        title: str,
        description: Optional[str],
        start_date: date,
        end_date: date,
        start_time: time,
        end_time: time,
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def set_status(self, schedule_id: int, status: ScheduleStatus) -> bool:
        raise NotImplementedError

    def list_range(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        include_cancelled: bool = False,
    ) -> Sequence[Schedule]:
        """Schedules whose date range intersects [start, end] (inclusive)."""

        raise NotImplementedError
