from __future__ import annotations

from .base import HoursCalculator
from ...common.datetime_utils import hours_between
from ...worksessions.model import SessionReportRow


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: out - in, not below 0; open sessions count 0."""

    def hours(self, row: SessionReportRow) -> float:
        if not row.check_out_time:
            return 0.0
        return hours_between(row.check_in_time, row.check_out_time)
