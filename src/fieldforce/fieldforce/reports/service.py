from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import day_bounds, year_bounds
from ..core.constants import HOURS_PRECISION
from ..core.enums import Action, Role, SessionStatus
from ..core.exceptions import ValidationError
from ..core.permissions import require
from ..worksessions.repository import WorkSessionRepository
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator
from .model import AttendanceReport, BillingReport, BillingRow, SiteVisitRow

logger = logging.getLogger(__name__)


def _round(value: float) -> float:
    return round(value, HOURS_PRECISION)


class ReportService:
    """Read-only rollups over work-session history."""

    def __init__(self, sessions: WorkSessionRepository, *, calculator: Optional[HoursCalculator] = None):
        self._sessions = sessions
        self._calculator = calculator or StandardHoursCalculator()

    def attendance_report(self, *, current_role: Role, user_id: int, employee_id: int, year: int) -> AttendanceReport:
        if int(employee_id) != int(user_id):
            require(current_role, Action.VIEW_REPORTS, "You can only view your own attendance report")
        if not 1 <= int(year) < 9999:
            raise ValidationError("year is out of range")

        start, end = year_bounds(int(year))
        rows = self._sessions.get_report_rows(start=start, end=end, employee_id=int(employee_id))

        by_month = {month: 0.0 for month in range(1, 13)}
        sites: set[int] = set()
        total = 0.0
        active = 0
        for r in rows:
            if r.status == SessionStatus.CHECKED_IN or r.check_out_time is None:
                active += 1
                continue
            hours = self._calculator.hours(r)
            by_month[r.check_in_time.month] += hours
            total += hours
            sites.add(r.site_id)

        return AttendanceReport(
            employee_id=int(employee_id),
            year=int(year),
            total_hours=_round(total),
            hours_by_month={m: _round(h) for m, h in by_month.items()},
            sites_visited=len(sites),
            session_count=len(rows),
            active_count=active,
        )

    def client_visit_report(self, *, current_role: Role, site_id: Optional[int] = None) -> list[SiteVisitRow]:
        require(current_role, Action.VIEW_REPORTS)
        rows = self._sessions.get_report_rows(site_id=site_id)

        grouped: dict[int, dict] = {}
        for r in rows:
            g = grouped.get(r.site_id)
            if not g:
                g = {"site_name": r.site_name, "visits": 0, "hours": 0.0, "last": None}
                grouped[r.site_id] = g
            g["visits"] += 1
            g["hours"] += self._calculator.hours(r)
            if g["last"] is None or r.check_in_time > g["last"]:
                g["last"] = r.check_in_time

        report = [
            SiteVisitRow(
                site_id=sid,
                site_name=g["site_name"],
                visit_count=g["visits"],
                total_hours=_round(g["hours"]),
                last_visit=g["last"],
            )
            for sid, g in grouped.items()
        ]
        report.sort(key=lambda x: (-x.visit_count, x.site_name))
        return report

    def billing_report(self, *, current_role: Role, start_date: date, end_date: date) -> BillingReport:
        require(current_role, Action.VIEW_REPORTS)
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date")

        start, end = day_bounds(start_date, end_date)
        rows = self._sessions.get_report_rows(start=start, end=end)

        grouped: dict[tuple[int, int], dict] = {}
        by_employee: dict[int, float] = {}
        by_site: dict[int, float] = {}
        total = 0.0
        for r in rows:
            hours = self._calculator.hours(r)
            key = (r.employee_id, r.site_id)
            g = grouped.get(key)
            if not g:
                g = {"employee_name": r.employee_name, "site_name": r.site_name, "count": 0, "hours": 0.0}
                grouped[key] = g
            g["count"] += 1
            g["hours"] += hours
            by_employee[r.employee_id] = by_employee.get(r.employee_id, 0.0) + hours
            by_site[r.site_id] = by_site.get(r.site_id, 0.0) + hours
            total += hours

        billing_rows = [
            BillingRow(
                employee_id=emp_id,
                employee_name=g["employee_name"],
                site_id=site_id,
                site_name=g["site_name"],
                session_count=g["count"],
                hours=_round(g["hours"]),
            )
            for (emp_id, site_id), g in grouped.items()
        ]
        billing_rows.sort(key=lambda x: (x.employee_name, x.site_name))

        logger.debug("Billing report %s..%s: %d rows", start_date, end_date, len(billing_rows))
        return BillingReport(
            start_date=start_date,
            end_date=end_date,
            rows=billing_rows,
            hours_by_employee={k: _round(v) for k, v in by_employee.items()},
            hours_by_site={k: _round(v) for k, v in by_site.items()},
            total_hours=_round(total),
        )
