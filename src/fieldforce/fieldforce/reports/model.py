from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceReport:
    employee_id: int
    year: int
    total_hours: float
    hours_by_month: dict[int, float]
    sites_visited: int
    session_count: int
    active_count: int


@dataclass(frozen=True)
class SiteVisitRow:
    site_id: int
    site_name: str
    visit_count: int
    total_hours: float
    last_visit: Optional[datetime]


@dataclass(frozen=True)
class BillingRow:
    employee_id: int
    employee_name: str
    site_id: int
    site_name: str
    session_count: int
    hours: float


@dataclass(frozen=True)
class BillingReport:
    start_date: date
    end_date: date
    rows: list[BillingRow]
    hours_by_employee: dict[int, float] = field(default_factory=dict)
    hours_by_site: dict[int, float] = field(default_factory=dict)
    total_hours: float = 0.0
