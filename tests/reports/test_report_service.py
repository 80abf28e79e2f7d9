from __future__ import annotations

from datetime import date, datetime

import pytest

from src.fieldforce.fieldforce.core.enums import Role, SessionStatus
from src.fieldforce.fieldforce.core.exceptions import AuthorizationError, ValidationError
from src.fieldforce.fieldforce.reports.calculator.standard_calculator import StandardHoursCalculator
from src.fieldforce.fieldforce.reports.service import ReportService
from src.fieldforce.fieldforce.sites.model import Site
from src.fieldforce.fieldforce.worksessions.model import SessionReportRow, WorkSession
from tests.fakes import FakeSiteRepo, FakeUserRepo, FakeWorkSessionRepo, employee

ALICE = 10
BOB = 11


def _session(session_id, employee_id, site_id, check_in, check_out=None):
    return WorkSession(
        session_id=session_id,
        employee_id=employee_id,
        site_id=site_id,
        check_in_time=check_in,
        check_out_time=check_out,
        status=SessionStatus.CHECKED_OUT if check_out else SessionStatus.CHECKED_IN,
    )


@pytest.fixture
def service():
    users = FakeUserRepo(employee(ALICE, "Alice"), employee(BOB, "Bob"))
    sites = FakeSiteRepo(Site(site_id=1, name="Acme"), Site(site_id=2, name="Globex"), Site(site_id=3, name="Initech"))
    sessions = FakeWorkSessionRepo(users, sites)
    sessions.add(_session(1, ALICE, 1, datetime(2024, 1, 10, 9), datetime(2024, 1, 10, 17)))
    sessions.add(_session(2, ALICE, 2, datetime(2024, 2, 3, 10), datetime(2024, 2, 3, 12, 30)))
    sessions.add(_session(3, ALICE, 1, datetime(2023, 12, 31, 20), datetime(2023, 12, 31, 23)))
    sessions.add(_session(4, ALICE, 3, datetime(2024, 6, 1, 9)))
    sessions.add(_session(5, BOB, 1, datetime(2024, 1, 10, 8), datetime(2024, 1, 10, 12)))
    sessions.add(_session(6, BOB, 2, datetime(2024, 1, 31, 23), datetime(2024, 2, 1, 1)))
    return ReportService(sessions)


def test_standard_calculator_ignores_open_sessions():
    calc = StandardHoursCalculator()
    row = SessionReportRow(
        session_id=1,
        employee_id=1,
        employee_name="A",
        site_id=1,
        site_name="S",
        check_in_time=datetime(2024, 1, 1, 9),
        check_out_time=None,
        status=SessionStatus.CHECKED_IN,
    )
    assert calc.hours(row) == 0.0


def test_attendance_report_sums_checked_out_sessions_in_year(service):
    report = service.attendance_report(current_role=Role.EMPLOYEE, user_id=ALICE, employee_id=ALICE, year=2024)
    assert report.total_hours == 10.5
    assert report.hours_by_month[1] == 8.0
    assert report.hours_by_month[2] == 2.5
    assert report.hours_by_month[12] == 0.0
    assert sorted(report.hours_by_month) == list(range(1, 13))
    assert report.sites_visited == 2
    assert report.session_count == 3
    assert report.active_count == 1


def test_employee_sees_only_own_attendance(service):
    with pytest.raises(AuthorizationError):
        service.attendance_report(current_role=Role.EMPLOYEE, user_id=BOB, employee_id=ALICE, year=2024)
    report = service.attendance_report(current_role=Role.MANAGER, user_id=1, employee_id=BOB, year=2024)
    assert report.total_hours == 6.0


def test_client_visit_report_orders_by_visits(service):
    rows = service.client_visit_report(current_role=Role.MANAGER)
    assert [r.site_id for r in rows] == [1, 2, 3]
    acme = rows[0]
    assert acme.visit_count == 3
    assert acme.total_hours == 15.0
    assert acme.last_visit == datetime(2024, 1, 10, 9)
    assert rows[2].total_hours == 0.0

    only_globex = service.client_visit_report(current_role=Role.ADMIN, site_id=2)
    assert [r.site_name for r in only_globex] == ["Globex"]


def test_billing_report_is_inclusive_of_end_date(service):
    report = service.billing_report(current_role=Role.MANAGER, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))
    assert [(r.employee_name, r.site_name, r.hours) for r in report.rows] == [
        ("Alice", "Acme", 8.0),
        ("Bob", "Acme", 4.0),
        ("Bob", "Globex", 2.0),
    ]
    assert report.hours_by_employee == {ALICE: 8.0, BOB: 6.0}
    assert report.hours_by_site == {1: 12.0, 2: 2.0}
    assert report.total_hours == 14.0


def test_billing_report_guards(service):
    with pytest.raises(AuthorizationError):
        service.billing_report(current_role=Role.EMPLOYEE, start_date=date(2024, 1, 1), end_date=date(2024, 1, 2))
    with pytest.raises(ValidationError):
        service.billing_report(current_role=Role.MANAGER, start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))
