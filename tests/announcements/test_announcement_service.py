from __future__ import annotations

from datetime import date

import pytest

from src.fieldforce.fieldforce.announcements.service import AnnouncementService
from src.fieldforce.fieldforce.core.enums import AnnouncementType, Role, TargetRole
from src.fieldforce.fieldforce.core.exceptions import AuthorizationError, ValidationError
from tests.fakes import FakeAnnouncementRepo


@pytest.fixture
def service(clock):
    return AnnouncementService(FakeAnnouncementRepo(), clock=clock)


def _create(service, **kwargs):
    defaults = dict(current_role=Role.MANAGER, created_by=1, title="Notice", content="Body")
    defaults.update(kwargs)
    return service.create_announcement(**defaults)


def test_restriction_needs_ordered_dates(service):
    with pytest.raises(ValidationError):
        _create(service, type=AnnouncementType.RESTRICTION, restricted_start_date=date(2024, 12, 24))
    with pytest.raises(ValidationError):
        _create(
            service,
            type=AnnouncementType.RESTRICTION,
            restricted_start_date=date(2024, 12, 26),
            restricted_end_date=date(2024, 12, 24),
        )
    with pytest.raises(ValidationError):
        _create(service, restricted_start_date=date(2024, 12, 24), restricted_end_date=date(2024, 12, 26))


def test_restricted_periods_and_lookup(service):
    _create(service, title="General news")
    _create(
        service,
        title="Stocktake",
        type=AnnouncementType.RESTRICTION,
        restricted_start_date=date(2024, 12, 24),
        restricted_end_date=date(2024, 12, 26),
    )
    [period] = service.restricted_periods()
    assert period.title == "Stocktake"
    assert service.find_restriction(date(2024, 12, 25), date(2024, 12, 25)) == period
    assert service.find_restriction(date(2024, 12, 20), date(2024, 12, 23)) is None


def test_target_role_filtering(service):
    _create(service, title="All hands")
    _create(service, title="Managers only", target_role=TargetRole.MANAGER)
    assert [a.title for a in service.list_active(role=Role.EMPLOYEE)] == ["All hands"]
    assert [a.title for a in service.list_active(role=Role.MANAGER)] == ["All hands", "Managers only"]


def test_employees_cannot_announce(service):
    with pytest.raises(AuthorizationError):
        _create(service, current_role=Role.EMPLOYEE)
