from __future__ import annotations

from datetime import date, datetime

import pytest

from src.fieldforce.fieldforce.announcements.service import AnnouncementService
from src.fieldforce.fieldforce.core.enums import AnnouncementType, Decision, RequestStatus, Role
from src.fieldforce.fieldforce.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    PolicyError,
    ValidationError,
)
from src.fieldforce.fieldforce.notifications.service import NotificationService
from src.fieldforce.fieldforce.requests.service import RequestService
from src.fieldforce.fieldforce.shifts.model import Shift
from tests.fakes import (
    FakeAnnouncementRepo,
    FakeNotificationRepo,
    FakeRequestRepo,
    FakeShiftRepo,
    FakeUnitOfWork,
    FakeUserRepo,
    employee,
)

MANAGER = 1
ALICE = 10
BOB = 11
CAROL = 12


class Env:
    def __init__(self, clock):
        self.users = FakeUserRepo(
            employee(MANAGER, "Maria", Role.MANAGER),
            employee(ALICE, "Alice"),
            employee(BOB, "Bob"),
            employee(CAROL, "Carol"),
        )
        self.shifts = FakeShiftRepo()
        self.requests = FakeRequestRepo()
        self.notification_repo = FakeNotificationRepo()
        self.announcements = AnnouncementService(FakeAnnouncementRepo(), clock=clock)
        self.uow = FakeUnitOfWork(self.requests, self.shifts, self.notification_repo)
        self.service = RequestService(
            self.requests,
            self.shifts,
            self.users,
            self.announcements,
            NotificationService(self.notification_repo, clock=clock),
            self.uow,
            clock=clock,
        )

    def shift(self, shift_id, employee_id, day, start_hour=9, end_hour=17):
        return self.shifts.add(
            Shift(
                shift_id=shift_id,
                employee_id=employee_id,
                title=f"Shift {shift_id}",
                start_time=datetime(2024, 12, day, start_hour),
                end_time=datetime(2024, 12, day, end_hour),
            )
        )

    def holiday_freeze(self):
        return self.announcements.create_announcement(
            current_role=Role.MANAGER,
            created_by=MANAGER,
            title="Holiday freeze",
            content="No time off over the holidays",
            type=AnnouncementType.RESTRICTION,
            restricted_start_date=date(2024, 12, 24),
            restricted_end_date=date(2024, 12, 26),
        )

    def time_off(self, start, end, requester=ALICE):
        return self.service.submit_time_off(
            current_role=Role.EMPLOYEE,
            requester_id=requester,
            start_date=start,
            end_date=end,
            reason="Family visit",
        )

    def resolve(self, request_id, decision=Decision.APPROVE, reason=None):
        return self.service.resolve(
            current_role=Role.MANAGER,
            approver_id=MANAGER,
            request_id=request_id,
            decision=decision,
            rejection_reason=reason,
        )


@pytest.fixture
def env(clock):
    return Env(clock)


# -------- Time off --------
def test_time_off_inside_restricted_period_is_rejected(env):
    env.holiday_freeze()
    with pytest.raises(PolicyError, match="Holiday freeze"):
        env.time_off(date(2024, 12, 25), date(2024, 12, 25))
    with pytest.raises(PolicyError):
        env.time_off(date(2024, 12, 26), date(2024, 12, 30))
    assert env.requests.items == {}


def test_time_off_around_restricted_period_is_accepted(env):
    env.holiday_freeze()
    req = env.time_off(date(2024, 12, 20), date(2024, 12, 23))
    assert req.status == RequestStatus.PENDING
    assert req.payload.start_date == date(2024, 12, 20)


def test_deactivated_restriction_no_longer_blocks(env):
    freeze = env.holiday_freeze()
    env.announcements.deactivate_announcement(current_role=Role.ADMIN, announcement_id=freeze.announcement_id)
    env.time_off(date(2024, 12, 25), date(2024, 12, 25))


def test_time_off_dates_must_be_ordered(env):
    with pytest.raises(ValidationError):
        env.time_off(date(2024, 12, 5), date(2024, 12, 4))


# -------- Resolution --------
def test_resolve_is_exactly_once(env):
    req = env.time_off(date(2024, 12, 2), date(2024, 12, 3))
    approved = env.resolve(req.request_id)
    assert approved.status == RequestStatus.APPROVED
    assert approved.approver_id == MANAGER
    assert len(env.notification_repo.for_user(ALICE)) == 1

    with pytest.raises(InvalidStateError):
        env.resolve(req.request_id, Decision.REJECT, "changed my mind")
    assert env.requests.get_by_id(req.request_id).status == RequestStatus.APPROVED
    assert len(env.notification_repo.for_user(ALICE)) == 1


def test_reject_needs_reason_and_is_recorded(env):
    req = env.time_off(date(2024, 12, 2), date(2024, 12, 3))
    with pytest.raises(ValidationError):
        env.resolve(req.request_id, Decision.REJECT, "  ")
    rejected = env.resolve(req.request_id, Decision.REJECT, "Short staffed")
    assert rejected.rejection_reason == "Short staffed"
    assert "Short staffed" in env.notification_repo.for_user(ALICE)[0].body


def test_employee_cannot_resolve(env):
    req = env.time_off(date(2024, 12, 2), date(2024, 12, 3))
    with pytest.raises(AuthorizationError):
        env.service.resolve(current_role=Role.EMPLOYEE, approver_id=BOB, request_id=req.request_id, decision="approve")


def test_request_visibility(env):
    req = env.time_off(date(2024, 12, 2), date(2024, 12, 3))
    assert env.service.get_request(current_role=Role.EMPLOYEE, user_id=ALICE, request_id=req.request_id) == req
    with pytest.raises(AuthorizationError):
        env.service.get_request(current_role=Role.EMPLOYEE, user_id=BOB, request_id=req.request_id)
    assert [r.request_id for r in env.service.list_pending(current_role=Role.MANAGER)] == [req.request_id]


# -------- Shift swaps --------
def _swap(env, original=1, target=2):
    return env.service.submit_shift_swap(
        current_role=Role.EMPLOYEE,
        requester_id=ALICE,
        original_shift_id=original,
        target_shift_id=target,
        reason="Doctor appointment",
    )


def test_true_swap_exchanges_both_shifts(env):
    env.shift(1, ALICE, 15)
    env.shift(2, BOB, 16)
    req = _swap(env)
    assert req.counterparty_id() == BOB
    assert len(env.notification_repo.for_user(BOB)) == 1

    env.resolve(req.request_id)
    assert env.shifts.get_by_id(1).employee_id == BOB
    assert env.shifts.get_by_id(2).employee_id == ALICE
    assert len(env.notification_repo.for_user(ALICE)) == 1
    assert len(env.notification_repo.for_user(BOB)) == 2


def test_swap_failure_midway_changes_nothing(env):
    env.shift(1, ALICE, 15)
    env.shift(2, BOB, 16)
    req = _swap(env)
    notified_before = len(env.notification_repo.items)
    env.shifts.fail_reassign_of.add(2)

    with pytest.raises(RuntimeError):
        env.resolve(req.request_id)

    assert env.shifts.get_by_id(1).employee_id == ALICE
    assert env.shifts.get_by_id(2).employee_id == BOB
    assert env.requests.get_by_id(req.request_id).status == RequestStatus.PENDING
    assert len(env.notification_repo.items) == notified_before
    assert env.uow.rollbacks == 1


def test_coverage_moves_only_the_original_shift(env):
    env.shift(1, ALICE, 15)
    req = env.service.submit_shift_swap(
        current_role=Role.EMPLOYEE,
        requester_id=ALICE,
        original_shift_id=1,
        coverage_only=True,
        target_employee_id=CAROL,
        reason="Sick",
    )
    env.resolve(req.request_id)
    assert env.shifts.get_by_id(1).employee_id == CAROL


def test_swap_rejected_when_counterparty_is_busy(env):
    env.shift(1, ALICE, 15)
    env.shift(2, BOB, 16)
    env.shift(3, BOB, 15, start_hour=12, end_hour=20)
    with pytest.raises(PolicyError):
        _swap(env)


def test_only_one_pending_swap_per_shift(env):
    env.shift(1, ALICE, 15)
    env.shift(2, BOB, 16)
    _swap(env)
    with pytest.raises(ConflictError):
        _swap(env)


def test_cannot_swap_someone_elses_or_past_shift(env):
    env.shift(1, ALICE, 15)
    env.shift(2, BOB, 16)
    with pytest.raises(ValidationError):
        _swap(env, original=2, target=1)
    env.shift(4, ALICE, 5)
    with pytest.raises(InvalidStateError):
        _swap(env, original=4, target=2)
