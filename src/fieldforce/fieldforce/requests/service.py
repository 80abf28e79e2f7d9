from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..announcements.service import AnnouncementService
from ..common.datetime_utils import Clock, now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import (
    Action,
    Decision,
    NotificationPriority,
    NotificationType,
    RequestKind,
    RequestStatus,
    Role,
    ShiftStatus,
)
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PolicyError,
    ValidationError,
)
from ..core.permissions import can, require
from ..database.unit_of_work import UnitOfWork
from ..notifications.service import NotificationService
from ..shifts.model import Shift, derive_shift_status
from ..shifts.repository import ShiftRepository
from ..users.repository import UserRepository
from .model import ApprovalRequest, ShiftSwapPayload
from .repository import RequestRepository

logger = logging.getLogger(__name__)

_NOTIFICATION_TYPE = {
    RequestKind.TIME_OFF: NotificationType.TIME_OFF,
    RequestKind.SHIFT_SWAP: NotificationType.SHIFT_SWAP,
}
_KIND_LABEL = {
    RequestKind.TIME_OFF: "Time-off request",
    RequestKind.SHIFT_SWAP: "Shift swap request",
}


class RequestService:
    """Approval workflow: pending -> approved | rejected, exactly once."""

    def __init__(
        self,
        requests: RequestRepository,
        shifts: ShiftRepository,
        users: UserRepository,
        announcements: AnnouncementService,
        notifications: NotificationService,
        uow: UnitOfWork,
        *,
        clock: Clock = now_local,
    ):
        self._requests = requests
        self._shifts = shifts
        self._users = users
        self._announcements = announcements
        self._notifications = notifications
        self._uow = uow
        self._clock = clock

    # -------- Submission --------
    def submit_time_off(
        self,
        *,
        current_role: Role,
        requester_id: int,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> ApprovalRequest:
        require(current_role, Action.SUBMIT_REQUEST)
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        reason = require_non_empty(reason, "Reason")

        period = self._announcements.find_restriction(start_date, end_date)
        if period:
            logger.warning(
                "Time off %s..%s for user %s blocked by restricted period %s",
                start_date,
                end_date,
                requester_id,
                period.announcement_id,
            )
            raise PolicyError(
                f"Time off is not allowed during '{period.title}' "
                f"({period.start_date.isoformat()} to {period.end_date.isoformat()})"
            )

        request_id = self._requests.create_time_off(
            requester_id=int(requester_id),
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            created_at=self._clock(),
        )
        logger.info("Time-off request %s submitted by user %s", request_id, requester_id)
        return self._get(request_id)

    def submit_shift_swap(
        self,
        *,
        current_role: Role,
        requester_id: int,
        original_shift_id: int,
        reason: str,
        coverage_only: bool = False,
        target_shift_id: Optional[int] = None,
        target_employee_id: Optional[int] = None,
    ) -> ApprovalRequest:
        require(current_role, Action.SUBMIT_REQUEST)
        reason = require_non_empty(reason, "Reason")
        requester_id = int(requester_id)

        original = self._own_upcoming_shift(requester_id, original_shift_id)
        if coverage_only:
            if target_shift_id is not None:
                raise ValidationError("A coverage request cannot name a target shift")
            if target_employee_id is None:
                raise ValidationError("A coverage request needs the employee who will cover")
            counterparty = self._active_colleague(requester_id, target_employee_id)
            self._ensure_free(counterparty, original, exclude=())
        else:
            if target_shift_id is None:
                raise ValidationError("A swap request needs the shift to swap with")
            target = self._swappable_target(requester_id, target_shift_id)
            if target_employee_id is not None and int(target_employee_id) != target.employee_id:
                raise ValidationError("Target shift does not belong to the chosen employee")
            counterparty = self._active_colleague(requester_id, target.employee_id)
            self._ensure_free(requester_id, target, exclude=(original.shift_id,))
            self._ensure_free(counterparty, original, exclude=(target.shift_id,))

        with self._uow.transaction():
            if self._requests.has_pending_swap(original.shift_id):
                raise ConflictError("A swap request for this shift is already pending")
            request_id = self._requests.create_shift_swap(
                requester_id=requester_id,
                original_shift_id=original.shift_id,
                target_shift_id=None if coverage_only else int(target_shift_id),
                target_employee_id=counterparty,
                coverage_only=bool(coverage_only),
                reason=reason,
                created_at=self._clock(),
            )
            self._notifications.notify(
                user_id=counterparty,
                title="Shift coverage requested" if coverage_only else "Shift swap requested",
                body=f"A colleague asked you to {'cover' if coverage_only else 'swap'} "
                f"'{original.title}' on {original.start_time:%Y-%m-%d %H:%M}",
                type=NotificationType.SHIFT_SWAP,
                related_id=request_id,
            )

        logger.info(
            "Shift swap request %s submitted by user %s (shift %s, coverage=%s)",
            request_id,
            requester_id,
            original.shift_id,
            bool(coverage_only),
        )
        return self._get(request_id)

    # -------- Resolution --------
    def resolve(
        self,
        *,
        current_role: Role,
        approver_id: int,
        request_id: int,
        decision: Decision,
        rejection_reason: Optional[str] = None,
    ) -> ApprovalRequest:
        require(current_role, Action.RESOLVE_REQUEST)
        decision = Decision(decision)
        req = self._get(request_id)
        if not req.is_pending:
            raise InvalidStateError(f"Request is already {req.status.value}")

        rejection_reason = optional_text(rejection_reason, "Rejection reason")
        if decision == Decision.REJECT and not rejection_reason:
            raise ValidationError("A rejection reason is required")
        status = RequestStatus.APPROVED if decision == Decision.APPROVE else RequestStatus.REJECTED

        with self._uow.transaction():
            decided = self._requests.decide(
                request_id=req.request_id,
                status=status,
                approver_id=int(approver_id),
                resolved_at=self._clock(),
                rejection_reason=rejection_reason if status == RequestStatus.REJECTED else None,
            )
            if not decided:
                raise InvalidStateError("Request was already resolved")

            if status == RequestStatus.APPROVED and isinstance(req.payload, ShiftSwapPayload):
                self._apply_swap(req)

            self._notify_resolution(req, status, rejection_reason)

        logger.info("Request %s %s by user %s", req.request_id, status.value, approver_id)
        return self._get(req.request_id)

    # -------- Queries --------
    def get_request(self, *, current_role: Role, user_id: int, request_id: int) -> ApprovalRequest:
        req = self._get(request_id)
        involved = int(user_id) in (req.requester_id, req.counterparty_id())
        if not involved and not can(current_role, Action.RESOLVE_REQUEST):
            raise AuthorizationError("You cannot view this request")
        return req

    def list_my_requests(self, *, requester_id: int, kind: Optional[RequestKind] = None) -> list[ApprovalRequest]:
        return list(self._requests.list_requests(kind=kind, requester_id=int(requester_id)))

    def list_pending(self, *, current_role: Role, kind: Optional[RequestKind] = None) -> list[ApprovalRequest]:
        require(current_role, Action.RESOLVE_REQUEST)
        return list(self._requests.list_requests(kind=kind, status=RequestStatus.PENDING))

    def list_requests(
        self,
        *,
        current_role: Role,
        kind: Optional[RequestKind] = None,
        status: Optional[RequestStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[ApprovalRequest]:
        require(current_role, Action.RESOLVE_REQUEST)
        return list(self._requests.list_requests(kind=kind, status=status, limit=limit))

    # -------- Helpers --------
    def _get(self, request_id: int) -> ApprovalRequest:
        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        return req

    def _shift(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def _is_upcoming(self, shift: Shift) -> bool:
        return derive_shift_status(shift, self._clock()) == ShiftStatus.SCHEDULED

    def _own_upcoming_shift(self, requester_id: int, shift_id: int) -> Shift:
        shift = self._shift(shift_id)
        if shift.employee_id != requester_id:
            raise ValidationError("You can only swap your own shifts")
        if not self._is_upcoming(shift):
            raise InvalidStateError("Only upcoming shifts can be swapped")
        return shift

    def _swappable_target(self, requester_id: int, shift_id: int) -> Shift:
        target = self._shift(shift_id)
        if target.employee_id == requester_id:
            raise ValidationError("Target shift must belong to another employee")
        if not self._is_upcoming(target):
            raise InvalidStateError("Target shift is not an upcoming scheduled shift")
        return target

    def _active_colleague(self, requester_id: int, employee_id: int) -> int:
        employee = self._users.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise ValidationError("Target employee does not exist or is inactive")
        if employee.user_id == requester_id:
            raise ValidationError("Target employee must be someone else")
        return employee.user_id

    def _ensure_free(self, employee_id: int, shift: Shift, *, exclude) -> None:
        clash = self._shifts.find_overlapping(
            employee_id=employee_id,
            start_time=shift.start_time,
            end_time=shift.end_time,
            exclude_ids=exclude,
        )
        if clash:
            raise PolicyError(
                f"Employee {employee_id} already works '{clash[0].title}' during '{shift.title}'"
            )

    def _apply_swap(self, req: ApprovalRequest) -> None:
        """Re-validate and reassign shifts; runs inside the resolving transaction."""
        payload = req.payload
        original = self._own_upcoming_shift(req.requester_id, payload.original_shift_id)
        counterparty = self._active_colleague(req.requester_id, payload.target_employee_id)

        if payload.coverage_only:
            self._ensure_free(counterparty, original, exclude=())
            moves = [(original, req.requester_id, counterparty)]
        else:
            target = self._swappable_target(req.requester_id, payload.target_shift_id)
            if target.employee_id != counterparty:
                raise InvalidStateError("Target shift changed hands since the request was made")
            self._ensure_free(req.requester_id, target, exclude=(original.shift_id,))
            self._ensure_free(counterparty, original, exclude=(target.shift_id,))
            moves = [(original, req.requester_id, counterparty), (target, counterparty, req.requester_id)]

        for shift, from_id, to_id in moves:
            if not self._shifts.reassign(shift.shift_id, from_employee_id=from_id, to_employee_id=to_id):
                raise InvalidStateError(f"Shift {shift.shift_id} could not be reassigned")
        logger.info("Request %s reassigned shifts %s", req.request_id, [m[0].shift_id for m in moves])

    def _notify_resolution(self, req: ApprovalRequest, status: RequestStatus, rejection_reason: Optional[str]) -> None:
        label = _KIND_LABEL[req.kind]
        body = f"{label} #{req.request_id} was {status.value}"
        if status == RequestStatus.REJECTED:
            body += f": {rejection_reason}"
        self._notifications.notify(
            user_id=req.requester_id,
            title=f"{label} {status.value}",
            body=body,
            type=_NOTIFICATION_TYPE[req.kind],
            related_id=req.request_id,
            priority=NotificationPriority.HIGH,
        )
        counterparty = req.counterparty_id()
        if status == RequestStatus.APPROVED and counterparty is not None:
            self._notifications.notify(
                user_id=counterparty,
                title=f"{label} approved",
                body=f"Your shifts changed: request #{req.request_id} was approved",
                type=_NOTIFICATION_TYPE[req.kind],
                related_id=req.request_id,
                priority=NotificationPriority.HIGH,
            )
