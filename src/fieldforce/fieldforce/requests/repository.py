from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestKind, RequestStatus
from .model import ApprovalRequest


class RequestRepository(Protocol):
    def create_time_off(
        self,
        *,
        requester_id: int,
        start_date: date,
        end_date: date,
        reason: str,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def create_shift_swap(
        self,
        *,
        requester_id: int,
        original_shift_id: int,
        target_shift_id: Optional[int],
        target_employee_id: Optional[int],
        coverage_only: bool,
        reason: str,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[ApprovalRequest]:
        raise NotImplementedError

    def has_pending_swap(self, original_shift_id: int) -> bool:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approver_id: int,
        resolved_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Move a pending request to ``status``.

        Compare-and-set: returns False when the request was no longer pending.
        """

        raise NotImplementedError

    def list_requests(
        self,
        *,
        kind: Optional[RequestKind] = None,
        status: Optional[RequestStatus] = None,
        requester_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ApprovalRequest]:
        raise NotImplementedError
