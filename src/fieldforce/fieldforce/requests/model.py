from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..core.enums import RequestKind, RequestStatus


@dataclass(frozen=True)
class TimeOffPayload:
    start_date: date
    end_date: date


@dataclass(frozen=True)
class ShiftSwapPayload:
    """Either a true swap (``target_shift_id`` set) or coverage (``coverage_only``)."""

    original_shift_id: int
    target_employee_id: Optional[int]
    target_shift_id: Optional[int] = None
    coverage_only: bool = False


RequestPayload = Union[TimeOffPayload, ShiftSwapPayload]


@dataclass(frozen=True)
class ApprovalRequest:
    request_id: int
    kind: RequestKind
    requester_id: int
    reason: str
    status: RequestStatus
    created_at: datetime
    payload: RequestPayload
    approver_id: Optional[int] = None
    resolved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def counterparty_id(self) -> Optional[int]:
        if isinstance(self.payload, ShiftSwapPayload):
            return self.payload.target_employee_id
        return None
