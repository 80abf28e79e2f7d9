from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import RequestKind, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ApprovalRequest, ShiftSwapPayload, TimeOffPayload
from .repository import RequestRepository

_COLUMNS = (
    "request_id, kind, requester_id, reason, status, approver_id, resolved_at, rejection_reason, "
    "start_date, end_date, original_shift_id, target_shift_id, target_employee_id, coverage_only, created_at"
)


def _to_request(r: dict) -> ApprovalRequest:
    kind = RequestKind(r["kind"])
    if kind == RequestKind.TIME_OFF:
        payload = TimeOffPayload(start_date=r["start_date"], end_date=r["end_date"])
    else:
        payload = ShiftSwapPayload(
            original_shift_id=int(r["original_shift_id"]),
            target_shift_id=r.get("target_shift_id"),
            target_employee_id=r.get("target_employee_id"),
            coverage_only=bool(r.get("coverage_only")),
        )
    return ApprovalRequest(
        request_id=int(r["request_id"]),
        kind=kind,
        requester_id=int(r["requester_id"]),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        payload=payload,
        approver_id=r.get("approver_id"),
        resolved_at=r.get("resolved_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_time_off(
        self,
        *,
        requester_id: int,
        start_date: date,
        end_date: date,
        reason: str,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO approval_requests(kind, requester_id, reason, status, start_date, end_date, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    RequestKind.TIME_OFF.value,
                    int(requester_id),
                    reason,
                    RequestStatus.PENDING.value,
                    start_date,
                    end_date,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO approval_requests(
                    kind, requester_id, reason, status,
                    original_shift_id, target_shift_id, target_employee_id, coverage_only, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    RequestKind.SHIFT_SWAP.value,
                    int(requester_id),
                    reason,
                    RequestStatus.PENDING.value,
                    int(original_shift_id),
                    target_shift_id,
                    target_employee_id,
                    1 if coverage_only else 0,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[ApprovalRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM approval_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def has_pending_swap(self, original_shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 FROM approval_requests
                WHERE kind=%s AND status=%s AND original_shift_id=%s
                LIMIT 1
                """,
                (RequestKind.SHIFT_SWAP.value, RequestStatus.PENDING.value, int(original_shift_id)),
            )
            return fetchone(cur) is not None

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approver_id: int,
        resolved_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE approval_requests
                SET status=%s, approver_id=%s, resolved_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(approver_id),
                    resolved_at,
                    rejection_reason,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        kind: Optional[RequestKind] = None,
        status: Optional[RequestStatus] = None,
        requester_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ApprovalRequest]:
        clauses = ["1=1"]
        params: list[object] = []
        if kind is not None:
            clauses.append("kind=%s")
            params.append(kind.value)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if requester_id is not None:
            clauses.append("requester_id=%s")
            params.append(int(requester_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM approval_requests
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]
