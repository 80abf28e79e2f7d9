from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import Recurrence, ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Shift
from .repository import ShiftRepository

_COLUMNS = "shift_id, employee_id, site_id, title, start_time, end_time, recurrence, status, overtime_hours, notes"


def _to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        employee_id=int(r["employee_id"]),
        site_id=r.get("site_id"),
        title=r["title"],
        start_time=r["start_time"],
        end_time=r["end_time"],
        recurrence=Recurrence(r.get("recurrence") or Recurrence.NONE.value),
        status=ShiftStatus(r["status"]),
        overtime_hours=float(r.get("overtime_hours") or 0),
        notes=r.get("notes"),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        title: str,
        start_time: datetime,
        end_time: datetime,
        site_id: Optional[int],
        recurrence: Recurrence,
        notes: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(employee_id, site_id, title, start_time, end_time, recurrence, status, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    site_id,
                    title,
                    start_time,
                    end_time,
                    recurrence.value,
                    ShiftStatus.SCHEDULED.value,
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def set_status(self, shift_id: int, status: ShiftStatus, *, overtime_hours: Optional[float] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if overtime_hours is None:
                cur.execute("UPDATE shifts SET status=%s WHERE shift_id=%s", (status.value, int(shift_id)))
            else:
                cur.execute(
                    "UPDATE shifts SET status=%s, overtime_hours=%s WHERE shift_id=%s",
                    (status.value, float(overtime_hours), int(shift_id)),
                )
            return cur.rowcount > 0

    def reassign(self, shift_id: int, *, from_employee_id: int, to_employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shifts SET employee_id=%s WHERE shift_id=%s AND employee_id=%s AND status=%s",
                (int(to_employee_id), int(shift_id), int(from_employee_id), ShiftStatus.SCHEDULED.value),
            )
            return cur.rowcount > 0

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_ids: Iterable[int] = (),
    ) -> Sequence[Shift]:
        excluded = [int(i) for i in exclude_ids]
        sql = f"""
            SELECT {_COLUMNS}
            FROM shifts
            WHERE employee_id=%s AND status<>%s AND start_time<%s AND end_time>%s
        """
        params: list[object] = [int(employee_id), ShiftStatus.CANCELLED.value, end_time, start_time]
        if excluded:
            sql += f" AND shift_id NOT IN ({in_clause(excluded)})"
            params.extend(excluded)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY start_time", tuple(params))
            return [_to_shift(r) for r in fetchall(cur)]

    def list_range(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        include_cancelled: bool = True,
    ) -> Sequence[Shift]:
        clauses = ["1=1"]
        params: list[object] = []
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if start is not None:
            clauses.append("end_time>%s")
            params.append(start)
        if end is not None:
            clauses.append("start_time<%s")
            params.append(end)
        if not include_cancelled:
            clauses.append("status<>%s")
            params.append(ShiftStatus.CANCELLED.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shifts WHERE {' AND '.join(clauses)} ORDER BY start_time",
                tuple(params),
            )
            return [_to_shift(r) for r in fetchall(cur)]
