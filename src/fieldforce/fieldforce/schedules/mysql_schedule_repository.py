from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..core.enums import ScheduleStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Schedule
from .repository import ScheduleRepository

_COLUMNS = (
    "schedule_id, employee_id, site_id, title, description, start_date, end_date, "
    "start_time, end_time, status, created_by"
)


def _to_schedule(r: dict) -> Schedule:
    return Schedule(
        schedule_id=int(r["schedule_id"]),
        employee_id=int(r["employee_id"]),
        site_id=int(r["site_id"]),
        title=r["title"],
        description=r.get("description"),
        start_date=r["start_date"],
        end_date=r["end_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        status=ScheduleStatus(r["status"]),
        created_by=int(r["created_by"]),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        site_id: int,
        title: str,
        description: Optional[str],
        start_date: date,
        end_date: date,
        start_time: time,
        end_time: time,
        created_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(employee_id, site_id, title, description, start_date, end_date,
                                      start_time, end_time, status, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    int(site_id),
                    title,
                    description,
                    start_date,
                    end_date,
                    start_time,
                    end_time,
                    ScheduleStatus.SCHEDULED.value,
                    int(created_by),
                ),
            )
            return int(cur.lastrowid)

    def set_status(self, schedule_id: int, status: ScheduleStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE schedules SET status=%s WHERE schedule_id=%s", (status.value, int(schedule_id)))
            return cur.rowcount > 0

    def list_range(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        include_cancelled: bool = False,
    ) -> Sequence[Schedule]:
        clauses = ["1=1"]
        params: list[object] = []
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if start is not None:
            clauses.append("end_date>=%s")
            params.append(start)
        if end is not None:
            clauses.append("start_date<=%s")
            params.append(end)
        if not include_cancelled:
            clauses.append("status=%s")
            params.append(ScheduleStatus.SCHEDULED.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM schedules WHERE {' AND '.join(clauses)} ORDER BY start_date, start_time",
                tuple(params),
            )
            return [_to_schedule(r) for r in fetchall(cur)]
