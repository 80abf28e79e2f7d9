from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.geo import Coordinates
from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, integrity_as_conflict
from .model import SessionReportRow, WorkSession
from .repository import WorkSessionRepository

_COLUMNS = (
    "session_id, employee_id, site_id, schedule_id, check_in_time, check_out_time, "
    "check_in_latitude, check_in_longitude, check_out_latitude, check_out_longitude, "
    "photo_url, notes, status"
)


def _coords(lat, lng) -> Optional[Coordinates]:
    if lat is None or lng is None:
        return None
    return Coordinates(latitude=float(lat), longitude=float(lng))


def _split(location: Optional[Coordinates]) -> tuple:
    if location is None:
        return None, None
    return location.latitude, location.longitude


def _to_session(r: dict) -> WorkSession:
    return WorkSession(
        session_id=int(r["session_id"]),
        employee_id=int(r["employee_id"]),
        site_id=int(r["site_id"]),
        schedule_id=r.get("schedule_id"),
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        check_in_location=_coords(r.get("check_in_latitude"), r.get("check_in_longitude")),
        check_out_location=_coords(r.get("check_out_latitude"), r.get("check_out_longitude")),
        photo_url=r.get("photo_url"),
        notes=r.get("notes"),
        status=SessionStatus(r["status"]),
    )


class MySQLWorkSessionRepository(WorkSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_active_for_employee(self, employee_id: int) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM work_sessions WHERE employee_id=%s AND status=%s",
                (int(employee_id), SessionStatus.CHECKED_IN.value),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def create_checkin(
        self,
        *,
        employee_id: int,
        site_id: int,
        schedule_id: Optional[int],
        check_in_time: datetime,
        location: Optional[Coordinates],
        photo_url: Optional[str],
        notes: Optional[str],
    ) -> int:
        lat, lng = _split(location)
        # uq_work_sessions_active_employee rejects a second open session.
        with integrity_as_conflict("Employee already has an active session"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO work_sessions(
                        employee_id, site_id, schedule_id, check_in_time,
                        check_in_latitude, check_in_longitude, photo_url, notes, status
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        int(site_id),
                        schedule_id,
                        check_in_time,
                        lat,
                        lng,
                        photo_url,
                        notes,
                        SessionStatus.CHECKED_IN.value,
                    ),
                )
                return int(cur.lastrowid)

    def update_checkout(
        self,
        *,
        session_id: int,
        check_out_time: datetime,
        location: Optional[Coordinates],
        notes: Optional[str],
    ) -> bool:
        lat, lng = _split(location)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_sessions
                SET check_out_time=%s, check_out_latitude=%s, check_out_longitude=%s,
                    notes=COALESCE(%s, notes), status=%s
                WHERE session_id=%s AND status=%s
                """,
                (
                    check_out_time,
                    lat,
                    lng,
                    notes,
                    SessionStatus.CHECKED_OUT.value,
                    int(session_id),
                    SessionStatus.CHECKED_IN.value,
                ),
            )
            return cur.rowcount > 0

    def admin_update(
        self,
        *,
        session_id: int,
        check_in_time: datetime,
        check_out_time: Optional[datetime],
        status: SessionStatus,
        notes: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_sessions
                SET check_in_time=%s, check_out_time=%s, status=%s, notes=%s
                WHERE session_id=%s
                """,
                (check_in_time, check_out_time, status.value, notes, int(session_id)),
            )
            return cur.rowcount > 0

    def list_sessions(
        self,
        *,
        employee_id: Optional[int] = None,
        site_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 200,
    ) -> Sequence[WorkSession]:
        clauses = ["1=1"]
        params: list[object] = []
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if site_id is not None:
            clauses.append("site_id=%s")
            params.append(int(site_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if start is not None:
            clauses.append("check_in_time>=%s")
            params.append(start)
        if end is not None:
            clauses.append("check_in_time<%s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM work_sessions
                WHERE {' AND '.join(clauses)}
                ORDER BY check_in_time DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def get_report_rows(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        employee_id: Optional[int] = None,
        site_id: Optional[int] = None,
    ) -> Sequence[SessionReportRow]:
        clauses = ["1=1"]
        params: list[object] = []
        if start is not None:
            clauses.append("w.check_in_time>=%s")
            params.append(start)
        if end is not None:
            clauses.append("w.check_in_time<%s")
            params.append(end)
        if employee_id is not None:
            clauses.append("w.employee_id=%s")
            params.append(int(employee_id))
        if site_id is not None:
            clauses.append("w.site_id=%s")
            params.append(int(site_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT w.session_id, w.employee_id, u.full_name, w.site_id, s.name AS site_name,
                       w.check_in_time, w.check_out_time, w.status
                FROM work_sessions w
                JOIN users u ON u.user_id = w.employee_id
                JOIN sites s ON s.site_id = w.site_id
                WHERE {' AND '.join(clauses)}
                ORDER BY w.check_in_time ASC, w.session_id ASC
                """,
                tuple(params),
            )
            return [
                SessionReportRow(
                    session_id=int(r["session_id"]),
                    employee_id=int(r["employee_id"]),
                    employee_name=r["full_name"],
                    site_id=int(r["site_id"]),
                    site_name=r["site_name"],
                    check_in_time=r["check_in_time"],
                    check_out_time=r.get("check_out_time"),
                    status=SessionStatus(r["status"]),
                )
                for r in fetchall(cur)
            ]
