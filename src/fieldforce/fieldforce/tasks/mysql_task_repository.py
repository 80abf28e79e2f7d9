from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.geo import Coordinates
from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Task, TaskUpdate
from .repository import TaskRepository

_COLUMNS = (
    "task_id, title, description, assigned_to, assigned_by, site_id, priority, due_date, "
    "requires_photo, requires_location, estimated_hours, actual_hours, created_at"
)


def _opt_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _to_task(r: dict) -> Task:
    return Task(
        task_id=int(r["task_id"]),
        title=r["title"],
        description=r.get("description"),
        assigned_to=int(r["assigned_to"]),
        assigned_by=int(r["assigned_by"]),
        site_id=r.get("site_id"),
        priority=TaskPriority(r["priority"]),
        due_date=r.get("due_date"),
        requires_photo=bool(r.get("requires_photo")),
        requires_location=bool(r.get("requires_location")),
        estimated_hours=_opt_float(r.get("estimated_hours")),
        actual_hours=_opt_float(r.get("actual_hours")),
        created_at=r["created_at"],
    )


def _to_update(r: dict) -> TaskUpdate:
    location = None
    if r.get("latitude") is not None and r.get("longitude") is not None:
        location = Coordinates(latitude=float(r["latitude"]), longitude=float(r["longitude"]))
    return TaskUpdate(
        update_id=int(r["update_id"]),
        task_id=int(r["task_id"]),
        user_id=int(r["user_id"]),
        status=TaskStatus(r["status"]),
        created_at=r["created_at"],
        notes=r.get("notes"),
        photo_url=r.get("photo_url"),
        location=location,
        hours_spent=_opt_float(r.get("hours_spent")),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE task_id=%s", (int(task_id),))
            r = fetchone(cur)
            return _to_task(r) if r else None

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        assigned_to: int,
        assigned_by: int,
        site_id: Optional[int],
        priority: TaskPriority,
        due_date: Optional[datetime],
        requires_photo: bool,
        requires_location: bool,
        estimated_hours: Optional[float],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(title, description, assigned_to, assigned_by, site_id, priority, due_date,
                                  requires_photo, requires_location, estimated_hours, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    title,
                    description,
                    int(assigned_to),
                    int(assigned_by),
                    site_id,
                    priority.value,
                    due_date,
                    1 if requires_photo else 0,
                    1 if requires_location else 0,
                    estimated_hours,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def list_tasks(self, *, assigned_to: Optional[int] = None, assigned_by: Optional[int] = None) -> Sequence[Task]:
        clauses = ["1=1"]
        params: list[object] = []
        if assigned_to is not None:
            clauses.append("assigned_to=%s")
            params.append(int(assigned_to))
        if assigned_by is not None:
            clauses.append("assigned_by=%s")
            params.append(int(assigned_by))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM tasks WHERE {' AND '.join(clauses)} ORDER BY created_at DESC, task_id DESC",
                tuple(params),
            )
            return [_to_task(r) for r in fetchall(cur)]

    def set_actual_hours(self, task_id: int, hours: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tasks SET actual_hours=%s WHERE task_id=%s", (float(hours), int(task_id)))
            return cur.rowcount > 0

    def add_update(
        self,
        *,
        task_id: int,
        user_id: int,
        status: TaskStatus,
        notes: Optional[str],
        photo_url: Optional[str],
        location: Optional[Coordinates],
        hours_spent: Optional[float],
        created_at: datetime,
    ) -> int:
        lat = location.latitude if location else None
        lng = location.longitude if location else None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO task_updates(task_id, user_id, status, notes, photo_url, latitude, longitude,
                                         hours_spent, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(task_id), int(user_id), status.value, notes, photo_url, lat, lng, hours_spent, created_at),
            )
            return int(cur.lastrowid)

    def list_updates(self, task_id: int) -> Sequence[TaskUpdate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT update_id, task_id, user_id, status, notes, photo_url, latitude, longitude,
                       hours_spent, created_at
                FROM task_updates
                WHERE task_id=%s
                ORDER BY created_at ASC, update_id ASC
                """,
                (int(task_id),),
            )
            return [_to_update(r) for r in fetchall(cur)]

    def latest_statuses(self, task_ids: Sequence[int]) -> dict[int, TaskStatus]:
        ids = [int(t) for t in task_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT tu.task_id, tu.status
                FROM task_updates tu
                JOIN (
                    SELECT task_id, MAX(update_id) AS update_id
                    FROM task_updates
                    WHERE task_id IN ({in_clause(ids)})
                    GROUP BY task_id
                ) latest ON latest.update_id = tu.update_id
                """,
                tuple(ids),
            )
            return {int(r["task_id"]): TaskStatus(r["status"]) for r in fetchall(cur)}
