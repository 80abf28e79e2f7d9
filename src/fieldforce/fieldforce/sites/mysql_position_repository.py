from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, integrity_as_conflict
from .model import Position
from .repository import PositionRepository


def _to_position(r: dict) -> Position:
    return Position(
        position_id=int(r["position_id"]),
        title=r["title"],
        description=r.get("description"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLPositionRepository(PositionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, position_id: int) -> Optional[Position]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT position_id, title, description, is_active FROM positions WHERE position_id=%s",
                (int(position_id),),
            )
            r = fetchone(cur)
            return _to_position(r) if r else None

    def list_all(self) -> Sequence[Position]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT position_id, title, description, is_active FROM positions ORDER BY title")
            return [_to_position(r) for r in fetchall(cur)]

    def create(self, *, title: str, description: Optional[str]) -> int:
        with integrity_as_conflict("A position with this title already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("INSERT INTO positions(title, description) VALUES(%s,%s)", (title, description))
                return int(cur.lastrowid)
