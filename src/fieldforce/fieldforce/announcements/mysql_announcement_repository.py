from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AnnouncementType, TargetRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Announcement
from .repository import AnnouncementRepository

_COLUMNS = (
    "announcement_id, title, content, type, target_role, restricted_start_date, "
    "restricted_end_date, is_active, created_by, created_at"
)


def _to_announcement(r: dict) -> Announcement:
    return Announcement(
        announcement_id=int(r["announcement_id"]),
        title=r["title"],
        content=r["content"],
        type=AnnouncementType(r["type"]),
        target_role=TargetRole(r["target_role"]),
        created_by=int(r["created_by"]),
        created_at=r["created_at"],
        restricted_start_date=r.get("restricted_start_date"),
        restricted_end_date=r.get("restricted_end_date"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLAnnouncementRepository(AnnouncementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, announcement_id: int) -> Optional[Announcement]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM announcements WHERE announcement_id=%s", (int(announcement_id),))
            r = fetchone(cur)
            return _to_announcement(r) if r else None

    def create(
        self,
        *,
        title: str,
        content: str,
        type: AnnouncementType,
        target_role: TargetRole,
        restricted_start_date: Optional[date],
        restricted_end_date: Optional[date],
        created_by: int,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO announcements(title, content, type, target_role, restricted_start_date,
                                          restricted_end_date, is_active, created_by, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,1,%s,%s)
                """,
                (
                    title,
                    content,
                    type.value,
                    target_role.value,
                    restricted_start_date,
                    restricted_end_date,
                    int(created_by),
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def set_active(self, announcement_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE announcements SET is_active=%s WHERE announcement_id=%s",
                (1 if is_active else 0, int(announcement_id)),
            )
            return cur.rowcount > 0

    def list_active(self, *, type: Optional[AnnouncementType] = None) -> Sequence[Announcement]:
        sql = f"SELECT {_COLUMNS} FROM announcements WHERE is_active=1"
        params: tuple = ()
        if type is not None:
            sql += " AND type=%s"
            params = (type.value,)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY created_at DESC", params)
            return [_to_announcement(r) for r in fetchall(cur)]
