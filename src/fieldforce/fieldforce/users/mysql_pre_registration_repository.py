from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PreRegistration
from .repository import PreRegistrationRepository

_COLUMNS = "pre_registration_id, full_name, email, phone, role, position_id, site_id, is_used, created_by"


def _to_pre_registration(r: dict) -> PreRegistration:
    return PreRegistration(
        pre_registration_id=int(r["pre_registration_id"]),
        full_name=r["full_name"],
        role=Role(r["role"]),
        created_by=int(r["created_by"]),
        email=r.get("email"),
        phone=r.get("phone"),
        position_id=r.get("position_id"),
        site_id=r.get("site_id"),
        is_used=bool(r.get("is_used")),
    )


class MySQLPreRegistrationRepository(PreRegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        full_name: str,
        email: Optional[str],
        phone: Optional[str],
        role: Role,
        position_id: Optional[int],
        site_id: Optional[int],
        created_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pre_registrations(full_name, email, phone, role, position_id, site_id, is_used, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,0,%s)
                """,
                (full_name, email, phone, role.value, position_id, site_id, int(created_by)),
            )
            return int(cur.lastrowid)

    def find_unused(self, *, email: Optional[str], phone: Optional[str]) -> Optional[PreRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            for column, value in (("email", email), ("phone", phone)):
                if not value:
                    continue
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM pre_registrations
                    WHERE {column}=%s AND is_used=0
                    ORDER BY pre_registration_id DESC
                    LIMIT 1
                    """,
                    (value,),
                )
                r = fetchone(cur)
                if r:
                    return _to_pre_registration(r)
            return None

    def mark_used(self, pre_registration_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE pre_registrations SET is_used=1 WHERE pre_registration_id=%s AND is_used=0",
                (int(pre_registration_id),),
            )
            return cur.rowcount > 0

    def list_all(self, *, include_used: bool = False) -> Sequence[PreRegistration]:
        where = "" if include_used else "WHERE is_used=0"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM pre_registrations {where} ORDER BY pre_registration_id DESC")
            return [_to_pre_registration(r) for r in fetchall(cur)]
