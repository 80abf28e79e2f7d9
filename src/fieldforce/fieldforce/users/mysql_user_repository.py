from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, integrity_as_conflict
from .model import Employee
from .repository import UserRepository

_COLUMNS = "user_id, full_name, username, email, phone, password_hash, role, position_id, site_id, is_active"


def _to_employee(row: dict) -> Employee:
    return Employee(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        email=row.get("email"),
        phone=row.get("phone"),
        position_id=row.get("position_id"),
        site_id=row.get("site_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[Employee]:
        return self._get_one("user_id", int(user_id))

    def get_by_username(self, username: str) -> Optional[Employee]:
        return self._get_one("username", username)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("email", email)

    def lock(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM users WHERE user_id=%s FOR UPDATE", (int(user_id),))
            return fetchone(cur) is not None

    def create_user(
        self,
        *,
        full_name: str,
        username: str,
        email: Optional[str],
        phone: Optional[str],
        password_hash: str,
        role: Role,
        position_id: Optional[int],
        site_id: Optional[int],
    ) -> int:
        with integrity_as_conflict("Username or email already registered"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(full_name, username, email, phone, password_hash, role, position_id, site_id, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (full_name, username, email, phone, password_hash, role.value, position_id, site_id),
                )
                return int(cur.lastrowid)

    def set_role(self, user_id: int, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET role=%s WHERE user_id=%s", (role.value, int(user_id)))
            return cur.rowcount > 0

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, int(user_id)))
            return cur.rowcount > 0

    def list_all(self, *, active_only: bool = False, role: Optional[Role] = None) -> Sequence[Employee]:
        clauses = ["1=1"]
        params: list[object] = []
        if active_only:
            clauses.append("is_active=1")
        if role is not None:
            clauses.append("role=%s")
            params.append(role.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE {' AND '.join(clauses)} ORDER BY full_name",
                tuple(params),
            )
            return [_to_employee(r) for r in fetchall(cur)]
