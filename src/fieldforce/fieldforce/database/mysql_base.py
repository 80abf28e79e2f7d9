from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Connection of the enclosing transaction() block, if any.
_active_conn: ContextVar[Optional[Any]] = ContextVar("fieldforce_active_conn", default=None)


@contextmanager
def transaction(conn_factory: DatabaseConnection) -> Iterator[Any]:
    """Run every db_cursor() inside the block on one connection.

    Commits when the block exits normally, rolls back on any exception.
    Nested blocks join the outer transaction.
    """
    existing = _active_conn.get()
    if existing is not None:
        yield existing
        return

    conn = conn_factory.connect()
    token = _active_conn.set(conn)
    try:
        yield conn
        conn.commit()
    except Exception:
        logger.debug("Rolling back transaction", exc_info=True)
        conn.rollback()
        raise
    finally:
        _active_conn.reset(token)
        conn.close()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    active = _active_conn.get()
    if active is not None:
        cur = active.cursor(dictionary=dictionary)
        try:
            yield active, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def integrity_as_conflict(message: str):
    """Translate unique/foreign-key violations into ConflictError."""
    try:
        yield
    except mysql.connector.IntegrityError as exc:
        logger.warning("Integrity violation: %s", exc)
        raise ConflictError(message) from exc


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values) -> str:
    """Placeholder list for ``IN (...)``; callers pass the values as params."""
    return ", ".join(["%s"] * len(values))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector returns TIME as timedelta (C extension), time, or a
    'HH:MM[:SS]' string depending on driver flavour.
    """

    if value is None or isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total = int(value.total_seconds()) % 86400
        return time(hour=total // 3600, minute=(total % 3600) // 60, second=total % 60)

    if isinstance(value, str):
        parts = [p for p in value.strip().split(":") if p]
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        seconds = int(parts[2]) if len(parts) >= 3 else 0
        return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
