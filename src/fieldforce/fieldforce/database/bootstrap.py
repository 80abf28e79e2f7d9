from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # full_name, username, email, password, role, site name
    ("Admin Demo", "admin", "admin@fieldforce.local", "admin123", "admin", None),
    ("Maria Manager", "manager", "manager@fieldforce.local", "manager123", "manager", None),
    ("Evan Employee", "employee", "employee@fieldforce.local", "employee123", "employee", "Acme Downtown"),
    ("Sam Coverer", "sam", "sam@fieldforce.local", "employee123", "employee", "Acme Downtown"),
)


def _factory(db_config: dict) -> DatabaseConnection:
    # Bypass the singleton: bootstrap may target another database.
    return DatabaseConnection(DBConfig.from_mapping(db_config))


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql independent of the configured DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' that are outside quoted strings."""
    buf: list[str] = []
    quote = ""
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = ""
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> int:
    sql = _strip_line_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _factory(db_config).connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    factory = _factory(db_config)
    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    logger.info("Applied schema %s (%d statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("Applied seed %s (%d statements)", seed_path, count)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert demo accounts with real password hashes (seed.sql cannot hash)."""
    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor(dictionary=True)

        def site_id(name):
            if name is None:
                return None
            cur.execute("SELECT site_id FROM sites WHERE name=%s", (name,))
            row = cur.fetchone()
            if not row:
                raise RuntimeError(f"Missing sites row for name={name}")
            return int(row["site_id"])

        for full_name, username, email, password, role, site_name in DEMO_USERS:
            password_hash = generate_password_hash(password)
            sid = site_id(site_name)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, email=%s, password_hash=%s, role=%s, site_id=%s, is_active=1
                    WHERE username=%s
                    """,
                    (full_name, email, password_hash, role, sid, username),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (full_name, username, email, password_hash, role, site_id)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (full_name, username, email, password_hash, role, sid),
                )

        conn.commit()
    finally:
        conn.close()
    logger.info("Demo users ready (%d accounts)", len(DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def init_database(db_config: dict, database_dir: str | Path) -> int:
    """Apply ``schema.sql`` from ``database_dir``; returns the table count."""
    apply_schema(db_config, schema_path=Path(database_dir) / "schema.sql")
    return len(list_tables(db_config))


def seed_database(db_config: dict, database_dir: str | Path) -> None:
    apply_seed_sql(db_config, seed_path=Path(database_dir) / "seed.sql")
    ensure_demo_users(db_config)
