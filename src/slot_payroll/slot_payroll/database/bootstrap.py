"""Schema and seed helpers used on startup and by ``scripts/``."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Mapping

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.constants import ADMIN_EMPLOYEE_CODE
from ..core.enums import Role
from .connection import DBConfig

logger = logging.getLogger(__name__)

DEFAULT_SLOTS = (
    # name, start_minutes, end_minutes, salary, sort_order
    ("Morning", 600, 720, 200, 1),
    ("Afternoon", 900, 1020, 200, 2),
    ("Evening", 1140, 1260, 200, 3),
)


def _connect(config: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=config.host, port=config.port, user=config.user, password=config.password, use_pure=True)
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # The target database comes from config, not from the file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ``;`` outside of quoted strings."""
    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
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


def ensure_database_exists(db_config: Mapping) -> None:
    config = DBConfig.from_mapping(db_config)
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_line_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied from %s", schema_path)


def ensure_admin_user(db_config: Mapping, *, password: str, email: str | None = None, full_name: str = "Admin") -> bool:
    """Create the bootstrap admin unless an admin already exists. Returns True if one was created."""
    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT user_id FROM users WHERE role=%s LIMIT 1", (Role.ADMIN.value,))
        if cur.fetchone():
            return False

        cur.execute(
            """
            INSERT INTO users(employee_code, full_name, email, password_hash, role, is_active, must_change_password)
            VALUES(%s,%s,%s,%s,%s,1,0)
            """,
            (ADMIN_EMPLOYEE_CODE, full_name, email, generate_password_hash(password), Role.ADMIN.value),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("bootstrap admin %s created", ADMIN_EMPLOYEE_CODE)
    return True


def ensure_default_slots(db_config: Mapping) -> int:
    """Insert the default day slots when the slot table is empty. Returns the number inserted."""
    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM slots")
        if int(cur.fetchone()[0]) > 0:
            return 0

        cur.executemany(
            """
            INSERT INTO slots(name, start_minutes, end_minutes, salary, is_active, sort_order)
            VALUES(%s,%s,%s,%s,1,%s)
            """,
            list(DEFAULT_SLOTS),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("seeded %s default slots", len(DEFAULT_SLOTS))
    return len(DEFAULT_SLOTS)


def list_tables(db_config: Mapping) -> list[str]:
    conn = _connect(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
