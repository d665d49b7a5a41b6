"""Schema and demo-data helpers used by scripts/ and by AUTO_INIT_DB / AUTO_SEED_DB."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # full_name, username, email, password, role
    ("Office Admin", "admin", "admin@school.local", "admin123", "admin"),
    ("Front Desk", "staff", "staff@school.local", "staff123", "staff"),
    ("Attendance Desk", "attendance", "attendance@school.local", "attend123", "attendance_staff"),
)


def _connect(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_dict(db_config)
    return mysql.connector.connect(use_pure=True, **target.connect_kwargs(with_database=with_database))


def _strip_database_statements(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def split_sql(sql: str) -> Iterable[str]:
    """Split a script on ';', ignoring ones inside quotes or `--` comments."""

    buf: list[str] = []
    quote = ""
    i = 0
    while i < len(sql):
        ch = sql[i]

        if quote:
            buf.append(ch)
            if ch == "\\" and i + 1 < len(sql):
                buf.append(sql[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = ""
            i += 1
            continue

        if sql.startswith("--", i):
            end = sql.find("\n", i)
            i = len(sql) if end == -1 else end
            continue

        if ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            i += 1
            continue

        buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> int:
    sql = _strip_database_statements(Path(path).read_text(encoding="utf-8"))
    conn = _connect(db_config)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in split_sql(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    logger.info("applied %d schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("applied %d seed statements from %s", count, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Create or reset one demo account per role."""

    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        for full_name, username, email, password, role in DEMO_USERS:
            cur.execute(
                """
                INSERT INTO users (full_name, username, email, password_hash, role, is_active)
                VALUES (%s, %s, %s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name),
                    password_hash=VALUES(password_hash),
                    role=VALUES(role),
                    is_active=1
                """,
                (full_name, username, email, generate_password_hash(password), role),
            )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
