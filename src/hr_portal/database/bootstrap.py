from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.constants import DEFAULT_BREAK_END_HOUR, DEFAULT_BREAK_START_HOUR
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal splitter: ';' ends a statement unless it sits inside quotes.
    buf: list[str] = []
    quote = ""
    escape = False

    for ch in _strip_line_comments(sql):
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch in {"'", '"'}:
            if not quote:
                quote = ch
            elif quote == ch:
                quote = ""
            continue
        if ch == ";" and not quote:
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(conn_factory)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_default_break_schedule(conn_factory: DatabaseConnection) -> None:
    """Insert the default 15:00-16:00 window for weekdays that have no row yet."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for day in range(7):
            cur.execute(
                "INSERT IGNORE INTO break_schedule(day_of_week, start_hour, end_hour) VALUES(%s,%s,%s)",
                (day, DEFAULT_BREAK_START_HOUR, DEFAULT_BREAK_END_HOUR),
            )
        conn.commit()
    finally:
        conn.close()


def ensure_demo_users(conn_factory: DatabaseConnection, *, email_domain: str) -> None:
    domain = email_domain.lstrip("@")
    demo = [
        ("Admin Demo", f"admin@{domain}", "admin123", "Admin", "Management"),
        ("HR Demo", f"hr@{domain}", "hr12345", "HR", "Human Resources"),
        ("Employee Demo", f"employee@{domain}", "staff123", "Employee", "Engineering"),
    ]

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=True)
        for name, email, password, role, department in demo:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM profiles WHERE email=%s", (email,))
            if cur.fetchone():
                cur.execute(
                    "UPDATE profiles SET name=%s, password_hash=%s, role=%s, department=%s WHERE email=%s",
                    (name, password_hash, role, department, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO profiles (name, email, password_hash, role, department)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (name, email, password_hash, role, department),
                )
        conn.commit()
    finally:
        conn.close()
    logger.info("demo users ready for @%s", domain)


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
