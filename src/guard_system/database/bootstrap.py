from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.constants import SUPER_ADMIN_PERMISSIONS
from .connection import DBConfig, DatabaseConnection
from .mysql_base import new_id

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

DEMO_ORG_SLUG = "demo-security-company"
DEMO_ADMIN_EMAIL = "admin@demo-security.local"
DEMO_ADMIN_PASSWORD = "admin123"


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = DEFAULT_SCHEMA_PATH) -> None:
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    ensure_database_exists(conn_factory)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied from %s", schema_path)


def ensure_demo_organization(db_config: dict) -> None:
    """Create a demo tenant with one Super Admin account (idempotent)."""
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT id FROM organizations WHERE slug=%s", (DEMO_ORG_SLUG,))
        row = cur.fetchone()
        if row:
            org_id = row["id"]
        else:
            org_id = new_id()
            cur.execute(
                """
                INSERT INTO organizations (id, name, slug, active_modules, subscription_tier)
                VALUES (%s, %s, %s, %s, 'basic')
                """,
                (org_id, "Demo Security Company", DEMO_ORG_SLUG, json.dumps(["guard"])),
            )

        cur.execute("SELECT id FROM roles WHERE organization_id=%s AND name='Super Admin'", (org_id,))
        row = cur.fetchone()
        if row:
            role_id = row["id"]
        else:
            role_id = new_id()
            cur.execute(
                "INSERT INTO roles (id, organization_id, name, permissions) VALUES (%s, %s, 'Super Admin', %s)",
                (role_id, org_id, json.dumps(SUPER_ADMIN_PERMISSIONS)),
            )

        cur.execute("SELECT id FROM departments WHERE organization_id=%s AND name='Security Operations'", (org_id,))
        row = cur.fetchone()
        if row:
            dept_id = row["id"]
        else:
            dept_id = new_id()
            cur.execute(
                "INSERT INTO departments (id, organization_id, name) VALUES (%s, %s, 'Security Operations')",
                (dept_id, org_id),
            )

        password_hash = generate_password_hash(DEMO_ADMIN_PASSWORD)
        cur.execute("SELECT id FROM users WHERE email=%s", (DEMO_ADMIN_EMAIL,))
        if cur.fetchone():
            cur.execute(
                "UPDATE users SET password_hash=%s, role_id=%s, is_active=1 WHERE email=%s",
                (password_hash, role_id, DEMO_ADMIN_EMAIL),
            )
        else:
            cur.execute(
                """
                INSERT INTO users (id, organization_id, role_id, department_id, email, password_hash,
                                   first_name, last_name)
                VALUES (%s, %s, %s, %s, %s, %s, 'Demo', 'Admin')
                """,
                (new_id(), org_id, role_id, dept_id, DEMO_ADMIN_EMAIL, password_hash),
            )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
