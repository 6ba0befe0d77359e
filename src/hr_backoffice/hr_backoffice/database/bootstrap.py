"""Schema and demo-data setup, used by ``scripts/`` and by AUTO_INIT_DB/AUTO_SEED_DB."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

from ..auth.permissions import ROLE_PERMISSIONS
from ..common.datetime_utils import today
from ..core.enums import Role
from ..employees.numbering import employee_number_prefix, next_employee_number
from .connection import DBConfig

logger = logging.getLogger(__name__)

# (email, password, first, last, role, department code, position code)
DEMO_EMPLOYEES = (
    ("admin@hr.local", "admin12345", "Super", "Admin", Role.SUPER_ADMIN, "ADM", "ADM-DIR"),
    ("hr.admin@hr.local", "hradmin123", "Claire", "Martin", Role.ADMIN, "ADM", None),
    ("card.head@hr.local", "manager123", "Paul", "Durand", Role.DEPT_MANAGER, "CARD", "CARD-HEAD"),
    ("nurse@hr.local", "employee123", "Julie", "Bernard", Role.EMPLOYEE, "CARD", "CARD-NURSE"),
)
DEMO_CLIENT = ("client@acme.test", "client12345", "Acme Health", "John Smith")


def _connect(config: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=config.host, port=config.port, user=config.user, password=config.password, use_pure=True,
                  connection_timeout=config.connect_timeout)
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def split_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ``;`` outside quotes, dropping ``--`` line comments."""

    buf: list[str] = []
    quote: Optional[str] = None
    escape = False
    i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if quote:
            buf.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == quote:
                quote = None
            i += 1
            continue

        if ch == "-" and sql.startswith("--", i):
            end = sql.find("\n", i)
            i = n if end == -1 else end + 1
            buf.append("\n")
            continue
        if ch in ("'", '"'):
            quote = ch
        if ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
        else:
            buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_script(config: DBConfig, sql: str) -> None:
    conn = _connect(config)
    try:
        cur = conn.cursor()
        for stmt in split_sql_statements(_strip_create_db_and_use(sql)):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    config = DBConfig.from_dict(db_config)
    _exec_script(config, Path(schema_path).read_text(encoding="utf-8"))
    sync_role_permissions(db_config)
    logger.info("Schema applied to %s", config.database)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _exec_script(DBConfig.from_dict(db_config), Path(seed_path).read_text(encoding="utf-8"))


def permission_rows() -> Iterable[tuple[str, str, str, Optional[str]]]:
    seen = set()
    for perms in ROLE_PERMISSIONS.values():
        for p in perms:
            if p.name not in seen:
                seen.add(p.name)
                yield p.name, p.resource, p.action, p.scope


def sync_role_permissions(db_config: dict) -> None:
    """Mirror ROLE_PERMISSIONS into the permissions/role_permissions tables."""

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)
        for name, resource, action, scope in sorted(permission_rows()):
            cur.execute(
                """
                INSERT INTO permissions (name, resource, action, scope) VALUES (%s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE resource = VALUES(resource), action = VALUES(action), scope = VALUES(scope)
                """,
                (name, resource, action, scope),
            )
        cur.execute("SELECT permission_id, name FROM permissions")
        ids = {r["name"]: int(r["permission_id"]) for r in cur.fetchall()}

        cur.execute("DELETE FROM role_permissions")
        for role, perms in ROLE_PERMISSIONS.items():
            for p in sorted(perms, key=lambda x: x.name):
                cur.execute(
                    "INSERT INTO role_permissions (role, permission_id) VALUES (%s, %s)", (role.value, ids[p.name])
                )
        conn.commit()
    finally:
        conn.close()


def ensure_demo_accounts(db_config: dict) -> None:
    """Upsert the demo employees and client. Needs seed.sql applied first."""

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        def lookup(table: str, id_col: str, code: Optional[str]) -> Optional[int]:
            if code is None:
                return None
            cur.execute(f"SELECT {id_col} AS id FROM {table} WHERE code=%s", (code,))
            row = cur.fetchone()
            if not row:
                raise RuntimeError(f"Missing {table} row for code={code}")
            return int(row["id"])

        year = today().year
        for email, password, first, last, role, dept_code, position_code in DEMO_EMPLOYEES:
            department_id = lookup("departments", "department_id", dept_code)
            position_id = lookup("positions", "position_id", position_code)
            password_hash = generate_password_hash(password)

            cur.execute("SELECT employee_id FROM employees WHERE email=%s", (email,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE employees
                    SET password_hash=%s, role=%s, department_id=%s, position_id=%s, is_active=1
                    WHERE email=%s
                    """,
                    (password_hash, role.value, department_id, position_id, email),
                )
                continue

            prefix = employee_number_prefix(dept_code, year)
            cur.execute(
                "SELECT employee_number FROM employees WHERE employee_number LIKE %s ORDER BY employee_number DESC LIMIT 1",
                (f"{prefix}%",),
            )
            last_row = cur.fetchone()
            number = next_employee_number(dept_code, year, last_row["employee_number"] if last_row else None)
            cur.execute(
                """
                INSERT INTO employees (
                    employee_number, first_name, last_name, email, password_hash, role,
                    hire_date, status, department_id, position_id
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, 'active', %s, %s)
                """,
                (number, first, last, email, password_hash, role.value, today(), department_id, position_id),
            )

        email, password, company, person = DEMO_CLIENT
        cur.execute(
            """
            INSERT INTO clients (company_name, contact_email, contact_person, password_hash, is_active)
            VALUES (%s, %s, %s, %s, 1)
            ON DUPLICATE KEY UPDATE password_hash = VALUES(password_hash), is_active = 1
            """,
            (company, email, person, generate_password_hash(password)),
        )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
