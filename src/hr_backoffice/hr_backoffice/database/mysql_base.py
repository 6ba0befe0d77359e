from __future__ import annotations

import json
import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, InternalError, ReferenceNotFoundError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_DUP_KEY_RE = re.compile(r"for key '(?:[\w$]+\.)?([\w$]+)'")

# Unique constraint name -> message shown to the caller.
CONFLICT_MESSAGES = {
    "uq_employees_email": "An employee with this email already exists",
    "uq_employees_employee_number": "An employee with this number already exists",
    "uq_departments_code": "A department with this code already exists",
    "uq_positions_code": "A position with this code already exists",
    "uq_clients_contact_email": "A client with this email already exists",
    "uq_workspace_members_user": "This user is already a member of the workspace",
}


def duplicate_key_name(exc: mysql.connector.Error) -> Optional[str]:
    m = _DUP_KEY_RE.search(str(getattr(exc, "msg", "") or exc))
    return m.group(1) if m else None


def translate_db_error(exc: mysql.connector.Error) -> Exception:
    """Classify a connector error by errno into the domain error taxonomy."""

    errno = getattr(exc, "errno", None)
    if errno == errorcode.ER_DUP_ENTRY:
        constraint = duplicate_key_name(exc)
        message = CONFLICT_MESSAGES.get(constraint or "", "Record already exists")
        return ConflictError(message, constraint=constraint)
    if errno in (errorcode.ER_NO_REFERENCED_ROW_2, errorcode.ER_NO_REFERENCED_ROW):
        return ReferenceNotFoundError()
    if errno in (errorcode.ER_ROW_IS_REFERENCED_2, errorcode.ER_ROW_IS_REFERENCED):
        return ReferenceNotFoundError("Record is still referenced by other entities")

    logger.error("Unclassified database error errno=%s: %s", errno, exc)
    return InternalError()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[tuple[Any, Any]]:
    """Open a connection, yield ``(conn, cursor)`` and commit on success.

    Everything executed inside one block is one transaction. Connector errors
    are rolled back and re-raised as domain errors.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        raise translate_db_error(exc) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False, default=str)


def load_json(value: Any, default: Any = None) -> Any:
    """MySQL JSON columns come back as str (pure driver) or bytes (C ext)."""

    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else default
    return value


def where_clause(clauses: list[str]) -> str:
    return " AND ".join(clauses) if clauses else "1=1"
