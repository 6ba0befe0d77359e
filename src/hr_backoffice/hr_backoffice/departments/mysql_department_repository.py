from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department
from .repository import DepartmentRepository

_SELECT = """
    SELECT d.department_id, d.code, d.name, d.description, d.created_at, d.updated_at,
           COUNT(e.employee_id) AS employee_count
    FROM departments d
    LEFT JOIN employees e ON e.department_id = d.department_id
"""
_GROUP = " GROUP BY d.department_id, d.code, d.name, d.description, d.created_at, d.updated_at"

_UPDATABLE = {"name", "description"}


def _row_to_department(r: dict) -> Department:
    return Department(
        department_id=int(r["department_id"]),
        code=r["code"],
        name=r["name"],
        description=r.get("description"),
        employee_count=int(r.get("employee_count") or 0),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE d.department_id=%s" + _GROUP, (int(department_id),))
            row = fetchone(cur)
            return _row_to_department(row) if row else None

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + _GROUP + " ORDER BY d.name")
            return [_row_to_department(r) for r in fetchall(cur)]

    def create_department(self, *, code: str, name: str, description: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO departments(code, name, description) VALUES(%s,%s,%s)",
                (code, name, description),
            )
            return int(cur.lastrowid)

    def update_fields(self, department_id: int, values: Mapping[str, Any]) -> bool:
        cols = [c for c in values if c in _UPDATABLE]
        if not cols:
            return False
        sets = ", ".join(f"{c}=%s" for c in cols)
        params = [values[c] for c in cols] + [int(department_id)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE departments SET {sets} WHERE department_id=%s", tuple(params))
            return cur.rowcount > 0
