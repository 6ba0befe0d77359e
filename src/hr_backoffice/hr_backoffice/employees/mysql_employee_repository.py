from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..core.constants import EMPLOYEE_SEQUENCE_WIDTH
from ..core.enums import EmployeeStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, where_clause
from .model import Employee, StatusChange
from .repository import EmployeeRepository

_SELECT = """
    SELECT e.employee_id, e.employee_number, e.first_name, e.last_name, e.email, e.phone,
           e.date_of_birth, e.address, e.emergency_contact, e.hire_date, e.termination_date,
           e.status, e.role, e.is_active, e.password_hash, e.last_login,
           e.department_id, e.position_id, e.manager_id,
           e.medical_license_number, e.license_expiry, e.version, e.created_at, e.updated_at,
           d.name AS department_name, d.code AS department_code,
           p.title AS position_title
    FROM employees e
    LEFT JOIN departments d ON d.department_id = e.department_id
    LEFT JOIN positions p ON p.position_id = e.position_id
"""

# Columns a partial update may touch; JSON ones are serialized.
_UPDATABLE = {
    "first_name", "last_name", "email", "phone", "date_of_birth", "hire_date",
    "department_id", "position_id", "manager_id", "medical_license_number", "license_expiry", "role",
}
_JSON_COLUMNS = {"address", "emergency_contact"}


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_number=r["employee_number"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        phone=r.get("phone"),
        date_of_birth=r.get("date_of_birth"),
        address=load_json(r.get("address")),
        emergency_contact=load_json(r.get("emergency_contact")),
        hire_date=r["hire_date"],
        termination_date=r.get("termination_date"),
        status=EmployeeStatus(r["status"]),
        role=Role(r["role"]),
        is_active=bool(r.get("is_active", True)),
        password_hash=r.get("password_hash"),
        last_login=r.get("last_login"),
        department_id=r.get("department_id"),
        position_id=r.get("position_id"),
        manager_id=r.get("manager_id"),
        medical_license_number=r.get("medical_license_number"),
        license_expiry=r.get("license_expiry"),
        version=int(r.get("version") or 1),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        department_name=r.get("department_name"),
        department_code=r.get("department_code"),
        position_title=r.get("position_title"),
    )


def _filters(search, department_id, position_id, status) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if search:
        like = f"%{search}%"
        clauses.append(
            "(e.first_name LIKE %s OR e.last_name LIKE %s OR e.email LIKE %s OR e.employee_number LIKE %s)"
        )
        params.extend([like, like, like, like])
    if department_id is not None:
        clauses.append("e.department_id=%s")
        params.append(int(department_id))
    if position_id is not None:
        clauses.append("e.position_id=%s")
        params.append(int(position_id))
    if status is not None:
        clauses.append("e.status=%s")
        params.append(EmployeeStatus(status).value)
    return where_clause(clauses), params


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.email=%s", (email.lower(),))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def email_exists(self, email: str, *, exclude_id: Optional[int] = None) -> bool:
        sql = "SELECT 1 FROM employees WHERE email=%s"
        params: list[object] = [email.lower()]
        if exclude_id is not None:
            sql += " AND employee_id<>%s"
            params.append(int(exclude_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            return fetchone(cur) is not None

    def last_employee_number(self, prefix: str) -> Optional[str]:
        # LIKE narrows on the index, REGEXP drops longer codes sharing the prefix.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_number FROM employees
                WHERE employee_number LIKE %s AND employee_number REGEXP %s
                ORDER BY employee_number DESC
                LIMIT 1
                """,
                (f"{prefix}%", f"^{prefix}[0-9]{{{EMPLOYEE_SEQUENCE_WIDTH}}}$"),
            )
            row = fetchone(cur)
            return row["employee_number"] if row else None

    def create_employee(self, *, employee_number: str, values: Mapping[str, Any], created_by: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(
                    employee_number, first_name, last_name, email, phone, date_of_birth,
                    password_hash, role, is_active, address, emergency_contact,
                    hire_date, status, department_id, position_id, manager_id,
                    medical_license_number, license_expiry, version, created_by, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1,%s,%s,%s,%s,%s,%s,%s,%s,%s,1,%s,%s)
                """,
                (
                    employee_number,
                    values["first_name"],
                    values["last_name"],
                    values["email"],
                    values.get("phone"),
                    values.get("date_of_birth"),
                    values.get("password_hash"),
                    Role(values.get("role", Role.EMPLOYEE)).value,
                    dump_json(values.get("address")),
                    dump_json(values.get("emergency_contact")),
                    values["hire_date"],
                    EmployeeStatus.ACTIVE.value,
                    values.get("department_id"),
                    values.get("position_id"),
                    values.get("manager_id"),
                    values.get("medical_license_number"),
                    values.get("license_expiry"),
                    created_by,
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def search(
        self,
        *,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        position_id: Optional[int] = None,
        status: Optional[EmployeeStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[Employee]:
        where, params = _filters(search, department_id, position_id, status)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY e.created_at DESC, e.employee_id DESC LIMIT %s OFFSET %s",
                tuple(params + [int(limit), int(offset)]),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def count(
        self,
        *,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        position_id: Optional[int] = None,
        status: Optional[EmployeeStatus] = None,
    ) -> int:
        where, params = _filters(search, department_id, position_id, status)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM employees e WHERE {where}", tuple(params))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def update_fields(self, employee_id: int, values: Mapping[str, Any], *, updated_by: Optional[int]) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for col, val in values.items():
            if col in _JSON_COLUMNS:
                sets.append(f"{col}=%s")
                params.append(dump_json(val))
            elif col in _UPDATABLE:
                sets.append(f"{col}=%s")
                params.append(val.value if isinstance(val, Role) else val)
            else:
                raise ValueError(f"Column {col!r} is not updatable")
        if not sets:
            return False

        sets.extend(["updated_by=%s", "version=version+1"])
        params.extend([updated_by, int(employee_id)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE employees SET {', '.join(sets)} WHERE employee_id=%s", tuple(params))
            return cur.rowcount > 0

    def change_status(
        self,
        *,
        employee_id: int,
        expected_status: EmployeeStatus,
        expected_version: int,
        new_status: EmployeeStatus,
        termination_date: Optional[date],
        effective_date: date,
        changed_by: Optional[int],
        reason: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET status=%s, termination_date=%s, version=version+1, updated_by=%s
                WHERE employee_id=%s AND status=%s AND version=%s
                """,
                (
                    EmployeeStatus(new_status).value,
                    termination_date,
                    changed_by,
                    int(employee_id),
                    EmployeeStatus(expected_status).value,
                    int(expected_version),
                ),
            )
            if cur.rowcount != 1:
                return False
            cur.execute(
                """
                INSERT INTO employee_status_history(
                    employee_id, from_status, to_status, effective_date, changed_by, reason
                )
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    EmployeeStatus(expected_status).value,
                    EmployeeStatus(new_status).value,
                    effective_date,
                    changed_by,
                    reason,
                ),
            )
            return True

    def list_status_history(self, employee_id: int) -> Sequence[StatusChange]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT history_id, employee_id, from_status, to_status, effective_date,
                       changed_by, reason, created_at
                FROM employee_status_history
                WHERE employee_id=%s
                ORDER BY created_at DESC, history_id DESC
                """,
                (int(employee_id),),
            )
            return [
                StatusChange(
                    history_id=int(r["history_id"]),
                    employee_id=int(r["employee_id"]),
                    from_status=EmployeeStatus(r["from_status"]),
                    to_status=EmployeeStatus(r["to_status"]),
                    effective_date=r["effective_date"],
                    changed_by=r.get("changed_by"),
                    reason=r.get("reason"),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]

    def count_by_status(self) -> Mapping[EmployeeStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS n FROM employees GROUP BY status")
            counts = {s: 0 for s in EmployeeStatus}
            for r in fetchall(cur):
                counts[EmployeeStatus(r["status"])] = int(r["n"])
            return counts

    def list_available_managers(self, *, department_id: Optional[int] = None) -> Sequence[Employee]:
        sql = _SELECT + " WHERE e.status=%s AND p.is_manager=1"
        params: list[object] = [EmployeeStatus.ACTIVE.value]
        if department_id is not None:
            sql += " AND e.department_id=%s"
            params.append(int(department_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY e.last_name, e.first_name", tuple(params))
            return [_row_to_employee(r) for r in fetchall(cur)]

    def set_password_hash(self, employee_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET password_hash=%s WHERE employee_id=%s",
                (password_hash, int(employee_id)),
            )
            return cur.rowcount > 0

    def touch_last_login(self, employee_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET last_login=NOW() WHERE employee_id=%s", (int(employee_id),))
