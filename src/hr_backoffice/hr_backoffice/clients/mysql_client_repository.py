from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, where_clause
from .model import Client
from .repository import ClientRepository

_SELECT = """
    SELECT client_id, company_name, contact_email, contact_person, contact_phone, address,
           is_active, password_hash, last_login, created_by, created_at, updated_at
    FROM clients
"""

_UPDATABLE = {"company_name", "contact_person", "contact_phone"}


def _row_to_client(r: dict) -> Client:
    return Client(
        client_id=int(r["client_id"]),
        company_name=r["company_name"],
        contact_email=r["contact_email"],
        contact_person=r.get("contact_person"),
        contact_phone=r.get("contact_phone"),
        address=load_json(r.get("address")),
        is_active=bool(r.get("is_active", True)),
        password_hash=r.get("password_hash"),
        last_login=r.get("last_login"),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLClientRepository(ClientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, client_id: int) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE client_id=%s", (int(client_id),))
            row = fetchone(cur)
            return _row_to_client(row) if row else None

    def get_by_email(self, email: str) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE contact_email=%s", (email.lower(),))
            row = fetchone(cur)
            return _row_to_client(row) if row else None

    def list_all(self, *, search: Optional[str] = None, is_active: Optional[bool] = None) -> Sequence[Client]:
        clauses: list[str] = []
        params: list[object] = []
        if search:
            like = f"%{search}%"
            clauses.append("(company_name LIKE %s OR contact_email LIKE %s OR contact_person LIKE %s)")
            params.extend([like, like, like])
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(int(bool(is_active)))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where_clause(clauses)} ORDER BY company_name", tuple(params))
            return [_row_to_client(r) for r in fetchall(cur)]

    def create_client(self, *, values: Mapping[str, Any], created_by: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO clients(
                    company_name, contact_email, contact_person, contact_phone, address,
                    password_hash, is_active, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (
                    values["company_name"],
                    values["contact_email"],
                    values.get("contact_person"),
                    values.get("contact_phone"),
                    dump_json(values.get("address")),
                    values.get("password_hash"),
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, client_id: int, values: Mapping[str, Any]) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for col, val in values.items():
            if col == "address":
                sets.append("address=%s")
                params.append(dump_json(val))
            elif col in _UPDATABLE:
                sets.append(f"{col}=%s")
                params.append(val)
        if not sets:
            return False
        params.append(int(client_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE clients SET {', '.join(sets)} WHERE client_id=%s", tuple(params))
            return cur.rowcount > 0

    def set_active(self, client_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE clients SET is_active=%s WHERE client_id=%s", (int(bool(is_active)), int(client_id)))
            return cur.rowcount > 0

    def delete_by_id(self, client_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM clients WHERE client_id=%s", (int(client_id),))
            return cur.rowcount > 0

    def count_projects(self, client_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM projects WHERE client_id=%s", (int(client_id),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def set_password_hash(self, client_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE clients SET password_hash=%s WHERE client_id=%s", (password_hash, int(client_id)))
            return cur.rowcount > 0

    def touch_last_login(self, client_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE clients SET last_login=NOW() WHERE client_id=%s", (int(client_id),))
