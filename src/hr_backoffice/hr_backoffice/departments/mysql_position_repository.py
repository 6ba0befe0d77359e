from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .position_model import Position
from .position_repository import PositionRepository

_SELECT = """
    SELECT p.position_id, p.title, p.code, p.department_id, p.description,
           p.is_manager, p.is_medical, p.created_at, d.name AS department_name
    FROM positions p
    LEFT JOIN departments d ON d.department_id = p.department_id
"""

_UPDATABLE = {"title", "description", "is_manager", "is_medical"}


def _row_to_position(r: dict) -> Position:
    return Position(
        position_id=int(r["position_id"]),
        title=r["title"],
        code=r["code"],
        department_id=r.get("department_id"),
        description=r.get("description"),
        is_manager=bool(r.get("is_manager")),
        is_medical=bool(r.get("is_medical")),
        created_at=r.get("created_at"),
        department_name=r.get("department_name"),
    )


class MySQLPositionRepository(PositionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, position_id: int) -> Optional[Position]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.position_id=%s", (int(position_id),))
            row = fetchone(cur)
            return _row_to_position(row) if row else None

    def list_all(self, *, department_id: Optional[int] = None) -> Sequence[Position]:
        sql = _SELECT
        params: tuple = ()
        if department_id is not None:
            sql += " WHERE p.department_id=%s"
            params = (int(department_id),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY p.title", params)
            return [_row_to_position(r) for r in fetchall(cur)]

    def create_position(
        self,
        *,
        title: str,
        code: str,
        department_id: int,
        description: Optional[str],
        is_manager: bool,
        is_medical: bool,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO positions(title, code, department_id, description, is_manager, is_medical)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (title, code, int(department_id), description, int(bool(is_manager)), int(bool(is_medical))),
            )
            return int(cur.lastrowid)

    def update_fields(self, position_id: int, values: Mapping[str, Any]) -> bool:
        cols = [c for c in values if c in _UPDATABLE]
        if not cols:
            return False
        sets = ", ".join(f"{c}=%s" for c in cols)
        params = [values[c] for c in cols] + [int(position_id)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE positions SET {sets} WHERE position_id=%s", tuple(params))
            return cur.rowcount > 0
