from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..core.enums import ProjectStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, where_clause
from .model import Project
from .repository import ProjectRepository

_SELECT = """
    SELECT p.project_id, p.name, p.description, p.client_id, p.department_id, p.manager_id,
           p.status, p.start_date, p.end_date, p.budget, p.created_by, p.created_at, p.updated_at,
           c.company_name AS client_name,
           d.name AS department_name,
           CONCAT(m.first_name, ' ', m.last_name) AS manager_name,
           (SELECT MIN(w.workspace_id) FROM workspaces w WHERE w.project_id = p.project_id) AS workspace_id
    FROM projects p
    LEFT JOIN clients c ON c.client_id = p.client_id
    LEFT JOIN departments d ON d.department_id = p.department_id
    LEFT JOIN employees m ON m.employee_id = p.manager_id
"""

_UPDATABLE = {
    "name", "description", "client_id", "department_id", "manager_id",
    "status", "start_date", "end_date", "budget",
}


def _row_to_project(r: dict) -> Project:
    return Project(
        project_id=int(r["project_id"]),
        name=r["name"],
        description=r.get("description"),
        client_id=r.get("client_id"),
        department_id=r.get("department_id"),
        manager_id=r.get("manager_id"),
        status=ProjectStatus(r["status"]),
        start_date=r.get("start_date"),
        end_date=r.get("end_date"),
        budget=r.get("budget"),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        client_name=r.get("client_name"),
        department_name=r.get("department_name"),
        manager_name=r.get("manager_name"),
        workspace_id=r.get("workspace_id"),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.project_id=%s", (int(project_id),))
            row = fetchone(cur)
            return _row_to_project(row) if row else None

    def search(
        self,
        *,
        status: Optional[ProjectStatus] = None,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        client_id: Optional[int] = None,
        assigned_employee: Optional[tuple[int, Optional[int]]] = None,
    ) -> Sequence[Project]:
        clauses: list[str] = []
        params: list[object] = []
        if status is not None:
            clauses.append("p.status=%s")
            params.append(ProjectStatus(status).value)
        if search:
            clauses.append("(p.name LIKE %s OR p.description LIKE %s)")
            params.extend([f"%{search}%", f"%{search}%"])
        if department_id is not None:
            clauses.append("p.department_id=%s")
            params.append(int(department_id))
        if client_id is not None:
            clauses.append("p.client_id=%s")
            params.append(int(client_id))
        if assigned_employee is not None:
            employee_id, employee_department = assigned_employee
            if employee_department is None:
                clauses.append("p.manager_id=%s")
                params.append(int(employee_id))
            else:
                clauses.append("(p.manager_id=%s OR p.department_id=%s)")
                params.extend([int(employee_id), int(employee_department)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where_clause(clauses)} ORDER BY p.created_at DESC, p.project_id DESC",
                tuple(params),
            )
            return [_row_to_project(r) for r in fetchall(cur)]

    def create_with_workspace(
        self,
        *,
        values: Mapping[str, Any],
        workspace_name: str,
        workspace_description: Optional[str],
        created_by: Optional[int],
    ) -> tuple[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO projects(
                    name, description, client_id, department_id, manager_id,
                    status, start_date, end_date, budget, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    values["name"],
                    values.get("description"),
                    values.get("client_id"),
                    values.get("department_id"),
                    values.get("manager_id"),
                    ProjectStatus(values.get("status", ProjectStatus.ACTIVE)).value,
                    values.get("start_date"),
                    values.get("end_date"),
                    values.get("budget"),
                    created_by,
                ),
            )
            project_id = int(cur.lastrowid)
            cur.execute(
                """
                INSERT INTO workspaces(project_id, name, description, settings, is_active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (project_id, workspace_name, workspace_description, dump_json({})),
            )
            return project_id, int(cur.lastrowid)

    def update_fields(self, project_id: int, values: Mapping[str, Any]) -> bool:
        cols = [c for c in values if c in _UPDATABLE]
        if not cols:
            return False
        params: list[object] = []
        for c in cols:
            v = values[c]
            params.append(v.value if isinstance(v, ProjectStatus) else v)
        params.append(int(project_id))
        sets = ", ".join(f"{c}=%s" for c in cols)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE projects SET {sets} WHERE project_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete_by_id(self, project_id: int) -> bool:
        pid = int(project_id)
        with db_cursor(self._conn_factory) as (_, cur):
            # Replies reference their thread root, drop them first.
            cur.execute(
                """
                DELETE m FROM messages m
                JOIN workspaces w ON w.workspace_id = m.workspace_id
                WHERE w.project_id=%s AND m.thread_id IS NOT NULL
                """,
                (pid,),
            )
            cur.execute(
                "DELETE m FROM messages m JOIN workspaces w ON w.workspace_id = m.workspace_id WHERE w.project_id=%s",
                (pid,),
            )
            cur.execute(
                """
                DELETE wm FROM workspace_members wm
                JOIN workspaces w ON w.workspace_id = wm.workspace_id
                WHERE w.project_id=%s
                """,
                (pid,),
            )
            cur.execute("DELETE FROM workspaces WHERE project_id=%s", (pid,))
            cur.execute("DELETE FROM projects WHERE project_id=%s", (pid,))
            return cur.rowcount > 0
