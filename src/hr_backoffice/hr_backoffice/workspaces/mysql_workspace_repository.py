from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..core.enums import UserType, WorkspaceMemberRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Workspace, WorkspaceMember
from .repository import WorkspaceRepository

_SELECT_WORKSPACE = """
    SELECT w.workspace_id, w.project_id, w.name, w.description, w.settings, w.is_active,
           w.created_at, w.updated_at, p.name AS project_name
    FROM workspaces w
    LEFT JOIN projects p ON p.project_id = w.project_id
"""

_SELECT_MEMBER = """
    SELECT wm.member_id, wm.workspace_id, wm.user_id, wm.user_type, wm.role, wm.permissions, wm.joined_at,
           COALESCE(CONCAT(e.first_name, ' ', e.last_name), c.company_name) AS display_name,
           COALESCE(e.email, c.contact_email) AS email
    FROM workspace_members wm
    LEFT JOIN employees e ON wm.user_type = 'employee' AND e.employee_id = wm.user_id
    LEFT JOIN clients c ON wm.user_type = 'client' AND c.client_id = wm.user_id
"""


def _row_to_workspace(r: dict) -> Workspace:
    role = r.get("member_role")
    return Workspace(
        workspace_id=int(r["workspace_id"]),
        project_id=r.get("project_id"),
        name=r["name"],
        description=r.get("description"),
        settings=load_json(r.get("settings"), {}) or {},
        is_active=bool(r.get("is_active", True)),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        project_name=r.get("project_name"),
        member_role=WorkspaceMemberRole(role) if role else None,
    )


def _row_to_member(r: dict) -> WorkspaceMember:
    return WorkspaceMember(
        member_id=int(r["member_id"]),
        workspace_id=int(r["workspace_id"]),
        user_id=int(r["user_id"]),
        user_type=UserType(r["user_type"]),
        role=WorkspaceMemberRole(r["role"]),
        permissions=list(load_json(r.get("permissions"), []) or []),
        joined_at=r.get("joined_at"),
        display_name=r.get("display_name"),
        email=r.get("email"),
    )


class MySQLWorkspaceRepository(WorkspaceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, workspace_id: int) -> Optional[Workspace]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_WORKSPACE + " WHERE w.workspace_id=%s", (int(workspace_id),))
            row = fetchone(cur)
            return _row_to_workspace(row) if row else None

    def list_for_member(self, *, user_id: int, user_type: UserType) -> Sequence[Workspace]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT w.workspace_id, w.project_id, w.name, w.description, w.settings, w.is_active,
                       w.created_at, w.updated_at, p.name AS project_name, wm.role AS member_role
                FROM workspace_members wm
                JOIN workspaces w ON w.workspace_id = wm.workspace_id
                LEFT JOIN projects p ON p.project_id = w.project_id
                WHERE wm.user_id=%s AND wm.user_type=%s AND w.is_active=1
                ORDER BY w.updated_at DESC, w.workspace_id DESC
                """,
                (int(user_id), UserType(user_type).value),
            )
            return [_row_to_workspace(r) for r in fetchall(cur)]

    def create_workspace(
        self,
        *,
        name: str,
        project_id: Optional[int],
        description: Optional[str],
        settings: Mapping[str, Any],
        creator: Optional[tuple[int, UserType]] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO workspaces(project_id, name, description, settings, is_active) VALUES(%s,%s,%s,%s,1)",
                (project_id, name, description, dump_json(dict(settings))),
            )
            workspace_id = int(cur.lastrowid)
            if creator is not None:
                user_id, user_type = creator
                cur.execute(
                    """
                    INSERT INTO workspace_members(workspace_id, user_id, user_type, role, permissions)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (workspace_id, int(user_id), UserType(user_type).value, WorkspaceMemberRole.ADMIN.value, dump_json([])),
                )
            return workspace_id

    def get_member(self, *, workspace_id: int, user_id: int, user_type: UserType) -> Optional[WorkspaceMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_MEMBER + " WHERE wm.workspace_id=%s AND wm.user_id=%s AND wm.user_type=%s",
                (int(workspace_id), int(user_id), UserType(user_type).value),
            )
            row = fetchone(cur)
            return _row_to_member(row) if row else None

    def get_member_by_id(self, member_id: int) -> Optional[WorkspaceMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_MEMBER + " WHERE wm.member_id=%s", (int(member_id),))
            row = fetchone(cur)
            return _row_to_member(row) if row else None

    def list_members(self, workspace_id: int) -> Sequence[WorkspaceMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_MEMBER + " WHERE wm.workspace_id=%s ORDER BY wm.role, wm.joined_at",
                (int(workspace_id),),
            )
            return [_row_to_member(r) for r in fetchall(cur)]

    def add_member(
        self, *, workspace_id: int, user_id: int, user_type: UserType, role: WorkspaceMemberRole
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO workspace_members(workspace_id, user_id, user_type, role, permissions)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(workspace_id), int(user_id), UserType(user_type).value, WorkspaceMemberRole(role).value, dump_json([])),
            )
            return int(cur.lastrowid)

    def remove_member(self, *, workspace_id: int, member_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM workspace_members WHERE member_id=%s AND workspace_id=%s",
                (int(member_id), int(workspace_id)),
            )
            return cur.rowcount > 0
