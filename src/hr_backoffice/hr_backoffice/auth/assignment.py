from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import UserType
from .principal import Principal


class AssignmentLookup(Protocol):
    """Answers "is this principal assigned to that project/workspace?"."""

    def is_assigned(self, principal: Principal, *, project_id: Optional[int] = None, workspace_id: Optional[int] = None) -> bool:
        raise NotImplementedError


def is_assigned_to_project(principal: Principal, project) -> bool:
    """Department match, manager of record, or owning client."""

    if project is None:
        return False
    if principal.user_type == UserType.CLIENT:
        return project.client_id is not None and int(project.client_id) == principal.id
    if project.manager_id is not None and int(project.manager_id) == principal.id:
        return True
    return (
        principal.department_id is not None
        and project.department_id is not None
        and int(project.department_id) == int(principal.department_id)
    )


class RepositoryAssignmentLookup(AssignmentLookup):
    def __init__(self, projects, workspaces):
        self._projects = projects
        self._workspaces = workspaces

    def is_assigned(self, principal: Principal, *, project_id: Optional[int] = None, workspace_id: Optional[int] = None) -> bool:
        if workspace_id is not None:
            if self._workspaces.get_member(
                workspace_id=int(workspace_id), user_id=principal.id, user_type=principal.user_type
            ):
                return True
            workspace = self._workspaces.get_by_id(int(workspace_id))
            if not workspace or workspace.project_id is None:
                return False
            project_id = workspace.project_id

        if project_id is None:
            return False
        return is_assigned_to_project(principal, self._projects.get_by_id(int(project_id)))
