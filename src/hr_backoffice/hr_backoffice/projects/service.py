from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..auth.assignment import AssignmentLookup
from ..auth.guards import require_permission
from ..auth.permissions import (
    PROJECTS_CREATE,
    PROJECTS_DELETE,
    PROJECTS_READ,
    PROJECTS_READ_ASSIGNED,
    PROJECTS_UPDATE,
    PROJECTS_UPDATE_ASSIGNED,
)
from ..auth.policy import AccessContext, authorize
from ..auth.principal import Principal
from ..clients.repository import ClientRepository
from ..common.validators import optional_int, parse_input
from ..core.exceptions import AuthorizationError, NotFoundError, ReferenceNotFoundError
from ..departments.repository import DepartmentRepository
from ..employees.repository import EmployeeRepository
from .model import Project
from .repository import ProjectRepository
from .schemas import CreateProjectInput, SearchProjectsInput, UpdateProjectInput

logger = logging.getLogger(__name__)

# Only full project managers may re-home a project.
OWNERSHIP_FIELDS = frozenset({"client_id", "department_id", "manager_id"})


def _project_arg(svc, kw) -> AccessContext:
    return AccessContext(project_id=optional_int(kw.get("project_id")))


class ProjectService:
    """Use case: client projects. Each project gets a workspace when it is created."""

    def __init__(
        self,
        projects: ProjectRepository,
        clients: ClientRepository,
        departments: DepartmentRepository,
        employees: EmployeeRepository,
        assignments: AssignmentLookup,
    ):
        self._projects = projects
        self._clients = clients
        self._departments = departments
        self._employees = employees
        self._assignments = assignments

    @require_permission(PROJECTS_CREATE)
    def create(self, *, principal: Principal, data: Mapping[str, Any]) -> Project:
        payload = parse_input(CreateProjectInput, data)
        self._check_references(
            client_id=payload.client_id, department_id=payload.department_id, manager_id=payload.manager_id
        )
        project_id, workspace_id = self._projects.create_with_workspace(
            values=payload.model_dump(),
            workspace_name=f"Workspace {payload.name}",
            workspace_description=f"Collaboration space for project {payload.name}",
            created_by=principal.id,
        )
        logger.info("Project %s created with workspace %s by %s", project_id, workspace_id, principal.id)
        return self._require(project_id)

    @require_permission(PROJECTS_READ, PROJECTS_READ_ASSIGNED)
    def list(self, *, principal: Principal, query: Optional[Mapping[str, Any]] = None) -> Sequence[Project]:
        params = parse_input(SearchProjectsInput, query)
        filters = params.model_dump()
        if authorize(principal, PROJECTS_READ):
            return self._projects.search(**filters)
        if principal.is_client:
            filters["client_id"] = principal.id
            return self._projects.search(**filters)
        return self._projects.search(assigned_employee=(principal.id, principal.department_id), **filters)

    @require_permission(PROJECTS_READ, PROJECTS_READ_ASSIGNED, context=_project_arg)
    def get(self, *, principal: Principal, project_id: int) -> Project:
        return self._require(project_id)

    @require_permission(PROJECTS_UPDATE, PROJECTS_UPDATE_ASSIGNED, context=_project_arg)
    def update(self, *, principal: Principal, project_id: int, data: Mapping[str, Any]) -> Project:
        self._require(project_id)
        payload = parse_input(UpdateProjectInput, data)
        values = payload.model_dump(exclude_unset=True)
        if not values:
            return self._require(project_id)

        if OWNERSHIP_FIELDS & set(values) and not authorize(principal, PROJECTS_UPDATE):
            logger.warning("Principal %s tried to reassign project %s", principal.id, project_id)
            raise AuthorizationError()
        self._check_references(
            client_id=values.get("client_id"),
            department_id=values.get("department_id"),
            manager_id=values.get("manager_id"),
        )
        self._projects.update_fields(int(project_id), values)
        return self._require(project_id)

    @require_permission(PROJECTS_DELETE)
    def delete(self, *, principal: Principal, project_id: int) -> None:
        project = self._require(project_id)
        self._projects.delete_by_id(project.project_id)
        logger.info("Project %s deleted by %s", project.project_id, principal.id)

    def _check_references(
        self, *, client_id: Optional[int], department_id: Optional[int], manager_id: Optional[int]
    ) -> None:
        if client_id is not None and not self._clients.get_by_id(client_id):
            raise ReferenceNotFoundError("Client not found")
        if department_id is not None and not self._departments.get_by_id(department_id):
            raise ReferenceNotFoundError("Department not found")
        if manager_id is not None and not self._employees.get_by_id(manager_id):
            raise ReferenceNotFoundError("Manager not found")

    def _require(self, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        return project
