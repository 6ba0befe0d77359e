from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import ProjectStatus
from .model import Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def search(
        self,
        *,
        status: Optional[ProjectStatus] = None,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        client_id: Optional[int] = None,
        assigned_employee: Optional[tuple[int, Optional[int]]] = None,
    ) -> Sequence[Project]:
        """``assigned_employee`` is ``(employee_id, department_id)``: rows they manage or their department's."""
        raise NotImplementedError

    def create_with_workspace(
        self,
        *,
        values: Mapping[str, Any],
        workspace_name: str,
        workspace_description: Optional[str],
        created_by: Optional[int],
    ) -> tuple[int, int]:
        """Insert the project and its workspace in one transaction; returns both ids."""
        raise NotImplementedError

    def update_fields(self, project_id: int, values: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, project_id: int) -> bool:
        raise NotImplementedError
