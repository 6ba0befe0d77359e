from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import ProjectStatus


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str
    status: ProjectStatus = ProjectStatus.DRAFT
    description: Optional[str] = None
    client_id: Optional[int] = None
    department_id: Optional[int] = None
    manager_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Joined, read-only
    client_name: Optional[str] = None
    department_name: Optional[str] = None
    manager_name: Optional[str] = None
    workspace_id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.project_id,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "client": {"id": self.client_id, "name": self.client_name} if self.client_id is not None else None,
            "department": (
                {"id": self.department_id, "name": self.department_name} if self.department_id is not None else None
            ),
            "manager": {"id": self.manager_id, "name": self.manager_name} if self.manager_id is not None else None,
            "start_date": iso_or_none(self.start_date),
            "end_date": iso_or_none(self.end_date),
            "budget": str(self.budget) if self.budget is not None else None,
            "workspace_id": self.workspace_id,
            "created_at": iso_or_none(self.created_at),
            "updated_at": iso_or_none(self.updated_at),
        }
