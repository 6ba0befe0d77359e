from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import UserType, WorkspaceMemberRole


@dataclass(frozen=True)
class Workspace:
    workspace_id: int
    name: str
    project_id: Optional[int] = None
    description: Optional[str] = None
    settings: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Joined, read-only
    project_name: Optional[str] = None
    member_role: Optional[WorkspaceMemberRole] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.workspace_id,
            "name": self.name,
            "description": self.description,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "settings": self.settings,
            "is_active": self.is_active,
            "role": self.member_role.value if self.member_role else None,
            "created_at": iso_or_none(self.created_at),
            "updated_at": iso_or_none(self.updated_at),
        }


@dataclass(frozen=True)
class WorkspaceMember:
    """Membership row. ``user_id`` points at employees or clients depending on ``user_type``."""

    member_id: int
    workspace_id: int
    user_id: int
    user_type: UserType
    role: WorkspaceMemberRole = WorkspaceMemberRole.MEMBER
    permissions: list[str] = field(default_factory=list)
    joined_at: Optional[datetime] = None

    display_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == WorkspaceMemberRole.ADMIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.member_id,
            "workspace_id": self.workspace_id,
            "user_id": self.user_id,
            "user_type": self.user_type.value,
            "role": self.role.value,
            "permissions": list(self.permissions),
            "name": self.display_name,
            "email": self.email,
            "joined_at": iso_or_none(self.joined_at),
        }
