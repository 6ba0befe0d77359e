from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import UserType, WorkspaceMemberRole
from .model import Workspace, WorkspaceMember


class WorkspaceRepository(Protocol):
    def get_by_id(self, workspace_id: int) -> Optional[Workspace]:
        raise NotImplementedError

    def list_for_member(self, *, user_id: int, user_type: UserType) -> Sequence[Workspace]:
        raise NotImplementedError

    def create_workspace(
        self,
        *,
        name: str,
        project_id: Optional[int],
        description: Optional[str],
        settings: Mapping[str, Any],
        creator: Optional[tuple[int, UserType]] = None,
    ) -> int:
        """Insert the workspace; ``creator`` joins it as admin in the same transaction."""
        raise NotImplementedError

    def get_member(self, *, workspace_id: int, user_id: int, user_type: UserType) -> Optional[WorkspaceMember]:
        raise NotImplementedError

    def get_member_by_id(self, member_id: int) -> Optional[WorkspaceMember]:
        raise NotImplementedError

    def list_members(self, workspace_id: int) -> Sequence[WorkspaceMember]:
        raise NotImplementedError

    def add_member(
        self, *, workspace_id: int, user_id: int, user_type: UserType, role: WorkspaceMemberRole
    ) -> int:
        raise NotImplementedError

    def remove_member(self, *, workspace_id: int, member_id: int) -> bool:
        raise NotImplementedError
