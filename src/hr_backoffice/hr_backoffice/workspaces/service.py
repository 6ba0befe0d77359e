from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..auth.assignment import AssignmentLookup
from ..auth.guards import require_permission
from ..auth.permissions import (
    MESSAGES_DELETE_OWN,
    MESSAGES_READ,
    MESSAGES_SEND,
    MESSAGES_UPDATE_OWN,
    WORKSPACES_ACCESS_ASSIGNED,
    WORKSPACES_CREATE,
    WORKSPACES_READ,
    WORKSPACES_UPDATE,
)
from ..auth.policy import EMPTY_CONTEXT, AccessContext, authorize
from ..auth.principal import Principal
from ..clients.repository import ClientRepository
from ..common.pagination import PageRequest
from ..common.validators import optional_int, parse_input
from ..core.constants import DELETED_MESSAGE_PLACEHOLDER
from ..core.enums import UserType
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from ..database.mysql_base import CONFLICT_MESSAGES
from ..employees.repository import EmployeeRepository
from ..projects.repository import ProjectRepository
from .message_model import Message
from .message_repository import MessageRepository
from .model import Workspace, WorkspaceMember
from .repository import WorkspaceRepository
from .schemas import AddMemberInput, CreateWorkspaceInput, EditMessageInput, ListMessagesInput, SendMessageInput

logger = logging.getLogger(__name__)

MEMBER_CONSTRAINT = "uq_workspace_members_user"


def _workspace_arg(svc, kw) -> AccessContext:
    return AccessContext(workspace_id=optional_int(kw.get("workspace_id")))


class WorkspaceService:
    """Use case: workspaces and their members.

    Members are managed by holders of ``workspaces:update`` or by the
    workspace's own admin members.
    """

    def __init__(
        self,
        workspaces: WorkspaceRepository,
        projects: ProjectRepository,
        employees: EmployeeRepository,
        clients: ClientRepository,
        assignments: AssignmentLookup,
    ):
        self._workspaces = workspaces
        self._projects = projects
        self._employees = employees
        self._clients = clients
        self._assignments = assignments

    @require_permission(WORKSPACES_READ, WORKSPACES_ACCESS_ASSIGNED)
    def list_mine(self, *, principal: Principal) -> Sequence[Workspace]:
        return self._workspaces.list_for_member(user_id=principal.id, user_type=principal.user_type)

    @require_permission(WORKSPACES_CREATE)
    def create(self, *, principal: Principal, data: Mapping[str, Any]) -> Workspace:
        payload = parse_input(CreateWorkspaceInput, data)
        if payload.project_id is not None and not self._projects.get_by_id(payload.project_id):
            raise ReferenceNotFoundError("Project not found")
        workspace_id = self._workspaces.create_workspace(
            name=payload.name,
            project_id=payload.project_id,
            description=payload.description,
            settings=payload.settings,
            creator=(principal.id, principal.user_type),
        )
        logger.info("Workspace %s created by %s:%s", workspace_id, principal.user_type.value, principal.id)
        return self._require(workspace_id)

    @require_permission(WORKSPACES_READ, WORKSPACES_ACCESS_ASSIGNED, context=_workspace_arg)
    def get(self, *, principal: Principal, workspace_id: int) -> Workspace:
        return self._require(workspace_id)

    @require_permission(WORKSPACES_READ, WORKSPACES_ACCESS_ASSIGNED, context=_workspace_arg)
    def members(self, *, principal: Principal, workspace_id: int) -> Sequence[WorkspaceMember]:
        self._require(workspace_id)
        return self._workspaces.list_members(int(workspace_id))

    def add_member(self, *, principal: Principal, workspace_id: int, data: Mapping[str, Any]) -> WorkspaceMember:
        self._require_manager(principal, workspace_id)
        self._require(workspace_id)
        payload = parse_input(AddMemberInput, data)

        if payload.user_type == UserType.EMPLOYEE:
            exists = self._employees.get_by_id(payload.user_id) is not None
        else:
            exists = self._clients.get_by_id(payload.user_id) is not None
        if not exists:
            raise ReferenceNotFoundError("User not found")

        if self._workspaces.get_member(
            workspace_id=int(workspace_id), user_id=payload.user_id, user_type=payload.user_type
        ):
            raise ConflictError(CONFLICT_MESSAGES[MEMBER_CONSTRAINT], constraint=MEMBER_CONSTRAINT)

        member_id = self._workspaces.add_member(
            workspace_id=int(workspace_id), user_id=payload.user_id, user_type=payload.user_type, role=payload.role
        )
        logger.info(
            "%s:%s added to workspace %s as %s by %s",
            payload.user_type.value,
            payload.user_id,
            workspace_id,
            payload.role.value,
            principal.id,
        )
        return self._workspaces.get_member_by_id(member_id)

    def remove_member(self, *, principal: Principal, workspace_id: int, member_id: int) -> None:
        self._require_manager(principal, workspace_id)
        member = self._workspaces.get_member_by_id(int(member_id))
        if not member or member.workspace_id != int(workspace_id):
            raise NotFoundError("Member not found")
        self._workspaces.remove_member(workspace_id=int(workspace_id), member_id=member.member_id)
        logger.info("Member %s removed from workspace %s by %s", member.member_id, workspace_id, principal.id)

    def _require_manager(self, principal: Optional[Principal], workspace_id: int) -> None:
        if principal is None:
            raise AuthenticationError("Authentication required")
        if principal.is_active:
            if authorize(principal, WORKSPACES_UPDATE, EMPTY_CONTEXT):
                return
            member = self._workspaces.get_member(
                workspace_id=int(workspace_id), user_id=principal.id, user_type=principal.user_type
            )
            if member and member.is_admin:
                return
        logger.warning(
            "Denied member management on workspace %s to %s:%s", workspace_id, principal.user_type.value, principal.id
        )
        raise AuthorizationError()

    def _require(self, workspace_id: int) -> Workspace:
        workspace = self._workspaces.get_by_id(int(workspace_id))
        if not workspace:
            raise NotFoundError("Workspace not found")
        return workspace


def _message_sender(svc: "MessageService", kw) -> AccessContext:
    message = svc.find(kw.get("message_id"))
    if not message:
        return EMPTY_CONTEXT
    return AccessContext(target_user_id=message.sender_id, target_user_type=message.sender_type)


def _message_workspace(svc: "MessageService", kw) -> AccessContext:
    message = svc.find(kw.get("message_id"))
    return AccessContext(workspace_id=message.workspace_id if message else None)


class MessageService:
    """Use case: workspace messaging with one level of threads."""

    def __init__(self, messages: MessageRepository, workspaces: WorkspaceRepository, assignments: AssignmentLookup):
        self._messages = messages
        self._workspaces = workspaces
        self._assignments = assignments

    def find(self, message_id: Any) -> Optional[Message]:
        mid = optional_int(message_id)
        return self._messages.get_by_id(mid) if mid is not None else None

    @require_permission(MESSAGES_READ)
    @require_permission(WORKSPACES_READ, WORKSPACES_ACCESS_ASSIGNED, context=_workspace_arg)
    def list(
        self, *, principal: Principal, workspace_id: int, query: Optional[Mapping[str, Any]] = None
    ) -> Sequence[Message]:
        params = parse_input(ListMessagesInput, query)
        if params.thread_id is not None:
            root = self._messages.get_by_id(params.thread_id)
            if not root or root.workspace_id != int(workspace_id):
                raise NotFoundError("Thread not found")
        page = PageRequest.of(params.page, params.limit)
        return self._messages.list_messages(
            workspace_id=int(workspace_id), thread_id=params.thread_id, limit=page.limit, offset=page.offset
        )

    @require_permission(MESSAGES_SEND)
    @require_permission(WORKSPACES_READ, WORKSPACES_ACCESS_ASSIGNED, context=_workspace_arg)
    def send(self, *, principal: Principal, workspace_id: int, data: Mapping[str, Any]) -> Message:
        workspace = self._workspaces.get_by_id(int(workspace_id))
        if not workspace:
            raise NotFoundError("Workspace not found")
        if not workspace.is_active:
            raise ValidationError("Workspace is archived")

        payload = parse_input(SendMessageInput, data)
        thread_id = payload.thread_id
        if thread_id is not None:
            root = self._messages.get_by_id(thread_id)
            if not root or root.workspace_id != workspace.workspace_id or root.is_deleted:
                raise ReferenceNotFoundError("Thread not found")
            # Replies always hang off the top-level message.
            thread_id = root.thread_id or root.message_id

        message_id = self._messages.create_message(
            workspace_id=workspace.workspace_id,
            sender_id=principal.id,
            sender_type=principal.user_type,
            content=payload.content,
            message_type=payload.message_type,
            thread_id=thread_id,
            attachments=[a.model_dump(exclude_none=True) for a in payload.attachments],
        )
        return self._require(message_id)

    @require_permission(MESSAGES_UPDATE_OWN, context=_message_sender)
    def edit(self, *, principal: Principal, message_id: int, data: Mapping[str, Any]) -> Message:
        message = self._require(message_id)
        if message.is_deleted:
            raise NotFoundError("Message not found")
        payload = parse_input(EditMessageInput, data)
        self._messages.update_content(message.message_id, payload.content)
        return self._require(message_id)

    @require_permission(MESSAGES_DELETE_OWN, context=_message_sender)
    def delete(self, *, principal: Principal, message_id: int) -> None:
        message = self._require(message_id)
        if message.is_deleted:
            return
        self._messages.soft_delete(message.message_id, DELETED_MESSAGE_PLACEHOLDER)
        logger.info("Message %s deleted by %s:%s", message.message_id, principal.user_type.value, principal.id)

    @require_permission(MESSAGES_READ)
    @require_permission(WORKSPACES_READ, WORKSPACES_ACCESS_ASSIGNED, context=_message_workspace)
    def replies(self, *, principal: Principal, message_id: int) -> Sequence[Message]:
        message = self._require(message_id)
        return self._messages.list_messages(workspace_id=message.workspace_id, thread_id=message.message_id, limit=100)

    def _require(self, message_id: int) -> Message:
        message = self._messages.get_by_id(int(message_id))
        if not message:
            raise NotFoundError("Message not found")
        return message
