from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from ..common.schemas import InputSchema, QuerySchema
from ..core.enums import MessageType, UserType, WorkspaceMemberRole


class CreateWorkspaceInput(InputSchema):
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    project_id: Optional[int] = Field(None, gt=0)
    settings: dict[str, Any] = Field(default_factory=dict)


class AddMemberInput(InputSchema):
    user_id: int = Field(..., gt=0)
    user_type: UserType
    role: WorkspaceMemberRole = WorkspaceMemberRole.MEMBER


class AttachmentInput(InputSchema):
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=2048)
    size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = Field(None, max_length=100)


class SendMessageInput(InputSchema):
    content: str = Field(..., min_length=1, max_length=10000)
    message_type: MessageType = MessageType.TEXT
    thread_id: Optional[int] = Field(None, gt=0)
    attachments: list[AttachmentInput] = Field(default_factory=list)


class EditMessageInput(InputSchema):
    content: str = Field(..., min_length=1, max_length=10000)


class ListMessagesInput(QuerySchema):
    thread_id: Optional[int] = Field(None, gt=0)
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=100)
