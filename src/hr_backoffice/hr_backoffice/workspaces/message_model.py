from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import MessageType, UserType


@dataclass(frozen=True)
class Message:
    message_id: int
    workspace_id: int
    sender_id: int
    sender_type: UserType
    content: str
    message_type: MessageType = MessageType.TEXT
    thread_id: Optional[int] = None
    attachments: list[dict[str, Any]] = field(default_factory=list)
    is_edited: bool = False
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    sender_name: Optional[str] = None
    reply_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.message_id,
            "workspace_id": self.workspace_id,
            "sender": {"id": self.sender_id, "type": self.sender_type.value, "name": self.sender_name},
            "content": self.content,
            "message_type": self.message_type.value,
            "thread_id": self.thread_id,
            "attachments": list(self.attachments),
            "is_edited": self.is_edited,
            "is_deleted": self.is_deleted,
            "reply_count": self.reply_count,
            "created_at": iso_or_none(self.created_at),
            "updated_at": iso_or_none(self.updated_at),
        }
