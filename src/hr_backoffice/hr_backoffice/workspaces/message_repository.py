from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import MessageType, UserType
from .message_model import Message


class MessageRepository(Protocol):
    def get_by_id(self, message_id: int) -> Optional[Message]:
        raise NotImplementedError

    def list_messages(
        self, *, workspace_id: int, thread_id: Optional[int] = None, limit: int = 50, offset: int = 0
    ) -> Sequence[Message]:
        """Visible messages, newest first. No ``thread_id`` means top-level messages only."""
        raise NotImplementedError

    def create_message(
        self,
        *,
        workspace_id: int,
        sender_id: int,
        sender_type: UserType,
        content: str,
        message_type: MessageType,
        thread_id: Optional[int],
        attachments: Sequence[dict[str, Any]],
    ) -> int:
        raise NotImplementedError

    def update_content(self, message_id: int, content: str) -> bool:
        raise NotImplementedError

    def soft_delete(self, message_id: int, placeholder: str) -> bool:
        raise NotImplementedError
