from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import MessageType, UserType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .message_model import Message
from .message_repository import MessageRepository

_SELECT = """
    SELECT m.message_id, m.workspace_id, m.sender_id, m.sender_type, m.content, m.message_type,
           m.thread_id, m.attachments, m.is_edited, m.is_deleted, m.created_at, m.updated_at,
           COALESCE(CONCAT(e.first_name, ' ', e.last_name), c.company_name, 'Unknown user') AS sender_name,
           (SELECT COUNT(*) FROM messages r WHERE r.thread_id = m.message_id AND r.is_deleted = 0) AS reply_count
    FROM messages m
    LEFT JOIN employees e ON m.sender_type = 'employee' AND e.employee_id = m.sender_id
    LEFT JOIN clients c ON m.sender_type = 'client' AND c.client_id = m.sender_id
"""


def _row_to_message(r: dict) -> Message:
    return Message(
        message_id=int(r["message_id"]),
        workspace_id=int(r["workspace_id"]),
        sender_id=int(r["sender_id"]),
        sender_type=UserType(r["sender_type"]),
        content=r["content"],
        message_type=MessageType(r.get("message_type") or MessageType.TEXT.value),
        thread_id=r.get("thread_id"),
        attachments=list(load_json(r.get("attachments"), []) or []),
        is_edited=bool(r.get("is_edited")),
        is_deleted=bool(r.get("is_deleted")),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        sender_name=r.get("sender_name"),
        reply_count=int(r.get("reply_count") or 0),
    )


class MySQLMessageRepository(MessageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, message_id: int) -> Optional[Message]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE m.message_id=%s", (int(message_id),))
            row = fetchone(cur)
            return _row_to_message(row) if row else None

    def list_messages(
        self, *, workspace_id: int, thread_id: Optional[int] = None, limit: int = 50, offset: int = 0
    ) -> Sequence[Message]:
        sql = _SELECT + " WHERE m.workspace_id=%s AND m.is_deleted=0"
        params: list[object] = [int(workspace_id)]
        if thread_id is None:
            sql += " AND m.thread_id IS NULL"
        else:
            sql += " AND m.thread_id=%s"
            params.append(int(thread_id))
        sql += " ORDER BY m.created_at DESC, m.message_id DESC LIMIT %s OFFSET %s"
        params.extend([int(limit), int(offset)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_message(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO messages(workspace_id, sender_id, sender_type, content, message_type, thread_id, attachments)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(workspace_id),
                    int(sender_id),
                    UserType(sender_type).value,
                    content,
                    MessageType(message_type).value,
                    thread_id,
                    dump_json(list(attachments)),
                ),
            )
            return int(cur.lastrowid)

    def update_content(self, message_id: int, content: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE messages SET content=%s, is_edited=1 WHERE message_id=%s AND is_deleted=0",
                (content, int(message_id)),
            )
            return cur.rowcount > 0

    def soft_delete(self, message_id: int, placeholder: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE messages SET content=%s, is_deleted=1 WHERE message_id=%s AND is_deleted=0",
                (placeholder, int(message_id)),
            )
            return cur.rowcount > 0
