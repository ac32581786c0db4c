"""Message repository implementation."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Any, List, Optional

from core.models import Artifact, Attachment, Message, MessageRole
from .database import Database

SEARCH_LIMIT = 50


class MessageRepository:
    """SQLite implementation of message persistence.

    Attachments live in ``message_attachments`` and are written and read
    together with their message. Artifacts are stored as a JSON column.
    """

    def __init__(self, database: Database):
        self._db = database

    def add(self, message: Message) -> None:
        conn = self._db.get_connection()
        try:
            conn.execute(
                """
                INSERT INTO messages (id, chat_id, role, content, artifacts_json, timestamp, is_edited)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    message.id,
                    message.chat_id,
                    message.role.value,
                    message.content,
                    json.dumps([a.to_dict() for a in message.artifacts]),
                    message.timestamp.isoformat(),
                    int(message.is_edited),
                ),
            )
            conn.executemany(
                """
                INSERT INTO message_attachments
                    (id, message_id, position, name, path, type, size, is_project_file)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        attachment.id,
                        message.id,
                        position,
                        attachment.name,
                        attachment.path,
                        attachment.type,
                        attachment.size,
                        int(attachment.is_project_file),
                    )
                    for position, attachment in enumerate(message.attachments)
                ],
            )
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()

    def get_by_id(self, message_id: str) -> Optional[Message]:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            SELECT id, chat_id, role, content, artifacts_json, timestamp, is_edited
            FROM messages
            WHERE id = ?
            """,
            (message_id,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_message(row, self._attachments_for(message_id))

    def get_by_chat(self, chat_id: str) -> List[Message]:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            SELECT id, chat_id, role, content, artifacts_json, timestamp, is_edited
            FROM messages
            WHERE chat_id = ?
            ORDER BY timestamp ASC
            """,
            (chat_id,),
        )
        return [
            self._row_to_message(row, self._attachments_for(row["id"]))
            for row in cursor.fetchall()
        ]

    def update(self, message: Message) -> bool:
        """Persist edited content and artifacts. Role and timestamp never change."""
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            UPDATE messages
            SET content = ?, artifacts_json = ?, is_edited = ?
            WHERE id = ?
            """,
            (
                message.content,
                json.dumps([a.to_dict() for a in message.artifacts]),
                int(message.is_edited),
                message.id,
            ),
        )
        conn.commit()
        return cursor.rowcount > 0

    def delete(self, message_id: str) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute("DELETE FROM messages WHERE id = ?", (message_id,))
        conn.commit()
        return cursor.rowcount > 0

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> List[dict[str, Any]]:
        """Case-insensitive substring search over message content, newest first."""
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            SELECT m.chat_id, c.title AS chat_title, m.content, m.timestamp
            FROM messages m
            JOIN chats c ON c.id = m.chat_id
            WHERE m.content LIKE ? ESCAPE '\\'
            ORDER BY m.timestamp DESC
            LIMIT ?
            """,
            (f"%{escaped}%", limit),
        )
        return [
            {
                "chat_id": row["chat_id"],
                "chat_title": row["chat_title"],
                "content": row["content"],
                "timestamp": datetime.fromisoformat(row["timestamp"]),
            }
            for row in cursor.fetchall()
        ]

    def _attachments_for(self, message_id: str) -> List[Attachment]:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            SELECT id, name, path, type, size, is_project_file
            FROM message_attachments
            WHERE message_id = ?
            ORDER BY position ASC
            """,
            (message_id,),
        )
        return [
            Attachment(
                id=row["id"],
                name=row["name"],
                path=row["path"],
                type=row["type"],
                size=row["size"],
                is_project_file=bool(row["is_project_file"]),
            )
            for row in cursor.fetchall()
        ]

    @staticmethod
    def _row_to_message(row: sqlite3.Row, attachments: List[Attachment]) -> Message:
        return Message(
            id=row["id"],
            chat_id=row["chat_id"],
            role=MessageRole(row["role"]),
            content=row["content"],
            attachments=attachments,
            artifacts=[Artifact.from_dict(a) for a in json.loads(row["artifacts_json"] or "[]")],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            is_edited=bool(row["is_edited"]),
        )
