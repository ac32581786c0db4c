"""Chat repository implementation."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Optional

from core.models import Chat
from .database import Database


def _row_to_chat(row: sqlite3.Row) -> Chat:
    return Chat(
        id=row["id"],
        title=row["title"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class ChatRepository:
    """SQLite implementation of chat persistence."""

    def __init__(self, database: Database):
        self._db = database

    def create(self, chat: Chat) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO chats (id, title, created_at, updated_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                chat.id,
                chat.title,
                chat.created_at.isoformat(),
                chat.updated_at.isoformat(),
            ),
        )
        conn.commit()

    def get_by_id(self, chat_id: str) -> Optional[Chat]:
        conn = self._db.get_connection()
        cursor = conn.execute(
            "SELECT id, title, created_at, updated_at FROM chats WHERE id = ?",
            (chat_id,),
        )
        row = cursor.fetchone()
        return _row_to_chat(row) if row is not None else None

    def get_all(self) -> List[Chat]:
        """All chats, most recently updated first."""
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            SELECT id, title, created_at, updated_at
            FROM chats
            ORDER BY updated_at DESC
            """
        )
        return [_row_to_chat(row) for row in cursor.fetchall()]

    def update(self, chat: Chat) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            UPDATE chats
            SET title = ?, updated_at = ?
            WHERE id = ?
            """,
            (chat.title, chat.updated_at.isoformat(), chat.id),
        )
        conn.commit()
        return cursor.rowcount > 0

    def delete(self, chat_id: str) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute("DELETE FROM chats WHERE id = ?", (chat_id,))
        conn.commit()
        return cursor.rowcount > 0
