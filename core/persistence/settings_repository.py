"""Settings repository implementation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.models import Setting
from .database import Database


class SettingsRepository:
    """Key/value settings grouped by category."""

    def __init__(self, database: Database):
        self._db = database

    def get(self, key: str) -> Optional[Setting]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT key, value, category, updated_at FROM settings WHERE key = ?",
            (key,),
        ).fetchone()
        if row is None:
            return None
        return Setting(
            key=row["key"],
            value=row["value"],
            category=row["category"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def set(self, key: str, value: str, category: str) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO settings (key, value, category, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                category = excluded.category,
                updated_at = excluded.updated_at
            """,
            (key, value, category, datetime.now().isoformat()),
        )
        conn.commit()

    def get_value(self, key: str, default: str = "") -> str:
        setting = self.get(key)
        return setting.value if setting else default

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self.get_value(key, str(default)))
        except ValueError:
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        try:
            return float(self.get_value(key, str(default)))
        except ValueError:
            return default
