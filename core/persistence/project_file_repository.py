"""Project file repository implementation."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List

from core.models import ProjectFile
from .database import Database


def _row_to_file(row: sqlite3.Row) -> ProjectFile:
    return ProjectFile(
        id=row["id"],
        project_id=row["project_id"],
        name=row["name"],
        path=row["path"],
        type=row["type"],
        size=row["size"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class ProjectFileRepository:
    """SQLite implementation of project file persistence."""

    def __init__(self, database: Database):
        self._db = database

    def add(self, project_file: ProjectFile) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO project_files (id, project_id, name, path, type, size, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project_file.id,
                project_file.project_id,
                project_file.name,
                project_file.path,
                project_file.type,
                project_file.size,
                project_file.created_at.isoformat(),
            ),
        )
        conn.commit()

    def get_by_project(self, project_id: str) -> List[ProjectFile]:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            SELECT id, project_id, name, path, type, size, created_at
            FROM project_files
            WHERE project_id = ?
            ORDER BY created_at ASC
            """,
            (project_id,),
        )
        return [_row_to_file(row) for row in cursor.fetchall()]

    def update(self, project_file: ProjectFile) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            UPDATE project_files
            SET name = ?, path = ?, type = ?, size = ?
            WHERE id = ?
            """,
            (
                project_file.name,
                project_file.path,
                project_file.type,
                project_file.size,
                project_file.id,
            ),
        )
        conn.commit()
        return cursor.rowcount > 0

    def delete(self, file_id: str) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute("DELETE FROM project_files WHERE id = ?", (file_id,))
        conn.commit()
        return cursor.rowcount > 0
