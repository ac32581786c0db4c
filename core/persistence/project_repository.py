"""Project repository implementation."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from core.models import Project
from .database import Database


class ProjectRepository:
    """SQLite implementation of project persistence.

    Returned projects carry an empty ``files`` list; files are loaded
    through ProjectFileRepository.
    """

    def __init__(self, database: Database):
        self._db = database

    def create(self, project: Project) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO projects (id, title, description, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                project.id,
                project.title,
                project.description,
                project.created_at.isoformat(),
                project.updated_at.isoformat(),
            ),
        )
        conn.commit()

    def get_by_id(self, project_id: str) -> Optional[Project]:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            SELECT id, title, description, created_at, updated_at
            FROM projects
            WHERE id = ?
            """,
            (project_id,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return Project(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def get_all(self) -> List[Project]:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            SELECT id, title, description, created_at, updated_at
            FROM projects
            ORDER BY updated_at DESC
            """
        )
        projects: List[Project] = []
        for row in cursor.fetchall():
            projects.append(
                Project(
                    id=row["id"],
                    title=row["title"],
                    description=row["description"],
                    created_at=datetime.fromisoformat(row["created_at"]),
                    updated_at=datetime.fromisoformat(row["updated_at"]),
                )
            )
        return projects

    def update(self, project: Project) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """
            UPDATE projects
            SET title = ?, description = ?, updated_at = ?
            WHERE id = ?
            """,
            (project.title, project.description, project.updated_at.isoformat(), project.id),
        )
        conn.commit()
        return cursor.rowcount > 0

    def delete(self, project_id: str) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        conn.commit()
        return cursor.rowcount > 0
