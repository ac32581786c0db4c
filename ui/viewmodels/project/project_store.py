"""ProjectStore - projects and their context files."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from PySide6.QtCore import QObject

from core.errors import NotFoundError, PersistenceError
from core.models import PendingFile, Project, ProjectFile
from core.protocols import FileServiceProtocol, PersistenceProtocol
from core.utils.media import classify_media_type
from ui.viewmodels.project.state import (
    AddFile,
    CreateProject,
    DeleteFile,
    DeleteProject,
    InvalidateProjects,
    ProjectState,
    SetActiveProject,
    SetProjects,
    UpdateFile,
    UpdateProject,
    project_reducer,
)
from ui.viewmodels.store_base import SetError, SetLoading, StateStore

logger = logging.getLogger(__name__)

EDITABLE_PROJECT_FIELDS = frozenset({"title", "description"})
EDITABLE_FILE_FIELDS = frozenset({"name"})


class ProjectStore(StateStore):
    """Project state store.

    Follows the same apply-then-persist policy as the conversation store:
    failed persistence calls are reported and never rolled back.
    """

    def __init__(
        self,
        persistence: PersistenceProtocol,
        file_service: FileServiceProtocol,
        parent: Optional[QObject] = None,
    ):
        super().__init__(ProjectState(), project_reducer, parent)
        self._persistence = persistence
        self._file_service = file_service

    # ----- Loading -----

    async def load_projects(self) -> list[Project]:
        """
        Fetch all projects and then every project's files concurrently.

        A project whose files cannot be fetched is kept with no files.
        """
        if self._state.projects_loaded:
            return list(self._state.projects)

        self.dispatch(SetLoading(True))
        try:
            projects = await self._persistence.get_projects()
        except Exception as e:
            self._persistence_failed(e, "load projects")
            return []

        file_lists = await asyncio.gather(
            *(self._persistence.get_project_files(p.id) for p in projects),
            return_exceptions=True,
        )
        populated = []
        for project, files in zip(projects, file_lists):
            if isinstance(files, BaseException):
                logger.warning("Could not load files of project %s: %s", project.id, files)
                files = []
            populated.append(replace(project, files=list(files)))

        fetched_ids = {project.id for project in populated}
        # Projects created while the fetch was in flight stay on top
        pending = [p for p in self._state.projects if p.id not in fetched_ids]
        self.dispatch(SetProjects(tuple(pending) + tuple(populated)))
        self.dispatch(SetLoading(False))
        return list(self._state.projects)

    def invalidate(self) -> None:
        self.dispatch(InvalidateProjects())

    # ----- Projects -----

    def set_active_project(self, project_id: Optional[str]) -> Optional[Project]:
        if project_id is not None and self._state.find_project(project_id) is None:
            self.dispatch(SetError(NotFoundError("Project", project_id)))
            return None
        self.dispatch(SetActiveProject(project_id))
        return self._state.active_project

    def active_project_files(self) -> list[ProjectFile]:
        """Context files of the active project, empty when none is active."""
        project = self._state.active_project
        return list(project.files) if project else []

    async def create_project(self, title: str, description: str = "") -> Project:
        project = Project.create(title, description)
        self.dispatch(CreateProject(project))
        try:
            await self._persistence.create_project(project)
        except Exception as e:
            self._persistence_failed(e, "create project")
        return project

    async def update_project(
        self, project_id: str, patch: Optional[Mapping[str, Any]] = None
    ) -> Optional[Project]:
        if self._state.find_project(project_id) is None:
            self.dispatch(SetError(NotFoundError("Project", project_id)))
            return None

        changes = {k: v for k, v in (patch or {}).items() if k in EDITABLE_PROJECT_FIELDS}
        self.dispatch(UpdateProject(project_id, changes, datetime.now()))
        updated = self._state.find_project(project_id)
        try:
            await self._persistence.update_project(updated)
        except Exception as e:
            self._persistence_failed(e, "update project")
        return updated

    async def delete_project(self, project_id: str) -> bool:
        self.dispatch(DeleteProject(project_id))
        try:
            await self._persistence.delete_project(project_id)
        except Exception as e:
            self._persistence_failed(e, "delete project")
            return False
        return True

    # ----- Files -----

    async def add_file(
        self, source: Union[PendingFile, str], project_id: Optional[str] = None
    ) -> Optional[ProjectFile]:
        """Upload a file and add it to a project (the active one by default)."""
        project_id = project_id or self._state.active_project_id
        if project_id is None or self._state.find_project(project_id) is None:
            self.dispatch(SetError(NotFoundError("Project", project_id or "<none>")))
            return None

        if isinstance(source, str):
            name, declared_type, size = Path(source).name, "", _file_size(source)
        else:
            name, declared_type, size = source.name, source.type, source.size

        try:
            result = await self._file_service.upload_file(source)
        except Exception as e:
            logger.exception("Upload of %s failed", name)
            self.dispatch(SetError(PersistenceError(f"Could not upload {name}: {e}")))
            return None
        if not result.success or not result.path:
            logger.warning("Upload of %s failed: %s", name, result.error)
            self.dispatch(SetError(PersistenceError(f"Could not upload {name}: {result.error}")))
            return None

        project_file = ProjectFile.create(
            project_id=project_id,
            name=name,
            path=result.path,
            type=classify_media_type(declared_type, name),
            size=size,
        )
        self.dispatch(AddFile(project_file, datetime.now()))
        try:
            await self._persistence.create_project_file(project_file)
            await self._persistence.update_project(self._state.find_project(project_id))
        except Exception as e:
            self._persistence_failed(e, "add project file")
        return project_file

    async def update_file(
        self, file_id: str, patch: Optional[Mapping[str, Any]] = None
    ) -> Optional[ProjectFile]:
        if self._state.find_file(file_id) is None:
            self.dispatch(SetError(NotFoundError("ProjectFile", file_id)))
            return None

        changes = {k: v for k, v in (patch or {}).items() if k in EDITABLE_FILE_FIELDS}
        self.dispatch(UpdateFile(file_id, changes))
        updated = self._state.find_file(file_id)
        try:
            await self._persistence.update_project_file(updated)
        except Exception as e:
            self._persistence_failed(e, "update project file")
        return updated

    async def delete_file(self, file_id: str) -> bool:
        project_file = self._state.find_file(file_id)
        if project_file is None:
            self.dispatch(SetError(NotFoundError("ProjectFile", file_id)))
            return False

        self.dispatch(DeleteFile(file_id))
        try:
            await self._persistence.delete_project_file(file_id)
        except Exception as e:
            self._persistence_failed(e, "delete project file")
            return False

        if not await self._file_service.delete_file(project_file.path):
            logger.warning("Stored file %s was not removed", project_file.path)
        return True


def _file_size(path: str) -> int:
    try:
        return Path(path).stat().st_size
    except OSError:
        return 0
