"""Project state, actions and reducer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from core.models import Project, ProjectFile
from ui.viewmodels.store_base import ClearError, SetError, SetLoading


@dataclass(frozen=True)
class ProjectState:
    projects: tuple[Project, ...] = ()
    active_project_id: Optional[str] = None
    is_loading: bool = False
    error: Optional[Exception] = None
    projects_loaded: bool = False

    @property
    def active_project(self) -> Optional[Project]:
        if self.active_project_id is None:
            return None
        return self.find_project(self.active_project_id)

    def find_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def find_file(self, file_id: str) -> Optional[ProjectFile]:
        for project in self.projects:
            for project_file in project.files:
                if project_file.id == file_id:
                    return project_file
        return None


@dataclass(frozen=True)
class SetProjects:
    projects: tuple[Project, ...]


@dataclass(frozen=True)
class SetActiveProject:
    project_id: Optional[str]


@dataclass(frozen=True)
class CreateProject:
    project: Project


@dataclass(frozen=True)
class UpdateProject:
    project_id: str
    changes: Mapping[str, Any]
    updated_at: datetime


@dataclass(frozen=True)
class DeleteProject:
    project_id: str


@dataclass(frozen=True)
class AddFile:
    project_file: ProjectFile
    updated_at: datetime


@dataclass(frozen=True)
class UpdateFile:
    file_id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteFile:
    file_id: str


@dataclass(frozen=True)
class InvalidateProjects:
    pass


ProjectAction = Union[
    SetLoading,
    SetError,
    ClearError,
    SetProjects,
    SetActiveProject,
    CreateProject,
    UpdateProject,
    DeleteProject,
    AddFile,
    UpdateFile,
    DeleteFile,
    InvalidateProjects,
]


def _map_projects(state: ProjectState, project_id: str, change) -> tuple[Project, ...]:
    return tuple(change(p) if p.id == project_id else p for p in state.projects)


def project_reducer(state: ProjectState, action: ProjectAction) -> ProjectState:
    if isinstance(action, SetLoading):
        return replace(state, is_loading=action.value)

    if isinstance(action, SetError):
        return replace(state, error=action.error, is_loading=False)

    if isinstance(action, ClearError):
        return replace(state, error=None)

    if isinstance(action, SetProjects):
        return replace(state, projects=tuple(action.projects), projects_loaded=True)

    if isinstance(action, SetActiveProject):
        return replace(state, active_project_id=action.project_id)

    if isinstance(action, CreateProject):
        return replace(state, projects=(action.project,) + state.projects)

    if isinstance(action, UpdateProject):
        projects = _map_projects(
            state,
            action.project_id,
            lambda p: replace(p, **action.changes, updated_at=action.updated_at),
        )
        return replace(state, projects=projects)

    if isinstance(action, DeleteProject):
        active_id = state.active_project_id
        if active_id == action.project_id:
            active_id = None
        return replace(
            state,
            projects=tuple(p for p in state.projects if p.id != action.project_id),
            active_project_id=active_id,
        )

    if isinstance(action, AddFile):
        new_file = action.project_file
        projects = _map_projects(
            state,
            new_file.project_id,
            lambda p: replace(p, files=[*p.files, new_file], updated_at=action.updated_at),
        )
        return replace(state, projects=projects)

    if isinstance(action, UpdateFile):
        projects = tuple(
            replace(
                p,
                files=[
                    replace(f, **action.changes) if f.id == action.file_id else f
                    for f in p.files
                ],
            )
            for p in state.projects
        )
        return replace(state, projects=projects)

    if isinstance(action, DeleteFile):
        projects = tuple(
            replace(p, files=[f for f in p.files if f.id != action.file_id])
            for p in state.projects
        )
        return replace(state, projects=projects)

    if isinstance(action, InvalidateProjects):
        return replace(state, projects_loaded=False)

    raise TypeError(f"Unknown project action: {action!r}")
