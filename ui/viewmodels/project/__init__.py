"""Project subsystem."""

from .project_store import ProjectStore
from .state import ProjectState, project_reducer

__all__ = ["ProjectStore", "ProjectState", "project_reducer"]
