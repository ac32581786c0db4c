"""Persistence package exports."""

from .database import Database
from .chat_repository import ChatRepository
from .message_repository import MessageRepository
from .project_repository import ProjectRepository
from .project_file_repository import ProjectFileRepository
from .settings_repository import SettingsRepository
from .local_store import LocalStore

__all__ = [
    "Database",
    "ChatRepository",
    "MessageRepository",
    "ProjectRepository",
    "ProjectFileRepository",
    "SettingsRepository",
    "LocalStore",
]
