"""Async persistence facade used by the state stores."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from functools import wraps
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from core.errors import NotFoundError, PersistenceError
from core.models import Chat, Message, Project, ProjectFile
from .chat_repository import ChatRepository
from .database import Database
from .message_repository import MessageRepository
from .project_file_repository import ProjectFileRepository
from .project_repository import ProjectRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _store_call(func: Callable[..., T]) -> Callable[..., Awaitable[T]]:
    """Run a repository call in a worker thread; sqlite errors become PersistenceError."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except sqlite3.Error as e:
            logger.error("%s failed: %s", func.__name__, e)
            raise PersistenceError(f"{func.__name__} failed: {e}") from e

    return wrapper


class LocalStore:
    """
    SQLite-backed persistence collaborator.

    Every method is a coroutine so the stores can await it like any other
    collaborator. Queries run in worker threads, one connection per thread.
    """

    def __init__(self, database: Database):
        self._db = database
        self._chats = ChatRepository(database)
        self._messages = MessageRepository(database)
        self._projects = ProjectRepository(database)
        self._project_files = ProjectFileRepository(database)

    # ----- Chats -----

    @_store_call
    def get_chats(self) -> List[Chat]:
        return self._chats.get_all()

    @_store_call
    def get_chat(self, chat_id: str) -> Optional[Chat]:
        return self._chats.get_by_id(chat_id)

    @_store_call
    def create_chat(self, chat: Chat) -> None:
        self._chats.create(chat)

    @_store_call
    def update_chat(self, chat: Chat) -> None:
        if not self._chats.update(chat):
            raise NotFoundError("Chat", chat.id)

    @_store_call
    def delete_chat(self, chat_id: str) -> None:
        self._chats.delete(chat_id)

    # ----- Messages -----

    @_store_call
    def get_messages_by_chat(self, chat_id: str) -> List[Message]:
        return self._messages.get_by_chat(chat_id)

    @_store_call
    def create_message(self, message: Message) -> None:
        self._messages.add(message)

    @_store_call
    def update_message(self, message: Message) -> None:
        if not self._messages.update(message):
            raise NotFoundError("Message", message.id)

    @_store_call
    def delete_message(self, message_id: str) -> None:
        self._messages.delete(message_id)

    @_store_call
    def search_messages(self, query: str) -> List[dict[str, Any]]:
        if not query.strip():
            return []
        return self._messages.search(query)

    # ----- Projects -----

    @_store_call
    def get_projects(self) -> List[Project]:
        return self._projects.get_all()

    @_store_call
    def create_project(self, project: Project) -> None:
        self._projects.create(project)

    @_store_call
    def update_project(self, project: Project) -> None:
        if not self._projects.update(project):
            raise NotFoundError("Project", project.id)

    @_store_call
    def delete_project(self, project_id: str) -> None:
        self._projects.delete(project_id)

    @_store_call
    def get_project_files(self, project_id: str) -> List[ProjectFile]:
        return self._project_files.get_by_project(project_id)

    @_store_call
    def create_project_file(self, project_file: ProjectFile) -> None:
        self._project_files.add(project_file)

    @_store_call
    def update_project_file(self, project_file: ProjectFile) -> None:
        if not self._project_files.update(project_file):
            raise NotFoundError("ProjectFile", project_file.id)

    @_store_call
    def delete_project_file(self, file_id: str) -> None:
        self._project_files.delete(file_id)
