"""Collaborator protocols (interfaces) used by the state stores."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, Union

from .models import Chat, Message, PendingFile, Project, ProjectFile
from .types import Completion, GenerationParams, Turn


class PersistenceProtocol(Protocol):
    """Record store for chats, messages, projects and project files.

    Every method raises PersistenceError when the store rejects the call.
    """

    async def get_chats(self) -> list[Chat]: ...

    async def get_chat(self, chat_id: str) -> Optional[Chat]: ...

    async def create_chat(self, chat: Chat) -> None: ...

    async def update_chat(self, chat: Chat) -> None: ...

    async def delete_chat(self, chat_id: str) -> None:
        """Delete a chat together with its messages."""
        ...

    async def get_messages_by_chat(self, chat_id: str) -> list[Message]: ...

    async def create_message(self, message: Message) -> None: ...

    async def update_message(self, message: Message) -> None: ...

    async def delete_message(self, message_id: str) -> None: ...

    async def search_messages(self, query: str) -> list[dict[str, Any]]:
        """Return ``{chat_id, chat_title, content, timestamp}`` rows."""
        ...

    async def get_projects(self) -> list[Project]: ...

    async def create_project(self, project: Project) -> None: ...

    async def update_project(self, project: Project) -> None: ...

    async def delete_project(self, project_id: str) -> None: ...

    async def get_project_files(self, project_id: str) -> list[ProjectFile]: ...

    async def create_project_file(self, project_file: ProjectFile) -> None: ...

    async def update_project_file(self, project_file: ProjectFile) -> None: ...

    async def delete_project_file(self, file_id: str) -> None: ...


class FileServiceProtocol(Protocol):
    """Blob storage for uploaded files plus the file-picker dialogs."""

    async def upload_file(self, source: Union[PendingFile, str]) -> Any:
        """Return an object with ``success``, ``path`` and ``error``."""
        ...

    async def download_file(self, path: str) -> bytes: ...

    async def delete_file(self, path: str) -> bool: ...

    async def open_file_dialog(self, multiple: bool = True) -> list[str]: ...

    async def save_file_dialog(
        self, default_name: str, filters: Optional[Sequence[str]] = None
    ) -> Optional[str]:
        """Return the chosen path, or None when the user cancels."""
        ...


class ExportProtocol(Protocol):
    async def export_chat(
        self, chat_id: str, format: str, options: Optional[dict[str, Any]] = None
    ) -> Any:
        """Return an object with ``success`` and ``error``."""
        ...


class TransportProtocol(Protocol):
    async def send(
        self,
        turns: Sequence[Turn],
        system_prompt: Optional[str],
        params: GenerationParams,
        credential: str,
    ) -> Completion: ...


class SettingsProtocol(Protocol):
    @property
    def api_key(self) -> str: ...

    def generation_params(self) -> GenerationParams: ...
