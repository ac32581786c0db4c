"""Domain models for chats, messages and projects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from core.constants import DEFAULT_ARTIFACT_TITLE, DEFAULT_ARTIFACT_TYPE, DEFAULT_CHAT_TITLE


class MessageRole(str, Enum):
    """Role of a message sender."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Setting:
    """A configuration setting."""

    key: str
    value: str
    category: str
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class Chat:
    """A conversation. Its messages are stored separately, keyed by chat id."""

    id: str
    title: str
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, title: Optional[str] = None) -> "Chat":
        """Create a new chat with an auto-generated ID."""
        now = datetime.now()
        return cls(
            id=str(uuid.uuid4()),
            title=title or DEFAULT_CHAT_TITLE,
            created_at=now,
            updated_at=now,
        )


@dataclass
class Attachment:
    """A file attached to a single message."""

    id: str
    name: str
    path: str
    type: str
    size: int = 0
    is_project_file: bool = False

    @classmethod
    def create(
        cls,
        name: str,
        path: str,
        type: str,
        size: int = 0,
        is_project_file: bool = False,
    ) -> "Attachment":
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            path=path,
            type=type,
            size=size,
            is_project_file=is_project_file,
        )


@dataclass
class Artifact:
    """A structured sub-document embedded in an assistant reply."""

    id: str
    content: str
    type: str = DEFAULT_ARTIFACT_TYPE
    title: str = DEFAULT_ARTIFACT_TITLE
    language: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "content": self.content,
        }
        if self.language:
            data["language"] = self.language
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Artifact":
        return cls(
            id=data["id"],
            content=data.get("content", ""),
            type=data.get("type") or DEFAULT_ARTIFACT_TYPE,
            title=data.get("title") or DEFAULT_ARTIFACT_TITLE,
            language=data.get("language"),
        )


@dataclass
class Message:
    """A single message in a chat.

    The role is fixed at creation. Only an explicit edit changes the content,
    and it also sets ``is_edited``.
    """

    id: str
    chat_id: str
    role: MessageRole
    content: str
    attachments: list[Attachment] = field(default_factory=list)
    artifacts: list[Artifact] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)
    is_edited: bool = False

    @classmethod
    def create(
        cls,
        chat_id: str,
        role: MessageRole,
        content: str,
        attachments: Optional[list[Attachment]] = None,
        timestamp: Optional[datetime] = None,
    ) -> "Message":
        """Create a message with an auto-generated ID."""
        return cls(
            id=str(uuid.uuid4()),
            chat_id=chat_id,
            role=role,
            content=content,
            attachments=list(attachments or []),
            timestamp=timestamp or datetime.now(),
        )


@dataclass
class ProjectFile:
    """A file belonging to a project's context bundle."""

    id: str
    project_id: str
    name: str
    path: str
    type: str
    size: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        project_id: str,
        name: str,
        path: str,
        type: str,
        size: int = 0,
    ) -> "ProjectFile":
        return cls(
            id=str(uuid.uuid4()),
            project_id=project_id,
            name=name,
            path=path,
            type=type,
            size=size,
            created_at=datetime.now(),
        )


@dataclass
class Project:
    """A named set of files sent as context with every message."""

    id: str
    title: str
    description: str = ""
    files: list[ProjectFile] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, title: str, description: str = "") -> "Project":
        """Create a new project with an auto-generated ID."""
        now = datetime.now()
        return cls(
            id=str(uuid.uuid4()),
            title=title,
            description=description,
            files=[],
            created_at=now,
            updated_at=now,
        )


@dataclass
class PendingFile:
    """A file chosen by the user that has not been copied into storage yet.

    Either ``source_path`` or ``data`` carries the bytes.
    """

    name: str
    type: str = ""
    size: int = 0
    source_path: Optional[str] = None
    data: Optional[bytes] = None
