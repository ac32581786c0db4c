"""
Core package for ChatDesk.
Holds the domain models, request assembly, artifact extraction, provider
transport and persistence. It can be used without the UI layer.
"""

from core.errors import ChatDeskError
from core.models import Artifact, Attachment, Chat, Message, MessageRole, Project, ProjectFile
from core.types import Completion, GenerationParams, Turn

__all__ = [
    "ChatDeskError",
    "Artifact",
    "Attachment",
    "Chat",
    "Message",
    "MessageRole",
    "Project",
    "ProjectFile",
    "Completion",
    "GenerationParams",
    "Turn",
]
