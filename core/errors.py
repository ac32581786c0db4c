"""Error taxonomy shared by the core and the state stores."""

from typing import Optional


class ChatDeskError(Exception):
    """Base class for all ChatDesk errors."""


class ConfigurationError(ChatDeskError):
    """No API credential is configured."""


class AttachmentReadError(ChatDeskError):
    """A single attachment could not be read. Never fatal."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"Could not read attachment {name}: {reason}")
        self.name = name
        self.reason = reason


class TransportError(ChatDeskError):
    """A provider call failed. Aborts the current send."""


class NetworkError(TransportError):
    """The provider could not be reached."""


class ProviderTimeoutError(TransportError, TimeoutError):
    """The provider did not answer within the request timeout."""


class ProviderError(TransportError):
    """The provider answered with a structured error body."""

    def __init__(
        self,
        message: str,
        error_type: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code


class NotFoundError(ChatDeskError):
    """A chat, message, project or file id is unknown."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id


class NoUserMessageError(ChatDeskError):
    """Regenerate was requested but the chat has no user message."""

    def __init__(self):
        super().__init__("No user message to regenerate a response for")


class PersistenceError(ChatDeskError):
    """The record store rejected a create, update or delete."""


class ExportError(ChatDeskError):
    """The export collaborator could not write the chat."""
