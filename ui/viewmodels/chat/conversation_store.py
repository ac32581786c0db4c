"""ConversationStore - chat and message state with send/regenerate/export."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional, Sequence, Union

from PySide6.QtCore import QObject

from core.constants import DEFAULT_SYSTEM_PROMPT
from core.errors import (
    ConfigurationError,
    ExportError,
    NoUserMessageError,
    NotFoundError,
    TransportError,
)
from core.models import Attachment, Chat, Message, MessageRole, PendingFile, ProjectFile
from core.protocols import (
    ExportProtocol,
    FileServiceProtocol,
    PersistenceProtocol,
    SettingsProtocol,
    TransportProtocol,
)
from core.services.chat_export_service import FORMAT_EXTENSIONS
from core.services.request_assembler import RequestAssembler
from core.utils.media import classify_media_type
from ui.viewmodels.chat.state import (
    AddMessage,
    ChatState,
    CreateChat,
    DeleteChat,
    DeleteMessage,
    InvalidateCache,
    SetActiveChat,
    SetChats,
    SetMessages,
    UpdateChat,
    UpdateMessage,
    chat_reducer,
)
from ui.viewmodels.store_base import SetError, SetLoading, StateStore

logger = logging.getLogger(__name__)

NEW_CHAT_ID = "new"
EDITABLE_CHAT_FIELDS = frozenset({"title"})
EXPORT_FILTERS = {
    "markdown": ["Markdown (*.md)"],
    "json": ["JSON (*.json)"],
    "txt": ["Text (*.txt)"],
}

FileInput = Union[Attachment, PendingFile]


class ConversationStore(StateStore):
    """Conversation state store.

    Every operation applies its change to state first and persists second.
    A failed persistence call is reported through ``error`` and leaves the
    optimistic state in place. Results of in-flight calls address their chat
    by id, so a reply that arrives after the user switched chats lands in the
    chat it belongs to.
    """

    def __init__(
        self,
        persistence: PersistenceProtocol,
        file_service: FileServiceProtocol,
        exporter: ExportProtocol,
        transport: TransportProtocol,
        settings: SettingsProtocol,
        assembler: Optional[RequestAssembler] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        parent: Optional[QObject] = None,
    ):
        super().__init__(ChatState(), chat_reducer, parent)
        self._persistence = persistence
        self._file_service = file_service
        self._exporter = exporter
        self._transport = transport
        self._settings = settings
        self._assembler = assembler or RequestAssembler()
        self._system_prompt = system_prompt

    # ----- Loading -----

    async def load_chats(self) -> list[Chat]:
        """Fetch all chats once. Later calls return the cached list."""
        if self._state.chats_loaded:
            return list(self._state.chats)

        self.dispatch(SetLoading(True))
        try:
            fetched = await self._persistence.get_chats()
        except Exception as e:
            self._persistence_failed(e, "load chats")
            return []

        fetched_ids = {chat.id for chat in fetched}
        # Chats created while the fetch was in flight stay on top
        pending = [chat for chat in self._state.chats if chat.id not in fetched_ids]
        self.dispatch(SetChats(tuple(pending) + tuple(fetched)))
        self.dispatch(SetLoading(False))
        return list(self._state.chats)

    async def load_messages(self, chat_id: str) -> list[Message]:
        """Fetch the messages of one chat once."""
        if chat_id in self._state.loaded_message_chat_ids:
            return list(self._state.messages_for(chat_id))

        self.dispatch(SetLoading(True))
        try:
            fetched = await self._persistence.get_messages_by_chat(chat_id)
        except Exception as e:
            self._persistence_failed(e, "load messages")
            return []

        fetched_ids = {message.id for message in fetched}
        local = [m for m in self._state.messages_for(chat_id) if m.id not in fetched_ids]
        merged = sorted([*fetched, *local], key=lambda message: message.timestamp)
        self.dispatch(SetMessages(chat_id, tuple(merged)))
        self.dispatch(SetLoading(False))
        return merged

    async def load_chat(self, chat_id: str) -> Optional[Chat]:
        """Activate a chat by id. ``"new"`` clears the active chat without I/O."""
        if chat_id == NEW_CHAT_ID:
            self.dispatch(SetActiveChat(None))
            return None

        chat = self._state.find_chat(chat_id)
        if chat is None and not self._state.chats_loaded:
            await self.load_chats()
            chat = self._state.find_chat(chat_id)
        if chat is None:
            logger.warning("Chat %s not found", chat_id)
            self.dispatch(SetError(NotFoundError("Chat", chat_id)))
            return None

        self.dispatch(SetActiveChat(chat))
        await self.load_messages(chat.id)
        return chat

    def invalidate(self) -> None:
        """Forget what has been loaded so the next load fetches again."""
        self.dispatch(InvalidateCache())

    # ----- Chats -----

    async def create_chat(self, title: Optional[str] = None) -> Chat:
        chat = Chat.create(title)
        self.dispatch(CreateChat(chat))
        try:
            await self._persistence.create_chat(chat)
        except Exception as e:
            self._persistence_failed(e, "create chat")
        return chat

    async def update_chat(
        self, chat_id: str, patch: Optional[Mapping[str, Any]] = None
    ) -> Optional[Chat]:
        """Merge ``patch`` into the chat and bump its ``updated_at``."""
        if self._state.find_chat(chat_id) is None:
            self.dispatch(SetError(NotFoundError("Chat", chat_id)))
            return None

        changes = {k: v for k, v in (patch or {}).items() if k in EDITABLE_CHAT_FIELDS}
        self.dispatch(UpdateChat(chat_id, changes, datetime.now()))
        updated = self._state.find_chat(chat_id)
        try:
            await self._persistence.update_chat(updated)
        except Exception as e:
            self._persistence_failed(e, "update chat")
        return updated

    async def delete_chat(self, chat_id: str) -> bool:
        self.dispatch(DeleteChat(chat_id))
        try:
            await self._persistence.delete_chat(chat_id)
        except Exception as e:
            self._persistence_failed(e, "delete chat")
            return False
        return True

    # ----- Messages -----

    async def send_message(
        self,
        text: str,
        files: Sequence[FileInput] = (),
        project_files: Sequence[Union[ProjectFile, Attachment]] = (),
    ) -> Optional[Message]:
        """
        Send one user message and append the assistant reply.

        Returns:
            The assistant message, or None when the send failed
        """
        credential = self._settings.api_key
        if not credential:
            self.dispatch(SetError(ConfigurationError("API key not configured")))
            return None

        chat = self._state.active_chat or await self.create_chat()
        chat_id = chat.id
        self.dispatch(SetLoading(True))
        try:
            attachments = await self._upload_files(files)
            context = [self._as_project_attachment(f) for f in project_files]
            history = list(self._state.messages_for(chat_id))

            user_message = Message.create(
                chat_id,
                MessageRole.USER,
                text,
                attachments=attachments + context,
                timestamp=self._next_timestamp(chat_id),
            )
            self.dispatch(AddMessage(user_message))
            try:
                await self._persistence.create_message(user_message)
            except Exception as e:
                self._persistence_failed(e, "save message")
                return None

            turns = await asyncio.to_thread(
                self._assembler.assemble, text, attachments, context, history
            )
            completion = await self._transport.send(
                turns,
                self._system_prompt,
                self._settings.generation_params(),
                credential,
            )
        except TransportError as e:
            logger.error("Send failed: %s", e)
            self.dispatch(SetError(e))
            return None
        except Exception as e:
            logger.exception("Send failed")
            self.dispatch(SetError(e))
            return None
        finally:
            self.dispatch(SetLoading(False))

        if self._state.find_chat(chat_id) is None:
            logger.warning("Discarding reply for deleted chat %s", chat_id)
            return None

        assistant_message = Message.create(
            chat_id,
            MessageRole.ASSISTANT,
            completion.content,
            timestamp=self._next_timestamp(chat_id),
        )
        self.dispatch(AddMessage(assistant_message))
        try:
            await self._persistence.create_message(assistant_message)
        except Exception as e:
            self._persistence_failed(e, "save reply")
        await self.update_chat(chat_id)
        return assistant_message

    async def regenerate_last_response(
        self, project_files: Optional[Sequence[Union[ProjectFile, Attachment]]] = None
    ) -> Optional[Message]:
        """Drop the replies after the last user message and send it again."""
        chat = self._state.active_chat
        messages = self._state.messages_for(chat.id) if chat else ()
        index = next(
            (i for i in range(len(messages) - 1, -1, -1) if messages[i].role == MessageRole.USER),
            None,
        )
        if index is None:
            self.dispatch(SetError(NoUserMessageError()))
            return None

        last_user = messages[index]
        kept = tuple(
            message
            for i, message in enumerate(messages)
            if i <= index or message.role != MessageRole.ASSISTANT
        )
        self.dispatch(SetMessages(chat.id, kept))

        files = [a for a in last_user.attachments if not a.is_project_file]
        if project_files is None:
            project_files = [a for a in last_user.attachments if a.is_project_file]
        return await self.send_message(last_user.content, files, project_files)

    async def edit_message(self, message_id: str, content: str) -> Optional[Message]:
        message = self._find_message(message_id)
        if message is None:
            self.dispatch(SetError(NotFoundError("Message", message_id)))
            return None

        self.dispatch(
            UpdateMessage(message.chat_id, message_id, {"content": content, "is_edited": True})
        )
        updated = self._find_message(message_id)
        try:
            await self._persistence.update_message(updated)
        except Exception as e:
            self._persistence_failed(e, "edit message")
        return updated

    async def delete_message(self, message_id: str) -> bool:
        message = self._find_message(message_id)
        if message is None:
            self.dispatch(SetError(NotFoundError("Message", message_id)))
            return False

        self.dispatch(DeleteMessage(message.chat_id, message_id))
        try:
            await self._persistence.delete_message(message_id)
        except Exception as e:
            self._persistence_failed(e, "delete message")
            return False
        return True

    async def search_messages(self, query: str) -> list[dict[str, Any]]:
        try:
            return await self._persistence.search_messages(query)
        except Exception as e:
            self._persistence_failed(e, "search messages")
            return []

    # ----- Export -----

    async def export_chat(self, chat_id: str, format: str = "markdown") -> Optional[str]:
        """
        Ask for a destination and export the chat there.

        Returns:
            The destination path, or None when cancelled or failed
        """
        extension = FORMAT_EXTENSIONS.get(format, "txt")
        default_name = f"chat-export-{date.today().isoformat()}.{extension}"
        path = await self._file_service.save_file_dialog(
            default_name, EXPORT_FILTERS.get(format)
        )
        if not path:
            logger.info("Export of chat %s cancelled", chat_id)
            return None

        try:
            result = await self._exporter.export_chat(
                chat_id, format, {"include_artifacts": True, "destination": path}
            )
        except Exception as e:
            logger.exception("Export failed")
            self.dispatch(SetError(ExportError(str(e))))
            return None
        if not result.success:
            self.dispatch(SetError(ExportError(result.error or "Export failed")))
            return None
        return path

    # ----- Helpers -----

    async def _upload_files(self, files: Sequence[FileInput]) -> list[Attachment]:
        """Store pending files. Files that fail to upload are left out."""
        attachments: list[Attachment] = []
        for item in files:
            if isinstance(item, Attachment):
                attachments.append(item)
                continue
            try:
                result = await self._file_service.upload_file(item)
            except Exception:
                logger.exception("Upload of %s failed", item.name)
                continue
            if not result.success or not result.path:
                logger.warning("Upload of %s failed: %s", item.name, result.error)
                continue
            attachments.append(
                Attachment.create(
                    name=item.name,
                    path=result.path,
                    type=classify_media_type(item.type, item.name),
                    size=item.size,
                )
            )
        return attachments

    @staticmethod
    def _as_project_attachment(item: Union[ProjectFile, Attachment]) -> Attachment:
        if isinstance(item, Attachment):
            return item
        return Attachment(
            id=item.id,
            name=item.name,
            path=item.path,
            type=item.type,
            size=item.size,
            is_project_file=True,
        )

    def _next_timestamp(self, chat_id: str) -> datetime:
        """Now, or just after the newest message of the chat if the clock lags."""
        now = datetime.now()
        messages = self._state.messages_for(chat_id)
        if messages:
            latest = max(message.timestamp for message in messages)
            if latest >= now:
                return latest + timedelta(microseconds=1)
        return now

    def _find_message(self, message_id: str) -> Optional[Message]:
        for messages in self._state.messages_by_chat.values():
            for message in messages:
                if message.id == message_id:
                    return message
        return None
