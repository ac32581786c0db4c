"""Chat state, actions and the pure reducer that applies them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from core.models import Chat, Message
from ui.viewmodels.store_base import ClearError, SetError, SetLoading

ChatId = str


@dataclass(frozen=True)
class ChatState:
    """Immutable snapshot of the conversation store.

    Messages are kept per chat so a reply that resolves after the user
    switched chats still lands in its own chat. ``messages`` is the list of
    the active chat.
    """

    chats: tuple[Chat, ...] = ()
    active_chat: Optional[Chat] = None
    messages_by_chat: Mapping[ChatId, tuple[Message, ...]] = field(default_factory=dict)
    is_loading: bool = False
    error: Optional[Exception] = None
    chats_loaded: bool = False
    loaded_message_chat_ids: frozenset[ChatId] = frozenset()

    @property
    def messages(self) -> tuple[Message, ...]:
        if self.active_chat is None:
            return ()
        return self.messages_by_chat.get(self.active_chat.id, ())

    def messages_for(self, chat_id: ChatId) -> tuple[Message, ...]:
        return self.messages_by_chat.get(chat_id, ())

    def find_chat(self, chat_id: ChatId) -> Optional[Chat]:
        return next((chat for chat in self.chats if chat.id == chat_id), None)


# ----- Actions -----

@dataclass(frozen=True)
class SetChats:
    chats: tuple[Chat, ...]


@dataclass(frozen=True)
class SetActiveChat:
    chat: Optional[Chat]


@dataclass(frozen=True)
class SetMessages:
    chat_id: ChatId
    messages: tuple[Message, ...]


@dataclass(frozen=True)
class AddMessage:
    message: Message


@dataclass(frozen=True)
class UpdateMessage:
    chat_id: ChatId
    message_id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class DeleteMessage:
    chat_id: ChatId
    message_id: str


@dataclass(frozen=True)
class CreateChat:
    chat: Chat


@dataclass(frozen=True)
class UpdateChat:
    chat_id: ChatId
    changes: Mapping[str, Any]
    updated_at: datetime


@dataclass(frozen=True)
class DeleteChat:
    chat_id: ChatId


@dataclass(frozen=True)
class InvalidateCache:
    pass


ChatAction = Union[
    SetLoading,
    SetError,
    ClearError,
    SetChats,
    SetActiveChat,
    SetMessages,
    AddMessage,
    UpdateMessage,
    DeleteMessage,
    CreateChat,
    UpdateChat,
    DeleteChat,
    InvalidateCache,
]


def _with_messages(
    state: ChatState, chat_id: ChatId, messages: tuple[Message, ...]
) -> dict[ChatId, tuple[Message, ...]]:
    updated = dict(state.messages_by_chat)
    updated[chat_id] = messages
    return updated


def chat_reducer(state: ChatState, action: ChatAction) -> ChatState:
    """Return the state that results from applying ``action`` to ``state``."""
    if isinstance(action, SetLoading):
        return replace(state, is_loading=action.value)

    if isinstance(action, SetError):
        return replace(state, error=action.error, is_loading=False)

    if isinstance(action, ClearError):
        return replace(state, error=None)

    if isinstance(action, SetChats):
        return replace(state, chats=tuple(action.chats), chats_loaded=True)

    if isinstance(action, SetActiveChat):
        return replace(state, active_chat=action.chat)

    if isinstance(action, SetMessages):
        return replace(
            state,
            messages_by_chat=_with_messages(state, action.chat_id, tuple(action.messages)),
            loaded_message_chat_ids=state.loaded_message_chat_ids | {action.chat_id},
        )

    if isinstance(action, AddMessage):
        chat_id = action.message.chat_id
        # Replies for chats deleted while in flight are dropped
        if state.find_chat(chat_id) is None:
            return state
        messages = state.messages_for(chat_id) + (action.message,)
        return replace(state, messages_by_chat=_with_messages(state, chat_id, messages))

    if isinstance(action, UpdateMessage):
        messages = tuple(
            replace(message, **action.changes) if message.id == action.message_id else message
            for message in state.messages_for(action.chat_id)
        )
        return replace(state, messages_by_chat=_with_messages(state, action.chat_id, messages))

    if isinstance(action, DeleteMessage):
        messages = tuple(
            message
            for message in state.messages_for(action.chat_id)
            if message.id != action.message_id
        )
        return replace(state, messages_by_chat=_with_messages(state, action.chat_id, messages))

    if isinstance(action, CreateChat):
        return replace(
            state,
            chats=(action.chat,) + state.chats,
            active_chat=action.chat,
            messages_by_chat=_with_messages(state, action.chat.id, ()),
            loaded_message_chat_ids=state.loaded_message_chat_ids | {action.chat.id},
        )

    if isinstance(action, UpdateChat):
        chats = tuple(
            replace(chat, **action.changes, updated_at=action.updated_at)
            if chat.id == action.chat_id
            else chat
            for chat in state.chats
        )
        active_chat = state.active_chat
        if active_chat is not None and active_chat.id == action.chat_id:
            active_chat = replace(active_chat, **action.changes, updated_at=action.updated_at)
        return replace(state, chats=chats, active_chat=active_chat)

    if isinstance(action, DeleteChat):
        messages_by_chat = dict(state.messages_by_chat)
        messages_by_chat.pop(action.chat_id, None)
        active_chat = state.active_chat
        if active_chat is not None and active_chat.id == action.chat_id:
            active_chat = None
        return replace(
            state,
            chats=tuple(chat for chat in state.chats if chat.id != action.chat_id),
            active_chat=active_chat,
            messages_by_chat=messages_by_chat,
            loaded_message_chat_ids=state.loaded_message_chat_ids - {action.chat_id},
        )

    if isinstance(action, InvalidateCache):
        return replace(state, chats_loaded=False, loaded_message_chat_ids=frozenset())

    raise TypeError(f"Unknown chat action: {action!r}")
