"""Chat subsystem."""

from .conversation_store import NEW_CHAT_ID, ConversationStore
from .state import ChatState, chat_reducer

__all__ = ["NEW_CHAT_ID", "ConversationStore", "ChatState", "chat_reducer"]
