"""LLM package for ChatDesk."""

from core.llm.anthropic import AnthropicChat
from core.llm.transport import ChatTransport

__all__ = ["AnthropicChat", "ChatTransport"]
