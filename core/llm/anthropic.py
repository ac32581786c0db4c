"""
Anthropic Messages API wrapper for ChatDesk.
"""

from typing import Any, Optional

import httpx
from langchain_core.callbacks import (
    AsyncCallbackManagerForLLMRun,
    CallbackManagerForLLMRun,
)
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field

from core.config import get_anthropic_api_key
from core.constants import (
    ANTHROPIC_API_URL,
    ANTHROPIC_API_VERSION,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
    PINNED_MODEL,
    REQUEST_TIMEOUT_SECONDS,
)


class AnthropicChat(BaseChatModel):
    """
    Chat model backed by the Anthropic Messages API.

    Message content may be a string or a list of content blocks
    (``{"type": "text", ...}`` / ``{"type": "image", ...}``); lists are sent
    as-is.
    """

    model: str = Field(default=PINNED_MODEL)
    temperature: float = Field(default=DEFAULT_TEMPERATURE)
    top_p: float = Field(default=DEFAULT_TOP_P)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS)
    timeout: float = Field(default=REQUEST_TIMEOUT_SECONDS)
    api_key: Optional[str] = Field(default=None)

    @property
    def _llm_type(self) -> str:
        return "anthropic"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "max_tokens": self.max_tokens,
        }

    def _get_api_key(self) -> str:
        """Get the API key, using instance key or global config."""
        if self.api_key:
            return self.api_key
        return get_anthropic_api_key()

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._get_api_key(),
            "anthropic-version": ANTHROPIC_API_VERSION,
            "content-type": "application/json",
        }

    def _convert_messages(
        self, messages: list[BaseMessage]
    ) -> tuple[Optional[str], list[dict[str, Any]]]:
        """Split out the system prompt and convert the rest to API messages."""
        system_parts: list[str] = []
        converted = []
        for msg in messages:
            if isinstance(msg, SystemMessage):
                system_parts.append(str(msg.content))
            elif isinstance(msg, HumanMessage):
                converted.append({"role": "user", "content": msg.content})
            elif isinstance(msg, AIMessage):
                converted.append({"role": "assistant", "content": msg.content})
            else:
                converted.append({"role": "user", "content": str(msg.content)})
        system = "\n\n".join(system_parts) if system_parts else None
        return system, converted

    def _build_request_body(
        self,
        messages: list[dict[str, Any]],
        system: Optional[str] = None,
        stop: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
        }
        if system:
            body["system"] = system
        if stop:
            body["stop_sequences"] = stop
        return body

    @staticmethod
    def _parse_response(data: dict[str, Any]) -> ChatResult:
        """Join the text blocks of a reply. Other block types are ignored."""
        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ValueError("Response has no content blocks")
        text = "\n".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )
        ai_message = AIMessage(
            content=text,
            response_metadata={
                "id": data.get("id"),
                "model": data.get("model"),
                "stop_reason": data.get("stop_reason"),
                "usage": data.get("usage") or {},
            },
        )
        return ChatResult(generations=[ChatGeneration(message=ai_message)])

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: Optional[list[str]] = None,
        run_manager: Optional[CallbackManagerForLLMRun] = None,
        **kwargs: Any,
    ) -> ChatResult:
        """Generate a response from the model."""
        system, converted = self._convert_messages(messages)
        body = self._build_request_body(converted, system=system, stop=stop)

        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(ANTHROPIC_API_URL, json=body, headers=self._headers())
            response.raise_for_status()
            data = response.json()

        return self._parse_response(data)

    async def _agenerate(
        self,
        messages: list[BaseMessage],
        stop: Optional[list[str]] = None,
        run_manager: Optional[AsyncCallbackManagerForLLMRun] = None,
        **kwargs: Any,
    ) -> ChatResult:
        """Generate a response from the model without blocking the event loop."""
        system, converted = self._convert_messages(messages)
        body = self._build_request_body(converted, system=system, stop=stop)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                ANTHROPIC_API_URL, json=body, headers=self._headers()
            )
            response.raise_for_status()
            data = response.json()

        return self._parse_response(data)
