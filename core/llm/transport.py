"""Provider transport: sends assembled turns and normalizes the outcome."""

import asyncio
import json
import logging
from typing import Callable, Optional, Sequence

import httpx
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from core.constants import PINNED_MODEL, REQUEST_TIMEOUT_SECONDS
from core.errors import NetworkError, ProviderError, ProviderTimeoutError
from core.llm.anthropic import AnthropicChat
from core.types import Completion, GenerationParams, Turn

logger = logging.getLogger(__name__)


def turns_to_messages(turns: Sequence[Turn], system_prompt: Optional[str]) -> list[BaseMessage]:
    """Convert provider turns into LangChain messages, system prompt first."""
    messages: list[BaseMessage] = []
    if system_prompt:
        messages.append(SystemMessage(content=system_prompt))
    for turn in turns:
        blocks = [block.model_dump() for block in turn.content]
        if turn.role == "assistant":
            messages.append(AIMessage(content=blocks))
        else:
            messages.append(HumanMessage(content=blocks))
    return messages


def _provider_error(error: httpx.HTTPStatusError) -> ProviderError:
    status = error.response.status_code
    try:
        body = error.response.json()
    except (json.JSONDecodeError, ValueError):
        body = None
    detail = body.get("error") if isinstance(body, dict) else None
    if isinstance(detail, dict):
        error_type = detail.get("type")
        message = detail.get("message") or error_type or f"HTTP {status}"
        return ProviderError(message, error_type=error_type, status_code=status)
    return ProviderError(f"HTTP {status}: {error.response.reason_phrase}", status_code=status)


class ChatTransport:
    """Single-attempt provider call with a fixed timeout.

    The request always names ``PINNED_MODEL``; ``params.model`` is ignored.
    """

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        model_factory: Callable[..., AnthropicChat] = AnthropicChat,
    ):
        self._timeout = timeout
        self._model_factory = model_factory

    def _build_model(self, params: GenerationParams, credential: str) -> AnthropicChat:
        if params.model != PINNED_MODEL:
            logger.debug(
                "Configured model %s replaced by pinned model %s", params.model, PINNED_MODEL
            )
        return self._model_factory(
            model=PINNED_MODEL,
            temperature=params.temperature,
            top_p=params.top_p,
            max_tokens=params.max_tokens,
            timeout=self._timeout,
            api_key=credential,
        )

    async def send(
        self,
        turns: Sequence[Turn],
        system_prompt: Optional[str],
        params: GenerationParams,
        credential: str,
    ) -> Completion:
        """
        Send turns to the provider.

        Raises:
            ProviderTimeoutError: No answer within the timeout
            ProviderError: Error response from the provider
            NetworkError: Connection-level failure
        """
        model = self._build_model(params, credential)
        messages = turns_to_messages(turns, system_prompt)
        logger.info("Sending %d turns to %s", len(turns), model.model)

        try:
            reply = await asyncio.wait_for(model.ainvoke(messages), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error("Provider request timed out after %.0fs", self._timeout)
            raise ProviderTimeoutError(
                f"Request timed out after {self._timeout:.0f} seconds"
            ) from e
        except httpx.HTTPStatusError as e:
            error = _provider_error(e)
            logger.error("Provider returned an error: %s", error.message)
            raise error from e
        except httpx.TransportError as e:
            logger.error("Network error while contacting provider: %s", e)
            raise NetworkError(f"Could not reach the provider: {e}") from e
        except ValueError as e:
            logger.error("Invalid provider response: %s", e)
            raise ProviderError("Received an invalid response from the provider") from e

        metadata = reply.response_metadata or {}
        return Completion(
            content=reply.content if isinstance(reply.content, str) else str(reply.content),
            model_id=metadata.get("model") or model.model,
            stop_reason=metadata.get("stop_reason"),
            usage=metadata.get("usage") or {},
        )
