"""Anthropic/Claude provider adapter."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from conform.providers.base import BaseProvider
from conform.providers.errors import InvalidResponseError, TokenLimitError
from conform.types.providers import (
    ChatMessage,
    ModelRequest,
    ModelResponse,
    ProviderUsage,
    ToolCall,
    ToolSpec,
)

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    """Provider adapter for Anthropic's Claude models.

    Uses the official ``anthropic`` SDK's async Messages API.  Construct one
    instance per application (or per tenant) and pass it to ``execute``.

    Parameters
    ----------
    api_key:
        Anthropic API key.  When *None* the SDK falls back to the
        ``ANTHROPIC_API_KEY`` environment variable.
    client:
        A pre-built ``AsyncAnthropic`` client; takes precedence over
        *api_key*.
    """

    name = "anthropic"

    def __init__(self, api_key: str | None = None, *, client: Any | None = None) -> None:
        if client is None:
            # Defer import so the rest of the package imports without
            # initialising the SDK.
            try:
                from anthropic import AsyncAnthropic
            except ImportError as exc:
                raise ImportError(
                    "The 'anthropic' package is required for AnthropicProvider. "
                    "Install it with: pip install anthropic"
                ) from exc
            client = AsyncAnthropic(api_key=api_key) if api_key else AsyncAnthropic()
        self._client = client

    # ------------------------------------------------------------------
    # ModelProvider protocol
    # ------------------------------------------------------------------

    async def invoke(
        self,
        request: ModelRequest,
        signal: asyncio.Event | None = None,
    ) -> ModelResponse:
        """Send *request* through the Messages API and translate the reply."""
        response = await self._retry_with_backoff(
            self._client.messages.create,
            model=request.model,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            system=request.system,
            messages=self._to_anthropic_messages(request.messages),
            tools=self._to_anthropic_tools(request.tools),
        )
        result = self._from_anthropic_response(response)
        if result.stop_reason == "max_tokens" and not result.tool_calls:
            raise TokenLimitError(
                f"response truncated at max_tokens={request.max_tokens}",
                limit=request.max_tokens,
            )
        return result

    # ------------------------------------------------------------------
    # Conversion helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_anthropic_messages(messages: tuple[ChatMessage, ...]) -> list[dict[str, Any]]:
        """Convert our :class:`ChatMessage` history to the Messages API format.

        Block-form content (tool_use / tool_result / text blocks) is passed
        through; string content becomes a single text block for assistants.
        """
        result: list[dict[str, Any]] = []
        for msg in messages:
            if isinstance(msg.content, str):
                if msg.role == "assistant":
                    content: Any = [{"type": "text", "text": msg.content}]
                else:
                    content = msg.content
            else:
                content = [dict(block) for block in msg.content]
            result.append({"role": msg.role, "content": content})
        return result

    @staticmethod
    def _to_anthropic_tools(tools: tuple[ToolSpec, ...]) -> list[dict[str, Any]]:
        return [
            {
                "name": t.name,
                "description": t.description,
                "input_schema": t.input_schema,
            }
            for t in tools
        ]

    @staticmethod
    def _from_anthropic_response(response: Any) -> ModelResponse:
        """Translate an SDK ``Message`` into a :class:`ModelResponse`."""
        content = getattr(response, "content", None)
        if content is None:
            raise InvalidResponseError("response has no content")

        text_parts: list[str] = []
        calls: list[ToolCall] = []
        for block in content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                if not isinstance(block.input, dict):
                    raise InvalidResponseError(
                        f"tool_use block {block.id} has non-object input"
                    )
                calls.append(ToolCall(id=block.id, name=block.name, input=dict(block.input)))

        usage_obj = getattr(response, "usage", None)
        usage = ProviderUsage()
        if usage_obj is not None:
            usage = ProviderUsage(
                input_tokens=usage_obj.input_tokens,
                output_tokens=usage_obj.output_tokens,
                # Cache token fields may not be present on all accounts.
                cache_read_tokens=getattr(usage_obj, "cache_read_input_tokens", 0) or 0,
                cache_write_tokens=getattr(usage_obj, "cache_creation_input_tokens", 0) or 0,
            )

        return ModelResponse(
            text="".join(text_parts),
            tool_calls=tuple(calls),
            stop_reason=response.stop_reason or "end_turn",
            usage=usage,
        )
