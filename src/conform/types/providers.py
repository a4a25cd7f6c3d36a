"""Model provider protocol and the request/response types exchanged with it."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """A tool as advertised to the model: name, description and JSON schema."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ProviderUsage:
    """Token usage from a provider response."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_write_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def add(self, other: ProviderUsage) -> None:
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.cache_read_tokens += other.cache_read_tokens
        self.cache_write_tokens += other.cache_write_tokens


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """A message in the conversation history (provider-agnostic format)."""

    role: str  # "user", "assistant"
    content: str | tuple[dict[str, Any], ...] = ""


@dataclass(frozen=True, slots=True)
class ModelRequest:
    """Everything a provider needs for one model call."""

    model: str
    system: str
    messages: tuple[ChatMessage, ...]
    tools: tuple[ToolSpec, ...]
    temperature: float
    max_tokens: int


@dataclass(frozen=True, slots=True)
class ModelResponse:
    """A complete (non-streamed) model turn."""

    text: str = ""
    tool_calls: tuple[ToolCall, ...] = ()
    stop_reason: str = "end_turn"
    usage: ProviderUsage = field(default_factory=ProviderUsage)


@runtime_checkable
class ModelProvider(Protocol):
    """Protocol that all provider adapters must implement."""

    async def invoke(
        self,
        request: ModelRequest,
        signal: asyncio.Event | None = None,
    ) -> ModelResponse:
        """Run one model call.  Raise a ``ProviderError`` subclass on failure."""
        ...

    def format_tool_result(
        self, tool_use_id: str, content: str, is_error: bool = False,
    ) -> dict[str, Any]:
        """Build a tool-result content block for a user message."""
        ...

    def format_tool_use(self, tool_use_id: str, name: str, args: dict[str, Any]) -> dict[str, Any]:
        """Build a tool-use content block for an assistant message."""
        ...


@dataclass(frozen=True, slots=True)
class ModelInfo:
    """Information about a supported model."""

    id: str
    provider: str
    display_name: str
    context_window: int
    max_output_tokens: int
    input_cost_per_mtok: float = 0.0
    output_cost_per_mtok: float = 0.0
    aliases: tuple[str, ...] = ()
