"""Base provider with shared retry logic, error classification and block formatting."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from conform.providers.errors import (
    InvalidResponseError,
    ProviderError,
    RateLimitError,
    TokenLimitError,
)
from conform.types.providers import ModelRequest, ModelResponse

logger = logging.getLogger(__name__)

# Errors that are worth retrying on: rate limits and server overload.
_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 529})
_MAX_RETRIES: int = 3
_BACKOFF_BASE: float = 1.0  # seconds; doubled each retry

_TOKEN_LIMIT_MARKERS = ("prompt is too long", "max_tokens", "context length", "too many tokens")


def _is_retryable(exc: BaseException) -> bool:
    """Return True when *exc* represents a transient error worth retrying."""
    exc_type_name = type(exc).__name__
    # Anthropic SDK raises RateLimitError (429) and OverloadedError (529).
    if exc_type_name in {"RateLimitError", "OverloadedError"}:
        return True
    status_code: int | None = getattr(exc, "status_code", None)
    return status_code is not None and status_code in _RETRYABLE_STATUS_CODES


def to_provider_error(exc: Exception) -> ProviderError:
    """Classify an SDK exception into the provider error hierarchy.

    Classification goes by exception name and ``status_code`` so it works
    for any SDK that follows the usual conventions.
    """
    if isinstance(exc, ProviderError):
        return exc
    message = str(exc) or type(exc).__name__
    status_code: int | None = getattr(exc, "status_code", None)

    if type(exc).__name__ == "RateLimitError" or status_code == 429:
        retry_after = None
        response = getattr(exc, "response", None)
        headers = getattr(response, "headers", None)
        if headers is not None and headers.get("retry-after"):
            try:
                retry_after = float(headers["retry-after"])
            except ValueError:
                retry_after = None
        return RateLimitError(message, retry_after=retry_after)
    if status_code == 413 or (
        status_code == 400 and any(m in message.lower() for m in _TOKEN_LIMIT_MARKERS)
    ):
        return TokenLimitError(message)
    return ProviderError(message, status_code=status_code)


class BaseProvider(ABC):
    """Abstract base class for provider adapters.

    Concrete sub-classes implement :meth:`invoke`.  The block formatters
    produce the Anthropic-style content blocks the engine stores in its
    conversation history; providers with another wire format convert them
    when building a request.
    """

    name: str = "base"

    # ------------------------------------------------------------------
    # Public interface (ModelProvider protocol)
    # ------------------------------------------------------------------

    def format_tool_result(
        self,
        tool_use_id: str,
        content: str,
        is_error: bool = False,
    ) -> dict[str, Any]:
        """Build a ``tool_result`` content block for a user message.

        Parameters
        ----------
        tool_use_id:
            The opaque ID from the corresponding ``tool_use`` block.
        content:
            Serialised tool output (or error message).
        is_error:
            When *True*, the block is marked as an error result.
        """
        block: dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": tool_use_id,
            "content": content,
        }
        if is_error:
            block["is_error"] = True
        return block

    def format_tool_use(
        self,
        tool_use_id: str,
        name: str,
        args: dict[str, Any],
    ) -> dict[str, Any]:
        """Build a ``tool_use`` content block for an assistant message."""
        return {
            "type": "tool_use",
            "id": tool_use_id,
            "name": name,
            "input": args,
        }

    # ------------------------------------------------------------------
    # Abstract interface, must be implemented by sub-classes
    # ------------------------------------------------------------------

    @abstractmethod
    async def invoke(
        self,
        request: ModelRequest,
        signal: asyncio.Event | None = None,
    ) -> ModelResponse:
        """Run one model call.

        Parameters
        ----------
        request:
            System prompt, history, tools and sampling parameters.
        signal:
            Caller's cancellation signal.  The engine already races the call
            against it; adapters may also use it to stop early.

        Raises
        ------
        ProviderError
            Or one of its subclasses, for any failure.
        """
        ...

    # ------------------------------------------------------------------
    # Protected helpers, available to sub-classes
    # ------------------------------------------------------------------

    async def _retry_with_backoff(
        self,
        coro_fn: Any,
        /,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Call *coro_fn* with exponential back-off on transient errors.

        Up to :data:`_MAX_RETRIES` additional attempts are made when the
        raised exception is identified as retryable by :func:`_is_retryable`.
        The delay doubles after each failure, starting at
        :data:`_BACKOFF_BASE` seconds.  Any exception that escapes is
        translated with :func:`to_provider_error`.
        """
        delay = _BACKOFF_BASE
        total = _MAX_RETRIES + 1

        for attempt in range(1, total + 1):
            try:
                return await coro_fn(*args, **kwargs)
            except Exception as exc:
                if not _is_retryable(exc) or attempt == total:
                    error = to_provider_error(exc)
                    if error is exc:
                        raise
                    raise error from exc
                logger.warning(
                    "Transient error on attempt %d/%d (%s). Retrying in %.1fs.",
                    attempt,
                    total,
                    type(exc).__name__,
                    delay,
                )
                await asyncio.sleep(delay)
                delay *= 2.0

        raise InvalidResponseError("retry loop exited without a result")  # pragma: no cover
