"""Exceptions raised by provider adapters."""

from __future__ import annotations


class ProviderError(Exception):
    """A provider call failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ProviderError):
    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class TokenLimitError(ProviderError):
    """The request or the response exceeded a token limit."""

    def __init__(self, message: str, *, limit: int | None = None) -> None:
        super().__init__(message)
        self.limit = limit


class InvalidResponseError(ProviderError):
    """The provider answered, but not with something usable."""
