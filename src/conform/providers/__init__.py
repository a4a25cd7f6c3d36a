"""Provider adapters for conform.

Public surface
--------------
- :class:`BaseProvider`     : abstract base with retry and block formatting
- :class:`AnthropicProvider`: Claude adapter (Anthropic SDK)
- :func:`resolve_model`     : resolve model name / alias to :class:`ModelInfo`
- :func:`estimate_cost`     : USD cost of a usage record
- :data:`MODELS`            : model catalogue
"""

from __future__ import annotations

from conform.providers.anthropic import AnthropicProvider
from conform.providers.base import BaseProvider, to_provider_error
from conform.providers.errors import (
    InvalidResponseError,
    ProviderError,
    RateLimitError,
    TokenLimitError,
)
from conform.providers.registry import ALIASES, MODELS, estimate_cost, resolve_model

__all__ = [
    "ALIASES",
    "AnthropicProvider",
    "BaseProvider",
    "InvalidResponseError",
    "MODELS",
    "ProviderError",
    "RateLimitError",
    "TokenLimitError",
    "estimate_cost",
    "resolve_model",
    "to_provider_error",
]
