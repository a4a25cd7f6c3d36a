"""Execution result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from conform.errors.types import AgentError, CallbackFailed, ExecutionCancelled
from conform.types.validation import Invalid

OutputT = TypeVar("OutputT")


@dataclass(frozen=True, slots=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True, slots=True)
class ExecuteMetadata:
    """Metrics gathered during one execution.

    Each metric is ``None`` unless the matching observability flag is set on
    the definition.  ``callback_errors`` is always populated.
    """

    attempts: int | None = None
    latency_ms: float | None = None
    tokens: TokenUsage | None = None
    cost: float | None = None
    callback_errors: tuple[CallbackFailed, ...] = ()


@dataclass(frozen=True, slots=True)
class ExecuteSuccess(Generic[OutputT]):
    output: OutputT
    attempts: int
    metadata: ExecuteMetadata = field(default_factory=ExecuteMetadata)
    run: Any = None


@dataclass(frozen=True, slots=True)
class ExecuteFailure:
    """Terminal failure.

    ``errors`` explains why; ``last_outcome`` is the final rejected candidate
    when the attempt budget ran out.  ``run`` is the last committed run state.
    """

    errors: tuple[AgentError, ...]
    metadata: ExecuteMetadata = field(default_factory=ExecuteMetadata)
    run: Any = None
    last_outcome: Invalid | None = None

    @property
    def cancelled(self) -> bool:
        return any(isinstance(e, ExecutionCancelled) for e in self.errors)
