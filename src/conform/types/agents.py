"""Agent configuration, definition and per-execution state types."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar, Union

if TYPE_CHECKING:
    from pydantic import BaseModel

    from conform.prompts.templates import PromptTemplate
    from conform.types.tools import HelperTool, OutputTool
    from conform.types.validation import Invalid
    from conform.validation.validators import Validator

RunT = TypeVar("RunT")
AttemptT = TypeVar("AttemptT")


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Where an execution currently is.

    ``attempt`` counts output-submission cycles; ``iteration`` counts model
    calls within the current attempt and restarts at 1 for every attempt.
    """

    attempt: int
    max_attempts: int
    iteration: int
    max_iterations: int


@dataclass(frozen=True, slots=True)
class AgentState(Generic[RunT, AttemptT]):
    """State threaded through one execution.

    ``run`` survives retries; ``attempt`` is rebuilt at the start of every
    attempt.  Reducers return a replacement instead of mutating this value.
    """

    context: ExecutionContext
    run: RunT
    attempt: AttemptT


PromptBuilder = Callable[[Any, ExecutionContext], Union[str, Awaitable[str]]]
PromptSource = Union[PromptBuilder, "PromptTemplate", str]


@dataclass(frozen=True, slots=True)
class ModelConfig:
    provider: str
    name: str | None = None  # None: EngineSettings.default_model
    temperature: float = 0.7
    max_tokens: int = 4096


@dataclass(frozen=True, slots=True)
class PromptsConfig:
    """System, user and error prompt sources.

    Each may be a callable ``(arg, context) -> str`` (sync or async), a
    :class:`~conform.prompts.templates.PromptTemplate`, or a template string.
    The error prompt receives the formatted validation error as its argument.
    ``error_formatter``, when given, replaces the default rendering of a
    rejected candidate (``Invalid``) into that argument.
    """

    system: PromptSource
    user: PromptSource
    error: PromptSource
    error_formatter: Callable[[Invalid], str] | None = None


@dataclass(frozen=True, slots=True)
class ToolsConfig:
    output: OutputTool
    helpers: Mapping[str, HelperTool] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    validators: Sequence[Validator]
    max_attempts: int = 3
    max_iterations: int | None = None  # None: use the configured default


@dataclass(frozen=True, slots=True)
class ObservabilityConfig:
    track_cost: bool = False
    track_latency: bool = True
    track_attempts: bool = True
    track_tokens: bool = True


def _empty_run_state(input: Any) -> dict[str, Any]:
    return {}


def _empty_attempt_state(input: Any, run: Any, context: ExecutionContext) -> dict[str, Any]:
    return {}


@dataclass(slots=True)
class AgentConfig:
    """Mutable input to :func:`~conform.core.define.define_agent`."""

    name: str
    description: str
    model: ModelConfig
    prompts: PromptsConfig
    tools: ToolsConfig
    validation: ValidationConfig
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    initial_run_state: Callable[[Any], Any] = _empty_run_state
    initial_attempt_state: Callable[[Any, Any, ExecutionContext], Any] = _empty_attempt_state


@dataclass(frozen=True, slots=True)
class AgentDefinition:
    """A validated, immutable agent.

    Produced only by ``define_agent``.  Prompts are resolved to async
    builders, helper tools sit behind a read-only mapping, validators are a
    tuple, and ``max_iterations`` is always concrete.  Safe to share between
    concurrent executions.
    """

    name: str
    description: str
    model: ModelConfig
    prompts: PromptsConfig
    tools: ToolsConfig
    validation: ValidationConfig
    observability: ObservabilityConfig
    output_model: type[BaseModel]
    initial_run_state: Callable[[Any], Any]
    initial_attempt_state: Callable[[Any, Any, ExecutionContext], Any]

    @property
    def max_attempts(self) -> int:
        return self.validation.max_attempts

    @property
    def max_iterations(self) -> int:
        assert self.validation.max_iterations is not None
        return self.validation.max_iterations
