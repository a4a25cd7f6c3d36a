"""Agent error variants.

Each error code has its own frozen dataclass carrying only the context that is
relevant to it.  ``code`` and ``category`` are fixed per class, so consumers
can dispatch either on the class (``match error: case MaxAttemptsExceeded():``)
or on the code.  ``AgentError`` is the union of all variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Union

from conform.errors.codes import ErrorCategory, ErrorCode, Severity

if TYPE_CHECKING:
    from conform.types.validation import Invalid


@dataclass(frozen=True, slots=True, kw_only=True)
class AgentErrorBase:
    """Fields shared by every agent error."""

    code: ClassVar[ErrorCode]
    category: ClassVar[ErrorCategory]

    severity: Severity = Severity.ERROR
    path: str | None = None
    suggestion: str | None = None


# ----------------------------------------------------------------------
# Validation: definition construction
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class _ValidationError(AgentErrorBase):
    category: ClassVar[ErrorCategory] = ErrorCategory.VALIDATION


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyName(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.EMPTY_NAME
    value: Any = ""
    path: str | None = "name"


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyDescription(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.EMPTY_DESCRIPTION
    value: Any = ""
    path: str | None = "description"


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyModelName(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.EMPTY_MODEL_NAME
    value: Any = ""
    path: str | None = "model.name"


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyOutputToolName(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.EMPTY_OUTPUT_TOOL_NAME
    value: Any = ""
    path: str | None = "tools.output.name"


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyOutputToolDescription(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.EMPTY_OUTPUT_TOOL_DESCRIPTION
    value: Any = ""
    path: str | None = "tools.output.description"


@dataclass(frozen=True, slots=True, kw_only=True)
class MissingOutputSchema(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.MISSING_OUTPUT_SCHEMA
    path: str | None = "validation.validators"
    suggestion: str | None = "Add a SchemaValidator describing the output structure"


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidMaxAttempts(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.INVALID_MAX_ATTEMPTS
    value: Any
    minimum: int
    path: str | None = "validation.max_attempts"


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidMaxIterations(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.INVALID_MAX_ITERATIONS
    value: Any
    minimum: int
    path: str | None = "validation.max_iterations"


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidTemperature(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.INVALID_TEMPERATURE
    value: Any
    minimum: float
    maximum: float
    path: str | None = "model.temperature"


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidMaxTokens(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.INVALID_MAX_TOKENS
    value: Any
    minimum: int
    path: str | None = "model.max_tokens"


@dataclass(frozen=True, slots=True, kw_only=True)
class HelperToolNameMismatch(_ValidationError):
    code: ClassVar[ErrorCode] = ErrorCode.HELPER_TOOL_NAME_MISMATCH
    key: str
    tool_name: str


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class _ExecutionError(AgentErrorBase):
    category: ClassVar[ErrorCategory] = ErrorCategory.EXECUTION


@dataclass(frozen=True, slots=True, kw_only=True)
class PromptGenerationFailed(_ExecutionError):
    code: ClassVar[ErrorCode] = ErrorCode.PROMPT_GENERATION_FAILED
    prompt_type: str
    reason: str
    attempt: int


@dataclass(frozen=True, slots=True, kw_only=True)
class MaxAttemptsExceeded(_ExecutionError):
    code: ClassVar[ErrorCode] = ErrorCode.MAX_ATTEMPTS_EXCEEDED
    max_attempts: int
    last_error: str
    last_outcome: Invalid | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class MaxIterationsExceeded(_ExecutionError):
    code: ClassVar[ErrorCode] = ErrorCode.MAX_ITERATIONS_EXCEEDED
    iterations: int
    max_iterations: int
    attempt: int


@dataclass(frozen=True, slots=True, kw_only=True)
class ExecutionCancelled(_ExecutionError):
    code: ClassVar[ErrorCode] = ErrorCode.EXECUTION_CANCELLED
    attempt: int
    phase: str


# ----------------------------------------------------------------------
# Model provider
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class _ModelError(AgentErrorBase):
    category: ClassVar[ErrorCategory] = ErrorCategory.MODEL


@dataclass(frozen=True, slots=True, kw_only=True)
class ApiError(_ModelError):
    code: ClassVar[ErrorCode] = ErrorCode.API_ERROR
    message: str
    status_code: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitExceeded(_ModelError):
    code: ClassVar[ErrorCode] = ErrorCode.RATE_LIMIT_ERROR
    message: str
    retry_after: float | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TokenLimitExceeded(_ModelError):
    code: ClassVar[ErrorCode] = ErrorCode.TOKEN_LIMIT_EXCEEDED
    message: str
    limit: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidResponse(_ModelError):
    code: ClassVar[ErrorCode] = ErrorCode.INVALID_RESPONSE
    message: str


@dataclass(frozen=True, slots=True, kw_only=True)
class OutputToolNotUsed(_ModelError):
    code: ClassVar[ErrorCode] = ErrorCode.OUTPUT_TOOL_NOT_USED
    expected: str
    response_text: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class SubmitBeforeOutput(_ModelError):
    code: ClassVar[ErrorCode] = ErrorCode.SUBMIT_BEFORE_OUTPUT
    attempt: int
    iteration: int


# ----------------------------------------------------------------------
# Observability
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True, kw_only=True)
class CallbackFailed(AgentErrorBase):
    code: ClassVar[ErrorCode] = ErrorCode.CALLBACK_FAILED
    category: ClassVar[ErrorCategory] = ErrorCategory.OBSERVABILITY
    callback: str
    message: str
    severity: Severity = Severity.WARNING


AgentError = Union[
    EmptyName,
    EmptyDescription,
    EmptyModelName,
    EmptyOutputToolName,
    EmptyOutputToolDescription,
    MissingOutputSchema,
    InvalidMaxAttempts,
    InvalidMaxIterations,
    InvalidTemperature,
    InvalidMaxTokens,
    HelperToolNameMismatch,
    PromptGenerationFailed,
    MaxAttemptsExceeded,
    MaxIterationsExceeded,
    ExecutionCancelled,
    ApiError,
    RateLimitExceeded,
    TokenLimitExceeded,
    InvalidResponse,
    OutputToolNotUsed,
    SubmitBeforeOutput,
    CallbackFailed,
]
