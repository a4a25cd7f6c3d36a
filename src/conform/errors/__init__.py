"""Error taxonomy: codes, typed variants, formatting and the result type."""

from conform.errors.codes import (
    AGENT_CONSTRAINTS,
    AgentConstraints,
    ErrorCategory,
    ErrorCode,
    Severity,
)
from conform.errors.exception import AgentProcessingError
from conform.errors.formatter import format_agent_error, format_agent_errors, safe_stringify
from conform.errors.result import Err, Ok, Result, is_err, is_ok
from conform.errors.types import (
    AgentError,
    AgentErrorBase,
    ApiError,
    CallbackFailed,
    EmptyDescription,
    EmptyModelName,
    EmptyName,
    EmptyOutputToolDescription,
    EmptyOutputToolName,
    ExecutionCancelled,
    HelperToolNameMismatch,
    InvalidMaxAttempts,
    InvalidMaxIterations,
    InvalidMaxTokens,
    InvalidResponse,
    InvalidTemperature,
    MaxAttemptsExceeded,
    MaxIterationsExceeded,
    MissingOutputSchema,
    OutputToolNotUsed,
    PromptGenerationFailed,
    RateLimitExceeded,
    SubmitBeforeOutput,
    TokenLimitExceeded,
)

__all__ = [
    "AGENT_CONSTRAINTS",
    "AgentConstraints",
    "AgentError",
    "AgentErrorBase",
    "AgentProcessingError",
    "ApiError",
    "CallbackFailed",
    "EmptyDescription",
    "EmptyModelName",
    "EmptyName",
    "EmptyOutputToolDescription",
    "EmptyOutputToolName",
    "Err",
    "ErrorCategory",
    "ErrorCode",
    "ExecutionCancelled",
    "HelperToolNameMismatch",
    "InvalidMaxAttempts",
    "InvalidMaxIterations",
    "InvalidMaxTokens",
    "InvalidResponse",
    "InvalidTemperature",
    "MaxAttemptsExceeded",
    "MaxIterationsExceeded",
    "MissingOutputSchema",
    "Ok",
    "OutputToolNotUsed",
    "PromptGenerationFailed",
    "RateLimitExceeded",
    "Result",
    "Severity",
    "SubmitBeforeOutput",
    "TokenLimitExceeded",
    "format_agent_error",
    "format_agent_errors",
    "is_err",
    "is_ok",
    "safe_stringify",
]
