"""Error codes, categories, severities and construction constraints."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(Enum):
    """Broad class of an error, which decides how the engine reacts to it."""

    VALIDATION = "validation"  # recoverable via retry
    EXECUTION = "execution"
    MODEL = "model"  # provider-level, fatal for this execution
    OBSERVABILITY = "observability"  # always swallowed


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class ErrorCode(Enum):
    """Every error code the engine can report."""

    # Definition construction
    EMPTY_NAME = "EMPTY_NAME"
    EMPTY_DESCRIPTION = "EMPTY_DESCRIPTION"
    EMPTY_MODEL_NAME = "EMPTY_MODEL_NAME"
    EMPTY_OUTPUT_TOOL_NAME = "EMPTY_OUTPUT_TOOL_NAME"
    EMPTY_OUTPUT_TOOL_DESCRIPTION = "EMPTY_OUTPUT_TOOL_DESCRIPTION"
    MISSING_OUTPUT_SCHEMA = "MISSING_OUTPUT_SCHEMA"
    INVALID_MAX_ATTEMPTS = "INVALID_MAX_ATTEMPTS"
    INVALID_MAX_ITERATIONS = "INVALID_MAX_ITERATIONS"
    INVALID_TEMPERATURE = "INVALID_TEMPERATURE"
    INVALID_MAX_TOKENS = "INVALID_MAX_TOKENS"
    HELPER_TOOL_NAME_MISMATCH = "HELPER_TOOL_NAME_MISMATCH"

    # Execution
    PROMPT_GENERATION_FAILED = "PROMPT_GENERATION_FAILED"
    MAX_ATTEMPTS_EXCEEDED = "MAX_ATTEMPTS_EXCEEDED"
    MAX_ITERATIONS_EXCEEDED = "MAX_ITERATIONS_EXCEEDED"
    EXECUTION_CANCELLED = "EXECUTION_CANCELLED"

    # Model provider
    API_ERROR = "API_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    TOKEN_LIMIT_EXCEEDED = "TOKEN_LIMIT_EXCEEDED"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    OUTPUT_TOOL_NOT_USED = "OUTPUT_TOOL_NOT_USED"
    SUBMIT_BEFORE_OUTPUT = "SUBMIT_BEFORE_OUTPUT"

    # Observability
    CALLBACK_FAILED = "CALLBACK_FAILED"


@dataclass(frozen=True, slots=True)
class AgentConstraints:
    """Bounds enforced on agent configuration at construction time."""

    min_max_attempts: int = 1
    min_max_iterations: int = 1
    min_temperature: float = 0.0
    max_temperature: float = 1.0
    min_max_tokens: int = 1


AGENT_CONSTRAINTS = AgentConstraints()
