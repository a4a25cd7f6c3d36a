"""Human-readable rendering of agent errors."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from conform.errors.codes import Severity
from conform.errors.types import (
    AgentError,
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

_DEFAULT_MAX_LENGTH = 100


def safe_stringify(value: Any, max_length: int | None = _DEFAULT_MAX_LENGTH) -> str:
    """Render *value* as JSON, truncated to *max_length* characters.

    Values that cannot be rendered (e.g. circular structures) yield
    ``"(unstringifiable)"``.  Pass ``max_length=None`` to disable truncation.
    """
    try:
        text = json.dumps(value, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return "(unstringifiable)"
    if max_length is not None and len(text) > max_length:
        return text[:max_length] + "..."
    return text


def _message(error: AgentError) -> str:
    match error:
        case EmptyName(value=v):
            return f"Agent name must be a non-empty string; was given {safe_stringify(v)}"
        case EmptyDescription(value=v):
            return f"Agent description must be a non-empty string; was given {safe_stringify(v)}"
        case EmptyModelName(value=v):
            return f"Model name must be a non-empty string; was given {safe_stringify(v)}"
        case EmptyOutputToolName(value=v):
            return f"Output tool name must be a non-empty string; was given {safe_stringify(v)}"
        case EmptyOutputToolDescription(value=v):
            return (
                "Output tool description must be a non-empty string; "
                f"was given {safe_stringify(v)}"
            )
        case MissingOutputSchema():
            return "Output schema is required; no schema validator was configured"
        case InvalidMaxAttempts(value=v, minimum=lo):
            return f"Maximum attempts must be at least {lo}; was given {safe_stringify(v)}"
        case InvalidMaxIterations(value=v, minimum=lo):
            return f"Maximum iterations must be at least {lo}; was given {safe_stringify(v)}"
        case InvalidTemperature(value=v, minimum=lo, maximum=hi):
            return f"Temperature must be between {lo} and {hi}; was given {safe_stringify(v)}"
        case InvalidMaxTokens(value=v, minimum=lo):
            return f"Maximum tokens must be at least {lo}; was given {safe_stringify(v)}"
        case HelperToolNameMismatch(key=key, tool_name=name):
            return f"Helper tool registered as {key!r} declares name {name!r}"
        case PromptGenerationFailed(prompt_type=kind, reason=reason, attempt=attempt):
            return f"Failed to generate {kind} prompt at attempt {attempt}: {reason}"
        case MaxAttemptsExceeded(max_attempts=n, last_error=last):
            return f"Maximum attempts exceeded ({n}); last error: {last}"
        case MaxIterationsExceeded(iterations=n, max_iterations=m):
            return f"Maximum iterations exceeded; reached {n} of {m} allowed"
        case ExecutionCancelled(attempt=attempt, phase=phase):
            return f"Execution cancelled at attempt {attempt} during {phase} phase"
        case ApiError(message=msg, status_code=status):
            if status is not None:
                return f"Model API error ({status}): {msg}"
            return f"Model API error: {msg}"
        case RateLimitExceeded(message=msg, retry_after=retry):
            if retry is not None:
                return f"Rate limit exceeded: {msg} (retry after {retry}s)"
            return f"Rate limit exceeded: {msg}"
        case TokenLimitExceeded(message=msg):
            return f"Token limit exceeded: {msg}"
        case InvalidResponse(message=msg):
            return f"Invalid model response: {msg}"
        case OutputToolNotUsed(expected=name):
            return f"Model did not call output tool; expected {name}"
        case SubmitBeforeOutput(iteration=iteration):
            return f"Model called submit before calling output tool (iteration {iteration})"
        case CallbackFailed(callback=name, message=msg):
            return f"Callback {name} failed: {msg}"
    return f"Unknown error: {safe_stringify(error)}"  # pragma: no cover


def format_agent_error(error: AgentError) -> str:
    """Render a single error, including its path and suggestion when present."""
    text = _message(error)
    if error.path:
        text = f"{text} at {error.path}"
    if error.suggestion:
        text = f"{text}. {error.suggestion}"
    return text


def format_agent_errors(errors: Iterable[AgentError]) -> str:
    """Render errors grouped by severity as markdown sections.

    Errors come first under ``## Errors (n)``, then ``## Warnings (n)``; each
    entry is a ``- `` bullet.  Empty groups are omitted.
    """
    errors = list(errors)
    sections: list[str] = []
    for severity, title in ((Severity.ERROR, "Errors"), (Severity.WARNING, "Warnings")):
        group = [e for e in errors if e.severity is severity]
        if group:
            bullets = "\n".join(f"- {format_agent_error(e)}" for e in group)
            sections.append(f"## {title} ({len(group)})\n{bullets}")
    return "\n\n".join(sections)
