"""Render validation failures as corrective feedback for the model."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from conform.errors.formatter import format_agent_errors, safe_stringify
from conform.errors.types import AgentErrorBase
from conform.types.validation import Invalid
from conform.validation.validators import Issue, SemanticValidationError

DEFAULT_LAYER_NAME = "validation"
DEFAULT_LAYER_DESCRIPTION = "No description provided for validation layer"


def _render_schema_error(error: ValidationError) -> str:
    issues = error.errors()
    lines = [f"## Errors ({len(issues)})"]
    for issue in issues:
        lines.append(f"✖ {issue['msg']}")
        loc = ".".join(str(p) for p in issue["loc"])
        if loc:
            lines.append(f"  → at {loc}")
    return "\n".join(lines)


def _render_issues(issues: Sequence[Issue]) -> str:
    lines = [f"## Errors ({len(issues)})"]
    for issue in issues:
        suffix = f" at {issue.path}" if issue.path else ""
        lines.append(f"- {issue.message}{suffix}")
    return "\n".join(lines)


def render_error(error: Any) -> str:
    """Pick a renderer by the shape of *error*."""
    match error:
        case ValidationError():
            return _render_schema_error(error)
        case SemanticValidationError(issues=issues):
            return _render_issues(issues)
        case [AgentErrorBase(), *_]:
            return format_agent_errors(error)
        case [Issue(), *_]:
            return _render_issues(error)
        case Exception():
            return str(error)
    return safe_stringify(error, max_length=None)


def format_for_prompt(error: Any, layer_name: str, layer_description: str) -> str:
    """Explain which layer failed, what it checks, and what went wrong."""
    name = layer_name.strip() or DEFAULT_LAYER_NAME
    description = layer_description.strip() or DEFAULT_LAYER_DESCRIPTION
    return (
        f"The following errors occurred during {name}:\n"
        f"{description}\n\n"
        f"{render_error(error)}"
    )


def format_outcome(outcome: Invalid) -> str:
    return format_for_prompt(outcome.error, outcome.validator_name, outcome.validator_description)
