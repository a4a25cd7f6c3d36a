"""Rich-powered rendering of definitions and execution results."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from conform.errors.codes import Severity
from conform.errors.formatter import format_agent_error
from conform.errors.types import AgentError
from conform.types.agents import AgentDefinition
from conform.types.execution import ExecuteFailure, ExecuteMetadata, ExecuteSuccess

STYLE_LABEL = "bold #94a3b8"
STYLE_VALUE = "#e2e8f0"
STYLE_ERROR = "bold #f87171"
STYLE_WARNING = "bold #fbbf24"
STYLE_OK = "bold #34d399"


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


def _validator_label(validator: Any) -> str:
    kind = getattr(validator, "kind", None)
    return f"{validator.name} ({kind.value})" if kind is not None else validator.name


def print_definition(definition: AgentDefinition, console: Console) -> None:
    """Summarise a successfully defined agent."""
    table = Table(show_header=False, box=None)
    table.add_column(style=STYLE_LABEL)
    table.add_column(style=STYLE_VALUE)
    table.add_row("Agent", definition.name)
    table.add_row("Model", f"{definition.model.provider}/{definition.model.name}")
    output = definition.tools.output
    table.add_row("Output tool", f"{output.name} (reflection)" if output.reflects else output.name)
    table.add_row("Helper tools", ", ".join(definition.tools.helpers) or "(none)")
    table.add_row("Validators", " → ".join(_validator_label(v) for v in definition.validation.validators))
    table.add_row("Max attempts", str(definition.max_attempts))
    table.add_row("Max iterations", str(definition.max_iterations))
    console.print(Panel(table, title="[bold]Agent OK[/bold]", border_style="#34d399"))


def print_errors(errors: Sequence[AgentError], console: Console, title: str = "Errors") -> None:
    lines = []
    for error in errors:
        style = STYLE_WARNING if error.severity is Severity.WARNING else STYLE_ERROR
        lines.append(f"[{style}]{error.code.value}[/{style}] {format_agent_error(error)}")
    console.print(Panel("\n".join(lines), title=f"[bold]{title} ({len(errors)})[/bold]", border_style="#f87171"))


def _metadata_line(metadata: ExecuteMetadata) -> str:
    parts = []
    if metadata.attempts is not None:
        parts.append(f"Attempts: {metadata.attempts}")
    if metadata.tokens is not None:
        parts.append(f"Tokens: {metadata.tokens.total:,}")
    if metadata.latency_ms is not None:
        parts.append(f"Latency: {metadata.latency_ms:.0f}ms")
    if metadata.cost is not None:
        parts.append(f"Cost: ${metadata.cost:.4f}")
    return " | ".join(parts)


def print_result(result: ExecuteSuccess | ExecuteFailure, console: Console) -> None:
    """Print an execution result: the output JSON on success, errors otherwise."""
    match result:
        case ExecuteSuccess(output=output, metadata=metadata):
            console.print_json(json.dumps(_to_jsonable(output), default=str))
            console.print(f"[{STYLE_OK}]✓[/{STYLE_OK}] {_metadata_line(metadata)}", highlight=False)
        case ExecuteFailure(errors=errors, metadata=metadata):
            print_errors(errors, console, title="Execution failed")
            if metadata.callback_errors:
                print_errors(metadata.callback_errors, console, title="Callback failures")
            summary = _metadata_line(metadata)
            if summary:
                console.print(summary, highlight=False)
