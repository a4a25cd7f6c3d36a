"""Prompt generation at execution time."""

from __future__ import annotations

import logging
from typing import Any

from conform.errors.result import Err, Ok, Result
from conform.errors.types import AgentError, PromptGenerationFailed
from conform.prompts.templates import PromptKind, ResolvedPrompt
from conform.types.agents import AgentDefinition, ExecutionContext
from conform.types.validation import Invalid
from conform.validation.format import format_outcome

logger = logging.getLogger(__name__)


async def _build(
    kind: PromptKind,
    builder: ResolvedPrompt,
    arg: Any,
    context: ExecutionContext,
) -> Result[str, list[AgentError]]:
    try:
        text = await builder(arg, context)
    except Exception as exc:
        logger.warning("Failed to build %s prompt: %s", kind.value, exc)
        return Err([
            PromptGenerationFailed(
                prompt_type=kind.value,
                reason=f"{type(exc).__name__}: {exc}",
                attempt=context.attempt,
            )
        ])
    if not isinstance(text, str):
        return Err([
            PromptGenerationFailed(
                prompt_type=kind.value,
                reason=f"builder returned {type(text).__name__}, expected str",
                attempt=context.attempt,
            )
        ])
    return Ok(text)


async def build_system_prompt(
    definition: AgentDefinition, input: Any, context: ExecutionContext,
) -> Result[str, list[AgentError]]:
    return await _build(PromptKind.SYSTEM, definition.prompts.system, input, context)


async def build_user_prompt(
    definition: AgentDefinition, input: Any, context: ExecutionContext,
) -> Result[str, list[AgentError]]:
    return await _build(PromptKind.USER, definition.prompts.user, input, context)


async def build_error_prompt(
    definition: AgentDefinition, formatted_error: str, context: ExecutionContext,
) -> Result[str, list[AgentError]]:
    return await _build(PromptKind.ERROR, definition.prompts.error, formatted_error, context)


def format_feedback(
    definition: AgentDefinition, outcome: Invalid, context: ExecutionContext,
) -> Result[str, list[AgentError]]:
    """Render a rejected candidate for the error prompt.

    Uses the agent's ``error_formatter`` when it has one, otherwise
    :func:`~conform.validation.format.format_outcome`.
    """
    formatter = definition.prompts.error_formatter or format_outcome
    try:
        text = formatter(outcome)
    except Exception as exc:
        logger.warning("Error formatter failed: %s", exc)
        return Err([
            PromptGenerationFailed(
                prompt_type=PromptKind.ERROR.value,
                reason=f"error formatter raised {type(exc).__name__}: {exc}",
                attempt=context.attempt,
            )
        ])
    return Ok(text)
