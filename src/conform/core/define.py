"""Agent definition construction and configuration validation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel

from conform.core.config import EngineSettings, load_settings
from conform.errors.codes import AGENT_CONSTRAINTS
from conform.errors.result import Err, Ok, Result
from conform.errors.types import (
    AgentError,
    EmptyDescription,
    EmptyModelName,
    EmptyName,
    EmptyOutputToolDescription,
    EmptyOutputToolName,
    HelperToolNameMismatch,
    InvalidMaxAttempts,
    InvalidMaxIterations,
    InvalidMaxTokens,
    InvalidTemperature,
    MissingOutputSchema,
)
from conform.prompts.templates import PromptKind, resolve_prompt
from conform.types.agents import (
    AgentConfig,
    AgentDefinition,
    ModelConfig,
    PromptsConfig,
    ToolsConfig,
    ValidationConfig,
)
from conform.validation.validators import SchemaValidator, Validator

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_int_at_least(value: Any, minimum: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


def _is_number_between(value: Any, low: float, high: float) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and low <= value <= high
    )


def _output_model(validators: Sequence[Validator]) -> type[BaseModel] | None:
    for validator in validators:
        if isinstance(validator, SchemaValidator):
            return validator.model
    return None


def _collect_errors(
    config: AgentConfig, model: ModelConfig, max_iterations: Any,
) -> list[AgentError]:
    """Check every independent constraint, returning all violations."""
    c = AGENT_CONSTRAINTS
    errors: list[AgentError] = []

    if _is_blank(config.name):
        errors.append(EmptyName(value=config.name))
    if _is_blank(config.description):
        errors.append(EmptyDescription(value=config.description))
    if _is_blank(model.name):
        errors.append(EmptyModelName(value=model.name))
    if _is_blank(config.tools.output.name):
        errors.append(EmptyOutputToolName(value=config.tools.output.name))
    if _is_blank(config.tools.output.description):
        errors.append(EmptyOutputToolDescription(value=config.tools.output.description))
    if _output_model(config.validation.validators) is None:
        errors.append(MissingOutputSchema())

    if not _is_int_at_least(config.validation.max_attempts, c.min_max_attempts):
        errors.append(
            InvalidMaxAttempts(value=config.validation.max_attempts, minimum=c.min_max_attempts)
        )
    if not _is_int_at_least(max_iterations, c.min_max_iterations):
        errors.append(InvalidMaxIterations(value=max_iterations, minimum=c.min_max_iterations))
    if not _is_number_between(model.temperature, c.min_temperature, c.max_temperature):
        errors.append(
            InvalidTemperature(
                value=model.temperature,
                minimum=c.min_temperature,
                maximum=c.max_temperature,
            )
        )
    if not _is_int_at_least(model.max_tokens, c.min_max_tokens):
        errors.append(InvalidMaxTokens(value=model.max_tokens, minimum=c.min_max_tokens))

    for key, tool in config.tools.helpers.items():
        if tool.name != key:
            errors.append(
                HelperToolNameMismatch(key=key, tool_name=tool.name, path=f"tools.helpers.{key}")
            )

    return errors


def define_agent(
    config: AgentConfig,
    *,
    settings: EngineSettings | None = None,
) -> Result[AgentDefinition, list[AgentError]]:
    """Validate *config* and freeze it into an :class:`AgentDefinition`.

    All configuration problems are reported together in the ``Err`` list.
    Prompt templates are loaded here; a template that cannot be read or
    compiled raises :class:`~conform.prompts.templates.PromptResolutionError`.
    """
    settings = settings or load_settings()
    max_iterations = config.validation.max_iterations
    if max_iterations is None:
        max_iterations = settings.default_max_iterations
    model = config.model
    if model.name is None:
        model = replace(model, name=settings.default_model)

    errors = _collect_errors(config, model, max_iterations)
    if errors:
        logger.debug("Agent %r rejected with %d configuration error(s)", config.name, len(errors))
        return Err(errors)

    prompts = PromptsConfig(
        system=resolve_prompt(config.prompts.system, PromptKind.SYSTEM),
        user=resolve_prompt(config.prompts.user, PromptKind.USER),
        error=resolve_prompt(config.prompts.error, PromptKind.ERROR),
        error_formatter=config.prompts.error_formatter,
    )
    output_model = _output_model(config.validation.validators)
    assert output_model is not None

    definition = AgentDefinition(
        name=config.name.strip(),
        description=config.description.strip(),
        model=model,
        prompts=prompts,
        tools=ToolsConfig(
            output=config.tools.output,
            helpers=MappingProxyType(dict(config.tools.helpers)),
        ),
        validation=ValidationConfig(
            validators=tuple(config.validation.validators),
            max_attempts=config.validation.max_attempts,
            max_iterations=max_iterations,
        ),
        observability=config.observability,
        output_model=output_model,
        initial_run_state=config.initial_run_state,
        initial_attempt_state=config.initial_attempt_state,
    )
    logger.debug("Defined agent %r", definition.name)
    return Ok(definition)
