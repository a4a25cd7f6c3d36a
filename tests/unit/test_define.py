"""Tests for conform.core.define — construction-time validation and freezing."""

from __future__ import annotations

import dataclasses

import pytest
from pydantic import BaseModel

from conform.core.config import EngineSettings
from conform.core.define import define_agent
from conform.errors import Err, ErrorCode, Ok
from conform.prompts.templates import PromptResolutionError, PromptTemplate
from conform.types.agents import (
    AgentDefinition,
    ExecutionContext,
    ModelConfig,
    PromptsConfig,
    ToolsConfig,
    ValidationConfig,
)
from conform.types.tools import HelperTool, OutputTool
from conform.validation.validators import SchemaValidator, custom_validator
from tests.conftest import Answer, make_config


class _Noop(BaseModel):
    pass


def _noop_tool(name: str) -> HelperTool:
    return HelperTool(name=name, description="does nothing", input_model=_Noop, reducer=lambda s, a: None)


def _ctx() -> ExecutionContext:
    return ExecutionContext(attempt=1, max_attempts=3, iteration=1, max_iterations=5)


class TestValidDefinition:
    def test_returns_ok(self, config, settings):
        result = define_agent(config, settings=settings)
        assert isinstance(result, Ok)
        assert isinstance(result.value, AgentDefinition)
        assert result.value.output_model is Answer

    def test_definition_is_frozen(self, config, settings):
        definition = define_agent(config, settings=settings).value
        with pytest.raises(dataclasses.FrozenInstanceError):
            definition.name = "other"  # type: ignore[misc]
        with pytest.raises(dataclasses.FrozenInstanceError):
            definition.model.temperature = 0.9  # type: ignore[misc]
        with pytest.raises(dataclasses.FrozenInstanceError):
            definition.validation.max_attempts = 10  # type: ignore[misc]
        with pytest.raises(dataclasses.FrozenInstanceError):
            definition.observability.track_cost = False  # type: ignore[misc]

    def test_helpers_are_read_only(self, settings):
        config = make_config(tools=ToolsConfig(
            output=OutputTool(name="submit_answer", description="Submit"),
            helpers={"noop": _noop_tool("noop")},
        ))
        definition = define_agent(config, settings=settings).value
        with pytest.raises(TypeError):
            definition.tools.helpers["other"] = _noop_tool("other")  # type: ignore[index]
        assert isinstance(definition.validation.validators, tuple)

    def test_later_config_changes_do_not_leak(self, settings):
        helpers = {"noop": _noop_tool("noop")}
        config = make_config(tools=ToolsConfig(
            output=OutputTool(name="submit_answer", description="Submit"), helpers=helpers,
        ))
        definition = define_agent(config, settings=settings).value
        helpers["late"] = _noop_tool("late")
        assert "late" not in definition.tools.helpers

    def test_default_max_iterations_from_settings(self):
        config = make_config(validation=ValidationConfig(validators=[SchemaValidator(Answer)]))
        definition = define_agent(config, settings=EngineSettings(default_max_iterations=7)).value
        assert definition.max_iterations == 7

    def test_explicit_max_iterations_wins(self, config):
        definition = define_agent(config, settings=EngineSettings(default_max_iterations=7)).value
        assert definition.max_iterations == 5

    def test_unset_model_name_from_settings(self):
        config = make_config(model=ModelConfig(provider="anthropic", temperature=0.2))
        definition = define_agent(config, settings=EngineSettings(default_model="claude-haiku-4-5")).value
        assert definition.model.name == "claude-haiku-4-5"
        assert definition.model.temperature == 0.2

    def test_explicit_model_name_wins(self, config):
        definition = define_agent(config, settings=EngineSettings(default_model="claude-haiku-4-5")).value
        assert definition.model.name == "claude-sonnet-4-6"

    @pytest.mark.asyncio
    async def test_prompts_resolved_to_builders(self, config, settings):
        definition = define_agent(config, settings=settings).value
        text = await definition.prompts.user({"question": "2+2?"}, _ctx())
        assert text == "Question: 2+2?"


class TestCollectedErrors:
    def test_single_violation(self, settings):
        result = define_agent(make_config(name="   "), settings=settings)
        assert isinstance(result, Err)
        assert [e.code for e in result.error] == [ErrorCode.EMPTY_NAME]

    def test_blank_model_name_is_not_defaulted(self, settings):
        config = make_config(model=ModelConfig(provider="anthropic", name=" "))
        result = define_agent(config, settings=settings)
        assert [e.code for e in result.error] == [ErrorCode.EMPTY_MODEL_NAME]

    def test_all_violations_reported_together(self, settings):
        config = make_config(
            name="",
            description=" ",
            model=ModelConfig(provider="anthropic", name="", temperature=1.5, max_tokens=0),
            tools=ToolsConfig(output=OutputTool(name="", description="")),
            validation=ValidationConfig(validators=[], max_attempts=0, max_iterations=0),
        )
        result = define_agent(config, settings=settings)
        assert isinstance(result, Err)
        codes = {e.code for e in result.error}
        assert codes == {
            ErrorCode.EMPTY_NAME,
            ErrorCode.EMPTY_DESCRIPTION,
            ErrorCode.EMPTY_MODEL_NAME,
            ErrorCode.EMPTY_OUTPUT_TOOL_NAME,
            ErrorCode.EMPTY_OUTPUT_TOOL_DESCRIPTION,
            ErrorCode.MISSING_OUTPUT_SCHEMA,
            ErrorCode.INVALID_MAX_ATTEMPTS,
            ErrorCode.INVALID_MAX_ITERATIONS,
            ErrorCode.INVALID_TEMPERATURE,
            ErrorCode.INVALID_MAX_TOKENS,
        }
        assert len(result.error) == 10

    def test_two_independent_violations(self, settings):
        config = make_config(
            model=ModelConfig(provider="anthropic", name="m", temperature=-0.1, max_tokens=0),
        )
        result = define_agent(config, settings=settings)
        assert len(result.error) == 2

    @pytest.mark.parametrize("temperature", [0.0, 1.0, 0.5])
    def test_temperature_bounds_inclusive(self, settings, temperature):
        config = make_config(model=ModelConfig(provider="anthropic", name="m", temperature=temperature))
        assert isinstance(define_agent(config, settings=settings), Ok)

    def test_bool_is_not_a_valid_attempt_count(self, settings):
        config = make_config(
            validation=ValidationConfig(validators=[SchemaValidator(Answer)], max_attempts=True),
        )
        result = define_agent(config, settings=settings)
        assert [e.code for e in result.error] == [ErrorCode.INVALID_MAX_ATTEMPTS]

    def test_helper_name_mismatch(self, settings):
        config = make_config(tools=ToolsConfig(
            output=OutputTool(name="submit_answer", description="Submit"),
            helpers={"alias": _noop_tool("real_name")},
        ))
        result = define_agent(config, settings=settings)
        assert [e.code for e in result.error] == [ErrorCode.HELPER_TOOL_NAME_MISMATCH]
        assert result.error[0].path == "tools.helpers.alias"

    def test_custom_validators_alone_miss_schema(self, settings):
        config = make_config(validation=ValidationConfig(
            validators=[custom_validator("c", "d", lambda o, c: None)],
        ))
        result = define_agent(config, settings=settings)
        assert [e.code for e in result.error] == [ErrorCode.MISSING_OUTPUT_SCHEMA]


class TestPromptResolution:
    def test_template_syntax_error_raises_immediately(self, settings):
        config = make_config(prompts=PromptsConfig(system="{% if %}", user="u", error="e"))
        with pytest.raises(PromptResolutionError) as exc_info:
            define_agent(config, settings=settings)
        assert exc_info.value.kind.value == "system"

    def test_missing_template_file_raises(self, settings, tmp_path):
        config = make_config(prompts=PromptsConfig(
            system="s",
            user=PromptTemplate(path=tmp_path / "missing.j2"),
            error="e",
        ))
        with pytest.raises(PromptResolutionError):
            define_agent(config, settings=settings)

    def test_template_file_loaded(self, settings, tmp_path):
        path = tmp_path / "user.j2"
        path.write_text("Hello {{ input.name }}")
        config = make_config(prompts=PromptsConfig(system="s", user=PromptTemplate(path=path), error="e"))
        assert isinstance(define_agent(config, settings=settings), Ok)

    def test_unsupported_source_raises(self, settings):
        config = make_config(prompts=PromptsConfig(system=42, user="u", error="e"))  # type: ignore[arg-type]
        with pytest.raises(PromptResolutionError):
            define_agent(config, settings=settings)
