"""Tests for conform.prompts — template resolution and prompt building."""

from __future__ import annotations

import pytest

from conform.core.define import define_agent
from conform.errors import ErrorCode, Err, Ok
from conform.prompts.build import build_error_prompt, build_system_prompt, build_user_prompt
from conform.prompts.templates import (
    PromptKind,
    PromptResolutionError,
    PromptTemplate,
    resolve_prompt,
)
from conform.types.agents import ExecutionContext, PromptsConfig
from tests.conftest import make_config


def _ctx(attempt: int = 1) -> ExecutionContext:
    return ExecutionContext(attempt=attempt, max_attempts=3, iteration=1, max_iterations=5)


class TestResolvePrompt:
    @pytest.mark.asyncio
    async def test_string_is_a_template(self):
        build = resolve_prompt("Attempt {{ context.attempt }} for {{ input.name }}", PromptKind.USER)
        assert await build({"name": "doc"}, _ctx(2)) == "Attempt 2 for doc"

    @pytest.mark.asyncio
    async def test_plain_string_renders_verbatim(self):
        build = resolve_prompt("You are helpful.", PromptKind.SYSTEM)
        assert await build(None, _ctx()) == "You are helpful."

    @pytest.mark.asyncio
    async def test_error_template_gets_error(self):
        build = resolve_prompt("Please fix:\n{{ error }}", PromptKind.ERROR)
        assert await build("x is wrong", _ctx()) == "Please fix:\nx is wrong"

    @pytest.mark.asyncio
    async def test_markup_not_escaped(self):
        build = resolve_prompt("{{ input }}", PromptKind.USER)
        assert await build("<b>&</b>", _ctx()) == "<b>&</b>"

    @pytest.mark.asyncio
    async def test_sync_callable(self):
        build = resolve_prompt(lambda arg, ctx: f"{arg}:{ctx.attempt}", PromptKind.USER)
        assert await build("q", _ctx(3)) == "q:3"

    @pytest.mark.asyncio
    async def test_async_callable(self):
        async def system(arg, ctx):
            return "async system"

        build = resolve_prompt(system, PromptKind.SYSTEM)
        assert await build(None, _ctx()) == "async system"

    @pytest.mark.asyncio
    async def test_file_template(self, tmp_path):
        path = tmp_path / "system.j2"
        path.write_text("Role: {{ input.role }}\n")
        build = resolve_prompt(PromptTemplate(path=path), PromptKind.SYSTEM)
        assert await build({"role": "judge"}, _ctx()) == "Role: judge\n"

    def test_template_needs_exactly_one_source(self):
        with pytest.raises(PromptResolutionError):
            resolve_prompt(PromptTemplate(), PromptKind.USER)
        with pytest.raises(PromptResolutionError):
            resolve_prompt(PromptTemplate(source="a", path="b"), PromptKind.USER)

    def test_error_names_the_kind(self):
        with pytest.raises(PromptResolutionError) as exc_info:
            resolve_prompt("{{ unclosed", PromptKind.ERROR)
        assert exc_info.value.kind is PromptKind.ERROR
        assert str(exc_info.value).startswith("Cannot resolve error prompt:")


class TestBuildPrompts:
    @pytest.mark.asyncio
    async def test_builds_all_three(self, config, settings):
        definition = define_agent(config, settings=settings).value
        assert await build_system_prompt(definition, {}, _ctx()) == Ok("You answer with a number.")
        assert await build_user_prompt(definition, {"question": "1+1"}, _ctx()) == Ok("Question: 1+1")
        assert await build_error_prompt(definition, "bad x", _ctx(2)) == Ok("Fix this:\nbad x")

    @pytest.mark.asyncio
    async def test_undefined_variable_fails_generation(self, config, settings):
        definition = define_agent(config, settings=settings).value
        result = await build_user_prompt(definition, {"other": 1}, _ctx())
        assert isinstance(result, Err)
        [error] = result.error
        assert error.code is ErrorCode.PROMPT_GENERATION_FAILED
        assert error.prompt_type == "user"
        assert error.reason.startswith("UndefinedError")

    @pytest.mark.asyncio
    async def test_raising_builder(self, settings):
        def broken(arg, ctx):
            raise RuntimeError("boom")

        config = make_config(prompts=PromptsConfig(system=broken, user="u", error="e"))
        definition = define_agent(config, settings=settings).value
        result = await build_system_prompt(definition, {}, _ctx(2))
        assert isinstance(result, Err)
        assert result.error[0].reason == "RuntimeError: boom"
        assert result.error[0].attempt == 2

    @pytest.mark.asyncio
    async def test_non_string_result(self, settings):
        config = make_config(prompts=PromptsConfig(system="s", user=lambda arg, ctx: 42, error="e"))
        definition = define_agent(config, settings=settings).value
        result = await build_user_prompt(definition, {}, _ctx())
        assert isinstance(result, Err)
        assert "expected str" in result.error[0].reason
