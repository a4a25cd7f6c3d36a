"""Tests for conform.validation — validators and the fail-fast pipeline."""

from __future__ import annotations

import asyncio

import pytest
from pydantic import BaseModel, Field, ValidationError

from conform.core.cancellation import ExecutionAborted
from conform.hooks.manager import HookDispatcher
from conform.types.agents import ExecutionContext
from conform.types.hooks import ExecuteCallbacks
from conform.types.validation import Invalid, LayerInfo, LayerResult, Valid
from conform.validation.layers import ValidatorMutationError, validate_layers
from conform.validation.validators import (
    CustomValidator,
    Issue,
    SchemaValidator,
    SemanticValidationError,
    Validator,
    ValidatorKind,
    custom_validator,
)
from tests.conftest import Answer


def _ctx() -> ExecutionContext:
    return ExecutionContext(attempt=1, max_attempts=3, iteration=1, max_iterations=5)


class Nested(BaseModel):
    answer: Answer
    tags: list[str]


class Positive(BaseModel):
    x: float = Field(gt=0)


class TestSchemaValidator:
    @pytest.mark.asyncio
    async def test_accepts_matching_dict(self):
        result = await SchemaValidator(Answer).validate({"x": 1.5}, _ctx())
        assert result == Answer(x=1.5)

    @pytest.mark.asyncio
    async def test_integer_satisfies_float(self):
        result = await SchemaValidator(Answer).validate({"x": 1}, _ctx())
        assert result.x == 1.0

    @pytest.mark.asyncio
    async def test_no_string_coercion(self):
        with pytest.raises(ValidationError):
            await SchemaValidator(Answer).validate({"x": "1"}, _ctx())

    @pytest.mark.asyncio
    async def test_nested_objects_accepted_as_dicts(self):
        result = await SchemaValidator(Nested).validate(
            {"answer": {"x": 2}, "tags": ["a"]}, _ctx(),
        )
        assert result.answer.x == 2.0

    @pytest.mark.asyncio
    async def test_model_instance_passes_through(self):
        value = Answer(x=3.0)
        assert await SchemaValidator(Answer).validate(value, _ctx()) is value

    @pytest.mark.asyncio
    async def test_model_of_another_class_is_revalidated(self):
        result = await SchemaValidator(Positive).validate(Answer(x=2.5), _ctx())
        assert result == Positive(x=2.5)

    @pytest.mark.asyncio
    async def test_model_of_another_class_can_fail(self):
        with pytest.raises(ValidationError):
            await SchemaValidator(Positive).validate(Answer(x=-1.0), _ctx())

    def test_defaults_and_protocol(self):
        validator = SchemaValidator(Answer)
        assert validator.kind is ValidatorKind.SCHEMA
        assert validator.name == "schema"
        assert "JSON schema" in validator.description
        assert isinstance(validator, Validator)
        assert validator.json_schema()["properties"]["x"]["type"] == "number"


class TestCustomValidator:
    @pytest.mark.asyncio
    async def test_sync_function(self):
        seen = []
        validator = custom_validator("seen", "records", lambda o, c: seen.append(o))
        await validator.validate({"x": 1}, _ctx())
        assert seen == [{"x": 1}]

    @pytest.mark.asyncio
    async def test_async_function(self):
        async def check(output, context):
            raise ValueError("too small")

        validator = CustomValidator(name="min", description="at least 10", fn=check)
        with pytest.raises(ValueError, match="too small"):
            await validator.validate({"x": 1}, _ctx())

    def test_decorator_form(self):
        @custom_validator("positive", "x must be positive")
        def positive(output, context):
            if output.x <= 0:
                raise SemanticValidationError([Issue("x must be positive", path="x")])

        assert isinstance(positive, CustomValidator)
        assert positive.kind is ValidatorKind.CUSTOM
        assert positive.name == "positive"

    def test_semantic_error_message(self):
        exc = SemanticValidationError([Issue("a"), Issue("b", path="y")])
        assert str(exc) == "a; b"
        assert len(exc.issues) == 2


class TestValidateLayers:
    @pytest.mark.asyncio
    async def test_all_pass_returns_schema_instance(self):
        outcome = await validate_layers(
            {"x": 2},
            [SchemaValidator(Answer), custom_validator("ok", "always", lambda o, c: None)],
            _ctx(),
        )
        assert outcome == Valid(output=Answer(x=2.0))

    @pytest.mark.asyncio
    async def test_later_layers_see_validated_instance(self):
        seen = []
        validators = [
            SchemaValidator(Answer),
            custom_validator("type", "records type", lambda o, c: seen.append(type(o))),
        ]
        await validate_layers({"x": 2}, validators, _ctx())
        assert seen == [Answer]

    @pytest.mark.asyncio
    async def test_fail_fast(self):
        calls = []

        def fail(output, context):
            calls.append("a")
            raise ValueError("A rejects")

        def never(output, context):
            calls.append("b")

        outcome = await validate_layers(
            {"x": 1},
            [custom_validator("a", "first", fail), custom_validator("b", "second", never)],
            _ctx(),
        )
        assert isinstance(outcome, Invalid)
        assert outcome.validator_name == "a"
        assert outcome.validator_description == "first"
        assert str(outcome.error) == "A rejects"
        assert calls == ["a"]

    @pytest.mark.asyncio
    async def test_schema_failure_reports_validation_error(self):
        outcome = await validate_layers({"x": "1"}, [SchemaValidator(Answer)], _ctx())
        assert isinstance(outcome, Invalid)
        assert isinstance(outcome.error, ValidationError)
        assert outcome.validator_name == "schema"

    @pytest.mark.asyncio
    async def test_several_schema_layers_pass(self):
        seen = []
        validators = [
            SchemaValidator(Answer),
            SchemaValidator(Positive, name="positive", description="x must be positive"),
            custom_validator("type", "records type", lambda o, c: seen.append(type(o))),
        ]
        outcome = await validate_layers({"x": 1}, validators, _ctx())
        assert outcome == Valid(output=Positive(x=1.0))
        assert seen == [Positive]

    @pytest.mark.asyncio
    async def test_later_schema_layer_rejects(self):
        outcome = await validate_layers(
            {"x": -2},
            [SchemaValidator(Answer), SchemaValidator(Positive, name="positive")],
            _ctx(),
        )
        assert isinstance(outcome, Invalid)
        assert outcome.validator_name == "positive"
        assert isinstance(outcome.error, ValidationError)

    @pytest.mark.asyncio
    async def test_custom_return_value_is_ignored(self):
        outcome = await validate_layers(
            {"x": 1},
            [SchemaValidator(Answer), custom_validator("r", "returns", lambda o, c: "replacement")],
            _ctx(),
        )
        assert outcome.output == Answer(x=1.0)

    @pytest.mark.asyncio
    async def test_mutating_dict_is_rejected(self):
        def mutate(output, context):
            output["x"] = 99

        original = {"x": 1}
        outcome = await validate_layers(original, [custom_validator("m", "mutates", mutate)], _ctx())
        assert isinstance(outcome, Invalid)
        assert isinstance(outcome.error, ValidatorMutationError)
        assert str(outcome.error) == "Validator attempted to mutate input (m)"
        assert original == {"x": 1}

    @pytest.mark.asyncio
    async def test_mutating_model_is_rejected(self):
        def mutate(output, context):
            output.x = 42.0

        outcome = await validate_layers(
            {"x": 1}, [SchemaValidator(Answer), custom_validator("m", "mutates", mutate)], _ctx(),
        )
        assert isinstance(outcome, Invalid)
        assert outcome.validator_name == "m"

    @pytest.mark.asyncio
    async def test_empty_validator_list_is_valid(self):
        assert await validate_layers({"x": 1}, [], _ctx()) == Valid(output={"x": 1})

    @pytest.mark.asyncio
    async def test_layer_hooks(self):
        events = []
        hooks = HookDispatcher(ExecuteCallbacks(
            on_validation_layer_start=lambda ctx, info: events.append(info),
            on_validation_layer_complete=lambda ctx, res: events.append(res),
        ))

        def reject(output, context):
            raise ValueError("no")

        await validate_layers(
            {"x": 1},
            [SchemaValidator(Answer), custom_validator("b", "second", reject)],
            _ctx(),
            hooks,
        )
        assert events[0] == LayerInfo(
            name="schema",
            description=SchemaValidator(Answer).description,
            kind=ValidatorKind.SCHEMA,
            index=1,
            total=2,
        )
        assert events[1] == LayerResult(name="schema", passed=True)
        assert events[2] == LayerInfo(
            name="b", description="second", kind=ValidatorKind.CUSTOM, index=2, total=2,
        )
        assert isinstance(events[3], LayerResult)
        assert events[3].passed is False
        assert str(events[3].error) == "no"

    @pytest.mark.asyncio
    async def test_cancelled_while_validating(self):
        started = asyncio.Event()

        async def slow(output, context):
            started.set()
            await asyncio.sleep(3600)

        signal = asyncio.Event()

        async def cancel_when_started():
            await started.wait()
            signal.set()

        canceller = asyncio.create_task(cancel_when_started())
        with pytest.raises(ExecutionAborted) as exc_info:
            await validate_layers({"x": 1}, [custom_validator("slow", "waits", slow)], _ctx(), signal=signal)
        await canceller
        assert exc_info.value.phase == "validation"
