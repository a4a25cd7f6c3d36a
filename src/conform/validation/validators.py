"""Validator protocol and the two built-in validator kinds."""

from __future__ import annotations

import inspect
import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel

from conform.types.agents import ExecutionContext
from conform.types.validation import ValidatorKind

SCHEMA_DESCRIPTION = "Validates that your output matches the expected JSON schema structure"


@runtime_checkable
class Validator(Protocol):
    """A named unit of validation.

    ``validate`` returning normally means the output passed; raising means it
    failed, and the raised exception becomes the failure's error payload.
    """

    name: str
    description: str

    async def validate(self, output: Any, context: ExecutionContext) -> Any:
        ...


@dataclass(frozen=True, slots=True)
class Issue:
    """One semantic problem found by a custom validator."""

    message: str
    path: str | None = None


class SemanticValidationError(Exception):
    """Raised by custom validators that report several issues at once."""

    def __init__(self, issues: Iterable[Issue]) -> None:
        self.issues: tuple[Issue, ...] = tuple(issues)
        super().__init__("; ".join(i.message for i in self.issues))


@dataclass(frozen=True, slots=True)
class SchemaValidator:
    """Checks structural conformance against a pydantic model.

    Validation is strict: no type coercion, so ``{"x": "1"}`` does not satisfy
    ``x: float``.  The validated model instance replaces the raw output for
    every later layer and becomes the execution's final output.
    """

    kind: ClassVar[ValidatorKind] = ValidatorKind.SCHEMA
    model: type[BaseModel]
    name: str = "schema"
    description: str = SCHEMA_DESCRIPTION

    async def validate(self, output: Any, context: ExecutionContext) -> BaseModel:
        if isinstance(output, self.model):
            return output
        if isinstance(output, BaseModel):
            # An earlier schema layer already produced a model of another class.
            output = output.model_dump(mode="json")
        # Tool input arrives as parsed JSON; validating in JSON mode keeps
        # nested objects acceptable as plain dicts under strict rules.
        return self.model.model_validate_json(json.dumps(output), strict=True)

    def json_schema(self) -> dict[str, Any]:
        return self.model.model_json_schema()


@dataclass(frozen=True, slots=True)
class CustomValidator:
    """Wraps a sync or async ``fn(output, context)`` that raises on failure."""

    kind: ClassVar[ValidatorKind] = ValidatorKind.CUSTOM
    name: str
    description: str
    fn: Callable[[Any, ExecutionContext], Any]

    async def validate(self, output: Any, context: ExecutionContext) -> None:
        result = self.fn(output, context)
        if inspect.isawaitable(result):
            await result


def custom_validator(
    name: str,
    description: str,
    fn: Callable[[Any, ExecutionContext], Any] | None = None,
) -> Any:
    """Build a :class:`CustomValidator`, directly or as a decorator.

    Examples
    --------
    >>> @custom_validator("non_empty", "Title must not be blank")
    ... def non_empty(output, context):
    ...     if not output.title.strip():
    ...         raise ValueError("title is blank")
    """
    if fn is None:
        return lambda f: CustomValidator(name=name, description=description, fn=f)
    return CustomValidator(name=name, description=description, fn=fn)
