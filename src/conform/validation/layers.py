"""The fail-fast validation pipeline."""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Sequence
from typing import Any

from conform.core.cancellation import ExecutionAborted, race
from conform.hooks.manager import HookDispatcher
from conform.types.agents import ExecutionContext
from conform.types.hooks import HookEvent
from conform.types.validation import (
    Invalid,
    LayerInfo,
    LayerResult,
    Valid,
    ValidationOutcome,
    ValidatorKind,
)
from conform.validation.validators import SchemaValidator, Validator

logger = logging.getLogger(__name__)


class ValidatorMutationError(Exception):
    """A validator changed the output it was given."""

    def __init__(self, validator_name: str) -> None:
        super().__init__(f"Validator attempted to mutate input ({validator_name})")
        self.validator_name = validator_name


def _kind(validator: Validator) -> ValidatorKind:
    # Third-party validators without a kind are treated as custom checks.
    return getattr(validator, "kind", ValidatorKind.CUSTOM)


def _mutated(before: Any, after: Any) -> bool:
    # Objects without value equality cannot be compared meaningfully.
    if type(before).__eq__ is object.__eq__:
        return False
    return before != after


async def validate_layers(
    output: Any,
    validators: Sequence[Validator],
    context: ExecutionContext,
    hooks: HookDispatcher | None = None,
    signal: asyncio.Event | None = None,
) -> ValidationOutcome:
    """Run *validators* in order, stopping at the first failure.

    Each validator receives a private copy of the candidate; altering it is
    reported as a failure of that validator.  A schema validator's return
    value replaces the candidate for the layers after it.
    """
    hooks = hooks or HookDispatcher()
    current = output
    total = len(validators)

    for index, validator in enumerate(validators, start=1):
        await hooks.fire(
            HookEvent.VALIDATION_LAYER_START,
            context,
            LayerInfo(
                name=validator.name,
                description=validator.description,
                kind=_kind(validator),
                index=index,
                total=total,
            ),
        )

        snapshot = copy.deepcopy(current)
        error: BaseException | None = None
        result: Any = None
        try:
            result = await race(validator.validate(snapshot, context), signal, "validation")
        except ExecutionAborted:
            raise
        except Exception as exc:
            error = exc
        else:
            if _mutated(snapshot, current):
                error = ValidatorMutationError(validator.name)

        if error is not None:
            logger.debug("Validation layer %s rejected output: %s", validator.name, error)
            await hooks.fire(
                HookEvent.VALIDATION_LAYER_COMPLETE,
                context,
                LayerResult(name=validator.name, passed=False, error=error),
            )
            return Invalid(
                error=error,
                validator_name=validator.name,
                validator_description=validator.description,
            )

        if isinstance(validator, SchemaValidator):
            current = result
        await hooks.fire(
            HookEvent.VALIDATION_LAYER_COMPLETE,
            context,
            LayerResult(name=validator.name, passed=True),
        )

    return Valid(output=current)
