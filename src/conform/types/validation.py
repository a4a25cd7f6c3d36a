"""Validation outcome and per-layer reporting types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ValidatorKind(Enum):
    SCHEMA = "schema"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class Valid(Generic[T]):
    """Every layer accepted the candidate; *output* is the validated value."""

    output: T


@dataclass(frozen=True, slots=True)
class Invalid:
    """A layer rejected the candidate.

    *error* is whatever the validator raised; the validator's name and
    description are kept so a corrective prompt can say which layer failed.
    """

    error: Any
    validator_name: str
    validator_description: str


ValidationOutcome = Union[Valid[Any], Invalid]


@dataclass(frozen=True, slots=True)
class LayerInfo:
    """Passed to ``on_validation_layer_start``."""

    name: str
    description: str
    kind: ValidatorKind
    index: int  # 1-based
    total: int


@dataclass(frozen=True, slots=True)
class LayerResult:
    """Passed to ``on_validation_layer_complete``."""

    name: str
    passed: bool
    error: Any = None
