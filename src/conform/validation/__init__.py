"""Validators, the fail-fast pipeline and corrective-prompt formatting."""

from conform.validation.format import format_for_prompt, format_outcome, render_error
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

__all__ = [
    "CustomValidator",
    "Issue",
    "SchemaValidator",
    "SemanticValidationError",
    "Validator",
    "ValidatorKind",
    "ValidatorMutationError",
    "custom_validator",
    "format_for_prompt",
    "format_outcome",
    "render_error",
    "validate_layers",
]
