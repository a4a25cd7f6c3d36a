"""Prompt templates and builders."""

from conform.prompts.build import (
    build_error_prompt,
    build_system_prompt,
    build_user_prompt,
    format_feedback,
)
from conform.prompts.templates import (
    PromptKind,
    PromptResolutionError,
    PromptTemplate,
    resolve_prompt,
)

__all__ = [
    "PromptKind",
    "PromptResolutionError",
    "PromptTemplate",
    "build_error_prompt",
    "build_system_prompt",
    "build_user_prompt",
    "format_feedback",
    "resolve_prompt",
]
