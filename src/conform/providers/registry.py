"""Model catalogue, alias resolution and cost estimation."""

from __future__ import annotations

from conform.types.providers import ModelInfo, ProviderUsage

# ---------------------------------------------------------------------------
# Model catalogue
# ---------------------------------------------------------------------------

MODELS: dict[str, ModelInfo] = {
    "claude-opus-4-6": ModelInfo(
        id="claude-opus-4-6",
        provider="anthropic",
        display_name="Claude Opus 4.6",
        context_window=200_000,
        max_output_tokens=32_768,
        input_cost_per_mtok=15.00,
        output_cost_per_mtok=75.00,
        aliases=("opus",),
    ),
    "claude-sonnet-4-6": ModelInfo(
        id="claude-sonnet-4-6",
        provider="anthropic",
        display_name="Claude Sonnet 4.6",
        context_window=200_000,
        max_output_tokens=16_384,
        input_cost_per_mtok=3.00,
        output_cost_per_mtok=15.00,
        aliases=("sonnet",),
    ),
    "claude-haiku-4-5-20251001": ModelInfo(
        id="claude-haiku-4-5-20251001",
        provider="anthropic",
        display_name="Claude Haiku 4.5",
        context_window=200_000,
        max_output_tokens=8_192,
        input_cost_per_mtok=0.80,
        output_cost_per_mtok=4.00,
        aliases=("haiku",),
    ),
    "claude-3-5-sonnet-20241022": ModelInfo(
        id="claude-3-5-sonnet-20241022",
        provider="anthropic",
        display_name="Claude 3.5 Sonnet",
        context_window=200_000,
        max_output_tokens=8_192,
        input_cost_per_mtok=3.00,
        output_cost_per_mtok=15.00,
        aliases=("sonnet-3.5",),
    ),
}

ALIASES: dict[str, str] = {
    alias: model_id for model_id, info in MODELS.items() for alias in info.aliases
}


def resolve_model(name: str) -> ModelInfo:
    """Resolve a model name or alias to its :class:`ModelInfo`.

    Raises
    ------
    KeyError
        When *name* does not match any known model or alias.
    """
    resolved_id = ALIASES.get(name, name)
    if resolved_id not in MODELS:
        known = sorted(list(MODELS.keys()) + list(ALIASES.keys()))
        raise KeyError(f"Unknown model {name!r}. Known models and aliases: {known}")
    return MODELS[resolved_id]


def estimate_cost(model: str, usage: ProviderUsage) -> float | None:
    """USD cost of *usage* on *model*, or None for models not in the catalogue."""
    try:
        info = resolve_model(model)
    except KeyError:
        return None
    return (
        usage.input_tokens * info.input_cost_per_mtok
        + usage.output_tokens * info.output_cost_per_mtok
    ) / 1_000_000
