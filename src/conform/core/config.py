"""Configuration loading (TOML, env vars)."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from current directory (and parents), won't override existing env vars
load_dotenv()

CONFIG_DIR = ".conform"
CONFIG_FILE = "config.toml"

DEFAULT_MAX_ITERATIONS = 10
DEFAULT_MODEL = "claude-sonnet-4-6"
DEFAULT_LOG_LEVEL = "WARNING"

ENV_MAP = {
    "anthropic": "ANTHROPIC_API_KEY",
}


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Process-wide defaults applied when an agent leaves them unset."""

    default_max_iterations: int = DEFAULT_MAX_ITERATIONS
    default_model: str = DEFAULT_MODEL
    log_level: str = DEFAULT_LOG_LEVEL


def _read_toml(path: Path) -> dict[str, Any] | None:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return None


def load_toml_config(cwd: str | None = None) -> dict[str, Any]:
    """Load configuration from the first ``.conform/config.toml`` found.

    Searched in *cwd*, the process working directory, then ``~/.conform``.
    """
    candidates: list[Path] = []
    if cwd:
        candidates.append(Path(cwd) / CONFIG_DIR / CONFIG_FILE)
    candidates.append(Path.cwd() / CONFIG_DIR / CONFIG_FILE)
    candidates.append(Path.home() / CONFIG_DIR / CONFIG_FILE)

    for path in candidates:
        if path.exists():
            data = _read_toml(path)
            if data is not None:
                return data
    return {}


def load_env_config() -> dict[str, Any]:
    """Load engine overrides from environment variables."""
    config: dict[str, Any] = {}

    if raw := os.environ.get("CONFORM_MAX_ITERATIONS"):
        try:
            config["default_max_iterations"] = int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer CONFORM_MAX_ITERATIONS=%r", raw)
    if model := os.environ.get("CONFORM_MODEL"):
        config["default_model"] = model
    if level := os.environ.get("CONFORM_LOG_LEVEL"):
        config["log_level"] = level.upper()

    return config


def load_settings(cwd: str | None = None) -> EngineSettings:
    """Merge defaults, the ``[engine]`` TOML section and env overrides."""
    merged: dict[str, Any] = {}
    engine_section = load_toml_config(cwd).get("engine", {})
    if isinstance(engine_section, dict):
        for key in ("default_max_iterations", "default_model", "log_level"):
            if key in engine_section:
                merged[key] = engine_section[key]
    merged.update(load_env_config())
    return EngineSettings(**merged)


def resolve_api_key(provider: str, explicit_key: str | None = None) -> str | None:
    """Resolve API key for a provider from explicit value, environment, or config file."""
    if explicit_key:
        return explicit_key

    env_var = ENV_MAP.get(provider)
    if env_var and (val := os.environ.get(env_var)):
        return val

    providers = load_toml_config().get("providers", {})
    if isinstance(providers, dict):
        key = providers.get(provider, {}).get("api_key")
        if key:
            return key
    return None
