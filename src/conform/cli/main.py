"""CLI entry point for conform."""

from __future__ import annotations

import asyncio
import importlib
import json
import logging
import os
import sys
from typing import Any

import click
from rich.console import Console

from conform.cli.output import print_definition, print_errors, print_result
from conform.core.config import load_settings, resolve_api_key
from conform.core.define import define_agent
from conform.core.engine import execute
from conform.errors.exception import AgentProcessingError
from conform.errors.result import Err, Ok
from conform.prompts.templates import PromptResolutionError
from conform.providers.anthropic import AnthropicProvider
from conform.types.agents import AgentConfig, AgentDefinition
from conform.types.providers import ModelProvider

SUPPORTED_PROVIDERS = ("anthropic",)


def _load_target(target: str) -> AgentConfig | AgentDefinition:
    """Import ``MODULE:ATTR`` and return the agent config or definition it names.

    A callable attribute is called with no arguments first, so factories work.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter("expected MODULE:ATTR", param_hint="TARGET")

    # Console scripts do not put the working directory on sys.path.
    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.ClickException(f"Cannot import {module_name}: {exc}") from exc
    try:
        obj = getattr(module, attr)
    except AttributeError as exc:
        raise click.ClickException(f"{module_name} has no attribute {attr!r}") from exc

    if callable(obj) and not isinstance(obj, (AgentConfig, AgentDefinition)):
        obj = obj()
    if not isinstance(obj, (AgentConfig, AgentDefinition)):
        raise click.ClickException(
            f"{target} is a {type(obj).__name__}, expected AgentConfig or AgentDefinition"
        )
    return obj


def _define(obj: AgentConfig | AgentDefinition) -> AgentDefinition:
    """Resolve *obj* to a definition, raising with every configuration error."""
    if isinstance(obj, AgentDefinition):
        return obj
    try:
        result = define_agent(obj)
    except PromptResolutionError as exc:
        raise click.ClickException(str(exc)) from exc
    match result:
        case Err(error=errors):
            raise AgentProcessingError(errors)
        case Ok(value=definition):
            return definition
    raise AssertionError("unreachable")  # pragma: no cover


def _load_definition(target: str, console: Console) -> AgentDefinition:
    try:
        return _define(_load_target(target))
    except AgentProcessingError as exc:
        print_errors(exc.errors, console, title="Invalid agent")
        raise click.exceptions.Exit(1) from exc


def _read_input(input_json: str | None, input_file: str | None) -> Any:
    if input_json is not None and input_file is not None:
        raise click.UsageError("pass either --input or --input-file, not both")
    raw = input_json
    if input_file is not None:
        with open(input_file, encoding="utf-8") as f:
            raw = f.read()
    if raw is None:
        if sys.stdin.isatty():
            raise click.UsageError("no input given; use --input, --input-file or stdin")
        raw = sys.stdin.read()
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Input is not valid JSON: {exc}") from exc


async def _execute_with_timeout(
    definition: AgentDefinition,
    payload: Any,
    provider: ModelProvider,
    max_attempts: int | None,
    timeout: float | None,
) -> Any:
    signal = asyncio.Event()
    handle = None
    if timeout is not None:
        handle = asyncio.get_running_loop().call_later(timeout, signal.set)
    try:
        return await execute(
            definition,
            input=payload,
            provider=provider,
            signal=signal,
            max_attempts=max_attempts,
        )
    finally:
        if handle is not None:
            handle.cancel()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.version_option(package_name="conform")
def cli(verbose: bool) -> None:
    """conform -- drive an LLM to schema-valid structured output.

    \b
    Usage:
      conform check myagents.summary:CONFIG
      conform run myagents.summary:CONFIG --input '{"text": "..."}'
    """
    settings = load_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("check")
@click.argument("target")
def check_cmd(target: str) -> None:
    """Validate the agent config at TARGET (MODULE:ATTR)."""
    console = Console()
    definition = _load_definition(target, console)
    print_definition(definition, console)


@cli.command("run")
@click.argument("target")
@click.option("--input", "input_json", default=None, help="Input as a JSON document")
@click.option(
    "--input-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read the JSON input from a file",
)
@click.option("--max-attempts", type=int, default=None, help="Override the attempt budget")
@click.option("--timeout", type=float, default=None, help="Cancel after this many seconds")
@click.option("--api-key", default=None, help="Provider API key")
def run_cmd(
    target: str,
    input_json: str | None,
    input_file: str | None,
    max_attempts: int | None,
    timeout: float | None,
    api_key: str | None,
) -> None:
    """Execute the agent at TARGET against a JSON input."""
    console = Console()
    definition = _load_definition(target, console)
    if definition.model.provider not in SUPPORTED_PROVIDERS:
        raise click.ClickException(
            f"Unsupported provider {definition.model.provider!r}; "
            f"supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    payload = _read_input(input_json, input_file)
    provider = AnthropicProvider(api_key=resolve_api_key(definition.model.provider, api_key))

    result = asyncio.run(
        _execute_with_timeout(definition, payload, provider, max_attempts, timeout)
    )
    match result:
        case Ok(value=success):
            print_result(success, console)
        case Err(error=failure):
            print_result(failure, console)
            raise click.exceptions.Exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
