"""Interactive setup wizard for the AutoFix CLI."""

from __future__ import annotations

import os
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.prompt import Confirm, Prompt

from autofix.backends.anthropic_api import DEFAULT_API_KEY_ENV as ANTHROPIC_KEY_ENV
from autofix.backends.openai_chat import DEFAULT_API_KEY_ENV as OPENAI_KEY_ENV
from autofix.core.config import AutofixConfig, LLMConfig, save_config
from autofix.core.constants import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_LLM_ENDPOINT,
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_PROVIDER,
)
from autofix.core.logging import get_logger

from ..helpers import ErrorMessages, load_config_or_exit
from ..output import console

_logger = get_logger("cli.setup")

PROVIDERS = ["openai", "anthropic", "local", "mock"]


def setup(
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.autofix/config.yaml)",
    ),
) -> None:
    """Configure the suggestion backend and confirmation policy interactively.

    An empty API key leaves the key to the provider's environment
    variable, or selects the mock backend when that is unset too.
    """
    existing = load_config_or_exit(console, config_file)

    console.print("[bold]AutoFix Setup[/bold]\n")

    current_provider = existing.llm.provider
    provider = Prompt.ask(
        "LLM provider",
        choices=PROVIDERS,
        default=current_provider if current_provider in PROVIDERS else DEFAULT_LLM_PROVIDER,
        console=console,
    )

    api_key = ""
    if provider in ("openai", "anthropic"):
        api_key = Prompt.ask(
            "API key (leave empty to use the environment, or mock if unset)",
            default="",
            password=True,
            show_default=False,
            console=console,
        )
        key_env = existing.llm.api_key_env or (
            OPENAI_KEY_ENV if provider == "openai" else ANTHROPIC_KEY_ENV
        )
        if not api_key and not os.environ.get(key_env):
            provider = "mock"

    endpoint = existing.llm.endpoint
    model = existing.llm.model
    if provider == "openai":
        endpoint = Prompt.ask(
            "API endpoint", default=existing.llm.endpoint or DEFAULT_LLM_ENDPOINT, console=console,
        )
        model = Prompt.ask(
            "Model", default=existing.llm.model or DEFAULT_LLM_MODEL, console=console,
        )
    elif provider == "anthropic":
        current = existing.llm.model
        model = Prompt.ask(
            "Model",
            default=DEFAULT_ANTHROPIC_MODEL if current == DEFAULT_LLM_MODEL else current,
            console=console,
        )

    auto_execute = Confirm.ask(
        "Apply fixes without asking for confirmation?",
        default=False,
        console=console,
    )

    try:
        config = AutofixConfig(
            llm=LLMConfig(
                provider=provider,
                api_key=api_key,
                api_key_env=existing.llm.api_key_env,
                endpoint=endpoint,
                model=model,
                timeout_seconds=existing.llm.timeout_seconds,
            ),
            safety=existing.safety.model_copy(update={"auto_execute": auto_execute}),
            execution=existing.execution,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid value:[/red] {e}")
        raise typer.Exit(1) from None

    try:
        path = save_config(config, config_file)
    except OSError as e:
        console.print(f"[red]{ErrorMessages.CONFIG_SAVE_ERROR}:[/red] {e}")
        raise typer.Exit(1) from None

    _logger.info("setup_completed", provider=provider)
    console.print("\n[green]Setup complete![/green]")
    console.print(f"Configuration saved to {path}")
