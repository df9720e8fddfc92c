"""Configuration management commands for the AutoFix CLI.

Subcommands:
- `autofix config show`: Display current config as a Rich table
- `autofix config set`: Update a config value
- `autofix config path`: Show config file location
"""

from __future__ import annotations

from pathlib import Path

import typer

from autofix.core.config import (
    flatten_config,
    load_config,
    resolve_config_path,
    save_config,
    set_config_value,
)
from autofix.core.exceptions import ConfigError
from autofix.core.logging import get_logger

from ..helpers import ErrorMessages, load_config_or_exit
from ..output import console, create_config_table

_logger = get_logger("cli.config")

config_app = typer.Typer(
    name="config",
    help="View and update AutoFix configuration.",
    invoke_without_command=True,
)

_CONFIG_OPTION_HELP = "Path to config file (default: ~/.autofix/config.yaml)"


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    """View and update AutoFix configuration."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


@config_app.command()
def show(
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help=_CONFIG_OPTION_HELP,
    ),
) -> None:
    """Display the current configuration as a table.

    API keys are masked.

    Examples:
        autofix config show
        autofix config show --config ./autofix.yaml
    """
    config = load_config_or_exit(console, config_file)
    resolved = resolve_config_path(config_file)
    flat = flatten_config(config.model_dump())
    console.print(create_config_table(flat, title=f"AutoFix configuration ({resolved})"))


@config_app.command("set")
def set_value(
    key: str = typer.Argument(
        ...,
        help="Config key in dot notation (e.g., llm.provider, safety.auto_execute)",
    ),
    value: str = typer.Argument(..., help="New value to set"),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help=_CONFIG_OPTION_HELP,
    ),
) -> None:
    """Update a configuration value.

    Values are validated against the configuration schema before saving.

    Examples:
        autofix config set llm.provider anthropic
        autofix config set llm.api_key sk-...
        autofix config set safety.auto_execute true
    """
    try:
        config = load_config(config_file)
        updated = set_config_value(config, key, value)
    except ConfigError as e:
        console.print(f"[red]Invalid value:[/red] {e}")
        raise typer.Exit(1) from None

    try:
        path = save_config(updated, config_file)
    except OSError as e:
        console.print(f"[red]{ErrorMessages.CONFIG_SAVE_ERROR}:[/red] {e}")
        raise typer.Exit(1) from None

    _logger.info("config_updated", key=key)
    shown = "****" if key.endswith("api_key") and value else value
    console.print(f"[green]Set[/green] {key} = {shown} in {path}")


@config_app.command()
def path(
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help=_CONFIG_OPTION_HELP,
    ),
) -> None:
    """Show the config file location and whether it exists."""
    resolved = resolve_config_path(config_file)
    status = "[green]exists[/green]" if resolved.exists() else "[yellow]not created[/yellow]"
    console.print(f"{resolved}  ({status})")
