"""Shared utilities for AutoFix CLI commands.

Module-level state carries the global options (--verbose, --quiet and the
logging options) from the app callback to the commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal

import typer
from rich.console import Console

from autofix.core.config import AutofixConfig, load_config
from autofix.core.exceptions import ConfigError
from autofix.core.logging import configure_logging, get_logger

_logger = get_logger("cli")


class ErrorMessages:
    """Constants for CLI error messages."""

    CONFIG_LOAD_ERROR = "Error loading config"
    CONFIG_SAVE_ERROR = "Error saving config"
    SPAWN_ERROR = "Could not start command"


# =============================================================================
# Output level management
# =============================================================================


class OutputLevel(str, Enum):
    """Output verbosity level."""

    QUIET = "quiet"  # Errors and the final status only
    NORMAL = "normal"
    VERBOSE = "verbose"  # Adds classification details and command output


_output_level: OutputLevel = OutputLevel.NORMAL


def set_output_level(level: OutputLevel) -> None:
    global _output_level
    _output_level = level


def is_verbose() -> bool:
    return _output_level == OutputLevel.VERBOSE


def is_quiet() -> bool:
    return _output_level == OutputLevel.QUIET


# =============================================================================
# Logging configuration
# =============================================================================


@dataclass
class CliLoggingConfig:
    """CLI logging options collected by the app callback."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: Path | None = None
    format: Literal["json", "console"] = "console"
    configured: bool = False


_log_config = CliLoggingConfig()


def set_log_level(level: str) -> None:
    """Set the log level (case-insensitive)."""
    _log_config.level = level.upper()  # type: ignore[assignment]


def set_log_file(path: Path | None) -> None:
    _log_config.file = path


def set_log_format(fmt: str) -> None:
    _log_config.format = fmt.lower()  # type: ignore[assignment]


def configure_global_logging(console: Console) -> None:
    """Configure logging from the global CLI options, once per session.

    Raises:
        typer.Exit: If the options are invalid.
    """
    if _log_config.configured:
        return

    try:
        configure_logging(
            level=_log_config.level,
            format=_log_config.format,
            file_path=_log_config.file,
        )
        _log_config.configured = True
    except ValueError as e:
        console.print(f"[red]Logging configuration error:[/red] {e}")
        raise typer.Exit(1) from None


def reset_cli_state() -> None:
    """Reset output and logging state (primarily for testing)."""
    global _output_level, _log_config
    _output_level = OutputLevel.NORMAL
    _log_config = CliLoggingConfig()


# =============================================================================
# Config loading
# =============================================================================


def load_config_or_exit(console: Console, config_file: Path | None = None) -> AutofixConfig:
    """Load configuration, printing the error and exiting 1 on failure."""
    try:
        return load_config(config_file)
    except ConfigError as e:
        _logger.error("config_load_failed", error=str(e))
        console.print(f"[red]{ErrorMessages.CONFIG_LOAD_ERROR}:[/red] {e}")
        raise typer.Exit(1) from None
