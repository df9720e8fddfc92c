"""AutoFix CLI.

The CLI is built with Typer. Global options (--verbose, --quiet, --version
and the logging options) are handled by the app callback before any
command runs; commands live in the ``commands`` package.

Package structure:
    cli/
    ├── __init__.py           # App assembly and global options
    ├── helpers.py            # Output level, logging setup, config loading
    ├── output.py             # Rich formatting
    └── commands/
        ├── run.py            # run command
        ├── config_cmd.py     # config show / set / path
        └── setup.py          # setup wizard
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from autofix import __version__

from . import helpers as helpers
from .commands import config_app, run, setup
from .helpers import (
    OutputLevel,
    configure_global_logging,
    set_log_file,
    set_log_format,
    set_log_level,
    set_output_level,
)
from .output import console

app = typer.Typer(
    name="autofix",
    help="Self-healing command runner",
    add_completion=False,
    no_args_is_help=True,
)


# =============================================================================
# Global option callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"AutoFix {__version__}")
        raise typer.Exit()


def verbose_callback(value: bool) -> None:
    if value:
        set_output_level(OutputLevel.VERBOSE)


def quiet_callback(value: bool) -> None:
    if value:
        set_output_level(OutputLevel.QUIET)


def log_level_callback(value: str | None) -> str | None:
    if value:
        set_log_level(value)
    return value


def log_file_callback(value: Path | None) -> Path | None:
    if value:
        set_log_file(value)
    return value


def log_format_callback(value: str | None) -> str | None:
    if value:
        set_log_format(value)
    return value


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        callback=verbose_callback,
        is_eager=True,
        help="Show classification details and a run summary",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        callback=quiet_callback,
        is_eager=True,
        help="Show only the final status",
    ),
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            callback=log_level_callback,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
            envvar="AUTOFIX_LOG_LEVEL",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            callback=log_file_callback,
            help="Path for log file output",
            envvar="AUTOFIX_LOG_FILE",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            callback=log_format_callback,
            help="Log format: json or console",
            envvar="AUTOFIX_LOG_FORMAT",
        ),
    ] = None,
) -> None:
    """AutoFix - run commands and fix what breaks them."""
    configure_global_logging(console)


@app.command()
def version() -> None:
    """Show version."""
    console.print(f"AutoFix {__version__}")


app.command(context_settings={"allow_interspersed_args": False})(run)
app.command()(setup)
app.add_typer(config_app)


__all__ = [
    "app",
    "main",
    "console",
    "OutputLevel",
]
