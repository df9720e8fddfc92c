"""Run command for the AutoFix CLI.

Implements `autofix run`, which executes a command and heals it when it
fails: the engine's steps are streamed to the console by a StepPrinter
observer, and the process exits with the outcome's exit code.
"""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import typer

from autofix.backends import create_backend
from autofix.core.environment import detect_environment
from autofix.core.exceptions import ProcessSpawnError
from autofix.core.logging import get_logger
from autofix.healing import SelfHealingEngine

from ..helpers import ErrorMessages, is_quiet, is_verbose, load_config_or_exit
from ..output import StepPrinter, console, print_outcome_summary

_logger = get_logger("cli.run")


def run(
    command: list[str] = typer.Argument(
        ...,
        help="Command to execute, e.g. autofix run 'npm install'",
        metavar="COMMAND...",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Apply fixes without confirmation for this run",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.autofix/config.yaml)",
    ),
) -> None:
    """Execute a command, fixing and retrying it when it fails.

    Examples:
        autofix run 'npm install'
        autofix run -y gcc foo.c
        autofix run -- make -j4
    """
    # One argument is a shell string; several are argv words to re-quote
    cmd = (command[0] if len(command) == 1 else shlex.join(command)).strip()
    if not cmd:
        console.print("[red]Error:[/red] command required")
        raise typer.Exit(1)

    config = load_config_or_exit(console, config_file)
    settings = config.snapshot(auto_execute=True if yes else None)

    environment = detect_environment()
    backend = create_backend(config.llm)
    printer = StepPrinter(
        console,
        environment=environment,
        quiet=is_quiet(),
        verbose=is_verbose(),
    )
    engine = SelfHealingEngine(
        environment=environment,
        backend=backend,
        settings=settings,
        observers=[printer],
    )

    try:
        outcome = engine.run(cmd)
    except ProcessSpawnError as e:
        _logger.error("process_spawn_failed", error=str(e))
        console.print(f"[red]{ErrorMessages.SPAWN_ERROR}:[/red] {e}")
        raise typer.Exit(1) from None
    finally:
        backend.close()

    if outcome.success and outcome.result is not None and not is_quiet():
        # Command output goes to stdout untouched so it can be piped
        sys.stdout.write(outcome.result.stdout)
        sys.stdout.flush()

    if is_verbose():
        print_outcome_summary(console, outcome)

    raise typer.Exit(outcome.exit_code)
