"""Command runner: executes one command and captures its result.

Security Note: commands that tokenize cleanly are spawned directly with
``subprocess.run(argv)`` (no shell). Only commands that rely on shell
syntax (pipes, redirection, ``&&``, substitution, globbing, variable
assignment) are handed to ``/bin/sh -c``. AutoFix does not sandbox what
the command does either way.
"""

from __future__ import annotations

import os
import re
import shlex
import subprocess
import time

from autofix.core.constants import (
    DEFAULT_SHELL,
    EXIT_CODE_NOT_EXECUTABLE,
    EXIT_CODE_NOT_FOUND,
    EXIT_CODE_TIMEOUT,
)
from autofix.core.exceptions import ProcessSpawnError
from autofix.core.logging import get_logger
from autofix.execution.models import ExecutionResult

_logger = get_logger("runner")

# Characters whose meaning only a shell provides
_SHELL_SYNTAX = re.compile(r"[|&;<>()$`*?\[\]{}~\n]")

# Leading NAME=value assignment ("CC=clang make")
_ENV_ASSIGNMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")


def build_argv(command: str, shell: str = DEFAULT_SHELL) -> list[str]:
    """Tokenize a command into argv, falling back to ``sh -c``.

    Args:
        command: The command line as typed by the user.
        shell: Shell used when tokenization is not meaningful.

    Returns:
        argv suitable for ``subprocess.run``.
    """
    try:
        tokens = shlex.split(command)
    except ValueError:
        # Unbalanced quotes: let the shell report it
        return [shell, "-c", command]

    if not tokens:
        return [shell, "-c", command]
    if _SHELL_SYNTAX.search(command) or _ENV_ASSIGNMENT.match(tokens[0]):
        return [shell, "-c", command]
    return tokens


def _decode(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class CommandRunner:
    """Runs commands synchronously, blocking until the child exits.

    Process-level failures never raise: a non-zero exit, a missing binary
    or a non-executable file are all encoded in the returned
    ExecutionResult. Only a failure to spawn any process at all raises
    ProcessSpawnError.

    Example:
        runner = CommandRunner()
        result = runner.run("make build")
        if not result.success:
            print(result.stderr)
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        cwd: str | os.PathLike[str] | None = None,
        shell: str = DEFAULT_SHELL,
    ) -> None:
        """Initialize the runner.

        Args:
            timeout_seconds: Kill commands running longer than this (None = no limit).
            cwd: Working directory for commands (default: current directory).
            shell: Shell used for commands that need shell interpretation.
        """
        self.timeout_seconds = timeout_seconds
        self.cwd = cwd
        self.shell = shell

    def run(self, command: str) -> ExecutionResult:
        """Execute ``command`` and capture stdout, stderr and exit code.

        Raises:
            ProcessSpawnError: If no process could be spawned.
        """
        if self.cwd is not None and not os.path.isdir(self.cwd):
            # Would otherwise surface as FileNotFoundError, i.e. "command not found"
            raise ProcessSpawnError(command, f"working directory does not exist: {self.cwd}")

        argv = build_argv(command, self.shell)
        program = argv[0]
        _logger.debug("command_started", argv=argv)
        start = time.monotonic()

        try:
            completed = subprocess.run(
                argv,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError:
            return self._synthetic(
                command, EXIT_CODE_NOT_FOUND, f"{program}: command not found", start,
            )
        except PermissionError:
            return self._synthetic(
                command, EXIT_CODE_NOT_EXECUTABLE, f"{program}: permission denied", start,
            )
        except subprocess.TimeoutExpired as e:
            _logger.warning("command_timed_out", timeout=self.timeout_seconds)
            stderr = _decode(e.stderr)
            stderr += f"\ncommand timed out after {self.timeout_seconds}s"
            return ExecutionResult(
                command=command,
                exit_code=EXIT_CODE_TIMEOUT,
                stdout=_decode(e.stdout),
                stderr=stderr.lstrip("\n"),
                duration_seconds=time.monotonic() - start,
            )
        except OSError as e:
            _logger.error("process_spawn_failed", error=str(e))
            raise ProcessSpawnError(command, str(e)) from e

        result = ExecutionResult(
            command=command,
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            duration_seconds=time.monotonic() - start,
        )
        _logger.debug(
            "command_finished",
            exit_code=result.exit_code,
            duration_seconds=round(result.duration_seconds, 3),
        )
        return result

    def _synthetic(
        self, command: str, exit_code: int, stderr: str, start: float,
    ) -> ExecutionResult:
        """Result for a command whose program could not be executed."""
        _logger.debug("command_not_executable", exit_code=exit_code, stderr=stderr)
        return ExecutionResult(
            command=command,
            exit_code=exit_code,
            stderr=stderr,
            duration_seconds=time.monotonic() - start,
        )
