"""Result model for a single command execution."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing one command.

    Immutable once produced; every execution yields a new instance.
    """

    command: str
    """The command as requested (not the argv actually spawned)."""

    exit_code: int
    """Process exit code (124 timeout, 126 not executable, 127 not found)."""

    stdout: str = ""
    stderr: str = ""

    duration_seconds: float = 0.0
    """Wall-clock execution time."""

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def lines(self) -> list[str]:
        """Stdout split on newlines (no other parsing is attempted)."""
        return self.stdout.split("\n")
