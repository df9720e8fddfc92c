"""Shared test helpers for AutoFix tests."""

from __future__ import annotations

from collections.abc import Iterable

from autofix.execution.models import ExecutionResult


def make_result(
    command: str, exit_code: int = 0, stdout: str = "", stderr: str = "",
) -> ExecutionResult:
    """Build an ExecutionResult for scripted runners."""
    return ExecutionResult(command=command, exit_code=exit_code, stdout=stdout, stderr=stderr)


class ScriptedRunner:
    """Stands in for CommandRunner, answering from per-command queues.

    Each command maps to a list of results consumed in order; the last one
    repeats once the list is exhausted. Every executed command is recorded
    in ``calls``.
    """

    def __init__(self, script: dict[str, Iterable[ExecutionResult]]) -> None:
        self.script = {cmd: list(results) for cmd, results in script.items()}
        self.calls: list[str] = []

    def run(self, command: str) -> ExecutionResult:
        self.calls.append(command)
        results = self.script[command]
        if len(results) > 1:
            return results.pop(0)
        return results[0]
