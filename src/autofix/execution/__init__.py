"""Command execution: runner and result model."""

from autofix.execution.models import ExecutionResult
from autofix.execution.runner import CommandRunner, build_argv

__all__ = ["CommandRunner", "ExecutionResult", "build_argv"]
