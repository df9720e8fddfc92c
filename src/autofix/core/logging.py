"""Structured logging for AutoFix.

structlog renders through the standard ``logging`` module so the CLI can
send records to stderr or to a rotating file without touching the healed
command's stdout. Every entry carries the component that emitted it and,
inside a healing run, the run's correlation fields.

Usage:
    from autofix.core.logging import RunContext, configure_logging, get_logger, with_context

    configure_logging(level="INFO", format="json")
    logger = get_logger("engine")

    with with_context(RunContext(command="make build")):
        logger.info("fix_applied", fix="apt-get install -y make")
        # -> {"event": "fix_applied", "component": "engine", "run_id": ..., "command": "make build", ...}
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

# Substrings of keys whose values are replaced before rendering
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "api-key",
    "token",
    "secret",
    "password",
    "credential",
    "bearer",
    "authorization",
})

REDACTED = "[REDACTED]"


# =============================================================================
# Run correlation
# =============================================================================


@dataclass(frozen=True)
class RunContext:
    """Correlation fields shared by every log entry of one healing run.

    Attributes:
        command: The original command being healed.
        run_id: Unique identifier for this ``autofix run`` invocation.
        attempt: Current 0-based attempt (None outside the retry loop).
    """

    command: str
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    attempt: int | None = None

    def with_attempt(self, attempt: int) -> RunContext:
        return RunContext(command=self.command, run_id=self.run_id, attempt=attempt)

    def to_dict(self) -> dict[str, Any]:
        fields: dict[str, Any] = {"run_id": self.run_id, "command": self.command}
        if self.attempt is not None:
            fields["attempt"] = self.attempt
        return fields


_run_context: ContextVar[RunContext | None] = ContextVar("autofix_run_context", default=None)


def get_current_context() -> RunContext | None:
    return _run_context.get()


@contextmanager
def with_context(ctx: RunContext) -> Iterator[RunContext]:
    """Make ``ctx`` the active RunContext for the duration of the block."""
    token = _run_context.set(ctx)
    try:
        yield ctx
    finally:
        _run_context.reset(token)


# =============================================================================
# Processors
# =============================================================================


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(pattern in lowered for pattern in SENSITIVE_PATTERNS)


def _redact(key: str, value: Any) -> Any:
    if _is_sensitive(key):
        return REDACTED
    if isinstance(value, dict):
        return {k: _redact(str(k), v) for k, v in value.items()}
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Redact values of sensitive keys, including inside nested dicts."""
    return {key: _redact(key, value) for key, value in event_dict.items()}


def _add_run_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add the active RunContext's fields; explicit keys win."""
    ctx = _run_context.get()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            event_dict.setdefault(key, value)
    return event_dict


def _build_processors(renderer: Processor) -> list[Processor]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        _sanitize_event_dict,
        _add_run_context,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def _build_handler(file_path: Path | None, max_file_size_mb: int, backup_count: int) -> logging.Handler:
    if file_path is None:
        return logging.StreamHandler(sys.stderr)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        file_path,
        maxBytes=max_file_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8",
    )


def configure_logging(
    level: LogLevel = "WARNING",
    format: LogFormat = "console",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 10,
    backup_count: int = 3,
) -> None:
    """Route structlog through stdlib logging with the given options.

    Replaces any handlers already on the root logger, so calling it again
    reconfigures rather than duplicates output.

    Args:
        level: Minimum level to emit.
        format: "json" for one JSON object per line, "console" for humans.
        file_path: Write to this rotating file instead of stderr.
        max_file_size_mb: Rotation threshold for file output.
        backup_count: Rotated files to keep.

    Raises:
        ValueError: If level or format is not one of the accepted values.
    """
    if level not in _LEVELS:
        raise ValueError(f"Invalid log level: {level}")
    if format not in ("json", "console"):
        raise ValueError(f"Invalid log format: {format}")

    handler = _build_handler(file_path, max_file_size_mb, backup_count)
    handler.setLevel(_LEVELS[level])

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(_LEVELS[level])

    renderer: Processor
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=file_path is None and sys.stderr.isatty())

    # Loggers are resolved per call, so module-level AutofixLoggers pick this up
    structlog.configure(
        processors=_build_processors(renderer),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Component loggers
# =============================================================================


class AutofixLogger:
    """Component-bound logger.

    Created at import time by modules (``_logger = get_logger("engine")``);
    the structlog logger is looked up on every call so configuration done
    later by the CLI still applies.
    """

    def __init__(self, component: str, **context: Any) -> None:
        self._context: dict[str, Any] = {"component": component, **context}

    @property
    def component(self) -> str:
        return str(self._context["component"])

    def bind(self, **context: Any) -> AutofixLogger:
        """Return a new logger with extra fields bound."""
        return AutofixLogger(**{**self._context, **context})

    def _log(self, method: str, event: str, fields: dict[str, Any]) -> None:
        bound = structlog.get_logger().bind(**self._context)
        getattr(bound, method)(event, **fields)

    def debug(self, event: str, **fields: Any) -> None:
        self._log("debug", event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log("info", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log("warning", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log("error", event, fields)

    def exception(self, event: str, **fields: Any) -> None:
        """Log at error level with the active exception's traceback."""
        self._log("exception", event, fields)


def get_logger(component: str, **context: Any) -> AutofixLogger:
    """Get a logger for ``component`` (e.g. "engine", "backend.openai")."""
    return AutofixLogger(component, **context)


__all__ = [
    "AutofixLogger",
    "LogFormat",
    "LogLevel",
    "RunContext",
    "SENSITIVE_PATTERNS",
    "configure_logging",
    "get_current_context",
    "get_logger",
    "with_context",
]
