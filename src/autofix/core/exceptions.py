"""Exception hierarchy for AutoFix.

All AutoFix-specific exceptions inherit from AutofixError, enabling callers
to catch broad (AutofixError) or narrow (e.g., BackendError).

Policy outcomes (blocked, declined, no fix available) are NOT exceptions;
they are reported through HealingOutcome. Only ProcessSpawnError is fatal
to a healing run.
"""

from __future__ import annotations


class AutofixError(Exception):
    """Base exception for all AutoFix errors."""


class ProcessSpawnError(AutofixError):
    """Raised when a child process cannot be spawned at all.

    Non-zero exits and missing binaries are encoded in ExecutionResult
    instead; this covers unrecoverable environment failures such as
    exhausted process tables or an unusable working directory.
    """

    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Cannot spawn process for '{command}': {reason}")


class BackendError(AutofixError):
    """Raised when a suggestion backend cannot produce a usable answer.

    Covers network failures, timeouts, HTTP error statuses, provider error
    payloads, and unparseable responses.
    """

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        self.message = message
        super().__init__(f"[{backend}] {message}")


class SafetyViolation(AutofixError):
    """Raised when a command matches the destructive-command block list."""

    def __init__(self, command: str, pattern: str) -> None:
        self.command = command
        self.pattern = pattern
        super().__init__(f"destructive command blocked: {pattern}")


class ConfigError(AutofixError):
    """Raised when configuration cannot be loaded, validated or updated."""
