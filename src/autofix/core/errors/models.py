"""Data models for failure classification."""

from __future__ import annotations

from dataclasses import dataclass

from .codes import FailureCategory


@dataclass(frozen=True)
class ClassifiedFailure:
    """A failed command's category plus the parameter extracted for it.

    Attributes:
        category: The matched failure category.
        message: Human-readable summary of the category.
        exit_code: Exit code of the failed command.
        command: Missing program name (MISSING_COMMAND only).
        package: Missing library name (MISSING_LIBRARY only).
        port: Busy port number as a string (PORT_IN_USE only).
    """

    category: FailureCategory
    message: str
    exit_code: int | None = None
    command: str | None = None
    package: str | None = None
    port: str | None = None

    @property
    def extracted(self) -> str | None:
        """The single extracted parameter, if any."""
        return self.command or self.package or self.port

    @property
    def is_unknown(self) -> bool:
        return self.category == FailureCategory.UNKNOWN
