"""Failure categories produced by the classifier."""

from __future__ import annotations

from enum import Enum


class FailureCategory(str, Enum):
    """Structured category of a failed command.

    Each category carries at most one extracted parameter on
    ClassifiedFailure: MISSING_COMMAND -> command, MISSING_LIBRARY ->
    package, PORT_IN_USE -> port.
    """

    MISSING_COMMAND = "missing_command"
    MISSING_COMPILER = "missing_compiler"
    MISSING_LIBRARY = "missing_library"
    PORT_IN_USE = "port_in_use"
    PERMISSION_DENIED = "permission_denied"
    MISSING_BUILD_TOOLS = "missing_build_tools"
    PACKAGE_MANAGER_NOT_FOUND = "package_manager_not_found"
    ARCHITECTURE_MISMATCH = "architecture_mismatch"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        """Human-readable summary used in reports."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[FailureCategory, str] = {
    FailureCategory.MISSING_COMMAND: "Command not found",
    FailureCategory.MISSING_COMPILER: "Compiler not found",
    FailureCategory.MISSING_LIBRARY: "Missing shared library",
    FailureCategory.PORT_IN_USE: "Port already in use",
    FailureCategory.PERMISSION_DENIED: "Permission denied",
    FailureCategory.MISSING_BUILD_TOOLS: "Missing build tools",
    FailureCategory.PACKAGE_MANAGER_NOT_FOUND: "Package manager not found",
    FailureCategory.ARCHITECTURE_MISMATCH: "Architecture mismatch",
    FailureCategory.UNKNOWN: "Unknown error",
}
