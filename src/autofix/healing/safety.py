"""Static safety policy for commands.

Two coarse checks, applied in order:
1. Block list: case-insensitive substring match against destructive
   commands. A match is a hard rejection and takes precedence over
   everything else, including an allowlisted leading program.
2. Allowlist: a command whose leading token is a known package manager,
   interpreter, VCS, downloader, build tool or compiler is accepted.
   Anything else is accepted too, unless it mentions ``sudo``, which
   requires explicit confirmation.

This is a policy table, not a sandbox.
"""

from __future__ import annotations

from dataclasses import dataclass

from autofix.core.exceptions import SafetyViolation
from autofix.core.logging import get_logger

_logger = get_logger("healing.safety")

ALLOWLIST: frozenset[str] = frozenset({
    "npm",
    "pip",
    "pip3",
    "python",
    "python3",
    "node",
    "docker",
    "apt-get",
    "apt",
    "dnf",
    "yum",
    "pacman",
    "brew",
    "curl",
    "wget",
    "git",
    "make",
    "gcc",
    "clang",
})

# Checked in this order so the reported pattern is the most specific one
BLOCKLIST: tuple[str, ...] = (
    "rm -rf",
    "rm -r",
    "rm -f /",
    "userdel",
    "usermod",
    "mkfs",
    "format",
    "iptables",
    "ufw",
    "firewall",
    "chpasswd",
    "passwd",
    "shutdown",
    "reboot",
)


@dataclass(frozen=True)
class ValidationVerdict:
    """Result of validating one command.

    Attributes:
        allowed: False only when a block-list pattern matched.
        requires_confirmation: The command must be confirmed before running.
        reason: Why the command was blocked or needs confirmation.
        blocked_pattern: The block-list entry that matched, if any.
    """

    allowed: bool
    requires_confirmation: bool = False
    reason: str | None = None
    blocked_pattern: str | None = None

    @property
    def blocked(self) -> bool:
        return not self.allowed


def _leading_token(command: str) -> str:
    parts = command.strip().lower().split(None, 1)
    return parts[0] if parts else ""


def is_sudo_command(command: str) -> bool:
    """Whether the command is prefixed with sudo."""
    return command.startswith(("sudo ", "sudo\t"))


class SafetyValidator:
    """Applies the static block list and allowlist."""

    def __init__(
        self,
        allowlist: frozenset[str] = ALLOWLIST,
        blocklist: tuple[str, ...] = BLOCKLIST,
    ) -> None:
        self.allowlist = allowlist
        self.blocklist = blocklist

    def blocked_pattern(self, command: str) -> str | None:
        """Return the first block-list entry found in the command, if any."""
        lowered = command.lower()
        for pattern in self.blocklist:
            if pattern in lowered:
                return pattern
        return None

    def is_low_risk(self, command: str) -> bool:
        """A command is low risk iff its leading token is allowlisted."""
        return _leading_token(command) in self.allowlist

    def validate(self, command: str) -> ValidationVerdict:
        """Validate a command against the block list, then the allowlist."""
        pattern = self.blocked_pattern(command)
        if pattern is not None:
            _logger.warning("command_blocked", pattern=pattern)
            return ValidationVerdict(
                allowed=False,
                reason=f"destructive command blocked: {pattern}",
                blocked_pattern=pattern,
            )

        if self.is_low_risk(command):
            return ValidationVerdict(allowed=True)

        if "sudo" in command.lower():
            return ValidationVerdict(
                allowed=True,
                requires_confirmation=True,
                reason="sudo commands require confirmation",
            )

        return ValidationVerdict(allowed=True)

    def ensure_allowed(self, command: str) -> ValidationVerdict:
        """Like validate(), but raise SafetyViolation for blocked commands."""
        verdict = self.validate(command)
        if verdict.blocked_pattern is not None:
            raise SafetyViolation(command, verdict.blocked_pattern)
        return verdict
