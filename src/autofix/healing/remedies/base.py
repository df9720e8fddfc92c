"""Base types for remediation candidates.

A remediation candidate is a single shell command proposed to fix a
failure. It either prepares the environment so the original command can
be retried (PREPARATION) or stands in for the original command entirely
(REPLACEMENT).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FixKind(str, Enum):
    """How a successful fix relates to the original command.

    PREPARATION: The original command is retried unchanged afterwards.
    REPLACEMENT: The fix's own result supersedes the original command's.
    """

    PREPARATION = "preparation"
    REPLACEMENT = "replacement"

    @classmethod
    def parse(cls, value: str | None) -> FixKind:
        """Parse a backend-supplied fix type, defaulting to PREPARATION."""
        if value and value.strip().lower() == cls.REPLACEMENT.value:
            return cls.REPLACEMENT
        return cls.PREPARATION


class RiskLevel(str, Enum):
    """Risk level of applying the remedy.

    Used to inform users about the potential impact of the fix.
    """

    LOW = "low"  # Installs or other additive, reversible changes
    MEDIUM = "medium"  # May have side effects on the host
    HIGH = "high"  # Significant changes, careful review needed

    @classmethod
    def parse(cls, value: str | None) -> RiskLevel:
        """Parse a backend-supplied risk level; unrecognized values are HIGH."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.HIGH


class CandidateSource(str, Enum):
    """Where a candidate came from."""

    DETERMINISTIC = "deterministic"
    BACKEND = "backend"


@dataclass(frozen=True)
class RemediationCandidate:
    """A proposed fix command.

    Attributes:
        command: Shell command to execute.
        kind: PREPARATION or REPLACEMENT.
        risk_level: Risk tier; deterministic candidates are always LOW.
        explanation: Why this fix should help (backend candidates only).
        source: Deterministic rule table or suggestion backend.
    """

    command: str
    kind: FixKind = FixKind.PREPARATION
    risk_level: RiskLevel = RiskLevel.LOW
    explanation: str | None = None
    source: CandidateSource = CandidateSource.DETERMINISTIC

    @property
    def is_deterministic(self) -> bool:
        return self.source == CandidateSource.DETERMINISTIC

    def __str__(self) -> str:
        return f"[{self.kind.value}/{self.risk_level.value}] {self.command}"
