"""Remediation resolver.

Turns a classified failure into at most one candidate fix:
1. The deterministic rule table for the host's package manager
2. The suggestion backend, only on the first attempt and only when the
   table has nothing
"""

from __future__ import annotations

from dataclasses import dataclass

from autofix.backends.base import SuggestionBackend, SuggestionRequest
from autofix.core.environment import EnvironmentSnapshot
from autofix.core.errors import ClassifiedFailure
from autofix.core.exceptions import BackendError
from autofix.core.logging import get_logger
from autofix.healing.remedies.base import (
    CandidateSource,
    FixKind,
    RemediationCandidate,
    RiskLevel,
)
from autofix.healing.remedies.packages import deterministic_fix
from autofix.healing.safety import SafetyValidator

_logger = get_logger("healing.resolver")


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one failure."""

    candidate: RemediationCandidate | None
    """The fix to try, or None."""

    note: str | None = None
    """Why no candidate was produced."""

    @property
    def found(self) -> bool:
        return self.candidate is not None


class RemediationResolver:
    """Resolves a failure to a candidate fix.

    Example:
        resolver = RemediationResolver(environment, create_backend(config.llm))
        resolution = resolver.resolve(failure, "gcc foo.c", stderr, 127, attempt=0)
    """

    def __init__(
        self,
        environment: EnvironmentSnapshot,
        backend: SuggestionBackend,
        validator: SafetyValidator | None = None,
    ) -> None:
        self.environment = environment
        self.backend = backend
        self.validator = validator or SafetyValidator()

    def resolve(
        self,
        failure: ClassifiedFailure,
        command: str,
        stderr: str,
        exit_code: int,
        attempt: int,
    ) -> ResolutionResult:
        """Find a fix for ``failure``.

        Args:
            failure: The classified failure.
            command: The original command.
            stderr: Stderr of the failed run.
            exit_code: Exit code of the failed run.
            attempt: 0-based attempt index.

        Returns:
            ResolutionResult with a candidate, or a note explaining why not.
        """
        candidate = deterministic_fix(failure, self.environment)
        if candidate is not None:
            _logger.debug(
                "deterministic_fix",
                category=failure.category.value,
                fix=candidate.command,
            )
            return ResolutionResult(candidate)

        # Backend is only consulted on the first attempt
        if attempt > 0:
            return ResolutionResult(None, note="no deterministic fix after retry")

        request = SuggestionRequest(
            environment=self.environment,
            command=command,
            stderr=stderr,
            exit_code=exit_code,
            attempt=attempt,
        )
        try:
            suggestion = self.backend.get_suggestion(request)
        except BackendError as e:
            _logger.warning("backend_request_failed", backend=self.backend.name, error=str(e))
            return ResolutionResult(None, note=f"suggestion backend failed: {e}")

        if not suggestion.actionable:
            _logger.info(
                "backend_no_fix",
                backend=self.backend.name,
                explanation=suggestion.explanation,
            )
            return ResolutionResult(
                None, note=suggestion.explanation or "backend proposed no fix"
            )

        fix = suggestion.proposed_fix.strip()
        if suggestion.risk_level.strip():
            risk = RiskLevel.parse(suggestion.risk_level)
        elif self.validator.is_low_risk(fix):
            risk = RiskLevel.LOW
        else:
            risk = RiskLevel.MEDIUM

        return ResolutionResult(
            RemediationCandidate(
                command=fix,
                kind=FixKind.parse(suggestion.fix_type),
                risk_level=risk,
                explanation=suggestion.explanation or None,
                source=CandidateSource.BACKEND,
            )
        )
