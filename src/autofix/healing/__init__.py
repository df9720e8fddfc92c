"""Self-healing: resolve, gate and apply fixes for failed commands."""

from autofix.healing.engine import (
    FailureReason,
    HealingOutcome,
    HealingStatus,
    HealingStep,
    SelfHealingEngine,
    prompt_confirm,
)
from autofix.healing.remedies import (
    CandidateSource,
    FixKind,
    RemediationCandidate,
    RiskLevel,
    deterministic_fix,
)
from autofix.healing.resolver import RemediationResolver, ResolutionResult
from autofix.healing.safety import (
    ALLOWLIST,
    BLOCKLIST,
    SafetyValidator,
    ValidationVerdict,
    is_sudo_command,
)

__all__ = [
    "ALLOWLIST",
    "BLOCKLIST",
    "CandidateSource",
    "FailureReason",
    "FixKind",
    "HealingOutcome",
    "HealingStatus",
    "HealingStep",
    "RemediationCandidate",
    "RemediationResolver",
    "ResolutionResult",
    "RiskLevel",
    "SafetyValidator",
    "SelfHealingEngine",
    "ValidationVerdict",
    "deterministic_fix",
    "is_sudo_command",
    "prompt_confirm",
]
