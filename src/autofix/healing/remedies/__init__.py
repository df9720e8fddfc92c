"""Remediation candidates and the deterministic rule table."""

from autofix.healing.remedies.base import (
    CandidateSource,
    FixKind,
    RemediationCandidate,
    RiskLevel,
)
from autofix.healing.remedies.packages import (
    PACKAGE_INSTALL_TEMPLATES,
    TOOLCHAIN_INSTALL_COMMANDS,
    deterministic_fix,
    install_package_command,
    install_toolchain_command,
)

__all__ = [
    "CandidateSource",
    "FixKind",
    "RemediationCandidate",
    "RiskLevel",
    "PACKAGE_INSTALL_TEMPLATES",
    "TOOLCHAIN_INSTALL_COMMANDS",
    "deterministic_fix",
    "install_package_command",
    "install_toolchain_command",
]
