"""Deterministic install rules keyed by package manager.

Maps missing programs and libraries to a package install command, and
missing compilers or build tools to a toolchain install command, for the
package manager recorded in the environment snapshot. Unsupported package
managers and unmatched categories produce no candidate.
"""

from __future__ import annotations

from autofix.core.environment import EnvironmentSnapshot, PackageManager
from autofix.core.errors import ClassifiedFailure, FailureCategory
from autofix.healing.remedies.base import (
    CandidateSource,
    FixKind,
    RemediationCandidate,
    RiskLevel,
)

# {pkg} is replaced with the package name
PACKAGE_INSTALL_TEMPLATES: dict[PackageManager, str] = {
    PackageManager.APT: "apt-get install -y {pkg}",
    PackageManager.DNF: "dnf install -y {pkg}",
    PackageManager.YUM: "dnf install -y {pkg}",
    PackageManager.PACMAN: "pacman -S --noconfirm {pkg}",
    PackageManager.BREW: "brew install {pkg}",
}

TOOLCHAIN_INSTALL_COMMANDS: dict[PackageManager, str] = {
    PackageManager.APT: "apt-get install -y build-essential",
    PackageManager.DNF: "dnf groupinstall -y 'Development Tools'",
    PackageManager.YUM: "dnf groupinstall -y 'Development Tools'",
    PackageManager.PACMAN: "pacman -S --noconfirm base-devel",
    PackageManager.BREW: "xcode-select --install",
}

# Homebrew refuses to run as root; only system package managers get sudo
_SUDO_MANAGERS = frozenset({
    PackageManager.APT,
    PackageManager.DNF,
    PackageManager.YUM,
    PackageManager.PACMAN,
})


def _with_privileges(command: str, environment: EnvironmentSnapshot) -> str:
    if environment.package_manager in _SUDO_MANAGERS and environment.has_sudo:
        return f"sudo {command}"
    return command


def install_package_command(pkg: str | None, environment: EnvironmentSnapshot) -> str | None:
    """Build the package install command, or None if unsupported."""
    if not pkg:
        return None
    template = PACKAGE_INSTALL_TEMPLATES.get(environment.package_manager)
    if template is None:
        return None
    return _with_privileges(template.format(pkg=pkg), environment)


def install_toolchain_command(environment: EnvironmentSnapshot) -> str | None:
    """Build the compiler/build-tools install command, or None if unsupported."""
    command = TOOLCHAIN_INSTALL_COMMANDS.get(environment.package_manager)
    if command is None:
        return None
    return _with_privileges(command, environment)


def deterministic_fix(
    failure: ClassifiedFailure,
    environment: EnvironmentSnapshot,
) -> RemediationCandidate | None:
    """Look up the rule-table fix for a classified failure.

    Returns:
        A PREPARATION / LOW risk candidate, or None when no rule applies.
    """
    command: str | None
    if failure.category == FailureCategory.MISSING_COMMAND:
        command = install_package_command(failure.command, environment)
    elif failure.category == FailureCategory.MISSING_LIBRARY:
        command = install_package_command(failure.package, environment)
    elif failure.category in (
        FailureCategory.MISSING_COMPILER,
        FailureCategory.MISSING_BUILD_TOOLS,
    ):
        command = install_toolchain_command(environment)
    else:
        command = None

    if command is None:
        return None
    return RemediationCandidate(
        command=command,
        kind=FixKind.PREPARATION,
        risk_level=RiskLevel.LOW,
        explanation=f"{failure.message}: install with {environment.package_manager.value}",
        source=CandidateSource.DETERMINISTIC,
    )
