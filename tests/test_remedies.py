"""Tests for the deterministic remediation table."""

from __future__ import annotations

import pytest

from autofix.core.environment import EnvironmentSnapshot, OSFamily, PackageManager
from autofix.core.errors import ClassifiedFailure, FailureCategory
from autofix.healing.remedies import (
    CandidateSource,
    FixKind,
    RemediationCandidate,
    RiskLevel,
    deterministic_fix,
    install_package_command,
    install_toolchain_command,
)


def _env(manager: PackageManager, has_sudo: bool = False) -> EnvironmentSnapshot:
    return EnvironmentSnapshot(package_manager=manager, has_sudo=has_sudo)


def _failure(category: FailureCategory, **extracted: str) -> ClassifiedFailure:
    return ClassifiedFailure(category=category, message=category.description, **extracted)


class TestPackageInstall:
    @pytest.mark.parametrize(
        "manager, expected",
        [
            (PackageManager.APT, "apt-get install -y jq"),
            (PackageManager.DNF, "dnf install -y jq"),
            (PackageManager.YUM, "dnf install -y jq"),
            (PackageManager.PACMAN, "pacman -S --noconfirm jq"),
            (PackageManager.BREW, "brew install jq"),
        ],
    )
    def test_templates(self, manager: PackageManager, expected: str) -> None:
        assert install_package_command("jq", _env(manager)) == expected

    def test_sudo_prefix_when_available(self) -> None:
        assert install_package_command("jq", _env(PackageManager.APT, has_sudo=True)) == (
            "sudo apt-get install -y jq"
        )

    def test_brew_never_gets_sudo(self) -> None:
        assert install_package_command("jq", _env(PackageManager.BREW, has_sudo=True)) == (
            "brew install jq"
        )

    def test_no_package_manager(self) -> None:
        assert install_package_command("jq", _env(PackageManager.NONE)) is None

    def test_no_package_name(self) -> None:
        assert install_package_command(None, _env(PackageManager.APT)) is None
        assert install_package_command("", _env(PackageManager.APT)) is None


class TestToolchainInstall:
    @pytest.mark.parametrize(
        "manager, expected",
        [
            (PackageManager.APT, "apt-get install -y build-essential"),
            (PackageManager.DNF, "dnf groupinstall -y 'Development Tools'"),
            (PackageManager.YUM, "dnf groupinstall -y 'Development Tools'"),
            (PackageManager.PACMAN, "pacman -S --noconfirm base-devel"),
            (PackageManager.BREW, "xcode-select --install"),
        ],
    )
    def test_toolchains(self, manager: PackageManager, expected: str) -> None:
        assert install_toolchain_command(_env(manager)) == expected

    def test_unsupported(self) -> None:
        assert install_toolchain_command(_env(PackageManager.NONE)) is None


class TestDeterministicFix:
    def test_missing_command(self, apt_env: EnvironmentSnapshot) -> None:
        candidate = deterministic_fix(
            _failure(FailureCategory.MISSING_COMMAND, command="gcc"), apt_env,
        )
        assert candidate is not None
        assert candidate.command == "sudo apt-get install -y gcc"
        assert candidate.kind == FixKind.PREPARATION
        assert candidate.risk_level == RiskLevel.LOW
        assert candidate.source == CandidateSource.DETERMINISTIC
        assert candidate.is_deterministic

    def test_missing_library_uses_package(self, apt_env: EnvironmentSnapshot) -> None:
        candidate = deterministic_fix(
            _failure(FailureCategory.MISSING_LIBRARY, package="ssl"), apt_env,
        )
        assert candidate is not None
        assert candidate.command == "sudo apt-get install -y ssl"

    @pytest.mark.parametrize(
        "category", [FailureCategory.MISSING_COMPILER, FailureCategory.MISSING_BUILD_TOOLS],
    )
    def test_toolchain_categories(
        self, apt_env: EnvironmentSnapshot, category: FailureCategory,
    ) -> None:
        candidate = deterministic_fix(_failure(category), apt_env)
        assert candidate is not None
        assert candidate.command == "sudo apt-get install -y build-essential"

    @pytest.mark.parametrize(
        "category",
        [
            FailureCategory.PORT_IN_USE,
            FailureCategory.PERMISSION_DENIED,
            FailureCategory.PACKAGE_MANAGER_NOT_FOUND,
            FailureCategory.ARCHITECTURE_MISMATCH,
            FailureCategory.UNKNOWN,
        ],
    )
    def test_no_rule(self, apt_env: EnvironmentSnapshot, category: FailureCategory) -> None:
        assert deterministic_fix(_failure(category, port="8080"), apt_env) is None

    def test_missing_extracted_name(self, apt_env: EnvironmentSnapshot) -> None:
        assert deterministic_fix(_failure(FailureCategory.MISSING_COMMAND), apt_env) is None

    def test_unknown_host(self) -> None:
        env = EnvironmentSnapshot(os=OSFamily.UNKNOWN)
        failure = _failure(FailureCategory.MISSING_COMMAND, command="jq")
        assert deterministic_fix(failure, env) is None


class TestCandidateTypes:
    def test_defaults(self) -> None:
        candidate = RemediationCandidate(command="make")
        assert candidate.kind == FixKind.PREPARATION
        assert candidate.risk_level == RiskLevel.LOW
        assert str(candidate) == "[preparation/low] make"

    @pytest.mark.parametrize(
        "raw, expected",
        [("low", RiskLevel.LOW), (" Medium ", RiskLevel.MEDIUM), ("HIGH", RiskLevel.HIGH),
         ("catastrophic", RiskLevel.HIGH), (None, RiskLevel.HIGH)],
    )
    def test_risk_parse(self, raw: str | None, expected: RiskLevel) -> None:
        assert RiskLevel.parse(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [("replacement", FixKind.REPLACEMENT), ("REPLACEMENT", FixKind.REPLACEMENT),
         ("preparation", FixKind.PREPARATION), ("other", FixKind.PREPARATION),
         (None, FixKind.PREPARATION)],
    )
    def test_kind_parse(self, raw: str | None, expected: FixKind) -> None:
        assert FixKind.parse(raw) == expected
