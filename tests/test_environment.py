"""Tests for host environment probing."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from autofix.core import environment as env_mod
from autofix.core.environment import (
    Architecture,
    EnvironmentSnapshot,
    OSFamily,
    PackageManager,
    Runtime,
    detect_architecture,
    detect_environment,
    detect_os,
    detect_package_manager,
)


def _fake_files(monkeypatch: pytest.MonkeyPatch, files: dict[str, str]) -> None:
    def read_text(path: Path) -> str | None:
        return files.get(str(path))

    monkeypatch.setattr(env_mod, "_read_text", read_text)


class TestDetectOS:
    def test_macos(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(env_mod.platform, "system", lambda: "Darwin")
        assert detect_os() == OSFamily.MACOS

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ('NAME="Ubuntu"\nVERSION="22.04.3 LTS (Jammy Jellyfish)"', OSFamily.UBUNTU),
            ('PRETTY_NAME="Debian GNU/Linux 12 (bookworm)"', OSFamily.DEBIAN),
            ('NAME="Fedora Linux"', OSFamily.FEDORA),
        ],
    )
    def test_os_release(
        self, monkeypatch: pytest.MonkeyPatch, content: str, expected: OSFamily,
    ) -> None:
        monkeypatch.setattr(env_mod.platform, "system", lambda: "Linux")
        _fake_files(monkeypatch, {"/etc/os-release": content})
        assert detect_os() == expected

    def test_unknown_without_release_files(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(env_mod.platform, "system", lambda: "Linux")
        _fake_files(monkeypatch, {})
        with patch.object(Path, "exists", return_value=False):
            assert detect_os() == OSFamily.UNKNOWN

    def test_os_version_from_release(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _fake_files(monkeypatch, {"/etc/os-release": 'VERSION="22.04.3 LTS"\n'})
        assert env_mod.detect_os_version(OSFamily.UBUNTU) == "22.04.3 LTS"


@pytest.mark.parametrize(
    ("machine", "expected"),
    [
        ("x86_64", Architecture.AMD64),
        ("AMD64", Architecture.AMD64),
        ("aarch64", Architecture.ARM64),
        ("arm64", Architecture.ARM64),
        ("riscv64", Architecture.UNKNOWN),
    ],
)
def test_architecture(monkeypatch: pytest.MonkeyPatch, machine: str, expected: Architecture) -> None:
    monkeypatch.setattr(env_mod.platform, "machine", lambda: machine)
    assert detect_architecture() == expected


class TestPackageManager:
    def test_fedora_prefers_dnf(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(env_mod.shutil, "which", lambda b: f"/usr/bin/{b}")
        assert detect_package_manager(OSFamily.FEDORA) == PackageManager.DNF

    def test_fedora_falls_back_to_yum(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            env_mod.shutil, "which", lambda b: "/usr/bin/yum" if b == "yum" else None,
        )
        assert detect_package_manager(OSFamily.FEDORA) == PackageManager.YUM

    def test_binary_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(env_mod.shutil, "which", lambda b: None)
        assert detect_package_manager(OSFamily.UBUNTU) == PackageManager.NONE

    def test_unknown_os(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(env_mod.shutil, "which", lambda b: f"/usr/bin/{b}")
        assert detect_package_manager(OSFamily.UNKNOWN) == PackageManager.NONE


class TestRuntimeQueries:
    def test_query_failure_is_swallowed(self) -> None:
        with patch.object(env_mod.subprocess, "run", side_effect=FileNotFoundError("node")):
            assert env_mod.detect_runtimes() == ()

    def test_query_timeout_is_swallowed(self) -> None:
        error = subprocess.TimeoutExpired(["node", "--version"], 5)
        with patch.object(env_mod.subprocess, "run", side_effect=error):
            assert env_mod._query_output(["node", "--version"]) is None

    def test_runtime_versions(self) -> None:
        outputs = {
            "node": MagicMock(returncode=0, stdout="v20.11.0\n", stderr=""),
            "python3": MagicMock(returncode=0, stdout="", stderr="Python 3.12.1\n"),
            "docker": MagicMock(returncode=1, stdout="", stderr="error"),
        }
        with patch.object(env_mod.subprocess, "run", side_effect=lambda argv, **kw: outputs[argv[0]]):
            runtimes = env_mod.detect_runtimes()

        assert runtimes == (
            Runtime(name="node", version="v20.11.0"),
            Runtime(name="python", version="Python 3.12.1"),
        )


def test_detect_environment_degrades(monkeypatch: pytest.MonkeyPatch) -> None:
    """With every query failing, detection still returns a snapshot."""
    monkeypatch.setattr(env_mod.platform, "system", lambda: "Linux")
    monkeypatch.setattr(env_mod.platform, "machine", lambda: "")
    monkeypatch.setattr(env_mod.shutil, "which", lambda b: None)
    _fake_files(monkeypatch, {})
    with patch.object(Path, "exists", return_value=False), patch.object(
        env_mod.subprocess, "run", side_effect=OSError("no fork"),
    ):
        snapshot = detect_environment()

    assert snapshot == EnvironmentSnapshot()


def test_to_dict_renders_runtimes_as_mapping(apt_env: EnvironmentSnapshot) -> None:
    snapshot = EnvironmentSnapshot(
        os=apt_env.os,
        runtimes=(Runtime("node", "v20"), Runtime("python", "3.12")),
    )
    data = snapshot.to_dict()
    assert data["os"] == "ubuntu"
    assert data["runtimes"] == {"node": "v20", "python": "3.12"}
