"""Host environment snapshot and best-effort probing.

The snapshot is taken once per run and handed read-only to the resolver
and the suggestion backends. Every query swallows its own failures and
degrades to an "unknown"/"none" value; detection never aborts a run.
"""

from __future__ import annotations

import platform
import shutil
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from autofix.core.logging import get_logger

_logger = get_logger("environment")


class OSFamily(str, Enum):
    """Operating system family."""

    UBUNTU = "ubuntu"
    DEBIAN = "debian"
    FEDORA = "fedora"
    ARCH = "arch"
    MACOS = "macos"
    UNKNOWN = "unknown"


class Architecture(str, Enum):
    """CPU architecture, normalized to Go-style names."""

    AMD64 = "amd64"
    ARM64 = "arm64"
    UNKNOWN = "unknown"


class PackageManager(str, Enum):
    """System package manager available on the host."""

    APT = "apt"
    DNF = "dnf"
    YUM = "yum"
    PACMAN = "pacman"
    BREW = "brew"
    NONE = "none"


@dataclass(frozen=True)
class Runtime:
    """A language runtime or tool found on the host."""

    name: str
    version: str


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Immutable description of the host a command runs on.

    Attributes:
        os: Operating system family.
        os_version: Human-readable OS version ("unknown" if not detected).
        architecture: Normalized CPU architecture.
        package_manager: Package manager used for deterministic fixes.
        has_sudo: Whether a sudo binary is available.
        in_container: Whether the process appears to run in a container.
        runtimes: Detected runtimes (node, python, docker).
    """

    os: OSFamily = OSFamily.UNKNOWN
    os_version: str = "unknown"
    architecture: Architecture = Architecture.UNKNOWN
    package_manager: PackageManager = PackageManager.NONE
    has_sudo: bool = False
    in_container: bool = False
    runtimes: tuple[Runtime, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, object]:
        """Serialize for prompts and structured logs."""
        return {
            "os": self.os.value,
            "os_version": self.os_version,
            "architecture": self.architecture.value,
            "package_manager": self.package_manager.value,
            "has_sudo": self.has_sudo,
            "in_container": self.in_container,
            "runtimes": {r.name: r.version for r in self.runtimes},
        }


_OS_RELEASE_FILES = (Path("/etc/os-release"), Path("/etc/lsb-release"))

# Package managers to look for, per OS family, in preference order
_PACKAGE_MANAGERS: dict[OSFamily, tuple[tuple[str, PackageManager], ...]] = {
    OSFamily.MACOS: (("brew", PackageManager.BREW),),
    OSFamily.UBUNTU: (("apt", PackageManager.APT),),
    OSFamily.DEBIAN: (("apt", PackageManager.APT),),
    OSFamily.FEDORA: (("dnf", PackageManager.DNF), ("yum", PackageManager.YUM)),
    OSFamily.ARCH: (("pacman", PackageManager.PACMAN),),
}

_RUNTIME_QUERIES: tuple[tuple[str, list[str]], ...] = (
    ("node", ["node", "--version"]),
    ("python", ["python3", "--version"]),
    ("docker", ["docker", "--version"]),
)


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def detect_os() -> OSFamily:
    """Detect the operating system family."""
    if platform.system() == "Darwin":
        return OSFamily.MACOS

    for path in _OS_RELEASE_FILES:
        content = _read_text(path)
        if content is None:
            continue
        if "Ubuntu" in content:
            return OSFamily.UBUNTU
        if "Debian" in content:
            return OSFamily.DEBIAN
        if "Fedora" in content:
            return OSFamily.FEDORA

    if Path("/etc/arch-release").exists():
        return OSFamily.ARCH
    if Path("/etc/fedora-release").exists():
        return OSFamily.FEDORA

    return OSFamily.UNKNOWN


def detect_os_version(os_family: OSFamily) -> str:
    """Detect the OS version string, or "unknown"."""
    if os_family == OSFamily.MACOS:
        output = _query_output(["sw_vers", "-productVersion"])
        if output:
            return output

    content = _read_text(Path("/etc/os-release"))
    if content:
        for line in content.splitlines():
            if line.startswith("VERSION="):
                return line.removeprefix("VERSION=").strip('"')

    return "unknown"


def detect_architecture() -> Architecture:
    """Normalize platform.machine() to amd64/arm64/unknown."""
    machine = platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return Architecture.AMD64
    if machine in ("arm64", "aarch64"):
        return Architecture.ARM64
    return Architecture.UNKNOWN


def detect_package_manager(os_family: OSFamily) -> PackageManager:
    """Find the package manager binary expected for the OS family."""
    for binary, manager in _PACKAGE_MANAGERS.get(os_family, ()):
        if shutil.which(binary):
            return manager
    return PackageManager.NONE


def detect_sudo() -> bool:
    return shutil.which("sudo") is not None


def detect_container() -> bool:
    """Check the usual container markers."""
    if Path("/.dockerenv").exists():
        return True
    cgroup = _read_text(Path("/proc/1/cgroup"))
    if cgroup and ("docker" in cgroup or "lxc" in cgroup):
        return True
    return False


def detect_runtimes() -> tuple[Runtime, ...]:
    runtimes: list[Runtime] = []
    for name, argv in _RUNTIME_QUERIES:
        version = _query_output(argv)
        if version:
            runtimes.append(Runtime(name=name, version=version))
    return tuple(runtimes)


def _query_output(argv: list[str]) -> str | None:
    """Run a short query command, returning stripped output or None."""
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.SubprocessError, OSError) as e:
        _logger.debug("query_failed", argv=argv, error=str(e))
        return None
    if result.returncode != 0:
        return None
    # python2 and some docker builds print the version on stderr
    return (result.stdout or result.stderr).strip() or None


def detect_environment() -> EnvironmentSnapshot:
    """Inspect the host and return an immutable snapshot."""
    os_family = detect_os()
    snapshot = EnvironmentSnapshot(
        os=os_family,
        os_version=detect_os_version(os_family),
        architecture=detect_architecture(),
        package_manager=detect_package_manager(os_family),
        has_sudo=detect_sudo(),
        in_container=detect_container(),
        runtimes=detect_runtimes(),
    )
    _logger.debug("environment_detected", **snapshot.to_dict())
    return snapshot
