"""Pytest fixtures for AutoFix tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from autofix.core.environment import (
    Architecture,
    EnvironmentSnapshot,
    OSFamily,
    PackageManager,
)


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset CLI and logging state before and after each test.

    This ensures test isolation for logging configuration.
    """
    from autofix.cli import helpers

    helpers.reset_cli_state()
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    helpers.reset_cli_state()
    structlog.reset_defaults()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)


@pytest.fixture
def apt_env() -> EnvironmentSnapshot:
    """Ubuntu host with apt and sudo."""
    return EnvironmentSnapshot(
        os=OSFamily.UBUNTU,
        os_version="22.04",
        architecture=Architecture.AMD64,
        package_manager=PackageManager.APT,
        has_sudo=True,
    )


@pytest.fixture
def bare_env() -> EnvironmentSnapshot:
    """Host with nothing detected."""
    return EnvironmentSnapshot()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Config file location inside a temporary home."""
    return tmp_path / ".autofix" / "config.yaml"

