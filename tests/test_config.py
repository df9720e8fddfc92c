"""Tests for configuration loading, saving and editing."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from autofix.core.config import (
    AutofixConfig,
    coerce_value,
    flatten_config,
    load_config,
    save_config,
    set_config_value,
)
from autofix.core.exceptions import ConfigError


class TestLoadConfig:
    def test_missing_file_writes_defaults(self, config_path: Path) -> None:
        config = load_config(config_path)

        assert config == AutofixConfig()
        assert config_path.exists()
        data = yaml.safe_load(config_path.read_text())
        assert data["llm"]["provider"] == "openai"
        assert data["safety"]["require_sudo_confirm"] is True

    def test_missing_file_without_create(self, config_path: Path) -> None:
        load_config(config_path, create=False)
        assert not config_path.exists()

    def test_file_permissions(self, config_path: Path) -> None:
        load_config(config_path)
        assert stat.S_IMODE(config_path.stat().st_mode) == 0o600
        assert stat.S_IMODE(config_path.parent.stat().st_mode) == 0o700

    def test_partial_file_merges_defaults(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text("llm:\n  provider: mock\n")

        config = load_config(config_path)

        assert config.llm.provider == "mock"
        assert config.llm.model == "gpt-4"
        assert config.safety.auto_execute is False

    def test_empty_file(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text("")
        assert load_config(config_path) == AutofixConfig()

    def test_invalid_yaml(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text("llm: [unclosed\n")
        with pytest.raises(ConfigError, match="Cannot read config"):
            load_config(config_path)

    def test_non_mapping(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(config_path)

    def test_invalid_value(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text("llm:\n  timeout_seconds: -1\n")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(config_path)


class TestSaveConfig:
    def test_round_trip(self, config_path: Path) -> None:
        config = AutofixConfig.model_validate({
            "llm": {"provider": "anthropic", "api_key": "sk-x"},
            "safety": {"auto_execute": True},
        })
        assert save_config(config, config_path) == config_path
        assert load_config(config_path) == config

    def test_no_temp_file_left(self, config_path: Path) -> None:
        save_config(AutofixConfig(), config_path)
        assert [p.name for p in config_path.parent.iterdir()] == ["config.yaml"]


class TestSetConfigValue:
    def test_bool_coercion(self) -> None:
        config = set_config_value(AutofixConfig(), "safety.auto_execute", "true")
        assert config.safety.auto_execute is True

    def test_float_coercion(self) -> None:
        config = set_config_value(AutofixConfig(), "llm.timeout_seconds", "12.5")
        assert config.llm.timeout_seconds == 12.5

    def test_string_field_keeps_string(self) -> None:
        config = set_config_value(AutofixConfig(), "llm.api_key", "12345")
        assert config.llm.api_key == "12345"

    def test_optional_field_cleared(self) -> None:
        config = set_config_value(AutofixConfig(), "execution.timeout_seconds", "60")
        assert config.execution.timeout_seconds == 60
        config = set_config_value(config, "execution.timeout_seconds", "null")
        assert config.execution.timeout_seconds is None

    def test_original_unchanged(self) -> None:
        original = AutofixConfig()
        set_config_value(original, "llm.provider", "mock")
        assert original.llm.provider == "openai"

    @pytest.mark.parametrize("key", ["llm.nope", "nope", "llm.provider.deeper"])
    def test_unknown_key(self, key: str) -> None:
        with pytest.raises(ConfigError, match="Unknown config key"):
            set_config_value(AutofixConfig(), key, "x")

    def test_section_rejected(self) -> None:
        with pytest.raises(ConfigError, match="is a section"):
            set_config_value(AutofixConfig(), "safety", "x")

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigError, match="Invalid value"):
            set_config_value(AutofixConfig(), "safety.auto_execute", "maybe")


class TestSnapshot:
    def test_copies_policy(self) -> None:
        config = AutofixConfig.model_validate({
            "safety": {"auto_execute": True, "require_sudo_confirm": False},
            "execution": {"timeout_seconds": 30},
        })
        settings = config.snapshot()
        assert settings.auto_execute is True
        assert settings.require_sudo_confirm is False
        assert settings.command_timeout_seconds == 30

    def test_override(self) -> None:
        assert AutofixConfig().snapshot(auto_execute=True).auto_execute is True

    def test_frozen(self) -> None:
        settings = AutofixConfig().snapshot()
        with pytest.raises(ValidationError):
            settings.auto_execute = True  # type: ignore[misc]

    def test_later_config_changes_do_not_leak(self) -> None:
        config = AutofixConfig()
        settings = config.snapshot()
        config.safety.auto_execute = True
        assert settings.auto_execute is False


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("No", False), ("none", None), ("42", 42), ("1.5", 1.5), ("gpt-4", "gpt-4")],
)
def test_coerce_value(raw: str, expected: object) -> None:
    assert coerce_value(raw) == expected


def test_flatten_config() -> None:
    flat = flatten_config(AutofixConfig().model_dump())
    assert flat["llm.provider"] == "openai"
    assert flat["safety.require_sudo_confirm"] is True
    assert "llm" not in flat
