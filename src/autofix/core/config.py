"""Configuration models and YAML persistence for AutoFix.

Configuration lives in ``~/.autofix/config.yaml``. It is loaded once at
run entry; the engine receives a frozen ``SafetySettings`` snapshot so a
concurrent ``autofix config set`` can never change policy mid-run.

Example YAML:
    llm:
      provider: openai
      endpoint: https://api.openai.com/v1
      model: gpt-4
    safety:
      auto_execute: false
      require_sudo_confirm: true
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from autofix.core.constants import (
    BACKEND_DEFAULT_TIMEOUT_SECONDS,
    CONFIG_DIR_MODE,
    CONFIG_FILE_MODE,
    DEFAULT_CONFIG_FILE,
    DEFAULT_LLM_ENDPOINT,
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_PROVIDER,
)
from autofix.core.exceptions import ConfigError
from autofix.core.logging import get_logger

_logger = get_logger("config")


class LLMConfig(BaseModel):
    """Suggestion backend settings."""

    provider: str = Field(
        default=DEFAULT_LLM_PROVIDER,
        description="Backend provider: openai, anthropic, mock, or local",
    )
    api_key: str = Field(
        default="",
        description="API key; falls back to the api_key_env variable when empty",
    )
    api_key_env: str | None = Field(
        default=None,
        description="Environment variable holding the API key "
        "(default: OPENAI_API_KEY / ANTHROPIC_API_KEY by provider)",
    )
    endpoint: str = Field(
        default=DEFAULT_LLM_ENDPOINT,
        description="Base URL of an OpenAI-compatible chat completions API",
    )
    model: str = Field(
        default=DEFAULT_LLM_MODEL,
        description="Model name sent to the backend",
    )
    timeout_seconds: float = Field(
        default=BACKEND_DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Request timeout; a timeout counts as a backend failure",
    )


class SafetyConfig(BaseModel):
    """Confirmation policy."""

    auto_execute: bool = Field(
        default=False,
        description="Apply fixes without asking for confirmation",
    )
    require_sudo_confirm: bool = Field(
        default=True,
        description="Ask a second, distinct confirmation for sudo fixes",
    )


class ExecutionConfig(BaseModel):
    """Command execution settings."""

    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Kill a command after this many seconds (no limit when unset)",
    )


class SafetySettings(BaseModel):
    """Immutable per-run policy snapshot handed to the engine."""

    model_config = ConfigDict(frozen=True)

    auto_execute: bool = False
    require_sudo_confirm: bool = True
    command_timeout_seconds: float | None = None


class AutofixConfig(BaseModel):
    """Root configuration document."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    safety: SafetyConfig = Field(default_factory=SafetyConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)

    def snapshot(self, *, auto_execute: bool | None = None) -> SafetySettings:
        """Take the frozen settings snapshot used for one engine run.

        Args:
            auto_execute: Per-run override (e.g. the --yes flag).
        """
        return SafetySettings(
            auto_execute=self.safety.auto_execute if auto_execute is None else auto_execute,
            require_sudo_confirm=self.safety.require_sudo_confirm,
            command_timeout_seconds=self.execution.timeout_seconds,
        )


def resolve_config_path(config_file: Path | None = None) -> Path:
    """Resolve the config file path, expanding ~."""
    path = config_file or DEFAULT_CONFIG_FILE
    return path.expanduser()


def load_config(config_file: Path | None = None, *, create: bool = True) -> AutofixConfig:
    """Load configuration from YAML, writing defaults when the file is missing.

    Args:
        config_file: Explicit path; defaults to ~/.autofix/config.yaml.
        create: Write a default file if none exists.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    path = resolve_config_path(config_file)
    if not path.exists():
        config = AutofixConfig()
        if create:
            try:
                save_config(config, path)
            except OSError as e:
                # Not fatal: defaults still apply for this run
                _logger.warning("config_default_write_failed", path=str(path), error=str(e))
        return config

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    try:
        return AutofixConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def save_config(config: AutofixConfig, config_file: Path | None = None) -> Path:
    """Write config data to YAML atomically with owner-only permissions."""
    path = resolve_config_path(config_file)
    if not path.parent.exists():
        path.parent.mkdir(mode=CONFIG_DIR_MODE, parents=True)

    tmp = path.with_suffix(".yaml.tmp")
    fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
    tmp.rename(path)
    _logger.debug("config_saved", path=str(path))
    return path


def coerce_value(raw: str) -> Any:
    """Coerce a string value from the command line to a Python type."""
    lowered = raw.lower()
    if lowered in ("true", "yes", "y"):
        return True
    if lowered in ("false", "no", "n"):
        return False
    if lowered in ("null", "none", "~"):
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    return raw


def set_config_value(config: AutofixConfig, dotted_key: str, raw_value: str) -> AutofixConfig:
    """Return a new config with ``dotted_key`` set to the coerced value.

    Raises:
        ConfigError: For unknown keys or values rejected by validation.
    """
    data = config.model_dump()
    keys = dotted_key.split(".")
    current: Any = data
    for key in keys[:-1]:
        if not isinstance(current, dict) or key not in current:
            raise ConfigError(f"Unknown config key: {dotted_key}")
        current = current[key]
    if not isinstance(current, dict) or keys[-1] not in current:
        raise ConfigError(f"Unknown config key: {dotted_key}")
    if isinstance(current[keys[-1]], dict):
        raise ConfigError(f"{dotted_key} is a section; set one of its keys")

    value = coerce_value(raw_value)
    # Strings stay strings for string fields ("api_key 123" must not become int)
    if isinstance(current[keys[-1]], str) and not isinstance(value, str):
        value = raw_value
    current[keys[-1]] = value

    try:
        return AutofixConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {dotted_key}: {e}") from e


def flatten_config(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten a nested dict into dot-notation keys."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            result.update(flatten_config(value, full_key))
        else:
            result[full_key] = value
    return result
