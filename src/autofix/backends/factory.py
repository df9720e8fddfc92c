"""Factory for creating suggestion backends from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from autofix.core.logging import get_logger

if TYPE_CHECKING:
    from autofix.backends.base import SuggestionBackend
    from autofix.core.config import LLMConfig

_logger = get_logger("backends.factory")


def create_backend(config: LLMConfig) -> SuggestionBackend:
    """Create the SuggestionBackend selected by ``llm.provider``.

    Unknown providers are assumed to speak the OpenAI chat completions
    protocol at ``llm.endpoint``.

    Args:
        config: The ``llm`` section of the configuration.

    Returns:
        A configured backend instance.
    """
    from autofix.backends.anthropic_api import AnthropicBackend
    from autofix.backends.mock import MockBackend
    from autofix.backends.openai_chat import OpenAIChatBackend

    provider = config.provider.strip().lower()

    if provider == "mock":
        return MockBackend()
    if provider == "local":
        _logger.warning("local_backend_unavailable", fallback="mock")
        return MockBackend()
    if provider == "anthropic":
        return AnthropicBackend.from_config(config)
    if provider != "openai":
        _logger.info("assuming_openai_compatible", provider=config.provider)
    return OpenAIChatBackend.from_config(config)


__all__ = ["create_backend"]
