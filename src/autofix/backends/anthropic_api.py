"""Anthropic API backend using the official SDK.

Sends the same system and user prompts as the OpenAI-compatible backend
through the Messages API and parses the text blocks of the reply.
"""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING

import anthropic

from autofix.backends.base import Suggestion, SuggestionBackend, SuggestionRequest
from autofix.core.constants import (
    BACKEND_DEFAULT_TIMEOUT_SECONDS,
    BACKEND_MAX_TOKENS,
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_LLM_MODEL,
)
from autofix.core.exceptions import BackendError
from autofix.core.logging import get_logger
from autofix.prompts.templating import SuggestionPromptBuilder

if TYPE_CHECKING:
    from autofix.core.config import LLMConfig

_logger = get_logger("backend.anthropic")

DEFAULT_API_KEY_ENV = "ANTHROPIC_API_KEY"


class AnthropicBackend(SuggestionBackend):
    """Ask Claude models for a fix via the Anthropic API."""

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_ANTHROPIC_MODEL,
        timeout: float = BACKEND_DEFAULT_TIMEOUT_SECONDS,
        api_key_env: str = DEFAULT_API_KEY_ENV,
        max_tokens: int = BACKEND_MAX_TOKENS,
        prompt_builder: SuggestionPromptBuilder | None = None,
    ) -> None:
        """Initialize API backend.

        Args:
            api_key: API key; when empty, read from ``api_key_env``.
            model: Model ID to use.
            timeout: Maximum time for the API request.
            api_key_env: Environment variable containing the API key.
            max_tokens: Maximum tokens for the response.
            prompt_builder: Custom prompt renderer.
        """
        self.model = model
        self.timeout = timeout
        self.api_key_env = api_key_env
        self.max_tokens = max_tokens
        self.prompt_builder = prompt_builder or SuggestionPromptBuilder()
        self._api_key = api_key or os.environ.get(api_key_env, "")
        self._client: anthropic.Anthropic | None = None

    @classmethod
    def from_config(cls, config: LLMConfig) -> AnthropicBackend:
        """Create backend from configuration.

        ``llm.model`` left at the OpenAI default is replaced by a Claude model.
        """
        model = config.model if config.model != DEFAULT_LLM_MODEL else DEFAULT_ANTHROPIC_MODEL
        return cls(
            api_key=config.api_key,
            model=model,
            timeout=config.timeout_seconds,
            api_key_env=config.api_key_env or DEFAULT_API_KEY_ENV,
        )

    @property
    def name(self) -> str:
        return "anthropic"

    def _get_client(self) -> anthropic.Anthropic:
        """Get or create the Anthropic client."""
        if self._client is None:
            if not self._api_key:
                raise BackendError(
                    self.name,
                    f"API key not found in environment variable: {self.api_key_env}",
                )
            self._client = anthropic.Anthropic(
                api_key=self._api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def get_suggestion(self, request: SuggestionRequest) -> Suggestion:
        """Send the prompt via the Messages API.

        Raises:
            BackendError: On missing key, any SDK error, or unparseable output.
        """
        prompt = self.prompt_builder.build(request)
        client = self._get_client()
        start = time.monotonic()

        try:
            response = client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0.0,
                system=prompt.system,
                messages=[{"role": "user", "content": prompt.user}],
            )
        except anthropic.APITimeoutError as e:
            raise BackendError(self.name, f"API timeout after {self.timeout}s") from e
        except anthropic.AuthenticationError as e:
            raise BackendError(self.name, f"Authentication failed: {e}") from e
        except anthropic.RateLimitError as e:
            raise BackendError(self.name, f"Rate limited: {e}") from e
        except anthropic.APIConnectionError as e:
            raise BackendError(self.name, f"Connection error: {e}") from e
        except anthropic.APIStatusError as e:
            raise BackendError(self.name, f"HTTP {e.status_code}: {e.message}") from e
        except anthropic.APIError as e:
            raise BackendError(self.name, f"API error: {e}") from e

        _logger.debug(
            "api_response",
            model=self.model,
            duration_seconds=round(time.monotonic() - start, 3),
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise BackendError(self.name, "empty LLM response")
        return Suggestion.from_text(text, self.name)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
