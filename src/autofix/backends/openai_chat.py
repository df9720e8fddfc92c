"""OpenAI-compatible chat completions backend using httpx.

Works against api.openai.com and any server exposing the same
``POST {endpoint}/chat/completions`` contract. The model is told to answer
with a bare JSON object; the response content is still scanned for the
first balanced object because models routinely add prose or fences.
"""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING, Any, TypedDict

import httpx

from autofix.backends.base import Suggestion, SuggestionBackend, SuggestionRequest
from autofix.core.constants import (
    BACKEND_DEFAULT_TIMEOUT_SECONDS,
    BACKEND_MAX_TOKENS,
    DEFAULT_LLM_ENDPOINT,
    DEFAULT_LLM_MODEL,
)
from autofix.core.exceptions import BackendError
from autofix.core.logging import get_logger
from autofix.prompts.templating import SuggestionPromptBuilder

if TYPE_CHECKING:
    from autofix.core.config import LLMConfig

_logger = get_logger("backend.openai")

DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"


class ChatCompletionRequest(TypedDict):
    """Request payload for /chat/completions."""

    model: str
    messages: list[dict[str, str]]
    temperature: float
    max_tokens: int


class OpenAIChatBackend(SuggestionBackend):
    """Ask an OpenAI-compatible chat API for a fix.

    Example usage:
        backend = OpenAIChatBackend(api_key="sk-...", model="gpt-4")
        suggestion = backend.get_suggestion(request)
    """

    def __init__(
        self,
        api_key: str = "",
        endpoint: str = DEFAULT_LLM_ENDPOINT,
        model: str = DEFAULT_LLM_MODEL,
        timeout: float = BACKEND_DEFAULT_TIMEOUT_SECONDS,
        api_key_env: str = DEFAULT_API_KEY_ENV,
        prompt_builder: SuggestionPromptBuilder | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            api_key: API key; when empty, read from ``api_key_env``.
            endpoint: API base URL (``/chat/completions`` is appended).
            model: Model name.
            timeout: Request timeout in seconds; exceeding it is a BackendError.
            api_key_env: Environment variable consulted when api_key is empty.
            prompt_builder: Custom prompt renderer.
        """
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.api_key_env = api_key_env
        self._api_key = api_key or os.environ.get(api_key_env, "")
        self.prompt_builder = prompt_builder or SuggestionPromptBuilder()
        self._client: httpx.Client | None = None

    @classmethod
    def from_config(cls, config: LLMConfig) -> OpenAIChatBackend:
        """Create backend from configuration."""
        return cls(
            api_key=config.api_key,
            endpoint=config.endpoint,
            model=config.model,
            timeout=config.timeout_seconds,
            api_key_env=config.api_key_env or DEFAULT_API_KEY_ENV,
        )

    @property
    def name(self) -> str:
        return "openai"

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.Client(
                base_url=self.endpoint,
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
            )
        return self._client

    def _build_payload(self, request: SuggestionRequest) -> ChatCompletionRequest:
        prompt = self.prompt_builder.build(request)
        return {
            "model": self.model,
            "messages": prompt.as_messages(),
            "temperature": 0.0,
            "max_tokens": BACKEND_MAX_TOKENS,
        }

    def get_suggestion(self, request: SuggestionRequest) -> Suggestion:
        """POST the prompt and parse the first choice's content.

        Raises:
            BackendError: On timeout, transport error, HTTP error status,
                provider error payload, empty choices, or unparseable content.
        """
        payload = self._build_payload(request)
        start = time.monotonic()
        _logger.debug(
            "http_request",
            endpoint=f"{self.endpoint}/chat/completions",
            model=self.model,
            timeout=self.timeout,
        )

        try:
            response = self._get_client().post("/chat/completions", json=payload)
        except httpx.TimeoutException as e:
            _logger.warning("backend_timeout", timeout=self.timeout)
            raise BackendError(self.name, f"request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            _logger.warning("backend_request_failed", error=str(e))
            raise BackendError(self.name, f"request failed: {e}") from e

        _logger.debug(
            "http_response",
            status_code=response.status_code,
            duration_seconds=round(time.monotonic() - start, 3),
        )

        try:
            body: Any = response.json()
        except ValueError as e:
            raise BackendError(
                self.name,
                f"non-JSON response (HTTP {response.status_code}): {response.text[:200]}",
            ) from e

        if not isinstance(body, dict):
            raise BackendError(self.name, "unexpected response shape")

        error = body.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise BackendError(self.name, f"LLM error: {message}")

        if response.status_code != 200:
            raise BackendError(self.name, f"HTTP {response.status_code}")

        content = self._first_choice_content(body)
        return Suggestion.from_text(content, self.name)

    def _first_choice_content(self, body: dict[str, Any]) -> str:
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices:
            raise BackendError(self.name, "no LLM response")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise BackendError(self.name, "empty LLM response")
        return content

    def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client is not None:
            self._client.close()
            self._client = None
