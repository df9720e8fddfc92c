"""Fixed-response backend for offline use and tests."""

from __future__ import annotations

from autofix.backends.base import Suggestion, SuggestionBackend, SuggestionRequest
from autofix.core.logging import get_logger

_logger = get_logger("backend.mock")

DEFAULT_MOCK_SUGGESTION = Suggestion(
    explanation="Mock suggestion: This is a placeholder for LLM response",
    proposed_fix="echo 'Mock fix applied'",
    risk_level="low",
)


class MockBackend(SuggestionBackend):
    """Returns the same suggestion for every request.

    Records every request it receives in ``requests`` so callers can
    assert on what would have been sent to a real backend.
    """

    def __init__(self, suggestion: Suggestion = DEFAULT_MOCK_SUGGESTION) -> None:
        self.suggestion = suggestion
        self.requests: list[SuggestionRequest] = []

    @property
    def name(self) -> str:
        return "mock"

    def get_suggestion(self, request: SuggestionRequest) -> Suggestion:
        self.requests.append(request)
        _logger.debug("mock_suggestion", attempt=request.attempt)
        return self.suggestion
