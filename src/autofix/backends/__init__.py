"""Suggestion backends asked for fixes the rule table cannot provide."""

from autofix.backends.anthropic_api import AnthropicBackend
from autofix.backends.base import Suggestion, SuggestionBackend, SuggestionRequest
from autofix.backends.factory import create_backend
from autofix.backends.mock import MockBackend
from autofix.backends.openai_chat import OpenAIChatBackend

__all__ = [
    "AnthropicBackend",
    "MockBackend",
    "OpenAIChatBackend",
    "Suggestion",
    "SuggestionBackend",
    "SuggestionRequest",
    "create_backend",
]
