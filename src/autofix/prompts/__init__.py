"""Prompt rendering for suggestion backends."""

from autofix.prompts.templating import ChatPrompt, SuggestionPromptBuilder

__all__ = ["ChatPrompt", "SuggestionPromptBuilder"]
