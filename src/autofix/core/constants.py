"""Global constants for AutoFix.

Centralizes magic numbers used throughout the codebase,
making them discoverable, consistent, and easy to modify.
"""

from pathlib import Path

# =============================================================================
# Retry Loop
# =============================================================================

MAX_RETRIES = 3
"""Highest 0-based attempt index; the original command runs at most MAX_RETRIES + 1 times."""

# =============================================================================
# Process Execution
# =============================================================================

EXIT_CODE_TIMEOUT = 124
"""Exit code reported when a command is killed after exceeding its timeout."""

EXIT_CODE_NOT_EXECUTABLE = 126
"""Exit code reported when the program exists but cannot be executed."""

EXIT_CODE_NOT_FOUND = 127
"""Exit code reported when the program cannot be found (shell convention)."""

DEFAULT_SHELL = "/bin/sh"
"""Shell used for commands that cannot be tokenized into program + args."""

# =============================================================================
# Suggestion Backends
# =============================================================================

DEFAULT_LLM_PROVIDER = "openai"
DEFAULT_LLM_ENDPOINT = "https://api.openai.com/v1"
DEFAULT_LLM_MODEL = "gpt-4"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
"""Model used by the anthropic provider when llm.model is left at the OpenAI default."""

BACKEND_DEFAULT_TIMEOUT_SECONDS = 30.0
"""Bounded timeout for a single suggestion request."""

BACKEND_MAX_TOKENS = 1024
"""Maximum response tokens requested from chat backends."""

PROMPT_STDERR_TAIL_CHARS = 4000
"""Maximum stderr characters included in a suggestion prompt."""

# =============================================================================
# Configuration
# =============================================================================

DEFAULT_CONFIG_DIR = Path("~/.autofix")
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"

CONFIG_DIR_MODE = 0o700
CONFIG_FILE_MODE = 0o600
