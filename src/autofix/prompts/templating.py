"""Prompt templating for suggestion backends.

Builds the system and user messages sent to chat backends from Jinja2
templates, so every backend describes a failure the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import jinja2

from autofix.core.constants import PROMPT_STDERR_TAIL_CHARS

if TYPE_CHECKING:
    from autofix.backends.base import SuggestionRequest

SYSTEM_TEMPLATE = """\
You are a DevOps fix assistant. Given a failed shell command, respond with ONLY \
a JSON object (no markdown, no explanation outside JSON):
{"explanation": "one sentence", "proposed_fix": "single shell command", \
"risk_level": "low|medium|high", "fix_type": "preparation|replacement"}
Use fix_type "preparation" when the original command should be retried after \
the fix, and "replacement" when the fix replaces the original command.
If no fix exists, return {"explanation": "cannot fix", "proposed_fix": "", "risk_level": "high"}."""

USER_TEMPLATE = """\
Failed command: {{ command }}
Exit code: {{ exit_code }}
Stderr:
{{ stderr }}

Environment:
  OS: {{ environment.os }} {{ environment.os_version }}
  Architecture: {{ environment.architecture }}
  Package manager: {{ environment.package_manager }}
  Sudo available: {{ environment.has_sudo }}
  In container: {{ environment.in_container }}
{%- if environment.runtimes %}
  Runtimes: {% for name, version in environment.runtimes.items() %}{{ name }} {{ version }}{% if not loop.last %}, {% endif %}{% endfor %}
{%- endif %}
Attempt: {{ attempt }}

Return JSON with proposed_fix as a single shell command, or empty if unfixable."""


@dataclass(frozen=True)
class ChatPrompt:
    """Rendered system + user messages."""

    system: str
    user: str

    def as_messages(self) -> list[dict[str, str]]:
        """OpenAI-style message list."""
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


def _tail(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return "..." + text[-limit:]


class SuggestionPromptBuilder:
    """Renders prompts for a SuggestionRequest.

    Stderr is truncated to its last ``stderr_tail_chars`` characters;
    errors are usually at the end of the output.
    """

    def __init__(
        self,
        system_template: str = SYSTEM_TEMPLATE,
        user_template: str = USER_TEMPLATE,
        stderr_tail_chars: int = PROMPT_STDERR_TAIL_CHARS,
        jinja_env: jinja2.Environment | None = None,
    ) -> None:
        self.env = jinja_env or jinja2.Environment(
            undefined=jinja2.StrictUndefined,
            autoescape=False,
            keep_trailing_newline=False,
        )
        self.system_template = self.env.from_string(system_template)
        self.user_template = self.env.from_string(user_template)
        self.stderr_tail_chars = stderr_tail_chars

    def build(self, request: SuggestionRequest) -> ChatPrompt:
        """Render both messages for a request."""
        context = request.to_dict()
        context["stderr"] = _tail(request.stderr.strip(), self.stderr_tail_chars) or "(empty)"
        return ChatPrompt(
            system=self.system_template.render(),
            user=self.user_template.render(**context),
        )
