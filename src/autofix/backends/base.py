"""Abstract base for suggestion backends."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from autofix.core.environment import EnvironmentSnapshot
from autofix.core.exceptions import BackendError


@dataclass(frozen=True)
class SuggestionRequest:
    """Everything a backend is told about a failure."""

    environment: EnvironmentSnapshot
    command: str
    stderr: str
    exit_code: int
    attempt: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "environment": self.environment.to_dict(),
            "command": self.command,
            "stderr": self.stderr,
            "exit_code": self.exit_code,
            "attempt": self.attempt,
        }


@dataclass(frozen=True)
class Suggestion:
    """A backend's answer, with wire values kept as sent.

    ``risk_level`` and ``fix_type`` are interpreted by the resolver (an
    empty risk level means "not given"); an empty ``proposed_fix`` means
    the backend has nothing actionable.
    """

    explanation: str
    proposed_fix: str
    risk_level: str = ""
    fix_type: str | None = None

    @property
    def actionable(self) -> bool:
        return bool(self.proposed_fix.strip())

    @classmethod
    def from_payload(cls, payload: Any, backend: str) -> Suggestion:
        """Build a Suggestion from decoded JSON.

        Raises:
            BackendError: If the payload is not an object or has wrong types.
        """
        if not isinstance(payload, dict):
            raise BackendError(backend, f"expected a JSON object, got {type(payload).__name__}")

        fields: dict[str, str | None] = {}
        for key in ("explanation", "proposed_fix", "risk_level", "fix_type"):
            value = payload.get(key)
            if value is not None and not isinstance(value, str):
                raise BackendError(backend, f"field '{key}' must be a string")
            fields[key] = value

        return cls(
            explanation=fields["explanation"] or "",
            proposed_fix=fields["proposed_fix"] or "",
            risk_level=fields["risk_level"] or "",
            fix_type=fields["fix_type"],
        )

    @classmethod
    def from_text(cls, text: str, backend: str) -> Suggestion:
        """Parse a Suggestion out of free-form model output.

        Raises:
            BackendError: If no JSON object can be found or decoded.
        """
        from autofix.backends.json_extract import extract_json_object

        raw = extract_json_object(text)
        if raw is None:
            raise BackendError(backend, "no JSON object found in response")
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise BackendError(backend, f"invalid JSON in response: {e}") from e
        return cls.from_payload(payload, backend)


class SuggestionBackend(ABC):
    """Abstract base class for suggestion backends.

    A backend proposes one shell command for a failure the deterministic
    rule table could not handle. Any failure to produce an answer
    (network, timeout, HTTP status, unparseable output) is raised as
    BackendError; the resolver treats that as "no candidate".
    """

    @abstractmethod
    def get_suggestion(self, request: SuggestionRequest) -> Suggestion:
        """Ask the backend for a fix.

        Args:
            request: The failure description.

        Returns:
            The backend's suggestion.

        Raises:
            BackendError: If no usable suggestion could be obtained.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""
        ...

    def close(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None
