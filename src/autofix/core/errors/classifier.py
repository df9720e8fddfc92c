"""FailureClassifier: maps stderr text and exit code to a FailureCategory.

Classification is a best-effort heuristic over an ordered signature table.
Matching is case-insensitive substring search (or a regex where a layout
needs one) and the first matching signature wins, so specific signatures
come before generic ones (compiler text before build-tool text). A miss
is not an error: it yields FailureCategory.UNKNOWN with no extracted fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from autofix.core.logging import get_logger

from .codes import FailureCategory
from .models import ClassifiedFailure

_logger = get_logger("errors")


@dataclass(frozen=True)
class Signature:
    """One row of the signature table.

    Matches when the lowered text contains any of ``any_of`` and, if
    ``and_any_of`` is non-empty, also any of ``and_any_of``. A row with a
    ``pattern`` matches when the regex finds the lowered text instead.
    """

    category: FailureCategory
    any_of: tuple[str, ...] = ()
    and_any_of: tuple[str, ...] = ()
    pattern: re.Pattern[str] | None = None

    def matches(self, lowered: str) -> bool:
        if self.pattern is not None:
            return self.pattern.search(lowered) is not None
        if not any(s in lowered for s in self.any_of):
            return False
        if self.and_any_of and not any(s in lowered for s in self.and_any_of):
            return False
        return True


# =============================================================================
# Default signature table. Order matters: first match wins.
# =============================================================================

_MISSING_COMMAND_MARKERS: tuple[str, ...] = (
    "command not found",
    "executable file not found",
)

# POSIX sh (dash) layout: "/bin/sh: 1: foo: not found"
_SH_NOT_FOUND = re.compile(r"^[^\n:]*: \d+: ([^\s:]+): not found[ \t]*$", re.MULTILINE)

DEFAULT_SIGNATURES: tuple[Signature, ...] = (
    Signature(FailureCategory.MISSING_COMMAND, _MISSING_COMMAND_MARKERS),
    Signature(FailureCategory.MISSING_COMMAND, pattern=_SH_NOT_FOUND),
    Signature(
        FailureCategory.MISSING_COMPILER,
        ("gcc", "g++", "clang", "cc:", "compiler"),
        ("not found", "no such file"),
    ),
    Signature(FailureCategory.MISSING_LIBRARY, ("cannot find -l", "shared librar")),
    Signature(
        FailureCategory.PORT_IN_USE,
        ("address already in use", "port is already in use"),
    ),
    Signature(
        FailureCategory.PERMISSION_DENIED,
        ("permission denied", "operation not permitted"),
    ),
    Signature(
        FailureCategory.MISSING_BUILD_TOOLS,
        ("c compiler", "make: not found", "build tools", "build-essential"),
    ),
    Signature(
        FailureCategory.PACKAGE_MANAGER_NOT_FOUND,
        ("package manager",),
        ("not found",),
    ),
    Signature(
        FailureCategory.ARCHITECTURE_MISMATCH,
        (
            "exec format error",
            "wrong elf class",
            "incompatible architecture",
            "bad cpu type",
        ),
    ),
)

_QUOTES = "'\"`‘’“”"

# "-l<name>" must start a token; stops at whitespace or ")"
_LIBRARY_FLAG = re.compile(r"(?:^|[\s'\"(`])-l([^\s)]+)")

_MAX_PORT_DIGITS = 5


def _strip_quotes(token: str) -> str:
    return token.strip(_QUOTES)


def extract_command(stderr: str) -> str | None:
    """Extract the missing program name from "command not found" output.

    Handles the common shell layouts:
        bash: foo: command not found
        foo: command not found
        zsh: command not found: foo
        exec: "foo": executable file not found in $PATH
        /bin/sh: 1: foo: not found
    """
    for line in stderr.splitlines():
        lowered = line.lower()
        for marker in _MISSING_COMMAND_MARKERS:
            idx = lowered.find(marker)
            if idx < 0:
                continue

            trailing = line[idx + len(marker):].strip()
            if marker == "command not found" and trailing.startswith(":"):
                # zsh puts the name after the marker
                tokens = trailing.lstrip(":").split()[:1]
            else:
                tokens = line[:idx].rstrip().rstrip(":").split()[-1:]
            if not tokens:
                continue

            name = _strip_quotes(tokens[0].rstrip(":"))
            if name:
                return name

    match = _SH_NOT_FOUND.search(stderr)
    if match:
        return _strip_quotes(match.group(1)) or None
    return None


def extract_library(stderr: str) -> str | None:
    """Extract the library name from the first ``-l<name>`` linker flag."""
    match = _LIBRARY_FLAG.search(stderr)
    if not match:
        return None
    # ld >= 2.36 appends ": No such file or directory" directly to the flag
    name = _strip_quotes(match.group(1).rstrip(":"))
    return name or None


def extract_port(stderr: str) -> str | None:
    """Extract a port from whitespace tokens ending in ``:``.

    The candidate is the text between the last inner ``:`` and the
    trailing one ("8080:" and "0.0.0.0:8080:" both yield "8080"); it is
    accepted only if it is 1-5 digits.
    """
    for token in stderr.split():
        if not token.endswith(":"):
            continue
        candidate = token[:-1].rsplit(":", 1)[-1]
        if candidate.isdigit() and 1 <= len(candidate) <= _MAX_PORT_DIGITS:
            return candidate
    return None


class FailureClassifier:
    """Classifies failed commands by matching stderr against signatures.

    The classifier is stateless and deterministic: identical
    (stderr, exit_code) inputs always produce equal ClassifiedFailure values.

    Example:
        classifier = FailureClassifier()
        failure = classifier.classify("bash: foo: command not found", 127)
        assert failure.category == FailureCategory.MISSING_COMMAND
        assert failure.command == "foo"
    """

    def __init__(self, signatures: tuple[Signature, ...] = DEFAULT_SIGNATURES) -> None:
        self.signatures = signatures

    def match_category(self, stderr: str) -> FailureCategory:
        """Return the category of the first matching signature, or UNKNOWN."""
        lowered = stderr.lower()
        for signature in self.signatures:
            if signature.matches(lowered):
                return signature.category
        return FailureCategory.UNKNOWN

    def classify(self, stderr: str, exit_code: int | None = None) -> ClassifiedFailure:
        """Classify a failure and extract its parameter.

        Args:
            stderr: Standard error of the failed command.
            exit_code: Exit code of the failed command.

        Returns:
            ClassifiedFailure with category and at most one extracted field.
        """
        category = self.match_category(stderr)

        command = package = port = None
        if category == FailureCategory.MISSING_COMMAND:
            command = extract_command(stderr)
        elif category == FailureCategory.MISSING_LIBRARY:
            package = extract_library(stderr)
        elif category == FailureCategory.PORT_IN_USE:
            port = extract_port(stderr)

        failure = ClassifiedFailure(
            category=category,
            message=category.description,
            exit_code=exit_code,
            command=command,
            package=package,
            port=port,
        )
        _logger.debug(
            "failure_classified",
            category=category.value,
            exit_code=exit_code,
            extracted=failure.extracted,
        )
        return failure
