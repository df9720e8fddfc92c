"""Locate a JSON object inside free-form model output.

Chat models wrap answers in prose or Markdown fences even when told not
to. ``extract_json_object`` finds the first balanced ``{...}`` run,
looking inside a fenced code block first. Braces inside JSON string
literals (including escaped quotes) do not count toward balance.

The function is pure and never raises; callers decode the returned text.
"""

from __future__ import annotations

import re

_FENCE = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)```", re.DOTALL)


def find_balanced_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` substring of ``text``.

    Scanning starts at each ``{`` in turn; if a start never balances, the
    next ``{`` is tried.

    Returns:
        The substring including both braces, or None.
    """
    start = text.find("{")
    while start != -1:
        end = _scan_object(text, start)
        if end is not None:
            return text[start:end + 1]
        start = text.find("{", start + 1)
    return None


def _scan_object(text: str, start: int) -> int | None:
    """Index of the brace closing the object opened at ``start``, or None."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def extract_json_object(text: str) -> str | None:
    """Extract the most likely JSON object from model output.

    Fenced code blocks are searched first (in order), then the whole text.

    Args:
        text: Raw model output.

    Returns:
        Candidate JSON object text, or None if there is no balanced object.
    """
    for block in _FENCE.finditer(text):
        found = find_balanced_object(block.group(1))
        if found is not None:
            return found
    return find_balanced_object(text)
