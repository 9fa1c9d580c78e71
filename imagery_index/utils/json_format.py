"""Compact pretty-printing for diff-stable JSON files.

Implements the formatting policy of ``json-stringify-pretty-compact``,
the formatter every catalog file has been written with: a container is
kept on a single line (with ``": "`` and ``", "`` spacing) when that line
fits within ``max_length`` once indentation and the trailing comma or
key prefix are accounted for; otherwise each member goes on its own
line, indented by two spaces, and the rule is applied recursively.

Keeping the exact same policy means records written by earlier tooling
are already in canonical form, so a rebuild produces no diff.
"""

from __future__ import annotations

import json
import re
from typing import Any

DEFAULT_MAX_LENGTH = 80
INDENT = "  "

# A JSON string literal (kept verbatim) or a separator that gets a trailing space.
_STRING_OR_SEPARATOR = re.compile(r'("(?:[^\\"]|\\.)*")|[:,]')


def compact_json(value: Any) -> str:
    """Serialise *value* without any whitespace (``JSON.stringify`` form)."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def format_json(value: Any, *, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Serialise *value* using the compact-pretty policy (no trailing newline).

    Args:
        value: Any JSON-serialisable value. Mapping key order is preserved.
        max_length: Maximum line length before a container is expanded.
    """
    return _format(value, "", 0, max_length)


def _format(value: Any, current_indent: str, reserved: int, max_length: int) -> str:
    string = compact_json(value)
    available = max_length - len(current_indent) - reserved

    if len(string) <= available:
        prettified = _STRING_OR_SEPARATOR.sub(_space_separator, string)
        if len(prettified) <= available:
            return prettified

    if isinstance(value, dict) and value:
        next_indent = current_indent + INDENT
        items: list[str] = []
        last = len(value) - 1
        for index, (key, member) in enumerate(value.items()):
            key_part = f"{compact_json(str(key))}: "
            trailing = 0 if index == last else 1
            items.append(
                key_part + _format(member, next_indent, len(key_part) + trailing, max_length)
            )
        return _join("{", "}", items, current_indent, next_indent)

    if isinstance(value, list | tuple) and value:
        next_indent = current_indent + INDENT
        last = len(value) - 1
        items = [
            _format(member, next_indent, 0 if index == last else 1, max_length)
            for index, member in enumerate(value)
        ]
        return _join("[", "]", items, current_indent, next_indent)

    return string


def _space_separator(match: re.Match[str]) -> str:
    return match.group(1) or f"{match.group(0)} "


def _join(start: str, end: str, items: list[str], current_indent: str, next_indent: str) -> str:
    body = f",\n{next_indent}".join(items)
    return f"{start}\n{next_indent}{body}\n{current_indent}{end}"


def js_number(value: float | int) -> str:
    """Render a number the way JavaScript would (``5.0`` → ``"5"``)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
