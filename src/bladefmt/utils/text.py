"""Text utilities shared by the scanner, parser and idempotence guard."""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())


def strip_whitespace(text: str) -> str:
    """Remove every whitespace character (used for structural comparison)."""
    return _WHITESPACE_RUN.sub("", text)


def skip_quoted(text: str, pos: int) -> int:
    """Return the index just past the string literal starting at ``pos``.

    ``text[pos]`` must be a quote character. Backslash escapes are honoured.
    Returns -1 when the literal is not terminated.
    """
    quote = text[pos]
    i = pos + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return -1


def split_top_level(expr: str, sep: str = ",") -> list[str]:
    """Split an expression on ``sep`` outside of brackets and string literals.

    Example:
        >>> split_top_level("'title', fn($a, $b) => [$a, $b]")
        ["'title'", ' fn($a, $b) => [$a, $b]']
    """
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    n = len(expr)
    while i < n:
        ch = expr[i]
        if ch in "'\"":
            end = skip_quoted(expr, i)
            if end == -1:
                break
            i = end
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == sep and depth == 0:
            parts.append(expr[start:i])
            start = i + 1
        i += 1
    parts.append(expr[start:])
    return parts


def count_arguments(args: str | None) -> int:
    """Count top-level arguments in a parenthesized argument list.

    Example:
        >>> count_arguments("('title', 'Home')")
        2
        >>> count_arguments("()")
        0
        >>> count_arguments(None)
        0
    """
    if not args:
        return 0
    inner = args
    if inner.startswith("(") and inner.endswith(")"):
        inner = inner[1:-1]
    if not inner.strip():
        return 0
    return len(split_top_level(inner))


def find_delimiter(text: str, pos: int, closer: str) -> int:
    """Index of ``closer`` at or after ``pos``, skipping string literals.

    Falls back to a plain search when a stray quote makes the string-aware
    search fail. Returns -1 when ``closer`` never appears.

    Example:
        >>> find_delimiter('{{ "}}" }}', 2, "}}")
        8
    """
    n = len(text)
    first = closer[0]
    i = pos
    while i < n:
        ch = text[i]
        if ch in "'\"":
            end = skip_quoted(text, i)
            if end == -1:
                break
            i = end
            continue
        if ch == first and text.startswith(closer, i):
            return i
        i += 1
    return text.find(closer, pos)
