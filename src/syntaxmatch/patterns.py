"""Scanning helpers for the pattern mini-language.

Patterns are matched by scanning the raw string, so these helpers locate
brackets, placeholders and quotes without building a tree. All functions
here are pure and respect ``\\`` escapes.

Grammar summary::

    literal     case-insensitive text
    [...]       optional group
    (a|b|c)     alternation
    %type%      typed placeholder (%-type% may stay unbound, %type@-1% past)
    <regex>     inline regular expression
    \\c          escaped character
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from functools import lru_cache

from syntaxmatch.errors import MalformedPatternError


def next_bracket(pattern: str, closing: str, opening: str, start: int) -> int:
    """Index of the *closing* bracket matching an already-open one.

    Nested *opening* brackets are skipped. Raises MalformedPatternError when
    the bracket is never closed.
    """
    depth = 0
    i = start
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if c == closing:
            if depth == 0:
                return i
            depth -= 1
        elif c == opening:
            depth += 1
        i += 1
    raise MalformedPatternError(pattern, f"missing closing bracket '{closing}'")


def next_unescaped(s: str, c: str, start: int) -> int:
    """Index of the next unescaped *c* at or after *start*, or -1."""
    i = start
    while i < len(s):
        if s[i] == "\\":
            i += 2
            continue
        if s[i] == c:
            return i
        i += 1
    return -1


def next_quote(s: str, start: int) -> int:
    """Index of the quote closing a quoted run that began before *start*.

    A doubled ``""`` is an escaped quote, not a terminator. Returns -1 if
    the run is unterminated.
    """
    i = start
    while i < len(s):
        if s[i] == '"':
            if i == len(s) - 1 or s[i + 1] != '"':
                return i
            i += 1
        i += 1
    return -1


def has_only(s: str, chars: str, start: int, end: int) -> bool:
    return all(s[i] in chars for i in range(start, end))


def alternatives(pattern: str, start: int, end: int) -> list[int]:
    """Start offsets of the top-level alternatives in ``pattern[start:end]``."""
    starts = [start]
    depth = 0
    i = start
    while i < end:
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if c in "([":
            depth += 1
        elif c in ")]":
            depth -= 1
        elif c == "|" and depth == 0:
            starts.append(i + 1)
        i += 1
    return starts


@lru_cache(maxsize=1024)
def _percent_positions(pattern: str) -> tuple[int, ...]:
    positions = []
    i = 0
    while i < len(pattern):
        if pattern[i] == "\\":
            i += 2
            continue
        if pattern[i] == "%":
            positions.append(i)
        i += 1
    return tuple(positions)


def count_placeholders(pattern: str) -> int:
    return len(_percent_positions(pattern)) // 2


def placeholder_index(pattern: str, pos: int) -> int:
    """Slot index of the placeholder whose opening ``%`` is at *pos*."""
    return sum(1 for p in _percent_positions(pattern) if p < pos) // 2


def iter_placeholders(pattern: str) -> Iterator[tuple[int, str]]:
    """Yield ``(slot, raw name)`` for every placeholder, left to right."""
    positions = _percent_positions(pattern)
    for slot in range(len(positions) // 2):
        start, end = positions[2 * slot], positions[2 * slot + 1]
        yield slot, pattern[start + 1 : end]


# ── Placeholders ────────────────────────────────────────────────


@dataclass(frozen=True)
class PlaceholderInfo:
    """The parsed content of a ``%...%`` placeholder."""

    name: str
    is_plural: bool = False
    time: int = 0
    optional: bool = False


def parse_placeholder(
    raw: str, normalize: Callable[[str], tuple[str, bool]],
) -> PlaceholderInfo:
    """Parse ``-types@time`` into a PlaceholderInfo.

    *normalize* maps a type name to its singular form and plurality.
    """
    optional = raw.startswith("-")
    if optional:
        raw = raw[1:]
    name, sep, time_text = raw.partition("@")
    time = 0
    if sep:
        try:
            time = int(time_text)
        except ValueError:
            raise MalformedPatternError(
                raw, f"invalid time state '{time_text}'",
            ) from None
    base, is_plural = normalize(name)
    return PlaceholderInfo(base, is_plural, time, optional)


# ── Validation ──────────────────────────────────────────────────


def validate_pattern(pattern: str) -> None:
    """Check bracket balance, escapes, placeholders and regex slots.

    Raises MalformedPatternError on the first problem found.
    """
    stack: list[str] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            if i == len(pattern) - 1:
                raise MalformedPatternError(pattern, "must not end with a backslash")
            i += 2
            continue
        if c in "([":
            stack.append(")" if c == "(" else "]")
        elif c in ")]":
            if not stack or stack.pop() != c:
                raise MalformedPatternError(pattern, f"unexpected closing bracket '{c}'")
        elif c == "|" and ")" not in stack:
            raise MalformedPatternError(pattern, "'|' outside of a (...) group")
        elif c == "%":
            end = next_unescaped(pattern, "%", i + 1)
            if end == -1:
                raise MalformedPatternError(pattern, "odd number of '%'")
            if end == i + 1:
                raise MalformedPatternError(pattern, "empty placeholder '%%'")
            i = end
        elif c == "<":
            end = pattern.find(">", i + 1)
            if end == -1:
                raise MalformedPatternError(pattern, "missing closing regex bracket '>'")
            i = end
        i += 1
    if stack:
        raise MalformedPatternError(pattern, f"missing closing bracket '{stack[-1]}'")
