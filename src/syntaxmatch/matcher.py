"""Recursive backtracking matcher for the pattern mini-language.

``PatternMatcher`` walks a pattern against one input string. Every frame
works on its own pair of cursors and returns a fresh ``MatchResult`` on
success, so a failed branch can never leave state behind for its siblings.
Typed placeholders are resolved through an ``ExpressionResolver``; any
failure worth reporting goes into the shared ``BestError``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import TYPE_CHECKING

from syntaxmatch.errors import BestError, ErrorQuality, MalformedPatternError
from syntaxmatch.expressions import ExprKind, Expression
from syntaxmatch.log import ParseLog
from syntaxmatch.noun import a
from syntaxmatch.patterns import (
    alternatives,
    count_placeholders,
    has_only,
    next_bracket,
    next_quote,
    next_unescaped,
    parse_placeholder,
    placeholder_index,
    validate_pattern,
)
from syntaxmatch.resolver import ExpressionResolver, not_a_message
from syntaxmatch.types import ParseContext

if TYPE_CHECKING:
    from syntaxmatch.registry import Registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """What a successful match bound.

    ``exprs`` has one slot per placeholder, None where nothing was bound.
    ``regexes`` holds the inline-regex matches and ``choices`` the index of
    the alternative taken in each ``(a|b)`` group on the matching path.
    """

    text: str
    exprs: tuple[Expression | None, ...]
    regexes: tuple[re.Match, ...] = field(default=(), compare=False)
    choices: tuple[int, ...] = ()
    matched_chars: int = 0
    log: ParseLog | None = field(default=None, compare=False, repr=False)

    @classmethod
    def empty(cls, text: str, pattern: str, matched_chars: int = 0) -> MatchResult:
        return cls(text, (None,) * count_placeholders(pattern), matched_chars=matched_chars)

    @property
    def captures(self) -> list[str]:
        return [m.group(0) for m in self.regexes]

    def bind(self, slot: int, expr: Expression) -> MatchResult:
        exprs = list(self.exprs)
        exprs[slot] = expr
        return replace(self, exprs=tuple(exprs))

    def plus_chars(self, n: int) -> MatchResult:
        if n == 0:
            return self
        return replace(self, matched_chars=self.matched_chars + n)


@lru_cache(maxsize=256)
def _compile(pattern: str, regex: str) -> re.Pattern:
    try:
        return re.compile(regex)
    except re.error as exc:
        raise MalformedPatternError(pattern, f"invalid regex <{regex}>: {exc}") from None


def _skip_run(text: str, i: int) -> int:
    """End of the quoted or braced run starting at ``text[i]``, or -1."""
    if text[i] == '"':
        close = next_quote(text, i + 1)
    else:
        close = text.find("}", i + 1)
    return -1 if close == -1 else close + 1


class PatternMatcher:
    """Matches patterns against one input string."""

    def __init__(
        self,
        text: str,
        registry: Registry,
        resolver: ExpressionResolver,
        errors: BestError,
        *,
        context: ParseContext = ParseContext.DEFAULT,
        min_error_chars: int = 5,
    ) -> None:
        self.text = text
        self.registry = registry
        self.resolver = resolver
        self.errors = errors
        self.context = context
        self.min_error_chars = min_error_chars

    def match(self, pattern: str) -> MatchResult | None:
        res = self._match(pattern, 0, 0)
        if res is not None:
            logger.debug("%r matched %r", pattern, self.text)
        return res

    def _match(self, pattern: str, i: int, j: int) -> MatchResult | None:
        text = self.text
        matched = 0
        while j < len(pattern):
            c = pattern[j]
            if c == "[":
                res = self._match(pattern, i, j + 1)
                if res is not None:
                    return res.plus_chars(matched)
                end = next_bracket(pattern, "]", "[", j + 1)
                if ((has_only(pattern, "[(", 0, j) or pattern[j - 1] == " ")
                        and end < len(pattern) - 1 and pattern[end + 1] == " "):
                    end += 1
                j = end + 1
            elif c == "(":
                res = self._match_choice(pattern, i, j)
                return None if res is None else res.plus_chars(matched)
            elif c == "%":
                res = self._match_placeholder(pattern, i, j, matched)
                return None if res is None else res.plus_chars(matched)
            elif c == "<":
                res = self._match_regex(pattern, i, j)
                return None if res is None else res.plus_chars(matched)
            elif c in ")]":
                j += 1
            elif c == "|":
                j = next_bracket(pattern, ")", "(", j + 1) + 1
            elif c == " ":
                if i == len(text) or (i > 0 and text[i - 1] == " "):
                    j += 1
                    continue
                if text[i] != " ":
                    return None
                matched += 1
                i += 1
                j += 1
            else:
                if c == "\\":
                    j += 1
                    if j == len(pattern):
                        raise MalformedPatternError(pattern, "must not end with a backslash")
                if i == len(text) or pattern[j].lower() != text[i].lower():
                    return None
                matched += 1
                i += 1
                j += 1
        if i == len(text):
            return MatchResult.empty(text, pattern, matched)
        return None

    def _match_choice(self, pattern: str, i: int, j: int) -> MatchResult | None:
        end = next_bracket(pattern, ")", "(", j + 1)
        for index, start in enumerate(alternatives(pattern, j + 1, end)):
            res = self._match(pattern, i, start)
            if res is not None:
                return replace(res, choices=(index, *res.choices))
        return None

    def _match_placeholder(
        self, pattern: str, i: int, j: int, matched: int,
    ) -> MatchResult | None:
        text = self.text
        if i == len(text):
            return None
        end = next_unescaped(pattern, "%", j + 1)
        if end == -1:
            raise MalformedPatternError(pattern, "odd number of '%'")
        info = parse_placeholder(pattern[j + 1 : end], self.registry.normalize)
        class_info = self.registry.get_class(info.name)

        if end == len(pattern) - 1:
            i2 = len(text)
        elif text[i] in '"{':
            i2 = _skip_run(text, i)
            if i2 == -1:
                return None
        else:
            i2 = i + 1

        while i2 <= len(text):
            if i2 < len(text) and text[i2] in '"{':
                i2 = _skip_run(text, i2)
                if i2 == -1:
                    return None
            res = self._match(pattern, i2, end + 1)
            if res is not None:
                expr = self.resolver.resolve(class_info, text[i:i2])
                if expr is not None:
                    return self._bind(pattern, j, info, class_info, expr, res)
                if res.matched_chars + matched >= self.min_error_chars:
                    self.errors.set(
                        ErrorQuality.NOT_AN_EXPRESSION,
                        not_a_message(self.registry, text[i:i2], class_info),
                    )
            i2 += 1
        return None

    def _bind(self, pattern, j, info, class_info, expr, res) -> MatchResult | None:
        unparsed = expr.kind is ExprKind.UNPARSED
        if not info.is_plural and not unparsed and not expr.is_single():
            name = self.registry.exact_type_name(class_info)
            if self.context is ParseContext.COMMAND:
                message = f"this command can only accept a single {name}!"
            else:
                message = (
                    f"this expression can only accept a single {name}, "
                    "but multiple are given."
                )
            self.errors.set(ErrorQuality.SEMANTIC_ERROR, message)
            return None
        if info.time != 0:
            if unparsed:
                return None
            if not expr.set_time(info.time):
                state = "past" if info.time < 0 else "future"
                self.errors.set(
                    ErrorQuality.SEMANTIC_ERROR, f"{expr} does not have {a(state)} state",
                )
                return None
        return res.bind(placeholder_index(pattern, j), expr)

    def _match_regex(self, pattern: str, i: int, j: int) -> MatchResult | None:
        end = pattern.find(">", j + 1)
        if end == -1:
            raise MalformedPatternError(pattern, "missing closing regex bracket '>'")
        regex = _compile(pattern, pattern[j + 1 : end])
        for i2 in range(i + 1, len(self.text) + 1):
            res = self._match(pattern, i2, end + 1)
            if res is not None:
                m = regex.fullmatch(self.text[i:i2])
                if m is not None:
                    return replace(res, regexes=(m, *res.regexes))
        return None


def match_pattern(
    pattern: str,
    text: str,
    registry: Registry,
    *,
    log: ParseLog | None = None,
    literal_only: bool = False,
    context: ParseContext = ParseContext.DEFAULT,
) -> MatchResult | None:
    """Validate *pattern* and match it against *text*, discarding errors."""
    validate_pattern(pattern)
    log = log or ParseLog()
    errors = BestError()
    resolver = ExpressionResolver(
        registry, errors, log, context=context, literal_only=literal_only,
    )
    with log.capture():
        return PatternMatcher(text, registry, resolver, errors, context=context).match(pattern)
