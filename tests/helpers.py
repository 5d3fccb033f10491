"""Shared test helpers for the syntaxmatch test suite."""

from __future__ import annotations

from syntaxmatch import library
from syntaxmatch.errors import BestError
from syntaxmatch.log import ParseLog
from syntaxmatch.matcher import MatchResult, PatternMatcher
from syntaxmatch.parser import Parser
from syntaxmatch.registry import Registry
from syntaxmatch.resolver import ExpressionResolver
from syntaxmatch.syntax import Effect


class Recorder(Effect):
    """Accepts every match and keeps what init received."""

    def init(self, exprs, matched_pattern, result) -> bool:
        self.exprs = exprs
        self.matched_pattern = matched_pattern
        self.result = result
        return True


class Rejecting(Effect):
    """Rejects every match without saying why."""

    def init(self, exprs, matched_pattern, result) -> bool:
        return False


class Complaining(Effect):
    """Rejects every match with an error."""

    def init(self, exprs, matched_pattern, result) -> bool:
        result.log.error("that makes no sense")
        return False


class Deprecated(Effect):
    """Accepts every match but logs a warning."""

    def init(self, exprs, matched_pattern, result) -> bool:
        result.log.warning("this syntax is deprecated")
        return True


def library_registry() -> Registry:
    """A frozen registry with the reference library installed."""
    registry = Registry()
    library.register(registry)
    registry.freeze()
    return registry


def effects_registry(*effects: tuple[type, str]) -> Registry:
    """A registry with only the built-in types and the given effects."""
    registry = Registry()
    for element, pattern in effects:
        registry.register_effect(element, pattern)
    return registry


def match(pattern: str, text: str, registry: Registry | None = None, **kwargs) -> MatchResult | None:
    """Match one pattern, discarding diagnostics."""
    return Parser(registry or Registry()).match(pattern, text, **kwargs)


def match_errors(pattern: str, text: str, registry: Registry | None = None, **kwargs) -> list:
    """Match one pattern that must fail, returning its diagnostics."""
    parser = Parser(registry or Registry(), **kwargs)
    assert parser.match(pattern, text) is None
    return parser.log.take_diagnostics()


def raw_matcher(text: str, registry: Registry | None = None) -> PatternMatcher:
    """A matcher that skips pattern validation."""
    registry = registry or Registry()
    errors = BestError()
    resolver = ExpressionResolver(registry, errors, ParseLog())
    return PatternMatcher(text, registry, resolver, errors)


def parse_fails(parser: Parser, text: str, code: str) -> list:
    """Parse a statement that must fail with *code*; returns its diagnostics."""
    assert parser.parse_statement(text) is None
    diags = parser.log.take_diagnostics()
    assert [d.code for d in diags] == [code], (
        f"Expected {code} but got: {[f'{d.code}: {d.message}' for d in diags] or 'no diagnostics'}"
    )
    return diags
