"""Candidate selection and the public parse entry points.

``SyntaxParser`` performs one parse of one input string: it tries every
pattern of every descriptor in a source, in order, and keeps the best error
seen along the way. ``Parser`` wraps it for callers. Each of its entry
points runs inside its own capture scope, so a call either succeeds and
flushes whatever the chosen element logged, or fails and reports at most
one error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from syntaxmatch.config import ParserOptions
from syntaxmatch.defaults import bind_default
from syntaxmatch.errors import BestError, ErrorQuality, SyntaxAPIError
from syntaxmatch.expressions import EvalContext, Expression
from syntaxmatch.log import ParseLog, SubLog
from syntaxmatch.matcher import MatchResult, PatternMatcher
from syntaxmatch.patterns import iter_placeholders, parse_placeholder, validate_pattern
from syntaxmatch.resolver import ExpressionResolver, not_a_message
from syntaxmatch.types import ParseContext

if TYPE_CHECKING:
    from syntaxmatch.commands import Command
    from syntaxmatch.registry import EventInfo, Registry, SyntaxInfo
    from syntaxmatch.syntax import Event, SyntaxElement

logger = logging.getLogger(__name__)


class SyntaxParser:
    """One parse attempt of *text*."""

    def __init__(
        self,
        text: str,
        registry: Registry,
        log: ParseLog,
        *,
        context: ParseContext = ParseContext.DEFAULT,
        literal_only: bool = False,
        options: ParserOptions | None = None,
    ) -> None:
        self.text = text
        self.registry = registry
        self.log = log
        self.context = context
        self.options = options or ParserOptions()
        self.errors = BestError()
        self.resolver = ExpressionResolver(
            registry, self.errors, log,
            context=context, literal_only=literal_only, options=self.options,
        )
        self.matcher = PatternMatcher(
            text, registry, self.resolver, self.errors,
            context=context, min_error_chars=self.options.min_error_chars,
        )

    def match(self, pattern: str) -> MatchResult | None:
        return self.matcher.match(pattern)

    def parse(self, source: Iterable[SyntaxInfo]) -> SyntaxElement | None:
        """Return the first element whose pattern matches and whose init accepts."""
        for info in source:
            for index, pattern in enumerate(info.patterns):
                res = self.match(pattern)
                if res is None:
                    continue
                res = self._bind_defaults(pattern, res)
                element = info.create()
                if self._init(element, index, res):
                    return element
        self.report()
        return None

    def parse_event(self, source: Iterable[EventInfo]) -> tuple[EventInfo, Event] | None:
        """Like parse, but leaves unbound slots empty and returns the info too."""
        for info in source:
            for index, pattern in enumerate(info.patterns):
                res = self.match(pattern)
                if res is None:
                    continue
                element = info.create()
                if self._init(element, index, res):
                    return info, element
        self.report()
        return None

    def report(self) -> None:
        """Log the best error recorded so far, if any."""
        if self.errors:
            self.log.error(self.errors.message, self.errors.code)

    def _bind_defaults(self, pattern: str, res: MatchResult) -> MatchResult:
        exprs = list(res.exprs)
        for slot, raw in iter_placeholders(pattern):
            if exprs[slot] is None and not raw.startswith("-"):
                placeholder = parse_placeholder(raw, self.registry.normalize)
                exprs[slot] = bind_default(self.registry, placeholder)
        return replace(res, exprs=tuple(exprs))

    def _init(self, element: SyntaxElement, index: int, res: MatchResult) -> bool:
        with self.log.capture() as sub:
            ok = element.init(list(res.exprs), index, replace(res, log=self.log))
        if ok:
            self.log.print_log(sub)
            return True
        last = sub.last_error()
        if last is not None:
            self.errors.set(ErrorQuality.SEMANTIC_ERROR, last.message)
        else:
            logger.debug("%s rejected %r silently", type(element).__name__, self.text)
        return False


class Parser:
    """Entry points for parsing script text against a registry."""

    def __init__(
        self,
        registry: Registry,
        *,
        log: ParseLog | None = None,
        options: ParserOptions | None = None,
    ) -> None:
        self.registry = registry
        self.log = log or ParseLog()
        self.options = options or ParserOptions()

    def _parser(self, text: str, **kwargs) -> SyntaxParser:
        return SyntaxParser(text, self.registry, self.log, options=self.options, **kwargs)

    def _finish(self, result, sub: SubLog, default_error: str | None):
        if result is not None:
            self.log.print_log(sub)
        else:
            self.log.print_errors(sub, default_error)
        return result

    # ── Syntax elements ─────────────────────────────────────────

    def parse(
        self, text: str, source: Iterable[SyntaxInfo], default_error: str | None = None,
    ) -> SyntaxElement | None:
        with self.log.capture() as sub:
            element = self._parser(text).parse(source)
        return self._finish(element, sub, default_error)

    def parse_static(
        self, text: str, source: Iterable[SyntaxInfo], default_error: str | None = None,
    ) -> SyntaxElement | None:
        """Parse with placeholders bound to literals only."""
        with self.log.capture() as sub:
            element = self._parser(text, literal_only=True).parse(source)
        return self._finish(element, sub, default_error)

    def parse_statement(
        self, text: str, default_error: str | None = None,
    ) -> SyntaxElement | None:
        """Parse a script line as a condition or, failing that, an effect."""
        if default_error is None:
            default_error = self.options.default_error
        return self.parse(text, self.registry.statements(), default_error)

    def parse_event(
        self, text: str, default_error: str | None = None,
    ) -> tuple[EventInfo, Event] | None:
        with self.log.capture() as sub:
            parser = self._parser(text, context=ParseContext.EVENT, literal_only=True)
            found = parser.parse_event(self.registry.events)
        return self._finish(found, sub, default_error)

    # ── Expressions ─────────────────────────────────────────────

    def parse_expression(
        self, text: str, type_name: str = "object", default_error: str | None = None,
    ) -> Expression | None:
        """Parse *text* as a variable, a registered expression or a literal."""
        class_info = self.registry.get_class(type_name)
        text = text.strip()
        with self.log.capture() as sub:
            parser = self._parser(text)
            expr = parser.resolver.resolve(class_info, text) if text else None
            if expr is None:
                parser.errors.set(
                    ErrorQuality.NOT_AN_EXPRESSION,
                    not_a_message(self.registry, text, class_info),
                )
                parser.report()
        return self._finish(expr, sub, default_error)

    def parse_literal(self, text: str, type_name: str) -> Expression | None:
        """Parse *text* as a literal of *type_name*; logs nothing."""
        text = text.strip()
        if not text:
            return None
        return Expression.unparsed(text).convert(self.registry.get_class(type_name), self.registry)

    # ── Commands and raw patterns ───────────────────────────────

    def parse_arguments(
        self, args: str, command: Command, context: EvalContext | None = None,
    ) -> bool:
        """Match *args* against *command* and assign its arguments."""
        parser = self._parser(args, context=ParseContext.COMMAND, literal_only=True)
        with self.log.capture() as sub:
            res = parser.match(command.pattern)
            if res is None:
                parser.report()
        if res is None:
            self.log.print_errors(sub)
            return False
        if len(command.arguments) != len(res.exprs):
            raise SyntaxAPIError(
                f"command '{command.name}' declares {len(command.arguments)} arguments "
                f"but its pattern has {len(res.exprs)} placeholders"
            )
        context = context or EvalContext()
        for argument, expr in zip(command.arguments, res.exprs):
            if expr is None:
                argument.set_to_default(context)
            else:
                argument.set(expr.get_array(context))
        self.log.print_log(sub)
        return True

    def match(
        self, pattern: str, text: str, *, literal_only: bool = False,
    ) -> MatchResult | None:
        """Match a single pattern, reporting the best error on failure."""
        validate_pattern(pattern)
        parser = self._parser(text, literal_only=literal_only)
        with self.log.capture() as sub:
            res = parser.match(pattern)
            if res is None:
                parser.report()
        return self._finish(res, sub, None)
