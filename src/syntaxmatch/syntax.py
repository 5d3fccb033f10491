"""Base classes for syntax providers.

A provider subclasses one of these, lists its patterns with the registry,
and implements ``init`` to take over the expressions bound to the pattern's
placeholders. ``init`` returns False to reject the match; logging an error
through ``result.log`` before returning False turns the rejection into a
reported semantic error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from syntaxmatch.expressions import EvalContext, Expression
    from syntaxmatch.matcher import MatchResult


class SyntaxElement:
    """Anything a pattern can produce."""

    def init(
        self,
        exprs: list[Expression | None],
        matched_pattern: int,
        result: MatchResult,
    ) -> bool:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({vars(self)})"


class Condition(SyntaxElement):
    negated: bool = False

    def check(self, context: EvalContext) -> bool:
        raise NotImplementedError


class Effect(SyntaxElement):
    def execute(self, context: EvalContext) -> None:
        raise NotImplementedError


class ExpressionElement(SyntaxElement):
    """A provider that computes values at runtime."""

    return_type: str = "object"

    def get(self, context: EvalContext) -> list[object]:
        raise NotImplementedError

    def is_single(self) -> bool:
        return True

    def set_time(self, time: int) -> bool:
        return time == 0


class DefaultExpression(ExpressionElement):
    """An expression used for a placeholder the input left out."""

    def init(self, exprs=None, matched_pattern=0, result=None) -> bool:
        return True


class EventValueExpression(DefaultExpression):
    """Reads one value of the current event, e.g. the event's player.

    Subclasses set ``return_type``; ``time_states`` says whether the event
    also keeps past and future versions of the value.
    """

    time_states: bool = False

    def __init__(self) -> None:
        self.time = 0

    def get(self, context: EvalContext) -> list[object]:
        value = context.value(self.return_type, self.time)
        if value is None:
            return []
        return list(value) if isinstance(value, (list, tuple)) else [value]

    def set_time(self, time: int) -> bool:
        if time != 0 and not self.time_states:
            return False
        self.time = time
        return True

    def __str__(self) -> str:
        prefix = {-1: "past ", 1: "future "}.get(self.time, "")
        return f"the {prefix}event-{self.return_type}"


class Event(SyntaxElement):
    """Trigger header such as ``on death``.

    Placeholders in event patterns only ever bind literals.
    """

    def check(self, context: EvalContext) -> bool:
        return True


# ── Property helpers ────────────────────────────────────────────


class PropertyCondition(Condition):
    """``<things> is|are <property>`` and its negation."""

    property_name: str = ""

    @staticmethod
    def patterns(prop: str, types: str) -> tuple[str, str]:
        return (
            f"%{types}% (is|are) {prop}",
            f"%{types}% (isn't|is not|aren't|are not) {prop}",
        )

    def init(self, exprs, matched_pattern, result) -> bool:
        self.expr = exprs[0]
        self.negated = matched_pattern == 1
        return True

    def check_value(self, value: object) -> bool:
        raise NotImplementedError

    def check(self, context: EvalContext) -> bool:
        values = self.expr.get_array(context)
        ok = bool(values) and all(self.check_value(v) for v in values)
        return ok != self.negated

    def __str__(self) -> str:
        verb = "is" if self.expr.is_single() else "are"
        neg = " not" if self.negated else ""
        return f"{self.expr} {verb}{neg} {self.property_name}"


class PropertyExpression(ExpressionElement):
    """``[the] <property> of <things>`` and ``<things>'s <property>``."""

    property_name: str = ""

    @staticmethod
    def patterns(prop: str, types: str) -> tuple[str, str]:
        return (f"[the] {prop} of %{types}%", f"%{types}%'[s] {prop}")

    def init(self, exprs, matched_pattern, result) -> bool:
        self.expr = exprs[0]
        return True

    def convert(self, value: object) -> object:
        raise NotImplementedError

    def get(self, context: EvalContext) -> list[object]:
        converted = (self.convert(v) for v in self.expr.get_array(context))
        return [v for v in converted if v is not None]

    def is_single(self) -> bool:
        return self.expr.is_single()

    def __str__(self) -> str:
        return f"the {self.property_name} of {self.expr}"
