"""Typed expressions bound into placeholder slots.

``Expression`` is a closed tagged variant. Its ``kind`` selects between a
variable reference, a typed literal, a literal whose type is not known yet,
and a value computed by a registered expression provider. Every capability
dispatches on that tag.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import TYPE_CHECKING

from syntaxmatch.patterns import next_quote
from syntaxmatch.types import OBJECT, ClassInfo, ParseContext, is_universal

if TYPE_CHECKING:
    from syntaxmatch.registry import Registry
    from syntaxmatch.syntax import ExpressionElement


class ExprKind(Enum):
    VARIABLE = auto()
    LITERAL = auto()
    UNPARSED = auto()
    COMPUTED = auto()


@dataclass
class EvalContext:
    """Runtime state expressions are evaluated against.

    ``values`` holds event values keyed by ``(type name, time)``.
    """

    variables: dict[str, object] = field(default_factory=dict)
    values: dict[tuple[str, int], object] = field(default_factory=dict)

    def value(self, type_name: str, time: int = 0) -> object:
        if (type_name, time) in self.values:
            return self.values[(type_name, time)]
        return self.values.get((type_name, 0))


# ── List literals ───────────────────────────────────────────────

_LIST_SEPARATOR = re.compile(
    r"\s*,\s*(?:(and|n?or)\s+)?|\s+(and|n?or)\s+", re.IGNORECASE,
)


def split_list(text: str) -> tuple[list[str], bool]:
    """Split ``a, b and c`` into its items outside of quotes.

    Returns the items and whether the list is an and-list.
    """
    parts: list[str] = []
    and_list = True
    start = i = 0
    while i < len(text):
        if text[i] == '"':
            close = next_quote(text, i + 1)
            if close == -1:
                break
            i = close + 1
            continue
        m = _LIST_SEPARATOR.match(text, i)
        if m is not None and i > start:
            parts.append(text[start:i])
            conjunction = m.group(1) or m.group(2)
            if conjunction and conjunction.lower() != "and":
                and_list = False
            start = i = m.end()
            continue
        i += 1
    parts.append(text[start:])
    return parts, and_list


def _join(items: list[str], and_list: bool) -> str:
    if len(items) == 1:
        return items[0]
    conjunction = "and" if and_list else "or"
    return f"{', '.join(items[:-1])} {conjunction} {items[-1]}"


# ── Expression ──────────────────────────────────────────────────


@dataclass
class Expression:
    kind: ExprKind
    return_type: ClassInfo = OBJECT
    text: str = ""
    values: tuple[object, ...] = ()
    single: bool = True
    and_list: bool = True
    element: ExpressionElement | None = None
    converter: Callable[[object], object] | None = field(default=None, compare=False)

    # ── Construction ────────────────────────────────────────────

    @classmethod
    def variable(cls, name: str, return_type: ClassInfo = OBJECT) -> Expression:
        return cls(ExprKind.VARIABLE, return_type, text=name, single=not name.endswith("::*"))

    @classmethod
    def literal(
        cls, values: list[object], return_type: ClassInfo, *, and_list: bool = True,
    ) -> Expression:
        return cls(
            ExprKind.LITERAL, return_type, values=tuple(values),
            single=len(values) == 1, and_list=and_list,
        )

    @classmethod
    def unparsed(cls, text: str) -> Expression:
        return cls(ExprKind.UNPARSED, OBJECT, text=text)

    @classmethod
    def computed(cls, element: ExpressionElement, return_type: ClassInfo) -> Expression:
        return cls(ExprKind.COMPUTED, return_type, element=element)

    # ── Capabilities ────────────────────────────────────────────

    def is_single(self) -> bool:
        if self.kind is ExprKind.COMPUTED:
            return self.element.is_single()
        if self.kind is ExprKind.UNPARSED:
            return len(split_list(self.text)[0]) == 1
        return self.single

    def convert(
        self,
        target: ClassInfo,
        registry: Registry,
        context: ParseContext = ParseContext.DEFAULT,
    ) -> Expression | None:
        """Return this expression typed as *target*, or None if impossible."""
        if self.kind is ExprKind.UNPARSED:
            return self._convert_unparsed(target, registry, context)
        if is_universal(target):
            return self
        if self.kind is ExprKind.VARIABLE:
            return replace(self, return_type=target)
        if registry.is_subtype(self.return_type, target):
            return replace(self, return_type=target)
        convert = registry.get_converter(self.return_type, target)
        if convert is None:
            return None
        if self.kind is ExprKind.LITERAL:
            values = [convert(v) for v in self.values]
            if any(v is None for v in values):
                return None
            return replace(self, return_type=target, values=tuple(values))
        return replace(self, return_type=target, converter=convert)

    def _convert_unparsed(
        self, target: ClassInfo, registry: Registry, context: ParseContext,
    ) -> Expression | None:
        if is_universal(target):
            return self
        parsed = target.parse(self.text, context)
        if parsed is not None:
            return Expression.literal([parsed], target)
        parts, and_list = split_list(self.text)
        if len(parts) == 1:
            return None
        values = []
        for part in parts:
            value = target.parse(part.strip(), context)
            if value is None:
                return None
            values.append(value)
        return Expression.literal(values, target, and_list=and_list)

    def set_time(self, time: int) -> bool:
        """Bind a past (<0) or future (>0) time state."""
        if time == 0:
            return True
        if self.kind is ExprKind.COMPUTED:
            return self.element.set_time(time)
        return False

    def get_array(self, context: EvalContext) -> list[object]:
        """Evaluate against *context*."""
        if self.kind is ExprKind.LITERAL:
            return list(self.values)
        if self.kind is ExprKind.UNPARSED:
            return [self.text]
        if self.kind is ExprKind.VARIABLE:
            value = context.variables.get(self.text)
            if value is None:
                return []
            items = list(value) if isinstance(value, (list, tuple)) else [value]
            if is_universal(self.return_type):
                return items
            return [v for v in items if isinstance(v, self.return_type.py_type)]
        values = self.element.get(context)
        if self.converter is not None:
            values = [self.converter(v) for v in values]
        return [v for v in values if v is not None]

    def get_single(self, context: EvalContext) -> object:
        values = self.get_array(context)
        return values[0] if values else None

    def __str__(self) -> str:
        if self.kind is ExprKind.VARIABLE:
            return f"{{{self.text}}}"
        if self.kind is ExprKind.UNPARSED:
            return self.text
        if self.kind is ExprKind.LITERAL:
            return _join([_literal_str(v) for v in self.values], self.and_list)
        return str(self.element)


def _literal_str(value: object) -> str:
    if isinstance(value, str):
        return '"' + value.replace('"', '""') + '"'
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
