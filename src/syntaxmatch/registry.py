"""Registry of types, converters and syntax descriptors.

The registry is built once, before any parsing, and then frozen. Parsers
receive it explicitly; nothing in the package reads it from global state.
Syntax descriptors are tried in registration order, which is part of the
observable behaviour: an earlier descriptor wins over a later one whose
pattern also matches.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from syntaxmatch.errors import SyntaxAPIError
from syntaxmatch.noun import get_plural
from syntaxmatch.patterns import iter_placeholders, parse_placeholder, validate_pattern
from syntaxmatch.syntax import (
    Condition,
    DefaultExpression,
    Effect,
    Event,
    ExpressionElement,
    SyntaxElement,
)
from syntaxmatch.types import BUILTINS, UNIVERSAL, ClassInfo

CONDITIONS = "condition"
EFFECTS = "effect"
EXPRESSIONS = "expression"
EVENTS = "event"


@dataclass(frozen=True)
class SyntaxInfo:
    """One registered syntax kind: its patterns and the class to build."""

    element: type[SyntaxElement]
    patterns: tuple[str, ...]
    metadata: Mapping[str, object] = field(default_factory=dict, compare=False, hash=False)

    @property
    def name(self) -> str:
        return self.element.__name__

    def create(self) -> SyntaxElement:
        return self.element()


@dataclass(frozen=True)
class ExpressionInfo(SyntaxInfo):
    return_type: str = UNIVERSAL


@dataclass(frozen=True)
class EventInfo(SyntaxInfo):
    event_name: str = ""


class Registry:
    """Types, converters and syntax descriptors, keyed by kind."""

    def __init__(self, *, builtins: bool = True) -> None:
        self._types: dict[str, ClassInfo] = {}
        self._plurals: dict[str, str] = {}
        self._converters: dict[tuple[str, str], Callable[[object], object]] = {}
        self._syntaxes: dict[str, list[SyntaxInfo]] = {
            CONDITIONS: [], EFFECTS: [], EXPRESSIONS: [], EVENTS: [],
        }
        self._frozen = False
        if builtins:
            for info in BUILTINS:
                self.register_type(info)

    # ── Lifecycle ───────────────────────────────────────────────

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Close registration; the registry is read-only afterwards."""
        self._frozen = True

    def _check_open(self) -> None:
        if self._frozen:
            raise SyntaxAPIError("registration is closed; the registry is frozen")

    # ── Types ───────────────────────────────────────────────────

    def register_type(self, info: ClassInfo) -> ClassInfo:
        self._check_open()
        if info.name in self._types:
            raise SyntaxAPIError(f"type '{info.name}' is already registered")
        self._types[info.name] = info
        self._plurals[info.plural] = info.name
        return info

    def find_class(self, name: str) -> ClassInfo | None:
        return self._types.get(name)

    def get_class(self, name: str) -> ClassInfo:
        info = self._types.get(name)
        if info is None:
            raise SyntaxAPIError(f"no type named '{name}' is registered")
        return info

    def types(self) -> list[ClassInfo]:
        return list(self._types.values())

    def normalize(self, type_name: str) -> tuple[str, bool]:
        """Map a type name as written in a pattern to ``(singular, plural?)``."""
        if type_name in self._types:
            return type_name, False
        if type_name in self._plurals:
            return self._plurals[type_name], True
        return get_plural(type_name)

    def exact_type_name(self, info: ClassInfo) -> str:
        """The name of a type as shown in messages."""
        return info.display_name

    def get_default_expression(self, type_name: str) -> DefaultExpression | None:
        """A fresh default expression for *type_name*, or None."""
        info = self._types.get(type_name)
        if info is None or info.default_expression is None:
            return None
        return info.default_expression()

    def is_subtype(self, sub: ClassInfo, sup: ClassInfo) -> bool:
        if sup.name == UNIVERSAL or sub.name == sup.name:
            return True
        return any(
            self.is_subtype(self.get_class(parent), sup) for parent in sub.supertypes
        )

    # ── Converters ──────────────────────────────────────────────

    def register_converter(
        self, from_type: str, to_type: str, convert: Callable[[object], object],
    ) -> None:
        self._check_open()
        self.get_class(from_type)
        self.get_class(to_type)
        self._converters[(from_type, to_type)] = convert

    def get_converter(
        self, from_type: ClassInfo, to_type: ClassInfo,
    ) -> Callable[[object], object] | None:
        """A converter from *from_type* (or a supertype) to *to_type* (or a subtype)."""
        direct = self._converters.get((from_type.name, to_type.name))
        if direct is not None:
            return direct
        for (src, dst), convert in self._converters.items():
            if (self.is_subtype(from_type, self.get_class(src))
                    and self.is_subtype(self.get_class(dst), to_type)):
                return convert
        return None

    # ── Syntax descriptors ──────────────────────────────────────

    def _validate(self, patterns: tuple[str, ...]) -> None:
        if not patterns:
            raise SyntaxAPIError("a syntax element needs at least one pattern")
        for pattern in patterns:
            validate_pattern(pattern)
            for _, raw in iter_placeholders(pattern):
                self.get_class(parse_placeholder(raw, self.normalize).name)

    def _add(self, kind: str, info: SyntaxInfo) -> SyntaxInfo:
        self._check_open()
        self._validate(info.patterns)
        self._syntaxes.setdefault(kind, []).append(info)
        return info

    def register_syntax(
        self, kind: str, element: type[SyntaxElement], *patterns: str, **metadata: object,
    ) -> SyntaxInfo:
        """Register an element under an arbitrary kind, e.g. entity data."""
        return self._add(kind, SyntaxInfo(element, patterns, metadata))

    def register_condition(
        self, element: type[Condition], *patterns: str, **metadata: object,
    ) -> SyntaxInfo:
        return self._add(CONDITIONS, SyntaxInfo(element, patterns, metadata))

    def register_effect(
        self, element: type[Effect], *patterns: str, **metadata: object,
    ) -> SyntaxInfo:
        return self._add(EFFECTS, SyntaxInfo(element, patterns, metadata))

    def register_expression(
        self, element: type[ExpressionElement], *patterns: str, **metadata: object,
    ) -> ExpressionInfo:
        self.get_class(element.return_type)
        info = ExpressionInfo(element, patterns, metadata, return_type=element.return_type)
        return self._add(EXPRESSIONS, info)

    def register_event(
        self, name: str, element: type[Event], *patterns: str, **metadata: object,
    ) -> EventInfo:
        return self._add(EVENTS, EventInfo(element, patterns, metadata, event_name=name))

    def syntaxes(self, kind: str) -> list[SyntaxInfo]:
        return list(self._syntaxes.get(kind, []))

    @property
    def conditions(self) -> list[SyntaxInfo]:
        return self.syntaxes(CONDITIONS)

    @property
    def effects(self) -> list[SyntaxInfo]:
        return self.syntaxes(EFFECTS)

    @property
    def expressions(self) -> list[ExpressionInfo]:
        return self.syntaxes(EXPRESSIONS)

    @property
    def events(self) -> list[EventInfo]:
        return self.syntaxes(EVENTS)

    def statements(self) -> list[SyntaxInfo]:
        """Conditions followed by effects, the order lines are tried in."""
        return self.conditions + self.effects

    def kinds(self) -> list[str]:
        return list(self._syntaxes)
