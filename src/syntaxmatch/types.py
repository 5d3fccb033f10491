"""Type descriptors for placeholder targets and their literal parsers.

A ``ClassInfo`` names a type that may appear inside a ``%type%``
placeholder. It knows its plural spelling, how to parse a literal of the
type, and optionally how to create a default expression for it.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from numbers import Real
from typing import TYPE_CHECKING

from syntaxmatch.noun import plural as plural_of

if TYPE_CHECKING:
    from syntaxmatch.syntax import DefaultExpression


class ParseContext(Enum):
    """Where the text being parsed comes from."""

    DEFAULT = auto()
    EVENT = auto()
    COMMAND = auto()


LiteralParser = Callable[[str, ParseContext], object]


@dataclass(frozen=True)
class ClassInfo:
    name: str
    py_type: type | tuple[type, ...] = object
    plural: str = ""
    parser: LiteralParser | None = None
    default_expression: Callable[[], DefaultExpression] | None = None
    supertypes: tuple[str, ...] = ()
    display_name: str = ""

    def __post_init__(self) -> None:
        if not self.plural:
            object.__setattr__(self, "plural", plural_of(self.name))
        if not self.display_name:
            object.__setattr__(self, "display_name", self.name)

    def parse(self, text: str, context: ParseContext = ParseContext.DEFAULT) -> object:
        """Parse a literal of this type, returning None if it isn't one."""
        if self.parser is None:
            return None
        return self.parser(text, context)


# ── Built-in literal parsers ────────────────────────────────────

_INTEGER_RE = re.compile(r"[-+]?\d+")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d+)?|\.\d+)")
_STRING_RE = re.compile(r'"((?:[^"]|"")*)"')

_TRUE = frozenset({"true", "yes", "on"})
_FALSE = frozenset({"false", "no", "off"})


def parse_integer(text: str, context: ParseContext) -> int | None:
    if _INTEGER_RE.fullmatch(text):
        return int(text)
    return None


def parse_number(text: str, context: ParseContext) -> Real | None:
    if _INTEGER_RE.fullmatch(text):
        return int(text)
    if _NUMBER_RE.fullmatch(text):
        return float(text)
    return None


def parse_string(text: str, context: ParseContext) -> str | None:
    """Parse a double-quoted string; ``""`` inside stands for one quote.

    Command arguments are taken verbatim.
    """
    if context is ParseContext.COMMAND:
        return text
    m = _STRING_RE.fullmatch(text)
    if m is None:
        return None
    return m.group(1).replace('""', '"')


def parse_boolean(text: str, context: ParseContext) -> bool | None:
    lower = text.lower()
    if lower in _TRUE:
        return True
    if lower in _FALSE:
        return False
    return None


# ── Built-in types ──────────────────────────────────────────────

UNIVERSAL = "object"

OBJECT = ClassInfo(UNIVERSAL, object)
NUMBER = ClassInfo("number", Real, parser=parse_number)
INTEGER = ClassInfo("integer", int, parser=parse_integer, supertypes=("number",))
STRING = ClassInfo("string", str, parser=parse_string, display_name="text")
BOOLEAN = ClassInfo("boolean", bool, parser=parse_boolean)

BUILTINS: tuple[ClassInfo, ...] = (OBJECT, NUMBER, INTEGER, STRING, BOOLEAN)


def is_universal(info: ClassInfo) -> bool:
    return info.name == UNIVERSAL
