"""Commands with a fixed list of typed arguments.

A command is declared with a usage string such as
``<player> [<number=1>]``. Every ``<type>`` becomes a placeholder in the
command's pattern; arguments inside ``[...]`` or with a ``=default`` may be
left out by the user, in which case the default (or nothing) is used.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from syntaxmatch.errors import SyntaxAPIError
from syntaxmatch.expressions import EvalContext, Expression
from syntaxmatch.patterns import validate_pattern
from syntaxmatch.types import ParseContext

if TYPE_CHECKING:
    from syntaxmatch.registry import Registry

_ARGUMENT_RE = re.compile(r"<([^<>=]+)(?:=([^<>]*))?>")


@dataclass
class Argument:
    """One argument slot of a command and its current value."""

    index: int
    type_name: str
    default: Expression | None = None
    optional: bool = False
    single: bool = True
    current: list[object] = field(default_factory=list)

    def set(self, values: list[object]) -> None:
        self.current = list(values)

    def set_to_default(self, context: EvalContext) -> None:
        self.current = self.default.get_array(context) if self.default is not None else []

    @property
    def value(self) -> object:
        return self.current[0] if self.current else None

    def __str__(self) -> str:
        text = f"<{self.type_name}>"
        return f"[{text}]" if self.optional else text


@dataclass
class Command:
    name: str
    pattern: str
    arguments: list[Argument]

    @classmethod
    def from_usage(cls, name: str, usage: str, registry: Registry) -> Command:
        """Build a command from its usage string.

        Raises SyntaxAPIError for unknown types or defaults that are not
        literals of their argument's type.
        """
        arguments: list[Argument] = []
        parts: list[str] = []
        last = 0
        for m in _ARGUMENT_RE.finditer(usage):
            raw, default_text = m.group(1).strip(), m.group(2)
            type_name, is_plural = registry.normalize(raw)
            class_info = registry.get_class(type_name)
            optional = _bracket_depth(usage, m.start()) > 0 or default_text is not None
            default = None
            if default_text is not None:
                default = Expression.unparsed(default_text.strip()).convert(
                    class_info, registry, ParseContext.COMMAND,
                )
                if default is None:
                    raise SyntaxAPIError(
                        f"'{default_text}' is not a valid default for argument "
                        f"{len(arguments) + 1} of command '{name}'"
                    )
            arguments.append(Argument(
                len(arguments), type_name, default, optional, single=not is_plural,
            ))
            parts.append(usage[last : m.start()])
            parts.append(f"%-{raw}%" if optional else f"%{raw}%")
            last = m.end()
        parts.append(usage[last:])
        pattern = "".join(parts)
        validate_pattern(pattern)
        return cls(name, pattern, arguments)

    def values(self) -> list[object]:
        """Current value of each single argument, or the list for plural ones."""
        return [arg.value if arg.single else arg.current for arg in self.arguments]


def _bracket_depth(usage: str, end: int) -> int:
    depth = 0
    for c in usage[:end]:
        if c == "[":
            depth += 1
        elif c == "]":
            depth -= 1
    return depth
