"""Turns the text matched by a placeholder into a typed expression."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from syntaxmatch.errors import BestError, ErrorQuality
from syntaxmatch.expressions import Expression
from syntaxmatch.noun import a
from syntaxmatch.types import OBJECT, ClassInfo, ParseContext, is_universal

if TYPE_CHECKING:
    from syntaxmatch.config import ParserOptions
    from syntaxmatch.log import ParseLog
    from syntaxmatch.registry import Registry

_VARIABLE_RE = re.compile(r"(?i)((the )?var(iable)? )?\{.+\}")


def parse_variable(text: str, return_type: ClassInfo = OBJECT) -> Expression | None:
    """``{name}``, optionally preceded by ``the variable``."""
    if _VARIABLE_RE.fullmatch(text) is None:
        return None
    name = text[text.index("{") + 1 : text.rindex("}")]
    return Expression.variable(name, return_type)


def not_a_message(registry: Registry, text: str, class_info: ClassInfo) -> str:
    return f"'{text}' is not {a(registry.exact_type_name(class_info))}"


class ExpressionResolver:
    """Resolves substrings as variables, registered expressions or literals.

    Nothing is logged here. Type mismatches of parsed expressions and
    literals that fail to convert are recorded in *errors*, as is the best
    error of a failed nested parse.
    """

    def __init__(
        self,
        registry: Registry,
        errors: BestError,
        log: ParseLog,
        *,
        context: ParseContext = ParseContext.DEFAULT,
        literal_only: bool = False,
        options: ParserOptions | None = None,
    ) -> None:
        self.registry = registry
        self.errors = errors
        self.log = log
        self.context = context
        self.literal_only = literal_only
        self.options = options

    def resolve(self, class_info: ClassInfo, text: str) -> Expression | None:
        if not self.literal_only:
            variable = parse_variable(text, class_info)
            if variable is not None:
                return variable
            found = self._parse_nested(text)
            if found is not None:
                converted = found.convert(class_info, self.registry, self.context)
                if converted is None:
                    verb = "is" if found.is_single() else "are"
                    name = a(self.registry.exact_type_name(class_info))
                    self.errors.set(
                        ErrorQuality.EXPRESSION_OF_WRONG_TYPE, f"{found} {verb} not {name}",
                    )
                return converted
        literal = Expression.unparsed(text.strip())
        if is_universal(class_info):
            return literal
        converted = None
        if literal.text:
            converted = literal.convert(class_info, self.registry, self.context)
        if converted is None:
            self.errors.set(
                ErrorQuality.NOT_AN_EXPRESSION, not_a_message(self.registry, text, class_info),
            )
        return converted

    def _parse_nested(self, text: str) -> Expression | None:
        """Parse *text* against the registered expressions."""
        from syntaxmatch.parser import SyntaxParser

        nested = SyntaxParser(text, self.registry, self.log, options=self.options)
        with self.log.capture():
            element = nested.parse(self.registry.expressions)
        if element is None:
            self.errors.merge(nested.errors)
            return None
        return Expression.computed(element, self.registry.get_class(element.return_type))
