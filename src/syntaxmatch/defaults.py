"""Binds default expressions into placeholders the input left out."""

from __future__ import annotations

from typing import TYPE_CHECKING

from syntaxmatch.errors import SyntaxAPIError
from syntaxmatch.expressions import Expression

if TYPE_CHECKING:
    from syntaxmatch.patterns import PlaceholderInfo
    from syntaxmatch.registry import Registry


def bind_default(registry: Registry, placeholder: PlaceholderInfo) -> Expression:
    """Return the default expression for *placeholder*'s type.

    Raises SyntaxAPIError when the type has no usable default, which means
    the pattern declaring the placeholder is wrong.
    """
    name = placeholder.name
    default = registry.get_default_expression(name)
    if default is None:
        raise SyntaxAPIError(
            f"The class '{name}' does not provide a default expression. "
            f"Either allow null (with %-{name}%) or make it mandatory"
        )
    if not placeholder.is_plural and not default.is_single():
        raise SyntaxAPIError(
            f"The default expression of '{name}' is not a single-element expression. "
            "Change your pattern to allow multiple elements or make the expression mandatory"
        )
    if placeholder.time != 0 and not default.set_time(placeholder.time):
        raise SyntaxAPIError(
            f"The default expression of '{name}' does not have distinct time states. "
            f"Either allow null (with %-{name}%) or make it mandatory"
        )
    default.init()
    return Expression.computed(default, registry.get_class(name))
