"""English singular/plural and article helpers used in patterns and messages."""

from __future__ import annotations

# (singular suffix, plural suffix), most specific first
_PLURAL_RULES: tuple[tuple[str, str], ...] = (
    ("ay", "ays"),
    ("ey", "eys"),
    ("oy", "oys"),
    ("uy", "uys"),
    ("y", "ies"),
    ("ch", "ches"),
    ("sh", "shes"),
    ("ss", "sses"),
    ("x", "xes"),
    ("man", "men"),
    ("", "s"),
)

_VOWELS = frozenset("aeiou")


def get_plural(word: str) -> tuple[str, bool]:
    """Split *word* into its singular form and whether it was plural.

    >>> get_plural("entities")
    ('entity', True)
    >>> get_plural("number")
    ('number', False)
    """
    lower = word.lower()
    for singular, plural in _PLURAL_RULES:
        if lower.endswith(plural):
            return word[: len(word) - len(plural)] + singular, True
        if singular and lower.endswith(singular):
            return word, False
    return word, False


def plural(word: str) -> str:
    """Return the plural form of a singular *word*."""
    lower = word.lower()
    for singular, suffix in _PLURAL_RULES:
        if singular and lower.endswith(singular):
            return word[: len(word) - len(singular)] + suffix
    return word + "s"


def a(word: str) -> str:
    """Prefix *word* with the matching indefinite article."""
    if word and word[0].lower() in _VOWELS:
        return f"an {word}"
    return f"a {word}"
