"""Pygments lexers for syntax patterns and scripts."""

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
)


class PatternLexer(RegexLexer):
    """Lexer for the pattern mini-language, e.g. ``force %players% to respawn``."""

    name = "Syntax Pattern"
    aliases = ["syntaxpattern"]
    filenames = []
    mimetypes = ["text/x-syntax-pattern"]

    tokens = {
        "root": [
            # Escapes
            (r"\\.", String.Escape),
            # Typed placeholders: %-types@-1%
            (
                r"(%)(-?)([^%@]+)(@-?\d+)?(%)",
                bygroups(Punctuation, Operator, Name.Class, Number.Integer, Punctuation),
            ),
            # Inline regex
            (r"<[^>]*>", String.Regex),
            # Optional groups and alternation
            (r"[\[\]]", Keyword),
            (r"[()]", Punctuation),
            (r"\|", Operator),
            (r"\s+", Text),
            (r"[^\\%<\[\]()|\s]+", Text),
        ],
    }


class ScriptLexer(RegexLexer):
    """Lexer for scripts made of trigger headers and statements."""

    name = "Syntax Script"
    aliases = ["syntaxscript"]
    filenames = ["*.sk"]
    mimetypes = ["text/x-syntax-script"]

    tokens = {
        "root": [
            (r"\s+", Text),
            # Comments
            (r"#.*$", Comment.Single),
            # Trigger headers (unindented, end in a colon)
            (r"^(on )?([^\s#][^:\n]*)(:)$", bygroups(Keyword.Declaration, Name.Function, Punctuation)),
            # Variables
            (r"\{[^}\n]*\}", Name.Variable),
            # Strings, "" is an escaped quote
            (r'"', String, "string"),
            # Numbers
            (r"[0-9]+\.[0-9]+", Number.Float),
            (r"[0-9]+", Number.Integer),
            (r"\b(true|false|yes|no|on|off)\b", Keyword.Constant),
            (r"\b(is|are|isn't|aren't|not|of|the|to|and|or)\b", Keyword),
            (r"[a-zA-Z_][\w'-]*", Name),
            (r"[,:]", Punctuation),
            (r".", Text),
        ],
        "string": [
            (r'""', String.Escape),
            (r'[^"]+', String),
            (r'"', String, "#pop"),
        ],
    }
