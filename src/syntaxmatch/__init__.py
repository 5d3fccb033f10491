"""syntaxmatch: a backtracking pattern-matching parser for script syntax."""

__version__ = "0.1.0"
