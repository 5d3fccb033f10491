"""Source file representation and span tracking for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Span:
    """A range within a source file."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


def line_span(file: str, line_num: int, line: str) -> Span:
    """Span covering the non-whitespace text of a 1-indexed line."""
    stripped = line.strip()
    if not stripped:
        return Span(file, line_num, 1, line_num, 1)
    start = len(line) - len(line.lstrip()) + 1
    return Span(file, line_num, start, line_num, start + len(stripped) - 1)


class SourceFile:
    """A loaded script file with line access for diagnostics."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.content = path.read_text()
        self.lines = self.content.splitlines()

    def line_at(self, n: int) -> str:
        """Return the 1-indexed line, or empty string if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""
