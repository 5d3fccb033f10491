"""Diagnostics, error ranking and exceptions for the syntax parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import TYPE_CHECKING

from syntaxmatch.source import SourceFile

if TYPE_CHECKING:
    from syntaxmatch.source import Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics as Rust-style text blocks, optionally colored.

    Each label shows its location, the script line it points at and a caret
    underline. Script files are read once and cached per renderer.
    """

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, SourceFile | None] = {}

    def _paint(self, text: str, style: str) -> str:
        return f"{style}{text}{_RESET}" if self.color else text

    def _script_line(self, filename: str, line_num: int) -> str | None:
        if filename not in self._sources:
            path = Path(filename)
            try:
                self._sources[filename] = SourceFile(path) if path.is_file() else None
            except OSError:
                self._sources[filename] = None
        source = self._sources[filename]
        if source is None or not 1 <= line_num <= len(source.lines):
            return None
        return source.line_at(line_num)

    def _bar(self) -> str:
        return "  " + self._paint("   |", _BLUE)

    def _label_lines(self, label: DiagnosticLabel, color: str) -> list[str]:
        span = label.span
        out = ["  " + self._paint("-->", _BLUE) + f" {span}", self._bar()]
        script_line = self._script_line(span.file, span.start_line)
        if script_line is not None:
            out.append("  " + self._paint(f"{span.start_line:>4} |", _BLUE) + f" {script_line}")
            width = max(1, span.end_col - span.start_col + 1)
            out.append(
                self._bar() + " " + " " * (span.start_col - 1) + self._paint("^" * width, color)
            )
        if label.message:
            out.append(self._bar() + "   " + self._paint(label.message, color))
        return out

    def render(self, diag: Diagnostic) -> str:
        color = _COLORS[diag.severity]
        lines = [
            self._paint(f"{diag.severity.value}[{diag.code}]", color)
            + self._paint(f": {diag.message}", _BOLD)
        ]
        for label in diag.labels:
            lines.extend(self._label_lines(label, color))
        lines.extend("  " + self._paint("=", _BLUE) + f" note: {note}" for note in diag.notes)
        return "\n".join(lines)


# ── Error quality ranking ───────────────────────────────────────


class ErrorQuality(IntEnum):
    """How useful a failure message is; higher values win."""

    NONE = 0
    NOT_AN_EXPRESSION = 1
    EXPRESSION_OF_WRONG_TYPE = 2
    SEMANTIC_ERROR = 3


# Diagnostic codes per quality
QUALITY_CODES: dict[ErrorQuality, str] = {
    ErrorQuality.NONE: "E100",
    ErrorQuality.NOT_AN_EXPRESSION: "E101",
    ErrorQuality.EXPRESSION_OF_WRONG_TYPE: "E102",
    ErrorQuality.SEMANTIC_ERROR: "E103",
}


class BestError:
    """Keeps the single highest-quality error seen during one parse attempt.

    Ties keep the first message recorded.
    """

    def __init__(self) -> None:
        self.message: str | None = None
        self.quality = ErrorQuality.NONE

    def set(self, quality: ErrorQuality, message: str) -> None:
        if quality > self.quality:
            self.message = message
            self.quality = quality

    def merge(self, other: BestError) -> None:
        """Promote *other*'s error if it outranks ours."""
        if other.message is not None:
            self.set(other.quality, other.message)

    @property
    def code(self) -> str:
        return QUALITY_CODES[self.quality]

    def __bool__(self) -> bool:
        return self.message is not None

    def __repr__(self) -> str:
        return f"BestError({self.quality.name}, {self.message!r})"


# ── Exceptions ──────────────────────────────────────────────────


class SyntaxAPIError(Exception):
    """A syntax provider or type registration is misconfigured.

    Raised for programmer errors only, never for bad user input.
    """


class MalformedPatternError(SyntaxAPIError):
    """A pattern string violates the pattern grammar."""

    def __init__(self, pattern: str, message: str) -> None:
        self.pattern = pattern
        super().__init__(f'"{pattern}": {message}')


class ParseError(Exception):
    """Batch parse error carrying multiple diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")
