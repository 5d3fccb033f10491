"""Scoped capture of parse diagnostics.

Backtracking produces many partial failures. Every parse attempt therefore
runs inside a capture scope: entries logged while the scope is open are
buffered, and when the attempt ends its owner either flushes the buffer into
the enclosing scope (success) or keeps a single error from it (failure).
Entries reaching the root are sent to the ``syntaxmatch`` logger and, for
errors and warnings, recorded as diagnostics.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from syntaxmatch.errors import Diagnostic, Severity

logger = logging.getLogger("syntaxmatch")

_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.NOTE: logging.INFO,
}


@dataclass(frozen=True)
class LogEntry:
    severity: Severity
    message: str
    code: str


class SubLog:
    """Buffer for the entries of one capture scope."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def has_errors(self) -> bool:
        return any(e.severity == Severity.ERROR for e in self.entries)

    def last_error(self) -> LogEntry | None:
        for entry in reversed(self.entries):
            if entry.severity == Severity.ERROR:
                return entry
        return None


class ParseLog:
    """A stack of capture scopes with a root that emits diagnostics."""

    def __init__(self) -> None:
        self._stack: list[SubLog] = []
        self.diagnostics: list[Diagnostic] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    # ── Logging ─────────────────────────────────────────────────

    def log(self, entry: LogEntry) -> None:
        if self._stack:
            self._stack[-1].entries.append(entry)
        else:
            self._emit(entry)

    def error(self, message: str, code: str = "E103") -> None:
        self.log(LogEntry(Severity.ERROR, message, code))

    def warning(self, message: str, code: str = "W200") -> None:
        self.log(LogEntry(Severity.WARNING, message, code))

    def note(self, message: str, code: str = "N300") -> None:
        self.log(LogEntry(Severity.NOTE, message, code))

    def _emit(self, entry: LogEntry) -> None:
        logger.log(_LEVELS[entry.severity], "[%s] %s", entry.code, entry.message)
        if entry.severity != Severity.NOTE:
            self.diagnostics.append(Diagnostic(
                severity=entry.severity,
                code=entry.code,
                message=entry.message,
            ))

    # ── Scopes ──────────────────────────────────────────────────

    @contextmanager
    def capture(self) -> Iterator[SubLog]:
        """Open a capture scope; it is always closed when the block exits.

        The buffered entries are dropped unless the caller passes the
        returned SubLog to print_log or print_errors afterwards.
        """
        sub = SubLog()
        self._stack.append(sub)
        try:
            yield sub
        finally:
            popped = self._stack.pop()
            if popped is not sub:
                raise RuntimeError("capture scopes closed out of order")

    def print_log(self, sub: SubLog) -> None:
        """Forward every entry of a closed scope to the enclosing one."""
        for entry in sub.entries:
            self.log(entry)

    def print_errors(self, sub: SubLog, default_error: str | None = None) -> None:
        """Forward only the last error of a closed scope.

        Falls back to *default_error* when the scope holds no error.
        """
        last = sub.last_error()
        if last is not None:
            self.log(last)
        elif default_error is not None:
            self.error(default_error, code="E100")

    def take_diagnostics(self) -> list[Diagnostic]:
        """Return and clear the diagnostics emitted so far."""
        diags, self.diagnostics = self.diagnostics, []
        return diags
