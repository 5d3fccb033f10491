"""Analysis of whole script files.

A script is a list of triggers::

    on death:
        force the player to respawn
        message "welcome back"

An unindented line ending in ``:`` is a trigger header and is parsed as an
event. The indented lines below it are statements. Every line that fails
to parse contributes exactly one diagnostic, labelled with the line's span.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from syntaxmatch.config import ParserOptions
from syntaxmatch.errors import Diagnostic, DiagnosticLabel, ParseError, Severity
from syntaxmatch.log import ParseLog
from syntaxmatch.parser import Parser
from syntaxmatch.registry import EventInfo, Registry
from syntaxmatch.source import SourceFile, Span, line_span
from syntaxmatch.syntax import Event, SyntaxElement

logger = logging.getLogger(__name__)


@dataclass
class Statement:
    element: SyntaxElement
    span: Span


@dataclass
class Trigger:
    info: EventInfo
    event: Event
    span: Span
    statements: list[Statement] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.info.event_name


@dataclass
class ScriptReport:
    filename: str
    triggers: list[Trigger] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(d.severity == Severity.ERROR for d in self.diagnostics)

    def element_at(self, line_num: int) -> Trigger | Statement | None:
        """The trigger or statement parsed from a 1-indexed line."""
        for trigger in self.triggers:
            if trigger.span.start_line == line_num:
                return trigger
            for statement in trigger.statements:
                if statement.span.start_line == line_num:
                    return statement
        return None

    def raise_for_errors(self) -> None:
        """Raise ParseError carrying every error diagnostic, if there are any."""
        errors = [d for d in self.diagnostics if d.severity == Severity.ERROR]
        if errors:
            raise ParseError(errors)


def _label(diagnostics: list[Diagnostic], span: Span) -> list[Diagnostic]:
    for diag in diagnostics:
        diag.labels.append(DiagnosticLabel(span=span, message=""))
    return diagnostics


def analyze_script(
    source: str,
    filename: str,
    registry: Registry,
    *,
    options: ParserOptions | None = None,
) -> ScriptReport:
    """Parse every trigger and statement of a script."""
    options = options or ParserOptions()
    log = ParseLog()
    parser = Parser(registry, log=log, options=options)
    report = ScriptReport(filename)
    current: Trigger | None = None

    for line_num, line in enumerate(source.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        span = line_span(filename, line_num, line)

        if line[0] not in " \t":
            current = None
            if not stripped.endswith(":"):
                log.error(f"'{stripped}' is not a trigger header", code="E100")
            else:
                header = stripped[:-1].strip()
                if header.lower().startswith("on "):
                    header = header[3:].strip()
                found = parser.parse_event(header, f"can't understand this event: '{header}'")
                if found is not None:
                    current = Trigger(found[0], found[1], span)
                    report.triggers.append(current)
        elif current is None:
            log.error("statements must belong to a trigger", code="E100")
        else:
            element = parser.parse_statement(stripped, options.default_error)
            if element is not None:
                current.statements.append(Statement(element, span))

        report.diagnostics.extend(_label(log.take_diagnostics(), span))

    logger.debug(
        "%s: %d triggers, %d diagnostics",
        filename, len(report.triggers), len(report.diagnostics),
    )
    return report


def analyze_file(path: Path, registry: Registry, *, options: ParserOptions | None = None) -> ScriptReport:
    source = SourceFile(path)
    return analyze_script(source.content, str(path), registry, options=options)
