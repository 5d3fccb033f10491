"""syntaxmatch Language Server: a pygls-based LSP for script files.

Provides per-line parse diagnostics, hover over parsed lines, and
document symbols for triggers via stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from syntaxmatch import __version__
from syntaxmatch.config import Config, find_config, load_config
from syntaxmatch.errors import Diagnostic, Severity
from syntaxmatch.loader import build_registry
from syntaxmatch.registry import Registry
from syntaxmatch.script import ScriptReport, Statement, Trigger, analyze_script
from syntaxmatch.source import Span

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
    Severity.WARNING: lsp.DiagnosticSeverity.Warning,
    Severity.NOTE: lsp.DiagnosticSeverity.Information,
}


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def to_lsp_diagnostic(d: Diagnostic) -> lsp.Diagnostic:
    """Convert a syntaxmatch Diagnostic to an LSP Diagnostic."""
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if d.labels:
        span_range = span_to_range(d.labels[0].span)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="syntaxmatch",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


def describe(item: Trigger | Statement) -> str:
    """Markdown hover text for a parsed line."""
    if isinstance(item, Trigger):
        return f"**event** `{item.name}` ({type(item.event).__name__})"
    element = item.element
    return f"**{type(element).__name__}** `{element}`"


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: str = ""
    report: ScriptReport | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "syntaxmatch-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}
_config: Config | None = None
_registry: Registry | None = None


def _get_registry() -> Registry:
    global _config, _registry
    if _registry is None:
        try:
            _config = load_config(find_config(Path.cwd()))
        except FileNotFoundError:
            _config = Config()
        _registry = build_registry(_config)
    return _registry


def _analyze(uri: str, source: str, registry: Registry | None = None) -> DocumentState:
    """Analyze the script, cache results, return state."""
    registry = registry or _get_registry()
    options = _config.parser if _config is not None else None
    ds = DocumentState(source=source)
    try:
        ds.report = analyze_script(source, uri, registry, options=options)
        ds.diagnostics = [to_lsp_diagnostic(d) for d in ds.report.diagnostics]
    except Exception as e:
        ds.diagnostics = [lsp.Diagnostic(
            range=lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0)),
            severity=lsp.DiagnosticSeverity.Error, source="syntaxmatch",
            message=f"[internal] {type(e).__name__}: {e}",
        )]
    _state[uri] = ds
    return ds


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # full sync, the last change holds the whole text
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.report is None:
        return None
    item = ds.report.element_at(params.position.line + 1)
    if item is None:
        return None
    return lsp.Hover(
        contents=lsp.MarkupContent(kind=lsp.MarkupKind.Markdown, value=describe(item)),
        range=span_to_range(item.span),
    )


def trigger_symbol(trigger: Trigger) -> lsp.DocumentSymbol:
    """Convert a trigger and its statements to an LSP DocumentSymbol."""
    children = [
        lsp.DocumentSymbol(
            name=str(st.element),
            kind=lsp.SymbolKind.Function,
            range=span_to_range(st.span),
            selection_range=span_to_range(st.span),
        )
        for st in trigger.statements
    ]
    end = trigger.statements[-1].span if trigger.statements else trigger.span
    full = lsp.Range(
        start=span_to_range(trigger.span).start,
        end=span_to_range(end).end,
    )
    return lsp.DocumentSymbol(
        name=f"on {trigger.name}",
        kind=lsp.SymbolKind.Event,
        range=full,
        selection_range=span_to_range(trigger.span),
        children=children,
    )


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.report is None:
        return []
    return [trigger_symbol(t) for t in ds.report.triggers]


def main() -> None:
    """Start the syntaxmatch language server on stdio."""
    server.start_io()
