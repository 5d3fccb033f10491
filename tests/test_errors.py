"""Tests for error ranking, exceptions and diagnostic rendering."""

from __future__ import annotations

from syntaxmatch.errors import (
    BestError,
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    ErrorQuality,
    MalformedPatternError,
    ParseError,
    Severity,
    SyntaxAPIError,
)
from syntaxmatch.source import SourceFile, Span, line_span


class TestBestError:
    def test_starts_empty(self):
        best = BestError()
        assert not best
        assert best.quality is ErrorQuality.NONE
        assert best.code == "E100"

    def test_higher_quality_wins(self):
        best = BestError()
        best.set(ErrorQuality.NOT_AN_EXPRESSION, "low")
        best.set(ErrorQuality.SEMANTIC_ERROR, "high")
        best.set(ErrorQuality.EXPRESSION_OF_WRONG_TYPE, "middle")
        assert best.message == "high"
        assert best.code == "E103"

    def test_ties_keep_first(self):
        best = BestError()
        best.set(ErrorQuality.EXPRESSION_OF_WRONG_TYPE, "first")
        best.set(ErrorQuality.EXPRESSION_OF_WRONG_TYPE, "second")
        assert best.message == "first"

    def test_merge(self):
        best = BestError()
        best.set(ErrorQuality.NOT_AN_EXPRESSION, "mine")
        other = BestError()
        other.set(ErrorQuality.EXPRESSION_OF_WRONG_TYPE, "theirs")
        best.merge(other)
        assert best.message == "theirs"
        best.merge(BestError())
        assert best.message == "theirs"

    def test_repr(self):
        best = BestError()
        best.set(ErrorQuality.SEMANTIC_ERROR, "x")
        assert repr(best) == "BestError(SEMANTIC_ERROR, 'x')"


class TestExceptions:
    def test_malformed_pattern_is_api_error(self):
        err = MalformedPatternError("a|b", "'|' outside of a (...) group")
        assert isinstance(err, SyntaxAPIError)
        assert err.pattern == "a|b"
        assert str(err) == "\"a|b\": '|' outside of a (...) group"

    def test_parse_error_collects_messages(self):
        diags = [
            Diagnostic(Severity.ERROR, "E100", "one"),
            Diagnostic(Severity.ERROR, "E101", "two"),
        ]
        err = ParseError(diags)
        assert err.diagnostics == diags
        assert str(err) == "2 error(s): one; two"


class TestSource:
    def test_line_span(self):
        assert line_span("f.sk", 3, "    send x") == Span("f.sk", 3, 5, 3, 10)

    def test_blank_line_span(self):
        assert line_span("f.sk", 1, "   ") == Span("f.sk", 1, 1, 1, 1)

    def test_span_str(self):
        assert str(Span("f.sk", 2, 4, 2, 9)) == "f.sk:2:4"

    def test_source_file(self, tmp_path):
        path = tmp_path / "a.sk"
        path.write_text("on death:\n    force player to respawn\n")
        src = SourceFile(path)
        assert src.line_at(1) == "on death:"
        assert src.line_at(9) == ""
        assert line_span(str(path), 2, src.line_at(2)) == Span(str(path), 2, 5, 2, 27)


class TestDiagnosticRenderer:
    def test_header_without_color(self):
        diag = Diagnostic(Severity.ERROR, "E101", "'five' is not a number")
        output = DiagnosticRenderer(color=False).render(diag)
        assert output == "error[E101]: 'five' is not a number"

    def test_header_with_color(self):
        diag = Diagnostic(Severity.WARNING, "W200", "careful")
        output = DiagnosticRenderer(color=True).render(diag)
        assert "\033[1;33m" in output
        assert "careful" in output

    def test_label_with_source_line(self, tmp_path):
        path = tmp_path / "a.sk"
        path.write_text("on death:\n    dance wildly\n")
        diag = Diagnostic(
            Severity.ERROR, "E100", "can't understand this line",
            labels=[DiagnosticLabel(line_span(str(path), 2, "    dance wildly"), "here")],
            notes=["check the docs"],
        )
        lines = DiagnosticRenderer(color=False).render(diag).splitlines()
        assert lines[1] == f"  --> {path}:2:5"
        assert lines[3] == "     2 |     dance wildly"
        assert lines[4] == "     |     ^^^^^^^^^^^^"
        assert lines[5] == "     |   here"
        assert lines[6] == "  = note: check the docs"

    def test_line_past_end_skips_source(self, tmp_path):
        path = tmp_path / "a.sk"
        path.write_text("on death:\n")
        diag = Diagnostic(
            Severity.ERROR, "E100", "bad",
            labels=[DiagnosticLabel(Span(str(path), 9, 1, 9, 3), "")],
        )
        lines = DiagnosticRenderer(color=False).render(diag).splitlines()
        assert lines == ["error[E100]: bad", f"  --> {path}:9:1", "     |"]

    def test_missing_file_skips_source(self):
        diag = Diagnostic(
            Severity.ERROR, "E100", "bad",
            labels=[DiagnosticLabel(Span("missing.sk", 1, 1, 1, 3), "")],
        )
        lines = DiagnosticRenderer(color=False).render(diag).splitlines()
        assert lines == ["error[E100]: bad", "  --> missing.sk:1:1", "     |"]
