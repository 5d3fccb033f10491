"""Tests for scoped diagnostic capture."""

from __future__ import annotations

import logging

import pytest

from syntaxmatch.errors import Severity
from syntaxmatch.log import ParseLog, SubLog


class TestRoot:
    def test_error_becomes_diagnostic(self):
        log = ParseLog()
        log.error("broken")
        [diag] = log.take_diagnostics()
        assert diag.severity == Severity.ERROR
        assert diag.code == "E103"
        assert diag.message == "broken"

    def test_warning_becomes_diagnostic(self):
        log = ParseLog()
        log.warning("careful")
        assert [(d.severity, d.code) for d in log.diagnostics] == [(Severity.WARNING, "W200")]

    def test_note_is_only_logged(self, caplog):
        log = ParseLog()
        with caplog.at_level(logging.INFO, logger="syntaxmatch"):
            log.note("fyi")
        assert log.diagnostics == []
        assert "[N300] fyi" in caplog.text

    def test_errors_reach_the_logger(self, caplog):
        log = ParseLog()
        with caplog.at_level(logging.WARNING, logger="syntaxmatch"):
            log.error("broken", code="E101")
        assert caplog.records[0].levelno == logging.ERROR
        assert caplog.records[0].getMessage() == "[E101] broken"

    def test_take_clears(self):
        log = ParseLog()
        log.error("a")
        assert len(log.take_diagnostics()) == 1
        assert log.take_diagnostics() == []


class TestCapture:
    def test_captured_entries_are_dropped_by_default(self):
        log = ParseLog()
        with log.capture() as sub:
            log.error("hidden")
        assert sub.has_errors()
        assert log.diagnostics == []

    def test_print_log_forwards_everything(self):
        log = ParseLog()
        with log.capture() as sub:
            log.warning("w")
            log.error("e")
        log.print_log(sub)
        assert [d.message for d in log.diagnostics] == ["w", "e"]

    def test_print_errors_forwards_last_error(self):
        log = ParseLog()
        with log.capture() as sub:
            log.error("first")
            log.warning("w")
            log.error("second")
            log.warning("w2")
        log.print_errors(sub)
        assert [d.message for d in log.diagnostics] == ["second"]

    def test_print_errors_default(self):
        log = ParseLog()
        with log.capture() as sub:
            log.warning("only a warning")
        log.print_errors(sub, "nothing worked")
        [diag] = log.diagnostics
        assert diag.code == "E100"
        assert diag.message == "nothing worked"

    def test_print_errors_without_default(self):
        log = ParseLog()
        with log.capture() as sub:
            pass
        log.print_errors(sub)
        assert log.diagnostics == []

    def test_nested_scopes(self):
        log = ParseLog()
        with log.capture() as outer:
            with log.capture() as inner:
                log.error("deep")
            assert log.depth == 1
            log.print_log(inner)
        assert outer.last_error().message == "deep"
        assert log.depth == 0
        assert log.diagnostics == []

    def test_scope_closes_on_exception(self):
        log = ParseLog()
        with pytest.raises(ValueError):
            with log.capture():
                raise ValueError("boom")
        assert log.depth == 0

    def test_out_of_order_close(self):
        log = ParseLog()
        outer = log.capture()
        outer.__enter__()
        log._stack.append(SubLog())
        with pytest.raises(RuntimeError, match="out of order"):
            outer.__exit__(None, None, None)
