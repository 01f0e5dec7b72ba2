"""Tests for scoped log capture and per-file log files."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

import pytest

from ifcregression.capture import (
    LogCapture,
    LogEvent,
    capture_logs,
    format_event,
    sanitise_message,
    write_log_file,
)


def _emit_some(logger_name: str = "ifcregression.tests.kernel") -> None:
    log = logging.getLogger(logger_name)
    log.debug("parsing header")
    log.warning("unit not set")
    log.warning("duplicate GlobalId")
    log.error("entity #42 invalid")
    log.critical("kernel fault")


# ── LogCapture ───────────────────────────────────────────────────────────────

class TestLogCapture:

    def test_counts_by_level(self):
        with capture_logs() as capture:
            _emit_some()
        assert capture.warning_count == 2
        assert capture.error_count == 2
        assert capture.count(logging.DEBUG) == 1
        assert len(capture.events) == 5

    def test_event_fields(self):
        with capture_logs() as capture:
            logging.getLogger("ifcregression.tests.kernel").warning("value %d", 7)
        event = capture.events[0]
        assert event.level == "WARNING"
        assert event.category == "ifcregression.tests.kernel"
        assert event.method == "test_event_fields"
        assert event.message == "value 7"

    def test_exception_text_appended(self):
        with capture_logs() as capture:
            try:
                raise ValueError("bad token")
            except ValueError:
                logging.getLogger("x").error("parse failed", exc_info=True)
        assert capture.events[0].message == "parse failed (bad token)"

    def test_handler_detached_after_scope(self):
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        with capture_logs() as capture:
            assert capture in root.handlers
        assert root.handlers == before
        assert root.level == level

        logging.getLogger("ifcregression.tests.kernel").error("after the scope")
        assert capture.error_count == 0

    def test_handler_detached_on_exception(self):
        root = logging.getLogger()
        before = list(root.handlers)
        with pytest.raises(RuntimeError):
            with capture_logs() as capture:
                logging.getLogger("x").error("boom")
                raise RuntimeError("conversion crashed")
        assert root.handlers == before
        assert capture.error_count == 1

    def test_scopes_do_not_share_events(self):
        with capture_logs() as first:
            _emit_some()
        with capture_logs() as second:
            logging.getLogger("x").warning("only one")
        assert first.warning_count == 2
        assert second.warning_count == 1
        assert second.error_count == 0

    def test_manual_add(self):
        capture = LogCapture()
        capture.add(logging.WARNING, "kernel", "from a foreign log")
        assert capture.warning_count == 1
        assert capture.events[0].method == "<no method>"

    def test_capture_specific_logger(self):
        target = logging.getLogger("ifcregression.tests.only")
        with capture_logs(logger=target) as capture:
            target.warning("seen")
            logging.getLogger("elsewhere").warning("not seen")
        assert capture.warning_count == 1


# ── Per-file log ─────────────────────────────────────────────────────────────

class TestLogFile:

    def test_sanitise_strips_model_dir_and_cwd(self, tmp_path: Path):
        source = tmp_path / "models" / "house.ifc"
        message = f"Cannot open {source.parent}/texture.png from {os.getcwd()}/cfg"
        assert sanitise_message(message, source) == "Cannot open /texture.png from /cfg"

    def test_format_event(self, tmp_path: Path):
        event = LogEvent(
            timestamp=datetime(2024, 3, 5, 14, 7, 9),
            level="ERROR",
            category="ifcregression.conversion.ifc",
            method="generate_geometry",
            message=f"failed in {tmp_path}",
        )
        line = format_event(event, tmp_path / "a.ifc")
        assert line == (
            "2024-03-05 14:07:09 : ERROR ifcregression.conversion.ifc.generate_geometry - failed in "
        )

    def test_short_level_is_padded(self, tmp_path: Path):
        event = LogEvent(timestamp=datetime(2024, 1, 1), level="INFO", category="c", message="m")
        assert format_event(event, tmp_path / "a.ifc") == "2024-01-01 00:00:00 : INFO  c.<no method> - m"

    def test_write_log_file(self, tmp_path: Path):
        source = tmp_path / "a.ifc"
        with capture_logs() as capture:
            _emit_some()
        log_path = write_log_file(tmp_path / "a.ifc.log", capture.events, source)
        assert log_path is not None
        lines = log_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 5
        assert "WARNING ifcregression.tests.kernel._emit_some - unit not set" in lines[1]

    def test_write_failure_returns_none(self, tmp_path: Path):
        target = tmp_path / "missing" / "a.ifc.log"
        assert write_log_file(target, [], tmp_path / "a.ifc") is None
