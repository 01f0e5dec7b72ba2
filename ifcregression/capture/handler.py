"""Scoped structured log capture.

Each source file gets its own :class:`LogCapture`, attached for the duration
of a ``with capture_logs():`` block and detached on every exit path, so
events from one conversion never leak into the counts of the next.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from pydantic import BaseModel

NO_METHOD = "<no method>"


class LogEvent(BaseModel):
    """A single captured log record."""

    timestamp: datetime
    level: str
    category: str
    method: str = NO_METHOD
    message: str = ""

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> "LogEvent":
        message = record.getMessage()
        if record.exc_info and record.exc_info[1] is not None:
            message = f"{message} ({record.exc_info[1]})"
        return cls(
            timestamp=datetime.fromtimestamp(record.created),
            level=record.levelname,
            category=record.name,
            method=record.funcName or NO_METHOD,
            message=message,
        )


class LogCapture(logging.Handler):
    """Logging handler that keeps every record it sees as a LogEvent."""

    def __init__(self, level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self._events: list[LogEvent] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._events.append(LogEvent.from_record(record))
        except Exception:
            self.handleError(record)

    def add(self, level: int, category: str, message: str) -> None:
        """Record an event that did not come through the logging module."""
        self._events.append(
            LogEvent(
                timestamp=datetime.now(),
                level=logging.getLevelName(level),
                category=category,
                message=message,
            )
        )

    @property
    def events(self) -> list[LogEvent]:
        return list(self._events)

    def count(self, level: int) -> int:
        """Number of events logged at exactly *level*."""
        name = logging.getLevelName(level)
        return sum(1 for e in self._events if e.level == name)

    @property
    def error_count(self) -> int:
        # CRITICAL is reported alongside errors
        return self.count(logging.ERROR) + self.count(logging.CRITICAL)

    @property
    def warning_count(self) -> int:
        return self.count(logging.WARNING)


@contextmanager
def capture_logs(
    level: int = logging.DEBUG,
    logger: logging.Logger | None = None,
) -> Iterator[LogCapture]:
    """Attach a fresh LogCapture to *logger* (root by default) for the block.

    The target logger's level is lowered to *level* while the block runs so
    debug-level events reach the capture; both are restored on exit.
    """
    target = logger or logging.getLogger()
    capture = LogCapture(level)
    previous_level = target.level
    target.addHandler(capture)
    if target.getEffectiveLevel() > level:
        target.setLevel(level)
    try:
        yield capture
    finally:
        target.removeHandler(capture)
        target.setLevel(previous_level)
        capture.close()
