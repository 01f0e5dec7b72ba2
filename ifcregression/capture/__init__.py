"""Structured log capture scoped to a single conversion."""

from ifcregression.capture.handler import LogCapture, LogEvent, capture_logs
from ifcregression.capture.logfile import format_event, sanitise_message, write_log_file

__all__ = [
    "LogCapture",
    "LogEvent",
    "capture_logs",
    "format_event",
    "sanitise_message",
    "write_log_file",
]
