"""Per-file conversion logs."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from ifcregression.capture.handler import LogEvent

logger = logging.getLogger(__name__)

LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def sanitise_message(message: str, source_file: str | Path) -> str:
    """Strip the source directory and the working directory from *message*."""
    model_dir = str(Path(source_file).parent)
    cwd = os.getcwd()
    for path in (model_dir, cwd):
        if path and path not in (".", os.sep):
            message = message.replace(path, "")
    return message


def format_event(event: LogEvent, source_file: str | Path) -> str:
    """Render one log line: ``<time> : <LEVEL> <category>.<method> - <message>``."""
    return "{} : {:<5} {}.{} - {}".format(
        event.timestamp.strftime(LOG_TIMESTAMP_FORMAT),
        event.level,
        event.category,
        event.method,
        sanitise_message(event.message, source_file),
    )


def write_log_file(
    log_path: str | Path,
    events: Iterable[LogEvent],
    source_file: str | Path,
) -> Path | None:
    """Write *events* to *log_path*; returns None if the file could not be written."""
    log_path = Path(log_path)
    try:
        with log_path.open("w", encoding="utf-8") as fh:
            for event in events:
                fh.write(format_event(event, source_file) + "\n")
    except OSError:
        logger.error("Failed to create log file for %s", source_file, exc_info=True)
        return None
    return log_path
