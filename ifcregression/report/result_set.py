"""ResultSet — an ordered collection of ResultRecords with CSV persistence."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from pydantic import ValidationError

from ifcregression.models.result import Outcome, ResultRecord
from ifcregression.report.schema import (
    REPORT_COLUMNS,
    UnsupportedReportFormat,
    detect_schema,
    sanitise,
)

logger = logging.getLogger(__name__)


def _split_line(line: str) -> list[str]:
    """Parse one physical report line into cells."""
    return next(csv.reader([line.rstrip("\r\n")]), [])


@dataclass(frozen=True)
class Transition:
    """A file whose pass/fail state changed since the baseline run."""

    file_name: str
    previous: Outcome
    current: Outcome

    @property
    def is_regression(self) -> bool:
        return self.current is Outcome.FAILED

    def to_dict(self) -> dict[str, str]:
        return {
            "file_name": self.file_name,
            "previous": self.previous.value,
            "current": self.current.value,
        }


class ResultSet:
    """Append-only, insertion-ordered set of results for one run.

    File names need not be unique; lookups use the first match.
    """

    def __init__(self, records: list[ResultRecord] | None = None) -> None:
        self._records: list[ResultRecord] = list(records or [])

    def add(self, record: ResultRecord) -> None:
        self._records.append(record)

    def __iter__(self) -> Iterator[ResultRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> ResultRecord:
        return self._records[index]

    @property
    def records(self) -> list[ResultRecord]:
        return list(self._records)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def find(self, file_name: str) -> ResultRecord | None:
        """Return the first record stored under *file_name*, if any."""
        key = sanitise(file_name)
        for record in self._records:
            if record.comparison_key == key:
                return record
        return None

    def compare(self, record: ResultRecord) -> Outcome:
        """Return this set's outcome for the file *record* describes."""
        match = self.find(record.file_name)
        if match is None:
            return Outcome.NO_TEST
        return match.outcome

    def transitions(self) -> list[Transition]:
        """List records whose outcome differs from their last run."""
        changed: list[Transition] = []
        for record in self._records:
            previous = record.last_run
            if previous is Outcome.NO_TEST or previous is record.outcome:
                continue
            changed.append(Transition(record.file_name, previous, record.outcome))
        return changed

    def summary(self) -> dict[str, int]:
        """Return pass/fail/transition counts."""
        changed = self.transitions()
        failed = sum(1 for r in self._records if r.failed)
        return {
            "total": len(self._records),
            "passed": len(self._records) - failed,
            "failed": failed,
            "new_failures": sum(1 for t in changed if t.is_regression),
            "new_passes": sum(1 for t in changed if not t.is_regression),
            "no_prior_data": sum(1 for r in self._records if r.last_run is Outcome.NO_TEST),
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load_from_file(cls, path: str | Path) -> "ResultSet":
        """Load a report written by :meth:`write_to_file`.

        Each physical line is parsed on its own, so a stray quote or an
        oversized field only costs that line. Undecodable bytes are replaced.
        An unrecognised header yields an empty set; unreadable rows are
        skipped. Only I/O errors opening the file propagate.
        """
        path = Path(path)
        result = cls()
        with path.open("r", encoding="utf-8", errors="replace", newline="") as fh:
            first = fh.readline()
            if not first.strip():
                logger.warning("%s: empty report file", path)
                return result
            try:
                version = detect_schema(_split_line(first))
            except (UnsupportedReportFormat, csv.Error) as exc:
                logger.warning("%s: %s", path, exc)
                return result
            logger.debug("%s: report schema version %d", path, version)

            for row_number, line in enumerate(fh, start=1):
                if not line.strip():
                    continue
                try:
                    cells = _split_line(line)
                    if not any(c.strip() for c in cells):
                        continue
                    result.add(ResultRecord.from_row(cells))
                except (ValueError, ValidationError, csv.Error) as exc:
                    logger.warning("%s: cannot read row %d, error: %s", path, row_number, exc)

        logger.info("Loaded %d results from %s", len(result), path)
        return result

    def write_to_file(self, path: str | Path) -> Path:
        """Write the header and one row per record, in set order."""
        path = Path(path)
        with path.open("w", encoding="utf-8", newline="") as fh:
            writer = csv.writer(fh, lineterminator="\n")
            writer.writerow(REPORT_COLUMNS)
            for record in self._records:
                writer.writerow(record.to_row())
            fh.flush()
        return path
