"""BatchProcessor — run one regression pass over a directory of IFC files.

For every source file under the root the processor removes stale artifacts,
converts the file inside its own log-capture scope, builds a ResultRecord,
compares it against the previous run's report, and finally writes a new
timestamped report which becomes the next run's baseline.

Files are processed strictly one after another. A fault while converting
one file is recorded on that file's record and never stops the batch; only
a failure to write the final report propagates.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from ifcregression.batch.discovery import (
    derived_path,
    file_size,
    find_baseline,
    find_sources,
    remove_artifacts,
)
from ifcregression.capture import capture_logs, write_log_file
from ifcregression.config import (
    CONVERTED_SUFFIX,
    LOG_SUFFIX,
    REPORT_TIMESTAMP_FORMAT,
    SCENE_SUFFIX,
    RegressionSettings,
)
from ifcregression.conversion.base import ModelConverter
from ifcregression.models.result import Outcome, ResultRecord
from ifcregression.report.result_set import ResultSet, Transition

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """What one call to :meth:`BatchProcessor.run` produced."""

    results: ResultSet
    report_path: Path
    baseline: ResultSet | None = None
    baseline_path: Path | None = None

    @property
    def transitions(self) -> list[Transition]:
        return self.results.transitions()

    @property
    def regressions(self) -> list[Transition]:
        return [t for t in self.transitions if t.is_regression]

    def summary(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.results.summary())
        data["report_path"] = str(self.report_path)
        data["baseline_path"] = str(self.baseline_path) if self.baseline_path else None
        return data


def _elapsed_ms(start: float, end: float) -> int:
    return max(0, int(round((end - start) * 1000)))


def comparison_key(source: Path, root: Path) -> str:
    """Stable name for *source* across runs: its POSIX path relative to *root*."""
    try:
        return source.relative_to(root).as_posix()
    except ValueError:
        return source.as_posix()


class BatchProcessor:
    """Drive a full regression pass and produce one report.

    Parameters
    ----------
    converter:
        The conversion collaborator used to open each source file.
    settings:
        Run settings; defaults are used when omitted.
    clock:
        Monotonic seconds source for durations.
    now:
        Wall-clock source for the report timestamp.
    """

    def __init__(
        self,
        converter: ModelConverter,
        settings: RegressionSettings | None = None,
        clock: Callable[[], float] = time.perf_counter,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.converter = converter
        self.settings = settings or RegressionSettings()
        self._clock = clock
        self._now = now

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, root: str | Path, caching: bool | None = None) -> RunReport:
        """Process every source file under *root* and write the report.

        Parameters
        ----------
        root:
            Directory scanned for source files; the report is written here.
        caching:
            Persist the converted model next to each source. Falls back to
            the settings value when ``None``.
        """
        root = Path(root).resolve()
        if not root.is_dir():
            raise NotADirectoryError(f"Test file root not found: {root}")
        if caching is None:
            caching = self.settings.caching

        baseline_path = find_baseline(root, self.settings.report_prefix)
        baseline = self.load_baseline(baseline_path) if baseline_path else None

        sources = find_sources(root, self.settings.extensions, self.settings.recursive)
        logger.info("Found %d source files under %s", len(sources), root)

        results = ResultSet()
        for source in sources:
            logger.info("Processing %s", source)
            record = self.process_file(source, root, baseline, caching)
            results.add(record)
            self._report_record(source, record)

        report_path = root / (
            f"{self.settings.report_prefix}_{self._now().strftime(REPORT_TIMESTAMP_FORMAT)}.csv"
        )
        logger.info("Creating report %s", report_path)
        results.write_to_file(report_path)

        report = RunReport(
            results=results,
            report_path=report_path,
            baseline=baseline,
            baseline_path=baseline_path,
        )
        summary = results.summary()
        logger.info(
            "Finished: %d files, %d passed, %d failed, %d new failures, %d new passes",
            summary["total"],
            summary["passed"],
            summary["failed"],
            summary["new_failures"],
            summary["new_passes"],
        )
        for transition in report.transitions:
            logger.warning(
                "%s: %s -> %s",
                transition.file_name,
                transition.previous.value,
                transition.current.value,
            )
        return report

    def load_baseline(self, path: Path) -> ResultSet | None:
        """Load the previous report, or return None if it cannot be read."""
        logger.info("Loading last report file %s", path)
        try:
            return ResultSet.load_from_file(path)
        except Exception:
            logger.warning("Could not load baseline %s; continuing without one", path, exc_info=True)
            return None

    def process_file(
        self,
        source: Path,
        root: Path,
        baseline: ResultSet | None = None,
        caching: bool = False,
    ) -> ResultRecord:
        """Convert one source file and return its populated record."""
        remove_artifacts(source)

        record = ResultRecord.pending(comparison_key(source, root))
        updates: dict[str, Any] = {"source_file_bytes": file_size(source)}
        failed = False

        with capture_logs() as capture:
            try:
                self._convert(source, caching, updates)
            except Exception:
                logger.error("Problem converting file: %s", source, exc_info=True)
                failed = True
            updates["error_count"] = capture.error_count
            updates["warning_count"] = capture.warning_count
            events = capture.events

        if events:
            write_log_file(derived_path(source, LOG_SUFFIX), events, source)

        # Durations measured before a fault are kept; model facts are not.
        if failed:
            updates = {k: v for k, v in updates.items() if k in _KEPT_ON_FAILURE}

        updates["failed"] = failed
        record = record.model_copy(update=updates)
        last_run = baseline.compare(record) if baseline is not None else Outcome.NO_TEST
        return record.model_copy(update={"last_run": last_run})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _convert(self, source: Path, caching: bool, fields: dict[str, Any]) -> None:
        """Run the collaborator on *source*, filling record *fields* as it goes.

        Timings land in *fields* as soon as they are measured so they
        survive an exception raised later in the conversion.
        """
        cache_path = derived_path(source, CONVERTED_SUFFIX) if caching else None
        scene_path = derived_path(source, SCENE_SUFFIX)

        start = self._clock()
        with self.converter.open(source, cache_path) as model:
            parsed = self._clock()
            fields["parse_duration_ms"] = _elapsed_ms(start, parsed)

            nodes = 0
            try:
                nodes = model.generate_geometry()
            except Exception as exc:
                logger.error("Error compiling geometry: %s - %s", source, exc, exc_info=True)
            geometry_done = self._clock()
            fields["geometry_duration_ms"] = _elapsed_ms(parsed, geometry_done)

            if self.settings.generate_scene:
                try:
                    model.write_scene(scene_path)
                except Exception as exc:
                    logger.error("Error generating scene: %s - %s", source, exc, exc_info=True)
                fields["scene_duration_ms"] = _elapsed_ms(geometry_done, self._clock())

            summary = model.summary()

        fields.update(
            geometry_node_count=nodes,
            converted_file_bytes=file_size(cache_path) if cache_path else 0,
            scene_file_bytes=file_size(scene_path) if self.settings.generate_scene else 0,
            entity_count=summary.entity_count,
            product_entity_count=summary.product_count,
            solid_geometry_count=summary.solid_count,
            mapped_geometry_count=summary.mapped_count,
            boolean_geometry_count=summary.boolean_count,
            schema_identifier=summary.schema_identifier,
            model_name=summary.name,
            model_description=summary.description,
            producing_application=summary.application,
        )

    def _report_record(self, source: Path, record: ResultRecord) -> None:
        if not record.failed:
            logger.info(
                "Processed %s : %d errors, %d warnings in %dms. "
                "%d IFC elements & %d geometry nodes.",
                source,
                record.error_count or 0,
                record.warning_count,
                record.total_duration_ms,
                record.entity_count,
                record.geometry_node_count,
            )
        else:
            logger.info(
                "Processing failed for %s after %dms.",
                source,
                record.total_duration_ms,
            )


_KEPT_ON_FAILURE = frozenset(
    {
        "source_file_bytes",
        "parse_duration_ms",
        "geometry_duration_ms",
        "scene_duration_ms",
        "error_count",
        "warning_count",
    }
)
