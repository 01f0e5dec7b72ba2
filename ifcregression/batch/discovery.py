"""Locate source files, the baseline report, and stale derived artifacts."""

from __future__ import annotations

import logging
from pathlib import Path

from ifcregression.config import (
    CONVERTED_SUFFIX,
    LOG_SUFFIX,
    REPORT_PREFIX,
    SCENE_SUFFIX,
    SOURCE_EXTENSIONS,
)

logger = logging.getLogger(__name__)


def find_baseline(root: Path, prefix: str = REPORT_PREFIX) -> Path | None:
    """Return the most recently modified ``<prefix>_*.csv`` in *root*."""
    reports = [p for p in root.glob(f"{prefix}_*.csv") if p.is_file()]
    if not reports:
        return None
    return max(reports, key=lambda p: p.stat().st_mtime)


def find_sources(
    root: Path,
    extensions: tuple[str, ...] = SOURCE_EXTENSIONS,
    recursive: bool = True,
) -> list[Path]:
    """Return source files under *root* whose extension matches, case-insensitively."""
    wanted = {ext.lower() for ext in extensions}
    candidates = root.rglob("*") if recursive else root.glob("*")
    return sorted(p for p in candidates if p.is_file() and p.suffix.lower() in wanted)


def derived_path(source: Path, suffix: str) -> Path:
    """``model.ifc`` + ``.log`` -> ``model.ifc.log``."""
    return source.with_name(source.name + suffix)


def artifact_paths(source: Path) -> list[Path]:
    """All artifacts a previous run may have left for *source*."""
    return [derived_path(source, s) for s in (CONVERTED_SUFFIX, SCENE_SUFFIX, LOG_SUFFIX)]


def remove_artifacts(source: Path) -> None:
    """Best-effort removal of stale artifacts for *source*."""
    for path in artifact_paths(source):
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.debug("Could not remove %s", path, exc_info=True)


def file_size(path: Path) -> int:
    """Size of *path* in bytes, 0 if it does not exist."""
    try:
        return path.stat().st_size
    except OSError:
        return 0
