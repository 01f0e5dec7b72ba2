"""Versioned CSV schema for regression reports.

The column list here is the only definition of the report layout; both the
writer and the reader go through it so the two cannot drift apart.
"""

from __future__ import annotations

SCHEMA_VERSION = 2

# Current header, written by this package
REPORT_COLUMNS: tuple[str, ...] = (
    "Test",
    "LastTest",
    "FileName",
    "Errors",
    "Warnings",
    "ParseDurationMs",
    "GeometryDurationMs",
    "SceneDurationMs",
    "TotalDurationMs",
    "IfcSize",
    "XbimSize",
    "SceneSize",
    "Entities",
    "GeometryNodes",
    "Schema",
    "Name",
    "Description",
    "Products",
    "SolidModels",
    "Maps",
    "Booleans",
    "Application",
)

# Version 1 header, written by earlier releases. Same positions.
LEGACY_COLUMNS: tuple[str, ...] = (
    "Test",
    "Last Test",
    "IFC File",
    "Errors",
    "Warnings",
    "Parse Duration (ms)",
    "Geometry Conversion (ms)",
    "Scene Generation (ms)",
    "Total Duration (ms)",
    "IFC Size",
    "Xbim Size",
    "Scene Size",
    "IFC Entities",
    "Geometry Nodes",
    "FILE_SCHEMA",
    "FILE_NAME",
    "FILE_DESCRIPTION",
    "Products",
    "Solid Models",
    "Maps",
    "Booleans",
    "Application",
)

SCHEMAS: dict[int, tuple[str, ...]] = {
    1: LEGACY_COLUMNS,
    SCHEMA_VERSION: REPORT_COLUMNS,
}

COLUMN_COUNT = len(REPORT_COLUMNS)

NULL_TEXT = "Null"


class UnsupportedReportFormat(Exception):
    """Raised when a report header matches no known schema version."""


def _norm(name: str) -> str:
    return "".join(name.split()).lower()


def detect_schema(header: list[str]) -> int:
    """Return the schema version whose column names match *header*."""
    if len(header) != COLUMN_COUNT:
        raise UnsupportedReportFormat(
            f"Incorrect number of columns: expected {COLUMN_COUNT}, found {len(header)}"
        )
    names = [_norm(cell) for cell in header]
    for version, columns in SCHEMAS.items():
        if names == [_norm(c) for c in columns]:
            return version
    raise UnsupportedReportFormat(f"Unrecognised report header: {', '.join(header)}")


def sanitise(value: object) -> str:
    """Make a free-text value safe for a comma-delimited cell.

    ``Hello, "World"\\r\\nLine2`` becomes ``Hello- 'World' Line2``; an empty
    or missing value becomes ``Null``.
    """
    if value is None:
        return NULL_TEXT
    text = str(value)
    if not text:
        return NULL_TEXT
    return text.replace(",", "-").replace('"', "'").replace("\r", "").replace("\n", " ")


def parse_text(cell: str) -> str:
    """Inverse of :func:`sanitise` for the ``Null`` placeholder.

    A free-text value that is literally ``Null`` cannot be told apart from
    an empty one once written, so it also reads back as ``""``.
    """
    return "" if cell == NULL_TEXT else cell


def parse_count(cell: str | None) -> int:
    """Parse an integer cell, treating anything non-numeric as 0."""
    if cell is None:
        return 0
    try:
        return int(cell.strip())
    except ValueError:
        return 0
