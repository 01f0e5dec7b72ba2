"""ResultRecord — the outcome of converting one source file.

A record starts out pending (nothing measured), is populated exactly once by
the batch processor, and is read-only from then on: it is only serialised
and compared against the baseline.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ifcregression.report.schema import (
    COLUMN_COUNT,
    parse_count,
    parse_text,
    sanitise,
)


class Outcome(str, Enum):
    """Pass/fail state of a test, including 'no data'."""

    FAILED = "Failed"
    PASSED = "Passed"
    NO_TEST = "No Test"

    @classmethod
    def from_failed(cls, failed: Optional[bool]) -> "Outcome":
        if failed is None:
            return cls.NO_TEST
        return cls.FAILED if failed else cls.PASSED

    @classmethod
    def parse(cls, text: str | None) -> "Outcome":
        """Decode a report cell; anything unrecognised means no data."""
        key = (text or "").strip().upper()
        for member in cls:
            if member.value.upper() == key:
                return member
        return cls.NO_TEST

    @property
    def failed(self) -> Optional[bool]:
        if self is Outcome.NO_TEST:
            return None
        return self is Outcome.FAILED


class ResultRecord(BaseModel):
    """One row of a regression report."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    failed: bool = False
    last_run: Outcome = Outcome.NO_TEST

    # None until the log capture for this file has been counted
    error_count: Optional[int] = Field(default=None, ge=0)
    warning_count: int = Field(default=0, ge=0)

    parse_duration_ms: int = Field(default=0, ge=0)
    geometry_duration_ms: int = Field(default=0, ge=0)
    scene_duration_ms: int = Field(default=0, ge=0)

    source_file_bytes: int = Field(default=0, ge=0)
    converted_file_bytes: int = Field(default=0, ge=0)
    scene_file_bytes: int = Field(default=0, ge=0)

    entity_count: int = Field(default=0, ge=0)
    geometry_node_count: int = Field(default=0, ge=0)
    product_entity_count: int = Field(default=0, ge=0)
    solid_geometry_count: int = Field(default=0, ge=0)
    mapped_geometry_count: int = Field(default=0, ge=0)
    boolean_geometry_count: int = Field(default=0, ge=0)

    schema_identifier: str = ""
    model_name: str = ""
    model_description: str = ""
    producing_application: str = ""

    @classmethod
    def pending(cls, file_name: str) -> "ResultRecord":
        """Return an unpopulated record for *file_name*."""
        return cls(file_name=file_name)

    @property
    def total_duration_ms(self) -> int:
        return self.parse_duration_ms + self.geometry_duration_ms + self.scene_duration_ms

    @property
    def measured(self) -> bool:
        return self.error_count is not None

    @property
    def outcome(self) -> Outcome:
        return Outcome.from_failed(self.failed)

    @property
    def comparison_key(self) -> str:
        """The file name as it appears in a written report."""
        return sanitise(self.file_name)

    # ------------------------------------------------------------------
    # CSV row codec
    # ------------------------------------------------------------------

    def to_row(self) -> list[str]:
        """Return the 22 report cells for this record, in column order."""
        return [
            self.outcome.value,
            self.last_run.value,
            sanitise(self.file_name),
            str(self.error_count if self.error_count is not None else -1),
            str(self.warning_count),
            str(self.parse_duration_ms),
            str(self.geometry_duration_ms),
            str(self.scene_duration_ms),
            str(self.total_duration_ms),
            str(self.source_file_bytes),
            str(self.converted_file_bytes),
            str(self.scene_file_bytes),
            str(self.entity_count),
            str(self.geometry_node_count),
            sanitise(self.schema_identifier),
            sanitise(self.model_name),
            sanitise(self.model_description),
            str(self.product_entity_count),
            str(self.solid_geometry_count),
            str(self.mapped_geometry_count),
            str(self.boolean_geometry_count),
            sanitise(self.producing_application),
        ]

    @classmethod
    def from_row(cls, cells: list[str]) -> "ResultRecord":
        """Build a record from report cells.

        Non-numeric or negative counts read as 0 and the stored total is ignored.
        Raises ``ValueError`` (or pydantic's ``ValidationError``) when the
        row cannot describe a record at all.
        """
        if len(cells) != COLUMN_COUNT:
            raise ValueError(f"expected {COLUMN_COUNT} cells, found {len(cells)}")

        def count(index: int) -> int:
            return max(0, parse_count(cells[index]))

        errors = parse_count(cells[3])
        return cls(
            failed=Outcome.parse(cells[0]) is Outcome.FAILED,
            last_run=Outcome.parse(cells[1]),
            file_name=parse_text(cells[2]),
            error_count=errors if errors >= 0 else None,
            warning_count=count(4),
            parse_duration_ms=count(5),
            geometry_duration_ms=count(6),
            scene_duration_ms=count(7),
            # cells[8] is the total, always recomputed
            source_file_bytes=count(9),
            converted_file_bytes=count(10),
            scene_file_bytes=count(11),
            entity_count=count(12),
            geometry_node_count=count(13),
            schema_identifier=parse_text(cells[14]),
            model_name=parse_text(cells[15]),
            model_description=parse_text(cells[16]),
            product_entity_count=count(17),
            solid_geometry_count=count(18),
            mapped_geometry_count=count(19),
            boolean_geometry_count=count(20),
            producing_application=parse_text(cells[21]),
        )
