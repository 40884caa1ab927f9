from __future__ import annotations

import logging
from typing import Protocol

from weekgrid.core.exceptions import ExternalSourceError
from weekgrid.schemas.generator import GenerateTimetableRequest
from weekgrid.schemas.timetable import TimetableTable
from weekgrid.services.conflict_service import ConflictValidator, missing_columns
from weekgrid.services.table_normalizer import TableNormalizer

logger = logging.getLogger(__name__)


class TimetableTextSource(Protocol):
    """Anything that can draft a timetable as a markdown pipe table."""

    def generate(self, request: GenerateTimetableRequest) -> str: ...


class StaticTextSource:
    def __init__(self, text: str) -> None:
        self.text = text

    def generate(self, request: GenerateTimetableRequest) -> str:
        return self.text


def external_table(text: str | None, validator: ConflictValidator) -> TimetableTable:
    """Normalize external text and accept it only if it is a usable, conflict-free timetable."""
    table = TableNormalizer.parse(text)
    if not table.headers:
        raise ExternalSourceError("External timetable text contains no pipe table")
    missing = missing_columns(table.headers)
    if missing:
        raise ExternalSourceError(
            "External timetable is missing required columns",
            details={"missing_columns": missing, "headers": table.headers},
        )
    if not table.rows:
        raise ExternalSourceError("External timetable has no rows")

    report = validator.validate_table(table)
    if not report.is_clean:
        raise ExternalSourceError(
            f"External timetable has {len(report.conflicts)} conflict(s)",
            details={"conflicts": report.descriptions},
        )
    logger.info("External timetable accepted | headers=%s | rows=%s", len(table.headers), len(table.rows))
    return table
