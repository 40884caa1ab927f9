from __future__ import annotations

import re
from typing import Sequence

from weekgrid.schemas.timetable import TIMETABLE_HEADERS, TimetableTable
from weekgrid.services.entities import Session

# A markdown rule line such as "|---|:---:|" carries no data.
SEPARATOR_LINE = re.compile(r"^[\s|:\-]*-[\s|:\-]*$")
# Data rows made only of rule punctuation are written with "\-" cells so a re-parse keeps them.
RULE_CELL = re.compile(r"^[:\-]+$")
ESCAPED_RULE_CELL = re.compile(r"^\\([:\-]+)$")


class TableNormalizer:
    """Coerce allocator output or free-form pipe-table text into a rectangular table."""

    @staticmethod
    def from_sessions(sessions: Sequence[Session]) -> TimetableTable:
        return TimetableTable(headers=list(TIMETABLE_HEADERS), rows=[session.as_row() for session in sessions])

    @staticmethod
    def parse(text: str | None) -> TimetableTable:
        if not text:
            return TimetableTable()

        lines = [
            line.strip()
            for line in text.strip().splitlines()
            if "|" in line and not SEPARATOR_LINE.match(line)
        ]
        if not lines:
            return TimetableTable()

        headers = [cell for cell in _split_cells(lines[0]) if cell]
        width = len(headers)
        rows: list[list[str]] = []
        for line in lines[1:]:
            cells = _split_cells(line)
            if len(cells) < width:
                cells.extend([""] * (width - len(cells)))
            rows.append(cells[:width])
        return TimetableTable(headers=headers, rows=rows)

    @staticmethod
    def to_markdown(table: TimetableTable) -> str:
        if not table.headers:
            return ""
        lines = [_row_line(table.headers), _join_cells(["---"] * len(table.headers))]
        lines.extend(_row_line(row) for row in table.rows)
        return "\n".join(lines)


def _split_cells(line: str) -> list[str]:
    stripped = line.strip()
    if stripped.startswith("|"):
        stripped = stripped[1:]
    if stripped.endswith("|"):
        stripped = stripped[:-1]
    return [ESCAPED_RULE_CELL.sub(r"\1", cell.strip()) for cell in stripped.split("|")]


def _join_cells(cells: Sequence[str]) -> str:
    return "| " + " | ".join(cell.replace("|", "/") for cell in cells) + " |"


def _row_line(cells: Sequence[str]) -> str:
    line = _join_cells(cells)
    if not SEPARATOR_LINE.match(line):
        return line
    return _join_cells([f"\\{cell}" if RULE_CELL.match(cell) else cell for cell in cells])
