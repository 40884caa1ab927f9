from collections import defaultdict
import re
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from weekgrid.schemas.conflict import ConflictDetail, ConflictReport
from weekgrid.schemas.timetable import TimetableTable
from weekgrid.services.entities import SENTINEL, BatchScope, Session
from weekgrid.services.grid import HOLIDAY_DAY, ScheduleGrid

DIVISION_LABEL = re.compile(r"div(?:ision)?\s*(\d+)", re.IGNORECASE)

COLUMN_ALIASES: Dict[str, Tuple[str, ...]] = {
    "day": ("day",),
    "time": ("time", "time slot", "slot"),
    "batch": ("class/batch", "class / batch", "batch", "class"),
    "course": ("course name", "course", "subject"),
    "faculty": ("faculty", "teacher", "instructor"),
    "venue": ("venue", "room"),
    "division": ("division", "div"),
}

REQUIRED_COLUMNS = ("day", "time", "course", "faculty", "venue")


class ConflictValidator:
    def __init__(
        self,
        grid: ScheduleGrid,
        shared_venues: Iterable[str] = (),
        batch_divisions: Mapping[str, int] | None = None,
    ):
        self.grid = grid
        self.shared_venues = {venue.strip().lower() for venue in shared_venues}
        # Batch label -> division, for tables whose batch labels carry no division marker.
        self.batch_divisions = dict(batch_divisions or {})

    def validate(self, sessions: Sequence[Session]) -> ConflictReport:
        conflicts: List[ConflictDetail] = []

        # Fixed grid: only sessions in the same (day, slot) cell can collide.
        sessions_by_cell = defaultdict(list)
        for index, session in enumerate(sessions):
            if session.day == HOLIDAY_DAY or session.slot == SENTINEL:
                continue
            sessions_by_cell[(session.day, session.slot)].append((index, session))

        for (day, slot), cell_sessions in sessions_by_cell.items():
            reserved = self.grid.reserved_at(day, slot)
            n = len(cell_sessions)
            for i in range(n):
                i1, s1 = cell_sessions[i]
                if reserved is not None and s1.subject.lower() != reserved.activity.lower():
                    conflicts.append(ConflictDetail(
                        id=f"reserved-{i1}",
                        conflict_type="reserved_slot",
                        description=f"{s1.subject} ({s1.batch_label}) placed in slot reserved for {reserved.activity} on {day} {slot}",
                        day=day,
                        slot=slot,
                        affected_rows=[i1],
                    ))

                for j in range(i + 1, n):
                    i2, s2 = cell_sessions[j]
                    # Every division attends its own library/project hour together.
                    if s1.is_fixed and s2.is_fixed:
                        continue
                    if s1.faculty != SENTINEL and s1.faculty == s2.faculty:
                        conflicts.append(ConflictDetail(
                            id=f"fac-{i1}-{i2}",
                            conflict_type="faculty_conflict",
                            description=f"Faculty overlap for {s1.faculty} on {day} {slot}: {s1.subject} and {s2.subject}",
                            day=day,
                            slot=slot,
                            affected_rows=[i1, i2],
                        ))
                    if s1.venue != SENTINEL and s1.venue == s2.venue and s1.venue.lower() not in self.shared_venues:
                        conflicts.append(ConflictDetail(
                            id=f"venue-{i1}-{i2}",
                            conflict_type="venue_conflict",
                            description=f"Venue overlap in {s1.venue} on {day} {slot}: {s1.subject} and {s2.subject}",
                            day=day,
                            slot=slot,
                            affected_rows=[i1, i2],
                        ))
                    if s1.scope is not None and s2.scope is not None and s1.scope.overlaps(s2.scope):
                        conflicts.append(ConflictDetail(
                            id=f"batch-{i1}-{i2}",
                            conflict_type="batch_conflict",
                            description=f"Batch overlap for {s1.batch_label} / {s2.batch_label} on {day} {slot}: {s1.subject} and {s2.subject}",
                            day=day,
                            slot=slot,
                            affected_rows=[i1, i2],
                        ))

        return ConflictReport(conflicts=conflicts, checked_sessions=len(sessions))

    def validate_table(self, table: TimetableTable) -> ConflictReport:
        return self.validate(sessions_from_table(table, self.grid, self.batch_divisions))


def missing_columns(headers: Sequence[str]) -> List[str]:
    columns = _column_index(headers)
    return [name for name in REQUIRED_COLUMNS if name not in columns]


def sessions_from_table(
    table: TimetableTable,
    grid: ScheduleGrid,
    batch_divisions: Mapping[str, int] | None = None,
) -> List[Session]:
    known = {label.strip().lower(): division for label, division in (batch_divisions or {}).items()}
    columns = _column_index(table.headers)
    sessions: List[Session] = []
    for row in table.rows:
        def cell(name: str) -> str:
            index = columns.get(name)
            return row[index].strip() if index is not None and index < len(row) else ""

        day = cell("day") or SENTINEL
        slot = cell("time") or SENTINEL
        subject = cell("course")
        batch_label = cell("batch")
        reserved = grid.reserved_at(day, slot)
        kind = "theory"
        if day == HOLIDAY_DAY:
            kind = "holiday"
        elif reserved is not None and subject.lower() == reserved.activity.lower():
            kind = "mandatory"
        sessions.append(Session(
            subject=subject,
            kind=kind,
            scope=_scope_from_label(batch_label, cell("division"), known),
            day=day,
            slot=slot,
            faculty=cell("faculty") or SENTINEL,
            venue=cell("venue") or SENTINEL,
        ))
    return sessions


def _column_index(headers: Sequence[str]) -> Dict[str, int]:
    normalized = [header.strip().lower() for header in headers]
    columns: Dict[str, int] = {}
    for name, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in normalized:
                columns[name] = normalized.index(alias)
                break
    return columns


def _scope_from_label(label: str, division_text: str, known: Mapping[str, int]) -> BatchScope | None:
    if not label or label == SENTINEL:
        return None
    division = known.get(label.lower(), 0)
    match = DIVISION_LABEL.search(label) or DIVISION_LABEL.search(f"div {division_text}")
    if match:
        division = int(match.group(1))
    if label.lower().startswith("all"):
        return BatchScope(division=division)
    return BatchScope(division=division, batch=label)
