from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

SessionKind = Literal["theory", "lab"]
FacultyRole = Literal["theory", "lab"]
RowKind = Literal["theory", "lab", "mandatory", "holiday"]

SENTINEL = "-"


class VenueCategory(str, Enum):
    theory = "theory"
    lab = "lab"
    shared = "shared"


@dataclass(frozen=True)
class Course:
    name: str
    kind: SessionKind
    division: int
    subject: str | None = None
    weekly_sessions: int | None = None

    @property
    def affinity(self) -> str:
        return self.subject or self.name


@dataclass(frozen=True)
class FacultyMember:
    name: str
    subject: str = ""
    role: FacultyRole = "theory"
    division: int | None = None

    def serves(self, division: int) -> bool:
        return self.division is None or self.division == division


@dataclass(frozen=True)
class Venue:
    identifier: str
    category: VenueCategory


@dataclass(frozen=True)
class Batch:
    identifier: str
    division: int


@dataclass(frozen=True)
class BatchScope:
    """Audience of a session: one batch, or every batch of a division when ``batch`` is None.

    Division 0 stands for "unknown" (rows read back from a table without a
    division marker). An unknown-division batch only collides with the same
    batch label or with an all-batches row of unknown division.
    """

    division: int
    batch: str | None = None

    @property
    def is_all_batches(self) -> bool:
        return self.batch is None

    @property
    def label(self) -> str:
        if self.batch is None:
            return f"All Batches (Div {self.division})"
        return self.batch

    def overlaps(self, other: BatchScope) -> bool:
        if self.division and other.division and self.division != other.division:
            return False
        if self.batch is None and other.batch is None:
            return True
        if self.batch is None or other.batch is None:
            whole, single = (self, other) if self.batch is None else (other, self)
            return not whole.division or single.division == whole.division
        return self.batch == other.batch


@dataclass(frozen=True)
class DivisionPlan:
    division: int
    branch: str
    theory_courses: tuple[Course, ...]
    lab_courses: tuple[Course, ...]
    faculty: tuple[FacultyMember, ...]
    batches: tuple[Batch, ...]
    placeholder_curriculum: bool = False


@dataclass(frozen=True)
class SessionRequirement:
    subject: str
    kind: SessionKind
    scope: BatchScope
    repetitions: int
    affinity: str = ""


@dataclass(frozen=True)
class Session:
    subject: str
    kind: RowKind
    scope: BatchScope | None
    day: str
    slot: str
    faculty: str
    venue: str

    @property
    def is_fixed(self) -> bool:
        return self.kind in ("mandatory", "holiday")

    @property
    def batch_label(self) -> str:
        return self.scope.label if self.scope is not None else SENTINEL

    def as_row(self) -> list[str]:
        return [self.day, self.slot, self.batch_label, self.subject, self.faculty, self.venue]
