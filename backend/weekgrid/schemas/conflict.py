from pydantic import BaseModel, Field
from typing import Literal, List

from weekgrid.schemas.timetable import TimetableTable


class ConflictDetail(BaseModel):
    id: str
    conflict_type: Literal[
        "faculty_conflict",
        "venue_conflict",
        "batch_conflict",
        "reserved_slot",
    ]
    description: str
    severity: Literal["hard", "soft"] = "hard"
    day: str
    slot: str
    affected_rows: List[int]  # Row indices of the checked table/session list


class ConflictReport(BaseModel):
    conflicts: List[ConflictDetail] = Field(default_factory=list)
    checked_sessions: int = 0

    @property
    def descriptions(self) -> list[str]:
        return [conflict.description for conflict in self.conflicts]

    @property
    def is_clean(self) -> bool:
        return not self.conflicts


class DetectConflictsRequest(BaseModel):
    table: TimetableTable
    shared_venues: List[str] = Field(default_factory=list)
