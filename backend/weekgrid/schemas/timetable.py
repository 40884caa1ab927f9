from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

TIMETABLE_HEADERS: tuple[str, ...] = ("Day", "Time", "Class/Batch", "Course Name", "Faculty", "Venue")

GenerationSource = Literal["algorithmic", "external"]


class TimetableTable(BaseModel):
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_rectangular(self) -> "TimetableTable":
        width = len(self.headers)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"Row {index} has {len(row)} cells; expected {width}")
        return self


class NormalizeTableRequest(BaseModel):
    text: str = Field(default="", max_length=2_000_000)


class DivisionOccupancy(BaseModel):
    division: int
    cells: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    free_cells: int = 0


class TimetableGenerationSummary(BaseModel):
    id: str
    branch: str
    divisions: list[int]
    academic_year: str | None = None
    source: GenerationSource
    status: Literal["complete", "partial"]
    dropped_count: int = 0
    seed: int | None = None
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("divisions", mode="before")
    @classmethod
    def split_divisions(cls, value: str | list[int]) -> list[int]:
        if isinstance(value, str):
            return [int(item) for item in value.split(",") if item.strip()]
        return value


class TimetableGenerationOut(TimetableGenerationSummary):
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)
