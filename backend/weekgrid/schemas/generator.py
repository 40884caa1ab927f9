from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from weekgrid.core.config import OverflowPolicy
from weekgrid.schemas.timetable import DivisionOccupancy, GenerationSource

RawRecord = dict[str, Any]


class GenerationSettingsBase(BaseModel):
    random_seed: int | None = Field(default=None, ge=0, le=2_000_000_000)
    deterministic: bool = False
    theory_repetitions: int = Field(default=2, ge=1, le=6)
    overflow_policy: OverflowPolicy = "reject"


class GenerationSettingsOverride(BaseModel):
    random_seed: int | None = Field(default=None, ge=0, le=2_000_000_000)
    deterministic: bool | None = None
    theory_repetitions: int | None = Field(default=None, ge=1, le=6)
    overflow_policy: OverflowPolicy | None = None


class DivisionDataset(BaseModel):
    division: int = Field(ge=1, le=99)
    branch: str | None = Field(default=None, min_length=1, max_length=50)
    theory_courses: list[RawRecord] = Field(default_factory=list)
    lab_courses: list[RawRecord] = Field(default_factory=list)
    faculty: list[RawRecord] = Field(default_factory=list)
    batches: list[RawRecord] = Field(default_factory=list)
    load_distribution: list[RawRecord] = Field(default_factory=list)


class GenerateTimetableRequest(BaseModel):
    branch: str | None = Field(default=None, max_length=50)
    academic_year: str | None = Field(default=None, max_length=20)
    divisions: list[DivisionDataset] = Field(default_factory=list, max_length=20)
    venues: list[RawRecord] = Field(default_factory=list)
    shared_faculty: list[RawRecord] = Field(default_factory=list)
    external_text: str | None = Field(default=None, max_length=2_000_000)
    persist: bool = False
    settings_override: GenerationSettingsOverride | None = None

    @field_validator("branch")
    @classmethod
    def normalize_branch(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def validate_divisions(self) -> "GenerateTimetableRequest":
        if not self.divisions:
            self.divisions = [DivisionDataset(division=1)]
        seen: set[int] = set()
        duplicates: set[int] = set()
        for item in self.divisions:
            if item.division in seen:
                duplicates.add(item.division)
            seen.add(item.division)
        if duplicates:
            raise ValueError(f"Duplicate division number(s): {', '.join(str(item) for item in sorted(duplicates))}")
        return self


class GenerateTimetableResponse(BaseModel):
    headers: list[str]
    rows: list[list[str]]
    source: GenerationSource
    status: Literal["complete", "partial"] = "complete"
    dropped_count: int = 0
    seed: int | None = None
    fallback_reason: str | None = None
    placeholder_divisions: list[int] = Field(default_factory=list)
    occupancy: list[DivisionOccupancy] = Field(default_factory=list)
    settings_used: GenerationSettingsBase
    runtime_ms: int = 0
    generation_id: str | None = None
