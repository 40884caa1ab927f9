from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from weekgrid.core.exceptions import ResourceNotFoundError
from weekgrid.models.timetable_generation import TimetableGeneration
from weekgrid.schemas.generator import GenerateTimetableRequest, GenerateTimetableResponse


def save_generation(
    db: Session,
    *,
    request: GenerateTimetableRequest,
    result: GenerateTimetableResponse,
    branch: str,
) -> TimetableGeneration:
    record = TimetableGeneration(
        branch=branch,
        divisions=",".join(str(item.division) for item in sorted(request.divisions, key=lambda item: item.division)),
        academic_year=request.academic_year,
        source=result.source,
        status=result.status,
        dropped_count=result.dropped_count,
        seed=result.seed,
        headers=list(result.headers),
        rows=[list(row) for row in result.rows],
    )
    db.add(record)
    db.flush()
    return record


def list_generations(db: Session, *, branch: str | None = None, limit: int = 50) -> list[TimetableGeneration]:
    query = select(TimetableGeneration).order_by(TimetableGeneration.created_at.desc()).limit(limit)
    if branch:
        query = query.where(TimetableGeneration.branch == branch)
    return list(db.execute(query).scalars())


def get_generation(db: Session, generation_id: str) -> TimetableGeneration:
    record = db.get(TimetableGeneration, generation_id)
    if record is None:
        raise ResourceNotFoundError("Timetable generation", generation_id)
    return record


def delete_generation(db: Session, generation_id: str) -> None:
    db.delete(get_generation(db, generation_id))
