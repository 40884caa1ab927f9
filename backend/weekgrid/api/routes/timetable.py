import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from weekgrid.api.deps import get_db
from weekgrid.schemas.timetable import (
    NormalizeTableRequest,
    TimetableGenerationOut,
    TimetableGenerationSummary,
    TimetableTable,
)
from weekgrid.services.persistence import delete_generation, get_generation, list_generations
from weekgrid.services.table_normalizer import TableNormalizer

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/generations", response_model=list[TimetableGenerationSummary])
def list_timetable_generations(
    branch: str | None = Query(default=None, max_length=50),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[TimetableGenerationSummary]:
    return list_generations(db, branch=branch, limit=limit)


@router.get("/generations/{generation_id}", response_model=TimetableGenerationOut)
def get_timetable_generation(generation_id: str, db: Session = Depends(get_db)) -> TimetableGenerationOut:
    return get_generation(db, generation_id)


@router.delete("/generations/{generation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_timetable_generation(generation_id: str, db: Session = Depends(get_db)) -> None:
    delete_generation(db, generation_id)
    db.commit()
    logger.info("TIMETABLE GENERATION DELETED | generation_id=%s", generation_id)


@router.post("/normalize", response_model=TimetableTable)
def normalize_timetable_text(payload: NormalizeTableRequest) -> TimetableTable:
    return TableNormalizer.parse(payload.text)
