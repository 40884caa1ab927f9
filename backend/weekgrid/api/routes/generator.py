import logging
from time import perf_counter

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from weekgrid.api.deps import get_db, get_text_source
from weekgrid.core.config import get_settings
from weekgrid.core.exceptions import AppError
from weekgrid.schemas.generator import GenerateTimetableRequest, GenerateTimetableResponse
from weekgrid.services.external_source import TimetableTextSource
from weekgrid.services.persistence import save_generation
from weekgrid.services.timetable_generator import TimetableGenerator, resolve_generation_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/timetable/generate", response_model=GenerateTimetableResponse)
def generate_timetable(
    payload: GenerateTimetableRequest,
    db: Session = Depends(get_db),
    text_source: TimetableTextSource | None = Depends(get_text_source),
) -> GenerateTimetableResponse:
    started = perf_counter()
    settings = get_settings()
    branch = payload.branch or settings.default_branch
    logger.info(
        "TIMETABLE GENERATION START | branch=%s | divisions=%s | external_text=%s | persist=%s",
        branch,
        [item.division for item in payload.divisions],
        payload.external_text is not None,
        payload.persist,
    )
    try:
        generation = resolve_generation_settings(settings, payload.settings_override)
        result = TimetableGenerator(
            settings=settings,
            generation=generation,
            text_source=text_source,
        ).run(payload)

        if payload.persist:
            record = save_generation(db, request=payload, result=result, branch=branch)
            db.commit()
            result.generation_id = record.id

        elapsed_ms = int((perf_counter() - started) * 1000)
        logger.info(
            "TIMETABLE GENERATION COMPLETE | branch=%s | source=%s | status=%s | rows=%s | dropped=%s | seed=%s | runtime_ms=%s | wall_ms=%s",
            branch,
            result.source,
            result.status,
            len(result.rows),
            result.dropped_count,
            result.seed,
            result.runtime_ms,
            elapsed_ms,
        )
        return result
    except AppError as exc:
        db.rollback()
        logger.warning(
            "TIMETABLE GENERATION FAILED | branch=%s | status_code=%s | message=%s | wall_ms=%s",
            branch,
            exc.status_code,
            exc.message,
            int((perf_counter() - started) * 1000),
        )
        raise
    except Exception:
        db.rollback()
        logger.exception(
            "TIMETABLE GENERATION ERROR | branch=%s | wall_ms=%s",
            branch,
            int((perf_counter() - started) * 1000),
        )
        raise
