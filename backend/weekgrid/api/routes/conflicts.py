from fastapi import APIRouter

from weekgrid.schemas.conflict import ConflictReport, DetectConflictsRequest
from weekgrid.services.conflict_service import ConflictValidator
from weekgrid.services.grid import ScheduleGrid

router = APIRouter()


@router.post("/detect", response_model=ConflictReport)
def detect_conflicts(payload: DetectConflictsRequest) -> ConflictReport:
    validator = ConflictValidator(ScheduleGrid(), payload.shared_venues)
    return validator.validate_table(payload.table)
