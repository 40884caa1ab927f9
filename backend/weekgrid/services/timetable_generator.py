from __future__ import annotations

import logging
from time import perf_counter
from typing import Sequence

from weekgrid.core.config import Settings
from weekgrid.core.exceptions import CapacityOverrunError, ExternalSourceError, ScheduleConflictError
from weekgrid.schemas.generator import (
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    GenerationSettingsBase,
    GenerationSettingsOverride,
)
from weekgrid.schemas.timetable import DivisionOccupancy, TimetableTable
from weekgrid.services.catalog import SessionCatalogBuilder
from weekgrid.services.conflict_service import ConflictValidator
from weekgrid.services.entities import DivisionPlan, Session
from weekgrid.services.external_source import TimetableTextSource, external_table
from weekgrid.services.grid import ScheduleGrid
from weekgrid.services.ingestion import build_division_plan, parse_faculty, parse_venues
from weekgrid.services.resource_pool import ResourcePool
from weekgrid.services.slot_allocator import AllocationResult, SlotAllocator
from weekgrid.services.table_normalizer import TableNormalizer

logger = logging.getLogger(__name__)


def resolve_generation_settings(
    settings: Settings,
    override: GenerationSettingsOverride | None = None,
) -> GenerationSettingsBase:
    resolved = GenerationSettingsBase(
        random_seed=settings.random_seed,
        deterministic=settings.deterministic,
        theory_repetitions=settings.theory_repetitions,
        overflow_policy=settings.overflow_policy,
    )
    if override is None:
        return resolved
    updates = override.model_dump(exclude_none=True)
    return GenerationSettingsBase.model_validate({**resolved.model_dump(), **updates})


class TimetableGenerator:
    def __init__(
        self,
        *,
        settings: Settings,
        generation: GenerationSettingsBase,
        text_source: TimetableTextSource | None = None,
        grid: ScheduleGrid | None = None,
    ) -> None:
        self.settings = settings
        self.generation = generation
        self.text_source = text_source
        self.grid = grid or ScheduleGrid()
        self.builder = SessionCatalogBuilder(
            theory_repetitions=generation.theory_repetitions,
            max_theory_courses=settings.max_theory_courses,
            max_lab_courses=settings.max_lab_courses,
            max_faculty=settings.max_faculty,
            max_venues=settings.max_venues,
            synthetic_batch_count=settings.synthetic_batch_count,
        )

    def run(self, request: GenerateTimetableRequest) -> GenerateTimetableResponse:
        started = perf_counter()
        branch = request.branch or self.settings.default_branch
        plans = [
            self.builder.prepare(build_division_plan(dataset, branch=branch))
            for dataset in sorted(request.divisions, key=lambda item: item.division)
        ]
        pool = self._build_pool(request, plans)
        validator = ConflictValidator(
            self.grid,
            pool.shared_venues,
            batch_divisions={batch.identifier: plan.division for plan in plans for batch in plan.batches},
        )

        external, fallback_reason = self._try_external(request, validator)
        if external is not None:
            return GenerateTimetableResponse(
                headers=external.headers,
                rows=external.rows,
                source="external",
                settings_used=self.generation,
                runtime_ms=int((perf_counter() - started) * 1000),
            )

        result = self._allocate(plans, pool)
        report = validator.validate(result.sessions)
        if not report.is_clean:
            logger.error(
                "Allocation failed validation | conflicts=%s | first=%s",
                len(report.conflicts),
                report.descriptions[0],
            )
            raise ScheduleConflictError(report.descriptions)

        table = TableNormalizer.from_sessions(result.sessions)
        return GenerateTimetableResponse(
            headers=table.headers,
            rows=table.rows,
            source="algorithmic",
            status=result.status,
            dropped_count=result.dropped_count,
            seed=result.seed,
            fallback_reason=fallback_reason,
            placeholder_divisions=[plan.division for plan in plans if plan.placeholder_curriculum],
            occupancy=[self._occupancy(plan.division, result.sessions) for plan in plans],
            settings_used=self.generation,
            runtime_ms=int((perf_counter() - started) * 1000),
        )

    def _build_pool(self, request: GenerateTimetableRequest, plans: Sequence[DivisionPlan]) -> ResourcePool:
        shared_faculty = parse_faculty(request.shared_faculty, division=None)[: self.settings.max_faculty]
        faculty = [*shared_faculty, *(member for plan in plans for member in plan.faculty)]
        venues = self.builder.bound_venues(parse_venues(request.venues))
        return ResourcePool(faculty, venues)

    def _try_external(
        self,
        request: GenerateTimetableRequest,
        validator: ConflictValidator,
    ) -> tuple[TimetableTable | None, str | None]:
        text = request.external_text
        if text is None and self.settings.external_generation_enabled and self.text_source is not None:
            try:
                text = self.text_source.generate(request)
            except Exception as exc:
                logger.warning("External timetable source failed; using algorithmic generation | error=%s", exc)
                return None, f"External source failed: {exc}"
        if text is None:
            return None, None

        try:
            return external_table(text, validator), None
        except ExternalSourceError as exc:
            logger.warning(
                "External timetable rejected; using algorithmic generation | reason=%s | details=%s",
                exc.message,
                exc.details,
            )
            return None, exc.message

    def _allocate(self, plans: Sequence[DivisionPlan], pool: ResourcePool) -> AllocationResult:
        catalog = [(plan, self.builder.build(plan)) for plan in plans]
        allocator = SlotAllocator(
            self.grid,
            pool,
            seed=self.generation.random_seed,
            deterministic=self.generation.deterministic,
        )
        result = allocator.allocate(catalog)
        if not result.is_complete and self.generation.overflow_policy == "reject":
            raise CapacityOverrunError(
                result.dropped_count,
                details={
                    "dropped_sessions": [f"{item.subject} ({item.scope.label})" for item in result.dropped],
                    "open_cells": len(self.grid.open_cells()),
                },
            )
        return result

    def _occupancy(self, division: int, sessions: Sequence[Session]) -> DivisionOccupancy:
        cells: dict[str, dict[str, list[str]]] = {}
        for cell in self.grid.cells():
            cells.setdefault(cell.day, {})[cell.slot] = []
        for session in sessions:
            if session.scope is None or session.scope.division != division:
                continue
            day_cells = cells.get(session.day)
            if day_cells is None or session.slot not in day_cells:
                continue
            day_cells[session.slot].append(f"{session.subject} [{session.batch_label}]")
        free_cells = sum(
            1
            for cell in self.grid.open_cells()
            if not cells[cell.day][cell.slot]
        )
        return DivisionOccupancy(division=division, cells=cells, free_cells=free_cells)
