from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
import logging
import random
import time
from typing import Iterable, Literal, Sequence

from weekgrid.services.entities import (
    SENTINEL,
    BatchScope,
    DivisionPlan,
    Session,
    SessionRequirement,
)
from weekgrid.services.grid import HOLIDAY_DAY, GridCell, ScheduleGrid
from weekgrid.services.resource_pool import CandidatePools, ResourcePool

logger = logging.getLogger(__name__)

AllocationStatus = Literal["complete", "partial"]

HOLIDAY = "Holiday"


@dataclass
class AllocationResult:
    sessions: list[Session]
    status: AllocationStatus
    dropped_count: int = 0
    dropped: list[SessionRequirement] = field(default_factory=list)
    seed: int | None = None

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"


class Occupancy:
    """Per-cell record of who is already teaching, where, and to which batches."""

    def __init__(self, shared_venues: Iterable[str]) -> None:
        self.shared_venues = frozenset(venue.strip().lower() for venue in shared_venues)
        self._faculty: dict[tuple[str, str], set[str]] = defaultdict(set)
        self._venues: dict[tuple[str, str], set[str]] = defaultdict(set)
        self._scopes: dict[tuple[str, str], list[BatchScope]] = defaultdict(list)

    def faculty_free(self, cell: GridCell, name: str) -> bool:
        return name == SENTINEL or name not in self._faculty[cell.key]

    def venue_free(self, cell: GridCell, name: str) -> bool:
        return name.strip().lower() in self.shared_venues or name not in self._venues[cell.key]

    def scope_free(self, cell: GridCell, scope: BatchScope) -> bool:
        return not any(scope.overlaps(existing) for existing in self._scopes[cell.key])

    def record(self, cell: GridCell, *, scope: BatchScope, faculty: str, venue: str) -> None:
        self._faculty[cell.key].add(faculty)
        self._venues[cell.key].add(venue)
        self._scopes[cell.key].append(scope)


class SlotAllocator:
    def __init__(
        self,
        grid: ScheduleGrid,
        pool: ResourcePool,
        *,
        seed: int | None = None,
        deterministic: bool = False,
    ) -> None:
        self.grid = grid
        self.pool = pool
        self.deterministic = deterministic
        if deterministic:
            self.seed = None
        else:
            self.seed = seed if seed is not None else time.time_ns() & 0x7FFFFFFF
        self.random = random.Random(self.seed)

    def allocate(self, catalog: Sequence[tuple[DivisionPlan, Sequence[SessionRequirement]]]) -> AllocationResult:
        cells = self.grid.open_cells()
        occupancy = Occupancy(self.pool.shared_venues)
        sessions: list[Session] = []
        dropped: list[SessionRequirement] = []

        # Whole-division lectures claim cells before per-batch labs are packed around them.
        for plan, requirements in catalog:
            placed, missed = self._place_theory(
                plan.division,
                [item for item in requirements if item.kind == "theory"],
                cells,
                occupancy,
            )
            sessions.extend(placed)
            dropped.extend(missed)
        for plan, requirements in catalog:
            placed, missed = self._place_labs(
                plan,
                [item for item in requirements if item.kind == "lab"],
                cells,
                occupancy,
            )
            sessions.extend(placed)
            dropped.extend(missed)

        expected = sum(item.repetitions for _, requirements in catalog for item in requirements)
        if dropped:
            logger.warning(
                "Slot allocation incomplete | expected=%s | placed=%s | dropped=%s | open_cells=%s",
                expected,
                len(sessions),
                len(dropped),
                len(cells),
            )
        else:
            logger.info(
                "Slot allocation complete | placed=%s | divisions=%s | seed=%s",
                len(sessions),
                len(catalog),
                self.seed,
            )

        sessions.extend(self._fixed_sessions([plan.division for plan, _ in catalog]))
        return AllocationResult(
            sessions=sessions,
            status="partial" if dropped else "complete",
            dropped_count=len(dropped),
            dropped=dropped,
            seed=self.seed,
        )

    def _place_theory(
        self,
        division: int,
        requirements: list[SessionRequirement],
        cells: tuple[GridCell, ...],
        occupancy: Occupancy,
    ) -> tuple[list[Session], list[SessionRequirement]]:
        instances = [item for item in requirements for _ in range(item.repetitions)]
        if not self.deterministic:
            self.random.shuffle(instances)

        pools: dict[str, CandidatePools] = {}
        days_by_subject: dict[str, set[str]] = defaultdict(set)
        placed: list[Session] = []
        missed: list[SessionRequirement] = []
        for position, requirement in enumerate(instances):
            pool = pools.get(requirement.subject)
            if pool is None:
                pool = self.pool.candidates(
                    requirement.subject,
                    "theory",
                    division,
                    affinity=requirement.affinity or None,
                )
                pools[requirement.subject] = pool

            used_days = days_by_subject[requirement.subject]
            spread = tuple(cell for cell in cells if cell.day not in used_days)
            choice = self._first_fit(requirement.scope, pool, position, spread, occupancy)
            if choice is None:
                choice = self._first_fit(requirement.scope, pool, position, cells, occupancy)
            if choice is None:
                missed.append(requirement)
                continue

            cell, faculty, venue = choice
            occupancy.record(cell, scope=requirement.scope, faculty=faculty, venue=venue)
            used_days.add(cell.day)
            placed.append(
                Session(
                    subject=requirement.subject,
                    kind="theory",
                    scope=requirement.scope,
                    day=cell.day,
                    slot=cell.slot,
                    faculty=faculty,
                    venue=venue,
                )
            )
        return placed, missed

    def _place_labs(
        self,
        plan: DivisionPlan,
        requirements: list[SessionRequirement],
        cells: tuple[GridCell, ...],
        occupancy: Occupancy,
    ) -> tuple[list[Session], list[SessionRequirement]]:
        by_subject: dict[str, list[SessionRequirement]] = defaultdict(list)
        for requirement in requirements:
            by_subject[requirement.subject].append(requirement)
        batch_positions = {batch.identifier: index for index, batch in enumerate(plan.batches)}

        placed: list[Session] = []
        missed: list[SessionRequirement] = []
        for subject, subject_requirements in by_subject.items():
            pool = self.pool.candidates(
                subject,
                "lab",
                plan.division,
                required=len(subject_requirements),
                affinity=subject_requirements[0].affinity or None,
            )
            # Batches of one lab never share a cell.
            used_keys: set[tuple[str, str]] = set()
            for index, requirement in enumerate(subject_requirements):
                position = batch_positions.get(requirement.scope.batch, index)
                for _ in range(requirement.repetitions):
                    available = tuple(cell for cell in cells if cell.key not in used_keys)
                    choice = self._first_fit(requirement.scope, pool, position, available, occupancy)
                    if choice is None:
                        missed.append(requirement)
                        continue
                    cell, faculty, venue = choice
                    occupancy.record(cell, scope=requirement.scope, faculty=faculty, venue=venue)
                    used_keys.add(cell.key)
                    placed.append(
                        Session(
                            subject=subject,
                            kind="lab",
                            scope=requirement.scope,
                            day=cell.day,
                            slot=cell.slot,
                            faculty=faculty,
                            venue=venue,
                        )
                    )
        return placed, missed

    @staticmethod
    def _first_fit(
        scope: BatchScope,
        pool: CandidatePools,
        position: int,
        cells: tuple[GridCell, ...],
        occupancy: Occupancy,
    ) -> tuple[GridCell, str, str] | None:
        for cell in cells:
            if not occupancy.scope_free(cell, scope):
                continue
            faculty = next(
                (
                    pool.faculty_at(position + offset)
                    for offset in range(len(pool.faculty))
                    if occupancy.faculty_free(cell, pool.faculty_at(position + offset))
                ),
                None,
            )
            if faculty is None:
                continue
            venue = next(
                (
                    pool.venue_at(position + offset)
                    for offset in range(len(pool.venues))
                    if occupancy.venue_free(cell, pool.venue_at(position + offset))
                ),
                None,
            )
            if venue is None:
                continue
            return cell, faculty, venue
        return None

    def _fixed_sessions(self, divisions: Sequence[int]) -> list[Session]:
        fixed: list[Session] = []
        for division in divisions:
            for reserved in self.grid.reserved_slots:
                fixed.append(
                    Session(
                        subject=reserved.activity,
                        kind="mandatory",
                        scope=BatchScope(division=division),
                        day=reserved.day,
                        slot=reserved.slot,
                        faculty=SENTINEL,
                        venue=reserved.venue,
                    )
                )
        fixed.append(
            Session(
                subject=HOLIDAY,
                kind="holiday",
                scope=None,
                day=HOLIDAY_DAY,
                slot=SENTINEL,
                faculty=SENTINEL,
                venue=SENTINEL,
            )
        )
        return fixed
