from __future__ import annotations

from dataclasses import replace
import logging
from typing import Sequence

from weekgrid.services.entities import Batch, BatchScope, Course, DivisionPlan, SessionRequirement, Venue

logger = logging.getLogger(__name__)

PLACEHOLDER_THEORY_COURSES: tuple[str, ...] = (
    "Engineering Mathematics",
    "Programming Fundamentals",
    "Digital Logic Design",
    "Engineering Physics",
    "Communication Skills",
)

PLACEHOLDER_LAB_COURSES: tuple[str, ...] = (
    "Programming Lab",
    "Digital Logic Lab",
    "Physics Lab",
    "Workshop Practice",
    "Communication Lab",
)


def synthetic_batch_name(branch: str, division: int, index: int) -> str:
    return f"{branch}{division}{index}"


class SessionCatalogBuilder:
    def __init__(
        self,
        *,
        theory_repetitions: int = 2,
        max_theory_courses: int = 5,
        max_lab_courses: int = 5,
        max_faculty: int = 25,
        max_venues: int = 20,
        synthetic_batch_count: int = 4,
    ) -> None:
        self.theory_repetitions = max(1, theory_repetitions)
        self.max_theory_courses = max_theory_courses
        self.max_lab_courses = max_lab_courses
        self.max_faculty = max_faculty
        self.max_venues = max_venues
        self.synthetic_batch_count = max(1, synthetic_batch_count)

    def bound_venues(self, venues: Sequence[Venue]) -> tuple[Venue, ...]:
        return tuple(venues[: self.max_venues])

    def prepare(self, plan: DivisionPlan) -> DivisionPlan:
        """Truncate inputs and fill in placeholder curriculum or batches where the division has none."""
        theory = plan.theory_courses[: self.max_theory_courses]
        labs = plan.lab_courses[: self.max_lab_courses]
        placeholder = False
        if not theory and not labs:
            placeholder = True
            theory = tuple(Course(name=name, kind="theory", division=plan.division) for name in PLACEHOLDER_THEORY_COURSES)
            labs = tuple(Course(name=name, kind="lab", division=plan.division) for name in PLACEHOLDER_LAB_COURSES)
            logger.warning(
                "Placeholder curriculum substituted | division=%s | branch=%s | theory=%s | labs=%s",
                plan.division,
                plan.branch,
                len(theory),
                len(labs),
            )

        batches = plan.batches
        if not batches:
            batches = tuple(
                Batch(identifier=synthetic_batch_name(plan.branch, plan.division, index), division=plan.division)
                for index in range(1, self.synthetic_batch_count + 1)
            )
            logger.info(
                "Synthetic batches created | division=%s | branch=%s | batches=%s",
                plan.division,
                plan.branch,
                ",".join(batch.identifier for batch in batches),
            )

        return replace(
            plan,
            theory_courses=tuple(theory),
            lab_courses=tuple(labs),
            faculty=plan.faculty[: self.max_faculty],
            batches=batches,
            placeholder_curriculum=plan.placeholder_curriculum or placeholder,
        )

    def build(self, plan: DivisionPlan) -> list[SessionRequirement]:
        requirements: list[SessionRequirement] = []
        for course in plan.theory_courses:
            requirements.append(
                SessionRequirement(
                    subject=course.name,
                    kind="theory",
                    scope=BatchScope(division=plan.division),
                    repetitions=course.weekly_sessions or self.theory_repetitions,
                    affinity=course.affinity,
                )
            )
        for course in plan.lab_courses:
            for batch in plan.batches:
                requirements.append(
                    SessionRequirement(
                        subject=course.name,
                        kind="lab",
                        scope=BatchScope(division=plan.division, batch=batch.identifier),
                        repetitions=1,
                        affinity=course.affinity,
                    )
                )
        return requirements
