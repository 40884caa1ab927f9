"""Turn free-form dataset rows into typed scheduling records.

Spreadsheet exports arrive with inconsistent column names ("Course Name",
"course", "Subject", ...). Every lookup goes through an alias table so the
allocator only ever sees :mod:`weekgrid.services.entities` types with explicit
categories and roles.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Sequence

from weekgrid.schemas.generator import DivisionDataset, RawRecord
from weekgrid.services.entities import (
    Batch,
    Course,
    DivisionPlan,
    FacultyMember,
    FacultyRole,
    SessionKind,
    Venue,
    VenueCategory,
)

logger = logging.getLogger(__name__)

COURSE_NAME_KEYS = ("course name", "course title", "course", "subject name", "subject", "name", "title")
COURSE_SUBJECT_KEYS = ("subject tag", "subject area", "discipline", "tag")
FACULTY_NAME_KEYS = ("faculty name", "faculty", "teacher name", "teacher", "instructor", "name")
FACULTY_SUBJECT_KEYS = ("subject", "course name", "course", "specialization", "specialisation", "expertise")
FACULTY_ROLE_KEYS = ("role", "type", "faculty type", "designation")
VENUE_NAME_KEYS = ("venue", "venue name", "venue id", "room", "room no", "room number", "classroom", "name", "id")
VENUE_CATEGORY_KEYS = ("category", "type", "venue type", "room type")
BATCH_NAME_KEYS = ("batch", "batch name", "batch id", "batch no", "class", "name", "id")
DIVISION_KEYS = ("division", "div")
LOAD_COURSE_KEYS = ("course name", "course", "subject", "name")
LOAD_SESSION_KEYS = ("sessions per week", "lectures", "lecture", "l", "theory", "total")

MAX_WEEKLY_SESSIONS = 6

SHARED_DIVISION_VALUES = {"", "shared", "all", "common", "*", "-"}

_KEY_PATTERN = re.compile(r"[^a-z0-9]+")


def normalize_key(value: str) -> str:
    return _KEY_PATTERN.sub(" ", str(value).lower()).strip()


def pick(record: Mapping[str, Any], aliases: Sequence[str]) -> str | None:
    normalized = {normalize_key(key): value for key, value in record.items()}
    for alias in aliases:
        value = normalized.get(alias)
        if value is None:
            continue
        text = _cell_text(value)
        if text:
            return text
    return None


def _cell_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


def infer_venue_category(name: str, declared: str | None = None) -> VenueCategory:
    if declared:
        hint = declared.strip().lower()
        if "lab" in hint:
            return VenueCategory.lab
        if any(token in hint for token in ("shared", "library", "common")):
            return VenueCategory.shared
        if any(token in hint for token in ("theory", "lecture", "class", "room", "hall")):
            return VenueCategory.theory

    stripped = name.strip()
    lowered = stripped.lower()
    if "library" in lowered:
        return VenueCategory.shared
    if stripped.startswith(("IC", "A")) or any(token in lowered for token in ("lab", "comp", "data")):
        return VenueCategory.lab
    if stripped.startswith(("H", "D")) or lowered.startswith("room"):
        return VenueCategory.theory
    return VenueCategory.theory


def infer_faculty_role(record: Mapping[str, Any]) -> FacultyRole:
    declared = pick(record, FACULTY_ROLE_KEYS)
    if declared and "lab" in declared.lower():
        return "lab"
    subject = pick(record, FACULTY_SUBJECT_KEYS)
    if subject and re.search(r"\blab\b", subject.lower()):
        return "lab"
    return "theory"


def parse_division(value: str | None, default: int | None) -> int | None:
    if value is None:
        return default
    if value.strip().lower() in SHARED_DIVISION_VALUES:
        return None
    parsed = _parse_int(value)
    return parsed if parsed is not None else default


def parse_load_targets(records: Iterable[RawRecord]) -> dict[str, int]:
    targets: dict[str, int] = {}
    for record in records:
        name = pick(record, LOAD_COURSE_KEYS)
        sessions = _parse_int(pick(record, LOAD_SESSION_KEYS))
        if not name or sessions is None or sessions <= 0:
            continue
        targets[name.lower()] = min(sessions, MAX_WEEKLY_SESSIONS)
    return targets


def parse_courses(
    records: Iterable[RawRecord],
    *,
    kind: SessionKind,
    division: int,
    load_targets: Mapping[str, int] | None = None,
) -> list[Course]:
    targets = load_targets or {}
    courses: list[Course] = []
    seen: set[str] = set()
    for record in records:
        name = pick(record, COURSE_NAME_KEYS)
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        courses.append(
            Course(
                name=name,
                kind=kind,
                division=division,
                subject=pick(record, COURSE_SUBJECT_KEYS),
                weekly_sessions=targets.get(name.lower()) if kind == "theory" else None,
            )
        )
    return courses


def parse_faculty(records: Iterable[RawRecord], *, division: int | None) -> list[FacultyMember]:
    members: list[FacultyMember] = []
    for record in records:
        name = pick(record, FACULTY_NAME_KEYS)
        if not name:
            continue
        members.append(
            FacultyMember(
                name=name,
                subject=pick(record, FACULTY_SUBJECT_KEYS) or "",
                role=infer_faculty_role(record),
                division=parse_division(pick(record, DIVISION_KEYS), division),
            )
        )
    return members


def parse_venues(records: Iterable[RawRecord]) -> list[Venue]:
    venues: list[Venue] = []
    seen: set[str] = set()
    for record in records:
        name = pick(record, VENUE_NAME_KEYS)
        if not name or name in seen:
            continue
        seen.add(name)
        venues.append(Venue(identifier=name, category=infer_venue_category(name, pick(record, VENUE_CATEGORY_KEYS))))
    return venues


def parse_batches(records: Iterable[RawRecord], *, division: int) -> list[Batch]:
    batches: list[Batch] = []
    seen: set[str] = set()
    for record in records:
        name = pick(record, BATCH_NAME_KEYS)
        if not name or name in seen:
            continue
        seen.add(name)
        batches.append(Batch(identifier=name, division=division))
    return batches


def build_division_plan(dataset: DivisionDataset, *, branch: str) -> DivisionPlan:
    division = dataset.division
    targets = parse_load_targets(dataset.load_distribution)
    plan = DivisionPlan(
        division=division,
        branch=dataset.branch or branch,
        theory_courses=tuple(parse_courses(dataset.theory_courses, kind="theory", division=division, load_targets=targets)),
        lab_courses=tuple(parse_courses(dataset.lab_courses, kind="lab", division=division)),
        faculty=tuple(parse_faculty(dataset.faculty, division=division)),
        batches=tuple(parse_batches(dataset.batches, division=division)),
    )
    logger.info(
        "Division dataset ingested | division=%s | branch=%s | theory=%s | labs=%s | faculty=%s | batches=%s | load_targets=%s",
        division,
        plan.branch,
        len(plan.theory_courses),
        len(plan.lab_courses),
        len(plan.faculty),
        len(plan.batches),
        len(targets),
    )
    return plan
