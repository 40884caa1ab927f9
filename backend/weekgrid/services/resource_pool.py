from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

from weekgrid.services.entities import FacultyMember, SessionKind, Venue, VenueCategory

logger = logging.getLogger(__name__)

SYNTHETIC_FACULTY_PREFIX: dict[SessionKind, str] = {"lab": "Lab Assistant", "theory": "Guest Faculty"}
SYNTHETIC_VENUE_PREFIX: dict[SessionKind, str] = {"lab": "Lab-", "theory": "Room-"}


@dataclass(frozen=True)
class CandidatePools:
    faculty: tuple[str, ...]
    venues: tuple[str, ...]

    def faculty_at(self, position: int) -> str:
        return self.faculty[position % len(self.faculty)]

    def venue_at(self, position: int) -> str:
        return self.venues[position % len(self.venues)]


class ResourcePool:
    def __init__(self, faculty: Sequence[FacultyMember], venues: Sequence[Venue]) -> None:
        self.faculty = tuple(faculty)
        self.venues = tuple(venues)
        self._venues_by_category: dict[VenueCategory, tuple[str, ...]] = {
            category: tuple(venue.identifier for venue in self.venues if venue.category == category)
            for category in VenueCategory
        }

    @property
    def shared_venues(self) -> frozenset[str]:
        return frozenset(self._venues_by_category[VenueCategory.shared])

    def roster_for(self, division: int) -> tuple[FacultyMember, ...]:
        return tuple(member for member in self.faculty if member.serves(division))

    def faculty_for(
        self,
        subject: str,
        kind: SessionKind,
        division: int,
        *,
        required: int = 1,
        affinity: str | None = None,
    ) -> tuple[str, ...]:
        token = _first_token(affinity or subject)
        roster = self.roster_for(division)
        matched = [
            member.name
            for member in roster
            if member.role == kind and token and token in (member.subject or member.name).lower()
        ]
        if not matched:
            matched = [member.name for member in roster[len(roster) // 2 :]]
            logger.info(
                "Faculty affinity fallback | subject=%s | kind=%s | division=%s | roster=%s | fallback=%s",
                subject,
                kind,
                division,
                len(roster),
                len(matched),
            )
        return _pad(
            _dedupe(matched),
            required=required,
            make=lambda index: f"{SYNTHETIC_FACULTY_PREFIX[kind]} {index}",
            label="faculty",
            subject=subject,
        )

    def venues_for(self, kind: SessionKind, *, required: int = 1, subject: str = "") -> tuple[str, ...]:
        category = VenueCategory.lab if kind == "lab" else VenueCategory.theory
        return _pad(
            list(self._venues_by_category[category]),
            required=required,
            make=lambda index: f"{SYNTHETIC_VENUE_PREFIX[kind]}{index}",
            label="venue",
            subject=subject,
        )

    def candidates(
        self,
        subject: str,
        kind: SessionKind,
        division: int,
        *,
        required: int = 1,
        affinity: str | None = None,
    ) -> CandidatePools:
        required = max(1, required)
        return CandidatePools(
            faculty=self.faculty_for(subject, kind, division, required=required, affinity=affinity),
            venues=self.venues_for(kind, required=required, subject=subject),
        )


def _first_token(subject: str) -> str:
    parts = subject.strip().split()
    return parts[0].lower() if parts else ""


def _dedupe(names: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        unique.append(name)
    return unique


def _pad(names: list[str], *, required: int, make, label: str, subject: str) -> tuple[str, ...]:
    if len(names) >= required:
        return tuple(names)
    padded = list(names)
    for index in range(len(names) + 1, required + 1):
        padded.append(make(index))
    logger.info(
        "Candidate pool synthesized | subject=%s | resource=%s | real=%s | synthesized=%s",
        subject,
        label,
        len(names),
        required - len(names),
    )
    return tuple(padded)
