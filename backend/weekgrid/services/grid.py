from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from weekgrid.core.exceptions import ConfigurationError

DAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

TIME_SLOTS: tuple[str, ...] = (
    "09:00-10:00",
    "10:00-11:00",
    "11:00-12:00",
    "12:00-13:00",
    "14:00-15:00",
    "15:00-16:00",
)

# Saturday runs a half day.
ACTIVE_SLOT_COUNTS: dict[str, int] = {"Saturday": 3}

HOLIDAY_DAY = "Sunday"

LIBRARY = "Library"
PROJECT = "Project Work"
LIBRARY_VENUE = "Library"
PROJECT_VENUE = "Project Lab"


@dataclass(frozen=True)
class GridCell:
    day_index: int
    slot_index: int
    day: str
    slot: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.day, self.slot)


@dataclass(frozen=True)
class ReservedSlot:
    day: str
    slot: str
    activity: str
    venue: str


DEFAULT_RESERVED_SLOTS: tuple[ReservedSlot, ...] = (
    ReservedSlot(day="Tuesday", slot="15:00-16:00", activity=LIBRARY, venue=LIBRARY_VENUE),
    ReservedSlot(day="Thursday", slot="14:00-15:00", activity=LIBRARY, venue=LIBRARY_VENUE),
    ReservedSlot(day="Wednesday", slot="15:00-16:00", activity=PROJECT, venue=PROJECT_VENUE),
    ReservedSlot(day="Friday", slot="15:00-16:00", activity=PROJECT, venue=PROJECT_VENUE),
)


class ScheduleGrid:
    def __init__(
        self,
        *,
        days: Sequence[str] = DAYS,
        slots: Sequence[str] = TIME_SLOTS,
        active_slot_counts: dict[str, int] | None = None,
        reserved_slots: Iterable[ReservedSlot] = DEFAULT_RESERVED_SLOTS,
    ) -> None:
        if not days or not slots:
            raise ConfigurationError("Schedule grid needs at least one day and one time slot")
        self.days = tuple(days)
        self.slots = tuple(slots)
        counts = ACTIVE_SLOT_COUNTS if active_slot_counts is None else active_slot_counts
        self.active_slot_counts = {
            day: max(0, min(len(self.slots), counts.get(day, len(self.slots)))) for day in self.days
        }
        self._cells = tuple(
            GridCell(day_index=day_index, slot_index=slot_index, day=day, slot=self.slots[slot_index])
            for day_index, day in enumerate(self.days)
            for slot_index in range(self.active_slot_counts[day])
        )
        active_keys = {cell.key for cell in self._cells}

        self.reserved_slots = tuple(reserved_slots)
        self._reserved_by_key: dict[tuple[str, str], ReservedSlot] = {}
        for reserved in self.reserved_slots:
            key = (reserved.day, reserved.slot)
            if key not in active_keys:
                raise ConfigurationError(f"Reserved slot {reserved.day} {reserved.slot} is outside the active grid")
            if key in self._reserved_by_key:
                raise ConfigurationError(f"Slot {reserved.day} {reserved.slot} is reserved twice")
            self._reserved_by_key[key] = reserved

        self._open_cells = tuple(cell for cell in self._cells if cell.key not in self._reserved_by_key)

    def cells(self) -> tuple[GridCell, ...]:
        return self._cells

    def open_cells(self) -> tuple[GridCell, ...]:
        """Unreserved active cells in day-major, slot-minor order."""
        return self._open_cells

    def reserved_at(self, day: str, slot: str) -> ReservedSlot | None:
        return self._reserved_by_key.get((day, slot))
