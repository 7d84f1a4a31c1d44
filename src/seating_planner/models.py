"""Data models for the seating planner."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
import math


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    text = str(value).strip()
    return not text or text.lower() == "nan"


def parse_text(value: object) -> str:
    """Return a stripped string, or ``""`` for empty cells.

    ``pandas`` often provides ``float('nan')`` for missing values which is
    also treated as empty.
    """
    if _is_missing(value):
        return ""
    return str(value).strip()


def parse_optional_int(value: object) -> Optional[int]:
    """Parse an integer cell, returning ``None`` when empty."""
    if _is_missing(value):
        return None
    return int(float(value))


def parse_bool(value: object) -> bool:
    """Parse common truthy strings into bool."""
    return str(value).strip().lower() in {"true", "1", "yes", "y"}


@dataclass
class Guest:
    """Attendee of one event.

    ``closeness_rank`` 0 marks an honoree; lower ranks are seated earlier.
    ``table_id`` is ``None`` while the guest is unseated.
    """

    id: int
    event_id: int
    name: str = ""
    table_id: Optional[int] = None
    kinship_group: Optional[str] = None
    closeness_rank: Optional[int] = None
    dietary_restrictions: str = ""
    allergies: str = ""

    @property
    def is_honoree(self) -> bool:
        return self.closeness_rank == 0

    @property
    def kinship_key(self) -> str:
        # None and "" share one bucket
        return self.kinship_group or ""


@dataclass
class Table:
    """Dinner table definition. Number 0 is the head table."""

    id: int
    event_id: int
    number: int
    capacity: int


@dataclass
class SeatingPreference:
    """Unordered pairing between two guests.

    ``must_sit_together`` True means the pair must share a table, False means
    they must never share one.
    """

    source_id: int
    target_id: int
    must_sit_together: bool
    id: Optional[int] = None


@dataclass
class EventSnapshot:
    """Guests, tables and preferences for one event."""

    event_id: int
    guests: List[Guest] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)
    preferences: List[SeatingPreference] = field(default_factory=list)

    def guest(self, guest_id: int) -> Optional[Guest]:
        return next((g for g in self.guests if g.id == guest_id), None)

    def table(self, table_id: int) -> Optional[Table]:
        return next((t for t in self.tables if t.id == table_id), None)

    def head_table(self, head_table_number: int = 0) -> Optional[Table]:
        return next(
            (t for t in self.tables if t.event_id == self.event_id and t.number == head_table_number),
            None,
        )
