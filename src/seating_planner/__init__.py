"""Seating planner package."""
from .config import PlannerConfig
from .models import EventSnapshot, Guest, SeatingPreference, Table
from .csv_loader import (
    load_guests,
    load_preferences,
    load_tables,
    load_event,
    write_assignments,
)
from .solver import (
    SeatingConflictError,
    SeatingError,
    SeatingPlanner,
    SeatingResult,
    TableFullError,
    UnknownGuestError,
    UnknownTableError,
    auto_seat,
    find_violations,
    get_extended_group,
    is_placement_safe,
    seat_guest,
    unseat_guest,
    unseated_guests,
)

__all__ = [
    "PlannerConfig",
    "EventSnapshot",
    "Guest",
    "SeatingPreference",
    "Table",
    "load_guests",
    "load_preferences",
    "load_tables",
    "load_event",
    "write_assignments",
    "SeatingConflictError",
    "SeatingError",
    "SeatingPlanner",
    "SeatingResult",
    "TableFullError",
    "UnknownGuestError",
    "UnknownTableError",
    "auto_seat",
    "find_violations",
    "get_extended_group",
    "is_placement_safe",
    "seat_guest",
    "unseat_guest",
    "unseated_guests",
]
