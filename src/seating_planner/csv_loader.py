"""CSV loading and writing for event snapshots."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any, Iterable, List, Optional

import pandas as pd

from .models import (
    EventSnapshot,
    Guest,
    SeatingPreference,
    Table,
    parse_bool,
    parse_optional_int,
    parse_text,
)

logger = logging.getLogger(__name__)

GUEST_COLUMNS = ["id", "name"]
TABLE_COLUMNS = ["id", "number", "capacity"]
PREFERENCE_COLUMNS = ["source_id", "target_id", "must_sit_together"]


def _read(path: Path | str | IO[Any], required: List[str], label: str) -> pd.DataFrame:
    # Read everything as text so labels like "01" survive
    df = pd.read_csv(path, dtype=str)
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{label}: missing columns: {', '.join(missing)}")
    return df


def _event_of(row: pd.Series, default_event_id: Optional[int], label: str) -> int:
    event_id = parse_optional_int(row.get("event_id"))
    if event_id is None:
        event_id = default_event_id
    if event_id is None:
        raise ValueError(f"{label}: row {row.get('id')} has no event_id and no default was given")
    return event_id


def load_guests(path: Path | str | IO[Any], default_event_id: Optional[int] = None) -> List[Guest]:
    """Load guests from ``guests.csv``.

    Rejects duplicate guest ids.
    """
    df = _read(path, GUEST_COLUMNS, "guests.csv")
    guests: List[Guest] = []
    seen: set[int] = set()
    for _, row in df.iterrows():
        guest_id = int(float(row["id"]))
        if guest_id in seen:
            raise ValueError(f"guests.csv: duplicate guest id {guest_id}")
        seen.add(guest_id)
        guests.append(
            Guest(
                id=guest_id,
                event_id=_event_of(row, default_event_id, "guests.csv"),
                name=parse_text(row.get("name")),
                table_id=parse_optional_int(row.get("table_id")),
                kinship_group=parse_text(row.get("kinship_group")) or None,
                closeness_rank=parse_optional_int(row.get("closeness_rank")),
                dietary_restrictions=parse_text(row.get("dietary_restrictions")),
                allergies=parse_text(row.get("allergies")),
            )
        )
    return guests


def load_tables(path: Path | str | IO[Any], default_event_id: Optional[int] = None) -> List[Table]:
    """Load table definitions."""
    df = _read(path, TABLE_COLUMNS, "tables.csv")
    tables: List[Table] = []
    for _, row in df.iterrows():
        tables.append(
            Table(
                id=int(float(row["id"])),
                event_id=_event_of(row, default_event_id, "tables.csv"),
                number=int(float(row["number"])),
                capacity=int(float(row["capacity"])),
            )
        )
    return tables


def load_preferences(
    path: Path | str | IO[Any], guest_ids: Optional[Iterable[int]] = None
) -> List[SeatingPreference]:
    """Load pairing preferences.

    If ``guest_ids`` is provided it validates that both endpoints exist.
    """
    df = _read(path, PREFERENCE_COLUMNS, "preferences.csv")
    known = set(guest_ids) if guest_ids is not None else None
    preferences: List[SeatingPreference] = []
    for _, row in df.iterrows():
        a = int(float(row["source_id"]))
        b = int(float(row["target_id"]))
        if known is not None and (a not in known or b not in known):
            raise ValueError(f"Preference references unknown guest: {a}, {b}")
        preferences.append(
            SeatingPreference(
                source_id=a,
                target_id=b,
                must_sit_together=parse_bool(row["must_sit_together"]),
                id=parse_optional_int(row.get("id")),
            )
        )
    return preferences


def load_event(
    guests_path: Path | str | IO[Any],
    tables_path: Path | str | IO[Any],
    preferences_path: Path | str | IO[Any],
    event_id: int,
) -> EventSnapshot:
    """Load the three files and keep only what belongs to ``event_id``.

    Files may hold several events; rows without an ``event_id`` column are
    taken to belong to ``event_id``.
    """
    guests = [g for g in load_guests(guests_path, event_id) if g.event_id == event_id]
    tables = [t for t in load_tables(tables_path, event_id) if t.event_id == event_id]
    roster = {g.id for g in guests}
    all_prefs = load_preferences(preferences_path)
    preferences = [p for p in all_prefs if p.source_id in roster and p.target_id in roster]
    if len(preferences) != len(all_prefs):
        logger.debug("Event %s: skipped %d preferences for other guests", event_id, len(all_prefs) - len(preferences))
    logger.info("Loaded event %s: %d guests, %d tables, %d preferences",
                event_id, len(guests), len(tables), len(preferences))
    return EventSnapshot(event_id=event_id, guests=guests, tables=tables, preferences=preferences)


def assignments_frame(snapshot: EventSnapshot) -> pd.DataFrame:
    """One row per event guest: id, name, table id and table number."""
    number_by_table = {t.id: t.number for t in snapshot.tables}
    guests = [g for g in snapshot.guests if g.event_id == snapshot.event_id]
    return pd.DataFrame({
        "guest_id": pd.Series([g.id for g in guests], dtype="Int64"),
        "name": [g.name for g in guests],
        "table_id": pd.Series([g.table_id for g in guests], dtype="Int64"),
        "table_number": pd.Series([number_by_table.get(g.table_id) for g in guests], dtype="Int64"),
    })


def write_assignments(path: Path | str, snapshot: EventSnapshot) -> Path:
    """Persist the table of every guest. Unseated guests get empty cells."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    assignments_frame(snapshot).to_csv(path, index=False)
    return path
