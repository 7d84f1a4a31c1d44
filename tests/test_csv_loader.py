import io
import pathlib
import sys

import pytest

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seating_planner import csv_loader
from seating_planner.models import EventSnapshot, Guest, Table


def test_load_guests_parses_optional_cells():
    csv_text = io.StringIO(
        "id,event_id,name,kinship_group,closeness_rank,allergies\n"
        "1,4,Alice Smith,01,0,\n"
        "2,4,Bob Jones,,2,peanuts\n"
    )

    guests = csv_loader.load_guests(csv_text)

    alice, bob = guests
    assert alice.id == 1 and alice.event_id == 4
    assert alice.kinship_group == "01"
    assert alice.closeness_rank == 0
    assert alice.table_id is None
    assert bob.kinship_group is None
    assert bob.allergies == "peanuts"
    assert bob.dietary_restrictions == ""


def test_load_guests_uses_default_event():
    guests = csv_loader.load_guests(io.StringIO("id,name\n1,Ann\n"), default_event_id=9)
    assert guests[0].event_id == 9


def test_load_guests_without_event_fails():
    with pytest.raises(ValueError):
        csv_loader.load_guests(io.StringIO("id,name\n1,Ann\n"))


def test_duplicate_guest_id_rejected():
    with pytest.raises(ValueError, match="duplicate"):
        csv_loader.load_guests(io.StringIO("id,event_id,name\n1,1,Ann\n1,1,Bo\n"))


def test_missing_columns_rejected():
    with pytest.raises(ValueError, match="missing columns: capacity"):
        csv_loader.load_tables(io.StringIO("id,event_id,number\n1,1,0\n"))


def test_load_tables():
    tables = csv_loader.load_tables(io.StringIO("id,event_id,number,capacity\n7,1,0,2\n8,1,1,10\n"))
    assert [(t.id, t.number, t.capacity) for t in tables] == [(7, 0, 2), (8, 1, 10)]


def test_load_preferences_validates_guests():
    csv_text = "source_id,target_id,must_sit_together\n1,2,true\n2,3,false\n"

    prefs = csv_loader.load_preferences(io.StringIO(csv_text), guest_ids={1, 2, 3})
    assert [p.must_sit_together for p in prefs] == [True, False]

    with pytest.raises(ValueError, match="unknown guest"):
        csv_loader.load_preferences(io.StringIO(csv_text), guest_ids={1, 2})


def test_assignments_frame_leaves_unseated_empty():
    snap = EventSnapshot(
        event_id=1,
        guests=[Guest(id=1, event_id=1, name="A", table_id=5), Guest(id=2, event_id=1, name="B")],
        tables=[Table(id=5, event_id=1, number=3, capacity=4)],
    )

    frame = csv_loader.assignments_frame(snap)

    assert frame["table_number"].tolist()[0] == 3
    assert frame["table_id"].isna().tolist() == [False, True]
