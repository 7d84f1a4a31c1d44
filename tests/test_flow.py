import pathlib
import sys

import pandas as pd

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seating_planner import csv_loader, solver
from seating_planner.config import PlannerConfig

DATA_DIR = pathlib.Path(__file__).parent / "data"


def load():
    return csv_loader.load_event(
        DATA_DIR / "guests.csv", DATA_DIR / "tables.csv", DATA_DIR / "preferences.csv", event_id=1
    )


def test_full_flow(tmp_path):
    snapshot = load()
    result = solver.auto_seat(snapshot)
    planned = result.snapshot
    seats = result.assignments()

    # event 2 rows were filtered by the loader
    assert result.total_guests == 12
    assert result.seated_count == 11
    assert [g.name for g in solver.unseated_guests(planned)] == ["Lou"]

    # honorees at the head table
    assert seats[1] == seats[2] == 100

    # Finn was rejected next to Carla, then seated with Gia on the next rank pass
    assert seats[3] == seats[4] == seats[5] == 101
    assert seats[8] == seats[9] == 101
    assert seats[6] == seats[7] == 102
    assert seats[10] == seats[11] == 102

    # table capacities respected and no rule broken
    for s in solver.compute_table_occupancy(planned):
        assert s["seated"] <= s["capacity"]
    assert solver.find_violations(planned) == []

    out = csv_loader.write_assignments(tmp_path / "out" / "assignments.csv", planned)
    written = pd.read_csv(out)
    assert list(written.columns) == ["guest_id", "name", "table_id", "table_number"]
    assert len(written) == 12
    lou = written[written["name"] == "Lou"].iloc[0]
    assert pd.isna(lou["table_id"])
    carla = written[written["name"] == "Carla"].iloc[0]
    assert carla["table_number"] == 1


def test_flow_is_repeatable():
    first = solver.auto_seat(load())
    second = solver.auto_seat(first.snapshot)
    assert first.assignments() == second.assignments()


def test_flow_with_next_table_retry():
    result = solver.auto_seat(load(), PlannerConfig(try_next_table=True))
    seats = result.assignments()
    assert seats[6] == seats[7] == 102
    assert result.seated_count == 11
