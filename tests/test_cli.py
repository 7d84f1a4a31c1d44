import csv
import logging
import pathlib
import sys

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seating_planner import cli
from seating_planner.logging_config import configure_logging

DATA_DIR = pathlib.Path(__file__).parent / "data"


def run(tmp_path, *extra):
    argv = [
        "--guests", str(DATA_DIR / "guests.csv"),
        "--tables", str(DATA_DIR / "tables.csv"),
        "--preferences", str(DATA_DIR / "preferences.csv"),
        "--event", "1",
        "--out-assignments", str(tmp_path / "assignments.csv"),
        "--out-report", str(tmp_path / "report.csv"),
        *extra,
    ]
    return cli.main(argv)


def test_cli_writes_outputs(tmp_path, capsys):
    code = run(tmp_path)
    out = capsys.readouterr().out

    # Lou cannot be seated
    assert code == 1
    assert "Ana,0" in out
    assert "[UNSEATED] Lou" in out
    assert "[TOTAL] seated 11 of 12" in out
    assert "[VIOLATION]" not in out

    with (tmp_path / "report.csv").open() as f:
        rows = list(csv.DictReader(f))
    assert [r["table"] for r in rows] == ["0", "1", "2"]
    assert rows[1]["seated"] == "5"
    assert (tmp_path / "assignments.csv").exists()


def test_cli_capacity_floor(tmp_path, capsys):
    run(tmp_path, "--capacity-floor", "4")
    out = capsys.readouterr().out
    # only table 1 (5 seats) is still a guest table
    assert "table=2 seated=0/4" in out


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "run.log"
    logger = configure_logging("DEBUG", str(log_file))

    logging.getLogger("seating_planner.solver").debug("placed group")

    for handler in logger.handlers:
        handler.flush()
    assert logger.level == logging.DEBUG
    assert "placed group" in log_file.read_text()
    logger.handlers.clear()
