"""Command line interface for the seating planner."""
from __future__ import annotations

import argparse
import csv
from pathlib import Path
from typing import Sequence

from .config import PlannerConfig
from .csv_loader import load_event, write_assignments
from .logging_config import configure_logging
from .solver import auto_seat, compute_table_occupancy, find_violations, unseated_guests


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Automatic event table seating")
    parser.add_argument("--guests", required=True, help="Path to guests.csv")
    parser.add_argument("--tables", required=True, help="Path to tables.csv")
    parser.add_argument("--preferences", required=True, help="Path to preferences.csv")
    parser.add_argument("--event", type=int, required=True, help="Event id to seat.")
    parser.add_argument("--head-table-number", type=int, default=0,
                        help="Table number reserved for honorees.")
    parser.add_argument("--capacity-floor", type=int, default=0,
                        help="Guest tables need more seats than this to be filled.")
    parser.add_argument("--try-next-table", action="store_true",
                        help="After a conflict, keep looking at later tables for the same group.")
    parser.add_argument("--out-assignments", type=Path,
                        help="Write assignments CSV: guest_id,name,table_id,table_number.")
    parser.add_argument("--out-report", type=Path,
                        help="Write per-table occupancy report CSV.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level, e.g. INFO or DEBUG.")
    parser.add_argument("--log-file", help="Also write logs to this file.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by ``python -m seating_planner.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    snapshot = load_event(args.guests, args.tables, args.preferences, args.event)
    config = PlannerConfig(
        head_table_number=args.head_table_number,
        guest_table_capacity_floor=args.capacity_floor,
        try_next_table=args.try_next_table,
    )
    result = auto_seat(snapshot, config)
    planned = result.snapshot

    # Print simple assignments
    number_by_table = {t.id: t.number for t in planned.tables}
    for guest in planned.guests:
        if guest.table_id is not None:
            print(f"{guest.name or guest.id},{number_by_table[guest.table_id]}")

    if args.out_assignments:
        write_assignments(args.out_assignments, planned)

    stats = compute_table_occupancy(planned)
    for s in stats:
        print(f"[REPORT] table={s['number']} seated={s['seated']}/{s['capacity']} free={s['free']}")
    for guest in unseated_guests(planned):
        print(f"[UNSEATED] {guest.name or guest.id}")
    print(f"[TOTAL] seated {result.seated_count} of {result.total_guests}")

    for problem in find_violations(planned, config):
        print(f"[VIOLATION] {problem}")

    if args.out_report:
        args.out_report.parent.mkdir(parents=True, exist_ok=True)
        with args.out_report.open("w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=["table", "capacity", "seated", "free", "members"])
            w.writeheader()
            for s in stats:
                w.writerow({
                    "table": s["number"],
                    "capacity": s["capacity"],
                    "seated": s["seated"],
                    "free": s["free"],
                    "members": "|".join(s["members"]),
                })

    return 0 if result.unseated_count == 0 else 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
