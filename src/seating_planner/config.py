"""Planner tunables."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlannerConfig:
    """Options for :class:`seating_planner.solver.SeatingPlanner`.

    head_table_number: table number reserved for honorees.
    guest_table_capacity_floor: guest tables need ``capacity > floor`` to be
        filled by the priority sweep.
    try_next_table: keep scanning capacity-qualifying tables after a
        must-not-sit-together rejection instead of giving up on the group.
    """

    head_table_number: int = 0
    guest_table_capacity_floor: int = 0
    try_next_table: bool = False
