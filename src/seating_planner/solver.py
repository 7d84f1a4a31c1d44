"""
Greedy seating planner.

A run goes through these passes:
    1. every guest's table is cleared
    2. honorees (closeness rank 0) fill the head table in roster order
    3. the remaining guests are swept by closeness rank, then by kinship group
       (largest group first). Each group is extended with everyone it is
       chained to by must-sit-together preferences and placed at the first
       guest table with room for the whole extended group, provided nobody
       already there is a must-not-sit-together partner.
Groups that cannot be placed stay unseated. There is no backtracking.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from itertools import groupby
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

import networkx as nx

from .config import PlannerConfig
from .models import EventSnapshot, Guest, SeatingPreference, Table

logger = logging.getLogger(__name__)

ApartPairs = Set[FrozenSet[int]]


class SeatingError(ValueError):
    """Raised when a manual placement is rejected."""


class UnknownGuestError(SeatingError):
    pass


class UnknownTableError(SeatingError):
    pass


class TableFullError(SeatingError):
    pass


class SeatingConflictError(SeatingError):
    pass


# ----------------------------- preference indexes -----------------------------
def build_together_graph(preferences: Iterable[SeatingPreference]) -> nx.Graph:
    """Undirected graph of must-sit-together edges keyed by guest id."""
    graph = nx.Graph()
    for pref in preferences:
        if pref.must_sit_together:
            graph.add_edge(pref.source_id, pref.target_id)
    return graph


def build_apart_pairs(preferences: Iterable[SeatingPreference]) -> ApartPairs:
    """Set of unordered guest id pairs that must not share a table."""
    return {
        frozenset((pref.source_id, pref.target_id))
        for pref in preferences
        if not pref.must_sit_together
    }


def current_assignments(guests: Iterable[Guest]) -> Dict[int, Optional[int]]:
    return {g.id: g.table_id for g in guests}


def _rank_key(guest: Guest) -> Tuple[bool, int]:
    # Missing ranks sort before every integer rank
    return (guest.closeness_rank is not None, guest.closeness_rank or 0)


# ----------------------------- closure resolver -----------------------------
def get_extended_group(
    seed: Sequence[Guest],
    all_guests: Sequence[Guest],
    preferences: Union[Iterable[SeatingPreference], nx.Graph],
) -> List[Guest]:
    """Return every guest reachable from ``seed`` over must-sit-together edges.

    The seed itself is included. ``preferences`` may be the raw preference
    list or a graph from :func:`build_together_graph`. Only guests present in
    ``all_guests`` are returned; callers must not rely on the order.
    """
    graph = preferences if isinstance(preferences, nx.Graph) else build_together_graph(preferences)

    visited: Set[int] = {g.id for g in seed}
    queue = deque(g.id for g in seed)
    while queue:
        current = queue.popleft()
        if current not in graph:
            continue
        for partner in graph.neighbors(current):
            if partner not in visited:
                visited.add(partner)
                queue.append(partner)

    return [g for g in all_guests if g.id in visited]


# ----------------------------- conflict checker -----------------------------
def is_placement_safe(
    group: Sequence[Guest],
    table_id: Optional[int],
    preferences: Union[Iterable[SeatingPreference], ApartPairs],
    assignments: Mapping[int, Optional[int]],
) -> bool:
    """Return False if any group member must not sit with someone already at ``table_id``.

    ``assignments`` maps guest id to table id (or None) for the whole event.
    Group members already recorded at the table are not counted as occupants.
    """
    if table_id is None:
        return True
    apart = preferences if isinstance(preferences, (set, frozenset)) else build_apart_pairs(preferences)
    if not apart:
        return True

    group_ids = [g.id for g in group]
    in_group = set(group_ids)
    seated = [gid for gid, tid in assignments.items() if tid == table_id and gid not in in_group]

    for new_id in group_ids:
        for seated_id in seated:
            if frozenset((new_id, seated_id)) in apart:
                return False
    return True


# ----------------------------- result -----------------------------
@dataclass
class SeatingResult:
    """Outcome of one planner run."""

    snapshot: EventSnapshot
    seated_count: int

    @property
    def total_guests(self) -> int:
        return sum(1 for g in self.snapshot.guests if g.event_id == self.snapshot.event_id)

    @property
    def unseated_count(self) -> int:
        return self.total_guests - self.seated_count

    def assignments(self) -> Dict[int, Optional[int]]:
        return current_assignments(g for g in self.snapshot.guests if g.event_id == self.snapshot.event_id)


# ----------------------------- scheduler -----------------------------
class SeatingPlanner:
    """Deterministic greedy planner for one event."""

    def __init__(self, config: Optional[PlannerConfig] = None) -> None:
        self.config = config or PlannerConfig()
        # Inputs
        self.snapshot: Optional[EventSnapshot] = None
        self.guests: List[Guest] = []
        self.tables: List[Table] = []
        self.preferences: List[SeatingPreference] = []
        # Indexes
        self.together: nx.Graph = nx.Graph()
        self.apart: ApartPairs = set()

    def build(self, snapshot: EventSnapshot) -> None:
        """Store the event data, dropping rows that belong elsewhere."""
        event_id = snapshot.event_id
        self.snapshot = snapshot
        self.guests = [g for g in snapshot.guests if g.event_id == event_id]
        roster = {g.id for g in self.guests}

        self.tables = [t for t in snapshot.tables if t.event_id == event_id and t.capacity > 0]
        self.preferences = [
            p for p in snapshot.preferences if p.source_id in roster and p.target_id in roster
        ]

        dropped_guests = len(snapshot.guests) - len(self.guests)
        dropped_tables = len(snapshot.tables) - len(self.tables)
        dropped_prefs = len(snapshot.preferences) - len(self.preferences)
        if dropped_guests or dropped_tables or dropped_prefs:
            logger.debug(
                "Event %s: ignoring %d guests, %d tables, %d preferences outside the event",
                event_id, dropped_guests, dropped_tables, dropped_prefs,
            )

        self.together = build_together_graph(self.preferences)
        self.apart = build_apart_pairs(self.preferences)

    # ----------------------------- internals -----------------------------
    def _guest_tables(self) -> List[Table]:
        floor = self.config.guest_table_capacity_floor
        eligible = [
            t for t in self.tables
            if t.number > 0 and t.number != self.config.head_table_number and t.capacity > floor
        ]
        return sorted(eligible, key=lambda t: t.number)

    @staticmethod
    def _kinship_buckets(bucket: List[Guest]) -> List[List[Guest]]:
        by_kin: Dict[str, List[Guest]] = {}
        for guest in bucket:
            by_kin.setdefault(guest.kinship_key, []).append(guest)
        # sorted() is stable so equal sizes keep first-seen order
        return sorted(by_kin.values(), key=len, reverse=True)

    def _seat_honorees(self, guests: List[Guest], assignments: Dict[int, Optional[int]],
                       occupancy: Dict[int, int]) -> int:
        head = self.snapshot.head_table(self.config.head_table_number)
        if head is None or head.capacity <= 0:
            logger.debug("No head table numbered %d", self.config.head_table_number)
            return 0
        honorees = [g for g in guests if g.is_honoree][: head.capacity]
        for guest in honorees:
            guest.table_id = head.id
            assignments[guest.id] = head.id
        occupancy[head.id] += len(honorees)
        return len(honorees)

    def _place_group(self, group: List[Guest], tables: List[Table],
                     assignments: Dict[int, Optional[int]], occupancy: Dict[int, int]) -> Optional[Table]:
        """Seat ``group`` at the first table with room and no conflict."""
        size = len(group)
        for table in tables:
            if table.capacity - occupancy[table.id] < size:
                continue
            if is_placement_safe(group, table.id, self.apart, assignments):
                for guest in group:
                    guest.table_id = table.id
                    assignments[guest.id] = table.id
                occupancy[table.id] += size
                return table
            logger.debug("Group %s conflicts with table %d", [g.id for g in group], table.number)
            if not self.config.try_next_table:
                return None
        logger.debug("No table has %d free seats for group %s", size, [g.id for g in group])
        return None

    # ----------------------------- main solve -----------------------------
    def solve(self) -> SeatingResult:
        """Run the seating passes and return a new snapshot with assignments."""
        if self.snapshot is None:
            raise RuntimeError("build() must be called before solve()")

        # Fresh copies so repeated runs start from the same blank slate
        guests = sorted((replace(g, table_id=None) for g in self.guests), key=_rank_key)
        assignments: Dict[int, Optional[int]] = {g.id: None for g in guests}
        occupancy: Dict[int, int] = {t.id: 0 for t in self.tables}

        seated = self._seat_honorees(guests, assignments, occupancy)

        # Head-table guests leave the roster; sweep placements stay in it
        roster = [g for g in guests if g.table_id is None]
        tables = self._guest_tables()
        sweep = [g for g in roster if not g.is_honoree]
        for _, rank_group in groupby(sweep, key=_rank_key):
            remaining = [g for g in rank_group if g.table_id is None]
            for members in self._kinship_buckets(remaining):
                group = get_extended_group(members, roster, self.together)
                if any(g.table_id is not None for g in group):
                    logger.debug("Skipping group %s: a member is already seated", [g.id for g in group])
                    continue
                table = self._place_group(group, tables, assignments, occupancy)
                if table is not None:
                    seated += len(group)

        logger.info("Event %s: seated %d of %d guests", self.snapshot.event_id, seated, len(guests))

        planned = {g.id: g for g in guests}
        result_guests = [
            planned[g.id] if g.event_id == self.snapshot.event_id else replace(g)
            for g in self.snapshot.guests
        ]
        result = EventSnapshot(
            event_id=self.snapshot.event_id,
            guests=result_guests,
            tables=[replace(t) for t in self.snapshot.tables],
            preferences=[replace(p) for p in self.snapshot.preferences],
        )
        return SeatingResult(snapshot=result, seated_count=seated)


def auto_seat(snapshot: EventSnapshot, config: Optional[PlannerConfig] = None) -> SeatingResult:
    """Build a planner for ``snapshot`` and run it."""
    planner = SeatingPlanner(config)
    planner.build(snapshot)
    return planner.solve()


# ----------------------------- manual placement -----------------------------
def _event_guest(snapshot: EventSnapshot, guest_id: int) -> Guest:
    guest = snapshot.guest(guest_id)
    if guest is None or guest.event_id != snapshot.event_id:
        raise UnknownGuestError(f"Unknown guest for event {snapshot.event_id}: {guest_id}")
    return guest


def _with_table(snapshot: EventSnapshot, guest_id: int, table_id: Optional[int]) -> EventSnapshot:
    guests = [replace(g, table_id=table_id) if g.id == guest_id else replace(g) for g in snapshot.guests]
    return replace(snapshot, guests=guests, tables=list(snapshot.tables), preferences=list(snapshot.preferences))


def seat_guest(snapshot: EventSnapshot, guest_id: int, table_id: int) -> EventSnapshot:
    """Move one guest to ``table_id`` after checking capacity and conflicts.

    Returns a new snapshot; the input is left untouched.
    """
    guest = _event_guest(snapshot, guest_id)
    table = snapshot.table(table_id)
    if table is None or table.event_id != snapshot.event_id:
        raise UnknownTableError(f"Unknown table for event {snapshot.event_id}: {table_id}")

    seated_here = sum(1 for g in snapshot.guests if g.table_id == table_id and g.id != guest_id)
    if seated_here >= table.capacity:
        raise TableFullError(f"Table {table.number} is full ({table.capacity} seats).")

    if not is_placement_safe([guest], table_id, snapshot.preferences, current_assignments(snapshot.guests)):
        raise SeatingConflictError(
            f"Cannot seat {guest.name or guest.id} at table {table.number}: must-not-sit-together conflict."
        )
    return _with_table(snapshot, guest_id, table_id)


def unseat_guest(snapshot: EventSnapshot, guest_id: int) -> EventSnapshot:
    _event_guest(snapshot, guest_id)
    return _with_table(snapshot, guest_id, None)


# ----------------------------- reporting -----------------------------
def unseated_guests(snapshot: EventSnapshot) -> List[Guest]:
    return [g for g in snapshot.guests if g.event_id == snapshot.event_id and g.table_id is None]


def compute_table_occupancy(snapshot: EventSnapshot) -> List[Dict[str, object]]:
    """Seated count, capacity and members per table, ordered by table number."""
    stats = []
    tables = sorted((t for t in snapshot.tables if t.event_id == snapshot.event_id), key=lambda t: t.number)
    for table in tables:
        members = [g for g in snapshot.guests if g.table_id == table.id]
        stats.append({
            "table_id": table.id,
            "number": table.number,
            "capacity": table.capacity,
            "seated": len(members),
            "free": table.capacity - len(members),
            "members": [g.name or str(g.id) for g in members],
        })
    return stats


def find_violations(snapshot: EventSnapshot, config: Optional[PlannerConfig] = None) -> List[str]:
    """List every broken seating rule in ``snapshot``. Empty means consistent."""
    config = config or PlannerConfig()
    problems: List[str] = []
    guests = [g for g in snapshot.guests if g.event_id == snapshot.event_id]
    tables = {t.id: t for t in snapshot.tables if t.event_id == snapshot.event_id}
    roster = {g.id for g in guests}
    assignments = current_assignments(guests)

    counts: Dict[int, int] = {}
    for guest in guests:
        if guest.table_id is None:
            continue
        table = tables.get(guest.table_id)
        if table is None:
            problems.append(f"Guest {guest.id} is assigned to table {guest.table_id} outside the event")
            continue
        counts[table.id] = counts.get(table.id, 0) + 1
        if table.number == config.head_table_number and not guest.is_honoree:
            problems.append(f"Guest {guest.id} sits at the head table without closeness rank 0")

    for table_id, count in counts.items():
        table = tables[table_id]
        if count > table.capacity:
            problems.append(f"Table {table.number} seats {count} guests but has capacity {table.capacity}")

    prefs = [p for p in snapshot.preferences if p.source_id in roster and p.target_id in roster]
    for pair in sorted(build_apart_pairs(prefs), key=sorted):
        if len(pair) != 2:
            continue
        a, b = sorted(pair)
        if assignments[a] is not None and assignments[a] == assignments[b]:
            problems.append(f"Guests {a} and {b} must not sit together but share table {assignments[a]}")

    for component in nx.connected_components(build_together_graph(prefs)):
        placed = {assignments[gid] for gid in component if assignments[gid] is not None}
        if len(placed) > 1:
            problems.append(f"Must-sit-together group {sorted(component)} is split across tables {sorted(placed)}")
        elif placed and any(assignments[gid] is None for gid in component):
            unseated = sorted(gid for gid in component if assignments[gid] is None)
            problems.append(f"Must-sit-together group {sorted(component)} is partly seated; unseated: {unseated}")

    return problems
