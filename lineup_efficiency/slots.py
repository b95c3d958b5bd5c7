"""
Roster slot and position taxonomy for weekly lineups.

Two independent enumerations describe every roster line:

- ``RosterSlot``: where the manager placed the player for the week
- ``Position``: the player's natural position, regardless of placement

Keeping both on the record means a RB started in FLEX is never confused
with a RB started in a RB slot. This module also owns the lineup template
(slot quotas), the slot-eligibility rules and the ESPN numeric code tables.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple, Union


class Position(Enum):
    """Natural player positions."""
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"
    DST = "DEF/ST"


class RosterSlot(Enum):
    """Lineup slots a manager can place a player in."""
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    FLEX = "FLEX"
    K = "K"
    DST = "DEF/ST"
    BENCH = "BENCH"
    INJURED_RESERVE = "INJURED_RESERVE"


POSITION_ALIASES: Dict[str, Position] = {
    "QB": Position.QB,
    "RB": Position.RB,
    "WR": Position.WR,
    "TE": Position.TE,
    "K": Position.K,
    "DEF/ST": Position.DST,
    "D/ST": Position.DST,
    "DST": Position.DST,
    "DEF": Position.DST,
}

SLOT_ALIASES: Dict[str, RosterSlot] = {
    "QB": RosterSlot.QB,
    "RB": RosterSlot.RB,
    "WR": RosterSlot.WR,
    "TE": RosterSlot.TE,
    "FLEX": RosterSlot.FLEX,
    "RB/WR/TE": RosterSlot.FLEX,
    "K": RosterSlot.K,
    "DEF/ST": RosterSlot.DST,
    "D/ST": RosterSlot.DST,
    "DST": RosterSlot.DST,
    "DEF": RosterSlot.DST,
    "BENCH": RosterSlot.BENCH,
    "BE": RosterSlot.BENCH,
    "INJURED_RESERVE": RosterSlot.INJURED_RESERVE,
    "IR": RosterSlot.INJURED_RESERVE,
}

NON_STARTING_SLOTS = frozenset({RosterSlot.BENCH, RosterSlot.INJURED_RESERVE})

# Fixed slots are filled by exactly one natural position
FIXED_SLOT_POSITIONS: Dict[RosterSlot, Position] = {
    RosterSlot.QB: Position.QB,
    RosterSlot.RB: Position.RB,
    RosterSlot.WR: Position.WR,
    RosterSlot.TE: Position.TE,
    RosterSlot.K: Position.K,
    RosterSlot.DST: Position.DST,
}

# ESPN lineup_slot_id values
ESPN_SLOT_IDS: Dict[int, RosterSlot] = {
    0: RosterSlot.QB,
    2: RosterSlot.RB,
    4: RosterSlot.WR,
    6: RosterSlot.TE,
    16: RosterSlot.DST,
    17: RosterSlot.K,
    20: RosterSlot.BENCH,
    21: RosterSlot.INJURED_RESERVE,
    23: RosterSlot.FLEX,
}

# ESPN default_pos_id values
ESPN_POSITION_IDS: Dict[int, Position] = {
    1: Position.QB,
    2: Position.RB,
    3: Position.WR,
    4: Position.TE,
    16: Position.DST,
    17: Position.K,
}


def parse_position(value: Union[str, Position, None]) -> Optional[Position]:
    """Resolve a position label (or alias) to a Position, None if unknown."""
    if isinstance(value, Position):
        return value
    if not isinstance(value, str):
        return None
    return POSITION_ALIASES.get(value.strip().upper())


def parse_roster_slot(value: Union[str, RosterSlot, None]) -> Optional[RosterSlot]:
    """Resolve a slot label (or alias) to a RosterSlot, None if unknown."""
    if isinstance(value, RosterSlot):
        return value
    if not isinstance(value, str):
        return None
    return SLOT_ALIASES.get(value.strip().upper())


def is_starting_slot(slot: RosterSlot) -> bool:
    return slot not in NON_STARTING_SLOTS


def slot_label(slot: RosterSlot) -> str:
    """Short display label for a slot."""
    if slot is RosterSlot.DST:
        return "D/ST"
    if slot is RosterSlot.INJURED_RESERVE:
        return "IR"
    return slot.value


def position_label(position: Position) -> str:
    """Short display label for a natural position."""
    if position is Position.DST:
        return "D/ST"
    return position.value


@dataclass(frozen=True)
class LineupTemplate:
    """
    Slot quotas a weekly lineup must fill.

    Only a single shared FLEX slot is supported: with one shared slot the
    top-N-per-position selection plus best-remaining FLEX is exact. Two or
    more shared slots turn selection into a weighted assignment problem.
    """
    qb: int = 1
    rb: int = 2
    wr: int = 2
    te: int = 1
    flex: int = 1
    k: int = 1
    dst: int = 1
    flex_positions: Tuple[Position, ...] = field(
        default=(Position.RB, Position.WR, Position.TE)
    )

    def __post_init__(self):
        for name in ("qb", "rb", "wr", "te", "flex", "k", "dst"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"Slot quota '{name}' must be a non-negative integer, got {value!r}")
        if self.flex > 1:
            raise ValueError("Only a single FLEX slot is supported")
        for position in self.flex_positions:
            if not isinstance(position, Position):
                raise ValueError(f"Invalid FLEX position: {position!r}")

    def quota(self, slot: RosterSlot) -> int:
        """Number of lineup spots for a starting slot (0 for bench/IR)."""
        return {
            RosterSlot.QB: self.qb,
            RosterSlot.RB: self.rb,
            RosterSlot.WR: self.wr,
            RosterSlot.TE: self.te,
            RosterSlot.FLEX: self.flex,
            RosterSlot.K: self.k,
            RosterSlot.DST: self.dst,
        }.get(slot, 0)

    def fixed_slots(self) -> Iterator[RosterSlot]:
        """Fixed (single-position) slots in display order."""
        for slot in (RosterSlot.QB, RosterSlot.RB, RosterSlot.WR, RosterSlot.TE,
                     RosterSlot.K, RosterSlot.DST):
            yield slot

    def starting_slots(self) -> Iterator[RosterSlot]:
        yield from self.fixed_slots()
        yield RosterSlot.FLEX

    @property
    def size(self) -> int:
        return sum(self.quota(slot) for slot in self.starting_slots())

    def accepts(self, position: Position, slot: RosterSlot) -> bool:
        """Whether a player of ``position`` may fill ``slot``."""
        if slot is RosterSlot.FLEX:
            return self.flex > 0 and position in self.flex_positions
        return FIXED_SLOT_POSITIONS.get(slot) is position and self.quota(slot) > 0


STANDARD_LINEUP = LineupTemplate()
