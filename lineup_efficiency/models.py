"""
Data classes for weekly lineup evaluation.

All entities are built fresh per (team, week) evaluation and never mutated
afterwards. ``to_dict`` methods produce the JSON shapes served to the
dashboard; raw values stay unrounded on the objects themselves.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .errors import LineupValidationError
from .slots import (
    Position, RosterSlot, NON_STARTING_SLOTS,
    parse_position, parse_roster_slot, position_label, slot_label,
)


def _round(value: float, precision: int) -> float:
    return round(value, precision)


def points_error(name: str, value) -> Optional[str]:
    """Problem with a points value, or None when it is absent or a finite number."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return f"'{name}' must be a number, got {type(value).__name__}"
    if not math.isfinite(value):
        return f"'{name}' must be a finite number"
    return None


@dataclass(frozen=True)
class PlayerWeekLine:
    """One player's performance in one team's lineup for one week."""
    player_id: int
    display_name: str
    roster_slot: RosterSlot
    natural_position: Position
    points_actual: Optional[float] = None
    points_projected: Optional[float] = None

    def __post_init__(self):
        # Accept labels for both taxonomies, but never guess an unknown one
        errors = []
        slot = parse_roster_slot(self.roster_slot)
        if slot is None:
            errors.append(f"player {self.player_id}: unknown roster slot {self.roster_slot!r}")
        else:
            object.__setattr__(self, "roster_slot", slot)
        position = parse_position(self.natural_position)
        if position is None:
            if self.natural_position is None:
                errors.append(f"player {self.player_id}: natural position is missing")
            else:
                errors.append(f"player {self.player_id}: unknown natural position {self.natural_position!r}")
        else:
            object.__setattr__(self, "natural_position", position)
        for name in ("points_actual", "points_projected"):
            value = getattr(self, name)
            problem = points_error(name, value)
            if problem:
                errors.append(f"player {self.player_id}: {problem}")
            elif isinstance(value, int):
                object.__setattr__(self, name, float(value))
        if errors:
            raise LineupValidationError(errors)

    @property
    def points(self) -> float:
        """Actual points, with a missing score counted as 0."""
        return self.points_actual if self.points_actual is not None else 0.0

    @property
    def did_not_play(self) -> bool:
        return self.points_actual is None

    @property
    def is_starter(self) -> bool:
        return self.roster_slot not in NON_STARTING_SLOTS

    @property
    def is_injured_reserve(self) -> bool:
        return self.roster_slot is RosterSlot.INJURED_RESERVE

    @property
    def name(self) -> str:
        return self.display_name or f"Player {self.player_id}"

    def to_dict(self, precision: int = 1) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "player_id": self.player_id,
            "name": self.name,
            "roster_slot": self.roster_slot.value,
            "natural_position": self.natural_position.value,
            "points": _round(self.points, precision),
            "points_projected": (
                _round(self.points_projected, precision)
                if self.points_projected is not None else None
            ),
            "did_not_play": self.did_not_play,
        }


@dataclass
class OptimalLineupResult:
    """Best legal lineup obtainable from a roster."""
    slots: Dict[RosterSlot, List[Optional[PlayerWeekLine]]] = field(default_factory=dict)
    flex: Optional[PlayerWeekLine] = None
    optimal_score: float = 0.0
    has_flex: bool = True

    def assignments(self) -> List[Tuple[str, Optional[PlayerWeekLine]]]:
        """
        Slot label / player pairs in lineup order.

        Multi-spot slots are numbered (``RB1``, ``RB2``); empty spots appear
        with ``None``.
        """
        pairs = []
        for slot, chosen in self.slots.items():
            for index, line in enumerate(chosen, 1):
                label = slot_label(slot)
                if len(chosen) > 1:
                    label = f"{label}{index}"
                pairs.append((label, line))
        if self.has_flex:
            pairs.append(("FLEX", self.flex))
        return pairs

    def selected(self, slot: RosterSlot) -> List[PlayerWeekLine]:
        """Players chosen for a slot, skipping empty spots."""
        if slot is RosterSlot.FLEX:
            return [self.flex] if self.flex is not None else []
        return [line for line in self.slots.get(slot, []) if line is not None]

    def players(self) -> List[PlayerWeekLine]:
        """Chosen players in lineup order, FLEX last."""
        return [line for _, line in self.assignments() if line is not None]

    def player_ids(self) -> Set[int]:
        return {line.player_id for line in self.players()}

    def contains(self, player_id: int) -> bool:
        return player_id in self.player_ids()

    def is_empty(self) -> bool:
        return not self.players()

    def to_dict(self, precision: int = 1) -> Dict:
        lineup = []
        for label, line in self.assignments():
            lineup.append({
                "position": label,
                "player_id": line.player_id if line else None,
                "name": line.name if line else None,
                "points": _round(line.points, precision) if line else 0.0,
            })
        return {
            "optimal_score": _round(self.optimal_score, precision),
            "lineup": lineup,
            "filled_slots": len(self.players()),
        }


@dataclass(frozen=True)
class Mistake:
    """A bench player who would have outscored a started player in the same slot."""
    starter: PlayerWeekLine
    bench_player: PlayerWeekLine
    slot: RosterSlot
    points_lost: float

    def to_dict(self, precision: int = 1) -> Dict:
        started_position = slot_label(self.slot)
        if self.slot is RosterSlot.FLEX:
            started_position = f"FLEX ({position_label(self.starter.natural_position)})"
        return {
            "benched_player": {
                "player_id": self.bench_player.player_id,
                "name": self.bench_player.name,
                "points": _round(self.bench_player.points, precision),
                "position": position_label(self.bench_player.natural_position),
            },
            "started_player": {
                "player_id": self.starter.player_id,
                "name": self.starter.name,
                "points": _round(self.starter.points, precision),
                "position": started_position,
            },
            "points_lost": _round(self.points_lost, precision),
        }


@dataclass
class EfficiencyReport:
    """Manager efficiency for one team-week."""
    actual_score: float
    optimal_score: float
    efficiency: float
    points_left_on_bench: float
    optimal: OptimalLineupResult
    mistakes: List[Mistake] = field(default_factory=list)
    starters: List[PlayerWeekLine] = field(default_factory=list)
    bench: List[PlayerWeekLine] = field(default_factory=list)
    did_not_play: List[PlayerWeekLine] = field(default_factory=list)

    @property
    def is_perfect(self) -> bool:
        return not self.mistakes and self.points_left_on_bench <= 0

    def to_dict(self, precision: int = 1, max_mistakes: int = 0) -> Dict:
        """
        Convert to dictionary for JSON serialization.

        Args:
            precision: Decimal places for point values
            max_mistakes: Cap on reported mistakes (0 keeps all)
        """
        mistakes = self.mistakes[:max_mistakes] if max_mistakes else self.mistakes

        starters = [
            {
                "player_id": line.player_id,
                "name": line.name,
                "position": slot_label(line.roster_slot),
                "points": _round(line.points, precision),
            }
            for line in sorted(self.starters, key=lambda l: l.points, reverse=True)
        ]

        bench = []
        for line in sorted(self.bench, key=lambda l: l.points, reverse=True):
            position = position_label(line.natural_position)
            if line.is_injured_reserve:
                position = f"{position} (IR)"
            bench.append({
                "player_id": line.player_id,
                "name": line.name,
                "position": position,
                "points": _round(line.points, precision),
            })

        return {
            "actual_score": _round(self.actual_score, precision),
            "optimal_score": _round(self.optimal_score, precision),
            "efficiency": _round(self.efficiency, precision),
            "points_left_on_bench": _round(self.points_left_on_bench, precision),
            "starters": starters,
            "bench": bench,
            "optimal_lineup": self.optimal.to_dict(precision)["lineup"],
            "biggest_mistakes": [m.to_dict(precision) for m in mistakes],
            "did_not_play": [line.name for line in self.did_not_play],
        }
