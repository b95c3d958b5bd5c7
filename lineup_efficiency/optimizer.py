"""
Optimal lineup selection for a single team-week.

The optimizer answers "what is the best lineup that could have been set"
from every player on the roster, wherever the manager actually placed them.

Selection is exact for a template with fixed per-position quotas plus one
shared FLEX slot:

1. Each position pool is ranked by points, highest first.
2. Fixed slots take the top N of their position.
3. FLEX takes the best of the next unused player from each FLEX-eligible
   position.

Swapping a fixed-slot player for a FLEX candidate can never raise the total,
because fixed slots already hold the best players of their position and the
single shared slot takes the best of what remains.

Ties keep input order: among equal scores the player supplied first wins,
and a player with a recorded score beats one who did not play.

Negative scorers stay candidates: a slot is only left empty when no player
of an eligible position is available. A manager who leaves a slot empty
rather than start a negative scorer can therefore beat the optimal score;
the analyzer reports that as a consistency error.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .models import OptimalLineupResult, PlayerWeekLine
from .slots import (
    FIXED_SLOT_POSITIONS, LineupTemplate, Position, RosterSlot, STANDARD_LINEUP,
)
from .validation import validate_roster

logger = logging.getLogger(__name__)


def rank_key(line: PlayerWeekLine) -> Tuple[float, bool]:
    """Sort key ranking a candidate: more points first, then players who played."""
    return (-line.points, line.did_not_play)


def rank_by_position(lines: Sequence[PlayerWeekLine]) -> Dict[Position, List[PlayerWeekLine]]:
    """
    Partition candidates by natural position, best first.

    ``sorted`` is stable, so equal candidates stay in input order.
    """
    pools: Dict[Position, List[PlayerWeekLine]] = {position: [] for position in Position}
    for line in lines:
        pools[line.natural_position].append(line)
    return {position: sorted(pool, key=rank_key) for position, pool in pools.items()}


def _pick_flex(
    candidates: List[PlayerWeekLine],
    order: Dict[int, int]
) -> Optional[PlayerWeekLine]:
    if not candidates:
        return None
    return min(candidates, key=lambda line: rank_key(line) + (order[line.player_id],))


def compute_optimal_lineup(
    lines: Sequence[PlayerWeekLine],
    template: LineupTemplate = STANDARD_LINEUP,
    exclude_injured_reserve: bool = False,
) -> OptimalLineupResult:
    """
    Compute the highest-scoring legal lineup from a team-week roster.

    Args:
        lines: Every roster line for the team-week, starters, bench and IR
        template: Slot quotas to fill
        exclude_injured_reserve: Leave injured-reserve players out of selection

    Returns:
        OptimalLineupResult with every fixed slot (empty spots as None), the
        FLEX pick and the summed optimal score. An empty roster yields an
        all-empty lineup scoring 0.

    Raises:
        LineupValidationError: an entry is not a PlayerWeekLine, or a
            player appears twice
    """
    lines = list(lines or [])
    validate_roster(lines)

    candidates = [
        line for line in lines
        if not (exclude_injured_reserve and line.is_injured_reserve)
    ]
    order = {line.player_id: index for index, line in enumerate(candidates)}
    pools = rank_by_position(candidates)

    slots: Dict[RosterSlot, List[Optional[PlayerWeekLine]]] = {}
    flex_candidates: List[PlayerWeekLine] = []

    for slot in template.fixed_slots():
        quota = template.quota(slot)
        pool = pools[FIXED_SLOT_POSITIONS[slot]]
        chosen: List[Optional[PlayerWeekLine]] = list(pool[:quota])
        chosen.extend([None] * (quota - len(chosen)))
        slots[slot] = chosen

        position = FIXED_SLOT_POSITIONS[slot]
        if position in template.flex_positions and len(pool) > quota:
            flex_candidates.append(pool[quota])

    flex = _pick_flex(flex_candidates, order) if template.flex else None

    result = OptimalLineupResult(slots=slots, flex=flex, has_flex=bool(template.flex))
    result.optimal_score = math.fsum(line.points for line in result.players())

    logger.debug(
        f"Optimal lineup: {len(result.players())}/{template.size} slots filled "
        f"from {len(candidates)} candidates, score {result.optimal_score:.2f}"
    )
    return result
