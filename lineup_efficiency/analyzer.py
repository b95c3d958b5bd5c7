"""
Manager efficiency and lineup mistake analysis.

Compares the lineup a manager actually started against the optimal lineup
for the same roster and lists bench-for-starter swaps that would have
scored more.

Mistakes are independent pairwise suggestions measured against the lineup
as it was set. A bench player eligible for several starters appears once
per starter; no combined multi-swap reshuffle is computed.
"""

import logging
import math
from typing import List, Optional, Sequence

from .errors import LineupConsistencyError
from .models import EfficiencyReport, Mistake, OptimalLineupResult, PlayerWeekLine
from .optimizer import compute_optimal_lineup
from .slots import LineupTemplate, Position, RosterSlot, STANDARD_LINEUP, is_starting_slot
from .validation import validate_actual_lineup, validate_roster

logger = logging.getLogger(__name__)

# Float slack when comparing sums built from the same point values
CONSISTENCY_TOLERANCE = 1e-9


def is_eligible_replacement(
    bench_position: Position,
    starter_slot: RosterSlot,
    template: LineupTemplate = STANDARD_LINEUP,
) -> bool:
    """Whether a bench player of ``bench_position`` may take over ``starter_slot``."""
    if not is_starting_slot(starter_slot):
        return False
    return template.accepts(bench_position, starter_slot)


def calculate_efficiency(actual_score: float, optimal_score: float) -> float:
    """Actual score as a percentage of the optimal score (0 when nothing was possible)."""
    if optimal_score > 0:
        return actual_score / optimal_score * 100
    return 0.0


def find_mistakes(
    starters: Sequence[PlayerWeekLine],
    bench: Sequence[PlayerWeekLine],
    optimal: OptimalLineupResult,
    template: LineupTemplate = STANDARD_LINEUP,
) -> List[Mistake]:
    """
    List every bench-for-starter swap that would have gained points.

    Only bench players the optimal lineup would have started are considered.
    Sorted by points lost, largest first; equal losses keep starter order.
    """
    optimal_ids = optimal.player_ids()
    mistakes = []
    for starter in starters:
        for bench_player in bench:
            if bench_player.player_id not in optimal_ids:
                continue
            if not is_eligible_replacement(bench_player.natural_position, starter.roster_slot, template):
                continue
            if bench_player.points > starter.points:
                mistakes.append(Mistake(
                    starter=starter,
                    bench_player=bench_player,
                    slot=starter.roster_slot,
                    points_lost=bench_player.points - starter.points,
                ))
    mistakes.sort(key=lambda m: m.points_lost, reverse=True)
    return mistakes


def analyze_lineup(
    lines: Sequence[PlayerWeekLine],
    optimal: OptimalLineupResult,
    template: LineupTemplate = STANDARD_LINEUP,
    tolerance: float = CONSISTENCY_TOLERANCE,
) -> EfficiencyReport:
    """
    Score the manager's actual lineup against the optimal one.

    Args:
        lines: Every roster line for the team-week
        optimal: Result of ``compute_optimal_lineup`` on the same lines
        template: Slot quotas the actual lineup must respect
        tolerance: Allowed float slack before actual > optimal is a fault

    Returns:
        EfficiencyReport with scores, efficiency and ranked mistakes

    Raises:
        LineupValidationError: the actual lineup breaks the template
        LineupConsistencyError: actual score exceeds the optimal score
    """
    lines = list(lines or [])
    validate_roster(lines)
    validate_actual_lineup(lines, template)

    starters = [line for line in lines if line.is_starter]
    bench = [line for line in lines if not line.is_starter]

    actual_score = math.fsum(line.points for line in starters)
    optimal_score = optimal.optimal_score

    if actual_score > optimal_score + tolerance:
        logger.error(
            f"Consistency fault: actual {actual_score:.4f} > optimal {optimal_score:.4f} "
            f"for roster of {len(lines)} players"
        )
        raise LineupConsistencyError(actual_score, optimal_score)

    mistakes = find_mistakes(starters, bench, optimal, template)

    report = EfficiencyReport(
        actual_score=actual_score,
        optimal_score=optimal_score,
        efficiency=calculate_efficiency(actual_score, optimal_score),
        points_left_on_bench=max(0.0, optimal_score - actual_score),
        optimal=optimal,
        mistakes=mistakes,
        starters=starters,
        bench=bench,
        did_not_play=[line for line in starters if line.did_not_play],
    )
    logger.debug(
        f"Lineup efficiency {report.efficiency:.1f}% "
        f"({actual_score:.2f}/{optimal_score:.2f}), {len(mistakes)} mistakes"
    )
    return report


def evaluate_team_week(
    lines: Sequence[PlayerWeekLine],
    template: LineupTemplate = STANDARD_LINEUP,
    exclude_injured_reserve: bool = False,
    tolerance: Optional[float] = None,
) -> EfficiencyReport:
    """Compute the optimal lineup and analyze the actual one in one step."""
    optimal = compute_optimal_lineup(lines, template, exclude_injured_reserve)
    return analyze_lineup(
        lines, optimal, template,
        tolerance=CONSISTENCY_TOLERANCE if tolerance is None else tolerance,
    )
