"""
Season-level aggregation of weekly lineup efficiency.

Builds a team's week-by-week breakdown and ranks every manager in a league
by how much of their optimal output they actually started. Each team-week
is evaluated on its own; the aggregation only sums finished reports.
"""

import logging
import math
import statistics
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .analyzer import calculate_efficiency, evaluate_team_week
from .models import EfficiencyReport, PlayerWeekLine
from .slots import LineupTemplate, STANDARD_LINEUP, slot_label

logger = logging.getLogger(__name__)


@dataclass
class PositionAverage:
    """Points a team got from one starting slot across the season."""
    position: str
    total_points: float = 0.0
    weeks: int = 0

    @property
    def avg_points(self) -> float:
        return self.total_points / self.weeks if self.weeks else 0.0

    def to_dict(self, precision: int = 1) -> Dict:
        return {
            "avg_points": round(self.avg_points, precision),
            "total_points": round(self.total_points, precision),
            "games_played": self.weeks,
        }


@dataclass
class SeasonBreakdown:
    """Week-by-week efficiency for one team."""
    weeks: List[Tuple[int, EfficiencyReport]] = field(default_factory=list)
    position_averages: Dict[str, PositionAverage] = field(default_factory=dict)
    team_id: Optional[int] = None
    team_name: Optional[str] = None

    @property
    def total_actual(self) -> float:
        return math.fsum(report.actual_score for _, report in self.weeks)

    @property
    def total_optimal(self) -> float:
        return math.fsum(report.optimal_score for _, report in self.weeks)

    @property
    def total_points_left_on_bench(self) -> float:
        return math.fsum(report.points_left_on_bench for _, report in self.weeks)

    @property
    def efficiency(self) -> float:
        return calculate_efficiency(self.total_actual, self.total_optimal)

    def to_dict(self, precision: int = 1, max_mistakes: int = 0) -> Dict:
        weekly = []
        for week, report in self.weeks:
            entry = {"week": week}
            entry.update(report.to_dict(precision, max_mistakes))
            weekly.append(entry)
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "overall_stats": {
                "efficiency": round(self.efficiency, precision),
                "actual_points": round(self.total_actual, precision),
                "optimal_points": round(self.total_optimal, precision),
                "points_left_on_bench": round(self.total_points_left_on_bench, precision),
            },
            "position_averages": {
                position: average.to_dict(precision)
                for position, average in self.position_averages.items()
            },
            "weekly_breakdown": weekly,
        }


@dataclass
class ManagerScore:
    """League-wide ranking entry for one manager."""
    team_id: int
    team_name: str
    actual_points: float
    optimal_points: float
    weekly_actual: List[float] = field(default_factory=list)

    @property
    def weeks_played(self) -> int:
        return len(self.weekly_actual)

    @property
    def manager_score(self) -> float:
        return calculate_efficiency(self.actual_points, self.optimal_points)

    @property
    def avg_points_per_week(self) -> float:
        return self.actual_points / self.weeks_played if self.weeks_played else 0.0

    @property
    def consistency_score(self) -> float:
        """100 minus the coefficient of variation of weekly points, floored at 0."""
        avg = self.avg_points_per_week
        if not self.weekly_actual or avg <= 0:
            return 0.0
        std_dev = statistics.pstdev(self.weekly_actual)
        return 100 - min(100.0, std_dev / avg * 100)

    def to_dict(self, precision: int = 1) -> Dict:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "manager_score": round(self.manager_score, precision),
            "metrics": {
                "actual_points": round(self.actual_points, precision),
                "optimal_points": round(self.optimal_points, precision),
                "avg_points_per_week": round(self.avg_points_per_week, precision),
                "consistency_score": round(self.consistency_score, precision),
                "weeks_played": self.weeks_played,
            },
        }


def _accumulate_position_points(
    averages: Dict[str, PositionAverage],
    starters: Sequence[PlayerWeekLine]
) -> None:
    # Slots sharing a label (RB, RB) are combined into one weekly total
    weekly: Dict[str, float] = {}
    for line in starters:
        if not line.points_actual:
            continue
        label = slot_label(line.roster_slot)
        weekly[label] = weekly.get(label, 0.0) + line.points_actual
    for label, points in weekly.items():
        average = averages.setdefault(label, PositionAverage(position=label))
        average.total_points += points
        average.weeks += 1


def build_weekly_breakdown(
    lines_by_week: Mapping[int, Sequence[PlayerWeekLine]],
    template: LineupTemplate = STANDARD_LINEUP,
    exclude_injured_reserve: bool = False,
    team_id: Optional[int] = None,
    team_name: Optional[str] = None,
) -> SeasonBreakdown:
    """
    Evaluate every week of one team's season.

    Args:
        lines_by_week: Roster lines keyed by week number
        template: Slot quotas to evaluate against
        exclude_injured_reserve: Leave IR players out of optimal selection
        team_id: Optional team id carried into the result
        team_name: Optional team name carried into the result

    Returns:
        SeasonBreakdown with weeks in ascending order
    """
    breakdown = SeasonBreakdown(team_id=team_id, team_name=team_name)
    for week in sorted(lines_by_week):
        report = evaluate_team_week(lines_by_week[week], template, exclude_injured_reserve)
        breakdown.weeks.append((week, report))
        _accumulate_position_points(breakdown.position_averages, report.starters)

    logger.info(
        f"Weekly breakdown for team {team_id}: {len(breakdown.weeks)} weeks, "
        f"efficiency {breakdown.efficiency:.1f}%"
    )
    return breakdown


def rank_managers(
    team_weeks: Mapping[int, Mapping[int, Sequence[PlayerWeekLine]]],
    team_names: Optional[Mapping[int, str]] = None,
    template: LineupTemplate = STANDARD_LINEUP,
    exclude_injured_reserve: bool = False,
) -> List[ManagerScore]:
    """
    Rank managers by season-long lineup efficiency.

    Args:
        team_weeks: team_id -> week -> roster lines
        team_names: Optional display names by team id
        template: Slot quotas to evaluate against
        exclude_injured_reserve: Leave IR players out of optimal selection

    Returns:
        ManagerScore list, best manager first
    """
    team_names = team_names or {}
    scores = []
    for team_id, weeks in team_weeks.items():
        weekly_actual = []
        weekly_optimal = []
        for week in sorted(weeks):
            report = evaluate_team_week(weeks[week], template, exclude_injured_reserve)
            weekly_actual.append(report.actual_score)
            weekly_optimal.append(report.optimal_score)
        scores.append(ManagerScore(
            team_id=team_id,
            team_name=team_names.get(team_id) or f"Team {team_id}",
            actual_points=math.fsum(weekly_actual),
            optimal_points=math.fsum(weekly_optimal),
            weekly_actual=weekly_actual,
        ))

    scores.sort(key=lambda s: s.manager_score, reverse=True)
    return scores
