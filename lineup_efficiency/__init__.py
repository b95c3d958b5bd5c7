"""
Lineup Efficiency Package

Optimal fantasy football lineups, manager efficiency and lineup mistakes,
served to the dashboard through a FastMCP server.
"""

from .analyzer import analyze_lineup, evaluate_team_week
from .models import EfficiencyReport, Mistake, OptimalLineupResult, PlayerWeekLine
from .optimizer import compute_optimal_lineup
from .slots import LineupTemplate, Position, RosterSlot, STANDARD_LINEUP

__version__ = "0.1.0"
__all__ = [
    "analyze_lineup",
    "compute_optimal_lineup",
    "evaluate_team_week",
    "EfficiencyReport",
    "LineupTemplate",
    "Mistake",
    "OptimalLineupResult",
    "PlayerWeekLine",
    "Position",
    "RosterSlot",
    "STANDARD_LINEUP",
]
