"""Tool registry for the lineup efficiency server.

All MCP tool definitions live here as plain functions and are registered
with the FastMCP server by ``server.create_app``.
"""
from __future__ import annotations
from typing import Optional, List, Callable, Any

from .metrics import timing_decorator
from . import lineup_tools


def get_all_tools() -> List[Callable]:
    """Get list of all tool functions to register with FastMCP server."""
    return [
        get_optimal_lineup,
        analyze_team_week,
        get_weekly_breakdown,
        get_manager_scores,
    ]


def _invalid_players(players: Any) -> Optional[str]:
    if not isinstance(players, list):
        return "Invalid input: 'players' must be a list of roster records"
    return None


# =============================================================================
# LINEUP EFFICIENCY TOOLS
# =============================================================================

@timing_decorator("get_optimal_lineup", tool_type="lineup")
async def get_optimal_lineup(
    players: List[dict],
    source: str = "canonical",
    exclude_injured_reserve: Optional[bool] = None,
) -> dict:
    """Compute the highest-scoring legal lineup from a team's weekly roster.

    Every rostered player is a candidate wherever the manager placed them
    (starters, bench, and injured reserve unless excluded). Lineup: 1 QB,
    2 RB, 2 WR, 1 TE, 1 FLEX (RB/WR/TE), 1 K, 1 D/ST.

    Parameters:
        players (list, required): Roster records. Canonical records have
            player_id, display_name, roster_slot, natural_position,
            points_actual, points_projected. ESPN records have player_id,
            full_name, lineup_slot_id, default_pos_id, points_actual.
        source (str, optional): "canonical" (default) or "espn"
        exclude_injured_reserve (bool, optional): Leave IR players out

    Returns: {optimal_lineup: list, optimal_score: float, filled_slots: int,
              success: bool, error?: str}
    """
    problem = _invalid_players(players)
    if problem:
        return {"optimal_lineup": None, "success": False, "error": problem,
                "error_type": "validation_error"}
    return await lineup_tools.get_optimal_lineup(
        players=players,
        source=source,
        exclude_injured_reserve=exclude_injured_reserve,
    )


@timing_decorator("analyze_team_week", tool_type="lineup")
async def analyze_team_week(
    players: List[dict],
    source: str = "canonical",
    week: Optional[int] = None,
    exclude_injured_reserve: Optional[bool] = None,
) -> dict:
    """Grade a manager's weekly lineup against the best possible lineup.

    Reports actual score, optimal score, efficiency (actual / optimal * 100),
    points left on the bench, and every bench-for-starter swap that would
    have scored more, biggest first. Each swap is an independent suggestion
    against the lineup as set.

    Parameters:
        players (list, required): Roster records for the team-week
        source (str, optional): "canonical" (default) or "espn"
        week (int, optional): Week number echoed in the response
        exclude_injured_reserve (bool, optional): Leave IR players out

    Returns: {analysis: {actual_score, optimal_score, efficiency,
              points_left_on_bench, starters, bench, optimal_lineup,
              biggest_mistakes, did_not_play, week}, success: bool, error?: str}
    """
    problem = _invalid_players(players)
    if problem:
        return {"analysis": None, "success": False, "error": problem,
                "error_type": "validation_error"}
    if week is not None and (not isinstance(week, int) or isinstance(week, bool) or week < 1):
        return {"analysis": None, "success": False,
                "error": "Invalid input: 'week' must be a positive integer",
                "error_type": "validation_error"}
    return await lineup_tools.analyze_team_week(
        players=players,
        source=source,
        week=week,
        exclude_injured_reserve=exclude_injured_reserve,
    )


@timing_decorator("get_weekly_breakdown", tool_type="season")
async def get_weekly_breakdown(
    weeks: Any,
    source: str = "canonical",
    team_id: Optional[int] = None,
    team_name: Optional[str] = None,
    exclude_injured_reserve: Optional[bool] = None,
) -> dict:
    """Week-by-week lineup efficiency for one team's season.

    Parameters:
        weeks (dict|list, required): {week: [records]} or
            [{"week": n, "players": [records]}]
        source (str, optional): "canonical" (default) or "espn"
        team_id (int, optional): Team id echoed in the response
        team_name (str, optional): Team name echoed in the response
        exclude_injured_reserve (bool, optional): Leave IR players out

    Returns: {breakdown: {overall_stats, position_averages, weekly_breakdown},
              total_weeks: int, success: bool, error?: str}
    """
    return await lineup_tools.get_weekly_breakdown(
        weeks=weeks,
        source=source,
        team_id=team_id,
        team_name=team_name,
        exclude_injured_reserve=exclude_injured_reserve,
    )


@timing_decorator("get_manager_scores", tool_type="season")
async def get_manager_scores(
    teams: List[dict],
    source: str = "canonical",
    exclude_injured_reserve: Optional[bool] = None,
) -> dict:
    """Rank every manager in a league by season lineup efficiency.

    Parameters:
        teams (list, required): [{"team_id": int, "team_name": str,
            "weeks": {week: [records]}}]
        source (str, optional): "canonical" (default) or "espn"
        exclude_injured_reserve (bool, optional): Leave IR players out

    Returns: {managers: [{team_id, team_name, manager_score, metrics}],
              total_teams: int, success: bool, error?: str}
    """
    if not isinstance(teams, list):
        return {"managers": [], "success": False,
                "error": "Invalid input: 'teams' must be a list",
                "error_type": "validation_error"}
    return await lineup_tools.get_manager_scores(
        teams=teams,
        source=source,
        exclude_injured_reserve=exclude_injured_reserve,
    )
