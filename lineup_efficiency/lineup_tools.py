"""
Lineup efficiency tools for the dashboard.

Each tool takes raw roster records (canonical or ESPN weekly player lines),
runs the optimizer and analyzer, and returns a standardized response dict
ready for JSON serialization:

- Optimal lineup for a team-week
- Manager efficiency and biggest mistakes for a team-week
- Week-by-week season breakdown for one team
- League-wide manager efficiency ranking
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .analyzer import analyze_lineup
from .config_manager import get_config_manager
from .errors import (
    LineupValidationError, create_error_response, create_success_response,
    ErrorType, handle_engine_errors
)
from .logging_config import log_with_context
from .models import PlayerWeekLine
from .optimizer import compute_optimal_lineup
from .season import build_weekly_breakdown, rank_managers
from .validation import SOURCES, parse_lines

logger = logging.getLogger(__name__)


def _engine_defaults(exclude_injured_reserve: Optional[bool]) -> bool:
    if exclude_injured_reserve is None:
        return get_config_manager().config.engine.exclude_injured_reserve
    return exclude_injured_reserve


def _parse_team_week(players: Sequence[Mapping[str, Any]], source: str) -> List[PlayerWeekLine]:
    if not isinstance(players, (list, tuple)):
        raise LineupValidationError("'players' must be a list of records")
    limit = get_config_manager().config.limits.max_players_per_week
    if len(players) > limit:
        raise LineupValidationError(f"roster has {len(players)} players, limit is {limit}")
    return parse_lines(players, source)


def _parse_weeks(weeks: Any, source: str) -> Dict[int, List[PlayerWeekLine]]:
    """
    Accept ``{week: [records]}`` (week keys may be strings from JSON) or
    ``[{"week": n, "players": [records]}, ...]``.
    """
    if isinstance(weeks, Mapping):
        items = list(weeks.items())
    elif isinstance(weeks, list):
        items = []
        for entry in weeks:
            if not isinstance(entry, Mapping) or "week" not in entry:
                raise LineupValidationError("each week entry needs 'week' and 'players'")
            items.append((entry["week"], entry.get("players") or []))
    else:
        raise LineupValidationError("'weeks' must be a mapping or a list")

    limit = get_config_manager().config.limits.max_weeks
    if len(items) > limit:
        raise LineupValidationError(f"{len(items)} weeks supplied, limit is {limit}")

    parsed: Dict[int, List[PlayerWeekLine]] = {}
    errors = []
    for raw_week, players in items:
        try:
            week = int(raw_week)
        except (TypeError, ValueError):
            errors.append(f"week {raw_week!r} is not an integer")
            continue
        if week in parsed:
            errors.append(f"week {week} supplied twice")
            continue
        try:
            parsed[week] = _parse_team_week(players, source)
        except LineupValidationError as e:
            errors.extend(f"week {week}: {message}" for message in e.errors)
    if errors:
        raise LineupValidationError(errors)
    return parsed


@handle_engine_errors(
    default_data={"optimal_lineup": None},
    operation_name="computing optimal lineup"
)
async def get_optimal_lineup(
    players: List[Dict],
    source: str = "canonical",
    exclude_injured_reserve: Optional[bool] = None,
) -> Dict:
    """
    Compute the best lineup that could have been set from a team-week roster.

    Args:
        players: Roster records for one team-week (starters, bench and IR)
        source: Record format, "canonical" or "espn"
        exclude_injured_reserve: Leave IR players out (defaults to config)

    Returns:
        Dictionary containing:
        - optimal_lineup: slot-labelled lineup entries
        - optimal_score: sum of chosen players' points
        - filled_slots: number of lineup spots filled
    """
    if source not in SOURCES:
        return create_error_response(
            f"'source' must be one of: {', '.join(SOURCES)}",
            error_type=ErrorType.VALIDATION,
            data={"optimal_lineup": None}
        )

    lines = _parse_team_week(players or [], source)
    optimal = compute_optimal_lineup(
        lines, exclude_injured_reserve=_engine_defaults(exclude_injured_reserve)
    )
    precision = get_config_manager().config.presentation.precision
    rendered = optimal.to_dict(precision)

    return create_success_response({
        "optimal_lineup": rendered["lineup"],
        "optimal_score": rendered["optimal_score"],
        "filled_slots": rendered["filled_slots"],
        "total_players": len(lines),
        "message": f"Optimal lineup scores {rendered['optimal_score']} points"
    })


@handle_engine_errors(
    default_data={"analysis": None},
    operation_name="analyzing lineup efficiency"
)
async def analyze_team_week(
    players: List[Dict],
    source: str = "canonical",
    week: Optional[int] = None,
    exclude_injured_reserve: Optional[bool] = None,
) -> Dict:
    """
    Score a manager's actual lineup against the optimal one for a week.

    Args:
        players: Roster records for one team-week (starters, bench and IR)
        source: Record format, "canonical" or "espn"
        week: Optional week number echoed in the response
        exclude_injured_reserve: Leave IR players out (defaults to config)

    Returns:
        Dictionary containing:
        - analysis: actual/optimal score, efficiency, points left on bench,
          starters, bench, optimal lineup and biggest mistakes
    """
    if source not in SOURCES:
        return create_error_response(
            f"'source' must be one of: {', '.join(SOURCES)}",
            error_type=ErrorType.VALIDATION,
            data={"analysis": None}
        )

    config = get_config_manager().config
    lines = _parse_team_week(players or [], source)
    optimal = compute_optimal_lineup(
        lines, exclude_injured_reserve=_engine_defaults(exclude_injured_reserve)
    )
    report = analyze_lineup(lines, optimal, tolerance=config.engine.consistency_tolerance)
    analysis = report.to_dict(**get_config_manager().get_presentation_options())
    analysis["week"] = week

    return create_success_response({
        "analysis": analysis,
        "message": (
            f"Efficiency {analysis['efficiency']}% "
            f"({analysis['actual_score']}/{analysis['optimal_score']}), "
            f"{len(report.mistakes)} mistakes"
        )
    })


@handle_engine_errors(
    default_data={"breakdown": None},
    operation_name="building weekly breakdown"
)
async def get_weekly_breakdown(
    weeks: Any,
    source: str = "canonical",
    team_id: Optional[int] = None,
    team_name: Optional[str] = None,
    exclude_injured_reserve: Optional[bool] = None,
) -> Dict:
    """
    Week-by-week efficiency for one team's season.

    Args:
        weeks: ``{week: [records]}`` or ``[{"week": n, "players": [...]}]``
        source: Record format, "canonical" or "espn"
        team_id: Optional team id echoed in the response
        team_name: Optional team name echoed in the response
        exclude_injured_reserve: Leave IR players out (defaults to config)

    Returns:
        Dictionary containing:
        - breakdown: overall stats, position averages and weekly reports
    """
    if source not in SOURCES:
        return create_error_response(
            f"'source' must be one of: {', '.join(SOURCES)}",
            error_type=ErrorType.VALIDATION,
            data={"breakdown": None}
        )

    lines_by_week = _parse_weeks(weeks, source)
    breakdown = build_weekly_breakdown(
        lines_by_week,
        exclude_injured_reserve=_engine_defaults(exclude_injured_reserve),
        team_id=team_id,
        team_name=team_name,
    )
    rendered = breakdown.to_dict(**get_config_manager().get_presentation_options())

    return create_success_response({
        "breakdown": rendered,
        "total_weeks": len(breakdown.weeks),
        "message": f"Season efficiency {rendered['overall_stats']['efficiency']}% over {len(breakdown.weeks)} weeks"
    })


@handle_engine_errors(
    default_data={"managers": []},
    operation_name="ranking managers"
)
async def get_manager_scores(
    teams: List[Dict],
    source: str = "canonical",
    exclude_injured_reserve: Optional[bool] = None,
) -> Dict:
    """
    Rank every manager in a league by season lineup efficiency.

    Args:
        teams: List of ``{"team_id": int, "team_name": str, "weeks": ...}``
            where ``weeks`` takes the same shapes as ``get_weekly_breakdown``
        source: Record format, "canonical" or "espn"
        exclude_injured_reserve: Leave IR players out (defaults to config)

    Returns:
        Dictionary containing:
        - managers: ranked manager scores with actual/optimal totals,
          average points per week and consistency score
    """
    if not teams:
        return create_error_response(
            "No teams provided for ranking",
            error_type=ErrorType.VALIDATION,
            data={"managers": []}
        )
    if source not in SOURCES:
        return create_error_response(
            f"'source' must be one of: {', '.join(SOURCES)}",
            error_type=ErrorType.VALIDATION,
            data={"managers": []}
        )

    limit = get_config_manager().config.limits.max_teams
    if len(teams) > limit:
        raise LineupValidationError(f"{len(teams)} teams supplied, limit is {limit}")

    team_weeks = {}
    team_names = {}
    errors = []
    seen = set()
    for index, team in enumerate(teams):
        if not isinstance(team, Mapping) or team.get("team_id") is None:
            errors.append(f"team {index}: 'team_id' is required")
            continue
        try:
            team_id = int(team["team_id"])
        except (TypeError, ValueError):
            errors.append(f"team {index}: 'team_id' must be an integer")
            continue
        if team_id in seen:
            errors.append(f"team {team_id}: supplied twice")
            continue
        seen.add(team_id)
        try:
            team_weeks[team_id] = _parse_weeks(team.get("weeks") or {}, source)
        except LineupValidationError as e:
            errors.extend(f"team {team_id}: {message}" for message in e.errors)
            continue
        if team.get("team_name"):
            team_names[team_id] = str(team["team_name"])
    if errors:
        raise LineupValidationError(errors)

    scores = rank_managers(
        team_weeks,
        team_names,
        exclude_injured_reserve=_engine_defaults(exclude_injured_reserve),
    )
    precision = get_config_manager().config.presentation.precision
    log_with_context(
        logger, "info", "Ranked managers",
        total_teams=len(scores),
        top_team_id=scores[0].team_id if scores else None,
    )

    return create_success_response({
        "managers": [score.to_dict(precision) for score in scores],
        "total_teams": len(scores),
        "message": f"Ranked {len(scores)} managers"
    })
