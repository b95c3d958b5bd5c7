"""Boundary validation for roster lines.

Raw records arrive either in canonical form or as ESPN weekly player lines.
Both are checked against a small parameter schema before a
``PlayerWeekLine`` is built, so a malformed record is rejected with a
descriptive message instead of being dropped from the roster.

Schema format (dict):
{
  "param_name": {
      "type": type|tuple[type,...],   # e.g. int, str
      "required": bool,               # default False
      "min": number,                  # for numeric types
      "max": number,                  # for numeric types
      "choices": [..],                # allowed values
      "default": any,                 # applied if missing & not required
      "nullable": bool                # if True allows None
  }, ...
}
"""
from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from .errors import LineupValidationError
from .models import PlayerWeekLine, points_error
from .slots import (
    ESPN_POSITION_IDS, ESPN_SLOT_IDS, LineupTemplate, RosterSlot, STANDARD_LINEUP,
    parse_position, parse_roster_slot, slot_label,
)

logger = logging.getLogger(__name__)

SOURCES = ("canonical", "espn")

PLAYER_LINE_SCHEMA: Dict[str, Dict[str, Any]] = {
    "player_id": {"type": int, "required": True, "min": 0},
    "display_name": {"type": str, "default": ""},
    "roster_slot": {"type": str, "required": True},
    "natural_position": {"type": str, "required": True},
    "points_actual": {"type": float, "nullable": True},
    "points_projected": {"type": float, "nullable": True},
}

ESPN_LINE_SCHEMA: Dict[str, Dict[str, Any]] = {
    "player_id": {"type": int, "required": True, "min": 0},
    "full_name": {"type": str, "nullable": True},
    "lineup_slot_id": {"type": int, "nullable": True, "choices": sorted(ESPN_SLOT_IDS)},
    "lineupSlot": {"type": str, "nullable": True},
    "default_pos_id": {"type": int, "nullable": True},
    "points_actual": {"type": float, "nullable": True},
    "points_projected": {"type": float, "nullable": True},
}


def validate_params(schema: Dict[str, Dict[str, Any]], values: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Validate ``values`` against ``schema``.

    Return: (validated_dict, errors_list)
    If errors_list is empty, validation succeeded.
    """
    validated = {}
    errors: List[str] = []

    for name, spec in schema.items():
        val = values.get(name, None)
        required = spec.get("required", False)
        nullable = spec.get("nullable", False)
        expected_type = spec.get("type", Any)

        # Default handling
        if val is None:
            if name not in values and "default" in spec:
                validated[name] = spec["default"]
                continue
            if required:
                errors.append(f"'{name}' is required")
                continue
            if nullable or "default" not in spec:
                validated[name] = None
                continue
            validated[name] = spec["default"]
            continue

        # Type checking (allow simple coercion for int/float)
        if expected_type is not Any:
            if expected_type in (int, float) and isinstance(val, str):
                try:
                    val = expected_type(val)
                except ValueError:
                    errors.append(f"'{name}' must be of type {expected_type.__name__}")
                    continue
            if expected_type is float and isinstance(val, int) and not isinstance(val, bool):
                val = float(val)
            if isinstance(val, bool) or not isinstance(val, expected_type):
                errors.append(f"'{name}' must be of type {getattr(expected_type, '__name__', expected_type)}")
                continue
            problem = points_error(name, val) if isinstance(val, float) else None
            if problem:
                errors.append(problem)
                continue

        # Numeric bounds
        if isinstance(val, (int, float)):
            if "min" in spec and val < spec["min"]:
                errors.append(f"'{name}' must be >= {spec['min']}")
            if "max" in spec and val > spec["max"]:
                errors.append(f"'{name}' must be <= {spec['max']}")

        # Choices
        if spec.get("choices") and val not in spec["choices"]:
            choices_list = ", ".join(map(str, spec["choices"]))
            errors.append(f"'{name}' must be one of: {choices_list}")

        validated[name] = val

    return validated, errors


def line_from_record(record: Mapping[str, Any]) -> PlayerWeekLine:
    """Build a line from a canonical record.

    ``full_name`` is accepted in place of ``display_name``.
    """
    if not isinstance(record, Mapping):
        raise LineupValidationError(f"record must be a mapping, got {type(record).__name__}")
    values = dict(record)
    if "display_name" not in values and "full_name" in values:
        values["display_name"] = values["full_name"] or ""

    validated, errors = validate_params(PLAYER_LINE_SCHEMA, values)
    if errors:
        raise LineupValidationError(errors)

    slot = parse_roster_slot(validated["roster_slot"])
    position = parse_position(validated["natural_position"])
    if slot is None:
        errors.append(f"'roster_slot' has unknown value {validated['roster_slot']!r}")
    if position is None:
        errors.append(f"'natural_position' has unknown value {validated['natural_position']!r}")
    if errors:
        raise LineupValidationError(errors)

    return PlayerWeekLine(
        player_id=validated["player_id"],
        display_name=validated["display_name"] or "",
        roster_slot=slot,
        natural_position=position,
        points_actual=validated["points_actual"],
        points_projected=validated["points_projected"],
    )


def line_from_espn_record(record: Mapping[str, Any]) -> PlayerWeekLine:
    """Build a line from an ESPN weekly player line.

    The numeric ``lineup_slot_id`` wins over the ``lineupSlot`` label. A
    kicker or defense missing ``default_pos_id`` takes its position from the
    slot it was placed in; any other missing position is rejected.
    """
    if not isinstance(record, Mapping):
        raise LineupValidationError(f"record must be a mapping, got {type(record).__name__}")

    validated, errors = validate_params(ESPN_LINE_SCHEMA, record)
    if errors:
        raise LineupValidationError(errors)

    slot_id = validated["lineup_slot_id"]
    if slot_id is not None:
        slot = ESPN_SLOT_IDS[slot_id]
    else:
        slot = parse_roster_slot(validated["lineupSlot"])
        if slot is None:
            raise LineupValidationError(
                f"unknown lineup slot (lineup_slot_id={slot_id!r}, lineupSlot={validated['lineupSlot']!r})"
            )

    pos_id = validated["default_pos_id"]
    if pos_id is None:
        if slot in (RosterSlot.K, RosterSlot.DST):
            position = parse_position(slot.value)
            logger.debug(f"Player {validated['player_id']}: position inferred from {slot_label(slot)} slot")
        else:
            raise LineupValidationError(f"'default_pos_id' is required for player {validated['player_id']}")
    elif pos_id in ESPN_POSITION_IDS:
        position = ESPN_POSITION_IDS[pos_id]
    else:
        raise LineupValidationError(f"'default_pos_id' has unknown value {pos_id!r}")

    return PlayerWeekLine(
        player_id=validated["player_id"],
        display_name=validated["full_name"] or "",
        roster_slot=slot,
        natural_position=position,
        points_actual=validated["points_actual"],
        points_projected=validated["points_projected"],
    )


def parse_lines(records: Iterable[Mapping[str, Any]], source: str = "canonical") -> List[PlayerWeekLine]:
    """Parse a team-week of records, reporting every bad record at once."""
    if source not in SOURCES:
        raise LineupValidationError(f"'source' must be one of: {', '.join(SOURCES)}")
    builder = line_from_espn_record if source == "espn" else line_from_record

    lines = []
    errors = []
    for index, record in enumerate(records):
        try:
            lines.append(builder(record))
        except LineupValidationError as e:
            errors.extend(f"record {index}: {message}" for message in e.errors)
    if errors:
        raise LineupValidationError(errors)

    validate_roster(lines)
    return lines


def validate_roster(lines: Sequence[PlayerWeekLine]) -> None:
    """Reject non-line entries and players listed twice in one team-week."""
    errors = []
    for index, line in enumerate(lines):
        if not isinstance(line, PlayerWeekLine):
            errors.append(f"record {index}: expected PlayerWeekLine, got {type(line).__name__}")
    if errors:
        raise LineupValidationError(errors)

    counts = Counter(line.player_id for line in lines)
    duplicates = sorted(pid for pid, count in counts.items() if count > 1)
    if duplicates:
        raise LineupValidationError(f"duplicate player ids in roster: {duplicates}")


def validate_actual_lineup(
    lines: Sequence[PlayerWeekLine],
    template: LineupTemplate = STANDARD_LINEUP,
) -> None:
    """Check the manager's starters against the lineup template.

    Every starter must be eligible for the slot they were placed in, and no
    slot may hold more starters than its quota.
    """
    errors = []
    used = Counter()
    for line in lines:
        if not line.is_starter:
            continue
        used[line.roster_slot] += 1
        if not template.accepts(line.natural_position, line.roster_slot):
            errors.append(
                f"player {line.player_id} ({line.natural_position.value}) "
                f"cannot start in {line.roster_slot.value}"
            )
    for slot, count in used.items():
        quota = template.quota(slot)
        if count > quota:
            errors.append(f"{count} starters in {slot.value}, lineup allows {quota}")
    if errors:
        raise LineupValidationError(errors)
