"""
Tests for the analyzer module - manager efficiency and lineup mistakes.
"""

import dataclasses
import random
import pytest

from lineup_efficiency.analyzer import (
    analyze_lineup,
    calculate_efficiency,
    evaluate_team_week,
    find_mistakes,
    is_eligible_replacement,
)
from lineup_efficiency.errors import LineupConsistencyError, LineupValidationError
from lineup_efficiency.models import OptimalLineupResult, PlayerWeekLine
from lineup_efficiency.optimizer import compute_optimal_lineup
from lineup_efficiency.slots import Position, RosterSlot, STANDARD_LINEUP


def make_line(player_id, position, points, slot="BENCH", name=None):
    return PlayerWeekLine(
        player_id=player_id,
        display_name=name or f"P{player_id}",
        roster_slot=slot,
        natural_position=position,
        points_actual=points,
    )


def base_lineup():
    """Starters whose spots are settled; tests add the contested players."""
    return [
        make_line(100, "QB", 20.0, "QB"),
        make_line(101, "RB", 15.0, "RB"),
        make_line(102, "WR", 14.0, "WR"),
        make_line(103, "WR", 12.0, "WR"),
        make_line(104, "WR", 13.0, "FLEX"),
        make_line(105, "TE", 7.0, "TE"),
        make_line(106, "K", 8.0, "K"),
        make_line(107, "DEF/ST", 6.0, "DEF/ST"),
        make_line(108, "QB", 5.0, "BENCH"),
    ]


def evaluate(lines):
    return analyze_lineup(lines, compute_optimal_lineup(lines))


class TestScenarios:
    """Documented efficiency scenarios."""

    def test_simple_improvement(self):
        """Benched RB outscoring the started RB is the single mistake."""
        lines = base_lineup() + [
            make_line(1, "RB", 4.0, "RB", name="A"),
            make_line(2, "RB", 11.0, "BENCH", name="B"),
        ]

        report = evaluate(lines)

        assert len(report.mistakes) == 1
        mistake = report.mistakes[0]
        assert mistake.starter.display_name == "A"
        assert mistake.bench_player.display_name == "B"
        assert mistake.slot is RosterSlot.RB
        assert mistake.points_lost == pytest.approx(7.0)
        assert report.optimal_score == pytest.approx(report.actual_score + 7.0)
        assert report.points_left_on_bench == pytest.approx(7.0)

    def test_perfect_management(self):
        lines = base_lineup() + [
            make_line(1, "RB", 4.0, "BENCH", name="A"),
            make_line(2, "RB", 11.0, "RB", name="B"),
        ]

        report = evaluate(lines)

        assert report.efficiency == 100.0
        assert report.mistakes == []
        assert report.points_left_on_bench == 0
        assert report.is_perfect

    def test_empty_roster(self):
        report = evaluate([])

        assert report.actual_score == 0
        assert report.optimal_score == 0
        assert report.efficiency == 0
        assert report.points_left_on_bench == 0
        assert report.mistakes == []


class TestScores:
    """Actual score, efficiency and bench points."""

    def test_bench_and_ir_excluded_from_actual(self):
        lines = [
            make_line(1, "QB", 10.0, "QB"),
            make_line(2, "RB", 30.0, "BENCH"),
            make_line(3, "WR", 25.0, "INJURED_RESERVE"),
        ]

        report = evaluate(lines)

        assert report.actual_score == pytest.approx(10.0)
        assert report.optimal_score == pytest.approx(65.0)
        assert report.efficiency == pytest.approx(10.0 / 65.0 * 100)

    def test_calculate_efficiency(self):
        assert calculate_efficiency(50.0, 100.0) == pytest.approx(50.0)
        assert calculate_efficiency(0.0, 0.0) == 0.0

    def test_did_not_play_starters_reported(self):
        lines = [
            make_line(1, "QB", None, "QB"),
            make_line(2, "QB", 12.0, "BENCH"),
        ]

        report = evaluate(lines)

        assert [l.player_id for l in report.did_not_play] == [1]
        assert report.actual_score == 0
        assert report.mistakes[0].points_lost == pytest.approx(12.0)

    def test_evaluate_team_week(self):
        lines = base_lineup() + [make_line(1, "RB", 4.0, "RB"), make_line(2, "RB", 11.0)]

        report = evaluate_team_week(lines)

        assert report.points_left_on_bench == pytest.approx(7.0)


class TestMistakes:
    """Mistake eligibility and ordering."""

    def test_bench_player_outside_optimal_ignored(self):
        lines = [
            make_line(1, "RB", 2.0, "RB"),
            make_line(2, "RB", 20.0, "RB"),
            make_line(3, "WR", 14.0, "WR"),
            make_line(4, "WR", 13.0, "WR"),
            make_line(5, "WR", 15.0, "FLEX"),
            make_line(6, "RB", 12.0, "BENCH"),
            make_line(7, "RB", 11.0, "BENCH"),
        ]

        report = evaluate(lines)

        assert [(m.starter.player_id, m.bench_player.player_id) for m in report.mistakes] == [(1, 6)]
        assert report.points_left_on_bench == pytest.approx(10.0)

    def test_one_bench_player_many_mistakes(self):
        lines = [
            make_line(1, "RB", 20.0, "RB"),
            make_line(2, "RB", 4.0, "RB"),
            make_line(3, "TE", 3.0, "FLEX"),
            make_line(4, "TE", 9.0, "TE"),
            make_line(5, "WR", 10.0, "WR"),
            make_line(6, "WR", 8.0, "WR"),
            make_line(7, "RB", 11.0, "BENCH"),
        ]

        report = evaluate(lines)

        assert [(m.slot, m.points_lost) for m in report.mistakes] == [
            (RosterSlot.FLEX, pytest.approx(8.0)),
            (RosterSlot.RB, pytest.approx(7.0)),
        ]

    def test_ineligible_swap_not_suggested(self):
        """A kicker never replaces a wide receiver."""
        lines = [
            make_line(1, "WR", 1.0, "WR"),
            make_line(2, "K", 15.0, "BENCH"),
        ]

        report = evaluate(lines)

        assert report.mistakes == []
        assert report.points_left_on_bench == pytest.approx(15.0)

    def test_negative_defense_swap(self):
        """Starting the worse of two negative defenses is still a mistake."""
        lines = [
            make_line(1, "DEF/ST", -5.0, "DEF/ST"),
            make_line(2, "DEF/ST", -2.0, "BENCH"),
        ]

        report = evaluate(lines)

        assert [l.player_id for l in report.optimal.selected(RosterSlot.DST)] == [2]
        assert report.optimal_score == pytest.approx(-2.0)
        assert [(m.bench_player.player_id, m.points_lost) for m in report.mistakes] == [
            (2, pytest.approx(3.0))
        ]
        assert report.points_left_on_bench == pytest.approx(3.0)
        assert report.efficiency == 0.0

    def test_ir_player_can_be_a_mistake(self):
        lines = [
            make_line(1, "TE", 2.0, "TE"),
            make_line(2, "TE", 9.0, "INJURED_RESERVE"),
        ]

        report = evaluate(lines)

        assert report.mistakes[0].bench_player.player_id == 2

    def test_ir_player_excluded_when_requested(self):
        lines = [
            make_line(1, "TE", 2.0, "TE"),
            make_line(2, "TE", 9.0, "INJURED_RESERVE"),
        ]

        report = evaluate_team_week(lines, exclude_injured_reserve=True)

        assert report.mistakes == []
        assert report.efficiency == 100.0

    def test_equal_points_not_a_mistake(self):
        lines = [make_line(1, "K", 7.0, "K"), make_line(2, "K", 7.0)]

        assert evaluate(lines).mistakes == []

    def test_find_mistakes_sorted(self):
        starters = [make_line(1, "WR", 2.0, "WR"), make_line(2, "WR", 1.0, "WR")]
        bench = [make_line(3, "WR", 5.0)]
        optimal = compute_optimal_lineup(starters + bench)

        mistakes = find_mistakes(starters, bench, optimal)

        assert [m.points_lost for m in mistakes] == [pytest.approx(4.0), pytest.approx(3.0)]


class TestEligibility:
    """Bench position vs starter slot."""

    @pytest.mark.parametrize("position", [Position.RB, Position.WR, Position.TE])
    def test_flex_accepts_skill_positions(self, position):
        assert is_eligible_replacement(position, RosterSlot.FLEX)

    @pytest.mark.parametrize("position", [Position.QB, Position.K, Position.DST])
    def test_flex_rejects_other_positions(self, position):
        assert not is_eligible_replacement(position, RosterSlot.FLEX)

    def test_fixed_slot_needs_exact_match(self):
        assert is_eligible_replacement(Position.RB, RosterSlot.RB)
        assert not is_eligible_replacement(Position.RB, RosterSlot.WR)
        assert is_eligible_replacement(Position.DST, RosterSlot.DST)

    def test_bench_slots_never_eligible(self):
        assert not is_eligible_replacement(Position.RB, RosterSlot.BENCH)
        assert not is_eligible_replacement(Position.RB, RosterSlot.INJURED_RESERVE)


class TestFailures:
    """Validation and consistency errors."""

    def test_out_of_position_starter_rejected(self):
        lines = [make_line(1, "K", 5.0, "WR")]

        with pytest.raises(LineupValidationError, match="cannot start in WR"):
            evaluate(lines)

    def test_too_many_starters_rejected(self):
        lines = [make_line(1, "QB", 5.0, "QB"), make_line(2, "QB", 6.0, "QB")]

        with pytest.raises(LineupValidationError, match="lineup allows 1"):
            evaluate(lines)

    def test_inconsistent_optimal_surfaces(self):
        lines = [make_line(1, "QB", 25.0, "QB")]
        stale = OptimalLineupResult(optimal_score=10.0)

        with pytest.raises(LineupConsistencyError) as exc_info:
            analyze_lineup(lines, stale)

        assert exc_info.value.actual_score == pytest.approx(25.0)
        assert exc_info.value.optimal_score == pytest.approx(10.0)

    def test_empty_slot_over_negative_defense_surfaces(self):
        """Sitting the only defense beats a lineup that must start it."""
        lines = [
            make_line(1, "K", 6.0, "K"),
            make_line(2, "DEF/ST", -3.0, "BENCH"),
        ]

        with pytest.raises(LineupConsistencyError):
            evaluate(lines)


def random_team_week(rng):
    positions = ["QB", "RB", "WR", "TE", "K", "DEF/ST"]
    pool = [
        make_line(player_id, rng.choice(positions), round(rng.uniform(-3.0, 35.0), 1))
        for player_id in range(rng.randint(0, 16))
    ]
    if rng.random() < 0.2 and pool:
        pool[0] = dataclasses.replace(pool[0], points_actual=None)

    unused = list(pool)
    rng.shuffle(unused)
    lines = []
    for slot in STANDARD_LINEUP.starting_slots():
        for _ in range(STANDARD_LINEUP.quota(slot)):
            eligible = [l for l in unused if STANDARD_LINEUP.accepts(l.natural_position, slot)]
            if eligible:
                chosen = rng.choice(eligible)
                unused.remove(chosen)
                lines.append(dataclasses.replace(chosen, roster_slot=slot))
    for line in unused:
        slot = RosterSlot.INJURED_RESERVE if rng.random() < 0.1 else RosterSlot.BENCH
        lines.append(dataclasses.replace(line, roster_slot=slot))
    rng.shuffle(lines)
    return lines


class TestProperties:
    """Invariants over random legal team-weeks."""

    @pytest.mark.parametrize("seed", range(50))
    def test_report_invariants(self, seed):
        lines = random_team_week(random.Random(seed))

        optimal = compute_optimal_lineup(lines)
        report = analyze_lineup(lines, optimal)

        assert report.points_left_on_bench >= 0
        assert report.actual_score <= report.optimal_score
        if report.optimal_score > 0:
            assert report.efficiency <= 100.0
        losses = [m.points_lost for m in report.mistakes]
        assert losses == sorted(losses, reverse=True)
        for mistake in report.mistakes:
            assert mistake.bench_player.points > mistake.starter.points
            assert mistake.points_lost > 0
            assert optimal.contains(mistake.bench_player.player_id)
            assert not mistake.bench_player.is_starter
            assert mistake.starter.is_starter
            assert is_eligible_replacement(
                mistake.bench_player.natural_position, mistake.slot
            )


class TestReportSerialization:
    """to_dict presentation."""

    def test_report_to_dict(self):
        lines = [
            make_line(1, "RB", 3.0, "FLEX", name="Flex Back"),
            make_line(2, "WR", 10.04, "BENCH", name="Bench Receiver"),
            make_line(3, "TE", 1.0, "INJURED_RESERVE", name="Hurt End"),
        ]

        result = evaluate(lines).to_dict()

        assert result["actual_score"] == 3.0
        assert result["optimal_score"] == 14.0
        assert result["bench"][0] == {
            "player_id": 2, "name": "Bench Receiver", "position": "WR", "points": 10.0
        }
        assert result["bench"][1]["position"] == "TE (IR)"
        mistake = result["biggest_mistakes"][0]
        assert mistake["started_player"]["position"] == "FLEX (RB)"
        assert mistake["benched_player"]["position"] == "WR"
        assert mistake["points_lost"] == 7.0

    def test_max_mistakes_caps_output(self):
        lines = [
            make_line(1, "WR", 2.0, "WR"),
            make_line(2, "WR", 1.0, "WR"),
            make_line(3, "WR", 5.0),
        ]

        result = evaluate(lines).to_dict(max_mistakes=1)

        assert len(result["biggest_mistakes"]) == 1
        assert result["biggest_mistakes"][0]["points_lost"] == 4.0

    def test_optimal_lineup_labels(self):
        lines = base_lineup()

        labels = [entry["position"] for entry in evaluate(lines).to_dict()["optimal_lineup"]]

        assert labels == ["QB", "RB1", "RB2", "WR1", "WR2", "TE", "K", "D/ST", "FLEX"]
