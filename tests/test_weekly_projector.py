"""
Weekly projector: per-week formulas and properties that must hold for
every race, plan length and experience level.
"""

import logging

import pytest

from trainplan.plan_framework.config import get_race_params
from trainplan.plan_framework.constants import Phase, QualityType, RaceDistance
from trainplan.plan_framework.generator import TargetPlanGenerator
from trainplan.plan_framework.phase_builder import PhaseDistributor
from trainplan.plan_framework.weekly_projector import (
    WeeklyProjector,
    cycle_position,
    is_cutback_week,
    quality_workout_distance,
    weekly_long_run,
    weekly_mileage,
)

RACES = ["5K", "10K", "Half", "Marathon"]
LEVELS = ["beginner", "intermediate", "advanced"]
FITNESS = [(15, 4), (30, 8), (50, 14)]


class TestWeekFormulas:

    def test_cycle_positions(self):
        assert [cycle_position(w) for w in range(1, 7)] == [0, 1, 2, 0, 1, 2]

    def test_cutback_only_in_training_weeks(self):
        # 19 weeks: training 1-17
        assert is_cutback_week(3, 19)
        assert not is_cutback_week(4, 19)
        assert not is_cutback_week(18, 19)

    def test_cutback_mileage(self):
        # linear at week 3 of 17: 25 + 16 x 3/17 = 27.8; x 0.9 = 25.0
        assert weekly_mileage(3, 25, 41, 19) == 25

    def test_taper_mileage(self):
        assert weekly_mileage(18, 25, 41, 19) == 33
        assert weekly_mileage(19, 25, 41, 19) == 25

    def test_taper_mileage_floor(self):
        # Third taper week of a 30-week plan: 1 - 0.6 = 0.4
        assert weekly_mileage(30, 30, 50, 30) == 20

    def test_long_run_pattern(self):
        # linear week 1 of 17 from 6 to 20: 6.82
        assert weekly_long_run(1, 6, 20, 19) == 7
        # week 2: 7.65 x 1.08 = 8.26
        assert weekly_long_run(2, 6, 20, 19) == 8
        # week 3 recovery: max(8.47 - 2, 8.47 x 0.85) = 7.2
        assert weekly_long_run(3, 6, 20, 19) == 7

    def test_taper_long_run_fractions(self):
        assert [weekly_long_run(w, 6, 20, 30) for w in (28, 29, 30)] == [13, 10, 7]

    def test_quality_distance_clamped(self):
        params = get_race_params(RaceDistance.MARATHON)
        assert quality_workout_distance(20, QualityType.TEMPO, params) == 4   # 3.2 -> min 4
        assert quality_workout_distance(50, QualityType.TEMPO, params) == 8   # 8.0
        assert quality_workout_distance(90, QualityType.TEMPO, params) == 10  # 14.4 -> max 10

    def test_quality_clamp_logged(self, caplog):
        params = get_race_params(RaceDistance.MARATHON)
        with caplog.at_level(logging.DEBUG):
            quality_workout_distance(90, QualityType.TEMPO, params)
            quality_workout_distance(50, QualityType.TEMPO, params)
        clamps = [r for r in caplog.records if "quality_distance_clamped" in r.getMessage()]
        assert len(clamps) == 1
        assert clamps[0].extra_fields["after"] == 10
        assert clamps[0].extra_fields["quality"] == "tempo"

    def test_step_up_capped_and_logged(self, caplog):
        # 12 weeks, 10 training: week 2 sits at 19.2, stepped up to 21
        with caplog.at_level(logging.INFO):
            assert weekly_long_run(2, 19, 20, 12) == 20
        record = next(r for r in caplog.records if "long_run_step_up_capped" in r.getMessage())
        assert (record.extra_fields["before"], record.extra_fields["after"]) == (21, 20)


class TestProjectorClamps:

    def test_start_above_peak_is_capped_and_logged(self, make_inputs, caplog):
        inputs = make_inputs(race_distance="5K", current_weekly_mileage=60, current_long_run=15,
                             total_weeks=12, experience_level="beginner")
        phases = PhaseDistributor().distribute(12)
        with caplog.at_level(logging.INFO):
            weeks = WeeklyProjector(get_race_params(RaceDistance.FIVE_K)).project(inputs, phases, 36, 12)
        assert max(w.weekly_mileage for w in weeks) <= 36
        assert max(w.long_run for w in weeks) <= 12
        messages = [r.getMessage() for r in caplog.records]
        assert any("weekly_mileage_capped" in m for m in messages)
        assert any("long_run_capped" in m for m in messages)

    def test_peak_long_run_guaranteed(self, make_inputs, caplog):
        inputs = make_inputs(race_distance="Marathon", current_weekly_mileage=20, current_long_run=2,
                             total_weeks=11, experience_level="intermediate")
        phases = PhaseDistributor().distribute(11)
        with caplog.at_level(logging.INFO):
            weeks = WeeklyProjector(get_race_params(RaceDistance.MARATHON)).project(inputs, phases, 40, 20)
        # 9 training weeks: week 8 steps up to only 18 x 1.08 = 19.4, week 9 is a recovery week
        build = [w.long_run for w in weeks if w.phase != Phase.TAPER]
        assert max(build) == 20
        assert weeks[7].long_run == 20
        assert weeks[8].long_run == 18
        assert any("peak_long_run_guaranteed" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize("race", RACES)
@pytest.mark.parametrize("level", LEVELS)
@pytest.mark.parametrize("fitness", FITNESS)
@pytest.mark.parametrize("total_weeks", range(10, 31))
def test_plan_properties(make_inputs, race, level, fitness, total_weeks):
    mileage, long_run = fitness
    plan = TargetPlanGenerator().generate(make_inputs(
        race_distance=race,
        current_weekly_mileage=mileage,
        current_long_run=long_run,
        total_weeks=total_weeks,
        experience_level=level,
    ))
    params = plan.race_params
    weeks = plan.weeks

    assert len(weeks) == total_weeks
    assert [w.week_number for w in weeks] == list(range(1, total_weeks + 1))

    assert plan.max_long_run >= params.long_run_floor, (
        f"{race}/{level}/{total_weeks}w: long run peaks at {plan.max_long_run}, floor {params.long_run_floor}"
    )
    assert all(w.weekly_mileage <= plan.peak_weekly_mileage for w in weeks)
    assert all(w.long_run <= plan.long_run_max for w in weeks)

    taper = [w for w in weeks if w.phase == Phase.TAPER]
    assert 2 <= len(taper) <= 3
    assert taper == weeks[-len(taper):], "Taper must be the final weeks"
    taper_miles = [w.weekly_mileage for w in taper]
    assert all(a >= b for a, b in zip(taper_miles, taper_miles[1:])), f"Taper not decreasing: {taper_miles}"
    assert all(m >= round(plan.peak_weekly_mileage * 0.4) for m in taper_miles)

    for w in weeks:
        for qt, value in (
            (QualityType.TEMPO, w.tempo_distance),
            (QualityType.INTERVAL, w.interval_distance),
            (QualityType.HILL, w.hill_distance),
        ):
            bounds = params.quality_bounds(qt)
            assert bounds.min_miles <= value <= bounds.max_miles
