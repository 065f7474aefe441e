"""
Generated plan text parsing.
"""

import logging

import pytest

from trainplan.core.exceptions import GenerationError, UnknownWorkoutToken
from trainplan.plan_framework.constants import WorkoutType
from trainplan.services.plan_parser import (
    PlanParser,
    header_mileage,
    infer_workout_type,
    normalize_day,
    parse_plan_text,
)

PLAN_TEXT = """
# 16-Week Marathon Plan

Paces: Easy 9:00-9:45, Tempo 8:00

## Week 1 - Base (22 miles)
- **Monday**: Rest
- **Tuesday**: [WORKOUT_ID: tempo_TRADITIONAL_TEMPO_0] Classic Tempo 5 miles
- Wed: Easy 4 miles
- Thu: Hill repeats 5 miles
- Fri - Rest
- Sat: Ride 6 RunEQ miles
- Sun: Long Run 8 miles

**Week 2** (24 mi)
- Tue: [WORKOUT_ID: interval_vo2_max_0] 1000m repeats 6 miles
- Thursday: Easy 5 miles
- Sunday: Long Run 9 miles
"""


class TestHelpers:

    @pytest.mark.parametrize("raw,expected", [("Mon", "Monday"), ("sunday", "Sunday"), (" THU ", "Thursday")])
    def test_normalize_day(self, raw, expected):
        assert normalize_day(raw) == expected

    def test_header_mileage_takes_last_mention(self):
        assert header_mileage("## Week 3 - Build (5 runs, 32 miles)") == 32
        assert header_mileage("Week 4: 50 km") == 31
        assert header_mileage("Week 5") is None

    @pytest.mark.parametrize("text,expected", [
        ("Rest", WorkoutType.REST),
        ("Rest day, light stretching", WorkoutType.REST),
        ("Ride 8 RunEQ miles", WorkoutType.BIKE),
        ("Long Run 14 miles", WorkoutType.LONG_RUN),
        ("Tempo 6 miles", WorkoutType.TEMPO),
        ("Threshold intervals 5 miles", WorkoutType.TEMPO),
        ("Hill repeats 5 miles", WorkoutType.HILL),
        ("Intervals 6 miles", WorkoutType.INTERVAL),
        ("Easy 4 miles + strides", WorkoutType.EASY),
        ("Recovery jog 3 miles", WorkoutType.EASY),
    ])
    def test_infer_type(self, text, expected):
        assert infer_workout_type(text) == expected


class TestParser:

    def test_weeks_and_workouts(self, catalogue):
        weeks = parse_plan_text(PLAN_TEXT, catalogue)
        assert [w.week_number for w in weeks] == [1, 2]
        assert [w.total_mileage for w in weeks] == [22, 24]
        assert len(weeks[0].workouts) == 7
        assert len(weeks[1].workouts) == 3

    def test_days_normalized(self, catalogue):
        week = parse_plan_text(PLAN_TEXT, catalogue)[0]
        assert [w.day for w in week.workouts] == [
            "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
        ]

    def test_types(self, catalogue):
        week = parse_plan_text(PLAN_TEXT, catalogue)[0]
        assert [w.type for w in week.workouts] == [
            WorkoutType.REST,
            WorkoutType.TEMPO,
            WorkoutType.EASY,
            WorkoutType.HILL,
            WorkoutType.REST,
            WorkoutType.BIKE,
            WorkoutType.LONG_RUN,
        ]

    def test_token_extracted_and_stripped(self, catalogue):
        weeks = parse_plan_text(PLAN_TEXT, catalogue)
        tempo = weeks[0].workout_on("Tuesday")
        assert tempo.workout_id == "tempo_TRADITIONAL_TEMPO_0"
        assert tempo.description == "Classic Tempo 5 miles"
        assert "WORKOUT_ID" not in tempo.name

        intervals = weeks[1].workout_on("Tuesday")
        assert intervals.workout_id == "interval_VO2_MAX_0"
        assert intervals.type == WorkoutType.INTERVAL, "Token library decides the type"

    def test_unknown_token(self, catalogue):
        text = "## Week 1\n- Tue: [WORKOUT_ID: tempo_MADE_UP_0] Tempo 5 miles\n"
        with pytest.raises(UnknownWorkoutToken):
            parse_plan_text(text, catalogue)

    def test_duplicate_week_skipped(self, catalogue, caplog):
        text = (
            "## Week 1\n- Mon: Easy 3 miles\n"
            "## Week 1\n- Mon: Easy 9 miles\n- Tue: Easy 9 miles\n"
            "## Week 2\n- Mon: Easy 4 miles\n"
        )
        with caplog.at_level(logging.WARNING):
            weeks = PlanParser(catalogue).parse(text)
        assert [w.week_number for w in weeks] == [1, 2]
        assert [w.description for w in weeks[0].workouts] == ["Easy 3 miles"]
        assert any("duplicate" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("text", [None, "", "   \n  "])
    def test_empty_text(self, catalogue, text):
        with pytest.raises(GenerationError) as exc:
            parse_plan_text(text, catalogue)
        assert exc.value.error_code == "EMPTY_PLAN_TEXT"

    def test_no_weeks(self, catalogue):
        with pytest.raises(GenerationError) as exc:
            parse_plan_text("Here is your plan!\n- Mon: Easy 3 miles", catalogue)
        assert exc.value.error_code == "NO_WEEKS_PARSED"
