"""
PlanInputs validation and the rule-table configuration layer.
"""

import dataclasses

import pytest
from pydantic import ValidationError

from trainplan.core.config import Settings
from trainplan.core.exceptions import ConfigurationError
from trainplan.plan_framework.config import ConfigService, get_race_params
from trainplan.plan_framework.constants import ExperienceLevel, QualityType, RaceDistance
from trainplan.plan_framework.inputs import PlanInputs

VALID = {
    "current_weekly_mileage": 25,
    "current_long_run": 6,
    "total_weeks": 19,
    "race_distance": "Marathon",
    "experience_level": "beginner",
}


class TestPlanInputsFactory:

    def test_valid_inputs(self):
        inputs = PlanInputs.create(VALID)
        assert inputs.race_distance == RaceDistance.MARATHON
        assert inputs.experience_level == ExperienceLevel.BEGINNER
        assert inputs.describe() == "Marathon | 19 weeks | beginner | 25 mpw, 6 mi long run"

    @pytest.mark.parametrize("field", list(VALID))
    def test_missing_field_names_it(self, field):
        data = {k: v for k, v in VALID.items() if k != field}
        with pytest.raises(ConfigurationError) as exc:
            PlanInputs.create(data)
        assert exc.value.fields == [field]
        assert exc.value.error_code == "CONFIGURATION_ERROR"

    def test_none_and_blank_count_as_missing(self):
        with pytest.raises(ConfigurationError) as exc:
            PlanInputs.create({**VALID, "race_distance": "", "experience_level": None})
        assert sorted(exc.value.fields) == ["experience_level", "race_distance"]

    @pytest.mark.parametrize("field,value", [
        ("total_weeks", 8),
        ("total_weeks", 31),
        ("current_weekly_mileage", 0),
        ("current_long_run", -3),
        ("race_distance", "ultra"),
        ("experience_level", "elite"),
    ])
    def test_invalid_value_names_field(self, field, value):
        with pytest.raises(ConfigurationError) as exc:
            PlanInputs.create({**VALID, field: value})
        assert exc.value.fields == [field]

    def test_camel_case_payload(self):
        inputs = PlanInputs.create({
            "currentWeeklyMileage": 20,
            "currentLongRun": 5,
            "totalWeeks": 16,
            "raceDistance": "half_marathon",
            "experienceLevel": "Intermediate",
        })
        assert inputs.race_distance == RaceDistance.HALF_MARATHON
        assert inputs.experience_level == ExperienceLevel.INTERMEDIATE

    @pytest.mark.parametrize("raw,expected", [
        ("5k", RaceDistance.FIVE_K),
        ("10K", RaceDistance.TEN_K),
        ("Half Marathon", RaceDistance.HALF_MARATHON),
        ("half-marathon", RaceDistance.HALF_MARATHON),
        ("marathon", RaceDistance.MARATHON),
    ])
    def test_race_aliases(self, raw, expected):
        assert RaceDistance.parse(raw) == expected

    def test_inputs_are_immutable(self):
        inputs = PlanInputs.create(VALID)
        with pytest.raises(ValidationError):
            inputs.total_weeks = 12


class TestRaceParams:

    def test_bundled_values(self):
        params = get_race_params(RaceDistance.MARATHON)
        assert params.long_run_floor == 20
        assert params.long_run_max == 23
        assert params.peak_weekly_mileage_cap == 75
        assert params.quality_bounds(QualityType.TEMPO).max_miles == 10

    def test_params_are_immutable(self):
        params = get_race_params(RaceDistance.FIVE_K)
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.long_run_max = 30
        with pytest.raises(TypeError):
            params.quality[QualityType.TEMPO] = None

    def test_dot_path_lookup(self):
        assert ConfigService.get("plan_rules.race_params.5K.long_run_max") == 12
        assert ConfigService.get("plan_rules.race_params.Ultra", "missing") == "missing"

    def test_override_directory(self, rules_dir):
        (rules_dir / "plan_rules.yaml").write_text(
            "race_params:\n  Marathon:\n    long_run_floor: 18\n", encoding="utf-8"
        )
        ConfigService.reload()
        params = get_race_params(RaceDistance.MARATHON)
        assert params.long_run_floor == 18
        assert params.long_run_max == 23, "Keys missing from the file fall back to defaults"

    def test_missing_rules_fall_back_to_constants(self, rules_dir):
        ConfigService.reload()
        assert get_race_params(RaceDistance.HALF_MARATHON).long_run_floor == 12


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.MAX_PLAN_DOCUMENT_BYTES == 1_048_576
        assert s.LONG_RUN_DAY == "Sunday"
        assert s.MAX_SYNTHESIZED_LONG_RUN == 20

    def test_log_format_validated(self):
        with pytest.raises(ValidationError):
            Settings(LOG_FORMAT="xml")
        assert Settings(LOG_FORMAT="JSON").LOG_FORMAT == "json"
