"""
Workout catalogue: token validation, prescriptions and structure ranges.
"""

from enum import Enum

import pytest

from trainplan.core.exceptions import GenerationError, UnknownWorkoutToken
from trainplan.plan_framework.constants import WorkoutType
from trainplan.services.structure_converter import convert_vague_structure, pick_in_range
from trainplan.services.workout_library import LibraryType, WorkoutCatalogue, WorkoutToken


class TestStructureConverter:

    def test_pick_midpoint_without_week(self):
        assert pick_in_range(4, 6) == 5
        assert pick_in_range(10, 15) == 13

    def test_pick_progresses_with_week(self):
        assert pick_in_range(4, 8, 1, 16) == 4
        assert pick_in_range(4, 8, 6, 16) == 6
        assert pick_in_range(4, 8, 12, 16) == 8
        assert pick_in_range(4, 8, 16, 16) == 8

    def test_reps_and_duration(self):
        result = convert_vague_structure("Warmup + 4-6 x 3-8 min @ tempo", 1, 16)
        assert result == "Warmup + 4 x 3 min @ tempo"

    def test_grouped_reps(self):
        result = convert_vague_structure("Warmup + 8-12 x (2 min tempo / 2 min easy) + Cooldown")
        assert result == "Warmup + 10 x (2 min tempo / 2 min easy) + Cooldown"

    def test_short_recovery_in_seconds(self):
        assert convert_vague_structure("5 x 1000m with 1-2 min recovery") == "5 x 1000m with 120 sec recovery"
        assert convert_vague_structure("3 x 1 mile with 3-4 min recovery") == "3 x 1 mile with 4 min recovery"

    def test_every_segment_range_replaced(self):
        result = convert_vague_structure("10-15 min easy + 20 min tempo + 10-15 min easy")
        assert result == "13 min easy + 20 min tempo + 13 min easy"

    def test_empty_passthrough(self):
        assert convert_vague_structure(None) is None
        assert convert_vague_structure("") == ""


class TestTokens:

    def test_parse_normalizes_category(self):
        token = WorkoutToken.parse("hill_medium_vo2_0")
        assert token.library == LibraryType.HILL
        assert token.category == "MEDIUM_VO2"
        assert str(token) == "hill_MEDIUM_VO2_0"

    def test_category_with_underscores(self):
        token = WorkoutToken.parse("tempo_TEMPO_INTERVALS_1")
        assert (token.category, token.index) == ("TEMPO_INTERVALS", 1)

    @pytest.mark.parametrize("raw", ["", "tempo", "sprint_FAST_0", "tempo_TRADITIONAL_TEMPO_x"])
    def test_bad_syntax(self, raw):
        with pytest.raises(UnknownWorkoutToken):
            WorkoutToken.parse(raw)

    def test_resolves_against_catalogue(self, catalogue):
        token = catalogue.parse_token("hill_medium_vo2_0")
        assert catalogue.resolve(token).name == "Classic Hill Repeats"

    def test_resolved_category_is_enum_member(self, catalogue):
        token = catalogue.parse_token("tempo_traditional_tempo_0")
        categories = catalogue.categories[LibraryType.TEMPO]
        assert token.category is categories.TRADITIONAL_TEMPO
        assert isinstance(token.category, Enum)
        assert token.category_name == "TRADITIONAL_TEMPO"
        assert str(token) == "tempo_TRADITIONAL_TEMPO_0"
        assert all(isinstance(t.category, categories) for t in catalogue.tokens(LibraryType.TEMPO))

    def test_unknown_category(self, catalogue):
        with pytest.raises(UnknownWorkoutToken) as exc:
            catalogue.parse_token("tempo_NOT_A_CATEGORY_0")
        assert "no category" in exc.value.reason
        assert isinstance(exc.value, GenerationError)

    def test_index_out_of_range(self, catalogue):
        with pytest.raises(UnknownWorkoutToken) as exc:
            catalogue.parse_token("tempo_TRADITIONAL_TEMPO_9")
        assert "out of range" in exc.value.reason
        assert exc.value.error_code == "UNKNOWN_WORKOUT_TOKEN"

    def test_token_listing(self, catalogue):
        tempo = catalogue.tokens(LibraryType.TEMPO)
        assert all(t.library == LibraryType.TEMPO for t in tempo)
        assert WorkoutToken(LibraryType.TEMPO, "TRADITIONAL_TEMPO", 0) in tempo
        assert len(catalogue.tokens()) > len(tempo)

    def test_prompt_listing(self, catalogue):
        listing = catalogue.describe_for_prompt()
        assert "[WORKOUT_ID: tempo_TRADITIONAL_TEMPO_0] Classic Tempo Run" in listing
        assert "[WORKOUT_ID: longrun_TRADITIONAL_EASY_1] Conversational Long Run" in listing

    def test_library_workout_types(self):
        assert LibraryType.LONG_RUN.workout_type == WorkoutType.LONG_RUN
        assert LibraryType.HILL.workout_type == WorkoutType.HILL


class TestLoading:

    def test_empty_catalogue_rejected(self):
        with pytest.raises(ValueError):
            WorkoutCatalogue.load({})

    def test_library_without_categories_rejected(self):
        with pytest.raises(ValueError, match="Invalid workout library 'tempo'"):
            WorkoutCatalogue.load({"tempo": {"categories": {}}})

    def test_minimal_catalogue(self):
        catalogue = WorkoutCatalogue.load({
            "tempo": {
                "categories": {
                    "basic": [{"name": "Steady Tempo", "structure": "20 min tempo", "intensity": "comfortablyHard"}],
                },
            },
        })
        assert catalogue.resolve(catalogue.parse_token("tempo_BASIC_0")).name == "Steady Tempo"


class TestPrescription:

    def test_tempo_with_paces(self, catalogue, current_paces):
        token = catalogue.parse_token("tempo_TRADITIONAL_TEMPO_0")
        details = catalogue.prescribe(token, paces=current_paces, distance=7, week_number=1, total_weeks=16)
        assert details["template_id"] == "tempo_TRADITIONAL_TEMPO_0"
        assert details["name"] == "Classic Tempo Run (8:00/mi)"
        assert details["structure"] == (
            "15 min easy (9:00-9:45/mile) warmup + 22 min @ 8:00/mile + 10 min easy (9:00-9:45/mile) cooldown"
        )
        assert details["intensity"] == "comfortablyHard"
        assert "description" in details["intensity_guidance"]
        assert details["paces"]["threshold"]["pace"] == "8:00"
        assert details["distance"] == 7

    def test_interval_name_carries_interval_pace(self, catalogue, current_paces):
        token = catalogue.parse_token("interval_VO2_MAX_0")
        details = catalogue.prescribe(token, paces=current_paces)
        assert details["name"].endswith("(7:20/mi)")
        assert "@ 7:20/mile" in details["structure"]

    def test_long_run_name(self, catalogue, current_paces):
        token = catalogue.parse_token("longrun_TRADITIONAL_EASY_0")
        with_paces = catalogue.prescribe(token, paces=current_paces, distance=14)
        without = catalogue.prescribe(token, distance=14)
        assert with_paces["name"] == "14-Mile Classic Easy Long Run (9:00-9:45/mi)"
        assert without["name"] == "14-Mile Classic Easy Long Run"
        assert "paces" not in without

    def test_long_run_fueling_note(self, catalogue):
        token = catalogue.parse_token("longrun_TRADITIONAL_EASY_0")
        short = catalogue.prescribe(token, distance=10)["safety_notes"]
        long = catalogue.prescribe(token, distance=18)["safety_notes"]
        assert len(long) == len(short) + 1

    def test_hill_effort_gets_reference_pace(self, catalogue, current_paces):
        token = catalogue.parse_token("hill_MEDIUM_VO2_0")
        details = catalogue.prescribe(token, paces=current_paces, week_number=16, total_weeks=16)
        assert "@ threshold effort (~8:00/mile)" in details["structure"]
        assert details["name"] == "Classic Hill Repeats"
