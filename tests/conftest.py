"""
Pytest configuration and fixtures

Engine tests are pure: no network, no database. Rule tables come from the
YAML files bundled with the package unless a test points ConfigService
elsewhere (and restores it afterwards).
"""
import pytest
import sys
import os

# Add the repository root to the path so tests run without an install
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from trainplan.plan_framework.config import ConfigService
from trainplan.plan_framework.constants import Phase
from trainplan.plan_framework.inputs import PlanInputs
from trainplan.plan_framework.weekly_projector import WeekTarget
from trainplan.services.pace_blend import EasyRange, PaceSet, SinglePace
from trainplan.services.workout_library import get_catalogue
from trainplan.services.workout_models import PlanWeek, Workout


@pytest.fixture
def make_inputs():
    """Factory for PlanInputs with sensible defaults per argument."""
    def _make(
        race_distance="Marathon",
        current_weekly_mileage=25,
        current_long_run=6,
        total_weeks=19,
        experience_level="beginner",
    ):
        return PlanInputs.create({
            "current_weekly_mileage": current_weekly_mileage,
            "current_long_run": current_long_run,
            "total_weeks": total_weeks,
            "race_distance": race_distance,
            "experience_level": experience_level,
        })
    return _make


@pytest.fixture
def catalogue():
    return get_catalogue()


@pytest.fixture
def current_paces():
    return PaceSet(
        easy=EasyRange(min="9:00", max="9:45"),
        threshold=SinglePace(pace="8:00"),
        interval=SinglePace(pace="7:20"),
        marathon=SinglePace(pace="8:40"),
    )


@pytest.fixture
def goal_paces():
    return PaceSet(
        easy=EasyRange(min="8:30", max="9:15"),
        threshold=SinglePace(pace="7:00"),
        interval=SinglePace(pace="6:30"),
        marathon=SinglePace(pace="7:40"),
    )


@pytest.fixture
def make_week():
    """Build a PlanWeek from (day, type, distance, description) tuples."""
    def _make(week_number, rows, total_mileage=None):
        workouts = [
            Workout(day=day, type=wtype, distance=distance, name=description, description=description)
            for day, wtype, distance, description in rows
        ]
        return PlanWeek(week_number=week_number, total_mileage=total_mileage, workouts=workouts)
    return _make


@pytest.fixture
def make_target():
    def _make(week_number=1, weekly_mileage=20, long_run=8, phase=Phase.BASE):
        return WeekTarget(
            week_number=week_number,
            phase=phase,
            weekly_mileage=weekly_mileage,
            long_run=long_run,
            tempo_distance=4,
            interval_distance=4,
            hill_distance=4,
        )
    return _make


@pytest.fixture
def rules_dir(tmp_path, monkeypatch):
    """
    Point ConfigService at a temporary rule directory.

    Yields the directory; tests write YAML into it and call reload().
    The bundled rules are restored afterwards.
    """
    from trainplan.core.config import settings

    monkeypatch.setattr(settings, "PLAN_CONFIG_DIR", str(tmp_path))
    yield tmp_path
    monkeypatch.undo()
    ConfigService.reload()
