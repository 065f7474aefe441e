"""
Constants for plan generation.

These are DEFAULTS that can be overridden by plan_rules.yaml.
They exist here for type safety and documentation.
"""

from enum import Enum
from typing import Dict, Tuple


class RaceDistance(str, Enum):
    """Goal race distances."""
    FIVE_K = "5K"
    TEN_K = "10K"
    HALF_MARATHON = "Half"
    MARATHON = "Marathon"

    @classmethod
    def parse(cls, value: str) -> "RaceDistance":
        """Accept the spellings onboarding forms and generators use."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", " ").replace("_", " ")
        try:
            return RACE_DISTANCE_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown race distance: {value}") from None


class ExperienceLevel(str, Enum):
    """Runner experience levels."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Phase(str, Enum):
    """Training phases."""
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    TAPER = "taper"


class QualityType(str, Enum):
    """Quality workouts sized by the weekly projector."""
    TEMPO = "tempo"
    INTERVAL = "interval"
    HILL = "hill"


class WorkoutType(str, Enum):
    """Workout types in a generated week."""
    EASY = "easy"
    TEMPO = "tempo"
    INTERVAL = "interval"
    HILL = "hill"
    LONG_RUN = "longRun"
    REST = "rest"
    BIKE = "bike"


RACE_DISTANCE_ALIASES: Dict[str, RaceDistance] = {
    "5k": RaceDistance.FIVE_K,
    "10k": RaceDistance.TEN_K,
    "half": RaceDistance.HALF_MARATHON,
    "half marathon": RaceDistance.HALF_MARATHON,
    "marathon": RaceDistance.MARATHON,
    "full marathon": RaceDistance.MARATHON,
}

HARD_WORKOUT_TYPES = (WorkoutType.TEMPO, WorkoutType.INTERVAL, WorkoutType.HILL)

DAYS_OF_WEEK = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Plan length bounds (weeks)
MIN_PLAN_WEEKS = 10
MAX_PLAN_WEEKS = 30

# =============================================================================
# PHASE DISTRIBUTION
# =============================================================================

# Plans of this length or longer get a 3-week taper, shorter ones 2
LONG_TAPER_THRESHOLD_WEEKS = 20

# (base, build, peak) share of training weeks, by plan length bucket
PHASE_PERCENTAGES: Dict[str, Tuple[float, float, float]] = {
    "short": (0.25, 0.55, 0.20),     # <= 14 weeks
    "standard": (0.30, 0.50, 0.20),
    "long": (0.35, 0.45, 0.20),      # >= 24 weeks
}
SHORT_PLAN_MAX_WEEKS = 14
LONG_PLAN_MIN_WEEKS = 24

# =============================================================================
# GROWTH AND PROJECTION
# =============================================================================

GROWTH_RATE_SHORT = 0.10   # plans <= 12 weeks
GROWTH_RATE_LONG = 0.04    # plans >= 28 weeks
GROWTH_SHORT_WEEKS = 12
GROWTH_LONG_WEEKS = 28

BUILD_CYCLE_WEEKS = 3                  # 2 build + 1 recovery
CUTBACK_MILEAGE_FACTOR = 0.90
LONG_RUN_STEP_UP_FACTOR = 1.08
LONG_RUN_RECOVERY_FACTOR = 0.85
LONG_RUN_RECOVERY_DROP = 2

TAPER_WEEKLY_REDUCTION = 0.20
TAPER_MILEAGE_FLOOR = 0.40
TAPER_LONG_RUN_FRACTIONS = (0.65, 0.50, 0.35)

# Short-race long run grows half a mile per training week
SHORT_RACE_LONG_RUN_GROWTH = 0.5
LONG_RUN_GROWTH_MIN = 0.5
LONG_RUN_GROWTH_MAX = 0.75

DEFAULT_QUALITY_PERCENTAGE = 0.15

# =============================================================================
# EXPERIENCE MULTIPLIERS
# =============================================================================

EXPERIENCE_MULTIPLIERS: Dict[ExperienceLevel, Dict[str, float]] = {
    ExperienceLevel.BEGINNER: {"peak_mileage": 0.80, "long_run_max": 0.95},
    ExperienceLevel.INTERMEDIATE: {"peak_mileage": 1.00, "long_run_max": 1.00},
    ExperienceLevel.ADVANCED: {"peak_mileage": 1.15, "long_run_max": 1.10},
}

# =============================================================================
# RACE PARAMETERS
# =============================================================================

RACE_PARAMS: Dict[RaceDistance, Dict] = {
    RaceDistance.FIVE_K: {
        "peak_weekly_mileage_cap": 45,
        "long_run_max": 12,
        "long_run_floor": 5,
        "long_run_percentage": 0.30,
        "minimum_long_run_target": 6,
        "long_run_growth_target": None,
        "race_distance_miles": 3.1,
        "quality": {
            "tempo": {"percentage": 0.18, "min": 3, "max": 6},
            "interval": {"percentage": 0.12, "min": 3, "max": 5},
            "hill": {"percentage": 0.12, "min": 3, "max": 5},
        },
    },
    RaceDistance.TEN_K: {
        "peak_weekly_mileage_cap": 55,
        "long_run_max": 15,
        "long_run_floor": 7,
        "long_run_percentage": 0.30,
        "minimum_long_run_target": 8,
        "long_run_growth_target": None,
        "race_distance_miles": 6.2,
        "quality": {
            "tempo": {"percentage": 0.18, "min": 4, "max": 7},
            "interval": {"percentage": 0.14, "min": 4, "max": 6},
            "hill": {"percentage": 0.12, "min": 3, "max": 5},
        },
    },
    RaceDistance.HALF_MARATHON: {
        "peak_weekly_mileage_cap": 60,
        "long_run_max": 15,
        "long_run_floor": 12,
        "long_run_percentage": 0.35,
        "minimum_long_run_target": 12,
        "long_run_growth_target": 12,
        "race_distance_miles": 13.1,
        "quality": {
            "tempo": {"percentage": 0.18, "min": 4, "max": 8},
            "interval": {"percentage": 0.14, "min": 4, "max": 7},
            "hill": {"percentage": 0.12, "min": 4, "max": 6},
        },
    },
    RaceDistance.MARATHON: {
        "peak_weekly_mileage_cap": 75,
        "long_run_max": 23,
        "long_run_floor": 20,
        "long_run_percentage": 0.35,
        "minimum_long_run_target": 18,
        "long_run_growth_target": 20,
        "race_distance_miles": 26.2,
        "quality": {
            "tempo": {"percentage": 0.16, "min": 4, "max": 10},
            "interval": {"percentage": 0.12, "min": 4, "max": 8},
            "hill": {"percentage": 0.10, "min": 4, "max": 7},
        },
    },
}

# =============================================================================
# ENRICHMENT AND REPAIR
# =============================================================================

# Distance used when neither the skeleton nor its text carries one
DEFAULT_WORKOUT_DISTANCES: Dict[WorkoutType, float] = {
    WorkoutType.TEMPO: 4,
    WorkoutType.INTERVAL: 4,
    WorkoutType.HILL: 4,
    WorkoutType.EASY: 3,
    WorkoutType.LONG_RUN: 3,
    WorkoutType.BIKE: 3,
}

MILEAGE_TOLERANCE = 2           # miles a week may drift before rescaling
RESCALE_RATIO_MIN = 0.7
RESCALE_RATIO_MAX = 1.3
MIN_RESCALED_DISTANCE = 2
LONG_RUN_TOLERANCE = 1
DEFAULT_HARD_DAY_DISTANCE = 5
DEFAULT_SYNTHESIZED_LONG_RUN = 6
