# Plan Math Framework
#
# Deterministic week-by-week targets for an endurance race plan.
#
# Architecture:
# - Rule tables in YAML (config/plan_rules.yaml), defaults in constants.py
# - Phase split and taper length from plan length
# - Race-specific peak mileage and long-run calculators
# - Experience scaling with a long-run floor per race
# - Weekly projector with 3-week build/recovery cycles and a fixed taper

from .config import ConfigService, RaceParams, QualityBounds, get_race_params
from .constants import RaceDistance, ExperienceLevel, Phase, QualityType, WorkoutType
from .inputs import PlanInputs
from .growth import growth_rate, taper_weeks, training_weeks, round_half_up
from .phase_builder import PhaseDistributor, PhaseBlock
from .race_calculators import RaceCalculator, get_race_calculator
from .experience import ExperienceAdjuster, AdjustedTargets
from .weekly_projector import WeeklyProjector, WeekTarget
from .generator import TargetPlanGenerator, TargetPlan, generate_targets
from .validation import validate_plan_output

__all__ = [
    # Rule tables
    'ConfigService',
    'RaceParams',
    'QualityBounds',
    'get_race_params',

    # Inputs and base math
    'PlanInputs',
    'growth_rate',
    'taper_weeks',
    'training_weeks',
    'round_half_up',

    # Generator components
    'PhaseDistributor',
    'PhaseBlock',
    'RaceCalculator',
    'get_race_calculator',
    'ExperienceAdjuster',
    'AdjustedTargets',
    'WeeklyProjector',
    'WeekTarget',

    # Main generator
    'TargetPlanGenerator',
    'TargetPlan',
    'generate_targets',
    'validate_plan_output',

    # Constants
    'RaceDistance',
    'ExperienceLevel',
    'Phase',
    'QualityType',
    'WorkoutType',
]
