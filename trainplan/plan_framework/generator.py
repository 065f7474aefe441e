"""
Plan Generator

Main orchestrator for the plan-math engine.
Coordinates phases, race calculators, experience adjustment and weekly
projection to produce the numeric targets a plan must hit.

Usage:
    generator = TargetPlanGenerator()

    plan = generator.generate(PlanInputs.create({
        "current_weekly_mileage": 25,
        "current_long_run": 6,
        "total_weeks": 19,
        "race_distance": "Marathon",
        "experience_level": "beginner",
    }))

    plan.weeks          # List[WeekTarget]
    plan.warnings       # List[UnreachableTargetWarning]
"""

import logging
from dataclasses import dataclass, field
from typing import List, Dict, Any

from trainplan.core.exceptions import UnreachableTargetWarning
from .config import RaceParams, get_race_params
from .experience import ExperienceAdjuster, AdjustedTargets
from .growth import growth_rate
from .inputs import PlanInputs
from .phase_builder import PhaseDistributor, PhaseBlock
from .race_calculators import get_race_calculator
from .weekly_projector import WeeklyProjector, WeekTarget

logger = logging.getLogger(__name__)


@dataclass
class TargetPlan:
    """Numeric plan targets for one request."""

    inputs: PlanInputs
    race_params: RaceParams
    phases: List[PhaseBlock]
    adjusted: AdjustedTargets
    growth_rate: float
    weeks: List[WeekTarget]
    warnings: List[UnreachableTargetWarning] = field(default_factory=list)

    @property
    def peak_weekly_mileage(self) -> int:
        return self.adjusted.peak_mileage

    @property
    def long_run_max(self) -> int:
        return self.adjusted.long_run_max

    @property
    def max_long_run(self) -> int:
        """Longest long run actually scheduled."""
        return max(w.long_run for w in self.weeks)

    def get_week(self, week_number: int) -> WeekTarget:
        return self.weeks[week_number - 1]

    def distance_hints(self) -> List[Dict[str, Any]]:
        """Per-week distance guidance for the plan text generator's prompt."""
        return [
            {
                "week": w.week_number,
                "phase": w.phase.value,
                "total_miles": w.weekly_mileage,
                "long_run_miles": w.long_run,
                "tempo_miles": w.tempo_distance,
                "interval_miles": w.interval_distance,
                "hill_miles": w.hill_distance,
            }
            for w in self.weeks
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "inputs": self.inputs.model_dump(mode="json"),
            "targets": {
                "peak_weekly_mileage": self.peak_weekly_mileage,
                "long_run_max": self.long_run_max,
                "growth_rate": round(self.growth_rate, 4),
            },
            "experience": self.adjusted.to_dict(),
            "phases": [p.to_dict() for p in self.phases],
            "weeks": [w.to_dict() for w in self.weeks],
            "warnings": [w.to_dict() for w in self.warnings],
        }


class TargetPlanGenerator:
    """
    Deterministic plan math.

    Pure given the inputs and the loaded rule tables: generating twice
    from the same PlanInputs yields equal plans.
    """

    def __init__(self):
        self.phase_distributor = PhaseDistributor()
        self.experience_adjuster = ExperienceAdjuster()

    def generate(self, inputs: PlanInputs) -> TargetPlan:
        logger.info(f"Plan math: {inputs.describe()}")

        params = get_race_params(inputs.race_distance)
        calculator = get_race_calculator(inputs.race_distance)

        base_peak = calculator.calculate_peak_mileage(inputs.current_weekly_mileage, inputs.total_weeks)
        base_long_run = calculator.calculate_long_run_max(
            inputs.current_long_run, inputs.total_weeks, base_peak
        )

        adjusted = self.experience_adjuster.apply(
            base_peak, base_long_run, inputs.experience_level, params.long_run_floor
        )

        phases = self.phase_distributor.distribute(inputs.total_weeks)
        weeks = WeeklyProjector(params).project(
            inputs, phases, adjusted.peak_mileage, adjusted.long_run_max
        )

        plan = TargetPlan(
            inputs=inputs,
            race_params=params,
            phases=phases,
            adjusted=adjusted,
            growth_rate=growth_rate(inputs.total_weeks),
            weeks=weeks,
            warnings=list(calculator.warnings),
        )

        if plan.max_long_run < params.long_run_floor:
            # Projection guarantees the floor; reaching here means the rule tables are inconsistent
            logger.error(
                f"{params.race_distance.value} plan peaks at {plan.max_long_run} mi, "
                f"below the {params.long_run_floor} mi floor"
            )
        else:
            logger.info(
                f"Plan targets: peak {plan.peak_weekly_mileage} mpw, long run max "
                f"{plan.long_run_max} mi, longest scheduled {plan.max_long_run} mi"
            )

        return plan


def generate_targets(data: Dict[str, Any]) -> TargetPlan:
    """Validate raw inputs and generate targets in one call."""
    return TargetPlanGenerator().generate(PlanInputs.create(data))
