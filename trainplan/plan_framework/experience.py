"""
Experience level adjustments.

Scales peak mileage and long-run max by experience. The race's long-run
floor always wins: a beginner marathoner still reaches 20 miles.
"""

import logging
from dataclasses import dataclass
from typing import Dict

from trainplan.core.logging import log_adjustment
from .constants import ExperienceLevel, EXPERIENCE_MULTIPLIERS
from .growth import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustedTargets:
    peak_mileage: int
    long_run_max: int
    experience_level: ExperienceLevel
    base_peak_mileage: int
    base_long_run_max: int
    floor_applied: bool

    def to_dict(self) -> Dict:
        return {
            "peak_mileage": self.peak_mileage,
            "long_run_max": self.long_run_max,
            "experience_level": self.experience_level.value,
            "base_peak_mileage": self.base_peak_mileage,
            "base_long_run_max": self.base_long_run_max,
            "floor_applied": self.floor_applied,
        }


class ExperienceAdjuster:

    def apply(
        self,
        base_peak: int,
        base_long_run_max: int,
        level: ExperienceLevel,
        floor: int,
    ) -> AdjustedTargets:
        level = ExperienceLevel(level)
        multipliers = EXPERIENCE_MULTIPLIERS[level]

        peak = round_half_up(base_peak * multipliers["peak_mileage"])
        adjusted_long_run = round_half_up(base_long_run_max * multipliers["long_run_max"])
        long_run_max = max(adjusted_long_run, floor)

        floor_applied = adjusted_long_run < floor
        if floor_applied:
            log_adjustment(
                logger, "long_run_floor_applied", adjusted_long_run, floor,
                experience_level=level.value,
            )

        return AdjustedTargets(
            peak_mileage=peak,
            long_run_max=long_run_max,
            experience_level=level,
            base_peak_mileage=base_peak,
            base_long_run_max=base_long_run_max,
            floor_applied=floor_applied,
        )
