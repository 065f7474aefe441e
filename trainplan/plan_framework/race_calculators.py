"""
Race Calculators

Race-specific peak mileage and long-run maximum formulas built on the
shared growth-rate and phase math.

Usage:
    calculator = get_race_calculator(RaceDistance.MARATHON)
    peak = calculator.calculate_peak_mileage(current=25, total_weeks=19)
    long_run_max = calculator.calculate_long_run_max(current=6, total_weeks=19, peak_mileage=peak)
    warnings = calculator.warnings
"""

import logging
from typing import Dict, List, Optional, Type

from trainplan.core.exceptions import UnreachableTargetWarning
from trainplan.core.logging import log_adjustment
from .config import RaceParams, get_race_params
from .constants import (
    RaceDistance,
    BUILD_CYCLE_WEEKS,
    SHORT_RACE_LONG_RUN_GROWTH,
    LONG_RUN_GROWTH_MIN,
    LONG_RUN_GROWTH_MAX,
)
from .growth import growth_rate, round_half_up, training_weeks

logger = logging.getLogger(__name__)


class RaceCalculator:
    """
    Base calculator. Subclasses bind a race distance and may override the
    long-run growth model.

    Advisories raised while calculating are collected on `warnings`; a
    calculator instance is meant for one plan request.
    """

    race_distance: RaceDistance = None

    def __init__(self, params: Optional[RaceParams] = None):
        self.params = params or get_race_params(self.race_distance)
        self.warnings: List[UnreachableTargetWarning] = []

    def calculate_peak_mileage(self, current: float, total_weeks: int) -> int:
        """
        Compound growth over the build weeks of each 3-week cycle,
        capped by the race's peak weekly mileage.
        """
        rate = growth_rate(total_weeks)
        build_cycles = training_weeks(total_weeks) // BUILD_CYCLE_WEEKS
        effective_growth_weeks = build_cycles * 2
        theoretical = current * (1 + rate) ** effective_growth_weeks
        result = round_half_up(theoretical)

        cap = self.params.peak_weekly_mileage_cap
        if result > cap:
            log_adjustment(
                logger, "peak_mileage_capped", result, cap,
                race=self.params.race_distance.value,
            )
            result = cap

        logger.debug(
            f"{self.params.race_distance.value} peak: {current} mpw x (1+{rate:.4f})^"
            f"{effective_growth_weeks} = {theoretical:.1f} -> {result}"
        )
        return result

    def long_run_growth_per_week(self, current: float, total_weeks: int) -> float:
        return SHORT_RACE_LONG_RUN_GROWTH

    def calculate_long_run_max(self, current: float, total_weeks: int, peak_mileage: float) -> int:
        """
        Long-run ceiling for the plan.

        Linear growth over the training weeks, capped by the race maximum and
        by the share of peak weekly mileage a long run may take.
        """
        weeks = max(training_weeks(total_weeks), 1)
        per_week = self.long_run_growth_per_week(current, total_weeks)
        theoretical = current + weeks * per_week
        result = round_half_up(theoretical)

        volume_cap = round_half_up(peak_mileage * self.params.long_run_percentage)
        cap = min(self.params.long_run_max, volume_cap)
        if result > cap:
            log_adjustment(
                logger, "long_run_max_capped", result, cap,
                race=self.params.race_distance.value,
                race_max=self.params.long_run_max,
                volume_cap=volume_cap,
            )
            result = cap

        target = self.params.minimum_long_run_target
        if result < target:
            self._warn(UnreachableTargetWarning(self.params.race_distance.value, target, result))

        return result

    def _warn(self, warning: UnreachableTargetWarning) -> None:
        logger.warning(str(warning))
        self.warnings.append(warning)


class FiveKCalculator(RaceCalculator):
    race_distance = RaceDistance.FIVE_K


class TenKCalculator(RaceCalculator):
    race_distance = RaceDistance.TEN_K


class _FloorDrivenCalculator(RaceCalculator):
    """
    Long-run growth is sized to reach the race's growth target within the
    training weeks, bounded to 0.5-0.75 miles per week.
    """

    def required_growth_per_week(self, current: float, total_weeks: int) -> float:
        weeks = max(training_weeks(total_weeks), 1)
        target = self.params.long_run_growth_target or self.params.long_run_floor
        return max(0.0, target - current) / weeks

    def long_run_growth_per_week(self, current: float, total_weeks: int) -> float:
        required = self.required_growth_per_week(current, total_weeks)
        rate = min(max(LONG_RUN_GROWTH_MIN, required), LONG_RUN_GROWTH_MAX)
        if rate != max(LONG_RUN_GROWTH_MIN, required):
            log_adjustment(
                logger, "long_run_growth_capped", round(required, 3), rate,
                level=logging.WARNING, race=self.params.race_distance.value,
            )
        return rate


class HalfMarathonCalculator(_FloorDrivenCalculator):
    race_distance = RaceDistance.HALF_MARATHON


class MarathonCalculator(_FloorDrivenCalculator):
    race_distance = RaceDistance.MARATHON

    def calculate_long_run_max(self, current: float, total_weeks: int, peak_mileage: float) -> int:
        required = self.required_growth_per_week(current, total_weeks)
        if required > LONG_RUN_GROWTH_MAX:
            target = self.params.long_run_growth_target or self.params.long_run_floor
            achievable = round_half_up(current + max(training_weeks(total_weeks), 1) * LONG_RUN_GROWTH_MAX)
            self._warn(UnreachableTargetWarning(
                self.params.race_distance.value,
                target,
                achievable,
                message=(
                    f"Marathon: reaching a {target} mi long run from {current:g} mi needs "
                    f"{required:.2f} mi/week of growth (safe max {LONG_RUN_GROWTH_MAX}). "
                    f"The long run will be floored at {self.params.long_run_floor} mi; "
                    f"consider a longer plan."
                ),
            ))
        return super().calculate_long_run_max(current, total_weeks, peak_mileage)


CALCULATORS: Dict[RaceDistance, Type[RaceCalculator]] = {
    RaceDistance.FIVE_K: FiveKCalculator,
    RaceDistance.TEN_K: TenKCalculator,
    RaceDistance.HALF_MARATHON: HalfMarathonCalculator,
    RaceDistance.MARATHON: MarathonCalculator,
}


def get_race_calculator(race_distance: RaceDistance) -> RaceCalculator:
    """Fresh calculator for one plan request."""
    return CALCULATORS[RaceDistance.parse(race_distance)]()
