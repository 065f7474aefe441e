"""
Weekly Projector

Expands adjusted targets into a week-by-week table using a 3-week
build/recovery cycle and a fixed taper.

Usage:
    projector = WeeklyProjector(race_params)
    weeks = projector.project(inputs, phases, peak_mileage=41, long_run_max=20)

Rules:
    - Build weeks interpolate linearly from current fitness to the targets
    - Every 3rd week is a cutback (mileage x0.90, long run drops)
    - Taper mileage falls 20% per week, never below 40% of peak
    - Taper long runs are 65% / 50% / 35% of the long-run max
    - No week exceeds the adjusted peak or long-run max
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, List

from trainplan.core.logging import log_adjustment
from .config import RaceParams
from .constants import (
    Phase,
    QualityType,
    BUILD_CYCLE_WEEKS,
    CUTBACK_MILEAGE_FACTOR,
    LONG_RUN_STEP_UP_FACTOR,
    LONG_RUN_RECOVERY_FACTOR,
    LONG_RUN_RECOVERY_DROP,
    TAPER_WEEKLY_REDUCTION,
    TAPER_MILEAGE_FLOOR,
    TAPER_LONG_RUN_FRACTIONS,
)
from .growth import round_half_up, training_weeks
from .inputs import PlanInputs
from .phase_builder import PhaseBlock, phase_for_week

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekTarget:
    """Numeric targets for one plan week."""
    week_number: int
    phase: Phase
    weekly_mileage: int
    long_run: int
    tempo_distance: int
    interval_distance: int
    hill_distance: int
    cutback: bool = False

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data


def cycle_position(week_number: int) -> int:
    """0 and 1 are build weeks, 2 is the recovery week."""
    return (week_number - 1) % BUILD_CYCLE_WEEKS


def is_cutback_week(week_number: int, total_weeks: int) -> bool:
    return week_number <= training_weeks(total_weeks) and cycle_position(week_number) == 2


def _linear(week_number: int, start: float, end: float, total_weeks: int) -> float:
    build_weeks = max(training_weeks(total_weeks), 1)
    return start + (end - start) * (week_number / build_weeks)


def weekly_mileage(week_number: int, start: float, peak: float, total_weeks: int) -> int:
    """Target weekly mileage for a week (1-indexed)."""
    taper_start = training_weeks(total_weeks) + 1
    if week_number >= taper_start:
        taper_index = week_number - taper_start + 1
        taper_percent = max(1 - taper_index * TAPER_WEEKLY_REDUCTION, TAPER_MILEAGE_FLOOR)
        return round_half_up(peak * taper_percent)

    linear = _linear(week_number, start, peak, total_weeks)
    if cycle_position(week_number) == 2:
        return round_half_up(linear * CUTBACK_MILEAGE_FACTOR)
    return round_half_up(linear)


def weekly_long_run(week_number: int, start: float, long_run_max: float, total_weeks: int) -> int:
    """Target long run for a week (1-indexed)."""
    taper_start = training_weeks(total_weeks) + 1
    if week_number >= taper_start:
        taper_index = min(week_number - taper_start, len(TAPER_LONG_RUN_FRACTIONS) - 1)
        return round_half_up(long_run_max * TAPER_LONG_RUN_FRACTIONS[taper_index])

    linear = _linear(week_number, start, long_run_max, total_weeks)
    position = cycle_position(week_number)
    if position == 0:
        return round_half_up(linear)
    if position == 1:
        stepped = round_half_up(linear * LONG_RUN_STEP_UP_FACTOR)
        cap = round_half_up(long_run_max)
        if stepped > cap:
            log_adjustment(logger, "long_run_step_up_capped", stepped, cap, week=week_number)
            return cap
        return stepped
    return round_half_up(max(linear - LONG_RUN_RECOVERY_DROP, linear * LONG_RUN_RECOVERY_FACTOR))


def quality_workout_distance(mileage: float, quality_type: QualityType, params: RaceParams) -> int:
    """Share of the week's mileage, clamped to the race's bounds, to the nearest mile."""
    bounds = params.quality_bounds(quality_type)
    raw = mileage * bounds.percentage
    clamped = min(max(raw, bounds.min_miles), bounds.max_miles)
    if clamped != raw:
        log_adjustment(
            logger, "quality_distance_clamped", round(raw, 2), clamped,
            level=logging.DEBUG, quality=quality_type.value, race=params.race_distance.value,
        )
    return round_half_up(clamped)


class WeeklyProjector:
    """Builds the WeekTarget table for a plan."""

    def __init__(self, params: RaceParams):
        self.params = params

    def project(
        self,
        inputs: PlanInputs,
        phases: List[PhaseBlock],
        peak_mileage: int,
        long_run_max: int,
    ) -> List[WeekTarget]:
        total = inputs.total_weeks
        start_mileage = inputs.current_weekly_mileage
        start_long_run = inputs.current_long_run

        mileages: List[int] = []
        long_runs: List[int] = []
        for week in range(1, total + 1):
            mileage = weekly_mileage(week, start_mileage, peak_mileage, total)
            if mileage > peak_mileage:
                log_adjustment(logger, "weekly_mileage_capped", mileage, peak_mileage, week=week)
                mileage = peak_mileage

            long_run = weekly_long_run(week, start_long_run, long_run_max, total)
            if long_run > long_run_max:
                log_adjustment(logger, "long_run_capped", long_run, long_run_max, week=week)
                long_run = long_run_max

            mileages.append(mileage)
            long_runs.append(long_run)

        self._guarantee_peak_long_run(long_runs, long_run_max, total)

        targets = []
        for week in range(1, total + 1):
            mileage = mileages[week - 1]
            targets.append(WeekTarget(
                week_number=week,
                phase=phase_for_week(phases, week),
                weekly_mileage=mileage,
                long_run=long_runs[week - 1],
                tempo_distance=quality_workout_distance(mileage, QualityType.TEMPO, self.params),
                interval_distance=quality_workout_distance(mileage, QualityType.INTERVAL, self.params),
                hill_distance=quality_workout_distance(mileage, QualityType.HILL, self.params),
                cutback=is_cutback_week(week, total),
            ))

        logger.info(f"Long runs: {', '.join(str(lr) for lr in long_runs)}")
        return targets

    def _guarantee_peak_long_run(self, long_runs: List[int], long_run_max: int, total_weeks: int) -> None:
        """
        Make sure the plan actually reaches its long-run max before the taper.

        Rounding in the 3-week pattern can leave the longest build-week run a
        mile or two short; the last non-cutback training week is raised.
        """
        training = training_weeks(total_weeks)
        if training <= 0:
            return

        build_max = max(long_runs[:training])
        if build_max >= long_run_max:
            return

        candidates = [w for w in range(1, training + 1) if cycle_position(w) != 2]
        week = candidates[-1] if candidates else training
        log_adjustment(
            logger, "peak_long_run_guaranteed", long_runs[week - 1], long_run_max,
            week=week, previous_max=build_max,
        )
        long_runs[week - 1] = long_run_max
