"""
Phase Builder

Splits a plan into Base / Build / Peak / Taper week ranges.

Usage:
    distributor = PhaseDistributor()
    phases = distributor.distribute(total_weeks=18)
    phase = phase_for_week(phases, 7)
"""

import logging
from dataclasses import dataclass, asdict
from typing import List, Tuple

from trainplan.core.logging import log_adjustment
from .constants import (
    Phase,
    PHASE_PERCENTAGES,
    SHORT_PLAN_MAX_WEEKS,
    LONG_PLAN_MIN_WEEKS,
)
from .growth import round_half_up, taper_weeks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseBlock:
    """A contiguous run of weeks in one phase (1-indexed, inclusive)."""
    phase: Phase
    start_week: int
    end_week: int

    @property
    def weeks(self) -> int:
        return self.end_week - self.start_week + 1

    def contains(self, week_number: int) -> bool:
        return self.start_week <= week_number <= self.end_week

    def to_dict(self) -> dict:
        data = asdict(self)
        data["phase"] = self.phase.value
        data["weeks"] = self.weeks
        return data


class PhaseDistributor:
    """
    Allocate training weeks to phases by plan-length bucket.

    Build absorbs the rounding drift of Base and Peak so the blocks always
    sum to the training weeks; the taper is fixed at the end.
    """

    @staticmethod
    def percentages(total_weeks: int) -> Tuple[float, float, float]:
        if total_weeks <= SHORT_PLAN_MAX_WEEKS:
            return PHASE_PERCENTAGES["short"]
        if total_weeks >= LONG_PLAN_MIN_WEEKS:
            return PHASE_PERCENTAGES["long"]
        return PHASE_PERCENTAGES["standard"]

    def distribute(self, total_weeks: int) -> List[PhaseBlock]:
        """
        Build the phase plan.

        Args:
            total_weeks: Plan length in weeks

        Returns:
            Ordered, contiguous PhaseBlocks covering [1, total_weeks].
            Zero-length phases are omitted.
        """
        if total_weeks <= 0:
            logger.warning(f"Plan length {total_weeks} is not positive, using a single base week")
            return [PhaseBlock(Phase.BASE, 1, 1)]

        taper = min(taper_weeks(total_weeks), total_weeks)
        training = total_weeks - taper
        base_pct, _, peak_pct = self.percentages(total_weeks)

        base = round_half_up(training * base_pct)
        peak = round_half_up(training * peak_pct)
        build = training - base - peak

        if build < 0:
            log_adjustment(
                logger, "build_weeks_clamped", build, 0,
                level=logging.WARNING, total_weeks=total_weeks,
            )
            build = 0
            # Peak gives back the overflow so coverage stays exact
            peak = max(training - base, 0)
            base = training - peak

        blocks: List[PhaseBlock] = []
        start = 1
        for phase, length in (
            (Phase.BASE, base),
            (Phase.BUILD, build),
            (Phase.PEAK, peak),
            (Phase.TAPER, taper),
        ):
            if length <= 0:
                continue
            blocks.append(PhaseBlock(phase, start, start + length - 1))
            start += length

        logger.debug(
            f"Phases for {total_weeks} weeks: "
            + ", ".join(f"{b.phase.value}={b.weeks}" for b in blocks)
        )
        return blocks


def phase_for_week(phases: List[PhaseBlock], week_number: int) -> Phase:
    """Phase containing a week. Weeks past the plan count as taper."""
    for block in phases:
        if block.contains(week_number):
            return block.phase
    return Phase.TAPER

