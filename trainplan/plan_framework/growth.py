"""
Base plan math shared by every race calculator.

Rounding here is round-half-up so that 2.5 weeks becomes 3 and 20.5
miles becomes 21; Python's round() would give banker's rounding instead.
"""

import math

from .constants import (
    LONG_TAPER_THRESHOLD_WEEKS,
    GROWTH_RATE_SHORT,
    GROWTH_RATE_LONG,
    GROWTH_SHORT_WEEKS,
    GROWTH_LONG_WEEKS,
)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def taper_weeks(total_weeks: int) -> int:
    """Taper is always 2-3 weeks regardless of plan length."""
    return 3 if total_weeks >= LONG_TAPER_THRESHOLD_WEEKS else 2


def training_weeks(total_weeks: int) -> int:
    """Weeks before the taper starts."""
    return max(total_weeks - taper_weeks(total_weeks), 0)


def growth_rate(total_weeks: int) -> float:
    """
    Adaptive weekly mileage growth rate.

    Short plans must grow faster to reach a useful peak; long plans can
    afford a gentler ramp. Linear between the two anchor points.

        growth_rate(12) == 0.10
        growth_rate(20) == 0.07
        growth_rate(28) == 0.04
    """
    if total_weeks <= GROWTH_SHORT_WEEKS:
        return GROWTH_RATE_SHORT
    if total_weeks >= GROWTH_LONG_WEEKS:
        return GROWTH_RATE_LONG

    span = GROWTH_LONG_WEEKS - GROWTH_SHORT_WEEKS
    progress = (total_weeks - GROWTH_SHORT_WEEKS) / span
    return GROWTH_RATE_SHORT - progress * (GROWTH_RATE_SHORT - GROWTH_RATE_LONG)
