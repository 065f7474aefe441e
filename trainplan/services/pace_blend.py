"""
Training paces and progressive pacing.

A pace set bundles the paces a plan prescribes. Plans carry two: one from
the runner's current fitness and one from their goal. Each week's workouts
use a linear blend of the two, moving from current toward goal across the
plan.

Usage:
    provider = VdotPaceProvider()
    current = provider.paces_for(distance_meters=5000, time_seconds=1500)
    goal = provider.paces_for(distance_meters=5000, time_seconds=1380)

    week_paces = blend_paces(current, goal, week_number=6, total_weeks=12)
    week_paces.threshold.pace
"""

import math
import re
from typing import Optional, Protocol

from pydantic import BaseModel, field_validator

PACE_PATTERN = re.compile(r"^(\d{1,2}):([0-5]\d)$")
METERS_PER_MILE = 1609.34


def parse_pace(pace: str) -> int:
    """'8:30' -> 510 seconds per mile."""
    match = PACE_PATTERN.match(pace.strip())
    if not match:
        raise ValueError(f"Invalid pace: {pace!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_pace(seconds: float) -> str:
    """510 -> '8:30'."""
    total = int(math.floor(seconds + 0.5))
    return f"{total // 60}:{total % 60:02d}"


class _PaceModel(BaseModel):

    @staticmethod
    def _check(v: str) -> str:
        parse_pace(v)
        return v.strip()


class EasyRange(_PaceModel):
    min: str
    max: str

    @field_validator("min", "max")
    @classmethod
    def validate_pace(cls, v: str) -> str:
        return cls._check(v)


class SinglePace(_PaceModel):
    pace: str

    @field_validator("pace")
    @classmethod
    def validate_pace(cls, v: str) -> str:
        return cls._check(v)


class PaceSet(BaseModel):
    """Structured pace bundle, all per mile."""
    easy: EasyRange
    threshold: SinglePace
    interval: SinglePace
    marathon: SinglePace

    @property
    def easy_range(self) -> str:
        return f"{self.easy.min}-{self.easy.max}"


class PaceProvider(Protocol):
    """Anything that turns a performance into a pace set."""

    def paces_for(self, distance_meters: float, time_seconds: int) -> PaceSet:
        ...


def _blend(current: str, goal: str, ratio: float) -> str:
    start = parse_pace(current)
    end = parse_pace(goal)
    return format_pace(start + (end - start) * ratio)


def blend_paces(current: PaceSet, goal: Optional[PaceSet], week_number: int, total_weeks: int) -> PaceSet:
    """
    Linear blend from current to goal by week_number / total_weeks.

    Without a goal the current paces are used unchanged.
    """
    if goal is None:
        return current

    ratio = min(max(week_number / total_weeks, 0.0), 1.0) if total_weeks > 0 else 1.0
    return PaceSet(
        easy=EasyRange(
            min=_blend(current.easy.min, goal.easy.min, ratio),
            max=_blend(current.easy.max, goal.easy.max, ratio),
        ),
        threshold=SinglePace(pace=_blend(current.threshold.pace, goal.threshold.pace, ratio)),
        interval=SinglePace(pace=_blend(current.interval.pace, goal.interval.pace, ratio)),
        marathon=SinglePace(pace=_blend(current.marathon.pace, goal.marathon.pace, ratio)),
    )


# =============================================================================
# VDOT PROVIDER
# =============================================================================

# Fraction of VO2max per training zone at benchmark VDOTs:
# (easy_fast, easy_slow, marathon, threshold, interval)
INTENSITY_TABLE = {
    30: (0.656310, 0.55, 0.857530, 0.923901, 1.113017),
    35: (0.694032, 0.55, 0.884464, 0.951698, 1.135265),
    40: (0.694401, 0.55, 0.872771, 0.938283, 1.108994),
    45: (0.689502, 0.55, 0.847517, 0.910706, 1.072698),
    50: (0.676021, 0.55, 0.819635, 0.887196, 1.046102),
    55: (0.669899, 0.55, 0.806541, 0.866426, 1.013673),
    60: (0.660404, 0.55, 0.794224, 0.848246, 0.993932),
    65: (0.658450, 0.55, 0.791007, 0.854612, 0.993399),
    70: (0.659559, 0.55, 0.787847, 0.845433, 0.982708),
}


def vdot_from_race(distance_meters: float, time_seconds: float) -> float:
    """
    Daniels/Gilbert VDOT.

    VDOT = (-4.60 + 0.182258*V + 0.000104*V^2) /
           (0.8 + 0.1894393*e^(-0.012778*T) + 0.2989558*e^(-0.1932605*T))

    V = velocity in m/min, T = time in minutes
    """
    if distance_meters <= 0 or time_seconds <= 0:
        raise ValueError("Race distance and time must be positive")

    velocity = (distance_meters / time_seconds) * 60
    minutes = time_seconds / 60.0
    numerator = -4.60 + 0.182258 * velocity + 0.000104 * velocity ** 2
    denominator = (
        0.8
        + 0.1894393 * math.exp(-0.012778 * minutes)
        + 0.2989558 * math.exp(-0.1932605 * minutes)
    )
    return numerator / denominator


def _intensity(vdot: float, idx: int) -> float:
    points = sorted(INTENSITY_TABLE)
    if vdot <= points[0]:
        return INTENSITY_TABLE[points[0]][idx]
    if vdot >= points[-1]:
        return INTENSITY_TABLE[points[-1]][idx]
    for low, high in zip(points, points[1:]):
        if low <= vdot <= high:
            t = (vdot - low) / (high - low)
            return INTENSITY_TABLE[low][idx] + t * (INTENSITY_TABLE[high][idx] - INTENSITY_TABLE[low][idx])
    return INTENSITY_TABLE[50][idx]


def _pace_seconds(vdot: float, intensity: float) -> float:
    """Reverse-solve the oxygen cost equation for velocity, return sec/mile."""
    target_vo2 = vdot * intensity
    a, b, c = 0.000104, 0.182258, -(4.6 + target_vo2)
    velocity = (-b + math.sqrt(b * b - 4 * a * c)) / (2 * a)
    return (METERS_PER_MILE / velocity) * 60


class VdotPaceProvider:
    """Pace sets from a race performance via VDOT."""

    def paces_for(self, distance_meters: float, time_seconds: int) -> PaceSet:
        vdot = vdot_from_race(distance_meters, time_seconds)
        seconds = [_pace_seconds(vdot, _intensity(vdot, i)) for i in range(5)]
        easy_fast, easy_slow, marathon, threshold, interval = seconds
        return PaceSet(
            easy=EasyRange(min=format_pace(easy_fast), max=format_pace(easy_slow)),
            threshold=SinglePace(pace=format_pace(threshold)),
            interval=SinglePace(pace=format_pace(interval)),
            marathon=SinglePace(pace=format_pace(marathon)),
        )
