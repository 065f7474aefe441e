"""
Plan Fixer

Post-processing repairs that pull generated week skeletons back onto the
numeric targets. All repairs mutate the weeks in place and are recorded
in a FixReport; a repair that would leave a week further from its target
than before is not applied.

Order used by fix_all:
    1. Missing long runs (one per non-final week, on the long-run day)
    2. Long-run distances (within 1 mi of the weekly target)
    3. Hard-day placement (quality workouts on the runner's hard days)
    4. Weekly mileage (rescaled last so the week total lands on target;
       a long run already on target is left alone)
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from trainplan.core.config import settings
from trainplan.core.exceptions import RepairSkipped
from trainplan.core.logging import log_adjustment
from trainplan.plan_framework.constants import (
    WorkoutType,
    HARD_WORKOUT_TYPES,
    MILEAGE_TOLERANCE,
    RESCALE_RATIO_MIN,
    RESCALE_RATIO_MAX,
    MIN_RESCALED_DISTANCE,
    LONG_RUN_TOLERANCE,
    DEFAULT_HARD_DAY_DISTANCE,
    DEFAULT_SYNTHESIZED_LONG_RUN,
)
from trainplan.plan_framework.growth import round_half_up
from trainplan.plan_framework.weekly_projector import WeekTarget
from .plan_parser import normalize_day
from .workout_enricher import resolve_distance
from .workout_models import PlanWeek, Workout

logger = logging.getLogger(__name__)

DISTANCE_MENTION = re.compile(r"(\d+(?:\.\d+)?)\s*(RunEQ\s*)?(?:miles|mile|mi)\b", re.IGNORECASE)

SWAPPED_FIELDS = (
    "type",
    "name",
    "description",
    "workout",
    "focus",
    "workout_id",
    "distance",
    "full_workout_details",
)


@dataclass
class FixReport:
    """Repairs applied and declined during one fix pass."""
    applied: List[str] = field(default_factory=list)
    skipped: List[RepairSkipped] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "applied": list(self.applied),
            "skipped": [s.to_dict() for s in self.skipped],
        }


def format_miles(miles: float) -> str:
    return f"{miles:g} mile{'' if miles == 1 else 's'}"


def rewrite_distance(text: Optional[str], miles: float) -> Optional[str]:
    """Replace the first mileage mention in text, keeping a RunEQ marker."""
    if not text:
        return text

    def _sub(match: "re.Match") -> str:
        value = f"{miles:g}"
        if match.group(2):
            return f"{value} RunEQ {'mile' if miles == 1 else 'miles'}"
        return format_miles(miles)

    return DISTANCE_MENTION.sub(_sub, text, count=1)


def set_distance(workout: Workout, miles: float) -> None:
    workout.distance = miles
    workout.name = rewrite_distance(workout.name, miles) or ""
    workout.description = rewrite_distance(workout.description, miles) or ""
    if workout.full_workout_details:
        workout.full_workout_details["distance"] = miles
        if workout.full_workout_details.get("name"):
            workout.full_workout_details["name"] = rewrite_distance(
                workout.full_workout_details["name"], miles
            )


def workout_miles(workout: Workout) -> float:
    """Distance of a workout, reading it from the text when unset."""
    if workout.is_rest:
        return 0.0
    if workout.distance is None:
        workout.distance = resolve_distance(workout)
    return float(workout.distance or 0)


def week_miles(week: PlanWeek) -> float:
    return sum(workout_miles(w) for w in week.workouts)


def default_tempo(distance: float) -> Dict[str, object]:
    """Fallback tempo session for a hard day that has nothing to swap in."""
    miles = f"{distance:g}"
    tempo_miles = max(2, math.floor(distance * 0.4))
    return {
        "type": WorkoutType.TEMPO,
        "name": f"Tempo Run {miles} miles",
        "description": (
            f"Tempo Run {miles} miles (2 mi warmup, {tempo_miles} mi @ tempo pace, 1 mi cooldown)"
        ),
        "workout": None,
        "focus": "Lactate threshold",
        "workout_id": None,
        "distance": distance,
        "full_workout_details": None,
    }


class PlanFixer:
    """Repairs generated weeks against WeekTargets."""

    def __init__(self, long_run_day: Optional[str] = None):
        self.long_run_day = normalize_day(long_run_day or settings.LONG_RUN_DAY)
        self.report = FixReport()

    def _applied(self, message: str) -> None:
        logger.info(message)
        self.report.applied.append(message)

    def _skipped(self, operation: str, week_number: int, reason: str) -> None:
        advisory = RepairSkipped(operation, week_number, reason)
        logger.warning(str(advisory), extra={"extra_fields": advisory.to_dict()})
        self.report.skipped.append(advisory)

    # -------------------------------------------------------------------------
    # Hard days
    # -------------------------------------------------------------------------

    def fix_hard_days_violations(self, weeks: List[PlanWeek], hard_days: Iterable[str]) -> int:
        """
        Put a quality workout on every designated hard day.

        An easy or rest workout on a hard day trades places with a quality
        workout from a non-hard day of the same week; with no candidate a
        default tempo is written at the day's distance.
        """
        hard = {normalize_day(d) for d in hard_days or []}
        if not hard:
            return 0

        fixes = 0
        for week in weeks:
            for workout in week.workouts:
                if workout.day not in hard or workout.type not in (WorkoutType.EASY, WorkoutType.REST):
                    continue

                candidate = next(
                    (
                        w for w in week.workouts
                        if w is not workout and w.type in HARD_WORKOUT_TYPES and w.day not in hard
                    ),
                    None,
                )
                if candidate is not None:
                    for name in SWAPPED_FIELDS:
                        first, second = getattr(workout, name), getattr(candidate, name)
                        setattr(workout, name, second)
                        setattr(candidate, name, first)
                    self._applied(
                        f"Week {week.week_number}: swapped {candidate.day} {workout.type.value} "
                        f"onto hard day {workout.day}"
                    )
                else:
                    distance = workout_miles(workout) or DEFAULT_HARD_DAY_DISTANCE
                    for name, value in default_tempo(distance).items():
                        setattr(workout, name, value)
                    self._applied(
                        f"Week {week.week_number}: wrote default tempo ({distance:g} mi) on hard day {workout.day}"
                    )
                fixes += 1
        return fixes

    # -------------------------------------------------------------------------
    # Weekly mileage
    # -------------------------------------------------------------------------

    def fix_mileage_mismatches(self, weeks: List[PlanWeek], targets: Dict[int, WeekTarget]) -> int:
        """
        Rescale weeks that drift more than 2 mi from the weekly target.

        A long run already within 1 mi of its target stays put; the other
        running workouts absorb the whole difference.
        """
        fixes = 0
        for week in weeks:
            target = targets.get(week.week_number)
            if target is None:
                continue
            running = [w for w in week.workouts if workout_miles(w) > 0]
            actual = sum(w.miles for w in running)
            goal = target.weekly_mileage
            if not running or abs(actual - goal) <= MILEAGE_TOLERANCE:
                continue

            ratio = goal / actual
            if not RESCALE_RATIO_MIN <= ratio <= RESCALE_RATIO_MAX:
                self._skipped(
                    "fix_mileage_mismatches",
                    week.week_number,
                    f"rescale ratio {ratio:.2f} outside [{RESCALE_RATIO_MIN}, {RESCALE_RATIO_MAX}] "
                    f"({actual:g} mi vs target {goal})",
                )
                continue

            pinned = self._pinned_long_run(running, target)
            adjustable = [w for w in running if w is not pinned]
            fixed_miles = pinned.miles if pinned is not None else 0.0
            if not adjustable or goal - fixed_miles <= 0:
                self._skipped("fix_mileage_mismatches", week.week_number, "no workouts left to rescale")
                continue

            part_ratio = (goal - fixed_miles) / (actual - fixed_miles)
            scaled = [max(MIN_RESCALED_DISTANCE, round_half_up(w.miles * part_ratio)) for w in adjustable]
            scaled = self._settle_remainder(scaled, goal - fixed_miles)
            realized = sum(scaled) + fixed_miles
            if abs(realized - goal) > abs(actual - goal):
                self._skipped("fix_mileage_mismatches", week.week_number, "rescale would move away from target")
                continue

            for workout, miles in zip(adjustable, scaled):
                if miles != workout.miles:
                    set_distance(workout, miles)
            week.total_mileage = goal
            log_adjustment(
                logger, "week_mileage_rescaled", actual, realized,
                week=week.week_number, ratio=round(part_ratio, 3),
                long_run_pinned=pinned is not None,
            )
            self._applied(f"Week {week.week_number}: rescaled {actual:g} -> {realized:g} mi (x{part_ratio:.2f})")
            fixes += 1
        return fixes

    @staticmethod
    def _pinned_long_run(running: List[Workout], target: WeekTarget) -> Optional[Workout]:
        for workout in running:
            if workout.type == WorkoutType.LONG_RUN and abs(workout.miles - target.long_run) <= LONG_RUN_TOLERANCE:
                return workout
        return None

    @staticmethod
    def _settle_remainder(scaled: List[int], goal: int) -> List[int]:
        """Spread the rounding remainder over the largest workouts, one mile at a time."""
        scaled = list(scaled)
        remainder = goal - sum(scaled)
        order = sorted(range(len(scaled)), key=lambda i: scaled[i], reverse=True)
        step = 1 if remainder > 0 else -1
        while remainder:
            changed = False
            for i in order:
                if not remainder:
                    break
                if step < 0 and scaled[i] - 1 < MIN_RESCALED_DISTANCE:
                    continue
                scaled[i] += step
                remainder -= step
                changed = True
            if not changed:
                break
        return scaled

    # -------------------------------------------------------------------------
    # Long runs
    # -------------------------------------------------------------------------

    def fix_long_run_distances(self, weeks: List[PlanWeek], targets: Dict[int, WeekTarget]) -> int:
        fixes = 0
        for week in weeks:
            target = targets.get(week.week_number)
            long_runs = week.workouts_of_type(WorkoutType.LONG_RUN)
            if target is None or not long_runs:
                continue
            long_run = long_runs[0]
            before = workout_miles(long_run)
            if abs(before - target.long_run) > LONG_RUN_TOLERANCE:
                set_distance(long_run, target.long_run)
                log_adjustment(logger, "long_run_set_to_target", before, target.long_run, week=week.week_number)
                self._applied(f"Week {week.week_number}: long run {before:g} -> {target.long_run} mi")
                fixes += 1
        return fixes

    def fix_missing_long_runs(self, weeks: List[PlanWeek]) -> int:
        """
        Exactly one long run per non-final week, on the long-run day.

        A missing long run is written as the previous week's long run
        plus one mile (capped), or a default distance in week one. Extra
        long runs become easy runs.
        """
        fixes = 0
        day = self.long_run_day
        for index, week in enumerate(weeks[:-1]):
            long_runs = week.workouts_of_type(WorkoutType.LONG_RUN)

            if not long_runs:
                distance = self._synthesized_distance(weeks[index - 1] if index else None)
                existing = week.workout_on(day)
                if existing is None:
                    existing = Workout(day=day)
                    week.workouts.append(existing)
                existing.type = WorkoutType.LONG_RUN
                existing.name = f"Long Run {format_miles(distance)}"
                existing.description = f"Long Run {format_miles(distance)}"
                existing.workout = None
                existing.workout_id = None
                existing.focus = "Endurance"
                existing.full_workout_details = None
                existing.distance = distance
                self._applied(f"Week {week.week_number}: added {distance:g} mi long run on {day}")
                fixes += 1
                continue

            keep = next((w for w in long_runs if w.day == day), long_runs[0])
            for extra in long_runs:
                if extra is keep:
                    continue
                miles = workout_miles(extra)
                extra.type = WorkoutType.EASY
                extra.name = f"Easy Run {format_miles(miles)}"
                extra.description = f"Easy Run {format_miles(miles)}"
                extra.workout_id = None
                extra.full_workout_details = None
                self._applied(f"Week {week.week_number}: demoted extra long run on {extra.day} to easy")
                fixes += 1

            if keep.day != day:
                occupant = week.workout_on(day)
                previous_day = keep.day
                if occupant is not None:
                    occupant.day = previous_day
                keep.day = day
                self._applied(f"Week {week.week_number}: moved long run from {previous_day} to {day}")
                fixes += 1
        return fixes

    @staticmethod
    def _synthesized_distance(previous: Optional[PlanWeek]) -> float:
        if previous is not None:
            prior = previous.workouts_of_type(WorkoutType.LONG_RUN)
            if prior and workout_miles(prior[0]) > 0:
                return min(prior[0].miles + 1, settings.MAX_SYNTHESIZED_LONG_RUN)
        return DEFAULT_SYNTHESIZED_LONG_RUN

    # -------------------------------------------------------------------------
    # All repairs
    # -------------------------------------------------------------------------

    def fix_all(
        self,
        weeks: List[PlanWeek],
        targets: Sequence[WeekTarget],
        hard_days: Optional[Iterable[str]] = None,
    ) -> FixReport:
        self.report = FixReport()
        by_week = {t.week_number: t for t in targets}
        self.fix_missing_long_runs(weeks)
        self.fix_long_run_distances(weeks, by_week)
        self.fix_hard_days_violations(weeks, hard_days or [])
        self.fix_mileage_mismatches(weeks, by_week)
        logger.info(
            f"Plan repair complete: {len(self.report.applied)} applied, {len(self.report.skipped)} skipped"
        )
        return self.report
