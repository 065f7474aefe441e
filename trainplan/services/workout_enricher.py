"""
Workout Enricher

Hydrates generated workout skeletons with catalogue detail and
week-specific paces.

Pipeline per workout:
    1. Cosmetic typo repair ("miless" -> "miles"); idempotent
    2. Distance resolution through DISTANCE_STRATEGIES (first hit wins)
    3. Paces blended from current toward goal fitness for the week
    4. Template prescription for [WORKOUT_ID] tokens, otherwise a generic
       detail block with generic pace terms replaced by real paces

Usage:
    enricher = WorkoutEnricher()
    enricher.enrich_plan(weeks, total_weeks=16, current_paces=current, goal_paces=goal)
"""

import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from trainplan.plan_framework.constants import WorkoutType, DEFAULT_WORKOUT_DISTANCES
from .pace_blend import PaceSet, blend_paces
from .workout_library import WorkoutCatalogue, get_catalogue
from .workout_models import PlanWeek, Workout

logger = logging.getLogger(__name__)


# =============================================================================
# TEXT REPAIR
# =============================================================================

TYPO_FIXES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"\b(?:miless|milees|milles|milse|mile s)\b", re.IGNORECASE), "miles"),
    (re.compile(r"\b(?:minuites|minuetes|minuts|minute s)\b", re.IGNORECASE), "minutes"),
    (re.compile(r"\brecovry\b", re.IGNORECASE), "recovery"),
)


def fix_common_typos(text: Optional[str]) -> Optional[str]:
    if not text:
        return text
    for pattern, replacement in TYPO_FIXES:
        text = pattern.sub(replacement, text)
    return text


# =============================================================================
# DISTANCE RESOLUTION
# =============================================================================

MILES_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:miles?|mi)\b", re.IGNORECASE)
RUNEQ_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*RunEQ", re.IGNORECASE)

DistanceStrategy = Callable[[Workout], Optional[float]]


def explicit_distance(workout: Workout) -> Optional[float]:
    """Distance the generator set on the workout."""
    if workout.distance and workout.distance > 0:
        return float(workout.distance)
    return None


def distance_from_text(workout: Workout) -> Optional[float]:
    """
    First mileage mentioned in the description, then the name.

    Bike workouts count equivalence miles ("8 RunEQ").
    """
    pattern = RUNEQ_PATTERN if workout.type == WorkoutType.BIKE else MILES_PATTERN
    for text in (workout.description, workout.name):
        match = pattern.search(fix_common_typos(text) or "")
        if match:
            value = float(match.group(1))
            if value > 0:
                return value
    return None


def type_default(workout: Workout) -> Optional[float]:
    """Fixed distance by workout type (quality 4 mi, easy/long 3 mi)."""
    return DEFAULT_WORKOUT_DISTANCES.get(workout.type)


DISTANCE_STRATEGIES: Tuple[DistanceStrategy, ...] = (
    explicit_distance,
    distance_from_text,
    type_default,
)


def resolve_distance(
    workout: Workout,
    strategies: Sequence[DistanceStrategy] = DISTANCE_STRATEGIES,
) -> Optional[float]:
    """Distance from the first strategy that yields one. Rest days have none."""
    if workout.type == WorkoutType.REST:
        return None
    for strategy in strategies:
        distance = strategy(workout)
        if distance:
            if strategy is not strategies[0]:
                logger.debug(f"{workout.day}: distance {distance} from {strategy.__name__}")
            return distance
    return None


# =============================================================================
# PACES
# =============================================================================

def _generic_pace_rules(paces: PaceSet) -> List[Tuple[re.Pattern, str]]:
    threshold = f"{paces.threshold.pace}/mile"
    marathon = f"{paces.marathon.pace}/mile"
    interval = f"{paces.interval.pace}/mile"
    easy = f"{paces.easy_range}/mile"
    # Longer phrases first so "half marathon pace" is not caught by "marathon pace"
    return [
        (re.compile(r"\bhalf[- ]marathon pace\b", re.IGNORECASE), threshold),
        (re.compile(r"\b10K pace\b", re.IGNORECASE), threshold),
        (re.compile(r"\b(?:threshold|tempo) pace\b", re.IGNORECASE), threshold),
        (re.compile(r"@ tempo\b(?! effort)", re.IGNORECASE), f"@ {threshold}"),
        (re.compile(r"\bmarathon pace\b", re.IGNORECASE), marathon),
        (re.compile(r"\bMP\b"), marathon),
        (re.compile(r"\b5K pace\b", re.IGNORECASE), interval),
        (re.compile(r"\bVO2 ?max effort\b", re.IGNORECASE), interval),
        (re.compile(r"\beasy pace\b", re.IGNORECASE), easy),
    ]


def replace_generic_paces(text: Optional[str], paces: Optional[PaceSet]) -> Optional[str]:
    """Swap generic pace terms for the runner's actual paces."""
    if not text or paces is None:
        return text
    for pattern, replacement in _generic_pace_rules(paces):
        text = pattern.sub(replacement, text)
    return text


def target_pace(workout_type: WorkoutType, paces: Optional[PaceSet]) -> Optional[str]:
    if paces is None:
        return None
    if workout_type == WorkoutType.TEMPO:
        return f"{paces.threshold.pace}/mi"
    if workout_type == WorkoutType.INTERVAL:
        return f"{paces.interval.pace}/mi"
    if workout_type in (WorkoutType.EASY, WorkoutType.LONG_RUN):
        return f"{paces.easy_range}/mi"
    # Hills and cross-training are effort based
    return None


# =============================================================================
# ENRICHER
# =============================================================================

class WorkoutEnricher:
    """Attaches full_workout_details to generated workouts."""

    def __init__(self, catalogue: Optional[WorkoutCatalogue] = None):
        self.catalogue = catalogue or get_catalogue()

    def enrich_workout(
        self,
        workout: Workout,
        week_number: int,
        total_weeks: int,
        current_paces: Optional[PaceSet] = None,
        goal_paces: Optional[PaceSet] = None,
    ) -> Workout:
        """
        Enrich one workout in place.

        Raises:
            UnknownWorkoutToken: if workout_id does not resolve
        """
        workout.name = fix_common_typos(workout.name) or ""
        workout.description = fix_common_typos(workout.description) or ""

        if workout.type == WorkoutType.REST:
            workout.distance = None
            workout.full_workout_details = {
                "name": workout.name or "Rest",
                "structure": "Rest day: no running",
                "distance": None,
            }
            return workout

        distance = resolve_distance(workout)
        workout.distance = distance

        paces = None
        if current_paces is not None:
            paces = blend_paces(current_paces, goal_paces, week_number, total_weeks)

        if workout.workout_id:
            token = self.catalogue.parse_token(workout.workout_id)
            details = self.catalogue.prescribe(
                token,
                paces=paces,
                distance=distance,
                week_number=week_number,
                total_weeks=total_weeks,
            )
            workout.workout_id = str(token)
        else:
            details = {
                "name": workout.name,
                "description": replace_generic_paces(workout.description, paces),
                "structure": replace_generic_paces(workout.workout or workout.description, paces),
                "distance": distance,
            }
            if paces is not None:
                details["paces"] = paces.model_dump()

        workout.description = replace_generic_paces(workout.description, paces) or ""
        details["target_pace"] = target_pace(workout.type, paces)
        details["week_number"] = week_number
        workout.full_workout_details = details
        return workout

    def enrich_week(
        self,
        week: PlanWeek,
        total_weeks: int,
        current_paces: Optional[PaceSet] = None,
        goal_paces: Optional[PaceSet] = None,
    ) -> PlanWeek:
        for workout in week.workouts:
            self.enrich_workout(workout, week.week_number, total_weeks, current_paces, goal_paces)
        return week

    def enrich_plan(
        self,
        weeks: List[PlanWeek],
        total_weeks: int,
        current_paces: Optional[PaceSet] = None,
        goal_paces: Optional[PaceSet] = None,
    ) -> List[PlanWeek]:
        for week in weeks:
            self.enrich_week(week, total_weeks, current_paces, goal_paces)
        enriched = sum(1 for w in weeks for wo in w.workouts if wo.full_workout_details)
        logger.info(f"Enriched {enriched} workouts across {len(weeks)} weeks")
        return weeks
