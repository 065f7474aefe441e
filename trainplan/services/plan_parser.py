"""
Plan text parser.

Turns the generator's markdown-ish plan text into PlanWeek skeletons:

    ## Week 3 - Build (32 miles)
    - **Tue**: [WORKOUT_ID: tempo_TRADITIONAL_TEMPO_0] Classic Tempo 6 miles
    - Sun: Long Run 12 miles

Workout tokens are validated against the catalogue here, so nothing
downstream ever sees a token that does not resolve.
"""

import logging
import re
from typing import Dict, List, Optional

from trainplan.core.exceptions import GenerationError
from trainplan.plan_framework.constants import DAYS_OF_WEEK, WorkoutType
from trainplan.plan_framework.growth import round_half_up
from .workout_library import WorkoutCatalogue, get_catalogue
from .workout_models import PlanWeek, Workout

logger = logging.getLogger(__name__)

KM_TO_MILES = 0.621371

WEEK_HEADER = re.compile(r"^[\s#*]*Week\s+(\d+)", re.IGNORECASE)
HEADER_MILEAGE = re.compile(r"(\d+(?:\.\d+)?)\s*(miles|kilometers|km|mi)\b", re.IGNORECASE)
WORKOUT_LINE = re.compile(
    r"^\s*[-*\s]*\**\s*"
    r"(Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday|Mon|Tue|Wed|Thu|Fri|Sat|Sun)"
    r"\**\s*[:\-]\s*\**\s*(.+)$",
    re.IGNORECASE,
)
WORKOUT_ID = re.compile(r"\[WORKOUT_ID:\s*([^\]]+?)\s*\]\s*", re.IGNORECASE)

_DAY_NAMES: Dict[str, str] = {}
for _day in DAYS_OF_WEEK:
    _DAY_NAMES[_day.lower()] = _day
    _DAY_NAMES[_day[:3].lower()] = _day

_KEYWORD_TYPES = (
    ("tempo", WorkoutType.TEMPO),
    ("threshold", WorkoutType.TEMPO),
    ("hill", WorkoutType.HILL),
    ("interval", WorkoutType.INTERVAL),
    ("repeats", WorkoutType.INTERVAL),
)


def normalize_day(raw: str) -> str:
    return _DAY_NAMES.get(raw.strip().lower(), raw.strip())


def header_mileage(line: str) -> Optional[float]:
    """Last distance mentioned on a week header line, in miles."""
    matches = HEADER_MILEAGE.findall(line)
    if not matches:
        return None
    value, unit = matches[-1]
    miles = float(value)
    if unit.lower() in ("km", "kilometers"):
        miles = round_half_up(miles * KM_TO_MILES)
    return miles


def infer_workout_type(description: str) -> WorkoutType:
    """Workout type from free text when no catalogue token is present."""
    text = description.lower().strip()
    if re.match(r"^rest\b", text) or text.startswith("off"):
        return WorkoutType.REST
    if "ride" in text or "runeq" in text:
        return WorkoutType.BIKE
    if "long run" in text:
        return WorkoutType.LONG_RUN
    for keyword, workout_type in _KEYWORD_TYPES:
        if keyword in text:
            return workout_type
    return WorkoutType.EASY


class PlanParser:
    """Line-oriented parser for generated plan text."""

    def __init__(self, catalogue: Optional[WorkoutCatalogue] = None):
        self.catalogue = catalogue or get_catalogue()

    def parse(self, text: Optional[str]) -> List[PlanWeek]:
        """
        Parse plan text into weeks.

        Raises:
            GenerationError: text is empty or contains no week headers
            UnknownWorkoutToken: a WORKOUT_ID tag does not resolve
        """
        if not text or not text.strip():
            raise GenerationError("Generated plan text is empty", error_code="EMPTY_PLAN_TEXT")

        weeks: List[PlanWeek] = []
        seen = set()
        current: Optional[PlanWeek] = None
        skipping = False

        for line_number, line in enumerate(text.splitlines(), start=1):
            header = WEEK_HEADER.match(line)
            if header:
                week_number = int(header.group(1))
                if week_number < 1 or week_number in seen:
                    logger.warning(f"Skipping duplicate or invalid week {week_number} at line {line_number}")
                    current, skipping = None, True
                    continue
                seen.add(week_number)
                current = PlanWeek(week_number=week_number, total_mileage=header_mileage(line))
                weeks.append(current)
                skipping = False
                continue

            if current is None:
                if not skipping and line.strip():
                    logger.debug(f"Ignoring line {line_number} outside any week")
                continue

            match = WORKOUT_LINE.match(line)
            if match:
                current.workouts.append(self._parse_workout(match.group(1), match.group(2)))

        if not weeks:
            raise GenerationError("No weeks found in generated plan text", error_code="NO_WEEKS_PARSED")

        logger.info(
            f"Parsed {len(weeks)} weeks, {sum(len(w.workouts) for w in weeks)} workouts"
        )
        return weeks

    def _parse_workout(self, raw_day: str, raw_description: str) -> Workout:
        description = raw_description.strip().rstrip("*").strip()
        token = None
        id_match = WORKOUT_ID.search(description)
        if id_match:
            token = self.catalogue.parse_token(id_match.group(1))
            description = WORKOUT_ID.sub("", description, count=1).strip()

        workout_type = token.library.workout_type if token else infer_workout_type(description)
        name = description.split(":")[0].split("(")[0].strip() or workout_type.value
        return Workout(
            day=normalize_day(raw_day),
            type=workout_type,
            name=name,
            description=description,
            workout_id=str(token) if token else None,
        )


def parse_plan_text(text: Optional[str], catalogue: Optional[WorkoutCatalogue] = None) -> List[PlanWeek]:
    return PlanParser(catalogue).parse(text)
