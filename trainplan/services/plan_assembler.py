"""
Plan assembly pipeline.

    targets  = TargetPlanGenerator().generate(inputs)
    weeks    = parse_plan_text(text)            # generator output
    report   = PlanFixer().fix_all(weeks, targets.weeks, hard_days)
    weeks    = WorkoutEnricher().enrich_plan(weeks, ...)
    validate_plan_output(weeks)

Each stage raises its own error type; nothing is retried here.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from trainplan.core.exceptions import ConfigurationError, PlanAdvisory
from trainplan.plan_framework.constants import RaceDistance
from trainplan.plan_framework.config import get_race_params
from trainplan.plan_framework.generator import TargetPlan, TargetPlanGenerator
from trainplan.plan_framework.inputs import PlanInputs
from trainplan.plan_framework.validation import validate_plan_output
from .pace_blend import METERS_PER_MILE, PaceProvider, PaceSet, VdotPaceProvider
from .plan_fixer import FixReport, PlanFixer
from .plan_parser import PlanParser
from .workout_enricher import WorkoutEnricher
from .workout_library import WorkoutCatalogue, get_catalogue
from .workout_models import PlanWeek

logger = logging.getLogger(__name__)

RACE_TIME_PATTERN = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{2})$")


def parse_race_time(raw: str) -> int:
    """
    "1:07:35" or "22:30" -> seconds.

    A distance prefix such as "10K-1:07:35" is ignored.
    """
    value = (raw or "").strip().split("-")[-1].strip()
    match = RACE_TIME_PATTERN.match(value)
    if not match:
        raise ConfigurationError(f"Invalid race time '{raw}'", fields=["race_time"])
    hours, minutes, seconds = match.groups()
    return int(hours or 0) * 3600 + int(minutes) * 60 + int(seconds)


def race_paces(
    race: Any,
    race_time: Optional[str],
    provider: Optional[PaceProvider] = None,
) -> Optional[PaceSet]:
    """Training paces implied by a race result, or None without a time."""
    if not race_time:
        return None
    params = get_race_params(RaceDistance.parse(race))
    meters = params.race_distance_miles * METERS_PER_MILE
    return (provider or VdotPaceProvider()).paces_for(meters, parse_race_time(race_time))


@dataclass
class AssembledPlan:
    targets: TargetPlan
    weeks: List[PlanWeek]
    report: FixReport
    size_bytes: int
    advisories: List[PlanAdvisory] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targets": self.targets.to_dict(),
            "weeks": [w.model_dump(by_alias=True, mode="json") for w in self.weeks],
            "repairs": self.report.to_dict(),
            "advisories": [a.to_dict() for a in self.advisories],
            "size_bytes": self.size_bytes,
        }


class PlanAssembler:
    """Runs generated plan text through parse, repair, enrichment and validation."""

    def __init__(
        self,
        catalogue: Optional[WorkoutCatalogue] = None,
        long_run_day: Optional[str] = None,
    ):
        self.catalogue = catalogue or get_catalogue()
        self.generator = TargetPlanGenerator()
        self.parser = PlanParser(self.catalogue)
        self.fixer = PlanFixer(long_run_day)
        self.enricher = WorkoutEnricher(self.catalogue)

    def assemble(
        self,
        inputs: PlanInputs,
        plan_text: str,
        hard_days: Optional[Iterable[str]] = None,
        current_paces: Optional[PaceSet] = None,
        goal_paces: Optional[PaceSet] = None,
        max_bytes: Optional[int] = None,
    ) -> AssembledPlan:
        targets = self.generator.generate(inputs)
        weeks = self.parser.parse(plan_text)

        if len(weeks) != inputs.total_weeks:
            logger.warning(f"Generated text has {len(weeks)} weeks, plan length is {inputs.total_weeks}")

        report = self.fixer.fix_all(weeks, targets.weeks, hard_days)

        if current_paces is None and goal_paces is not None:
            logger.warning("No current fitness paces; using goal paces for every week")
            current_paces, goal_paces = goal_paces, None
        self.enricher.enrich_plan(weeks, inputs.total_weeks, current_paces, goal_paces)

        size = validate_plan_output(weeks, max_bytes=max_bytes)
        advisories: List[PlanAdvisory] = [*targets.warnings, *report.skipped]
        return AssembledPlan(targets=targets, weeks=weeks, report=report, size_bytes=size, advisories=advisories)
