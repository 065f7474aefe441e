"""
Output validation against the plan store's constraints.

The store rejects null weeks, weeks without workouts, and documents over
its per-document size limit; catching these here gives a clear error
instead of a failed write.
"""

import json
import logging
from typing import Any, List, Optional, Sequence

from trainplan.core.config import settings
from trainplan.core.exceptions import PlanValidationError

logger = logging.getLogger(__name__)


def _week_payload(week: Any) -> Any:
    if hasattr(week, "model_dump"):
        return week.model_dump(mode="json", by_alias=True)
    return week


def serialized_size(weeks: Sequence[Any]) -> int:
    """Size in bytes of the weeks as stored (UTF-8 JSON)."""
    payload = [_week_payload(w) for w in weeks]
    return len(json.dumps(payload, default=str).encode("utf-8"))


def validate_plan_output(weeks: Optional[List[Any]], max_bytes: Optional[int] = None) -> int:
    """
    Check a finished plan before it is handed to persistence.

    Returns:
        Serialized size in bytes

    Raises:
        PlanValidationError: on a null week, an empty week, or an oversize plan
    """
    limit = max_bytes or settings.MAX_PLAN_DOCUMENT_BYTES

    if not weeks:
        raise PlanValidationError("Plan has no weeks")

    for index, week in enumerate(weeks):
        if week is None:
            raise PlanValidationError(f"Week at position {index + 1} is null", week_number=index + 1)
        workouts = getattr(week, "workouts", None)
        if workouts is None and isinstance(week, dict):
            workouts = week.get("workouts")
        week_number = getattr(week, "week_number", index + 1)
        if not workouts:
            raise PlanValidationError(f"Week {week_number} has no workouts", week_number=week_number)

    size = serialized_size(weeks)
    if size > limit:
        raise PlanValidationError(f"Plan is {size} bytes, above the {limit} byte document limit")

    logger.debug(f"Plan output validated: {len(weeks)} weeks, {size} bytes")
    return size
