"""
Custom exception classes and plan advisories.

Errors abort a generation request. Advisories (subclasses of PlanAdvisory)
are never raised: they are logged and returned alongside the plan so the
caller can act on them.
"""
from typing import Optional, List


class PlanEngineError(Exception):
    """Base engine exception with consistent structure."""

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.error_code = error_code


class ConfigurationError(PlanEngineError):
    """Plan inputs are missing or invalid. Raised before any calculation."""

    def __init__(self, detail: str, fields: Optional[List[str]] = None):
        super().__init__(detail, error_code="CONFIGURATION_ERROR")
        self.fields = fields or []


class GenerationError(PlanEngineError):
    """Generated plan text is empty or cannot be parsed."""

    def __init__(self, detail: str, error_code: str = "GENERATION_ERROR"):
        super().__init__(detail, error_code=error_code)


class UnknownWorkoutToken(GenerationError):
    """A WORKOUT_ID token does not resolve to a catalogue template."""

    def __init__(self, token: str, reason: str):
        super().__init__(
            f"Unknown workout token '{token}': {reason}",
            error_code="UNKNOWN_WORKOUT_TOKEN",
        )
        self.token = token
        self.reason = reason


class PlanValidationError(PlanEngineError):
    """Finished plan violates a persistence constraint."""

    def __init__(self, detail: str, week_number: Optional[int] = None):
        super().__init__(detail, error_code="PLAN_VALIDATION_ERROR")
        self.week_number = week_number


# =============================================================================
# ADVISORIES
# =============================================================================

class PlanAdvisory(UserWarning):
    """Non-fatal finding attached to a plan."""

    def to_dict(self) -> dict:
        return {"type": type(self).__name__, "message": str(self)}


class UnreachableTargetWarning(PlanAdvisory):
    """
    The plan cannot reach the minimum long-run preparation target
    for the race within the given number of weeks.
    """

    def __init__(self, race_distance: str, target: float, achieved: float, message: Optional[str] = None):
        self.race_distance = race_distance
        self.target = target
        self.achieved = achieved
        super().__init__(
            message
            or f"{race_distance}: long run reaches {achieved} mi, below the {target} mi "
               f"preparation target. Consider a longer plan."
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "race_distance": self.race_distance,
            "target": self.target,
            "achieved": self.achieved,
        })
        return data


class RepairSkipped(PlanAdvisory):
    """A repair pass declined to touch a week."""

    def __init__(self, operation: str, week_number: int, reason: str):
        self.operation = operation
        self.week_number = week_number
        self.reason = reason
        super().__init__(f"{operation} skipped week {week_number}: {reason}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "operation": self.operation,
            "week_number": self.week_number,
            "reason": self.reason,
        })
        return data
