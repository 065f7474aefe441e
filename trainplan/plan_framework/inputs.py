"""
Plan Inputs

The validated request a plan is generated from. Every field is required:
a missing or invalid value fails here, before any calculation runs.

Usage:
    inputs = PlanInputs.create({
        "current_weekly_mileage": 25,
        "current_long_run": 6,
        "total_weeks": 19,
        "race_distance": "Marathon",
        "experience_level": "beginner",
    })
"""

import logging
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from trainplan.core.exceptions import ConfigurationError
from .constants import RaceDistance, ExperienceLevel, MIN_PLAN_WEEKS, MAX_PLAN_WEEKS

logger = logging.getLogger(__name__)

# Onboarding payloads arrive camelCased
_FIELD_ALIASES = {
    "currentWeeklyMileage": "current_weekly_mileage",
    "currentLongRun": "current_long_run",
    "totalWeeks": "total_weeks",
    "raceDistance": "race_distance",
    "experienceLevel": "experience_level",
}


class PlanInputs(BaseModel):
    """Runner fitness and race goal. Immutable once created."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    current_weekly_mileage: float = Field(..., gt=0)
    current_long_run: float = Field(..., gt=0)
    total_weeks: int = Field(..., ge=MIN_PLAN_WEEKS, le=MAX_PLAN_WEEKS)
    race_distance: RaceDistance
    experience_level: ExperienceLevel

    @field_validator("race_distance", mode="before")
    @classmethod
    def normalize_race_distance(cls, v: Any) -> RaceDistance:
        if v is None:
            return v
        return RaceDistance.parse(v)

    @field_validator("experience_level", mode="before")
    @classmethod
    def normalize_experience_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> "PlanInputs":
        """
        Required-fields factory.

        Raises:
            ConfigurationError: naming every missing or invalid field.
        """
        payload: Dict[str, Any] = {
            _FIELD_ALIASES.get(key, key): value for key, value in dict(data).items()
        }
        missing = [
            name for name in cls.model_fields
            if payload.get(name) in (None, "")
        ]
        if missing:
            logger.error(f"Plan inputs missing required fields: {missing}")
            raise ConfigurationError(
                f"Missing required plan inputs: {', '.join(missing)}. No defaults are applied.",
                fields=missing,
            )

        try:
            return cls(**payload)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            logger.error(f"Plan inputs invalid: {fields}")
            raise ConfigurationError(
                f"Invalid plan inputs: {', '.join(fields)}",
                fields=fields,
            ) from e

    def describe(self) -> str:
        return (
            f"{self.race_distance.value} | {self.total_weeks} weeks | "
            f"{self.experience_level.value} | {self.current_weekly_mileage:g} mpw, "
            f"{self.current_long_run:g} mi long run"
        )
