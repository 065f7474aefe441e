"""
Workout and week models for generated plans.

Skeletons arrive from the plan text generator (semi-trusted), are repaired
in place by the PlanFixer, and gain full_workout_details from the
WorkoutEnricher. Field aliases match the camelCase documents the plan
store holds.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trainplan.plan_framework.constants import WorkoutType

_TYPE_ALIASES = {
    **{t.value.lower(): t for t in WorkoutType},
    "intervals": WorkoutType.INTERVAL,
    "hills": WorkoutType.HILL,
    "long": WorkoutType.LONG_RUN,
    "long_run": WorkoutType.LONG_RUN,
    "longrun": WorkoutType.LONG_RUN,
    "ride": WorkoutType.BIKE,
    "cross_training": WorkoutType.BIKE,
    "recovery": WorkoutType.EASY,
}


class Workout(BaseModel):
    """One day of a generated week."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    day: str
    type: WorkoutType = WorkoutType.EASY
    distance: Optional[float] = Field(default=None, ge=0)
    name: str = ""
    description: str = ""
    workout_id: Optional[str] = Field(default=None, alias="workoutId")
    focus: Optional[str] = None
    workout: Optional[str] = None
    full_workout_details: Optional[Dict[str, Any]] = Field(default=None, alias="fullWorkoutDetails")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, WorkoutType):
            key = v.strip()
            return _TYPE_ALIASES.get(key.lower(), key)
        return v

    @property
    def is_rest(self) -> bool:
        return self.type == WorkoutType.REST

    @property
    def miles(self) -> float:
        return 0.0 if self.is_rest else float(self.distance or 0)


class PlanWeek(BaseModel):
    """A generated week of workouts."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    week_number: int = Field(..., ge=1, alias="weekNumber")
    total_mileage: Optional[float] = Field(default=None, alias="totalMileage")
    workouts: List[Workout] = Field(default_factory=list)

    def realized_mileage(self) -> float:
        return sum(w.miles for w in self.workouts)

    def workouts_of_type(self, workout_type: WorkoutType) -> List[Workout]:
        return [w for w in self.workouts if w.type == workout_type]

    def workout_on(self, day: str) -> Optional[Workout]:
        for workout in self.workouts:
            if workout.day == day:
                return workout
        return None
