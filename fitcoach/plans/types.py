"""Weekly training plan schema.

A plan covers one Monday–Sunday week for one client and holds its training
days, each holding the exercises prescribed for that day. Identities are
issued by the store and are None until a row is persisted.

Payload models carry the editable fields only; row models add identity,
parent reference and order_index.
"""

from pydantic import BaseModel, ConfigDict, Field


class DayPayload(BaseModel):
    """Editable fields of a training day.

    Attributes:
        day_of_week: 0 = Monday .. 6 = Sunday
        name: Display name (e.g., "Day A - Chest & Triceps"); empty means
            the weekday name is used when saved
        is_rest_day: Whether the day is a rest day
    """

    model_config = ConfigDict(extra="forbid")

    day_of_week: int = Field(ge=0, le=6)
    name: str = ""
    is_rest_day: bool = False


class ExercisePayload(BaseModel):
    """Editable fields of an exercise prescribed for a day.

    Attributes:
        exercise_id: Reference to the exercise library entry
        sets: Number of sets
        reps: Repetitions, free-form (e.g., "12" or "10-12")
        weight_kg: Optional load in kilograms
        rest_seconds: Rest between sets
        notes: Optional trainer notes for this exercise
    """

    model_config = ConfigDict(extra="forbid")

    exercise_id: str = Field(min_length=1)
    sets: int = Field(default=3, ge=1, le=20)
    reps: str = Field(default="10", min_length=1)
    weight_kg: float | None = Field(default=None, ge=0)
    rest_seconds: int = Field(default=60, ge=0, le=600)
    notes: str | None = None


class WorkoutExercise(ExercisePayload):
    """Persisted exercise row."""

    id: str | None = None
    workout_day_id: str | None = None
    order_index: int = 0


class WorkoutDay(DayPayload):
    """Persisted training day row with its exercises."""

    id: str | None = None
    plan_id: str | None = None
    order_index: int = 0
    exercises: list[WorkoutExercise] = []


class Plan(BaseModel):
    """Weekly training plan with its day/exercise hierarchy.

    Attributes:
        id: Plan identity (None until persisted)
        client_id: Client the plan is for
        trainer_id: Trainer who authored the plan
        week_start: Monday of the plan week (YYYY-MM-DD)
        week_end: Sunday of the plan week (YYYY-MM-DD)
        trainer_notes: Optional notes for the client
        is_active: Whether this is the client's active plan for the week
        days: Training days ordered by day_of_week, then order_index
    """

    id: str | None = None
    client_id: str
    trainer_id: str
    week_start: str
    week_end: str
    trainer_notes: str | None = None
    is_active: bool = True
    days: list[WorkoutDay] = []


def sort_hierarchy(plan: Plan) -> Plan:
    """Return a copy of ``plan`` with days and exercises in display order."""
    days = [
        day.model_copy(update={"exercises": sorted(day.exercises, key=lambda e: e.order_index)})
        for day in sorted(plan.days, key=lambda d: (d.day_of_week, d.order_index))
    ]
    return plan.model_copy(update={"days": days})
