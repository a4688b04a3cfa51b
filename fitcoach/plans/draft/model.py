"""Editable in-memory snapshot of a weekly plan.

PlanDraft holds days in visual order, each day holding its exercises in
visual order. Node indices address the full lists (DELETED nodes included)
so the editor can keep addressing rows while removed rows are hidden.

order_index is not recomputed on mutation. At save time an exercise takes
its position among surviving siblings and a day takes its day_of_week.
"""

import uuid
from datetime import date
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from fitcoach.config.settings import settings
from fitcoach.plans.draft.types import DraftDay, DraftExercise, NodeTag, promote_on_edit
from fitcoach.plans.errors import ValidationError
from fitcoach.plans.messages import day_names, message
from fitcoach.plans.types import DayPayload, ExercisePayload, Plan, WorkoutDay, WorkoutExercise, sort_hierarchy
from fitcoach.plans.week import week_bounds

DAY_FIELDS = set(DayPayload.model_fields)
EXERCISE_FIELDS = set(ExercisePayload.model_fields)


def _pydantic_reason(error: PydanticValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in error.errors())


def build_day_payload(data: dict[str, Any]) -> DayPayload:
    """Validate day fields, reporting violations as INVALID_DAY."""
    try:
        return DayPayload.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("INVALID_DAY", [message("INVALID_DAY", reason=_pydantic_reason(e))]) from e


def build_exercise_payload(data: dict[str, Any]) -> ExercisePayload:
    """Validate exercise fields, reporting violations as INVALID_EXERCISE.

    Missing sets, reps and rest_seconds take the configured defaults.
    """
    defaults = {
        "sets": settings.default_sets,
        "reps": settings.default_reps,
        "rest_seconds": settings.default_rest_seconds,
    }
    try:
        return ExercisePayload.model_validate({**defaults, **data})
    except PydanticValidationError as e:
        raise ValidationError("INVALID_EXERCISE", [message("INVALID_EXERCISE", reason=_pydantic_reason(e))]) from e


class PlanDraft:
    """Locally mutable copy of a plan's day/exercise hierarchy.

    Usage:
        draft = PlanDraft.from_plan(await gateway.fetch_plan_hierarchy(plan_id))
        draft.add_day(2)
        draft.add_exercise(len(draft.days) - 1, {"exercise_id": "squat", "sets": 3, "reps": "10"})
        result = await ReconciliationEngine(gateway).save(draft, baseline_notes)
    """

    def __init__(
        self,
        *,
        trainer_id: str,
        client_id: str,
        week_start: str,
        week_end: str,
        plan_id: str | None = None,
        trainer_notes: str | None = None,
        is_active: bool = True,
        days: list[DraftDay] | None = None,
    ) -> None:
        self.plan_id = plan_id
        self.trainer_id = trainer_id
        self.client_id = client_id
        self.week_start = week_start
        self.week_end = week_end
        self.trainer_notes = trainer_notes
        self.is_active = is_active
        self.days: list[DraftDay] = days or []
        self.key = uuid.uuid4().hex
        self.is_stale = False

    @classmethod
    def from_plan(cls, plan: Plan) -> "PlanDraft":
        """Hydrate a draft from a persisted plan; every node starts CLEAN."""
        if plan.id is None:
            raise ValueError("Cannot hydrate a draft from an unsaved plan")

        plan = sort_hierarchy(plan)
        days = [
            DraftDay(
                payload=DayPayload.model_validate(day.model_dump(include=DAY_FIELDS)),
                tag=NodeTag.CLEAN,
                id=day.id,
                baseline_day_of_week=day.day_of_week,
                exercises=[
                    DraftExercise(
                        payload=ExercisePayload.model_validate(ex.model_dump(include=EXERCISE_FIELDS)),
                        tag=NodeTag.CLEAN,
                        id=ex.id,
                        baseline_order_index=position,
                    )
                    for position, ex in enumerate(day.exercises)
                ],
            )
            for day in plan.days
        ]
        logger.debug("Draft hydrated", plan_id=plan.id, days=len(days))
        return cls(
            plan_id=plan.id,
            trainer_id=plan.trainer_id,
            client_id=plan.client_id,
            week_start=plan.week_start,
            week_end=plan.week_end,
            trainer_notes=plan.trainer_notes,
            is_active=plan.is_active,
            days=days,
        )

    @classmethod
    def new(
        cls,
        *,
        trainer_id: str,
        client_id: str,
        week_of: date | str | None = None,
        trainer_notes: str | None = None,
    ) -> "PlanDraft":
        """Start an empty draft for a plan that does not exist yet.

        Args:
            trainer_id: Trainer authoring the plan
            client_id: Client the plan is for
            week_of: Any date inside the target week (defaults to today)
            trainer_notes: Optional notes for the client
        """
        bounds = week_bounds(week_of or date.today())
        return cls(
            trainer_id=trainer_id,
            client_id=client_id,
            week_start=bounds.week_start,
            week_end=bounds.week_end,
            trainer_notes=trainer_notes,
        )

    @property
    def is_new_plan(self) -> bool:
        return self.plan_id is None

    def visible_days(self) -> list[DraftDay]:
        """Days that will exist after the next save, in draft order."""
        return [day for day in self.days if day.tag is not NodeTag.DELETED]

    def day_positions(self) -> dict[str, int]:
        """order_index of each surviving day, keyed by node key.

        A day is ordered by its weekday, so its order_index is its day_of_week.
        Adding or removing other days never shifts it.
        """
        return {day.key: day.payload.day_of_week for day in self.visible_days()}

    def set_notes(self, notes: str | None) -> None:
        self.trainer_notes = notes

    # Days

    def _ensure_weekday_free(self, day_of_week: int, *, ignore: DraftDay | None = None) -> None:
        for day in self.visible_days():
            if day is not ignore and day.payload.day_of_week == day_of_week:
                raise ValidationError(
                    "DUPLICATE_WEEKDAY",
                    [message("DUPLICATE_WEEKDAY", day=day_names()[day_of_week])],
                )

    def add_day(self, day_of_week: int, name: str = "", is_rest_day: bool = False) -> DraftDay:
        """Append a NEW day with no exercises.

        Raises:
            ValidationError: If a non-deleted day already occupies the weekday
        """
        payload = build_day_payload({"day_of_week": day_of_week, "name": name, "is_rest_day": is_rest_day})
        self._ensure_weekday_free(day_of_week)
        day = DraftDay(payload=payload)
        self.days.append(day)
        return day

    def update_day(self, index: int, patch: dict[str, Any]) -> DraftDay:
        """Merge ``patch`` into the day payload and promote CLEAN to MODIFIED.

        Raises:
            ValidationError: If the day is DELETED, the patch is invalid or it
                moves the day onto an occupied weekday
        """
        day = self.days[index]
        if day.tag is NodeTag.DELETED:
            raise ValidationError("NODE_DELETED", [message("NODE_DELETED")])

        payload = build_day_payload({**day.payload.model_dump(), **patch})
        if payload.day_of_week != day.payload.day_of_week:
            self._ensure_weekday_free(payload.day_of_week, ignore=day)

        day.payload = payload
        day.tag = promote_on_edit(day.tag)
        return day

    def remove_day(self, index: int) -> None:
        """Splice an authored day out, or tag a hydrated day DELETED."""
        day = self.days[index]
        if day.id is None:
            del self.days[index]
            return
        day.tag = NodeTag.DELETED

    # Exercises

    def add_exercise(self, day_index: int, payload: ExercisePayload | dict[str, Any]) -> DraftExercise:
        """Append a NEW exercise to a day.

        Raises:
            ValidationError: If the day is DELETED or the payload is invalid
        """
        day = self.days[day_index]
        if day.tag is NodeTag.DELETED:
            raise ValidationError("NODE_DELETED", [message("NODE_DELETED")])
        if isinstance(payload, dict):
            payload = build_exercise_payload(payload)

        exercise = DraftExercise(payload=payload)
        day.exercises.append(exercise)
        return exercise

    def update_exercise(self, day_index: int, ex_index: int, patch: dict[str, Any]) -> DraftExercise:
        """Merge ``patch`` into the exercise payload and promote CLEAN to MODIFIED.

        Raises:
            ValidationError: If the exercise is DELETED or the patch is invalid
        """
        exercise = self.days[day_index].exercises[ex_index]
        if exercise.tag is NodeTag.DELETED:
            raise ValidationError("NODE_DELETED", [message("NODE_DELETED")])

        exercise.payload = build_exercise_payload({**exercise.payload.model_dump(), **patch})
        exercise.tag = promote_on_edit(exercise.tag)
        return exercise

    def remove_exercise(self, day_index: int, ex_index: int) -> None:
        """Splice an authored exercise out, or tag a hydrated one DELETED."""
        exercises = self.days[day_index].exercises
        if exercises[ex_index].id is None:
            del exercises[ex_index]
            return
        exercises[ex_index].tag = NodeTag.DELETED

    def move_exercise(self, day_index: int, from_index: int, to_index: int) -> None:
        """Move an exercise within its day.

        Tags are left alone; shifted positions are detected at save time.
        """
        exercises = self.days[day_index].exercises
        exercise = exercises.pop(from_index)
        exercises.insert(to_index, exercise)

    # Save lifecycle

    def mark_saved(self, identities: dict[str, str], names: list[str] | None = None) -> None:
        """Rehydrate the draft after a fully applied save pass.

        DELETED nodes are dropped; surviving nodes take the identities issued
        by the store (keyed by node key) and become CLEAN at their new
        positions. Unnamed days that were just written take the weekday name
        they were stored with, so the draft matches the store.

        Args:
            identities: Store identities of created nodes, keyed by node key
            names: Weekday names used by the save pass (defaults to settings.locale)
        """
        if self.plan_id is None:
            self.plan_id = identities[self.key]

        names = names or day_names()
        positions = self.day_positions()
        self.days = sorted(self.visible_days(), key=lambda d: positions[d.key])
        for day in self.days:
            if day.tag is not NodeTag.CLEAN and not day.payload.name:
                day.payload = day.payload.model_copy(update={"name": names[day.payload.day_of_week]})
            day.id = identities.get(day.key, day.id)
            day.tag = NodeTag.CLEAN
            day.baseline_day_of_week = day.payload.day_of_week

            day.exercises = day.surviving_exercises()
            for ex_position, exercise in enumerate(day.exercises):
                exercise.id = identities.get(exercise.key, exercise.id)
                exercise.tag = NodeTag.CLEAN
                exercise.baseline_order_index = ex_position

        self.is_stale = False

    def mark_stale(self) -> None:
        """Flag the draft as out of sync with the store after a partial save."""
        self.is_stale = True

    def to_plan(self) -> Plan:
        """Snapshot the surviving hierarchy as a Plan with positional order indices."""
        positions = self.day_positions()
        return Plan(
            id=self.plan_id,
            client_id=self.client_id,
            trainer_id=self.trainer_id,
            week_start=self.week_start,
            week_end=self.week_end,
            trainer_notes=self.trainer_notes,
            is_active=self.is_active,
            days=[
                WorkoutDay(
                    **day.payload.model_dump(),
                    id=day.id,
                    plan_id=self.plan_id,
                    order_index=positions[day.key],
                    exercises=[
                        WorkoutExercise(
                            **exercise.payload.model_dump(),
                            id=exercise.id,
                            workout_day_id=day.id,
                            order_index=ex_position,
                        )
                        for ex_position, exercise in enumerate(day.surviving_exercises())
                    ],
                )
                for day in sorted(self.visible_days(), key=lambda d: positions[d.key])
            ],
        )
