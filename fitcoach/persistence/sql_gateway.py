"""SQLAlchemy-backed persistence gateway.

Each gateway call runs in its own session and commits on its own, so a
multi-call save pass has no enclosing transaction. Store failures are
translated into gateway errors:
- missing rows → NotFoundError
- IntegrityError → ConflictError
- other DBAPIError / pool timeouts → TransientError
"""

from collections.abc import Generator
from contextlib import contextmanager
from datetime import date
from typing import Any

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from fitcoach.db.models import TrainingPlan
from fitcoach.db.models import WorkoutDay as WorkoutDayRow
from fitcoach.db.models import WorkoutExercise as WorkoutExerciseRow
from fitcoach.db.session import get_session
from fitcoach.plans.errors import ConflictError, NotFoundError, TransientError
from fitcoach.plans.types import Plan, WorkoutDay, WorkoutExercise, sort_hierarchy
from fitcoach.plans.week import week_bounds

PLAN_PATCH_FIELDS = {"trainer_notes", "week_start", "week_end", "is_active"}
DAY_PATCH_FIELDS = {"day_of_week", "name", "is_rest_day", "order_index"}
EXERCISE_PATCH_FIELDS = {"exercise_id", "sets", "reps", "weight_kg", "rest_seconds", "notes", "order_index"}


def _exercise_to_model(row: WorkoutExerciseRow) -> WorkoutExercise:
    return WorkoutExercise(
        id=row.id,
        workout_day_id=row.workout_day_id,
        exercise_id=row.exercise_id,
        sets=row.sets,
        reps=row.reps,
        weight_kg=row.weight_kg,
        rest_seconds=row.rest_seconds,
        notes=row.notes,
        order_index=row.order_index,
    )


def _day_to_model(row: WorkoutDayRow, *, with_exercises: bool = False) -> WorkoutDay:
    return WorkoutDay(
        id=row.id,
        plan_id=row.plan_id,
        day_of_week=row.day_of_week,
        name=row.name or "",
        is_rest_day=row.is_rest_day,
        order_index=row.order_index,
        exercises=[_exercise_to_model(ex) for ex in row.exercises] if with_exercises else [],
    )


def _plan_to_model(row: TrainingPlan, *, with_days: bool = False) -> Plan:
    return Plan(
        id=row.id,
        client_id=row.client_id,
        trainer_id=row.trainer_id,
        week_start=row.week_start.isoformat(),
        week_end=row.week_end.isoformat(),
        trainer_notes=row.trainer_notes,
        is_active=row.is_active,
        days=[_day_to_model(day, with_exercises=True) for day in row.days] if with_days else [],
    )


def _apply_patch(row: object, patch: dict[str, Any], allowed: set[str]) -> None:
    unknown = set(patch) - allowed
    if unknown:
        raise ValueError(f"Unknown fields in patch: {', '.join(sorted(unknown))}")
    for field, value in patch.items():
        setattr(row, field, value)


class SqlPersistenceGateway:
    """PersistenceGateway implementation over SQLAlchemy sessions."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        """Initialize gateway.

        Args:
            session_factory: Optional session factory; defaults to the
                application's lazily created factory
        """
        self._session_factory = session_factory

    @contextmanager
    def _store_call(self, action: str) -> Generator[Session, None, None]:
        try:
            with get_session(self._session_factory) as db:
                yield db
        except IntegrityError as e:
            logger.bind(action=action).warning(f"Store rejected write: {e.orig}")
            raise ConflictError(f"{action} rejected by the store: {e.orig}") from e
        except (DBAPIError, PoolTimeoutError) as e:
            logger.bind(action=action).warning(f"Store call failed: {e}")
            raise TransientError(f"{action} failed: {e}") from e

    @staticmethod
    def _get(db: Session, model: type, entity: str, entity_id: str) -> Any:
        row = db.get(model, entity_id)
        if row is None:
            raise NotFoundError(entity, entity_id)
        return row

    # Plans

    async def create_plan(
        self,
        trainer_id: str,
        client_id: str,
        week_start: str,
        week_end: str,
        notes: str | None,
    ) -> Plan:
        with self._store_call("create_plan") as db:
            row = TrainingPlan(
                trainer_id=trainer_id,
                client_id=client_id,
                week_start=date.fromisoformat(week_start),
                week_end=date.fromisoformat(week_end),
                trainer_notes=notes,
                is_active=True,
            )
            db.add(row)
            db.flush()
            logger.debug("Plan created", plan_id=row.id, client_id=client_id, week_start=week_start)
            return _plan_to_model(row)

    async def update_plan(self, plan_id: str, patch: dict[str, Any]) -> Plan:
        values = dict(patch)
        for field in ("week_start", "week_end"):
            if isinstance(values.get(field), str):
                values[field] = date.fromisoformat(values[field])

        with self._store_call("update_plan") as db:
            row = self._get(db, TrainingPlan, "plan", plan_id)
            _apply_patch(row, values, PLAN_PATCH_FIELDS)
            db.flush()
            return _plan_to_model(row)

    async def deactivate_overlapping(self, client_id: str, week_start: str) -> None:
        with self._store_call("deactivate_overlapping") as db:
            result = db.execute(
                update(TrainingPlan)
                .where(
                    TrainingPlan.client_id == client_id,
                    TrainingPlan.is_active == True,  # noqa: E712
                    TrainingPlan.week_start == date.fromisoformat(week_start),
                )
                .values(is_active=False)
            )
            count = result.rowcount
        logger.debug("Deactivated overlapping plans", client_id=client_id, week_start=week_start, count=count)

    async def delete_plan(self, plan_id: str) -> None:
        with self._store_call("delete_plan") as db:
            db.delete(self._get(db, TrainingPlan, "plan", plan_id))

    async def fetch_plan_hierarchy(self, plan_id: str) -> Plan:
        with self._store_call("fetch_plan_hierarchy") as db:
            row = db.execute(
                select(TrainingPlan)
                .where(TrainingPlan.id == plan_id)
                .options(selectinload(TrainingPlan.days).selectinload(WorkoutDayRow.exercises))
            ).scalar_one_or_none()
            if row is None:
                raise NotFoundError("plan", plan_id)
            return sort_hierarchy(_plan_to_model(row, with_days=True))

    async def fetch_active_plan(self, client_id: str, on: date | str | None = None) -> Plan | None:
        """Get the client's active plan for the week containing ``on`` (defaults to today).

        Returns:
            Plan with its hierarchy, or None if the client has no active plan that week
        """
        bounds = week_bounds(on or date.today())
        with self._store_call("fetch_active_plan") as db:
            row = db.execute(
                select(TrainingPlan)
                .where(
                    TrainingPlan.client_id == client_id,
                    TrainingPlan.is_active == True,  # noqa: E712
                    TrainingPlan.week_start <= date.fromisoformat(bounds.week_end),
                    TrainingPlan.week_end >= date.fromisoformat(bounds.week_start),
                )
                .order_by(TrainingPlan.created_at.desc())
                .options(selectinload(TrainingPlan.days).selectinload(WorkoutDayRow.exercises))
            ).scalars().first()
            if row is None:
                return None
            return sort_hierarchy(_plan_to_model(row, with_days=True))

    # Days

    async def create_day(
        self,
        plan_id: str,
        day_of_week: int,
        name: str,
        is_rest_day: bool,
        order_index: int,
    ) -> WorkoutDay:
        with self._store_call("create_day") as db:
            self._get(db, TrainingPlan, "plan", plan_id)
            row = WorkoutDayRow(
                plan_id=plan_id,
                day_of_week=day_of_week,
                name=name,
                is_rest_day=is_rest_day,
                order_index=order_index,
            )
            db.add(row)
            db.flush()
            return _day_to_model(row)

    async def update_day(self, day_id: str, patch: dict[str, Any]) -> WorkoutDay:
        with self._store_call("update_day") as db:
            row = self._get(db, WorkoutDayRow, "day", day_id)
            _apply_patch(row, patch, DAY_PATCH_FIELDS)
            db.flush()
            return _day_to_model(row)

    async def delete_day(self, day_id: str) -> None:
        with self._store_call("delete_day") as db:
            db.delete(self._get(db, WorkoutDayRow, "day", day_id))

    # Exercises

    async def create_exercise(
        self,
        day_id: str,
        exercise_id: str,
        sets: int,
        reps: str,
        weight_kg: float | None,
        rest_seconds: int,
        notes: str | None,
        order_index: int,
    ) -> WorkoutExercise:
        with self._store_call("create_exercise") as db:
            self._get(db, WorkoutDayRow, "day", day_id)
            row = WorkoutExerciseRow(
                workout_day_id=day_id,
                exercise_id=exercise_id,
                sets=sets,
                reps=reps,
                weight_kg=weight_kg,
                rest_seconds=rest_seconds,
                notes=notes,
                order_index=order_index,
            )
            db.add(row)
            db.flush()
            return _exercise_to_model(row)

    async def update_exercise(self, workout_exercise_id: str, patch: dict[str, Any]) -> WorkoutExercise:
        with self._store_call("update_exercise") as db:
            row = self._get(db, WorkoutExerciseRow, "exercise", workout_exercise_id)
            _apply_patch(row, patch, EXERCISE_PATCH_FIELDS)
            db.flush()
            return _exercise_to_model(row)

    async def delete_exercise(self, workout_exercise_id: str) -> None:
        with self._store_call("delete_exercise") as db:
            db.delete(self._get(db, WorkoutExerciseRow, "exercise", workout_exercise_id))
