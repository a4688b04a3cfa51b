"""Root conftest for all tests.

Provides an in-memory fake persistence gateway (with failure injection) for
engine tests and an in-memory SQLite database for gateway tests.
"""

import uuid
from typing import Any

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fitcoach.db.session import init_db
from fitcoach.persistence.sql_gateway import SqlPersistenceGateway
from fitcoach.plans.errors import ConflictError, NotFoundError, TransientError
from fitcoach.plans.types import Plan, WorkoutDay, WorkoutExercise, sort_hierarchy


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints in SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _new_id() -> str:
    return str(uuid.uuid4())


class FakeGateway:
    """In-memory PersistenceGateway that records calls and can inject failures.

    Usage:
        gateway.fail_on("create_exercise", occurrence=2)
        # the second create_exercise call raises TransientError
    """

    def __init__(self) -> None:
        self.plans: dict[str, Plan] = {}
        self.days: dict[str, WorkoutDay] = {}
        self.exercises: dict[str, WorkoutExercise] = {}
        self.calls: list[str] = []
        self._failures: dict[tuple[str, int], Exception] = {}

    def fail_on(self, kind: str, occurrence: int = 1, error: Exception | None = None) -> None:
        self._failures[(kind, occurrence)] = error or TransientError(f"{kind} timed out")

    def _record(self, kind: str) -> None:
        self.calls.append(kind)
        error = self._failures.pop((kind, self.calls.count(kind)), None)
        if error is not None:
            raise error

    def seed(self, plan: Plan) -> Plan:
        """Store a plan hierarchy directly, issuing identities. Not recorded as a call."""
        plan_id = _new_id()
        self.plans[plan_id] = plan.model_copy(update={"id": plan_id, "days": []})
        for day in plan.days:
            day_id = _new_id()
            self.days[day_id] = day.model_copy(update={"id": day_id, "plan_id": plan_id, "exercises": []})
            for exercise in day.exercises:
                exercise_id = _new_id()
                self.exercises[exercise_id] = exercise.model_copy(
                    update={"id": exercise_id, "workout_day_id": day_id}
                )
        return self._hierarchy(plan_id)

    def _hierarchy(self, plan_id: str) -> Plan:
        days = [
            day.model_copy(
                update={"exercises": [ex for ex in self.exercises.values() if ex.workout_day_id == day.id]}
            )
            for day in self.days.values()
            if day.plan_id == plan_id
        ]
        return sort_hierarchy(self.plans[plan_id].model_copy(update={"days": days}))

    def _ensure_weekday_free(self, plan_id: str, day_of_week: int, ignore: str | None = None) -> None:
        for day in self.days.values():
            if day.plan_id == plan_id and day.day_of_week == day_of_week and day.id != ignore:
                raise ConflictError(f"plan {plan_id} already has a day on weekday {day_of_week}")

    # Plans

    async def create_plan(self, trainer_id, client_id, week_start, week_end, notes) -> Plan:
        self._record("create_plan")
        plan = Plan(
            id=_new_id(),
            trainer_id=trainer_id,
            client_id=client_id,
            week_start=week_start,
            week_end=week_end,
            trainer_notes=notes,
        )
        self.plans[plan.id] = plan
        return plan

    async def update_plan(self, plan_id: str, patch: dict[str, Any]) -> Plan:
        self._record("update_plan")
        if plan_id not in self.plans:
            raise NotFoundError("plan", plan_id)
        self.plans[plan_id] = self.plans[plan_id].model_copy(update=patch)
        return self.plans[plan_id]

    async def deactivate_overlapping(self, client_id: str, week_start: str) -> None:
        self._record("deactivate_overlapping")
        for plan_id, plan in self.plans.items():
            if plan.client_id == client_id and plan.week_start == week_start and plan.is_active:
                self.plans[plan_id] = plan.model_copy(update={"is_active": False})

    async def fetch_plan_hierarchy(self, plan_id: str) -> Plan:
        self._record("fetch_plan_hierarchy")
        if plan_id not in self.plans:
            raise NotFoundError("plan", plan_id)
        return self._hierarchy(plan_id)

    # Days

    async def create_day(self, plan_id, day_of_week, name, is_rest_day, order_index) -> WorkoutDay:
        self._record("create_day")
        if plan_id not in self.plans:
            raise NotFoundError("plan", plan_id)
        self._ensure_weekday_free(plan_id, day_of_week)
        day = WorkoutDay(
            id=_new_id(),
            plan_id=plan_id,
            day_of_week=day_of_week,
            name=name,
            is_rest_day=is_rest_day,
            order_index=order_index,
        )
        self.days[day.id] = day
        return day

    async def update_day(self, day_id: str, patch: dict[str, Any]) -> WorkoutDay:
        self._record("update_day")
        if day_id not in self.days:
            raise NotFoundError("day", day_id)
        day = self.days[day_id]
        if "day_of_week" in patch:
            self._ensure_weekday_free(day.plan_id, patch["day_of_week"], ignore=day_id)
        self.days[day_id] = day.model_copy(update=patch)
        return self.days[day_id]

    async def delete_day(self, day_id: str) -> None:
        self._record("delete_day")
        if day_id not in self.days:
            raise NotFoundError("day", day_id)
        del self.days[day_id]
        for exercise_id in [ex.id for ex in self.exercises.values() if ex.workout_day_id == day_id]:
            del self.exercises[exercise_id]

    # Exercises

    async def create_exercise(
        self, day_id, exercise_id, sets, reps, weight_kg, rest_seconds, notes, order_index
    ) -> WorkoutExercise:
        self._record("create_exercise")
        if day_id not in self.days:
            raise NotFoundError("day", day_id)
        exercise = WorkoutExercise(
            id=_new_id(),
            workout_day_id=day_id,
            exercise_id=exercise_id,
            sets=sets,
            reps=reps,
            weight_kg=weight_kg,
            rest_seconds=rest_seconds,
            notes=notes,
            order_index=order_index,
        )
        self.exercises[exercise.id] = exercise
        return exercise

    async def update_exercise(self, workout_exercise_id: str, patch: dict[str, Any]) -> WorkoutExercise:
        self._record("update_exercise")
        if workout_exercise_id not in self.exercises:
            raise NotFoundError("exercise", workout_exercise_id)
        self.exercises[workout_exercise_id] = self.exercises[workout_exercise_id].model_copy(update=patch)
        return self.exercises[workout_exercise_id]

    async def delete_exercise(self, workout_exercise_id: str) -> None:
        self._record("delete_exercise")
        if workout_exercise_id not in self.exercises:
            raise NotFoundError("exercise", workout_exercise_id)
        del self.exercises[workout_exercise_id]


def make_plan(**overrides: Any) -> Plan:
    """Unsaved two-day plan for the week of 2024-06-10.

    Monday "Push" holds bench_press and overhead_press; Wednesday "Pull"
    holds barbell_row.
    """
    fields: dict[str, Any] = {
        "client_id": "client-1",
        "trainer_id": "trainer-1",
        "week_start": "2024-06-10",
        "week_end": "2024-06-16",
        "trainer_notes": "Focus on form",
        "days": [
            WorkoutDay(
                day_of_week=0,
                name="Push",
                order_index=0,
                exercises=[
                    WorkoutExercise(exercise_id="bench_press", sets=4, reps="8", weight_kg=60.0, order_index=0),
                    WorkoutExercise(exercise_id="overhead_press", sets=3, reps="10", weight_kg=35.0, order_index=1),
                ],
            ),
            WorkoutDay(
                day_of_week=2,
                name="Pull",
                order_index=2,
                exercises=[
                    WorkoutExercise(exercise_id="barbell_row", sets=4, reps="8-10", order_index=0),
                ],
            ),
        ],
    }
    fields.update(overrides)
    return Plan(**fields)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def plan_factory():
    """Build unsaved plans, overriding any top-level field."""
    return make_plan


@pytest.fixture
def seeded_plan(gateway: FakeGateway) -> Plan:
    """Persisted two-day plan held by the fake gateway."""
    return gateway.seed(make_plan())


@pytest.fixture(scope="function")
def session_factory():
    """Session factory over an isolated in-memory SQLite database.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    try:
        yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    finally:
        engine.dispose()


@pytest.fixture
def sql_gateway(session_factory) -> SqlPersistenceGateway:
    return SqlPersistenceGateway(session_factory)
