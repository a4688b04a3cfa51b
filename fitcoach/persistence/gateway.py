"""Persistence gateway protocol for plan/day/exercise rows.

The plan engine never talks to a database directly. Every store call goes
through an object implementing PersistenceGateway, keyed by server-issued
identities. Implementations must:
- return the created row (with identity) from every create call
- raise NotFoundError when the target row does not exist
- raise TransientError for availability failures (network, timeout)
- raise ConflictError when the store rejects a write
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from fitcoach.plans.types import Plan, WorkoutDay, WorkoutExercise


class PersistenceGateway(Protocol):
    """Async CRUD surface used by reconciliation and duplication."""

    async def create_plan(
        self,
        trainer_id: str,
        client_id: str,
        week_start: str,
        week_end: str,
        notes: str | None,
    ) -> Plan: ...

    async def update_plan(self, plan_id: str, patch: dict[str, Any]) -> Plan: ...

    async def deactivate_overlapping(self, client_id: str, week_start: str) -> None: ...

    async def create_day(
        self,
        plan_id: str,
        day_of_week: int,
        name: str,
        is_rest_day: bool,
        order_index: int,
    ) -> WorkoutDay: ...

    async def update_day(self, day_id: str, patch: dict[str, Any]) -> WorkoutDay: ...

    async def delete_day(self, day_id: str) -> None: ...

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
    ) -> WorkoutExercise: ...

    async def update_exercise(self, workout_exercise_id: str, patch: dict[str, Any]) -> WorkoutExercise: ...

    async def delete_exercise(self, workout_exercise_id: str) -> None: ...

    async def fetch_plan_hierarchy(self, plan_id: str) -> Plan: ...
