"""Duplicate a weekly plan into the following week.

Duplication replays the full source hierarchy through the gateway with fresh
identities. It has no baseline to diff against, so it does not go through
the draft/reconciliation machinery.
"""

from loguru import logger

from fitcoach.persistence.gateway import PersistenceGateway
from fitcoach.plans.errors import GatewayError
from fitcoach.plans.types import Plan, WorkoutDay, sort_hierarchy
from fitcoach.plans.week import next_week_bounds


class DuplicationService:
    """Clones plans into the next week through a persistence gateway."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    async def duplicate(self, source_plan_id: str) -> Plan:
        """Duplicate a plan into the week after its own.

        Flow:
        1. Load the source hierarchy (days by day_of_week, exercises by order_index)
        2. Compute the next week's bounds
        3. Deactivate other active plans of the client for that week
        4. Create the new plan with the same client, trainer and notes
        5. Replay days and their exercises depth-first, preserving
           day_of_week and order_index

        Args:
            source_plan_id: Plan to duplicate

        Returns:
            The new plan with its days and exercises

        Raises:
            NotFoundError: If the source plan no longer exists
            GatewayError: If a store call fails part-way (already created rows remain)
        """
        source = sort_hierarchy(await self.gateway.fetch_plan_hierarchy(source_plan_id))
        bounds = next_week_bounds(source.week_start)

        logger.info(
            "Duplicating plan",
            source_plan_id=source_plan_id,
            week_start=bounds.week_start,
            day_count=len(source.days),
        )

        await self.gateway.deactivate_overlapping(source.client_id, bounds.week_start)
        new_plan = await self.gateway.create_plan(
            source.trainer_id,
            source.client_id,
            bounds.week_start,
            bounds.week_end,
            source.trainer_notes,
        )

        days: list[WorkoutDay] = []
        try:
            for source_day in source.days:
                day = await self.gateway.create_day(
                    new_plan.id,
                    source_day.day_of_week,
                    source_day.name,
                    source_day.is_rest_day,
                    source_day.order_index,
                )
                exercises = []
                for source_exercise in source_day.exercises:
                    exercises.append(
                        await self.gateway.create_exercise(
                            day.id,
                            source_exercise.exercise_id,
                            source_exercise.sets,
                            source_exercise.reps,
                            source_exercise.weight_kg,
                            source_exercise.rest_seconds,
                            source_exercise.notes,
                            source_exercise.order_index,
                        )
                    )
                days.append(day.model_copy(update={"exercises": exercises}))
        except GatewayError as e:
            logger.bind(
                source_plan_id=source_plan_id,
                new_plan_id=new_plan.id,
                created_days=len(days),
            ).error(f"Duplication halted part-way, new plan is incomplete: {e}")
            raise

        logger.info(
            "Plan duplicated",
            source_plan_id=source_plan_id,
            new_plan_id=new_plan.id,
        )
        return new_plan.model_copy(update={"days": days})
