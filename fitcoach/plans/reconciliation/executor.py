"""Executor for reconciliation operations.

Walks an operation list against a persistence gateway, strictly one call at
a time: later operations may reference identities returned by earlier
creates. There is no enclosing transaction. The first gateway failure stops
the pass; everything applied before it stays applied.
"""

from typing import assert_never

from loguru import logger

from fitcoach.persistence.gateway import PersistenceGateway
from fitcoach.plans.errors import GatewayError, PlanError
from fitcoach.plans.reconciliation.types import (
    CreateDayOp,
    CreateExerciseOp,
    CreatePlanOp,
    DeleteDayOp,
    DeleteExerciseOp,
    ExecutionReport,
    NodeRef,
    Operation,
    UpdateDayOp,
    UpdateExerciseOp,
    UpdatePlanOp,
)


def _resolve(ref: NodeRef, identities: dict[str, str]) -> str:
    if ref.id is not None:
        return ref.id
    resolved = identities.get(ref.key)
    if resolved is None:
        raise PlanError(f"Operation references node {ref.key} before it was created")
    return resolved


async def apply_operation(
    operation: Operation,
    gateway: PersistenceGateway,
    identities: dict[str, str],
) -> str | None:
    """Apply a single operation.

    Args:
        operation: Operation to apply
        gateway: Persistence gateway
        identities: Identities created earlier in the pass, keyed by node key

    Returns:
        Identity of the created row for create operations, None otherwise

    Raises:
        GatewayError: If the store call fails
    """
    if isinstance(operation, CreatePlanOp):
        await gateway.deactivate_overlapping(operation.client_id, operation.week_start)
        plan = await gateway.create_plan(
            operation.trainer_id,
            operation.client_id,
            operation.week_start,
            operation.week_end,
            operation.notes,
        )
        return plan.id
    if isinstance(operation, UpdatePlanOp):
        await gateway.update_plan(operation.plan_id, operation.patch)
        return None
    if isinstance(operation, CreateDayOp):
        day = await gateway.create_day(
            _resolve(operation.plan, identities),
            operation.day_of_week,
            operation.name,
            operation.is_rest_day,
            operation.order_index,
        )
        return day.id
    if isinstance(operation, UpdateDayOp):
        await gateway.update_day(operation.day_id, operation.patch)
        return None
    if isinstance(operation, DeleteDayOp):
        await gateway.delete_day(operation.day_id)
        return None
    if isinstance(operation, CreateExerciseOp):
        payload = operation.payload
        exercise = await gateway.create_exercise(
            _resolve(operation.day, identities),
            payload.exercise_id,
            payload.sets,
            payload.reps,
            payload.weight_kg,
            payload.rest_seconds,
            payload.notes,
            operation.order_index,
        )
        return exercise.id
    if isinstance(operation, UpdateExerciseOp):
        await gateway.update_exercise(operation.workout_exercise_id, operation.patch)
        return None
    if isinstance(operation, DeleteExerciseOp):
        await gateway.delete_exercise(operation.workout_exercise_id)
        return None
    assert_never(operation)


async def execute_operations(
    operations: list[Operation],
    gateway: PersistenceGateway,
) -> ExecutionReport:
    """Execute operations sequentially, halting on the first gateway failure.

    Args:
        operations: Operations in execution order
        gateway: Persistence gateway

    Returns:
        ExecutionReport with succeeded, failed and pending operations plus the
        identities issued for created nodes
    """
    identities: dict[str, str] = {}
    succeeded: list[Operation] = []

    for position, operation in enumerate(operations):
        try:
            created_id = await apply_operation(operation, gateway, identities)
        except GatewayError as e:
            pending = operations[position + 1 :]
            logger.bind(
                kind=operation.kind,
                succeeded=len(succeeded),
                pending=len(pending),
                error_type=type(e).__name__,
            ).warning(f"Operation failed, halting pass: {e}")
            return ExecutionReport(
                succeeded_ops=succeeded,
                failed_op=operation,
                pending_ops=pending,
                error=str(e),
                error_type=type(e).__name__,
                identities=identities,
            )

        if created_id is not None and isinstance(operation, (CreatePlanOp, CreateDayOp, CreateExerciseOp)):
            identities[operation.node_key] = created_id
        succeeded.append(operation)
        logger.debug("Operation applied", kind=operation.kind, position=position)

    return ExecutionReport(succeeded_ops=succeeded, identities=identities)
