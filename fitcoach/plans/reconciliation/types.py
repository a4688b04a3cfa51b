"""Reconciliation operation and result models.

This module defines the data structures for:
- Store operations emitted by the diff stage (one per required change)
- Execution reports and save results returned to callers

Operations that target a node created earlier in the same pass reference it
through a NodeRef carrying the node's local key; the executor resolves the
key to the identity returned by the earlier create.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from fitcoach.plans.types import ExercisePayload, Plan

SaveOutcome = Literal["applied", "partially_applied"]


class NodeRef(BaseModel):
    """Reference to a plan or day that may not be persisted yet.

    Attributes:
        key: Local key of the draft node
        id: Store identity, when already known at diff time
    """

    key: str
    id: str | None = None


class CreatePlanOp(BaseModel):
    """Create the plan row (after deactivating overlapping plans)."""

    kind: Literal["create_plan"] = "create_plan"
    node_key: str
    trainer_id: str
    client_id: str
    week_start: str
    week_end: str
    notes: str | None = None


class UpdatePlanOp(BaseModel):
    kind: Literal["update_plan"] = "update_plan"
    plan_id: str
    patch: dict[str, Any]


class CreateDayOp(BaseModel):
    kind: Literal["create_day"] = "create_day"
    node_key: str
    plan: NodeRef
    day_of_week: int
    name: str
    is_rest_day: bool
    order_index: int


class UpdateDayOp(BaseModel):
    kind: Literal["update_day"] = "update_day"
    day_id: str
    patch: dict[str, Any]


class DeleteDayOp(BaseModel):
    kind: Literal["delete_day"] = "delete_day"
    day_id: str


class CreateExerciseOp(BaseModel):
    kind: Literal["create_exercise"] = "create_exercise"
    node_key: str
    day: NodeRef
    payload: ExercisePayload
    order_index: int


class UpdateExerciseOp(BaseModel):
    kind: Literal["update_exercise"] = "update_exercise"
    workout_exercise_id: str
    patch: dict[str, Any]


class DeleteExerciseOp(BaseModel):
    kind: Literal["delete_exercise"] = "delete_exercise"
    workout_exercise_id: str


Operation = Annotated[
    CreatePlanOp
    | UpdatePlanOp
    | CreateDayOp
    | UpdateDayOp
    | DeleteDayOp
    | CreateExerciseOp
    | UpdateExerciseOp
    | DeleteExerciseOp,
    Field(discriminator="kind"),
]


class ExecutionReport(BaseModel):
    """Outcome of walking an operation list against a gateway.

    Attributes:
        succeeded_ops: Operations applied by the store, in order
        failed_op: First operation that failed (None if all succeeded)
        pending_ops: Operations never attempted because of the failure
        error: Message of the failure
        error_type: Class name of the failure (e.g., "TransientError")
        identities: Store identities of created nodes, keyed by node key
    """

    succeeded_ops: list[Operation] = []
    failed_op: Operation | None = None
    pending_ops: list[Operation] = []
    error: str | None = None
    error_type: str | None = None
    identities: dict[str, str] = {}

    @property
    def completed(self) -> bool:
        return self.failed_op is None


class SaveResult(BaseModel):
    """Result of a fully applied save pass.

    Attributes:
        outcome: Always "applied"
        succeeded_ops: Operations applied by the store, in order
        baseline: Refreshed baseline (the saved hierarchy with store identities)
    """

    outcome: SaveOutcome = "applied"
    succeeded_ops: list[Operation] = []
    baseline: Plan | None = None

    @property
    def is_partial(self) -> bool:
        return self.outcome == "partially_applied"


class PartialSaveResult(SaveResult):
    """Result of a save pass that halted on its first failed operation.

    Already applied operations are NOT rolled back. The draft that produced
    this result is stale: reload the plan from the store before saving again.

    Attributes:
        failed_op: Operation that failed
        pending_ops: Operations never attempted
        error: Message of the failure
        error_type: Class name of the failure
    """

    outcome: SaveOutcome = "partially_applied"
    failed_op: Operation
    pending_ops: list[Operation] = []
    error: str
    error_type: str
