"""Plans module - weekly plan composition and reconciliation.

This module provides:
- Week boundary computation (Monday–Sunday)
- Editable plan drafts with per-node dirty tags
- Diff-then-apply reconciliation of drafts against the store
- Duplication of a plan into the following week
"""

from fitcoach.plans.draft import NodeTag, PlanDraft, validate_draft
from fitcoach.plans.duplication import DuplicationService
from fitcoach.plans.errors import ConflictError, GatewayError, NotFoundError, PlanError, TransientError, ValidationError
from fitcoach.plans.reconciliation import (
    PartialSaveResult,
    ReconciliationEngine,
    SaveResult,
    compute_operations,
    execute_operations,
)
from fitcoach.plans.types import DayPayload, ExercisePayload, Plan, WorkoutDay, WorkoutExercise
from fitcoach.plans.week import WeekBounds, next_week_bounds, week_bounds

__all__ = [
    "ConflictError",
    "DayPayload",
    "DuplicationService",
    "ExercisePayload",
    "GatewayError",
    "NodeTag",
    "NotFoundError",
    "PartialSaveResult",
    "Plan",
    "PlanDraft",
    "PlanError",
    "ReconciliationEngine",
    "SaveResult",
    "TransientError",
    "ValidationError",
    "WeekBounds",
    "WorkoutDay",
    "WorkoutExercise",
    "compute_operations",
    "execute_operations",
    "next_week_bounds",
    "validate_draft",
    "week_bounds",
]
