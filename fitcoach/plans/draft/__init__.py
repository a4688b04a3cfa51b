"""Plan draft module.

Editable snapshot of a plan's day/exercise hierarchy with per-node dirty tags.
"""

from fitcoach.plans.draft.model import PlanDraft
from fitcoach.plans.draft.types import DraftDay, DraftExercise, NodeTag
from fitcoach.plans.draft.validators import validate_draft

__all__ = [
    "DraftDay",
    "DraftExercise",
    "NodeTag",
    "PlanDraft",
    "validate_draft",
]
