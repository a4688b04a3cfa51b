"""Draft node types.

Every node of a draft carries a dirty tag saying whether and how it differs
from the persisted baseline:
- CLEAN: hydrated from the store, untouched
- NEW: authored locally, no identity yet
- MODIFIED: hydrated, then edited
- DELETED: hydrated, then removed; kept until the save pass consumes it

Authored nodes that are removed never become DELETED: they are spliced out
of the draft because there is nothing to reconcile.
"""

import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import assert_never

from fitcoach.plans.types import DayPayload, ExercisePayload


class NodeTag(StrEnum):
    """Dirty tag of a draft node."""

    CLEAN = "clean"
    NEW = "new"
    MODIFIED = "modified"
    DELETED = "deleted"


def _new_key() -> str:
    return uuid.uuid4().hex


def _check_identity(tag: NodeTag, node_id: str | None) -> None:
    if tag is NodeTag.NEW:
        if node_id is not None:
            raise ValueError("NEW nodes cannot carry an identity")
    elif tag in {NodeTag.CLEAN, NodeTag.MODIFIED, NodeTag.DELETED}:
        if node_id is None:
            raise ValueError(f"{tag} nodes require an identity")
    else:
        assert_never(tag)


def promote_on_edit(tag: NodeTag) -> NodeTag:
    """Return the tag a node takes after an edit.

    Raises:
        ValueError: If the node is DELETED
    """
    if tag is NodeTag.CLEAN:
        return NodeTag.MODIFIED
    if tag is NodeTag.NEW or tag is NodeTag.MODIFIED:
        return tag
    if tag is NodeTag.DELETED:
        raise ValueError("DELETED nodes cannot be edited")
    assert_never(tag)


@dataclass
class DraftExercise:
    """Exercise node of a draft.

    Attributes:
        payload: Editable exercise fields
        tag: Dirty tag
        id: Store identity (None for authored nodes)
        baseline_order_index: Position among its siblings when hydrated
        key: Local identity, stable for the lifetime of the draft
    """

    payload: ExercisePayload
    tag: NodeTag = NodeTag.NEW
    id: str | None = None
    baseline_order_index: int | None = None
    key: str = field(default_factory=_new_key)

    def __post_init__(self) -> None:
        _check_identity(self.tag, self.id)


@dataclass
class DraftDay:
    """Day node of a draft, owning its exercise nodes in visual order.

    baseline_day_of_week is the weekday the stored row holds (None until
    persisted); the save pass orders weekday moves around it.
    """

    payload: DayPayload
    tag: NodeTag = NodeTag.NEW
    id: str | None = None
    baseline_day_of_week: int | None = None
    exercises: list[DraftExercise] = field(default_factory=list)
    key: str = field(default_factory=_new_key)

    def __post_init__(self) -> None:
        _check_identity(self.tag, self.id)

    def surviving_exercises(self) -> list[DraftExercise]:
        """Exercises that will exist after the next save, in visual order."""
        return [ex for ex in self.exercises if ex.tag is not NodeTag.DELETED]
