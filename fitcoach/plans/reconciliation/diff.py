"""Pure diff stage of reconciliation.

Computes the ordered list of store operations that brings the persisted
hierarchy into agreement with a draft. No store access happens here.

Order of emission:
1. Plan level: create the plan (new drafts) or update its notes
2. delete_day for every DELETED day (children cascade at the store)
3. Per surviving day, in draft order unless its weekday is still taken:
   - NEW → create_day, then create_exercise for each surviving child
   - MODIFIED → update_day, then its children
   - CLEAN → its children only
4. Per exercise of an existing day:
   - DELETED → delete_exercise
   - NEW → create_exercise
   - MODIFIED → update_exercise(full payload + order_index)
   - CLEAN → update_exercise({order_index}) only if its position shifted
"""

from typing import assert_never

from fitcoach.plans.draft.model import PlanDraft
from fitcoach.plans.draft.types import DraftDay, DraftExercise, NodeTag
from fitcoach.plans.messages import day_names
from fitcoach.plans.reconciliation.types import (
    CreateDayOp,
    CreateExerciseOp,
    CreatePlanOp,
    DeleteDayOp,
    DeleteExerciseOp,
    NodeRef,
    Operation,
    UpdateDayOp,
    UpdateExerciseOp,
    UpdatePlanOp,
)


def _normalize_notes(notes: str | None) -> str | None:
    return notes or None


def _exercise_operations(day_ref: NodeRef, exercises: list[DraftExercise]) -> list[Operation]:
    operations: list[Operation] = []
    position = 0
    for exercise in exercises:
        tag = exercise.tag
        if tag is NodeTag.DELETED:
            operations.append(DeleteExerciseOp(workout_exercise_id=exercise.id))
            continue

        order_index = position
        position += 1

        if tag is NodeTag.NEW:
            operations.append(
                CreateExerciseOp(
                    node_key=exercise.key,
                    day=day_ref,
                    payload=exercise.payload,
                    order_index=order_index,
                )
            )
        elif tag is NodeTag.MODIFIED:
            operations.append(
                UpdateExerciseOp(
                    workout_exercise_id=exercise.id,
                    patch={**exercise.payload.model_dump(), "order_index": order_index},
                )
            )
        elif tag is NodeTag.CLEAN:
            if order_index != exercise.baseline_order_index:
                operations.append(
                    UpdateExerciseOp(
                        workout_exercise_id=exercise.id,
                        patch={"order_index": order_index},
                    )
                )
        else:
            assert_never(tag)
    return operations


def _day_name(day: DraftDay, names: list[str]) -> str:
    return day.payload.name or names[day.payload.day_of_week]


def _day_operations(day: DraftDay, plan_ref: NodeRef, names: list[str]) -> list[Operation]:
    """Operations for one surviving day followed by its children."""
    operations: list[Operation] = []
    tag = day.tag
    if tag is NodeTag.NEW:
        operations.append(
            CreateDayOp(
                node_key=day.key,
                plan=plan_ref,
                day_of_week=day.payload.day_of_week,
                name=_day_name(day, names),
                is_rest_day=day.payload.is_rest_day,
                order_index=day.payload.day_of_week,
            )
        )
    elif tag is NodeTag.MODIFIED:
        operations.append(
            UpdateDayOp(
                day_id=day.id,
                patch={
                    "day_of_week": day.payload.day_of_week,
                    "name": _day_name(day, names),
                    "is_rest_day": day.payload.is_rest_day,
                    "order_index": day.payload.day_of_week,
                },
            )
        )
    elif tag is NodeTag.CLEAN:
        # ordered by weekday, so an untouched day never moves
        pass
    elif tag is NodeTag.DELETED:
        raise ValueError("DELETED days are emitted before placement")
    else:
        assert_never(tag)

    operations.extend(_exercise_operations(NodeRef(key=day.key, id=day.id), day.exercises))
    return operations


def _holder(day_of_week: int, stored: dict[str, int]) -> str | None:
    return next((key for key, held in stored.items() if held == day_of_week), None)


def _next_placeable(pending: list[DraftDay], stored: dict[str, int]) -> DraftDay | None:
    """First pending day whose target weekday is free in the store (or already its own)."""
    for day in pending:
        holder = _holder(day.payload.day_of_week, stored)
        if holder is None or holder == day.key:
            return day
    return None


def _cycle_member(pending: list[DraftDay], stored: dict[str, int]) -> DraftDay | None:
    """Follow who-holds-my-weekday links from the first pending day until a day repeats."""
    by_key = {day.key: day for day in pending}
    day = pending[0]
    seen: set[str] = set()
    while day.key not in seen:
        seen.add(day.key)
        holder = by_key.get(_holder(day.payload.day_of_week, stored))
        if holder is None:
            return None
        day = holder
    return day


def compute_operations(
    draft: PlanDraft,
    baseline_notes: str | None,
    *,
    names: list[str] | None = None,
) -> list[Operation]:
    """Compute the ordered store operations for a draft.

    Every delete_day comes first, freeing its weekday. Surviving days then
    follow draft order, except that a day taking a weekday still held in
    the store by another day waits until that day has moved away. When
    moved days wait on each other in a cycle (e.g. Monday and Wednesday
    swapped), one of them is first parked on a free weekday.

    Args:
        draft: Draft to reconcile (expected to be validated)
        baseline_notes: Trainer notes of the persisted plan
        names: Weekday names used for unnamed days (defaults to settings.locale)

    Returns:
        Operations in execution order; empty when the draft has no changes
    """
    names = names or day_names()
    operations: list[Operation] = []

    if draft.plan_id is None:
        operations.append(
            CreatePlanOp(
                node_key=draft.key,
                trainer_id=draft.trainer_id,
                client_id=draft.client_id,
                week_start=draft.week_start,
                week_end=draft.week_end,
                notes=_normalize_notes(draft.trainer_notes),
            )
        )
    elif _normalize_notes(draft.trainer_notes) != _normalize_notes(baseline_notes):
        operations.append(
            UpdatePlanOp(plan_id=draft.plan_id, patch={"trainer_notes": _normalize_notes(draft.trainer_notes)})
        )
    plan_ref = NodeRef(key=draft.key, id=draft.plan_id)

    operations.extend(DeleteDayOp(day_id=day.id) for day in draft.days if day.tag is NodeTag.DELETED)

    # weekday each surviving day holds in the store at this point of the pass
    stored = {
        day.key: day.baseline_day_of_week
        for day in draft.visible_days()
        if day.baseline_day_of_week is not None
    }
    pending = draft.visible_days()
    while pending:
        day = _next_placeable(pending, stored)
        if day is None:
            blocker = _cycle_member(pending, stored)
            free = next((dow for dow in range(7) if dow not in stored.values()), None)
            if blocker is None or free is None:
                # no way around the weekday constraint; the store decides
                day = pending[0]
            else:
                operations.append(UpdateDayOp(day_id=blocker.id, patch={"day_of_week": free}))
                stored[blocker.key] = free
                continue

        pending.remove(day)
        stored[day.key] = day.payload.day_of_week
        operations.extend(_day_operations(day, plan_ref, names))

    return operations
