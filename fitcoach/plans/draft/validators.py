"""Pre-save validation for plan drafts.

Enforces invariants before any store call is issued:
- Draft is not stale (previous pass was only partially applied)
- At most one non-deleted day per weekday
- A new plan has at least one day
- Every non-rest day has at least one non-deleted exercise
"""

from collections import Counter

from loguru import logger

from fitcoach.plans.draft.model import PlanDraft
from fitcoach.plans.errors import ValidationError
from fitcoach.plans.messages import day_names, message


def validate_not_stale(draft: PlanDraft) -> None:
    """Refuse a draft whose last save halted part-way.

    Raises:
        ValidationError: If the draft is stale
    """
    if draft.is_stale:
        raise ValidationError("STALE_DRAFT", [message("STALE_DRAFT")])


def validate_unique_weekdays(draft: PlanDraft) -> None:
    """Validate at most one non-deleted day per weekday.

    Raises:
        ValidationError: If two surviving days share a weekday
    """
    counts = Counter(day.payload.day_of_week for day in draft.visible_days())
    duplicates = sorted(dow for dow, count in counts.items() if count > 1)
    if duplicates:
        names = day_names()
        raise ValidationError(
            "DUPLICATE_WEEKDAY",
            [message("DUPLICATE_WEEKDAY", day=names[dow]) for dow in duplicates],
        )


def validate_has_days(draft: PlanDraft) -> None:
    """Validate a plan that is about to be created has at least one day.

    Raises:
        ValidationError: If a new plan has no surviving days
    """
    if draft.is_new_plan and not draft.visible_days():
        raise ValidationError("EMPTY_PLAN", [message("EMPTY_PLAN")])


def validate_training_days_have_exercises(draft: PlanDraft) -> None:
    """Validate every non-rest day keeps at least one exercise.

    Raises:
        ValidationError: If a training day has no surviving exercises
    """
    names = day_names()
    empty_days = [
        day
        for day in draft.visible_days()
        if not day.payload.is_rest_day and not day.surviving_exercises()
    ]
    if empty_days:
        raise ValidationError(
            "EMPTY_TRAINING_DAY",
            [message("EMPTY_TRAINING_DAY", day=day.payload.name or names[day.payload.day_of_week]) for day in empty_days],
        )


def validate_draft(draft: PlanDraft) -> None:
    """Validate a draft is eligible for saving.

    This is the main validation entry point. Nothing is sent to the store
    when it raises, and the draft is left untouched.

    Raises:
        ValidationError: If any invariant is violated
    """
    validate_not_stale(draft)
    validate_unique_weekdays(draft)
    validate_has_days(draft)
    validate_training_days_have_exercises(draft)

    logger.debug(
        "Draft validated",
        plan_id=draft.plan_id,
        day_count=len(draft.visible_days()),
    )
