"""Tests for the SQLAlchemy persistence gateway on in-memory SQLite."""

import pytest

from fitcoach.plans.draft import PlanDraft
from fitcoach.plans.duplication import DuplicationService
from fitcoach.plans.errors import ConflictError, NotFoundError
from fitcoach.plans.reconciliation import ReconciliationEngine


async def create_push_plan(gateway, client_id="client-1", week_start="2024-06-10", week_end="2024-06-16"):
    plan = await gateway.create_plan("trainer-1", client_id, week_start, week_end, "Focus on form")
    day = await gateway.create_day(plan.id, 0, "Push", False, 0)
    await gateway.create_exercise(day.id, "bench_press", 4, "8", 60.0, 90, None, 0)
    await gateway.create_exercise(day.id, "overhead_press", 3, "10", None, 60, "Strict form", 1)
    return plan


class TestRoundTrip:
    """Test writing and reading back plan hierarchies."""

    @pytest.mark.asyncio
    async def test_create_and_fetch_hierarchy(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)

        stored = await sql_gateway.fetch_plan_hierarchy(plan.id)

        assert stored.week_start == "2024-06-10"
        assert stored.week_end == "2024-06-16"
        assert stored.trainer_notes == "Focus on form"
        assert stored.is_active is True
        assert len(stored.days) == 1
        assert stored.days[0].name == "Push"
        assert [(ex.exercise_id, ex.order_index) for ex in stored.days[0].exercises] == [
            ("bench_press", 0),
            ("overhead_press", 1),
        ]
        assert stored.days[0].exercises[0].weight_kg == 60.0
        assert stored.days[0].exercises[1].notes == "Strict form"

    @pytest.mark.asyncio
    async def test_days_are_returned_in_weekday_order(self, sql_gateway):
        plan = await sql_gateway.create_plan("trainer-1", "client-1", "2024-06-10", "2024-06-16", None)
        await sql_gateway.create_day(plan.id, 4, "Legs", False, 4)
        await sql_gateway.create_day(plan.id, 1, "Upper", False, 1)

        stored = await sql_gateway.fetch_plan_hierarchy(plan.id)

        assert [day.day_of_week for day in stored.days] == [1, 4]

    @pytest.mark.asyncio
    async def test_update_rows(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)
        stored = await sql_gateway.fetch_plan_hierarchy(plan.id)
        day = stored.days[0]

        await sql_gateway.update_plan(plan.id, {"trainer_notes": None})
        await sql_gateway.update_day(day.id, {"name": "Chest", "day_of_week": 1, "order_index": 1})
        await sql_gateway.update_exercise(day.exercises[0].id, {"sets": 5, "order_index": 1})
        await sql_gateway.update_exercise(day.exercises[1].id, {"order_index": 0})

        stored = await sql_gateway.fetch_plan_hierarchy(plan.id)
        assert stored.trainer_notes is None
        assert (stored.days[0].name, stored.days[0].day_of_week) == ("Chest", 1)
        assert [(ex.exercise_id, ex.sets) for ex in stored.days[0].exercises] == [
            ("overhead_press", 3),
            ("bench_press", 5),
        ]

    @pytest.mark.asyncio
    async def test_unknown_patch_field_is_rejected(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)
        stored = await sql_gateway.fetch_plan_hierarchy(plan.id)

        with pytest.raises(ValueError):
            await sql_gateway.update_day(stored.days[0].id, {"plan_id": "other-plan"})


class TestDeletes:
    """Test deletes and their cascades."""

    @pytest.mark.asyncio
    async def test_delete_day_removes_its_exercises(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)
        day = (await sql_gateway.fetch_plan_hierarchy(plan.id)).days[0]

        await sql_gateway.delete_day(day.id)

        assert (await sql_gateway.fetch_plan_hierarchy(plan.id)).days == []
        with pytest.raises(NotFoundError):
            await sql_gateway.delete_exercise(day.exercises[0].id)

    @pytest.mark.asyncio
    async def test_delete_plan_removes_hierarchy(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)
        day = (await sql_gateway.fetch_plan_hierarchy(plan.id)).days[0]

        await sql_gateway.delete_plan(plan.id)

        with pytest.raises(NotFoundError):
            await sql_gateway.fetch_plan_hierarchy(plan.id)
        with pytest.raises(NotFoundError):
            await sql_gateway.update_day(day.id, {"name": "Gone"})


class TestErrors:
    """Test translation of store failures."""

    @pytest.mark.asyncio
    async def test_missing_plan(self, sql_gateway):
        with pytest.raises(NotFoundError) as exc_info:
            await sql_gateway.fetch_plan_hierarchy("missing-plan")

        assert exc_info.value.entity == "plan"
        assert exc_info.value.entity_id == "missing-plan"

    @pytest.mark.asyncio
    async def test_create_day_on_missing_plan(self, sql_gateway):
        with pytest.raises(NotFoundError):
            await sql_gateway.create_day("missing-plan", 0, "Push", False, 0)

    @pytest.mark.asyncio
    async def test_duplicate_weekday_is_a_conflict(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)

        with pytest.raises(ConflictError):
            await sql_gateway.create_day(plan.id, 0, "Push again", False, 0)

        assert len((await sql_gateway.fetch_plan_hierarchy(plan.id)).days) == 1

    @pytest.mark.asyncio
    async def test_check_constraint_is_a_conflict(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)
        exercise = (await sql_gateway.fetch_plan_hierarchy(plan.id)).days[0].exercises[0]

        with pytest.raises(ConflictError):
            await sql_gateway.update_exercise(exercise.id, {"sets": 0})


class TestActivePlans:
    """Test the one-active-plan-per-week rule."""

    @pytest.mark.asyncio
    async def test_deactivate_overlapping(self, sql_gateway):
        first = await create_push_plan(sql_gateway)
        other_client = await create_push_plan(sql_gateway, client_id="client-2")
        next_week = await create_push_plan(sql_gateway, week_start="2024-06-17", week_end="2024-06-23")

        await sql_gateway.deactivate_overlapping("client-1", "2024-06-10")

        assert (await sql_gateway.fetch_plan_hierarchy(first.id)).is_active is False
        assert (await sql_gateway.fetch_plan_hierarchy(other_client.id)).is_active is True
        assert (await sql_gateway.fetch_plan_hierarchy(next_week.id)).is_active is True

    @pytest.mark.asyncio
    async def test_fetch_active_plan(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)

        active = await sql_gateway.fetch_active_plan("client-1", on="2024-06-13")

        assert active.id == plan.id
        assert len(active.days[0].exercises) == 2
        assert await sql_gateway.fetch_active_plan("client-1", on="2024-06-20") is None
        assert await sql_gateway.fetch_active_plan("client-2", on="2024-06-13") is None

    @pytest.mark.asyncio
    async def test_inactive_plan_is_not_active(self, sql_gateway):
        await create_push_plan(sql_gateway)
        await sql_gateway.deactivate_overlapping("client-1", "2024-06-10")

        assert await sql_gateway.fetch_active_plan("client-1", on="2024-06-10") is None


class TestEngineIntegration:
    """Test the plan engine on top of the SQL gateway."""

    @pytest.mark.asyncio
    async def test_save_new_plan_then_edit(self, sql_gateway):
        engine = ReconciliationEngine(sql_gateway)
        draft = PlanDraft.new(trainer_id="trainer-1", client_id="client-1", week_of="2024-06-12")
        draft.add_day(2, name="Pull")
        draft.add_exercise(0, {"exercise_id": "barbell_row", "sets": 4, "reps": "8"})
        draft.add_day(0, name="Push")
        draft.add_exercise(1, {"exercise_id": "bench_press"})

        await engine.save(draft, None)

        stored = await sql_gateway.fetch_plan_hierarchy(draft.plan_id)
        assert [(day.day_of_week, day.order_index) for day in stored.days] == [(0, 0), (2, 2)]
        assert [day.id for day in draft.days] == [day.id for day in stored.days]

        draft.add_exercise(0, {"exercise_id": "dips"})
        draft.move_exercise(0, 1, 0)
        draft.remove_day(1)
        result = await engine.save(draft, None)

        stored = await sql_gateway.fetch_plan_hierarchy(draft.plan_id)
        assert not result.is_partial
        assert [day.name for day in stored.days] == ["Push"]
        assert [ex.exercise_id for ex in stored.days[0].exercises] == ["dips", "bench_press"]
        assert stored == result.baseline

    @pytest.mark.asyncio
    async def test_duplicate_plan(self, sql_gateway):
        source = await create_push_plan(sql_gateway)

        new_plan = await DuplicationService(sql_gateway).duplicate(source.id)

        stored = await sql_gateway.fetch_plan_hierarchy(new_plan.id)
        assert (stored.week_start, stored.week_end) == ("2024-06-17", "2024-06-23")
        assert [ex.exercise_id for ex in stored.days[0].exercises] == ["bench_press", "overhead_press"]
        assert stored == new_plan

    @pytest.mark.asyncio
    async def test_day_moved_onto_deleted_weekday(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)
        wednesday = await sql_gateway.create_day(plan.id, 2, "Pull", False, 2)
        await sql_gateway.create_exercise(wednesday.id, "barbell_row", 4, "8-10", None, 90, None, 0)
        engine = ReconciliationEngine(sql_gateway)
        draft = PlanDraft.from_plan(await sql_gateway.fetch_plan_hierarchy(plan.id))
        draft.remove_day(1)
        draft.update_day(0, {"day_of_week": 2})

        result = await engine.save(draft, plan.trainer_notes)

        stored = await sql_gateway.fetch_plan_hierarchy(plan.id)
        assert not result.is_partial
        assert [(day.day_of_week, day.name) for day in stored.days] == [(2, "Push")]
        assert [ex.exercise_id for ex in stored.days[0].exercises] == ["bench_press", "overhead_press"]
        assert stored == result.baseline

    @pytest.mark.asyncio
    async def test_swapped_days(self, sql_gateway):
        plan = await create_push_plan(sql_gateway)
        wednesday = await sql_gateway.create_day(plan.id, 2, "Pull", False, 2)
        await sql_gateway.create_exercise(wednesday.id, "barbell_row", 4, "8-10", None, 90, None, 0)
        engine = ReconciliationEngine(sql_gateway)
        draft = PlanDraft.from_plan(await sql_gateway.fetch_plan_hierarchy(plan.id))
        draft.update_day(0, {"day_of_week": 1})
        draft.update_day(1, {"day_of_week": 0})
        draft.update_day(0, {"day_of_week": 2})

        result = await engine.save(draft, plan.trainer_notes)

        stored = await sql_gateway.fetch_plan_hierarchy(plan.id)
        assert not result.is_partial
        assert [(day.day_of_week, day.name) for day in stored.days] == [(0, "Pull"), (2, "Push")]
        assert stored == result.baseline
