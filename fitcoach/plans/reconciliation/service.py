"""Reconciliation service: validate, diff, execute, rehydrate.

This is the entry point used when a trainer saves an edited plan.
"""

from loguru import logger

from fitcoach.persistence.gateway import PersistenceGateway
from fitcoach.plans.draft.model import PlanDraft
from fitcoach.plans.draft.validators import validate_draft
from fitcoach.plans.reconciliation.diff import compute_operations
from fitcoach.plans.reconciliation.executor import execute_operations
from fitcoach.plans.reconciliation.types import Operation, PartialSaveResult, SaveResult


class ReconciliationEngine:
    """Synchronizes plan drafts with the store through a gateway.

    The engine does not serialize concurrent saves of the same plan; callers
    must not start a second pass while one is in flight.
    """

    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    def preview(self, draft: PlanDraft, baseline_notes: str | None) -> list[Operation]:
        """Validate the draft and return the operations a save would execute.

        Raises:
            ValidationError: If the draft is not save-eligible
        """
        validate_draft(draft)
        return compute_operations(draft, baseline_notes)

    async def save(self, draft: PlanDraft, baseline_notes: str | None) -> SaveResult | PartialSaveResult:
        """Save a draft.

        Flow:
        1. Validate the draft (nothing is sent when this fails)
        2. Compute the ordered operation list
        3. Execute it sequentially against the gateway
        4. On success, rehydrate the draft with store identities
        5. On failure, mark the draft stale and report what was applied; any
           other exception also marks it stale before propagating

        Args:
            draft: Draft to save
            baseline_notes: Trainer notes of the persisted plan

        Returns:
            SaveResult with the refreshed baseline, or PartialSaveResult when
            the pass halted on a failed operation

        Raises:
            ValidationError: If the draft is not save-eligible
        """
        operations = self.preview(draft, baseline_notes)
        if not operations:
            logger.debug("Draft has no changes, nothing to save", plan_id=draft.plan_id)
            return SaveResult(baseline=draft.to_plan())

        logger.info(
            "Executing save pass",
            plan_id=draft.plan_id,
            operation_count=len(operations),
        )
        try:
            report = await execute_operations(operations, self.gateway)
        except BaseException as e:
            # earlier operations may already be applied
            draft.mark_stale()
            logger.bind(plan_id=draft.plan_id, error_type=type(e).__name__).error(
                f"Save pass aborted by an unexpected error: {e}"
            )
            raise

        if not report.completed:
            draft.mark_stale()
            logger.warning(
                "Save pass partially applied",
                plan_id=draft.plan_id,
                succeeded=len(report.succeeded_ops),
                pending=len(report.pending_ops),
                error_type=report.error_type,
            )
            return PartialSaveResult(
                succeeded_ops=report.succeeded_ops,
                failed_op=report.failed_op,
                pending_ops=report.pending_ops,
                error=report.error or "",
                error_type=report.error_type or "",
            )

        draft.mark_saved(report.identities)
        logger.info(
            "Save pass applied",
            plan_id=draft.plan_id,
            operation_count=len(report.succeeded_ops),
        )
        return SaveResult(succeeded_ops=report.succeeded_ops, baseline=draft.to_plan())
