"""Plan reconciliation module.

Diff-then-apply synchronization of a plan draft with the store:
- compute_operations: pure, store-free diff
- execute_operations: sequential executor over a persistence gateway
- ReconciliationEngine: validate + diff + execute + rehydrate
"""

from fitcoach.plans.reconciliation.diff import compute_operations
from fitcoach.plans.reconciliation.executor import execute_operations
from fitcoach.plans.reconciliation.service import ReconciliationEngine
from fitcoach.plans.reconciliation.types import ExecutionReport, Operation, PartialSaveResult, SaveResult

__all__ = [
    "ExecutionReport",
    "Operation",
    "PartialSaveResult",
    "ReconciliationEngine",
    "SaveResult",
    "compute_operations",
    "execute_operations",
]
