"""Error types for plan composition, reconciliation and duplication.

Validation errors are raised locally before any store call. Gateway errors
describe a single failed store operation:
- NotFoundError: the target row vanished between load and operation
- TransientError: network/timeout/database availability failure
- ConflictError: the store rejected the write (constraint violation)
"""


class PlanError(Exception):
    """Base exception for plan engine errors."""

    pass


class ValidationError(PlanError):
    """Raised when a draft or payload violates a plan invariant.

    Attributes:
        code: Error code (e.g., "DUPLICATE_WEEKDAY", "EMPTY_TRAINING_DAY")
        details: List of localized, user-facing messages
    """

    def __init__(self, code: str, details: list[str]):
        self.code = code
        self.details = details
        super().__init__(f"{code}: {details}")


class GatewayError(PlanError):
    """Base exception for failures reported by a persistence gateway."""

    pass


class NotFoundError(GatewayError):
    """Raised when an entity no longer exists in the store.

    Attributes:
        entity: Entity type ("plan", "day", "exercise")
        entity_id: Identity that was looked up
    """

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class TransientError(GatewayError):
    """Raised when a store call fails for a reason unrelated to the data."""

    pass


class ConflictError(GatewayError):
    """Raised when the store rejects a write because of a constraint."""

    pass
