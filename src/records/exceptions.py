"""Domain exceptions raised by services and caught by the error mapper.

Services raise these to signal business-rule violations. Handlers in
records.problems translate each one into a problem-detail response with a
stable `type` URI, so clients can dispatch on the type instead of on
message text.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from records.validation import FieldViolation


class DomainError(Exception):
    """Base class for all domain exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found with id: {identifier}")


class InsufficientStockError(DomainError):
    """Raised when a reservation asks for more units than are available."""

    def __init__(self, product_id: int, requested: int, available: int) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Requested: {requested}, Available: {available}"
        )


class DomainValidationError(DomainError):
    """A business rule on a single field was violated (beyond the field constraints)."""

    def __init__(self, field: str, value: object, message: str) -> None:
        self.field = field
        self.value = value
        super().__init__(message)


class DuplicateKeyError(DomainError):
    """Raised when a write would duplicate a business key (e.g. SKU)."""

    def __init__(self, entity: str, field: str, value: object) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field} {value} already exists")


class RequestValidationFailed(DomainError):
    """One or more field constraints failed on an incoming request body."""

    def __init__(self, violations: Sequence["FieldViolation"]) -> None:
        self.violations = list(violations)
        super().__init__("Validation failed")
