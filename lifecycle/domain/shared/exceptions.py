"""
Domain Exceptions

Error taxonomy shared by every bounded context. Each error carries an
ErrorType discriminator so adapters can map it to a response without
inspecting the concrete class.
"""

from datetime import datetime
from enum import Enum

Detail = str | int | bool | None


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    CONFLICT = "conflict"
    CONCURRENCY = "concurrency"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, Detail] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, Detail]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when a value object or command invariant is violated."""

    def __init__(
        self,
        field_name: str,
        value: object,
        message: str,
        error_code: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            {
                "field": field_name,
                "value": str(value) if value is not None else None,
                "error_code": self.error_code,
            },
        )


class NotFoundError(DomainError):
    """Raised when an aggregate cannot be located by id or business key."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        super().__init__(
            f"{entity_type} {entity_id} not found",
            ErrorType.NOT_FOUND,
            {"entity_type": entity_type, "entity_id": self.entity_id},
        )


class InvalidTransitionError(DomainError):
    """Raised when a business rule forbids the requested state change."""

    def __init__(
        self,
        entity_type: str,
        entity_id: object,
        current_status: str,
        attempted: str,
        message: str | None = None,
        details: dict[str, Detail] | None = None,
    ) -> None:
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        self.current_status = current_status
        self.attempted = attempted

        if message is None:
            message = (
                f"Cannot {attempted} {entity_type} {entity_id} "
                f"while it is {current_status}"
            )
        merged = {
            "entity_type": entity_type,
            "entity_id": self.entity_id,
            "current_status": current_status,
            "attempted": attempted,
        }
        merged.update(details or {})
        super().__init__(message, ErrorType.INVALID_TRANSITION, merged)


class BookNotAvailableError(InvalidTransitionError):
    """Raised when lending a book that is already out."""

    def __init__(self, book_id: object, current_status: str) -> None:
        super().__init__(
            "Book",
            book_id,
            current_status,
            "borrow",
            message=f"Book {book_id} is not available for loan",
        )


class LoanLimitExceededError(InvalidTransitionError):
    """Raised when a member already holds the maximum number of loans."""

    def __init__(self, member_id: object, active: int, limit: int) -> None:
        self.active = active
        self.limit = limit
        super().__init__(
            "Member",
            member_id,
            f"{active} active loans",
            "borrow",
            message=f"Member {member_id} has reached the limit of {limit} active loans",
            details={"active_loans": active, "limit": limit},
        )


class MemberHasPenaltyError(InvalidTransitionError):
    """Raised when a member with an active penalty tries to borrow."""

    def __init__(self, member_id: object, until: datetime) -> None:
        self.until = until
        super().__init__(
            "Member",
            member_id,
            "penalized",
            "borrow",
            message=(
                f"Member {member_id} has an active penalty until {until.isoformat()}"
            ),
            details={"penalty_until": until.isoformat()},
        )


class InsufficientStockError(InvalidTransitionError):
    """Raised when removing more stock than a product has on hand."""

    def __init__(self, product_id: object, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            "Product",
            product_id,
            f"{available} in stock",
            "remove stock from",
            message=(
                f"Insufficient stock for product {product_id}: "
                f"requested {requested}, available {available}"
            ),
            details={"requested": requested, "available": available},
        )


class ConflictError(DomainError):
    """Raised when a uniqueness constraint is violated."""

    def __init__(self, entity_type: str, field_name: str, value: object) -> None:
        self.entity_type = entity_type
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"{entity_type} with {field_name} '{value}' already exists",
            ErrorType.CONFLICT,
            {
                "entity_type": entity_type,
                "field": field_name,
                "value": str(value),
            },
        )


class ConcurrencyError(DomainError):
    """Raised when an aggregate was modified since it was loaded."""

    def __init__(
        self,
        entity_type: str,
        entity_id: object,
        expected_version: int,
        actual_version: int,
    ) -> None:
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"{entity_type} {entity_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})",
            ErrorType.CONCURRENCY,
            {
                "entity_type": entity_type,
                "entity_id": self.entity_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
