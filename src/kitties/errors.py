"""Error taxonomy and standardized error responses for kitty operations.

Every precondition failure raised by the registry, owner index and
operations layer is a KittyError subclass. Each carries a machine-readable
code and a category so callers can switch on them, and each can be
rendered as the standard error response dict.

Usage:
    from src.kitties.errors import KittyError, NotOwnerError

    try:
        ops.transfer("alice", "bob", kitty_id)
    except NotOwnerError as e:
        return e.to_response()
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error classification.

    - VALIDATION: Caller provided bad input
    - PERMISSION: Caller not authorized or cannot pay
    - RESOURCE: Not found, already exists, capacity
    - SYSTEM: Internal invariant breach
    """

    VALIDATION = "validation"
    PERMISSION = "permission"
    RESOURCE = "resource"
    SYSTEM = "system"


class ErrorCode(str, Enum):
    """Specific error codes for programmatic handling."""

    # Validation errors
    INVALID_ARGUMENT = "invalid_argument"
    SELF_TRANSFER = "self_transfer"
    NOT_FOR_SALE = "not_for_sale"
    PRICE_TOO_LOW = "price_too_low"

    # Permission errors
    BAD_ORIGIN = "bad_origin"
    NOT_OWNER = "not_owner"
    INSUFFICIENT_FUNDS = "insufficient_funds"

    # Resource errors
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    REGISTRY_FULL = "registry_full"
    QUOTA_EXCEEDED = "quota_exceeded"

    # System errors
    INCONSISTENT_STATE = "inconsistent_state"
    INTERNAL_ERROR = "internal_error"


@dataclass
class ErrorResponse:
    """Standardized error response.

    All error responses include:
    - success: Always False
    - error: Human-readable message
    - code: Machine-readable error code
    - category: Error category (validation, permission, etc.)
    - retriable: Whether the call could succeed if retried unchanged
    - details: Optional additional context
    """

    success: bool = False
    error: str = ""
    code: str = ""
    category: str = ""
    retriable: bool = False
    details: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        result: dict[str, object] = {
            "success": self.success,
            "error": self.error,
            "code": self.code,
            "category": self.category,
            "retriable": self.retriable,
        }
        if self.details:
            result["details"] = self.details
        return result


class KittyError(Exception):
    """Base class for every typed failure of a kitty call.

    Raising one of these guarantees that the call applied no mutation,
    or that the enclosing transaction will roll back what it applied.
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    category: ErrorCategory = ErrorCategory.SYSTEM

    def __init__(self, message: str, **details: object) -> None:
        self.message = message
        self.details = dict(details)
        super().__init__(message)

    def to_response(self) -> dict[str, object]:
        """Render as a standard error response dict."""
        return ErrorResponse(
            error=self.message,
            code=self.code.value,
            category=self.category.value,
            retriable=False,
            details=self.details or None,
        ).to_dict()


class NotFoundError(KittyError):
    """The kitty does not exist (or is not in the owner's list)."""

    code = ErrorCode.NOT_FOUND
    category = ErrorCategory.RESOURCE


class DuplicateIdError(KittyError):
    """A kitty with this id is already registered."""

    code = ErrorCode.ALREADY_EXISTS
    category = ErrorCategory.RESOURCE


class RegistryFullError(KittyError):
    """The registry counter would overflow."""

    code = ErrorCode.REGISTRY_FULL
    category = ErrorCategory.RESOURCE


class OwnerCapacityExceededError(KittyError):
    """The target account already holds the maximum number of kitties."""

    code = ErrorCode.QUOTA_EXCEEDED
    category = ErrorCategory.RESOURCE


class NotOwnerError(KittyError):
    """The caller does not own the kitty."""

    code = ErrorCode.NOT_OWNER
    category = ErrorCategory.PERMISSION


class BadOriginError(KittyError):
    """The call was not signed by an account."""

    code = ErrorCode.BAD_ORIGIN
    category = ErrorCategory.PERMISSION


class PaymentFailureError(KittyError):
    """The ledger refused the purchase payment."""

    code = ErrorCode.INSUFFICIENT_FUNDS
    category = ErrorCategory.PERMISSION


class SelfTransferError(KittyError):
    """Sender and recipient are the same account."""

    code = ErrorCode.SELF_TRANSFER
    category = ErrorCategory.VALIDATION


class NotForSaleError(KittyError):
    """The kitty has no asking price."""

    code = ErrorCode.NOT_FOR_SALE
    category = ErrorCategory.VALIDATION


class PriceTooLowError(KittyError):
    """The buyer's max price is below the asking price."""

    code = ErrorCode.PRICE_TOO_LOW
    category = ErrorCategory.VALIDATION


class InvalidArgumentError(KittyError):
    """An argument is malformed (e.g. negative price)."""

    code = ErrorCode.INVALID_ARGUMENT
    category = ErrorCategory.VALIDATION


class InconsistentStateError(KittyError):
    """Registry and owner index disagree. Indicates a bug, not a user error."""

    code = ErrorCode.INCONSISTENT_STATE
    category = ErrorCategory.SYSTEM


# Factory functions for creating error responses outside of exceptions


def validation_error(
    message: str,
    code: ErrorCode = ErrorCode.INVALID_ARGUMENT,
    **details: object,
) -> dict[str, object]:
    """Create a validation error response.

    Args:
        message: Human-readable error message
        code: Specific error code (default: INVALID_ARGUMENT)
        **details: Additional context

    Returns:
        Error response dict with success=False
    """
    return ErrorResponse(
        error=message,
        code=code.value,
        category=ErrorCategory.VALIDATION.value,
        retriable=False,
        details=dict(details) if details else None,
    ).to_dict()
