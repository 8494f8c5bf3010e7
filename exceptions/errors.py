"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict so routes
can return the same envelope regardless of where the error was raised.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "INVENTORY_ITEM_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# INVENTORY ERRORS
# ===================

class InventoryItemNotFoundError(NotFoundError):
    """Inventory item not found by id or SKU."""

    def __init__(self, identifier: str):
        super().__init__(
            resource="Inventory item",
            identifier=identifier,
            code="INVENTORY_ITEM_NOT_FOUND"
        )


class InvalidQuantityError(ValidationError):
    """Stock mutation quantity must be a positive integer."""

    def __init__(self, quantity: Any):
        super().__init__(
            code="INVALID_QUANTITY",
            message="Quantity must be a positive whole number",
            details={"provided": quantity}
        )


class InsufficientStockError(ConflictError):
    """Deduction would take recorded stock below zero."""

    def __init__(self, item_id: str, available: int, requested: int):
        super().__init__(
            code="INSUFFICIENT_STOCK",
            message=f"Cannot deduct {requested} units, only {available} on record",
            details={"item_id": item_id, "available": available, "requested": requested}
        )


# ===================
# SKU ERRORS
# ===================

class SKUGenerationError(ConflictError):
    """Could not draw a SKU that is free in the store."""

    def __init__(self, attempts: int, last_sku: str):
        super().__init__(
            code="SKU_GENERATION_EXHAUSTED",
            message=f"No free SKU found after {attempts} attempts",
            details={"attempts": attempts, "last_sku": last_sku}
        )


# ===================
# LABEL ERRORS
# ===================

class PayloadEmptyError(ValidationError):
    """Scan payload is empty."""

    def __init__(self):
        super().__init__(
            code="PAYLOAD_EMPTY",
            message="Label content cannot be empty"
        )


class PayloadTooLongError(ValidationError):
    """Scan payload exceeds the label capacity."""

    def __init__(self, length: int, max_length: int):
        super().__init__(
            code="PAYLOAD_TOO_LONG",
            message=f"Label content is {length} characters, maximum is {max_length}",
            details={"length": length, "max_length": max_length}
        )


class RenderError(AppError):
    """Drawing surface could not be obtained. Callers may retry."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="RENDER_UNAVAILABLE",
            message=message,
            status_code=503,
            details=details
        )


# ===================
# INVENTORY CHECK ERRORS
# ===================

class InvalidTransitionError(ConflictError):
    """Inventory check event not accepted in the current state."""

    def __init__(self, mode: str, event: str, reason: str):
        super().__init__(
            code="INVALID_CHECK_TRANSITION",
            message=f"Cannot apply {event} while {mode}: {reason}",
            details={"mode": mode, "event": event, "reason": reason}
        )


class CheckSessionNotFoundError(NotFoundError):
    """Inventory check session not found."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Inventory check session",
            identifier=session_id,
            code="CHECK_SESSION_NOT_FOUND"
        )
