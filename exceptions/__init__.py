"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DatabaseError,

    # Inventory
    InventoryItemNotFoundError,
    InvalidQuantityError,
    InsufficientStockError,

    # SKU
    SKUGenerationError,

    # Labels
    PayloadEmptyError,
    PayloadTooLongError,
    RenderError,

    # Inventory check
    InvalidTransitionError,
    CheckSessionNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DatabaseError",

    # Inventory
    "InventoryItemNotFoundError",
    "InvalidQuantityError",
    "InsufficientStockError",

    # SKU
    "SKUGenerationError",

    # Labels
    "PayloadEmptyError",
    "PayloadTooLongError",
    "RenderError",

    # Inventory check
    "InvalidTransitionError",
    "CheckSessionNotFoundError",
]
