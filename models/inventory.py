"""
Inventory item and stock movement schemas.
"""

from pydantic import Field, field_validator
from typing import Optional
from enum import Enum
from decimal import Decimal
from datetime import datetime

from models.base import BaseSchema, TimestampMixin


class ReasonCode(str, Enum):
    """Audit reason attached to every stock movement."""
    RESTOCK = "restock"
    NEW_SHIPMENT = "new_shipment"
    RETURN = "return"
    FOUND = "found"
    ADJUSTMENT = "adjustment"
    RECOUNT = "recount"
    OTHER = "other"


class TransactionType(str, Enum):
    """Direction of a recorded stock movement."""
    ADDITION = "addition"
    ADJUSTMENT = "adjustment"


class InventoryItem(BaseSchema, TimestampMixin):
    """
    Inventory item as recorded by the store.

    Read-only inside the inventory check; changes go through
    add_stock / adjust_stock.
    """

    id: str = Field(..., description="Item UUID")
    sku: str = Field(..., max_length=50, description="Stock-keeping unit")
    name: str = Field(..., description="Display name")
    quantity: int = Field(default=0, description="Recorded quantity on hand")
    min_stock_level: int = Field(default=10, ge=0, description="Low-stock threshold")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="Selling price")
    type: Optional[str] = Field(None, description="Item type, e.g. shirt")
    color: Optional[str] = Field(None, description="Item color")
    size: Optional[str] = Field(None, description="Item size")
    is_active: bool = Field(default=True, description="False once archived")

    @property
    def is_low_stock(self) -> bool:
        """At or below the minimum stock level."""
        return self.quantity <= self.min_stock_level


class StockMutationRequest(BaseSchema):
    """
    Add or deduct stock for one item.

    Quantity is always positive; direction comes from the endpoint.
    """

    quantity: int = Field(..., ge=1, description="Units to add or deduct")
    reason: Optional[ReasonCode] = Field(
        None,
        description="Audit reason (defaults per direction)"
    )
    notes: str = Field(default="", max_length=500, description="Free-text note")

    @field_validator("notes", mode="before")
    @classmethod
    def none_notes_to_empty(cls, v: Optional[str]) -> str:
        """Treat missing notes as an empty note."""
        return v or ""


class InventoryTransactionResponse(BaseSchema):
    """Audit trail row for a stock movement."""

    id: str = Field(..., description="Transaction UUID")
    item_id: str = Field(..., description="Inventory item UUID")
    transaction_type: TransactionType = Field(..., description="addition or adjustment")
    quantity: int = Field(..., description="Signed quantity (negative for deductions)")
    reason: Optional[str] = Field(None, description="Reason code")
    notes: Optional[str] = Field(None, description="Free-text note")
    user_id: Optional[str] = Field(None, description="Operator who performed it")
    created_at: Optional[datetime] = Field(None, description="When it was recorded")


class InventoryListResponse(BaseSchema):
    """List of inventory items."""

    data: list[InventoryItem]
    total: int


class InventoryTransactionListResponse(BaseSchema):
    """Stock movements for one item, newest first."""

    data: list[InventoryTransactionResponse]
    total: int
