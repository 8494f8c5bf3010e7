"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4


class InventoryItemFactory:
    """
    Factory for creating test inventory item rows.

    Usage:
        # Create with defaults
        item = InventoryItemFactory.create()

        # Create with overrides
        item = InventoryItemFactory.create(sku="SHI-BLA-XL-052", quantity=10)

        # Create multiple
        items = InventoryItemFactory.create_batch(5)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id: Optional[str] = None,
        sku: Optional[str] = None,
        name: Optional[str] = None,
        quantity: int = 10,
        price: str = "19.99",
        type: Optional[str] = "Shirt",
        color: Optional[str] = "Black",
        size: Optional[str] = "M",
        min_stock_level: int = 5,
        is_active: bool = True,
    ) -> dict:
        """
        Create a single inventory item row, as returned by Supabase.

        Price is text, the way the store keeps it.
        """
        counter = cls._next_counter()
        now = datetime.utcnow().isoformat()

        return {
            "id": id or str(uuid4()),
            "sku": sku or f"SHI-BLA-MX-{counter % 999 + 1:03d}",
            "name": name or f"Test Item {counter}",
            "quantity": quantity,
            "price": price,
            "type": type,
            "color": color,
            "size": size,
            "min_stock_level": min_stock_level,
            "is_active": is_active,
            "created_at": now,
            "updated_at": now,
        }

    @classmethod
    def create_batch(cls, count: int, **kwargs) -> list[dict]:
        """Create multiple item rows with unique SKUs."""
        return [cls.create(**kwargs) for _ in range(count)]


class InventoryTransactionFactory:
    """Factory for stock movement rows."""

    @classmethod
    def create(
        cls,
        item_id: str,
        quantity: int = 1,
        transaction_type: str = "addition",
        reason: str = "restock",
        notes: str = "",
        user_id: Optional[str] = None,
        created_at: Optional[str] = None,
    ) -> dict:
        """Create a single transaction row."""
        return {
            "id": str(uuid4()),
            "item_id": item_id,
            "transaction_type": transaction_type,
            "quantity": quantity,
            "reason": reason,
            "notes": notes,
            "user_id": user_id,
            "created_at": created_at or datetime.utcnow().isoformat(),
        }
