"""
Inventory store: reads items and applies stock movements in Supabase.

Every movement updates the item quantity and appends a row to the
transactions table with the reason code and note.
"""

from typing import Optional
from datetime import datetime
import structlog

from config import get_supabase_client, settings
from models.inventory import (
    InventoryItem,
    InventoryTransactionResponse,
    ReasonCode,
    TransactionType,
)
from exceptions import (
    ConflictError,
    DatabaseError,
    InsufficientStockError,
    InvalidQuantityError,
    InventoryItemNotFoundError,
)

logger = structlog.get_logger(__name__)

STOCK_CHANGED_CODE = "STOCK_CHANGED_CONCURRENTLY"


class InventoryStoreService:
    """
    Inventory item reads and stock mutations.

    The inventory check only reads through this service and asks it to
    add or deduct stock; it never writes quantities itself.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.inventory_table
        self.transactions_table = settings.transactions_table

    # ===================
    # READ OPERATIONS
    # ===================

    def get_items(self, active_only: bool = True) -> list[InventoryItem]:
        """
        Get all inventory items ordered by name.

        Args:
            active_only: Skip archived items

        Returns:
            List of InventoryItem
        """
        logger.debug("getting_inventory_items", active_only=active_only)

        try:
            query = self.db.table(self.table).select("*")

            if active_only:
                query = query.eq("is_active", True)

            result = query.order("name").execute()

            items = [InventoryItem(**row) for row in result.data]

            logger.info("inventory_items_retrieved", count=len(items))

            return items

        except Exception as e:
            logger.error("get_inventory_items_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_lookup(self, active_only: bool = True) -> dict[str, InventoryItem]:
        """Map item id to item."""
        return {item.id: item for item in self.get_items(active_only=active_only)}

    def get_by_id(self, item_id: str) -> InventoryItem:
        """
        Get a single inventory item by ID.

        Args:
            item_id: Item UUID

        Returns:
            InventoryItem

        Raises:
            InventoryItemNotFoundError: If item doesn't exist
        """
        logger.debug("getting_inventory_item", item_id=item_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", item_id)
                .single()
                .execute()
            )

            if not result.data:
                raise InventoryItemNotFoundError(item_id)

            return InventoryItem(**result.data)

        except InventoryItemNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "get_inventory_item_failed",
                item_id=item_id,
                error=str(e)
            )
            if "0 rows" in str(e) or "no rows" in str(e).lower():
                raise InventoryItemNotFoundError(item_id)
            raise DatabaseError("select", str(e))

    def get_by_sku(self, sku: str) -> Optional[InventoryItem]:
        """
        Get an inventory item by exact SKU.

        Args:
            sku: Item SKU

        Returns:
            InventoryItem or None if not found
        """
        logger.debug("getting_inventory_item_by_sku", sku=sku)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("sku", sku)
                .execute()
            )

            if not result.data:
                return None

            return InventoryItem(**result.data[0])

        except Exception as e:
            logger.error(
                "get_inventory_item_by_sku_failed",
                sku=sku,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def search(self, term: str, limit: int = 20) -> list[InventoryItem]:
        """
        Case-insensitive substring search on SKU or name.

        Args:
            term: Search text
            limit: Maximum results

        Returns:
            Matching active items
        """
        term = (term or "").strip()
        if not term:
            return []

        logger.debug("searching_inventory_items", term=term, limit=limit)

        # PostgREST uses commas and parentheses as or() separators
        safe_term = term.replace(",", " ").replace("(", " ").replace(")", " ")
        pattern = f"%{safe_term}%"

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .or_(f"sku.ilike.{pattern},name.ilike.{pattern}")
                .eq("is_active", True)
                .limit(limit)
                .execute()
            )

            return [InventoryItem(**row) for row in result.data]

        except Exception as e:
            logger.error("search_inventory_items_failed", term=term, error=str(e))
            raise DatabaseError("select", str(e))

    def get_transactions(
        self,
        item_id: Optional[str] = None,
        limit: int = 50
    ) -> list[InventoryTransactionResponse]:
        """
        Get stock movements, newest first.

        Args:
            item_id: Restrict to one item
            limit: Maximum rows

        Returns:
            List of InventoryTransactionResponse
        """
        logger.debug("getting_inventory_transactions", item_id=item_id)

        try:
            query = self.db.table(self.transactions_table).select("*")

            if item_id:
                query = query.eq("item_id", item_id)

            result = query.order("created_at", desc=True).limit(limit).execute()

            return [InventoryTransactionResponse(**row) for row in result.data]

        except Exception as e:
            logger.error(
                "get_inventory_transactions_failed",
                item_id=item_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def add_stock(
        self,
        item_id: str,
        quantity: int,
        reason: Optional[ReasonCode] = None,
        notes: str = "",
        user_id: Optional[str] = None,
        expected_quantity: Optional[int] = None
    ) -> InventoryItem:
        """
        Add units to an item.

        Args:
            item_id: Item UUID
            quantity: Units to add (positive)
            reason: Audit reason (default: restock)
            notes: Free-text note
            user_id: Operator performing the change
            expected_quantity: Quantity the caller based the change on;
                the movement is refused if the stored quantity differs

        Returns:
            Updated InventoryItem

        Raises:
            InvalidQuantityError: If quantity is not a positive integer
            InventoryItemNotFoundError: If item doesn't exist
            ConflictError: If stock no longer matches expected_quantity
        """
        _check_quantity(quantity)
        reason = reason or ReasonCode.RESTOCK

        logger.info(
            "adding_stock",
            item_id=item_id,
            quantity=quantity,
            reason=reason.value
        )

        item = self.get_by_id(item_id)
        _check_expected(item, expected_quantity)
        return self._apply_movement(
            item, quantity, TransactionType.ADDITION, reason, notes, user_id
        )

    def adjust_stock(
        self,
        item_id: str,
        quantity: int,
        reason: Optional[ReasonCode] = None,
        notes: str = "",
        user_id: Optional[str] = None,
        expected_quantity: Optional[int] = None
    ) -> InventoryItem:
        """
        Deduct units from an item.

        Args:
            item_id: Item UUID
            quantity: Units to deduct (positive)
            reason: Audit reason (default: adjustment)
            notes: Free-text note
            user_id: Operator performing the change
            expected_quantity: Quantity the caller based the change on;
                the movement is refused if the stored quantity differs

        Returns:
            Updated InventoryItem

        Raises:
            InvalidQuantityError: If quantity is not a positive integer
            InventoryItemNotFoundError: If item doesn't exist
            ConflictError: If stock no longer matches expected_quantity
            InsufficientStockError: If stock would go below zero
        """
        _check_quantity(quantity)
        reason = reason or ReasonCode.ADJUSTMENT

        logger.info(
            "deducting_stock",
            item_id=item_id,
            quantity=quantity,
            reason=reason.value
        )

        item = self.get_by_id(item_id)
        _check_expected(item, expected_quantity)
        if item.quantity - quantity < 0:
            raise InsufficientStockError(item_id, item.quantity, quantity)

        return self._apply_movement(
            item, -quantity, TransactionType.ADJUSTMENT, reason, notes, user_id
        )

    def sku_exists(self, sku: str) -> bool:
        """Check if a SKU is already assigned (archived items included)."""
        try:
            result = (
                self.db.table(self.table)
                .select("id")
                .eq("sku", sku)
                .limit(1)
                .execute()
            )
            return bool(result.data)
        except Exception as e:
            logger.error("sku_exists_check_failed", sku=sku, error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # HELPERS
    # ===================

    def _apply_movement(
        self,
        item: InventoryItem,
        signed_quantity: int,
        transaction_type: TransactionType,
        reason: ReasonCode,
        notes: str,
        user_id: Optional[str]
    ) -> InventoryItem:
        """
        Write the new quantity and the audit row.

        The update is conditional on the quantity we read, so a concurrent
        movement makes this one fail instead of being silently overwritten.
        If the audit row cannot be written the quantity is put back, so a
        failed movement never leaves a change behind.
        """
        new_quantity = item.quantity + signed_quantity

        try:
            result = (
                self.db.table(self.table)
                .update({
                    "quantity": new_quantity,
                    "updated_at": datetime.utcnow().isoformat()
                })
                .eq("id", item.id)
                .eq("quantity", item.quantity)
                .execute()
            )
        except Exception as e:
            logger.error(
                "stock_movement_failed",
                item_id=item.id,
                transaction_type=transaction_type.value,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

        if not result.data:
            raise _stock_changed(item.id, item.quantity)

        try:
            self.db.table(self.transactions_table).insert({
                "item_id": item.id,
                "transaction_type": transaction_type.value,
                "quantity": signed_quantity,
                "reason": reason.value,
                "notes": notes,
                "user_id": user_id,
            }).execute()
        except Exception as e:
            logger.error(
                "stock_transaction_insert_failed",
                item_id=item.id,
                transaction_type=transaction_type.value,
                error=str(e)
            )
            reverted = self._revert_quantity(item, new_quantity)
            raise DatabaseError("insert", str(e), details={"reverted": reverted})

        updated = InventoryItem(**result.data[0])

        logger.info(
            "stock_movement_recorded",
            item_id=item.id,
            sku=item.sku,
            transaction_type=transaction_type.value,
            quantity=signed_quantity,
            previous_quantity=item.quantity,
            new_quantity=updated.quantity,
            reason=reason.value
        )

        return updated

    def _revert_quantity(self, item: InventoryItem, written_quantity: int) -> bool:
        """
        Put back the quantity read before a movement.

        Only touches the row if it still holds the quantity we wrote.

        Returns:
            True if the row was restored
        """
        try:
            result = (
                self.db.table(self.table)
                .update({
                    "quantity": item.quantity,
                    "updated_at": datetime.utcnow().isoformat()
                })
                .eq("id", item.id)
                .eq("quantity", written_quantity)
                .execute()
            )
        except Exception as e:
            logger.error(
                "stock_movement_revert_failed",
                item_id=item.id,
                quantity=item.quantity,
                error=str(e)
            )
            return False

        if not result.data:
            logger.error(
                "stock_movement_revert_skipped",
                item_id=item.id,
                expected_quantity=written_quantity
            )
            return False

        logger.warning("stock_movement_reverted", item_id=item.id, quantity=item.quantity)
        return True


def _stock_changed(item_id: str, expected_quantity: int) -> ConflictError:
    return ConflictError(
        code=STOCK_CHANGED_CODE,
        message="Stock changed while updating, reload and retry",
        details={"item_id": item_id, "expected_quantity": expected_quantity}
    )


def _check_expected(item: InventoryItem, expected_quantity: Optional[int]) -> None:
    """Refuse a movement computed from a quantity the store no longer holds."""
    if expected_quantity is not None and item.quantity != expected_quantity:
        logger.warning(
            "stock_drifted",
            item_id=item.id,
            expected_quantity=expected_quantity,
            stored_quantity=item.quantity
        )
        raise _stock_changed(item.id, expected_quantity)


def _check_quantity(quantity: int) -> None:
    """Quantities are positive integers; direction is chosen by the caller."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(quantity)


# Singleton instance for convenience
_inventory_store_service: Optional[InventoryStoreService] = None


def get_inventory_store_service() -> InventoryStoreService:
    """Get or create InventoryStoreService instance."""
    global _inventory_store_service
    if _inventory_store_service is None:
        _inventory_store_service = InventoryStoreService()
    return _inventory_store_service
