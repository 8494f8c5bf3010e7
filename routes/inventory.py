"""
Inventory API routes.

Item lookup and stock movements (add / deduct) with reason codes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.inventory import (
    InventoryItem,
    InventoryListResponse,
    InventoryTransactionListResponse,
    StockMutationRequest,
)
from services.inventory_store_service import get_inventory_store_service
from services.identity_payload_service import extract_search_term
from exceptions import (
    AppError,
    InventoryItemNotFoundError,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# READ ROUTES
# ===================

@router.get("", response_model=InventoryListResponse)
async def list_items(
    include_archived: bool = Query(False, description="Include archived items")
):
    """List inventory items ordered by name."""
    try:
        items = get_inventory_store_service().get_items(active_only=not include_archived)
        return InventoryListResponse(data=items, total=len(items))

    except Exception as e:
        return handle_error(e)


@router.get("/search", response_model=InventoryListResponse)
async def search_items(
    q: str = Query("", description="Name, SKU, or scanned label content"),
    limit: int = Query(20, ge=1, le=100, description="Maximum results")
):
    """
    Search items by name or SKU.

    Scanned JSON label content is reduced to its sku (or id, or name) first.
    """
    try:
        term = extract_search_term(q)
        items = get_inventory_store_service().search(term, limit=limit)

        logger.info("inventory_search", term=term, results=len(items))

        return InventoryListResponse(data=items, total=len(items))

    except Exception as e:
        return handle_error(e)


@router.get("/sku/{sku}", response_model=InventoryItem)
async def get_item_by_sku(sku: str):
    """
    Get an item by exact SKU.

    Falls back to a search and returns its first hit, as scanners may
    drop characters.

    Raises:
        404: No item matches
    """
    try:
        service = get_inventory_store_service()
        item = service.get_by_sku(sku)

        if item is None:
            matches = service.search(sku, limit=2)
            if not matches:
                raise InventoryItemNotFoundError(sku)
            item = matches[0]

        return item

    except Exception as e:
        return handle_error(e)


@router.get("/{item_id}/transactions", response_model=InventoryTransactionListResponse)
async def get_transactions(
    item_id: str,
    limit: int = Query(50, ge=1, le=500, description="Maximum rows")
):
    """Stock movements for an item, newest first."""
    try:
        transactions = get_inventory_store_service().get_transactions(item_id, limit=limit)
        return InventoryTransactionListResponse(data=transactions, total=len(transactions))

    except Exception as e:
        return handle_error(e)


# ===================
# STOCK ROUTES
# ===================

@router.post("/{item_id}/add-stock", response_model=InventoryItem)
async def add_stock(item_id: str, data: StockMutationRequest):
    """
    Add units to an item (default reason: restock).

    Raises:
        404: Item not found
        409: Stock changed concurrently
    """
    try:
        return get_inventory_store_service().add_stock(
            item_id,
            data.quantity,
            reason=data.reason,
            notes=data.notes
        )

    except Exception as e:
        return handle_error(e)


@router.post("/{item_id}/adjust", response_model=InventoryItem)
async def adjust_stock(item_id: str, data: StockMutationRequest):
    """
    Deduct units from an item (default reason: adjustment).

    Raises:
        404: Item not found
        409: Not enough stock, or stock changed concurrently
    """
    try:
        return get_inventory_store_service().adjust_stock(
            item_id,
            data.quantity,
            reason=data.reason,
            notes=data.notes
        )

    except Exception as e:
        return handle_error(e)
