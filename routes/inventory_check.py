"""
Inventory check API routes.

A check session walks one operator through search/scan, count and confirm.
Every action returns the full session state plus any notifications raised
since the last response.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.reconciliation import (
    CheckSessionResponse,
    CountRequest,
    QueryRequest,
    ScanRequest,
    SelectRequest,
)
from services.reconciliation_service import get_check_session_manager
from exceptions import AppError

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
# SESSION ROUTES
# ===================

@router.post("/sessions", response_model=CheckSessionResponse, status_code=201)
async def open_session(
    operator_id: Optional[str] = Query(None, description="Operator recorded on stock movements")
):
    """Open a new inventory check."""
    try:
        workflow = await get_check_session_manager().create(operator_id=operator_id)
        return workflow.to_response()

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}", response_model=CheckSessionResponse)
async def get_session(session_id: str):
    """
    Current state of a check.

    Raises:
        404: Session not found
    """
    try:
        return get_check_session_manager().get(session_id).to_response()

    except Exception as e:
        return handle_error(e)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str):
    """
    Discard a check.

    Raises:
        404: Session not found
    """
    try:
        get_check_session_manager().close(session_id)
        return None  # 204 No Content

    except Exception as e:
        return handle_error(e)


# ===================
# ACTION ROUTES
# ===================

@router.post("/sessions/{session_id}/query", response_model=CheckSessionResponse)
async def query(session_id: str, data: QueryRequest):
    """Search by name or SKU (top candidates only)."""
    try:
        workflow = get_check_session_manager().get(session_id)
        await workflow.query(data.term)
        return workflow.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/scan", response_model=CheckSessionResponse)
async def scan(session_id: str, data: ScanRequest):
    """
    Submit scanned label content.

    A SKU matching exactly one item moves straight to counting.
    """
    try:
        workflow = get_check_session_manager().get(session_id)
        await workflow.scan(data.content)
        return workflow.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/select", response_model=CheckSessionResponse)
async def select(session_id: str, data: SelectRequest):
    """
    Pick an item to count.

    Raises:
        404: Session or item not found
        409: Already counting an item
    """
    try:
        workflow = get_check_session_manager().get(session_id)
        await workflow.select(data.item_id)
        return workflow.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/count", response_model=CheckSessionResponse)
async def enter_count(session_id: str, data: CountRequest):
    """Record the physical count as typed."""
    try:
        workflow = get_check_session_manager().get(session_id)
        await workflow.enter_count(data.count)
        return workflow.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/submit", response_model=CheckSessionResponse)
async def submit(session_id: str):
    """
    Confirm the count.

    A failed stock update keeps the session counting with last_error set.

    Raises:
        409: No valid count entered, or an update is already in flight
    """
    try:
        workflow = get_check_session_manager().get(session_id)
        await workflow.submit()
        return workflow.to_response()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/cancel", response_model=CheckSessionResponse)
async def cancel(session_id: str):
    """Back to searching without changing stock."""
    try:
        workflow = get_check_session_manager().get(session_id)
        await workflow.cancel()
        return workflow.to_response()

    except Exception as e:
        return handle_error(e)
