"""
Label API routes.

Encode item identities as label content, decode scanned content, and render
the label matrix as PNG for display, print or download.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response
from typing import Optional
import structlog

from config import settings
from models.identity import (
    LabelItem,
    PayloadContent,
    PayloadResponse,
    PayloadValidationResponse,
    DecodeResponse,
    ItemLabelResponse,
)
from services.identity_payload_service import (
    encode_payload,
    decode_payload,
    validate_payload,
    ensure_valid_payload,
)
from services.matrix_renderer_service import render_png, render_data_url
from services.inventory_store_service import get_inventory_store_service
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
# PAYLOAD ROUTES
# ===================

@router.post("/payload", response_model=PayloadResponse)
async def encode(data: LabelItem):
    """
    Encode an item identity as label content.

    Raises:
        422: Content exceeds label capacity
    """
    try:
        content = ensure_valid_payload(encode_payload(data))
        return PayloadResponse(content=content, length=len(content))

    except Exception as e:
        return handle_error(e)


@router.post("/decode", response_model=DecodeResponse)
async def decode(data: PayloadContent):
    """
    Decode scanned content.

    Never fails: unknown content is returned as a literal SKU and blank
    content as a null identity.
    """
    return DecodeResponse(identity=decode_payload(data.content))


@router.post("/validate", response_model=PayloadValidationResponse)
async def validate(data: PayloadContent):
    """Check content fits on a label."""
    return PayloadValidationResponse(
        valid=validate_payload(data.content),
        length=len(data.content),
        max_length=settings.payload_max_length
    )


# ===================
# RENDER ROUTES
# ===================

@router.get("/render")
async def render(
    content: str = Query(..., description="Label content (payload JSON or SKU)"),
    size: Optional[int] = Query(None, ge=21, le=4096, description="Image size in pixels"),
    margin: Optional[int] = Query(None, ge=0, le=64, description="Quiet margin in pixels"),
):
    """
    Render label content as a PNG matrix.

    Raises:
        422: Empty or oversized content, or size too small
        503: Drawing surface unavailable (retry later)
    """
    try:
        ensure_valid_payload(content)
        png = render_png(content, size=size, margin=margin)

        logger.info("label_rendered", length=len(content), size=size)

        return Response(content=png, media_type="image/png")

    except Exception as e:
        return handle_error(e)


@router.get("/items/{item_id}", response_model=ItemLabelResponse)
async def item_label(
    item_id: str,
    size: Optional[int] = Query(None, ge=21, le=4096, description="Image size in pixels"),
):
    """
    Label content and rendered matrix for a stored item.

    Raises:
        404: Item not found
        422: Content exceeds label capacity
    """
    try:
        item = get_inventory_store_service().get_by_id(item_id)

        content = ensure_valid_payload(encode_payload(LabelItem(
            sku=item.sku,
            name=item.name,
            price=item.price,
            id=item.id,
        )))

        return ItemLabelResponse(
            item_id=item.id,
            sku=item.sku,
            content=content,
            image=render_data_url(content, size=size)
        )

    except Exception as e:
        return handle_error(e)
