"""
SKU API routes.

Generate structured SKUs from item attributes and parse them back.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.sku import (
    SkuComponents,
    SkuGenerateResponse,
    SkuParseResponse,
)
from services.sku_service import get_sku_service, generate_sku, parse_sku
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
# ROUTES
# ===================

@router.post("/generate", response_model=SkuGenerateResponse)
async def generate(
    data: SkuComponents,
    unique: bool = Query(True, description="Redraw until the SKU is unused in the store")
):
    """
    Generate a SKU such as SHI-BLA-XL-052.

    Raises:
        409: No unused SKU found within the retry budget
    """
    try:
        if unique:
            sku = get_sku_service().generate_unique(data)
        else:
            sku = generate_sku(data)

        return SkuGenerateResponse(sku=sku, components=data, checked_unique=unique)

    except Exception as e:
        return handle_error(e)


@router.get("/parse/{sku}", response_model=SkuParseResponse)
async def parse(
    sku: str,
    prefix: str = Query("", max_length=20, description="Known prefix to strip")
):
    """
    Parse a SKU into its codes.

    Unstructured identifiers return parsed=false instead of an error.
    """
    components = parse_sku(sku, prefix=prefix)
    return SkuParseResponse(sku=sku, parsed=components.parsed, components=components)
