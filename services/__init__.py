"""
Business logic services.

Each service handles one domain area.
"""

from services.inventory_store_service import InventoryStoreService, get_inventory_store_service
from services.sku_service import SkuService, get_sku_service, generate_sku, parse_sku
from services.identity_payload_service import (
    encode_payload,
    decode_payload,
    validate_payload,
    ensure_valid_payload,
    extract_search_term,
)
from services.matrix_renderer_service import (
    build_matrix,
    render_image,
    render_png,
    render_data_url,
)
from services.reconciliation_machine import (
    CheckSession,
    MutationIntent,
    transition,
    derive_intent,
    parse_count,
)
from services.reconciliation_service import (
    ReconciliationWorkflow,
    CheckSessionManager,
    get_check_session_manager,
)

__all__ = [
    "InventoryStoreService",
    "get_inventory_store_service",
    "SkuService",
    "get_sku_service",
    "generate_sku",
    "parse_sku",
    "encode_payload",
    "decode_payload",
    "validate_payload",
    "ensure_valid_payload",
    "extract_search_term",
    "build_matrix",
    "render_image",
    "render_png",
    "render_data_url",
    "CheckSession",
    "MutationIntent",
    "transition",
    "derive_intent",
    "parse_count",
    "ReconciliationWorkflow",
    "CheckSessionManager",
    "get_check_session_manager",
]
