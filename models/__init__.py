"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.inventory import (
    ReasonCode,
    TransactionType,
    InventoryItem,
    StockMutationRequest,
    InventoryTransactionResponse,
    InventoryListResponse,
    InventoryTransactionListResponse,
)
from models.sku import (
    SkuComponents,
    ParsedSku,
    SkuGenerateResponse,
    SkuParseResponse,
)
from models.identity import (
    PAYLOAD_TYPE,
    PayloadSource,
    LabelItem,
    IdentityPayload,
    DecodedIdentity,
    PayloadContent,
    PayloadResponse,
    PayloadValidationResponse,
    DecodeResponse,
    ItemLabelResponse,
)
from models.reconciliation import (
    CheckMode,
    MutationKind,
    NotificationLevel,
    QueryRequest,
    ScanRequest,
    SelectRequest,
    CountRequest,
    MutationIntentResponse,
    NotificationResponse,
    CheckSessionResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Inventory
    "ReasonCode",
    "TransactionType",
    "InventoryItem",
    "StockMutationRequest",
    "InventoryTransactionResponse",
    "InventoryListResponse",
    "InventoryTransactionListResponse",

    # SKU
    "SkuComponents",
    "ParsedSku",
    "SkuGenerateResponse",
    "SkuParseResponse",

    # Identity payload
    "PAYLOAD_TYPE",
    "PayloadSource",
    "LabelItem",
    "IdentityPayload",
    "DecodedIdentity",
    "PayloadContent",
    "PayloadResponse",
    "PayloadValidationResponse",
    "DecodeResponse",
    "ItemLabelResponse",

    # Inventory check
    "CheckMode",
    "MutationKind",
    "NotificationLevel",
    "QueryRequest",
    "ScanRequest",
    "SelectRequest",
    "CountRequest",
    "MutationIntentResponse",
    "NotificationResponse",
    "CheckSessionResponse",
]
