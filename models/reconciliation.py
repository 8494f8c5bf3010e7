"""
Inventory check (stock reconciliation) schemas.

Session state itself lives in services.reconciliation_machine as frozen
dataclasses; these schemas serialize it for the API.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema
from models.inventory import InventoryItem, ReasonCode


class CheckMode(str, Enum):
    """Where the operator is in the count cycle."""
    SEARCHING = "searching"
    VERIFYING = "verifying"


class MutationKind(str, Enum):
    """Stock change derived from a confirmed count."""
    NO_OP = "no_op"
    ADD_STOCK = "add_stock"
    DEDUCT_STOCK = "deduct_stock"


class NotificationLevel(str, Enum):
    """Severity of an operator notification."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


# ===================
# REQUESTS
# ===================

class QueryRequest(BaseSchema):
    """Free-text search by name or SKU."""

    term: str = Field(default="", max_length=200, description="Search text")


class ScanRequest(BaseSchema):
    """Content decoded by the camera/scanner."""

    content: str = Field(..., description="Raw scanned label content")


class SelectRequest(BaseSchema):
    """Pick a candidate to count."""

    item_id: str = Field(..., min_length=1, description="Inventory item UUID")


class CountRequest(BaseSchema):
    """Operator-entered physical count, kept as typed."""

    count: str = Field(default="", max_length=20, description="Physical count")


# ===================
# RESPONSES
# ===================

class MutationIntentResponse(BaseSchema):
    """Stock mutation requested by the check."""

    kind: MutationKind
    quantity: int = Field(..., ge=0)
    reason_code: ReasonCode
    note: str


class NotificationResponse(BaseSchema):
    """Operator-facing message."""

    level: NotificationLevel
    title: str
    message: str


class CheckSessionResponse(BaseSchema):
    """Current state of an inventory check session."""

    session_id: str
    mode: CheckMode
    search_term: str
    candidates: list[InventoryItem]
    selected_item: Optional[InventoryItem] = None
    entered_count: str
    can_submit: bool
    dispatching: bool
    pending_intent: Optional[MutationIntentResponse] = None
    last_error: Optional[str] = None
    notifications: list[NotificationResponse] = Field(default_factory=list)
