"""
Identity payload schemas.

The payload is what a printed label carries: a JSON envelope tagged
"inventory", or, for older labels, just the bare SKU.
"""

from pydantic import ConfigDict, Field, field_validator
from typing import Optional, Literal, Union
from decimal import Decimal, InvalidOperation
from enum import Enum

from models.base import BaseSchema

PAYLOAD_TYPE = "inventory"


class PayloadSource(str, Enum):
    """Which decoding path produced an identity."""
    ENVELOPE = "envelope"
    LITERAL_SKU = "literal_sku"


class LabelItem(BaseSchema):
    """
    Item identity to encode onto a label.

    Price may arrive as text (as stored) or as a number.
    """

    sku: str = Field(..., min_length=1, max_length=50, description="Item SKU")
    name: str = Field(..., min_length=1, description="Item name")
    price: Decimal = Field(..., ge=0, description="Selling price")
    id: Optional[str] = Field(None, description="Item UUID, omitted from the payload when absent")

    @field_validator("price", mode="before")
    @classmethod
    def parse_price_text(cls, v: Union[str, float, int, Decimal]) -> Decimal:
        """Accept prices stored as text, e.g. "19.99"."""
        if isinstance(v, str):
            try:
                return Decimal(v.strip())
            except InvalidOperation:
                raise ValueError(f"Price is not a number: {v!r}")
        return v


class IdentityPayload(BaseSchema):
    """Envelope written onto labels."""

    type: Literal["inventory"] = PAYLOAD_TYPE
    sku: str
    name: str
    price: float
    id: Optional[str] = None
    timestamp: str = Field(..., description="ISO-8601 UTC creation time")


class DecodedIdentity(BaseSchema):
    """
    Identity recovered from scanned content.

    Only sku is guaranteed for literal SKUs; envelopes fill the rest.
    """

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True
    )

    sku: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
    id: Optional[str] = None
    source: PayloadSource = PayloadSource.ENVELOPE


# ===================
# API SCHEMAS
# ===================

class PayloadContent(BaseSchema):
    """Raw label content submitted for decoding or validation."""

    # Length checks must see the content exactly as scanned
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=False)

    content: str = Field(..., description="Scanned or typed label content")


class PayloadResponse(BaseSchema):
    """Encoded label content."""

    content: str
    length: int


class PayloadValidationResponse(BaseSchema):
    """Result of the capacity check."""

    valid: bool
    length: int
    max_length: int


class DecodeResponse(BaseSchema):
    """Decoded identity, or null when the content was blank."""

    identity: Optional[DecodedIdentity] = None


class ItemLabelResponse(BaseSchema):
    """Label content plus a rendered matrix for a stored item."""

    item_id: str
    sku: str
    content: str
    image: str = Field(..., description="PNG data URL")
