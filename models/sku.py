"""
SKU schemas.

Format: <prefix><TYPE3>-<COLOR3>-<SIZE2>-<NNN>
"""

from pydantic import Field, field_validator
from typing import Optional

from models.base import BaseSchema


class SkuComponents(BaseSchema):
    """
    Attributes a SKU is built from.

    All fields optional; missing values encode as filler characters.
    """

    type: str = Field(default="", description="Item type, e.g. Shirt", examples=["Shirt"])
    color: str = Field(default="", description="Item color", examples=["Black"])
    size: str = Field(default="", description="Item size", examples=["XL"])
    prefix: str = Field(default="", max_length=20, description="Optional leading prefix")

    @field_validator("type", "color", "size", "prefix", mode="before")
    @classmethod
    def none_to_empty(cls, v: Optional[str]) -> str:
        """Missing attributes are treated as empty strings."""
        return "" if v is None else v


class ParsedSku(BaseSchema):
    """
    Components recovered from a SKU string.

    All fields are None when the string is not a structured SKU.
    Values are the fixed-width codes, not the original attributes.
    """

    type: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    suffix: Optional[str] = None

    @property
    def parsed(self) -> bool:
        """True when the SKU had the expected segments."""
        return self.suffix is not None


class SkuGenerateResponse(BaseSchema):
    """Generated SKU."""

    sku: str
    components: SkuComponents
    checked_unique: bool = Field(..., description="Whether the store was consulted for collisions")


class SkuParseResponse(BaseSchema):
    """Parsed SKU with a flag for opaque identifiers."""

    sku: str
    parsed: bool
    components: ParsedSku
