"""
Identity payload encoding and decoding.

Labels carry a compact JSON envelope:

    {"type":"inventory","sku":"SHI-BLA-XL-052","name":"Black Tee","price":19.99,
     "id":"…","timestamp":"2025-12-01T10:00:00.000Z"}

Older labels (and hand-typed input) carry only the SKU. Decoding accepts both
and never raises: blank input gives None, anything else gives an identity.
"""

import json
from datetime import datetime, timezone
from typing import Callable, Optional
import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from models.identity import (
    PAYLOAD_TYPE,
    DecodedIdentity,
    IdentityPayload,
    LabelItem,
    PayloadSource,
)
from exceptions import PayloadEmptyError, PayloadTooLongError

logger = structlog.get_logger(__name__)


def _iso_timestamp(moment: datetime) -> str:
    """
    UTC timestamp with millisecond precision and a Z suffix.

    Naive datetimes are taken as UTC; aware ones are converted.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def encode_payload(item: LabelItem, now: Optional[datetime] = None) -> str:
    """
    Serialize an item identity as label content.

    Args:
        item: sku / name / price / optional id
        now: Creation time; naive values are taken as UTC (defaults to current time)

    Returns:
        Compact JSON text; "id" is omitted when the item has none
    """
    payload = IdentityPayload(
        sku=item.sku,
        name=item.name,
        price=float(item.price),
        id=item.id or None,
        timestamp=_iso_timestamp(now or datetime.utcnow()),
    )

    content = json.dumps(
        payload.model_dump(exclude_none=True),
        separators=(",", ":"),
        ensure_ascii=False,
    )

    logger.debug("payload_encoded", sku=item.sku, length=len(content))
    return content


# ===================
# DECODING
# ===================

DecodeStrategy = Callable[[str], Optional[DecodedIdentity]]


def _decode_envelope(content: str) -> Optional[DecodedIdentity]:
    """JSON object tagged type == "inventory"."""
    try:
        data = json.loads(content)
    except ValueError:
        return None

    if not isinstance(data, dict) or data.get("type") != PAYLOAD_TYPE:
        return None

    try:
        return DecodedIdentity(
            sku=data.get("sku"),
            name=data.get("name"),
            price=data.get("price"),
            id=data.get("id"),
            source=PayloadSource.ENVELOPE,
        )
    except PydanticValidationError:
        return None


def _decode_literal_sku(content: str) -> Optional[DecodedIdentity]:
    """Anything non-blank is taken as the SKU itself."""
    sku = content.strip()
    if not sku:
        return None
    return DecodedIdentity(sku=sku, source=PayloadSource.LITERAL_SKU)


# Tried in order; first non-None result wins
DECODE_STRATEGIES: tuple[DecodeStrategy, ...] = (
    _decode_envelope,
    _decode_literal_sku,
)


def decode_payload(content: Optional[str]) -> Optional[DecodedIdentity]:
    """
    Recover an identity from scanned content.

    Args:
        content: Raw label content

    Returns:
        DecodedIdentity, or None for blank/non-text input
    """
    if not isinstance(content, str) or not content.strip():
        return None

    for strategy in DECODE_STRATEGIES:
        try:
            decoded = strategy(content)
        except Exception as e:
            # Deeply nested JSON raises RecursionError; decoding must not raise
            logger.debug(
                "payload_strategy_failed",
                strategy=strategy.__name__,
                error=str(e)
            )
            continue

        if decoded is not None:
            logger.debug("payload_decoded", source=decoded.source.value, sku=decoded.sku)
            return decoded

    return None


# ===================
# VALIDATION
# ===================

def validate_payload(content: Optional[str]) -> bool:
    """
    Capacity check: non-empty and within the label size limit.

    No structural checks; any text that fits is acceptable.
    """
    if not content:
        return False
    return len(content) <= settings.payload_max_length


def ensure_valid_payload(content: Optional[str]) -> str:
    """
    Same as validate_payload, raising for the operator-facing error.

    Raises:
        PayloadEmptyError: If content is empty
        PayloadTooLongError: If content exceeds the limit
    """
    if not content:
        raise PayloadEmptyError()
    if len(content) > settings.payload_max_length:
        raise PayloadTooLongError(len(content), settings.payload_max_length)
    return content


def extract_search_term(content: Optional[str]) -> str:
    """
    Pick the best search text out of typed or scanned input.

    JSON objects contribute their sku, else id, else name; anything else is
    used as typed (trimmed).
    """
    text = (content or "").strip()

    if text.startswith("{") and text.endswith("}"):
        try:
            data = json.loads(text)
        except (ValueError, RecursionError):
            return text
        if isinstance(data, dict):
            for key in ("sku", "id", "name"):
                value = data.get(key)
                if value:
                    return str(value).strip()

    return text
