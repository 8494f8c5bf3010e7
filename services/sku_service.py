"""
SKU generation and parsing.

Format: <prefix><TYPE3>-<COLOR3>-<SIZE2>-<NNN>

    generate_sku(SkuComponents(type="Shirt", color="Black", size="XL"))
    → "SHI-BLA-XL-052"

Each segment is the attribute reduced to A-Z/0-9, truncated to its width and
right-padded with "X". The suffix is a random draw in 001-999 and is not
unique on its own; SkuService.generate_unique checks the store.

Parsing is lossy: truncated attributes cannot be recovered, and a code that
really ends in "X" (e.g. type "BOX") loses that letter with the padding.
"""

import random
from typing import Optional
import structlog

from config import settings
from models.sku import SkuComponents, ParsedSku
from services.inventory_store_service import get_inventory_store_service
from utils.text_utils import to_code_chars
from exceptions import SKUGenerationError

logger = structlog.get_logger(__name__)

SEGMENT_DELIMITER = "-"
FILLER = "X"
TYPE_WIDTH = 3
COLOR_WIDTH = 3
SIZE_WIDTH = 2
SUFFIX_MIN = 1
SUFFIX_MAX = 999
SUFFIX_WIDTH = 3

# Production random source; tests pass their own seeded Random
_rng = random.Random()


def _segment(value: Optional[str], width: int) -> str:
    return to_code_chars(value)[:width].ljust(width, FILLER)


def generate_sku(
    components: SkuComponents,
    rng: Optional[random.Random] = None
) -> str:
    """
    Build a SKU from item attributes.

    Never fails: missing attributes become filler.

    Args:
        components: type / color / size / prefix
        rng: Random source for the suffix (module default if omitted)

    Returns:
        SKU string
    """
    rng = rng or _rng
    suffix = rng.randint(SUFFIX_MIN, SUFFIX_MAX)

    sku = SEGMENT_DELIMITER.join([
        components.prefix + _segment(components.type, TYPE_WIDTH),
        _segment(components.color, COLOR_WIDTH),
        _segment(components.size, SIZE_WIDTH),
        str(suffix).zfill(SUFFIX_WIDTH),
    ])

    logger.debug("sku_drawn", sku=sku)
    return sku


def parse_sku(sku: Optional[str], prefix: str = "") -> ParsedSku:
    """
    Split a SKU back into its codes.

    Anything with fewer than four segments is an opaque identifier and
    yields an empty ParsedSku. With more than four (a prefix containing the
    delimiter), the last four are used.

    Args:
        sku: SKU string
        prefix: Known prefix to remove from the type segment

    Returns:
        ParsedSku (all None when unparseable)
    """
    parts = (sku or "").split(SEGMENT_DELIMITER)

    if len(parts) < 4:
        return ParsedSku()

    type_code, color_code, size_code, suffix = parts[-4:]

    if prefix and type_code.startswith(prefix):
        type_code = type_code[len(prefix):]

    return ParsedSku(
        type=type_code.rstrip(FILLER),
        color=color_code.rstrip(FILLER),
        size=size_code.rstrip(FILLER),
        suffix=suffix,
    )


class SkuService:
    """
    SKU generation checked against the inventory store.

    The random suffix collides now and then; we redraw until the store has no
    item with that SKU or the attempt budget runs out. The store's unique
    constraint still has the final say at insert time.
    """

    def __init__(self, store=None, rng: Optional[random.Random] = None):
        self.store = store or get_inventory_store_service()
        self.rng = rng or _rng
        self.max_attempts = settings.sku_max_generation_attempts

    def generate_unique(self, components: SkuComponents) -> str:
        """
        Generate a SKU not yet present in the store.

        Args:
            components: type / color / size / prefix

        Returns:
            SKU string

        Raises:
            SKUGenerationError: If every attempt collided
        """
        sku = ""
        for attempt in range(1, self.max_attempts + 1):
            sku = generate_sku(components, self.rng)

            if not self.store.sku_exists(sku):
                logger.info("sku_generated", sku=sku, attempts=attempt)
                return sku

            logger.warning("sku_collision", sku=sku, attempt=attempt)

        logger.error(
            "sku_generation_exhausted",
            attempts=self.max_attempts,
            last_sku=sku
        )
        raise SKUGenerationError(self.max_attempts, sku)


# Singleton instance for convenience
_sku_service: Optional[SkuService] = None


def get_sku_service() -> SkuService:
    """Get or create SkuService instance."""
    global _sku_service
    if _sku_service is None:
        _sku_service = SkuService()
    return _sku_service
