"""
Text utilities for SKU codes and item search.
"""

import re
import unicodedata
from typing import Optional

_NON_CODE_CHARS = re.compile(r'[^A-Z0-9]')


def to_code_chars(value: Optional[str]) -> str:
    """
    Reduce a free-text attribute to the SKU alphabet (A-Z, 0-9).

    Accents are removed, everything else outside the alphabet is dropped:
    - "Beige" → "BEIGE"
    - "Café" → "CAFE"
    - "T-Shirt" → "TSHIRT"
    - None → ""

    Args:
        value: Attribute text (may be None, mixed case, accented)

    Returns:
        Uppercase ASCII alphanumeric string
    """
    if not value:
        return ""

    # NFD separates base chars from combining accents
    normalized = unicodedata.normalize('NFD', value)
    stripped = ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )
    return _NON_CODE_CHARS.sub('', stripped.upper())


def fold(text: Optional[str]) -> str:
    """Lowercase for case-insensitive comparison; None becomes ""."""
    return (text or "").lower()


def contains_ci(haystack: Optional[str], needle: Optional[str]) -> bool:
    """Case-insensitive substring test. An empty needle matches everything."""
    return fold(needle) in fold(haystack)
