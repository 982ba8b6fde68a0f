"""
Text utilities for catalog names and slugs.

Used for dimension name matching and product slug generation.
"""

import math
import re
import unicodedata
from typing import Any, Optional


def strip_accents(text: str) -> str:
    """Remove accent marks: "Décor Rosé" → "Decor Rose"."""
    # NFD decomposition separates base chars from accents
    normalized = unicodedata.normalize('NFD', text)

    # Drop combining characters (Unicode category 'Mn')
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def generate_slug(name: Optional[str]) -> str:
    """
    Build a URL slug from a display name.

    Runs of ASCII letters and digits are lower-cased and joined by hyphens:
    - "Kitchen & Dining" → "kitchen-dining"
    - "  Café Crème 250ml " → "cafe-creme-250ml"

    Args:
        name: Display name (may be None or blank)

    Returns:
        Slug string, empty if the name has no alphanumeric characters
    """
    if not name:
        return ""

    ascii_name = strip_accents(str(name)).lower()
    return "-".join(re.findall(r"[a-z0-9]+", ascii_name))


def clean_name(value: Any) -> Optional[str]:
    """
    Trim a raw cell value into a display name.

    Returns None for blank cells. Numbers are rendered without a
    trailing ".0" so a size of 42 reads "42", not "42.0".
    """
    if is_blank(value):
        return None

    if isinstance(value, float) and value.is_integer():
        value = int(value)

    name = str(value).strip()
    return name or None


def name_key(value: Any) -> Optional[str]:
    """
    Lookup key for a dimension name: trimmed and case-folded.

    "  Home Decor " and "HOME DECOR" share the key "home decor".
    """
    name = clean_name(value)
    if name is None:
        return None
    return name.casefold()


def is_blank(value: Any) -> bool:
    """
    True for cells that carry no data.

    None, NaN and whitespace-only strings are blank. Zero and False are values.
    """
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple, set, dict)) and not value:
        return True
    return False
