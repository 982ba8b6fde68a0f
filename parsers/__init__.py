"""
Catalog file parsing and row normalization.
"""

from parsers.catalog_file_parser import parse_catalog_file
from parsers.catalog_row_normalizer import (
    normalize_row,
    normalize_rows,
    is_empty_row,
)

__all__ = [
    "parse_catalog_file",
    "normalize_row",
    "normalize_rows",
    "is_empty_row",
]
