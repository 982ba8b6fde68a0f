"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    DatabaseError,

    # Product-specific
    ProductNotFoundError,

    # Catalog import
    ImportFileParseError,
    EmptyImportError,
    ImportTooLargeError,
    PreviewNotFoundError,
    CatalogImportError,
    DimensionStoreError,
    DuplicateCheckError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "DatabaseError",

    # Product
    "ProductNotFoundError",

    # Catalog import
    "ImportFileParseError",
    "EmptyImportError",
    "ImportTooLargeError",
    "PreviewNotFoundError",
    "CatalogImportError",
    "DimensionStoreError",
    "DuplicateCheckError",
]
