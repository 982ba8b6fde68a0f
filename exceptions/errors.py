"""
Custom exception classes for the application.

Row-level import problems are never raised; they are recorded on the
row's outcome. Everything here aborts the current request.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


# ===================
# CATALOG IMPORT ERRORS
# ===================

class ImportFileParseError(ValidationError):
    """Uploaded catalog file could not be read."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="IMPORT_FILE_PARSE_ERROR",
            message=message,
            details=details
        )


class EmptyImportError(ValidationError):
    """Import request carried no rows."""

    def __init__(self):
        super().__init__(
            code="IMPORT_EMPTY",
            message="No rows to import"
        )


class ImportTooLargeError(ValidationError):
    """Import request exceeded the configured row limit."""

    def __init__(self, row_count: int, max_rows: int):
        super().__init__(
            code="IMPORT_TOO_LARGE",
            message=f"Import has {row_count} rows, the limit is {max_rows}",
            details={"row_count": row_count, "max_rows": max_rows}
        )


class PreviewNotFoundError(NotFoundError):
    """Import preview expired or never existed."""

    def __init__(self, preview_id: str):
        super().__init__(
            resource="Import preview",
            identifier=preview_id,
            code="IMPORT_PREVIEW_NOT_FOUND"
        )


class CatalogImportError(AppError):
    """
    A store the import depends on is unavailable (503).

    Aborts the whole batch; no partial report is produced.
    """

    def __init__(
        self,
        message: str,
        code: str = "CATALOG_IMPORT_FAILED",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=503,
            details=details
        )


class DimensionStoreError(CatalogImportError):
    """Dimension entities could not be read or created."""

    def __init__(self, kind: str, message: str):
        super().__init__(
            code="DIMENSION_STORE_ERROR",
            message=f"Could not resolve {kind} entries: {message}",
            details={"kind": kind}
        )


class DuplicateCheckError(CatalogImportError):
    """Existing products could not be queried for duplicates."""

    def __init__(self, message: str):
        super().__init__(
            code="DUPLICATE_CHECK_ERROR",
            message=f"Could not check existing products: {message}"
        )
