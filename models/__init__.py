"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.product import (
    StockStatus,
    Specification,
    CandidateProduct,
    ProductResponse,
    ProductListResponse,
)
from models.dimension import (
    DimensionKind,
    DimensionEntity,
    DimensionCreate,
    DimensionRef,
)
from models.catalog_import import (
    ImportFormat,
    RejectionReason,
    OutcomeStatus,
    NormalizedRow,
    RowOutcome,
    BatchReport,
    CatalogRowsRequest,
    CatalogSaveRequest,
    CatalogConfirmRequest,
    InvalidRow,
    CatalogPreviewResponse,
    SaveResult,
    CatalogSaveResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Product
    "StockStatus",
    "Specification",
    "CandidateProduct",
    "ProductResponse",
    "ProductListResponse",

    # Dimension
    "DimensionKind",
    "DimensionEntity",
    "DimensionCreate",
    "DimensionRef",

    # Catalog import
    "ImportFormat",
    "RejectionReason",
    "OutcomeStatus",
    "NormalizedRow",
    "RowOutcome",
    "BatchReport",
    "CatalogRowsRequest",
    "CatalogSaveRequest",
    "CatalogConfirmRequest",
    "InvalidRow",
    "CatalogPreviewResponse",
    "SaveResult",
    "CatalogSaveResponse",
]
