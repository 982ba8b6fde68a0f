"""
Bulk catalog import schemas.

Internal pipeline types (NormalizedRow, RowOutcome, BatchReport) plus the
request/response models of the bulk import endpoints.
"""

from dataclasses import dataclass, field
from pydantic import BaseModel, Field
from typing import Any, Optional
from enum import Enum

from models.base import BaseSchema
from models.dimension import DimensionRef
from models.product import CandidateProduct, Specification


class ImportFormat(str, Enum):
    """Source format; selects the validation profile."""
    EXCEL = "excel"
    CSV = "csv"


class RejectionReason(str, Enum):
    """Why a row was not imported."""
    EMPTY_ROW = "EMPTY_ROW"
    DUPLICATE_NAME_OR_SLUG = "DUPLICATE_NAME_OR_SLUG"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


REJECTION_MESSAGES = {
    RejectionReason.EMPTY_ROW: "Empty row",
    RejectionReason.DUPLICATE_NAME_OR_SLUG: "Duplicate product name or slug",
    RejectionReason.MISSING_REQUIRED_FIELD: "Missing required fields",
    RejectionReason.PERSISTENCE_ERROR: "Could not save product",
}


class OutcomeStatus(str, Enum):
    """Row outcome. VALID/REJECTED in preview, SAVED/FAILED after save."""
    VALID = "valid"
    REJECTED = "rejected"
    SAVED = "saved"
    FAILED = "failed"


# ===================
# PIPELINE TYPES
# ===================

@dataclass
class NormalizedRow:
    """Row keyed by canonical field names."""
    fields: dict[str, Any] = field(default_factory=dict)
    specifications: list[Specification] = field(default_factory=list)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for reports and the preview cache."""
        data = dict(self.fields)
        if self.specifications:
            data["specifications"] = [s.model_dump() for s in self.specifications]
        return data


class RowOutcome(BaseModel):
    """Result for one input row."""
    index: int = Field(..., description="0-based position in the input")
    row: int = Field(..., description="User-facing row number")
    status: OutcomeStatus
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    product: Optional[CandidateProduct] = None
    product_id: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status in (OutcomeStatus.VALID, OutcomeStatus.SAVED)


class BatchReport(BaseModel):
    """One outcome per input row, in input order."""
    total: int
    outcomes: list[RowOutcome] = Field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return sum(1 for o in self.outcomes if o.accepted)

    @property
    def invalid_count(self) -> int:
        return len(self.outcomes) - self.valid_count


# ===================
# REQUESTS
# ===================

class CatalogRowsRequest(BaseModel):
    """Structured rows submitted by the admin client."""
    rows: list[dict[str, Any]] = Field(..., description="Parsed rows keyed by column header")


class CatalogSaveRequest(CatalogRowsRequest):
    """Rows to import directly, without a cached preview."""
    format: ImportFormat = Field(ImportFormat.CSV, description="Selects the validation profile")


class CatalogConfirmRequest(BaseModel):
    """Confirm a cached preview, optionally dropping rows."""
    excluded_rows: list[int] = Field(
        default_factory=list,
        description="User-facing row numbers to leave out"
    )


# ===================
# RESPONSES
# ===================

class InvalidRow(BaseSchema):
    """A rejected or failed row."""
    row: int
    reason: RejectionReason
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


class CatalogPreviewResponse(BaseSchema):
    """Dry-run result; nothing has been written."""
    preview_id: Optional[str] = None
    preview_products: list[dict[str, Any]]
    invalid_rows: list[InvalidRow]
    proposed_dimensions: dict[str, list[DimensionRef]] = Field(
        default_factory=dict,
        description="Entities that saving this batch would create, by kind"
    )
    total: int
    valid: int
    invalid: int
    expires_in_minutes: Optional[int] = None


class SaveResult(BaseSchema):
    """Per-row result of a bulk save."""
    row: int
    index: int
    status: OutcomeStatus
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None
    product: Optional[dict[str, Any]] = None


class CatalogSaveResponse(BaseSchema):
    """Result of a bulk save."""
    message: str
    results: list[SaveResult]
    failures: list[InvalidRow]
    total: int
    success: int
    failed: int
