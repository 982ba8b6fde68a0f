"""
Row validator and mapper.

Turns a normalized import row into a CandidateProduct or a rejection.
Checks run in a fixed order and the first failure wins:

1. empty row
2. required fields (per validation profile)
3. duplicate name/slug
4. build the candidate: coercion, defaults, enum canonicalization,
   dimension names replaced by resolved ids

Nothing past step 3 rejects a row. Bad numbers, booleans and stock
statuses fall back to their defaults.
"""

from dataclasses import dataclass
import re
from typing import Any, Mapping, Optional
import structlog

from config import settings
from models.catalog_import import (
    ImportFormat,
    NormalizedRow,
    OutcomeStatus,
    RejectionReason,
    RowOutcome,
    REJECTION_MESSAGES,
)
from models.dimension import DimensionKind
from models.product import CandidateProduct, StockStatus
from parsers.catalog_row_normalizer import is_empty_row
from services.dimension_service import DimensionMap
from utils.text_utils import clean_name, generate_slug, is_blank

logger = structlog.get_logger(__name__)


# ===================
# VALIDATION PROFILES
# ===================

@dataclass(frozen=True)
class ValidationProfile:
    """
    Required fields and category layout of one import format.

    dimension_fields maps each kind to the canonical row field naming it;
    candidate_fields maps it to the CandidateProduct field receiving its id.
    """
    name: str
    required_fields: tuple[str, ...]
    dimension_fields: Mapping[DimensionKind, str]
    candidate_fields: Mapping[DimensionKind, str]


_SHARED_DIMENSION_FIELDS = {
    DimensionKind.BRAND: "brand",
    DimensionKind.TAX: "tax",
    DimensionKind.UNIT: "unit",
    DimensionKind.COLOR: "color",
    DimensionKind.WARRANTY: "warranty",
    DimensionKind.SIZE: "size",
    DimensionKind.VOLUME: "volume",
}

# Spreadsheet upload: "category" is the top-level category
EXCEL_PROFILE = ValidationProfile(
    name="excel",
    required_fields=("name",),
    dimension_fields={
        DimensionKind.CATEGORY: "category",
        DimensionKind.SUB_CATEGORY: "sub_category",
        **_SHARED_DIMENSION_FIELDS,
    },
    candidate_fields={
        DimensionKind.CATEGORY: "category",
        DimensionKind.SUB_CATEGORY: "sub_category",
        **_SHARED_DIMENSION_FIELDS,
    },
)

# Structured payload: "parent_category" is the category, "category" the subcategory
CSV_PROFILE = ValidationProfile(
    name="csv",
    required_fields=("name", "parent_category"),
    dimension_fields={
        DimensionKind.CATEGORY: "parent_category",
        DimensionKind.SUB_CATEGORY: "category",
        **_SHARED_DIMENSION_FIELDS,
    },
    candidate_fields={
        DimensionKind.CATEGORY: "parent_category",
        DimensionKind.SUB_CATEGORY: "category",
        **_SHARED_DIMENSION_FIELDS,
    },
)

PROFILES = {
    ImportFormat.EXCEL: EXCEL_PROFILE,
    ImportFormat.CSV: CSV_PROFILE,
}


def get_profile(fmt: ImportFormat) -> ValidationProfile:
    """Validation profile for an import format."""
    return PROFILES[ImportFormat(fmt)]


# ===================
# COERCION HELPERS
# ===================

_NUMBER_PREFIX = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)")

_TRUE_STRINGS = {"true", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "no", "n", "0"}


def parse_number(value: Any, default: float = 0) -> float:
    """
    Lenient number parse.

    Reads the leading number of a string ("9.99 USD" → 9.99). Blank,
    unparseable, zero and negative values return the default.
    """
    if is_blank(value) or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX.match(str(value).strip().replace(",", ""))
        if not match:
            return default
        number = float(match.group(0))

    if number != number or number <= 0:  # NaN, zero, negative
        return default
    return number


def parse_int(value: Any, default: int = 0) -> int:
    """Like parse_number, truncated to an int."""
    number = parse_number(value, default=0)
    if number < 1:
        return default
    return int(number)


def parse_bool(value: Any, default: bool) -> bool:
    """Accept booleans, 1/0 and true/false/yes/no strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return default


def parse_list(value: Any) -> list[str]:
    """Comma-separated cell (or JSON list) to a trimmed list, blanks dropped."""
    if is_blank(value):
        return []
    items = value if isinstance(value, (list, tuple)) else str(value).split(",")
    return [text for text in (clean_name(item) for item in items) if text]


def parse_text(value: Any) -> str:
    return clean_name(value) or ""


_STOCK_STATUS_KEYS = {
    re.sub(r"[\s_-]+", "", status.value).lower(): status
    for status in StockStatus
}


def canonical_stock_status(value: Any) -> StockStatus:
    """
    Canonicalize a stock status.

    Exact value first, then a case- and spacing-insensitive match
    ("out of stock", "pre-order"). Anything else becomes Available Product.
    """
    text = clean_name(value)
    if text is None:
        return StockStatus.AVAILABLE

    for status in StockStatus:
        if text == status.value:
            return status

    status = _STOCK_STATUS_KEYS.get(re.sub(r"[\s_-]+", "", text).lower())
    if status is not None:
        return status

    logger.info("invalid_stock_status_corrected", provided=text, used=StockStatus.AVAILABLE.value)
    return StockStatus.AVAILABLE


# ===================
# MAPPER
# ===================

class RowMapperService:
    """Validates normalized rows and maps them to candidate products."""

    def __init__(
        self,
        header_offset: Optional[int] = None,
        default_max_purchase_qty: Optional[int] = None,
        default_low_stock_warning: Optional[int] = None
    ):
        self.header_offset = (
            settings.import_header_offset if header_offset is None else header_offset
        )
        self.default_max_purchase_qty = (
            default_max_purchase_qty or settings.import_default_max_purchase_qty
        )
        self.default_low_stock_warning = (
            default_low_stock_warning or settings.import_default_low_stock_warning
        )

    def row_number(self, index: int) -> int:
        """User-facing row number for a 0-based index."""
        return index + self.header_offset

    def map_row(
        self,
        index: int,
        row: NormalizedRow,
        dimension_maps: Mapping[DimensionKind, DimensionMap],
        duplicates: set[int],
        profile: ValidationProfile,
        raw: Optional[Mapping[str, Any]] = None
    ) -> RowOutcome:
        """
        Validate and map one row.

        Args:
            index: 0-based position in the batch
            row: Normalized row
            dimension_maps: Resolved dimensions for the batch
            duplicates: Indices flagged by the duplicate check
            profile: Validation profile of the import format
            raw: Original row, echoed in rejections

        Returns:
            RowOutcome, VALID with a product or REJECTED with a reason
        """
        data = dict(raw) if raw is not None else row.to_dict()

        if is_empty_row(row):
            return self._reject(index, RejectionReason.EMPTY_ROW, data)

        missing = [f for f in profile.required_fields if is_blank(row.get(f))]
        if missing:
            return self._reject(
                index,
                RejectionReason.MISSING_REQUIRED_FIELD,
                data,
                message=f"Missing required fields ({', '.join(missing)})"
            )

        if index in duplicates:
            return self._reject(index, RejectionReason.DUPLICATE_NAME_OR_SLUG, data)

        return RowOutcome(
            index=index,
            row=self.row_number(index),
            status=OutcomeStatus.VALID,
            data=data,
            product=self.build_candidate(row, dimension_maps, profile)
        )

    def build_candidate(
        self,
        row: NormalizedRow,
        dimension_maps: Mapping[DimensionKind, DimensionMap],
        profile: ValidationProfile
    ) -> CandidateProduct:
        """Coerce and default every field of a row that passed validation."""
        name = parse_text(row.get("name"))

        dimension_ids = {}
        for kind, field_name in profile.dimension_fields.items():
            dimension_map = dimension_maps.get(kind)
            value = row.get(field_name)
            dimension_ids[profile.candidate_fields[kind]] = (
                dimension_map.get_id(value) if dimension_map and not is_blank(value) else None
            )

        return CandidateProduct(
            name=name,
            slug=parse_text(row.get("slug")) or generate_slug(name),
            sku=parse_text(row.get("sku")),
            barcode=parse_text(row.get("barcode")),
            **dimension_ids,
            buying_price=parse_number(row.get("buying_price")),
            price=parse_number(row.get("price")),
            offer_price=parse_number(row.get("offer_price")),
            old_price=parse_number(row.get("old_price")),
            discount=parse_number(row.get("discount")),
            stock_status=canonical_stock_status(row.get("stock_status")),
            count_in_stock=parse_int(row.get("count_in_stock")),
            max_purchase_qty=parse_int(row.get("max_purchase_qty"), self.default_max_purchase_qty),
            low_stock_warning=parse_int(row.get("low_stock_warning"), self.default_low_stock_warning),
            weight=parse_number(row.get("weight")),
            show_stock_out=parse_bool(row.get("show_stock_out"), True),
            can_purchase=parse_bool(row.get("can_purchase"), True),
            refundable=parse_bool(row.get("refundable"), True),
            is_active=parse_bool(row.get("is_active"), True),
            featured=parse_bool(row.get("featured"), False),
            image=parse_text(row.get("image")),
            gallery_images=parse_list(row.get("gallery_images")),
            tags=parse_list(row.get("tags")),
            description=parse_text(row.get("description")),
            short_description=parse_text(row.get("short_description")),
            details=parse_text(row.get("details")),
            specifications=row.specifications,
        )

    def _reject(
        self,
        index: int,
        reason: RejectionReason,
        data: dict[str, Any],
        message: Optional[str] = None
    ) -> RowOutcome:
        return RowOutcome(
            index=index,
            row=self.row_number(index),
            status=OutcomeStatus.REJECTED,
            reason=reason,
            message=message or REJECTION_MESSAGES[reason],
            data=data
        )
