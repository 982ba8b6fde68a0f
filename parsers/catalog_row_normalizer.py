"""
Catalog row normalizer.

Maps arbitrary spreadsheet/payload column names to canonical product field
names. Columns the alias table does not know are kept as product
specifications, so a sheet with a "Material" or "Screen Size" column imports
those values as attributes instead of dropping them.
"""

from typing import Any, Mapping
import structlog

from models.catalog_import import NormalizedRow
from models.product import Specification
from utils.text_utils import clean_name, is_blank

logger = structlog.get_logger(__name__)


# Header (trimmed, case-sensitive) -> canonical field
COLUMN_ALIASES: dict[str, str] = {
    # Spreadsheet template headers
    "name": "name",
    "slug": "slug",
    "SKU": "sku",
    "sku": "sku",
    "barcode": "barcode",
    "category": "category",
    "parent_category": "parent_category",
    "subCategory": "sub_category",
    "sub_category": "sub_category",
    "brand": "brand",
    "buying_price": "buying_price",
    "selling_price": "price",
    "price": "price",
    "offer_price": "offer_price",
    "old_price": "old_price",
    "discount": "discount",
    "tax": "tax",
    "status": "stock_status",
    "stock_status": "stock_status",
    "show_stock_out": "show_stock_out",
    "can_purchasable": "can_purchase",
    "can_purchase": "can_purchase",
    "refundable": "refundable",
    "is_active": "is_active",
    "featured": "featured",
    "max_purchase_quantity": "max_purchase_qty",
    "max_purchase_qty": "max_purchase_qty",
    "low_stock_warning": "low_stock_warning",
    "count_in_stock": "count_in_stock",
    "unit": "unit",
    "weight": "weight",
    "color": "color",
    "warranty": "warranty",
    "size": "size",
    "volume": "volume",
    "tags": "tags",
    "image": "image",
    "gallery_images": "gallery_images",
    "description": "description",
    "short_description": "short_description",
    "details": "details",
    "specifications": "specifications",

    # camelCase keys sent by the admin client
    "parentCategory": "parent_category",
    "buyingPrice": "buying_price",
    "offerPrice": "offer_price",
    "oldPrice": "old_price",
    "stockStatus": "stock_status",
    "showStockOut": "show_stock_out",
    "canPurchase": "can_purchase",
    "isActive": "is_active",
    "maxPurchaseQty": "max_purchase_qty",
    "lowStockWarning": "low_stock_warning",
    "countInStock": "count_in_stock",
    "galleryImages": "gallery_images",
    "shortDescription": "short_description",
}

# Key of the entry a dedicated "specifications" column produces
SPECIFICATIONS_KEY = "Specifications"


def normalize_row(raw_row: Mapping[str, Any]) -> NormalizedRow:
    """
    Normalize one raw row.

    Args:
        raw_row: Source column name -> raw cell value

    Returns:
        NormalizedRow with canonical fields and leftover specifications
    """
    fields: dict[str, Any] = {}
    explicit_specs: list[Specification] = []
    extra_specs: list[Specification] = []

    for raw_key, value in raw_row.items():
        key = str(raw_key).strip()
        canonical = COLUMN_ALIASES.get(key)

        if canonical == "specifications":
            explicit_specs.extend(_parse_specifications(value))
        elif canonical:
            # "SKU" and "sku" both present: first non-blank wins
            if canonical in fields and not is_blank(fields[canonical]):
                continue
            fields[canonical] = value
        elif key and not is_blank(value):
            extra_specs.append(Specification(key=key, value=clean_name(value)))

    return NormalizedRow(fields=fields, specifications=explicit_specs + extra_specs)


def normalize_rows(raw_rows: list[Mapping[str, Any]]) -> list[NormalizedRow]:
    """Normalize a whole row set, preserving order."""
    rows = [normalize_row(r) for r in raw_rows]

    logger.debug(
        "catalog_rows_normalized",
        count=len(rows),
        with_specifications=sum(1 for r in rows if r.specifications)
    )

    return rows


def is_empty_row(row: NormalizedRow) -> bool:
    """
    True if every mapped field is blank.

    Specification columns are not considered.
    """
    return all(is_blank(v) for v in row.fields.values())


def _parse_specifications(value: Any) -> list[Specification]:
    """Specifications column: a text cell, or a list of {key, value} from JSON."""
    if is_blank(value):
        return []

    if isinstance(value, list):
        specs = []
        for item in value:
            if isinstance(item, Mapping) and not is_blank(item.get("key")):
                specs.append(Specification(
                    key=clean_name(item["key"]),
                    value=clean_name(item.get("value")) or ""
                ))
        return specs

    return [Specification(key=SPECIFICATIONS_KEY, value=clean_name(value))]
