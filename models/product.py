"""
Product schemas for validation and serialization.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema, TimestampMixin


DEFAULT_MAX_PURCHASE_QTY = 10
DEFAULT_LOW_STOCK_WARNING = 5


class StockStatus(str, Enum):
    """Storefront stock status."""
    AVAILABLE = "Available Product"
    OUT_OF_STOCK = "Out of Stock"
    PRE_ORDER = "PreOrder"


class Specification(BaseSchema):
    """Free-form product attribute shown in the specifications table."""
    key: str
    value: str


class CandidateProduct(BaseSchema):
    """
    Product ready for insertion.

    Every dimension field holds a resolved entity id (or None) and every
    other field is typed and defaulted, so the record can be written as-is.
    """

    name: str = Field(..., min_length=1, description="Display name")
    slug: str = Field(..., description="URL slug")
    sku: str = ""
    barcode: str = ""

    # Dimension references (entity ids)
    # Spreadsheet rows: category + sub_category; structured rows: parent_category + category
    parent_category: Optional[str] = Field(None, description="Category id (structured rows)")
    category: Optional[str] = Field(None, description="Category or SubCategory id")
    sub_category: Optional[str] = Field(None, description="SubCategory id (spreadsheet rows)")
    brand: Optional[str] = None
    tax: Optional[str] = None
    unit: Optional[str] = None
    color: Optional[str] = None
    warranty: Optional[str] = None
    size: Optional[str] = None
    volume: Optional[str] = None

    # Pricing
    buying_price: float = Field(0, ge=0)
    price: float = Field(0, ge=0)
    offer_price: float = Field(0, ge=0)
    old_price: float = Field(0, ge=0)
    discount: float = Field(0, ge=0)

    # Stock and purchase rules
    stock_status: StockStatus = StockStatus.AVAILABLE
    count_in_stock: int = 0
    max_purchase_qty: int = DEFAULT_MAX_PURCHASE_QTY
    low_stock_warning: int = DEFAULT_LOW_STOCK_WARNING
    weight: float = 0
    show_stock_out: bool = True
    can_purchase: bool = True
    refundable: bool = True
    is_active: bool = True
    featured: bool = False

    # Content
    image: str = ""
    gallery_images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    short_description: str = ""
    details: str = ""
    specifications: list[Specification] = Field(default_factory=list)


class ProductResponse(CandidateProduct, TimestampMixin):
    """
    Product response with all fields.

    Used for GET responses and bulk save results.
    """

    id: str = Field(..., description="Product UUID")


class ProductListResponse(BaseSchema):
    """List of products with pagination."""

    data: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
