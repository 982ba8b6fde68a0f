"""
Dimension entity schemas.

Dimensions are the reference entities products point to: categories,
subcategories, brands, taxes, units, colors, warranties, sizes and volumes.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema


class DimensionKind(str, Enum):
    """Kinds of dimension entity, one store table each."""
    CATEGORY = "category"
    SUB_CATEGORY = "sub_category"
    BRAND = "brand"
    TAX = "tax"
    UNIT = "unit"
    COLOR = "color"
    WARRANTY = "warranty"
    SIZE = "size"
    VOLUME = "volume"

    @property
    def table(self) -> str:
        """Supabase table holding this kind."""
        return DIMENSION_TABLES[self]


DIMENSION_TABLES = {
    DimensionKind.CATEGORY: "categories",
    DimensionKind.SUB_CATEGORY: "sub_categories",
    DimensionKind.BRAND: "brands",
    DimensionKind.TAX: "taxes",
    DimensionKind.UNIT: "units",
    DimensionKind.COLOR: "colors",
    DimensionKind.WARRANTY: "warranties",
    DimensionKind.SIZE: "sizes",
    DimensionKind.VOLUME: "volumes",
}


class DimensionRef(BaseSchema):
    """Display object for a dimension reference in import reports."""
    id: Optional[str] = None
    name: str
    slug: str = ""
    proposed: bool = Field(
        False,
        description="True if the entity does not exist yet and would be created on save"
    )


class DimensionEntity(BaseSchema):
    """
    A dimension entity.

    proposed=True marks an entity synthesized by a preview; its id is
    provisional and it has not been written to the store.
    """
    id: str
    name: str
    slug: str = ""
    parent_id: Optional[str] = None
    proposed: bool = False

    def to_ref(self) -> DimensionRef:
        return DimensionRef(
            id=self.id,
            name=self.name,
            slug=self.slug,
            proposed=self.proposed,
        )


class DimensionCreate(BaseSchema):
    """
    Create a dimension entity.

    symbol/type apply to units, rate to taxes, parent_id to subcategories.
    """
    name: str = Field(..., min_length=1)
    slug: str = ""
    parent_id: Optional[str] = None
    symbol: Optional[str] = None
    type: Optional[str] = None
    rate: Optional[float] = Field(None, ge=0, le=100)
