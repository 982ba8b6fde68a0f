"""
Duplicate check service.

Flags import rows whose product name or slug is already taken, either by
the catalog or by an earlier row of the same batch. Matching is exact after
trimming; unlike dimension names, product names are not case-folded.
"""

from typing import Iterable, Optional
import structlog

from models.catalog_import import NormalizedRow
from parsers.catalog_row_normalizer import is_empty_row
from services.product_service import ProductService, get_product_service
from exceptions import DatabaseError, DuplicateCheckError
from utils.text_utils import clean_name, generate_slug, is_blank

logger = structlog.get_logger(__name__)


class DuplicateCheckService:
    """Batch and single-product duplicate detection."""

    def __init__(self, product_service: Optional[ProductService] = None):
        self.product_service = product_service or get_product_service()

    def find_duplicates(
        self,
        rows: list[NormalizedRow],
        required_fields: Iterable[str] = ()
    ) -> set[int]:
        """
        Find rows colliding with the catalog or an earlier accepted row.

        The catalog is queried once for the whole batch. Rows with no slug
        are keyed by the slug generated from their name, as they are saved.
        Only rows that will be accepted claim their name and slug for later
        rows.

        Args:
            rows: Normalized rows
            required_fields: Fields a row needs to be accepted

        Returns:
            0-based indices of duplicate rows

        Raises:
            DuplicateCheckError: If the catalog cannot be queried
        """
        required = tuple(required_fields)
        keys = [self._keys(row) for row in rows]

        names = [name for name, _ in keys if name]
        slugs = [slug for _, slug in keys if slug]

        try:
            existing_names, existing_slugs = self.product_service.find_existing(names, slugs)
        except DatabaseError as e:
            raise DuplicateCheckError(e.message)

        duplicates: set[int] = set()
        seen_names: set[str] = set()
        seen_slugs: set[str] = set()

        for index, (row, (name, slug)) in enumerate(zip(rows, keys)):
            if is_empty_row(row) or any(is_blank(row.get(f)) for f in required):
                continue

            if (name and (name in existing_names or name in seen_names)) or (
                slug and (slug in existing_slugs or slug in seen_slugs)
            ):
                duplicates.add(index)
                continue

            if name:
                seen_names.add(name)
            if slug:
                seen_slugs.add(slug)

        logger.info(
            "duplicate_check_complete",
            rows=len(rows),
            duplicates=len(duplicates),
            existing_names=len(existing_names),
            existing_slugs=len(existing_slugs)
        )

        return duplicates

    def is_duplicate(self, name: str, slug: Optional[str]) -> bool:
        """
        Check a single product right before it is saved.

        Raises:
            DatabaseError: If the lookup fails
        """
        return self.product_service.exists_by_name_or_slug(name, slug)

    def _keys(self, row: NormalizedRow) -> tuple[Optional[str], Optional[str]]:
        """(name, slug) as the row would be saved."""
        name = clean_name(row.get("name"))
        slug = clean_name(row.get("slug"))
        if slug is None and name is not None:
            slug = generate_slug(name) or None
        return name, slug

