"""
Product service for catalog store operations.

Reads the catalog and writes imported products. Duplicate lookups are
batched: one query per column, whatever the batch size.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.product import CandidateProduct, ProductResponse
from exceptions import ProductNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class ProductService:
    """
    Product catalog store.

    Handles reads, duplicate lookups and inserts for products.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        page: int = 1,
        page_size: int = 20,
        active_only: bool = True
    ) -> tuple[list[ProductResponse], int]:
        """
        Get all products.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page
            active_only: Only return active products

        Returns:
            Tuple of (products list, total count)
        """
        logger.info(
            "getting_products",
            page=page,
            page_size=page_size
        )

        try:
            query = self.db.table(self.table).select("*", count="exact")

            if active_only:
                query = query.eq("is_active", True)

            offset = (page - 1) * page_size
            query = query.range(offset, offset + page_size - 1)
            query = query.order("name")

            result = query.execute()

            products = [ProductResponse(**row) for row in result.data]
            total = result.count or 0

            logger.info(
                "products_retrieved",
                count=len(products),
                total=total
            )

            return products, total

        except Exception as e:
            logger.error(
                "get_products_failed",
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a single product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "get_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        return ProductResponse(**result.data[0])

    def find_existing(
        self,
        names: list[str],
        slugs: list[str]
    ) -> tuple[set[str], set[str]]:
        """
        Find which names and slugs are already taken.

        Matching is exact. Issues at most two queries.

        Args:
            names: Candidate product names
            slugs: Candidate product slugs

        Returns:
            Tuple of (existing names, existing slugs)

        Raises:
            DatabaseError: If the lookup fails
        """
        names = sorted(set(names))
        slugs = sorted(set(slugs))

        logger.debug(
            "finding_existing_products",
            names=len(names),
            slugs=len(slugs)
        )

        existing_names: set[str] = set()
        existing_slugs: set[str] = set()

        try:
            if names:
                result = (
                    self.db.table(self.table)
                    .select("id,name,slug")
                    .in_("name", names)
                    .execute()
                )
                existing_names = {row["name"] for row in result.data}

            if slugs:
                result = (
                    self.db.table(self.table)
                    .select("id,name,slug")
                    .in_("slug", slugs)
                    .execute()
                )
                existing_slugs = {row["slug"] for row in result.data}

        except Exception as e:
            logger.error("find_existing_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return existing_names, existing_slugs

    def exists_by_name_or_slug(self, name: str, slug: Optional[str]) -> bool:
        """
        Check one product name/slug pair against the catalog.

        Raises:
            DatabaseError: If the lookup fails
        """
        try:
            result = (
                self.db.table(self.table)
                .select("id")
                .eq("name", name)
                .limit(1)
                .execute()
            )
            if result.data:
                return True

            if slug:
                result = (
                    self.db.table(self.table)
                    .select("id")
                    .eq("slug", slug)
                    .limit(1)
                    .execute()
                )
                return bool(result.data)

            return False

        except Exception as e:
            logger.error(
                "product_exists_check_failed",
                name=name,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: CandidateProduct) -> ProductResponse:
        """
        Insert a product.

        The caller is responsible for duplicate checks.

        Raises:
            DatabaseError: If the insert fails
        """
        logger.info("creating_product", name=data.name, slug=data.slug)

        try:
            result = (
                self.db.table(self.table)
                .insert(data.model_dump(mode="json"))
                .execute()
            )

            product = ProductResponse(**result.data[0])

            logger.info(
                "product_created",
                product_id=product.id,
                slug=product.slug
            )

            return product

        except Exception as e:
            logger.error(
                "create_product_failed",
                name=data.name,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

    # ===================
    # UTILITY METHODS
    # ===================

    def count(self, active_only: bool = True) -> int:
        """Count total products."""
        try:
            query = self.db.table(self.table).select("id", count="exact")
            if active_only:
                query = query.eq("is_active", True)
            result = query.execute()
            return result.count or 0
        except Exception as e:
            logger.error("count_products_failed", error=str(e))
            raise DatabaseError("count", str(e))


# Singleton instance for convenience
_product_service: Optional[ProductService] = None

def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
