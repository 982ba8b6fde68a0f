"""
Unit tests for ProductService.

Run: pytest tests/unit/test_product_service.py -v
Run with coverage: pytest tests/unit/test_product_service.py --cov=services/product_service
"""

import pytest

# Import what we're testing
from services.product_service import ProductService
from models.product import CandidateProduct
from exceptions import ProductNotFoundError, DatabaseError

# Import test utilities
from tests.factories import ProductFactory


class TestProductServiceGetAll:
    """Tests for ProductService.get_all()"""

    def test_get_all_returns_products(self, mock_db, mock_supabase):
        """Should return list of products with total count."""
        # Arrange
        mock_supabase.set_table_data("products", ProductFactory.create_batch(3))
        service = ProductService()

        # Act
        products, total = service.get_all()

        # Assert
        assert len(products) == 3
        assert total == 3

    def test_get_all_excludes_inactive(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [
            ProductFactory.create(),
            ProductFactory.create_inactive(),
        ])
        service = ProductService()

        products, total = service.get_all()

        assert total == 1
        assert all(p.is_active for p in products)

    def test_get_all_with_pagination(self, mock_db, mock_supabase):
        """Should respect page and page_size parameters."""
        mock_supabase.set_table_data("products", ProductFactory.create_batch(5))
        service = ProductService()

        products, total = service.get_all(page=2, page_size=2)

        assert len(products) == 2
        assert total == 5


class TestProductServiceGetById:
    """Tests for ProductService.get_by_id()"""

    def test_get_by_id_returns_product(self, mock_db, mock_supabase, sample_product_data):
        # Arrange
        mock_supabase.set_table_data("products", [sample_product_data])
        service = ProductService()

        # Act
        product = service.get_by_id("test-uuid-123")

        # Assert
        assert product.id == "test-uuid-123"
        assert product.name == "Ceramic Mug"

    def test_get_by_id_not_found_raises_error(self, mock_db, mock_supabase):
        service = ProductService()

        with pytest.raises(ProductNotFoundError) as exc_info:
            service.get_by_id("nonexistent-id")

        assert exc_info.value.status_code == 404
        assert "PRODUCT_NOT_FOUND" in exc_info.value.code


class TestProductServiceFindExisting:
    """Tests for ProductService.find_existing()"""

    def test_returns_taken_names_and_slugs(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [
            ProductFactory.create(name="Lamp", slug="lamp"),
            ProductFactory.create(name="Desk", slug="desk"),
        ])
        service = ProductService()

        names, slugs = service.find_existing(["Lamp", "Chair"], ["desk", "chair"])

        assert names == {"Lamp"}
        assert slugs == {"desk"}

    def test_no_keys_no_queries(self, mock_db, mock_supabase):
        service = ProductService()

        assert service.find_existing([], []) == (set(), set())
        assert mock_supabase.calls == []


class TestProductServiceCreate:
    """Tests for ProductService.create()"""

    def test_create_returns_stored_product(self, mock_db, mock_supabase):
        # Arrange
        service = ProductService()
        data = CandidateProduct(name="Steel Kettle", slug="steel-kettle", price=30)

        # Act
        product = service.create(data)

        # Assert
        assert product.id
        assert product.name == "Steel Kettle"
        assert mock_supabase.rows("products")[0]["stock_status"] == "Available Product"

    def test_create_failure_raises_database_error(self, mock_db, mock_supabase):
        mock_supabase.fail_table("products", "insert")
        service = ProductService()

        with pytest.raises(DatabaseError) as exc_info:
            service.create(CandidateProduct(name="Kettle", slug="kettle"))

        assert exc_info.value.code == "DATABASE_ERROR"


class TestProductServiceCount:
    """Tests for ProductService.count()"""

    def test_count(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", ProductFactory.create_batch(4))
        service = ProductService()

        assert service.count() == 4
