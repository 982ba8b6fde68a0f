"""
Unit tests for DuplicateCheckService.

Run: pytest tests/unit/test_duplicate_check_service.py -v
"""

import pytest

from services.duplicate_check_service import DuplicateCheckService
from services.product_service import ProductService
from parsers.catalog_row_normalizer import normalize_rows
from exceptions import DuplicateCheckError

from tests.factories import ProductFactory


@pytest.fixture
def service(mock_db):
    return DuplicateCheckService(ProductService())


class TestFindDuplicates:
    """Tests for DuplicateCheckService.find_duplicates()"""

    def test_flags_existing_name(self, service, mock_supabase):
        # Arrange
        mock_supabase.set_table_data("products", [ProductFactory.create(name="Blue Mug", slug="blue-mug")])
        rows = normalize_rows([{"name": "Blue Mug"}, {"name": "Red Mug"}])

        # Act
        duplicates = service.find_duplicates(rows)

        # Assert
        assert duplicates == {0}

    def test_flags_existing_slug(self, service, mock_supabase):
        mock_supabase.set_table_data("products", [ProductFactory.create(name="Other", slug="taken")])
        rows = normalize_rows([{"name": "Fresh", "slug": "taken"}])

        assert service.find_duplicates(rows) == {0}

    def test_matching_is_exact_after_trim(self, service, mock_supabase):
        """Product names are not case-folded."""
        mock_supabase.set_table_data("products", [ProductFactory.create(name="Blue Mug", slug="x")])
        rows = normalize_rows([{"name": "  Blue Mug  "}, {"name": "blue mug"}])

        assert service.find_duplicates(rows) == {0}

    def test_later_rows_in_batch_are_duplicates(self, service):
        rows = normalize_rows([
            {"name": "Lamp"},
            {"name": "Lamp"},
            {"name": "Desk", "slug": "lamp-2"},
            {"name": "Chair", "slug": "lamp-2"},
        ])

        assert service.find_duplicates(rows) == {1, 3}

    def test_generated_slug_collides_in_batch(self, service):
        rows = normalize_rows([{"name": "Widget"}, {"name": "widget"}])

        assert service.find_duplicates(rows) == {1}

    def test_generated_slug_collides_with_catalog(self, service, mock_supabase):
        mock_supabase.set_table_data("products", [ProductFactory.create(name="Other", slug="blue-mug")])
        rows = normalize_rows([{"name": "Blue Mug"}])

        assert service.find_duplicates(rows) == {0}

    def test_explicit_slug_wins_over_generated(self, service):
        rows = normalize_rows([{"name": "Widget", "slug": "widget-a"}, {"name": "widget", "slug": "widget-b"}])

        assert service.find_duplicates(rows) == set()

    def test_rows_missing_required_fields_claim_nothing(self, service):
        rows = normalize_rows([
            {"name": "Lamp", "parentCategory": None},
            {"name": "Lamp", "parentCategory": "Home"},
        ])

        assert service.find_duplicates(rows, required_fields=("name", "parent_category")) == set()

    def test_flagged_rows_claim_nothing(self, service, mock_supabase):
        mock_supabase.set_table_data("products", [ProductFactory.create(name="Lamp", slug="x")])
        rows = normalize_rows([{"name": "Lamp", "slug": "desk"}, {"name": "Desk"}])

        assert service.find_duplicates(rows) == {0}

    def test_empty_rows_are_skipped(self, service):
        rows = normalize_rows([{"name": None}, {"name": None}])

        assert service.find_duplicates(rows) == set()

    def test_one_query_per_column(self, service, mock_supabase):
        rows = normalize_rows([{"name": f"Item {i}", "slug": f"item-{i}"} for i in range(50)])

        service.find_duplicates(rows)

        assert mock_supabase.count_calls("products", "select") == 2

    def test_store_failure_raises(self, service, mock_supabase):
        mock_supabase.fail_table("products", "select")
        rows = normalize_rows([{"name": "Lamp"}])

        with pytest.raises(DuplicateCheckError) as exc_info:
            service.find_duplicates(rows)

        assert exc_info.value.status_code == 503


class TestIsDuplicate:
    """Tests for DuplicateCheckService.is_duplicate()"""

    def test_name_or_slug_match(self, service, mock_supabase):
        mock_supabase.set_table_data("products", [ProductFactory.create(name="Lamp", slug="lamp")])

        assert service.is_duplicate("Lamp", "other") is True
        assert service.is_duplicate("Other", "lamp") is True
        assert service.is_duplicate("Other", "other") is False
