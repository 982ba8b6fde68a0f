"""
Shared test fixtures.

The mock Supabase client keeps table rows in memory, so inserts made by
one service are visible to the next query.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator
from uuid import uuid4


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock query builder: records filters, applies them on execute()."""

    def __init__(self, client: "MockSupabaseClient", table: str):
        self._client = client
        self._table = table
        self._operation = "select"
        self._payload = None
        self._filters = []
        self._order = None
        self._range = None
        self._limit = None
        self._count = None

    def select(self, *args, count: str = None, **kwargs):
        self._operation = "select"
        self._count = count
        return self

    def insert(self, data):
        self._operation = "insert"
        self._payload = data
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        self._client.calls.append((self._table, self._operation))

        if self._operation in self._client.failures.get(self._table, set()):
            raise Exception(f"{self._table} {self._operation} unavailable")

        if self._operation == "insert":
            return MockSupabaseResponse(data=self._client.insert_rows(self._table, self._payload))

        rows = [r for r in self._client.rows(self._table) if all(f(r) for f in self._filters)]
        total = len(rows)

        if self._order:
            column, desc = self._order
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._range:
            start, end = self._range
            rows = rows[start:end + 1]
        if self._limit is not None:
            rows = rows[:self._limit]

        return MockSupabaseResponse(
            data=[dict(r) for r in rows],
            count=total if self._count else None
        )


class MockSupabaseTable:
    """Mock Supabase table: entry point for query chains."""

    def __init__(self, client: "MockSupabaseClient", name: str):
        self._client = client
        self._name = name

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._client, self._name).select(*args, **kwargs)

    def insert(self, data):
        return MockSupabaseQuery(self._client, self._name).insert(data)


class MockSupabaseClient:
    """Mock Supabase client with in-memory tables."""

    def __init__(self):
        self._tables: dict[str, list[dict]] = {}
        self.failures: dict[str, set[str]] = {}
        self.calls: list[tuple[str, str]] = []

    def set_table_data(self, table_name: str, data: list):
        """Replace the rows of a table."""
        self._tables[table_name] = [dict(row) for row in data]

    def fail_table(self, table_name: str, *operations: str):
        """Make select and/or insert on a table raise (default: both)."""
        self.failures[table_name] = set(operations or ("select", "insert"))

    def rows(self, table_name: str) -> list[dict]:
        return self._tables.setdefault(table_name, [])

    def insert_rows(self, table_name: str, data) -> list[dict]:
        items = data if isinstance(data, list) else [data]
        now = datetime.utcnow().isoformat() + "Z"
        inserted = []
        for item in items:
            row = {**item, "id": str(uuid4()), "created_at": now, "updated_at": now}
            self.rows(table_name).append(row)
            inserted.append(dict(row))
        return inserted

    def count_calls(self, table_name: str, operation: str) -> int:
        return sum(1 for call in self.calls if call == (table_name, operation))

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        return MockSupabaseTable(self, name)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("brands", [
                {"id": "b1", "name": "Acme", "slug": "acme"}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Services created inside the test get the mock from get_supabase_client().
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.product_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.dimension_service.get_supabase_client", return_value=mock_supabase):
                yield mock_supabase


@pytest.fixture(autouse=True)
def clear_preview_cache():
    """Each test starts with an empty preview cache."""
    from services import preview_cache_service

    preview_cache_service.clear_previews()
    yield
    preview_cache_service.clear_previews()


@pytest.fixture
def import_service(mock_db):
    """CatalogImportService wired to the mock database."""
    from services.catalog_import_service import CatalogImportService
    from services.dimension_service import DimensionService
    from services.product_service import ProductService

    return CatalogImportService(
        dimension_service=DimensionService(),
        product_service=ProductService()
    )


@pytest.fixture
def sample_product_data() -> dict:
    """Sample stored product row."""
    return {
        "id": "test-uuid-123",
        "name": "Ceramic Mug",
        "slug": "ceramic-mug",
        "sku": "MUG-001",
        "price": 12.5,
        "is_active": True,
        "created_at": "2026-01-05T10:00:00Z",
        "updated_at": "2026-01-05T10:00:00Z"
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_supabase, import_service):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            response = test_client_with_mock_db.get("/api/products")
    """
    from fastapi.testclient import TestClient
    from main import app
    from services.product_service import ProductService

    product_service = ProductService()

    with patch("routes.catalog_import.get_catalog_import_service", return_value=import_service):
        with patch("routes.products.get_product_service", return_value=product_service):
            yield TestClient(app)
