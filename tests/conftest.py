"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Settings are validated at import time; provide dummy credentials
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Callable, Generator, Optional
from uuid import uuid4

from tests.factories import InventoryItemFactory


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        if count is not None:
            self.count = count
        else:
            self.count = len(self.data) if isinstance(self.data, list) else int(bool(self.data))


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters are collected and applied on execute(), so update().eq()
    only touches matching rows, like the real client.
    """

    def __init__(self, table: "MockSupabaseTable"):
        self._table = table
        self._operation = "select"
        self._payload = None
        self._filters: list[Callable[[dict], bool]] = []
        self._order: Optional[tuple[str, bool]] = None
        self._limit: Optional[int] = None
        self._is_single = False

    def select(self, *args, **kwargs):
        self._operation = "select"
        return self

    def insert(self, data):
        self._operation = "insert"
        self._payload = data
        return self

    def update(self, data):
        self._operation = "update"
        self._payload = data
        return self

    def delete(self):
        self._operation = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def or_(self, expression: str):
        """Supports the "col.ilike.%term%,col.ilike.%term%" form."""
        clauses = []
        for clause in expression.split(","):
            column, _, pattern = clause.split(".", 2)
            clauses.append((column, pattern.strip("%").lower()))
        self._filters.append(
            lambda row: any(term in str(row.get(col) or "").lower() for col, term in clauses)
        )
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def range(self, start, end):
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._table.error is not None:
            raise self._table.error

        matched = [row for row in self._table.rows if all(f(row) for f in self._filters)]
        now = datetime.utcnow().isoformat() + "Z"

        if self._operation == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            created = []
            for item in payload:
                row = {"id": str(uuid4()), "created_at": now, **item}
                self._table.rows.append(row)
                created.append(dict(row))
            return MockSupabaseResponse(data=created)

        if self._operation == "update":
            for row in matched:
                row.update(self._payload)
            return MockSupabaseResponse(data=[dict(row) for row in matched])

        if self._operation == "delete":
            self._table.rows[:] = [row for row in self._table.rows if row not in matched]
            return MockSupabaseResponse(data=[dict(row) for row in matched])

        rows = [dict(row) for row in matched]
        if self._order:
            column, desc = self._order
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._limit is not None:
            rows = rows[:self._limit]

        if self._is_single:
            return MockSupabaseResponse(data=rows[0] if rows else None)
        return MockSupabaseResponse(data=rows)


class MockSupabaseTable:
    """Mock Supabase table holding rows in memory."""

    def __init__(self, rows: list = None):
        self.rows = rows if rows is not None else []
        self.error: Optional[Exception] = None

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self).select(*args, **kwargs)

    def insert(self, data):
        return MockSupabaseQuery(self).insert(data)

    def update(self, data):
        return MockSupabaseQuery(self).update(data)

    def delete(self):
        return MockSupabaseQuery(self).delete()


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list):
        """Configure rows for a table (copied, so tests can reuse fixtures)."""
        self._tables[table_name] = MockSupabaseTable([dict(row) for row in data])

    def set_error(self, table_name: str, error: Exception):
        """Make every query on a table raise."""
        self.table(table_name).error = error

    def rows(self, table_name: str) -> list:
        """Current rows of a table."""
        return self.table(table_name).rows

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def reset_singletons():
    """Service singletons must not leak state between tests."""
    import services.inventory_store_service as store_module
    import services.sku_service as sku_module
    import services.reconciliation_service as check_module

    store_module._inventory_store_service = None
    sku_module._sku_service = None
    check_module._check_session_manager = None
    yield
    store_module._inventory_store_service = None
    sku_module._sku_service = None
    check_module._check_session_manager = None


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("inventory_items", [
                InventoryItemFactory.create(sku="SHI-BLA-XL-052")
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("inventory_items", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.inventory_store_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def sample_items() -> list:
    """Three items with distinct SKUs and names."""
    return [
        InventoryItemFactory.create(
            id="item-shirt",
            sku="SHI-BLA-XL-052",
            name="Black Tee",
            quantity=10,
            price="19.99",
        ),
        InventoryItemFactory.create(
            id="item-hoodie",
            sku="HOO-RED-MX-118",
            name="Red Hoodie",
            quantity=4,
            price="45.00",
        ),
        InventoryItemFactory.create(
            id="item-cap",
            sku="CAP-BLU-XX-007",
            name="Blue Cap",
            quantity=0,
            price="12.50",
        ),
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("inventory_items", [...])
            response = test_client_with_mock_db.get("/api/inventory")
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
