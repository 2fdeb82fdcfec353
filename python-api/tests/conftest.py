"""
Pytest configuration and fixtures.
"""

import copy
from types import SimpleNamespace
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    """
    Create a test client for the FastAPI application.

    This fixture is imported late to avoid circular dependencies
    and to ensure the app is properly configured before testing.
    """
    from main import app

    return TestClient(app)


@pytest.fixture
def mock_env(monkeypatch):
    """
    Set up mock environment variables for testing.
    """
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("API_VERSION", "v1")
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co/")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "service-key")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")


class InMemoryTables:
    """
    In-memory stand-in for TablesAPI.

    Understands the filter strings the services build (``eq.``, ``in.(...)``),
    comma-separated ``order`` expressions, column lists and ``alias:table(*)``
    embeds resolved through ``<alias>_id``. Set ``fail[(method, table)]`` to an
    exception to make that call raise.
    """

    def __init__(self, data: Optional[dict[str, list[dict[str, Any]]]] = None):
        self.data = {name: [dict(row) for row in rows] for name, rows in (data or {}).items()}
        self.fail: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str]] = []

    def rows(self, table_name: str) -> list[dict[str, Any]]:
        return self.data.setdefault(table_name, [])

    def _check_fail(self, method: str, table_name: str) -> None:
        self.calls.append((method, table_name))
        if (method, table_name) in self.fail:
            raise self.fail[(method, table_name)]

    @staticmethod
    def _text(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        return str(value)

    def _matches(self, row: dict[str, Any], filters: Optional[dict[str, str]]) -> bool:
        for column, expression in (filters or {}).items():
            operator, _, operand = expression.partition(".")
            actual = self._text(row.get(column))
            if operator == "eq" and actual != operand:
                return False
            if operator == "in" and actual not in operand.strip("()").split(","):
                return False
            if operator not in ("eq", "in"):
                raise NotImplementedError(f"filter {expression!r}")
        return True

    def _project(self, row: dict[str, Any], columns: str) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for part in columns.split(","):
            if part == "*":
                result.update(copy.deepcopy(row))
            elif ":" in part:
                alias, _, target = part.partition(":")
                related_table = target.split("(")[0]
                related_id = row.get(f"{alias}_id")
                related = [r for r in self.rows(related_table) if r.get("id") == related_id]
                result[alias] = copy.deepcopy(related[0]) if related else None
            else:
                result[part] = row.get(part)
        return result

    async def select(self, table_name, columns="*", filters=None, order=None, limit=None):
        self._check_fail("select", table_name)
        rows = [row for row in self.rows(table_name) if self._matches(row, filters)]
        if order:
            for key in reversed(order.split(",")):
                column, _, direction = key.partition(".")
                rows = sorted(
                    rows,
                    key=lambda r: (r.get(column) is None, r.get(column) or 0),
                    reverse=direction == "desc",
                )
        if limit is not None:
            rows = rows[:limit]
        return [self._project(row, columns) for row in rows]

    async def insert(self, table_name, rows):
        self._check_fail("insert", table_name)
        stored = [dict(row) for row in rows]
        self.rows(table_name).extend(stored)
        return copy.deepcopy(stored)

    async def upsert(self, table_name, rows, on_conflict="id"):
        self._check_fail("upsert", table_name)
        table = self.rows(table_name)
        result = []
        for row in rows:
            existing = next((r for r in table if r.get(on_conflict) == row.get(on_conflict)), None)
            if existing is None:
                existing = {}
                table.append(existing)
            existing.update(row)
            result.append(dict(existing))
        return result

    async def update(self, table_name, data, filters):
        self._check_fail("update", table_name)
        if not filters:
            raise ValueError("update requires at least one filter")
        result = []
        for row in self.rows(table_name):
            if self._matches(row, filters):
                row.update(data)
                result.append(dict(row))
        return result

    async def delete(self, table_name, filters):
        self._check_fail("delete", table_name)
        if not filters:
            raise ValueError("delete requires at least one filter")
        kept, removed = [], []
        for row in self.rows(table_name):
            (removed if self._matches(row, filters) else kept).append(row)
        self.data[table_name] = kept
        return removed


@pytest.fixture
def store():
    """Database client backed by InMemoryTables; seed it through ``store.tables.data``."""
    return SimpleNamespace(tables=InMemoryTables())
