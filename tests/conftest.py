"""
Shared pytest fixtures and configuration for spine-sql tests.

This module provides:
- Recording fake provider for fault-injection tests
- In-memory SQLite provider / executor for integration-style tests
- A ``users`` table repository for end-to-end scenarios
- Location-based test markers

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    def test_something(sqlite_jdbc):
        ...
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from spine_sql.executor import StatementExecutor
from spine_sql.providers import SQLiteConnectionProvider
from spine_sql.users import UserRepository
from tests._support.fault_injection import FakeProvider


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Provider / Executor Fixtures
# =============================================================================


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Recording provider with no rows and no faults."""
    return FakeProvider()


@pytest.fixture
def sqlite_provider() -> Generator[SQLiteConnectionProvider, None, None]:
    """In-memory SQLite provider, closed after the test."""
    provider = SQLiteConnectionProvider(":memory:")
    yield provider
    provider.close()


@pytest.fixture
def sqlite_jdbc(sqlite_provider: SQLiteConnectionProvider) -> StatementExecutor:
    """Executor over in-memory SQLite with an ``items`` table."""
    jdbc = StatementExecutor(sqlite_provider)
    jdbc.execute_update(
        "create table items (id integer primary key autoincrement, name text not null, qty integer)"
    )
    return jdbc


@pytest.fixture
def user_repository(sqlite_provider: SQLiteConnectionProvider) -> UserRepository:
    """User repository over a fresh in-memory ``users`` table."""
    repo = UserRepository.from_provider(sqlite_provider)
    repo.create_table()
    return repo
