"""Pytest configuration and shared fixtures for database tests"""

from pathlib import Path
from typing import Iterator

import pytest

from db_sqlite_mcp.core import DatabaseConnection, MetadataInspector, QueryExecutor
from db_sqlite_mcp.models.config import DatabaseConfig

# ==================== Configuration Fixtures ====================


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    """Path of a fresh SQLite file for one test"""
    return tmp_path / "test.db"


@pytest.fixture
def db_config(database_path: Path) -> DatabaseConfig:
    """File-backed SQLite configuration"""
    return DatabaseConfig(url=f"sqlite:///{database_path}")


# ==================== Core Fixtures ====================


@pytest.fixture
def db_connection(db_config: DatabaseConfig) -> Iterator[DatabaseConnection]:
    """Database connection with proper cleanup"""
    connection = DatabaseConnection(db_config)
    connection.initialize()
    try:
        yield connection
    finally:
        connection.dispose()


@pytest.fixture
def executor(db_connection: DatabaseConnection) -> QueryExecutor:
    """Query executor over an empty database"""
    return QueryExecutor(db_connection)


@pytest.fixture
def inspector() -> MetadataInspector:
    """Metadata inspector"""
    return MetadataInspector()


@pytest.fixture
def abc_executor(executor: QueryExecutor) -> QueryExecutor:
    """Executor over t(id, name) holding (1,'a'), (2,'b'), (3,'c')"""
    executor.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
    executor.execute("INSERT INTO t (id, name) VALUES (1, 'a'), (2, 'b'), (3, 'c')")
    return executor


@pytest.fixture
def numbers_executor(executor: QueryExecutor) -> QueryExecutor:
    """Executor over numbers(n) holding 1..12"""
    executor.execute("CREATE TABLE numbers (n INTEGER NOT NULL)")
    values = ", ".join(f"({n})" for n in range(1, 13))
    executor.execute(f"INSERT INTO numbers (n) VALUES {values}")
    return executor


# ==================== Pytest Configuration ====================


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring database"
    )
    config.addinivalue_line("markers", "slow: Slow-running tests")
