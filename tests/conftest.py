"""
Pytest configuration and fixtures for movie-etl-pipeline tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from contextlib import contextmanager

import pytest
from dotenv import load_dotenv

# Loggers are configured on import; keep test output readable
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), "config", "test.env"))

from src.core.errors import StoreError

FILMTV_HEADER = (
    "filmtv_id,title,year,genre,duration,country,avg_vote,critics_vote,"
    "public_vote,total_votes,humor,rhythm,effort,tension,erotism"
)


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container for integration tests

    Skips the requesting tests when Docker is not available.

    Yields:
        PostgresContainer instance
    """
    try:
        from testcontainers.postgres import PostgresContainer

        container = PostgresContainer(
            image="postgres:16.2-alpine",
            username="test_pipeline",
            password="test_password",
            dbname="test_movies",
        )
        container.start()
    except Exception as e:  # Docker daemon missing or unreachable
        pytest.skip(f"PostgreSQL container unavailable: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="function")
def db_pool(postgres_container):
    """
    Provide an open connection pool against the test container

    Yields:
        DatabaseConnectionPool
    """
    from src.warehouse.connection import DatabaseConnectionPool

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_movies",
        user="test_pipeline",
        password="test_password",
        timeout=10.0,
        statement_timeout=30.0,
    )
    pool.open()
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture(scope="function")
def movie_store(db_pool):
    """
    Provide a MovieStore on a dropped-and-recreated table

    Yields:
        MovieStore writing to movie_test
    """
    from src.warehouse.movie_store import MovieStore

    store = MovieStore(db_pool, table_name="movie_test")
    store.clear()
    store.ensure_schema()
    yield store
    store.clear()


# =======================
# FAKE STORE (unit tests)
# =======================

class InMemoryMovieStore:
    """
    Dict-backed stand-in for MovieStore with the same operations.

    failing_operation makes that operation raise StoreError.
    """

    def __init__(self, table_name: str = "movie", failing_operation: str | None = None):
        self.table_name = table_name
        self.failing_operation = failing_operation
        self.rows: dict[int, dict] | None = None
        self.calls: list[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if operation == self.failing_operation:
            raise StoreError(operation, "simulated failure")

    def ensure_schema(self) -> None:
        self._check("ensure_schema")
        if self.rows is None:
            self.rows = {}

    def clear(self) -> None:
        self._check("clear")
        self.rows = None

    def upsert(self, records) -> int:
        self._check("upsert")
        if self.rows is None:
            raise StoreError("upsert", "relation does not exist")
        for record in records:
            self.rows[record.primary_id] = record.model_dump()
        return len(records)

    def sample(self, limit: int) -> list[dict]:
        self._check("sample")
        if self.rows is None:
            raise StoreError("sample", "relation does not exist")
        return [self.rows[key] for key in sorted(self.rows)][:limit]

    def count(self) -> int:
        self._check("count")
        return len(self.rows or {})


class FailingPool:
    """Pool stand-in whose every database call raises the given error."""

    def __init__(self, error: Exception):
        self.error = error
        self.commands = []

    def execute_command(self, command, params=None):
        self.commands.append(command)
        raise self.error

    def execute_query(self, query, params=None):
        self.commands.append(query)
        raise self.error

    @contextmanager
    def get_connection(self):
        raise self.error
        yield  # pragma: no cover


@pytest.fixture
def memory_store() -> InMemoryMovieStore:
    return InMemoryMovieStore()


@pytest.fixture
def memory_store_factory():
    """InMemoryMovieStore class, for tests needing a failing operation"""
    return InMemoryMovieStore


@pytest.fixture
def failing_pool_factory():
    return FailingPool


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture(scope="session")
def filmtv_header() -> str:
    return FILMTV_HEADER


@pytest.fixture
def write_csv(tmp_path):
    """
    Factory writing CSV lines to a temporary file

    Returns:
        Callable(lines, name="movies.csv") -> Path
    """

    def _write(lines: list[str], name: str = "movies.csv"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_csv(write_csv):
    """Two well-formed FilmTV rows, the second with empty year and country"""
    return write_csv([
        FILMTV_HEADER,
        "1,Example Movie,2021,Drama,120,USA,8.5,9.0,8.0,1000,5,6,7,8,4",
        "2,Another Movie,,Comedy,90,,7.5,8.0,7.0,500,6,5,6,4,3",
    ])

