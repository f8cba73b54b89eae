"""
Shared fixtures for integration tests.

Database fixtures skip their tests when PostgreSQL is not reachable.
"""

from collections.abc import Callable, Generator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create a migrated connection pool, or skip when the database is down."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    try:
        pool.wait(timeout=5.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")

    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty the accounts and tokens tables before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.execute("DELETE FROM tokens")
        conn.commit()
    yield


@pytest.fixture
def store_token(pool: ConnectionPool, clean_database: None) -> Callable[[str], None]:
    """Return a helper that stores an invitation token out-of-band."""

    def insert(value: str) -> None:
        with pool.connection() as conn:
            conn.execute("INSERT INTO tokens (token) VALUES (%s)", (value,))
            conn.commit()

    return insert
