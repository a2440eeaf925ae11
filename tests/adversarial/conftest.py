"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition and brute force tests.
Database-backed tests are skipped when PostgreSQL cannot be reached.
"""

from collections.abc import AsyncGenerator

import psycopg
import pytest
import pytest_asyncio
from psycopg_pool import AsyncConnectionPool

from src.adapters.repository.postgres import PostgresUserStore, run_migrations
from src.config.settings import get_settings


@pytest.fixture(scope="module")
def database_url() -> str:
    url = get_settings().database_url
    try:
        with psycopg.connect(url, connect_timeout=2):
            pass
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not available: {e}")
    return url


@pytest_asyncio.fixture
async def pool(database_url: str) -> AsyncGenerator[AsyncConnectionPool, None]:
    """Connection pool large enough for concurrent attackers, on empty tables."""
    pool = AsyncConnectionPool(conninfo=database_url, min_size=1, max_size=20, open=False)
    await pool.open()
    await run_migrations(pool)
    async with pool.connection() as conn:
        await conn.execute("TRUNCATE users, signups, pending_signups CASCADE")
    yield pool
    await pool.close()


@pytest.fixture
def user_store(pool: AsyncConnectionPool) -> PostgresUserStore:
    """Create store instance for each test."""
    return PostgresUserStore(pool)

