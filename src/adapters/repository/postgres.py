"""
PostgreSQL repository adapters - Implement the persistence ports.

This module provides the PostgreSQL implementations of the domain's
UserStore, IpHistoryStore and pending-signup bookkeeping using psycopg3
with raw SQL over an AsyncConnectionPool.

Atomic Account Creation:
------------------------
The account row and its signup-history row are written in one transaction.
UNIQUE constraints on the lowercased username and on the email make the
database the single arbiter of uniqueness: of two concurrent creates for
the same identity exactly one commits, the other gets UniqueViolation,
which surfaces as CreationConflict. No partial account is ever visible.
"""

import logging
from pathlib import Path

from psycopg import errors
from psycopg_pool import AsyncConnectionPool

from src.domain.exceptions import CreationConflict
from src.domain.models import AcceptableEmail, Account, ApiVersion, FingerPrint

logger = logging.getLogger(__name__)


class PostgresUserStore:
    """
    Implements UserStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
        """
        self._pool = pool

    async def create(
        self,
        username: str,
        password_hash: str,
        email: AcceptableEmail,
        blind: bool,
        api_version: ApiVersion | None,
        must_confirm_email: bool,
        ip: str | None = None,
        fingerprint: FingerPrint | None = None,
    ) -> Account:
        """
        Create the account and record its signup history atomically.

        The account id is the lowercased username.

        Raises:
            CreationConflict: If the username or email is already taken
        """
        user_id = username.lower()
        insert_user_sql = """
            INSERT INTO users (id, username, email, password_hash, blind, api_version, must_confirm_email)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING created_at
        """
        insert_signup_sql = """
            INSERT INTO signups (user_id, ip, fingerprint)
            VALUES (%s, %s, %s)
        """

        try:
            async with self._pool.connection() as conn, conn.transaction():
                cursor = await conn.execute(
                    insert_user_sql,
                    (
                        user_id,
                        username,
                        email.value,
                        password_hash,
                        blind,
                        api_version.value if api_version else None,
                        must_confirm_email,
                    ),
                )
                row = await cursor.fetchone()
                await conn.execute(
                    insert_signup_sql,
                    (user_id, ip, fingerprint.value if fingerprint else None),
                )
        except errors.UniqueViolation as e:
            raise CreationConflict(f"No user could be created for {username}") from e

        return Account(
            id=user_id,
            username=username,
            email=email,
            must_confirm_email=must_confirm_email,
            created_at=row[0] if row else None,
        )


class PostgresIpHistoryStore:
    """
    Implements IpHistoryStore protocol via psycopg3.

    Read-only: looks for signups from the same IP or print within the
    configured window.
    """

    def __init__(self, pool: AsyncConnectionPool, window_days: int = 7) -> None:
        self._pool = pool
        self._window_days = window_days

    async def recent_signup_by_ip(self, ip: str) -> bool:
        sql = """
            SELECT EXISTS (
                SELECT 1 FROM signups
                WHERE ip = %s
                  AND created_at > NOW() - make_interval(days => %s)
            )
        """
        return await self._exists(sql, (ip, self._window_days))

    async def recent_signup_by_fingerprint(self, fingerprint: FingerPrint) -> bool:
        sql = """
            SELECT EXISTS (
                SELECT 1 FROM signups
                WHERE fingerprint = %s
                  AND created_at > NOW() - make_interval(days => %s)
            )
        """
        return await self._exists(sql, (fingerprint.value, self._window_days))

    async def _exists(self, sql: str, params: tuple) -> bool:
        async with self._pool.connection() as conn:
            cursor = await conn.execute(sql, params)
            row = await cursor.fetchone()
        return bool(row and row[0])


class PostgresPendingSignupStore:
    """Stores pending signups so the confirmation link can be checked later."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def save(
        self,
        user_id: str,
        api_version: ApiVersion | None,
        fingerprint: FingerPrint | None,
    ) -> None:
        """
        Record a pending signup for user_id.

        Re-saving the same account replaces the earlier record.
        """
        sql = """
            INSERT INTO pending_signups (user_id, api_version, fingerprint, created_at)
            VALUES (%s, %s, %s, NOW())
            ON CONFLICT (user_id) DO UPDATE
            SET api_version = EXCLUDED.api_version,
                fingerprint = EXCLUDED.fingerprint,
                created_at = NOW()
        """
        async with self._pool.connection() as conn:
            await conn.execute(
                sql,
                (
                    user_id,
                    api_version.value if api_version else None,
                    fingerprint.value if fingerprint else None,
                ),
            )


async def run_migrations(pool: AsyncConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 AsyncConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            async with pool.connection() as conn:
                await conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
