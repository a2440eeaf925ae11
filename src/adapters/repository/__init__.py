"""Repository adapters - Database implementations."""

from .postgres import (
    PostgresIpHistoryStore,
    PostgresPendingSignupStore,
    PostgresUserStore,
    run_migrations,
)

__all__ = [
    "PostgresIpHistoryStore",
    "PostgresPendingSignupStore",
    "PostgresUserStore",
    "run_migrations",
]
