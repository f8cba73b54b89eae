"""Repository adapters - Database implementations."""

from .postgres import PostgresAccountRepository, PostgresTokenRepository, run_migrations

__all__ = ["PostgresAccountRepository", "PostgresTokenRepository", "run_migrations"]
