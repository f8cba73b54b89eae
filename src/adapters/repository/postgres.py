"""
PostgreSQL repository adapters - Implement TokenRepository and AccountRepository.

This module provides the PostgreSQL implementation of the domain's
repository ports using psycopg3 with raw SQL.

Token Consumption:
------------------
create_account deletes the token row and inserts the account row in one
transaction. DELETE ... RETURNING takes a row lock, so two concurrent
registrations with the same token serialize on it: the first commits,
the second finds nothing to delete and reports TOKEN_INVALID.

If the username insert conflicts, the transaction is rolled back and the
token stays available.
"""

import logging
from pathlib import Path

from psycopg_pool import ConnectionPool

from src.domain.ports import AccountResult, Token

logger = logging.getLogger(__name__)


class PostgresTokenRepository:
    """
    Implements TokenRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_token(self, value: str) -> Token | None:
        """
        Find the first token whose value equals the input.

        Read-only: the connection is committed without any writes.
        """
        sql = """
            SELECT token, created_at
            FROM tokens
            WHERE token = %s
            LIMIT 1
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (value,))
            row = cursor.fetchone()

        if row is None:
            return None
        return Token(value=row[0], created_at=row[1])

    def add_token(self, value: str) -> bool:
        """
        Insert a new token.

        A value that was already consumed by an account is refused too,
        so consumed tokens can never be reissued.

        Returns:
            True if inserted, False if the value already exists
        """
        sql = """
            INSERT INTO tokens (token, created_at)
            SELECT %s, NOW()
            WHERE NOT EXISTS (SELECT 1 FROM accounts WHERE invite_token = %s)
            ON CONFLICT (token) DO NOTHING
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (value, value))
            conn.commit()
            return cursor.rowcount == 1


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create_account(self, username: str, password_hash: str, token: str) -> AccountResult:
        """
        Consume a token and create an account in a single transaction.

        Args:
            username: Normalized username
            password_hash: bcrypt-hashed password from domain layer
            token: Invitation token value

        Returns:
            CREATED on success, TOKEN_INVALID if no token row could be
            consumed or the value already unlocked an account,
            USERNAME_TAKEN if the username insert conflicted
        """
        consume_sql = """
            DELETE FROM tokens
            WHERE token = %s
            RETURNING token
        """

        insert_sql = """
            INSERT INTO accounts (username, password_hash, invite_token, created_at)
            VALUES (%s, %s, %s, NOW())
            ON CONFLICT DO NOTHING
        """

        consumed_sql = """
            SELECT 1 FROM accounts WHERE invite_token = %s LIMIT 1
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(consume_sql, (token,))
            if cursor.fetchone() is None:
                conn.rollback()
                return AccountResult.TOKEN_INVALID

            cursor.execute(insert_sql, (username, password_hash, token))
            if cursor.rowcount != 1:
                cursor.execute(consumed_sql, (token,))
                if cursor.fetchone() is not None:
                    # Stray row for an already consumed value, keep it deleted
                    conn.commit()
                    return AccountResult.TOKEN_INVALID
                # Restores the token row
                conn.rollback()
                return AccountResult.USERNAME_TAKEN

            conn.commit()
            return AccountResult.CREATED


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
