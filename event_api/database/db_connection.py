"""
PostgreSQL connection pool.
Provides Database.connection() for use by services.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2.extras import DictCursor
from psycopg2.pool import ThreadedConnectionPool

from event_api.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """
    Thin wrapper around a psycopg2 ThreadedConnectionPool.

    Every connection handed out uses DictCursor, so rows can be read by
    column name (e.g. row["email"]) and converted with dict(row).
    """

    def __init__(self, dsn: str, minconn: int = 1, maxconn: int = 10):
        try:
            self._pool: Optional[ThreadedConnectionPool] = ThreadedConnectionPool(
                minconn, maxconn, dsn, cursor_factory=DictCursor
            )
        except psycopg2.Error as e:
            logger.error(f"Error connecting to database: {e}")
            # Re-raise so the caller knows the pool could not start
            raise
        logger.info(f"Database pool ready (min={minconn}, max={maxconn})")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, settings.db_pool_min, settings.db_pool_max)

    @contextmanager
    def connection(self) -> Iterator["psycopg2.extensions.connection"]:
        """
        Borrow a pooled connection for one unit of work.

        Usage:
            with db.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(...)

        The transaction is committed when the block exits normally and
        rolled back if it raises. The connection always goes back to the pool.

        Raises:
            RuntimeError: If the pool has been closed.
            psycopg2.Error: If the pool is exhausted or the database fails.
        """
        if self._pool is None:
            raise RuntimeError("Database pool is closed")

        conn = self._pool.getconn()
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            self._pool.putconn(conn)

    def close(self) -> None:
        """Close every pooled connection. Safe to call twice."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("Database pool closed")
