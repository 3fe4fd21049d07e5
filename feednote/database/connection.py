"""
FeedNote Database Connection Management
=======================================

Single-writer SQLite connection manager used by the durable cache.
One connection is shared by every caller and serialized with a lock;
no other process is expected to write to the same file.
"""

import sqlite3
import threading
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Generator, Union

from ..utils.exceptions import DatabaseError, ErrorCode

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class DatabaseConnection:
    """Thread-safe single-connection SQLite manager."""

    def __init__(self, db_path: Union[str, Path] = "data/feednote.db"):
        """Open the database file, creating its directory if needed.

        Args:
            db_path: Path to SQLite database file, or ``:memory:``

        Raises:
            DatabaseError: If the location cannot be created or opened
        """
        self.db_path = str(db_path)
        self.lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

        try:
            if self.db_path != MEMORY_DB:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = self._create_connection()
        except (OSError, sqlite3.Error) as e:
            raise DatabaseError(
                f"Failed to open cache database at {self.db_path}: {e}",
                error_code=ErrorCode.DATABASE_CONNECTION,
                context={"db_path": self.db_path},
                recoverable=False,
            ) from e

    def _create_connection(self) -> sqlite3.Connection:
        """Create the SQLite connection and verify it answers queries."""
        conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,  # Shared across threads, guarded by self.lock
            timeout=30.0,
        )

        try:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
            conn.execute("PRAGMA temp_store = MEMORY")
            conn.row_factory = sqlite3.Row
            conn.execute("SELECT 1").fetchone()
        except sqlite3.Error:
            conn.close()
            raise

        logger.debug(f"Opened cache database connection: {self.db_path}")
        return conn

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Borrow the shared connection for the duration of the block.

        Usage:
            with db.get_connection() as conn:
                row = conn.execute("SELECT 1").fetchone()
        """
        start_time = time.time()
        with self.lock:
            if self._conn is None:
                raise DatabaseError(
                    "Cache database is closed",
                    error_code=ErrorCode.DATABASE_CONNECTION,
                    recoverable=False,
                )

            acquisition_time = time.time() - start_time
            if acquisition_time > 1.0:
                logger.warning(f"Database lock acquisition took {acquisition_time:.2f}s")

            yield self._conn

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Execute operations within a database transaction.

        Commits on success, rolls back on any exception.
        """
        with self.get_connection() as conn:
            try:
                yield conn
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Transaction rolled back due to error: {e}")
                raise

    def execute_one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a query and return a single row or None."""
        with self.get_connection() as conn:
            cursor = conn.execute(query, params)
            return cursor.fetchone()

    def execute_update(self, query: str, params: tuple = ()) -> int:
        """Execute an INSERT/UPDATE/DELETE query and return affected rows."""
        with self.transaction() as conn:
            cursor = conn.execute(query, params)
            return cursor.rowcount

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        with self.lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info(f"Closed cache database: {self.db_path}")
