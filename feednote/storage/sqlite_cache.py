"""
SQLite Cache
============

Durable entry cache backed by a single SQLite file. Watermarks are
stored as ISO-8601 text, processed GUIDs with a unix-seconds timestamp
so old rows can be swept by range.
"""

import sqlite3
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

from .cache_repository import CacheRepository
from ..database.connection import DatabaseConnection
from ..database.schema import DatabaseSchema
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DatabaseError, ErrorCode


class SQLiteCache(CacheRepository):
    """Cache repository persisted in SQLite."""

    durable = True

    def __init__(self, db_path: Union[str, Path]):
        """Open (or create) the cache database and ensure its schema.

        Args:
            db_path: Path to SQLite database file

        Raises:
            DatabaseError: If the file cannot be opened or the schema created
        """
        self.logger = get_logger_for_component("sqlite_cache")
        self.db = DatabaseConnection(db_path)

        schema = DatabaseSchema()
        try:
            with self.db.get_connection() as conn:
                schema.create_tables(conn)
                if not schema.verify_schema(conn):
                    raise DatabaseError(
                        "Cache schema verification failed",
                        error_code=ErrorCode.DATABASE_SCHEMA,
                        recoverable=False,
                    )
        except sqlite3.Error as e:
            self.db.close()
            raise DatabaseError(
                f"Failed to initialize cache schema: {e}",
                error_code=ErrorCode.DATABASE_SCHEMA,
                recoverable=False,
            ) from e
        except DatabaseError:
            self.db.close()
            raise

        self.logger.info(f"SQLite cache ready at {self.db.db_path}")

    def get_latest_published(self, feed_url: str) -> Optional[datetime]:
        query = "SELECT published_at FROM latest_published WHERE rss_url = ?"
        try:
            row = self.db.execute_one(query, (feed_url,))
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to read watermark for {feed_url}: {e}", query=query
            ) from e

        if row is None:
            return None

        published = datetime.fromisoformat(row["published_at"])
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        return published

    def save_latest_published(self, feed_url: str, published: datetime) -> None:
        query = """
            INSERT INTO latest_published (rss_url, published_at) VALUES (?, ?)
            ON CONFLICT(rss_url) DO UPDATE SET published_at = excluded.published_at
        """
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)

        try:
            self.db.execute_update(query, (feed_url, published.isoformat()))
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to save watermark for {feed_url}: {e}", query=query
            ) from e

    def is_processed(self, guid: str) -> bool:
        query = "SELECT 1 FROM processed_guids WHERE guid = ?"
        try:
            return self.db.execute_one(query, (guid,)) is not None
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to look up GUID: {e}", query=query) from e

    def mark_as_processed(self, guid: str) -> None:
        query = "INSERT OR IGNORE INTO processed_guids (guid, processed_at) VALUES (?, ?)"
        try:
            self.db.execute_update(query, (guid, int(time.time())))
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to mark GUID: {e}", query=query) from e

    def cleanup_old_guids(self, older_than: timedelta) -> int:
        query = "DELETE FROM processed_guids WHERE processed_at < ?"
        cutoff = int(time.time() - older_than.total_seconds())
        try:
            removed = self.db.execute_update(query, (cutoff,))
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to clean up GUIDs: {e}", query=query) from e

        if removed:
            self.logger.info(f"Removed {removed} processed GUIDs older than {older_than}")
        return removed

    def close(self) -> None:
        self.db.close()
