"""
FeedNote Database Schema
========================

SQLite schema for the durable entry cache:
- latest_published: per-feed watermark (newest delivered publication time)
- processed_guids: GUIDs already delivered, with the time they were marked
"""

import sqlite3
import logging

logger = logging.getLogger(__name__)

EXPECTED_TABLES = {"latest_published", "processed_guids"}


class DatabaseSchema:
    """Schema manager for the FeedNote cache database.

    Works on a caller-supplied connection so the same code path serves
    file databases and ``:memory:`` databases.
    """

    def create_tables(self, conn: sqlite3.Connection) -> None:
        """Create all cache tables and indexes if they do not exist."""
        self._create_latest_published_table(conn)
        self._create_processed_guids_table(conn)
        self._create_indexes(conn)

        conn.commit()
        logger.info("Cache schema ready")

    def _create_latest_published_table(self, conn: sqlite3.Connection) -> None:
        """Create the per-feed watermark table."""
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS latest_published (
                rss_url TEXT PRIMARY KEY,
                published_at TEXT NOT NULL
            )
        """
        )

    def _create_processed_guids_table(self, conn: sqlite3.Connection) -> None:
        """Create the delivered-GUID table. processed_at is unix seconds."""
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS processed_guids (
                guid TEXT PRIMARY KEY,
                processed_at INTEGER NOT NULL
            )
        """
        )

    def _create_indexes(self, conn: sqlite3.Connection) -> None:
        """Create indexes used by the retention sweep."""
        indexes = [
            "CREATE INDEX IF NOT EXISTS idx_processed_guids_processed_at "
            "ON processed_guids(processed_at)",
        ]

        for index_sql in indexes:
            conn.execute(index_sql)

    def verify_schema(self, conn: sqlite3.Connection) -> bool:
        """Verify that every cache table exists."""
        try:
            cursor = conn.execute(
                """
                SELECT name FROM sqlite_master
                WHERE type='table' AND name NOT LIKE 'sqlite_%'
                ORDER BY name
            """
            )
            tables = {row[0] for row in cursor.fetchall()}

            missing = EXPECTED_TABLES - tables
            if missing:
                logger.error(f"Missing cache tables: {sorted(missing)}")
                return False

            logger.debug("Cache schema verification passed")
            return True

        except sqlite3.Error as e:
            logger.error(f"Schema verification failed: {e}")
            return False
