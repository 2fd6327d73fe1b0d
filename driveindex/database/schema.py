"""Database schema definition."""

import logging
import sqlite3

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
-- File inventory, accumulated across runs
CREATE TABLE IF NOT EXISTS files (
    id INTEGER PRIMARY KEY,
    path TEXT NOT NULL,
    host TEXT NOT NULL,
    volume_label TEXT NOT NULL DEFAULT '',
    size INTEGER NOT NULL DEFAULT 0
);

-- Natural key, target of the scanner's upsert
CREATE UNIQUE INDEX IF NOT EXISTS idx_files_natural_key
    ON files(path, host, volume_label);

-- Index for per-volume summaries
CREATE INDEX IF NOT EXISTS idx_files_host_volume ON files(host, volume_label);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create schema if absent and run migrations. Never drops existing data."""
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='files'")
    files_exists = cursor.fetchone() is not None

    if files_exists:
        migrate_deduplicate_natural_key(conn)

    conn.executescript(SCHEMA_SQL)
    conn.commit()


def migrate_deduplicate_natural_key(conn: sqlite3.Connection) -> None:
    """Collapse duplicate rows left by stores created without the natural-key index.

    The newest row (highest id) of each ``(path, host, volume_label)`` group
    is kept so the unique index can be built.
    """
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' AND name='idx_files_natural_key'"
    )
    if cursor.fetchone() is not None:
        return

    cursor = conn.execute(
        """
        DELETE FROM files
        WHERE id NOT IN (
            SELECT MAX(id) FROM files GROUP BY path, host, volume_label
        )
        """
    )
    if cursor.rowcount > 0:
        logger.warning("Removed %d duplicate rows before adding the natural key index", cursor.rowcount)
    conn.commit()
