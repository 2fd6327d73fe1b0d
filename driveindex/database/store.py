"""File record persistence."""

from .connection import Database
from .models import FileRecord, VolumeSummary

UPSERT_SQL = """
INSERT INTO files (path, host, volume_label, size) VALUES (?, ?, ?, ?)
ON CONFLICT(path, host, volume_label) DO UPDATE SET size = excluded.size
"""


class FileStore:
    """Idempotent writer and reader for the ``files`` table."""

    def __init__(self, db: Database):
        self.db = db

    def check_writable(self) -> None:
        """Compile the upsert statement without running it.

        Raises ``sqlite3.Error`` when the statement cannot be prepared.
        """
        self.db.conn.execute("EXPLAIN " + UPSERT_SQL, ("", "", "", 0)).fetchall()

    def upsert(self, record: FileRecord) -> None:
        self.db.conn.execute(
            UPSERT_SQL,
            (record.path, record.host, record.volume_label, record.size),
        )

    def commit(self) -> None:
        self.db.conn.commit()

    def rollback(self) -> None:
        self.db.conn.rollback()

    def delete_all(self) -> int:
        cursor = self.db.conn.execute("DELETE FROM files")
        self.db.conn.commit()
        return cursor.rowcount

    def count(self, host: str | None = None, volume_label: str | None = None) -> int:
        query = "SELECT COUNT(*) FROM files WHERE 1 = 1"
        params: list[str] = []
        if host is not None:
            query += " AND host = ?"
            params.append(host)
        if volume_label is not None:
            query += " AND volume_label = ?"
            params.append(volume_label)
        return self.db.conn.execute(query, params).fetchone()[0]

    def get(self, path: str, host: str, volume_label: str) -> FileRecord | None:
        row = self.db.conn.execute(
            """
            SELECT id, path, host, volume_label, size FROM files
            WHERE path = ? AND host = ? AND volume_label = ?
            """,
            (path, host, volume_label),
        ).fetchone()
        if row is None:
            return None
        return FileRecord(
            id=row["id"],
            path=row["path"],
            host=row["host"],
            volume_label=row["volume_label"],
            size=row["size"],
        )

    def summary(self) -> list[VolumeSummary]:
        rows = self.db.conn.execute(
            """
            SELECT host, volume_label, COUNT(*) AS files,
                   COALESCE(SUM(size), 0) AS total_bytes
            FROM files
            GROUP BY host, volume_label
            ORDER BY host, volume_label
            """
        ).fetchall()
        return [
            VolumeSummary(
                host=row["host"],
                volume_label=row["volume_label"],
                files=row["files"],
                total_bytes=row["total_bytes"],
            )
            for row in rows
        ]
