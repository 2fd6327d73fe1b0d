"""Main scanner implementation."""

import logging
import os
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from driveindex.database import FileRecord, FileStore
from driveindex.scanner.filesystem import EntryInfo, ScanStartError, VisitAction, walk_tree
from driveindex.scanner.progress import ProgressChannel

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of one volume's scan."""

    root: str
    total: int = 0
    skipped_entries: int = 0
    failed_writes: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Scanner:
    """Walks a volume and upserts one record per entry into the store."""

    def __init__(self, store: FileStore, commit_interval: int = 1000):
        self.store = store
        self.commit_interval = commit_interval

    def scan(
        self,
        root: str | Path,
        host: str,
        volume_label: str,
        progress: ProgressChannel | None = None,
    ) -> ScanResult:
        result = ScanResult(root=str(root))

        try:
            self.store.check_writable()
        except sqlite3.Error as e:
            result.error = ScanStartError(f"Cannot prepare insert statement: {e}")
        else:
            self._walk(root, host, volume_label, progress, result)

        if progress is not None:
            progress.emit(result.total)
            progress.close()
        return result

    def _walk(
        self,
        root: str | Path,
        host: str,
        volume_label: str,
        progress: ProgressChannel | None,
        result: ScanResult,
    ) -> None:
        # Upserted but not yet committed; replayed if a commit is rolled back
        pending: list[FileRecord] = []

        def visit(entry: EntryInfo) -> VisitAction:
            record = FileRecord(
                path=storable_path(entry.path),
                host=host,
                volume_label=volume_label,
                size=0 if entry.is_dir else entry.size,
            )
            try:
                self.store.upsert(record)
            except (sqlite3.Error, UnicodeError) as e:
                logger.error("Failed to insert or update %s: %s", record.path, e)
                result.failed_writes += 1
                return VisitAction.CONTINUE

            pending.append(record)
            result.total += 1
            if len(pending) >= self.commit_interval:
                self._commit(pending, result)
            if progress is not None:
                progress.emit(result.total)
            return VisitAction.CONTINUE

        def skip(_path: str, _error: OSError) -> None:
            result.skipped_entries += 1

        try:
            walk_tree(root, visit, on_error=skip)
        except ScanStartError as e:
            result.error = e
        finally:
            if not self._commit(pending, result):
                logger.error("Discarding %d records that could not be committed", len(pending))
                self._rollback()
                result.total -= len(pending)
                result.failed_writes += len(pending)
                pending.clear()

    def _commit(self, pending: list[FileRecord], result: ScanResult) -> bool:
        """Commit the open batch, keeping it for the next attempt on failure."""
        try:
            self.store.commit()
        except sqlite3.Error as e:
            logger.error("Failed to commit %d scanned records: %s", len(pending), e)
            self._rollback()
            self._replay(pending, result)
            return False
        pending.clear()
        return True

    def _rollback(self) -> None:
        try:
            self.store.rollback()
        except sqlite3.Error as e:
            logger.error("Failed to roll back scanned records: %s", e)

    def _replay(self, pending: list[FileRecord], result: ScanResult) -> None:
        kept: list[FileRecord] = []
        for record in pending:
            try:
                self.store.upsert(record)
            except (sqlite3.Error, UnicodeError) as e:
                logger.error("Failed to insert or update %s: %s", record.path, e)
                result.total -= 1
                result.failed_writes += 1
            else:
                kept.append(record)
        pending[:] = kept


def storable_path(path: str) -> str:
    """Return ``path`` as valid UTF-8 text.

    Undecodable bytes in file names surface as lone surrogates, which SQLite
    cannot store; they are kept as ``\\xNN`` escapes instead.
    """
    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        return os.fsencode(path).decode("utf-8", "backslashreplace")
    return path
