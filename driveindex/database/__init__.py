"""Database module for driveindex."""

from .connection import Database, StoreOpenError
from .models import FileRecord, VolumeSummary
from .schema import create_schema
from .store import FileStore

__all__ = [
    "Database",
    "StoreOpenError",
    "FileStore",
    "create_schema",
    "FileRecord",
    "VolumeSummary",
]
