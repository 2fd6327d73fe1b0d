"""Data models for the database."""

from dataclasses import dataclass


@dataclass
class FileRecord:
    """One filesystem entry discovered during a walk.

    The natural key is ``(path, host, volume_label)``; directories are
    recorded with ``size = 0``.
    """

    path: str
    host: str
    volume_label: str
    size: int = 0
    id: int | None = None


@dataclass
class VolumeSummary:
    """Row count and byte total for one host/volume pair."""

    host: str
    volume_label: str
    files: int
    total_bytes: int
