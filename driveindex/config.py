"""Configuration module for driveindex."""

from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    return Path(__file__).parent.parent


@dataclass
class ScannerConfig:
    tick_interval: float = 1.0
    progress_buffer: int = 100
    emit_timeout: float = 5.0
    grace_period: float = 0.5
    commit_interval: int = 1000


@dataclass
class Config:
    database_path: Path = field(default_factory=lambda: _get_project_root() / "data" / "files.db")
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
