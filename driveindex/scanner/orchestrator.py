"""Sequences per-volume scans and aggregates their results."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TextIO

import click

from driveindex.config import ScannerConfig
from driveindex.database import FileStore
from driveindex.scanner.progress import ProgressChannel, TelemetryReporter
from driveindex.scanner.resources import ResourceSampler
from driveindex.scanner.scanner import ScanResult, Scanner
from driveindex.scanner.volumes import (
    DiskUsage,
    VolumeProbeError,
    get_disk_usage,
    get_host_name,
    get_volume_label,
    list_volumes,
)

logger = logging.getLogger(__name__)


class VolumeNotFoundError(Exception):
    """Raised when the requested volume is not among the available ones."""


@dataclass
class RunSummary:
    volumes: list[str] = field(default_factory=list)
    results: list[ScanResult] = field(default_factory=list)
    total: int = 0
    deleted: int | None = None


def select_volumes(volumes: Sequence[str], requested: str | None) -> list[str]:
    """Restrict ``volumes`` to the one matching ``requested``.

    Matching is case-insensitive on the volume's leading identifier, so
    ``"c"``, ``"C:"`` and ``"c:\\"`` all select ``"C:\\"``, and ``"/mnt/data/"``
    selects ``"/mnt/data"``. No request selects every volume.
    """
    if requested is None or requested == "":
        return list(volumes)

    key = _volume_key(requested)
    if key:
        for volume in volumes:
            volume_key = _volume_key(volume)
            if key == volume_key or (_is_drive_letter(volume_key) and key[:1] == volume_key):
                return [volume]

    raise VolumeNotFoundError(f"Drive {requested} not found or not available.")


def _volume_key(volume: str) -> str:
    text = volume.strip().lower()
    stripped = text.rstrip("\\/").rstrip(":")
    return stripped or text[:1]


def _is_drive_letter(key: str) -> bool:
    return len(key) == 1 and key.isalpha()


class ScanOrchestrator:
    """Scans the selected volumes one at a time into a single store."""

    def __init__(
        self,
        store: FileStore,
        config: ScannerConfig | None = None,
        volume_lister: Callable[[], list[str]] | None = None,
        usage_probe: Callable[[str], DiskUsage] | None = None,
        label_probe: Callable[[str], str] | None = None,
        sampler: Callable[[], str] | None = None,
        host: str | None = None,
        stream: TextIO | None = None,
        echo: Callable[[str], None] = click.echo,
    ):
        self.store = store
        self.config = config or ScannerConfig()
        self.scanner = Scanner(store, commit_interval=self.config.commit_interval)
        self.volume_lister = volume_lister or list_volumes
        self.usage_probe = usage_probe or get_disk_usage
        self.label_probe = label_probe or get_volume_label
        self.sampler = sampler or ResourceSampler()
        self.host = host or get_host_name()
        self.stream = stream
        self.echo = echo

    def run(self, drive: str | None = None, delete_all: bool = False) -> RunSummary:
        volumes = self.volume_lister()
        self.echo("Available drives: " + (", ".join(volumes) if volumes else "(none found)"))

        summary = RunSummary(volumes=select_volumes(volumes, drive))

        if delete_all:
            summary.deleted = self.store.delete_all()
            self.echo(f"All data deleted from the database ({summary.deleted:,} rows).")

        for volume in summary.volumes:
            result = self.scan_volume(volume)
            summary.results.append(result)
            summary.total += result.total

        self.echo(
            f"\nAll drives processed ({len(summary.volumes)}). "
            f"Total files processed: {summary.total:,}"
        )
        return summary

    def scan_volume(self, volume: str) -> ScanResult:
        self._show_usage(volume)
        label = self.label_probe(volume)
        self.echo(f"Walking files: {self.host}, {label}, {volume}")

        channel = ProgressChannel(
            maxsize=self.config.progress_buffer,
            put_timeout=self.config.emit_timeout,
        )
        reporter = TelemetryReporter(
            channel,
            sampler=self.sampler,
            interval=self.config.tick_interval,
            stream=self.stream,
        )
        reporter.start()
        try:
            result = self.scanner.scan(volume, self.host, label, progress=channel)
        finally:
            reporter.stop(timeout=self.config.grace_period)

        if result.error is not None:
            logger.error("Scan of %s failed: %s", volume, result.error)
            self.echo(f"Finished walking with error: {result.error}")
        else:
            self.echo(
                "Finished walking files without critical errors. "
                f"Files processed: {result.total:,}"
            )
        return result

    def _show_usage(self, volume: str) -> None:
        try:
            usage = self.usage_probe(volume)
        except VolumeProbeError as e:
            logger.warning("%s", e)
            self.echo(f"Error getting disk usage for {volume}: {e}")
            return
        self.echo(
            f"Disk usage for {volume}: Total: {usage.total / 1e9:.2f} GB, "
            f"Used: {usage.used / 1e9:.2f} GB, Free: {usage.free / 1e9:.2f} GB"
        )
