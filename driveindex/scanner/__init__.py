"""Scanner module for volume traversal and progress reporting."""

from .filesystem import EntryInfo, ScanStartError, VisitAction, walk_tree
from .orchestrator import RunSummary, ScanOrchestrator, VolumeNotFoundError, select_volumes
from .progress import ProgressChannel, ReporterState, TelemetryReporter
from .resources import ResourceSampler
from .scanner import ScanResult, Scanner
from .volumes import (
    DiskUsage,
    VolumeProbeError,
    get_disk_usage,
    get_host_name,
    get_volume_label,
    list_volumes,
)

__all__ = [
    "Scanner",
    "ScanResult",
    "ScanStartError",
    "ScanOrchestrator",
    "RunSummary",
    "VolumeNotFoundError",
    "select_volumes",
    "walk_tree",
    "EntryInfo",
    "VisitAction",
    "ProgressChannel",
    "TelemetryReporter",
    "ReporterState",
    "ResourceSampler",
    "DiskUsage",
    "VolumeProbeError",
    "list_volumes",
    "get_host_name",
    "get_disk_usage",
    "get_volume_label",
]
