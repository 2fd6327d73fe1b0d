"""Volume enumeration and metadata probes."""

import ctypes
import logging
import socket
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

import psutil

logger = logging.getLogger(__name__)


class VolumeProbeError(Exception):
    """Raised when volume metadata cannot be determined."""


@dataclass
class DiskUsage:
    total: int
    used: int
    free: int


def list_volumes() -> list[str]:
    """Return the mount points of all physical volumes, in platform order."""
    volumes: list[str] = []
    for partition in psutil.disk_partitions(all=False):
        if partition.mountpoint and partition.mountpoint not in volumes:
            volumes.append(partition.mountpoint)
    return volumes


def get_host_name() -> str:
    try:
        name = socket.gethostname()
    except OSError:
        return "Unknown"
    return name or "Unknown"


def get_disk_usage(root: str | Path) -> DiskUsage:
    try:
        usage = psutil.disk_usage(str(root))
    except OSError as e:
        raise VolumeProbeError(f"Could not read disk usage for {root}: {e}") from e
    return DiskUsage(total=usage.total, used=usage.used, free=usage.free)


def get_volume_label(root: str | Path) -> str:
    """Get the human-readable label of the volume mounted at ``root``.

    Returns an empty string when the volume has no label or it cannot be read.
    """
    try:
        if sys.platform == "win32":
            return _get_windows_label(str(root))
        device = _get_device_for_mount(str(root))
        return _get_label_for_device(device)
    except VolumeProbeError as e:
        logger.debug("No volume label for %s: %s", root, e)
        return ""


def _get_windows_label(root: str) -> str:
    volume_name = ctypes.create_unicode_buffer(261)
    ok = ctypes.windll.kernel32.GetVolumeInformationW(  # type: ignore[attr-defined]
        ctypes.c_wchar_p(root[:3]),
        volume_name,
        len(volume_name),
        None,
        None,
        None,
        None,
        0,
    )
    if not ok:
        raise VolumeProbeError(f"GetVolumeInformationW failed for {root}")
    return volume_name.value


def _run(args: list[str]) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(args, capture_output=True, text=True, check=False)
    except OSError as e:
        raise VolumeProbeError(f"Could not run {args[0]}: {e}") from e


def _get_device_for_mount(path: str) -> str:
    result = _run(["findmnt", "-n", "-o", "SOURCE", "-T", path])
    if result.returncode != 0:
        raise VolumeProbeError(f"Could not find mount point for path: {path}")

    device = result.stdout.strip()
    if not device:
        raise VolumeProbeError(f"No device found for path: {path}")

    return device


def _get_label_for_device(device: str) -> str:
    result = _run(["lsblk", "-n", "-o", "LABEL", device])
    if result.returncode != 0:
        raise VolumeProbeError(f"Could not get label for device: {device}")

    lines = result.stdout.strip().splitlines()
    return lines[0].strip() if lines else ""
