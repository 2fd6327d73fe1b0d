"""Tests for volume probes and resource sampling."""

import subprocess
from collections import namedtuple
from types import SimpleNamespace

import pytest

from driveindex.scanner import resources, volumes
from driveindex.scanner.resources import ResourceSampler
from driveindex.scanner.volumes import (
    DiskUsage,
    VolumeProbeError,
    get_disk_usage,
    get_host_name,
    get_volume_label,
    list_volumes,
)

Partition = namedtuple("Partition", ["device", "mountpoint", "fstype", "opts"])
Usage = namedtuple("Usage", ["total", "used", "free", "percent"])
IOCounters = namedtuple("IOCounters", ["read_bytes", "write_bytes"])


class TestListVolumes:
    """Tests for list_volumes function."""

    def test_returns_mount_points_in_order_without_duplicates(self, monkeypatch):
        partitions = [
            Partition("/dev/sda1", "/", "ext4", "rw"),
            Partition("/dev/sdb1", "/mnt/data", "ext4", "rw"),
            Partition("/dev/sda1", "/", "ext4", "rw"),
        ]
        monkeypatch.setattr(volumes.psutil, "disk_partitions", lambda **kwargs: partitions)

        assert list_volumes() == ["/", "/mnt/data"]

    def test_empty(self, monkeypatch):
        monkeypatch.setattr(volumes.psutil, "disk_partitions", lambda **kwargs: [])

        assert not list_volumes()


class TestDiskUsage:
    """Tests for get_disk_usage function."""

    def test_reports_usage(self, monkeypatch):
        monkeypatch.setattr(volumes.psutil, "disk_usage", lambda path: Usage(100, 40, 60, 40.0))

        assert get_disk_usage("/") == DiskUsage(total=100, used=40, free=60)

    def test_failure_raises_probe_error(self, monkeypatch):
        def fail(path: str):
            raise FileNotFoundError(path)

        monkeypatch.setattr(volumes.psutil, "disk_usage", fail)

        with pytest.raises(VolumeProbeError):
            get_disk_usage("/missing")


class TestVolumeLabel:
    """Tests for get_volume_label function."""

    def _fake_run(self, outputs: dict[str, tuple[int, str]]):
        def run(args, **kwargs):
            returncode, stdout = outputs[args[0]]
            return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr="")

        return run

    def test_reads_label_from_lsblk(self, monkeypatch):
        monkeypatch.setattr(volumes.sys, "platform", "linux")
        monkeypatch.setattr(
            volumes.subprocess,
            "run",
            self._fake_run({"findmnt": (0, "/dev/sdb1\n"), "lsblk": (0, "BACKUP\n")}),
        )

        assert get_volume_label("/mnt/backup") == "BACKUP"

    def test_unlabelled_volume(self, monkeypatch):
        monkeypatch.setattr(volumes.sys, "platform", "linux")
        monkeypatch.setattr(
            volumes.subprocess,
            "run",
            self._fake_run({"findmnt": (0, "/dev/sdb1\n"), "lsblk": (0, "\n")}),
        )

        assert get_volume_label("/mnt/backup") == ""

    def test_missing_mount_returns_empty(self, monkeypatch):
        monkeypatch.setattr(volumes.sys, "platform", "linux")
        monkeypatch.setattr(volumes.subprocess, "run", self._fake_run({"findmnt": (1, "")}))

        assert get_volume_label("/nowhere") == ""

    def test_missing_tool_returns_empty(self, monkeypatch):
        def run(args, **kwargs):
            raise FileNotFoundError(args[0])

        monkeypatch.setattr(volumes.sys, "platform", "linux")
        monkeypatch.setattr(volumes.subprocess, "run", run)

        assert get_volume_label("/") == ""


class TestHostName:
    """Tests for get_host_name function."""

    def test_returns_hostname(self, monkeypatch):
        monkeypatch.setattr(volumes.socket, "gethostname", lambda: "workstation")

        assert get_host_name() == "workstation"

    def test_failure_returns_unknown(self, monkeypatch):
        def fail() -> str:
            raise OSError("no hostname")

        monkeypatch.setattr(volumes.socket, "gethostname", fail)

        assert get_host_name() == "Unknown"


class TestResourceSampler:
    """Tests for ResourceSampler class."""

    def test_cpu_only(self, monkeypatch):
        monkeypatch.setattr(resources.psutil, "cpu_percent", lambda interval=None: 12.5)

        assert ResourceSampler(include_disk=False)() == "CPU Usage: 12.5%"

    def test_disk_throughput_from_counter_deltas(self, monkeypatch):
        counters = iter([IOCounters(0, 0), IOCounters(2048, 1024 * 1024)])
        clock = iter([10.0, 11.0])
        monkeypatch.setattr(resources.psutil, "cpu_percent", lambda interval=None: 50.0)
        monkeypatch.setattr(resources.psutil, "disk_io_counters", lambda: next(counters))
        monkeypatch.setattr(resources, "time", SimpleNamespace(monotonic=lambda: next(clock)))
        sampler = ResourceSampler()

        assert sampler() == "CPU Usage: 50.0% | Disk: N/A"
        assert sampler() == "CPU Usage: 50.0% | Disk: r 2.0 KB/s w 1.0 MB/s"

    def test_missing_disk_counters(self, monkeypatch):
        monkeypatch.setattr(resources.psutil, "cpu_percent", lambda interval=None: 0.0)
        monkeypatch.setattr(resources.psutil, "disk_io_counters", lambda: None)

        assert ResourceSampler()() == "CPU Usage: 0.0% | Disk: N/A"
