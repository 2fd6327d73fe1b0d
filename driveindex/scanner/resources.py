"""Host resource sampling for the status line."""

import time

import psutil


class ResourceSampler:
    """Formats CPU utilisation and disk throughput since the previous call."""

    def __init__(self, include_disk: bool = True):
        self.include_disk = include_disk
        self._last_io = None
        self._last_time: float | None = None
        # The first cpu_percent(None) call only primes the counters
        psutil.cpu_percent(interval=None)

    def __call__(self) -> str:
        parts = [f"CPU Usage: {psutil.cpu_percent(interval=None):.1f}%"]
        if self.include_disk:
            parts.append(self._disk_throughput())
        return " | ".join(parts)

    def _disk_throughput(self) -> str:
        counters = psutil.disk_io_counters()
        now = time.monotonic()
        if counters is None:
            return "Disk: N/A"

        previous, previous_time = self._last_io, self._last_time
        self._last_io, self._last_time = counters, now
        if previous is None or previous_time is None or now <= previous_time:
            return "Disk: N/A"

        elapsed = now - previous_time
        read_rate = (counters.read_bytes - previous.read_bytes) / elapsed
        write_rate = (counters.write_bytes - previous.write_bytes) / elapsed
        return f"Disk: r {_format_rate(read_rate)} w {_format_rate(write_rate)}"


def _format_rate(bytes_per_second: float) -> str:
    rate = max(bytes_per_second, 0.0)
    for unit in ["B/s", "KB/s", "MB/s", "GB/s"]:
        if rate < 1024:
            return f"{rate:.1f} {unit}"
        rate /= 1024
    return f"{rate:.1f} TB/s"
