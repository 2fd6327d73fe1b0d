"""Progress channel and telemetry reporting for a running scan."""

import logging
import queue
import sys
import threading
import time
from collections.abc import Callable
from enum import Enum
from typing import TextIO

logger = logging.getLogger(__name__)

UNAVAILABLE = "resources unavailable"

_CLOSED = object()


class ProgressChannel:
    """Bounded queue of cumulative record counts, written by one scanner.

    ``emit`` blocks while the queue is full, but for at most ``put_timeout``
    seconds; a count that still does not fit is dropped so a stalled reader
    can never deadlock the scanner.
    """

    def __init__(self, maxsize: int = 100, put_timeout: float | None = 5.0):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self.put_timeout = put_timeout
        self.closed = False

    def emit(self, count: int) -> bool:
        if self.closed:
            raise RuntimeError("emit on a closed progress channel")
        return self._put(count)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._put(_CLOSED)

    def get(self, timeout: float | None = None) -> int | None:
        """Return the next count, or None once the channel is closed.

        Raises ``queue.Empty`` if nothing arrives within ``timeout``.
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            return None
        return item

    def drain(self) -> list[int]:
        """Return every count currently queued, without blocking."""
        counts: list[int] = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return counts
            if item is not _CLOSED:
                counts.append(item)

    def _put(self, item: object) -> bool:
        try:
            self._queue.put(item, timeout=self.put_timeout)
        except queue.Full:
            logger.debug("Progress channel full, dropping update")
            return False
        return True


class ReporterState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class TelemetryReporter(threading.Thread):
    """Renders a status line once per tick while a scanner fills a channel.

    Channel receives only update the last known count; rendering is driven
    by the timer alone, so its rate does not depend on scan throughput.
    """

    def __init__(
        self,
        channel: ProgressChannel,
        sampler: Callable[[], str],
        interval: float = 1.0,
        stream: TextIO | None = None,
        poll_interval: float = 0.1,
    ):
        super().__init__(name="telemetry-reporter", daemon=True)
        self.channel = channel
        self.sampler = sampler
        self.interval = interval
        self.stream = stream if stream is not None else sys.stderr
        self.poll_interval = poll_interval
        self.state = ReporterState.IDLE
        self.last_count = 0
        self.lines_rendered = 0
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()

    def start(self) -> None:
        with self._state_lock:
            self.state = ReporterState.RUNNING
        super().start()

    def stop(self, timeout: float | None = None) -> None:
        with self._state_lock:
            if self.state is ReporterState.RUNNING:
                self.state = ReporterState.STOPPING
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)
        if self.ident is not None and not self.is_alive():
            with self._state_lock:
                self.state = ReporterState.STOPPED

    def run(self) -> None:
        try:
            self._loop()
        finally:
            with self._state_lock:
                self.state = ReporterState.STOPPED

    def _loop(self) -> None:
        next_tick = time.monotonic() + self.interval
        while True:
            wait = min(max(next_tick - time.monotonic(), 0.0), self.poll_interval)
            try:
                count = self.channel.get(timeout=wait)
            except queue.Empty:
                # Pending counts are consumed before the stop signal is honoured
                if self._stop_event.is_set():
                    return
            else:
                if count is None:
                    self._render(final=True)
                    return
                self.last_count = count

            now = time.monotonic()
            if now >= next_tick:
                self._render()
                next_tick = now + self.interval

    def _render(self, final: bool = False) -> None:
        line = f"\r{self.last_count:,} processed | {self._sample()}"
        self.stream.write(line + ("\n" if final else "  "))
        self.stream.flush()
        self.lines_rendered += 1

    def _sample(self) -> str:
        try:
            return self.sampler()
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.debug("Resource sampler failed: %s", e)
            return UNAVAILABLE
