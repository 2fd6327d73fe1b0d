"""Tests for progress channel and telemetry reporter."""

import io
import queue
import threading
import time

import pytest

from driveindex.scanner.progress import (
    UNAVAILABLE,
    ProgressChannel,
    ReporterState,
    TelemetryReporter,
)


class TestProgressChannel:
    """Tests for ProgressChannel class."""

    def test_get_returns_emitted_counts_then_none(self):
        channel = ProgressChannel()
        channel.emit(1)
        channel.emit(2)
        channel.close()

        assert channel.get(timeout=0) == 1
        assert channel.get(timeout=0) == 2
        assert channel.get(timeout=0) is None

    def test_get_times_out_when_empty(self):
        with pytest.raises(queue.Empty):
            ProgressChannel().get(timeout=0.01)

    def test_emit_after_close_raises(self):
        channel = ProgressChannel()
        channel.close()

        with pytest.raises(RuntimeError):
            channel.emit(1)

    def test_full_channel_drops_update_after_timeout(self):
        channel = ProgressChannel(maxsize=1, put_timeout=0.01)

        assert channel.emit(1) is True
        assert channel.emit(2) is False
        assert channel.drain() == [1]

    def test_close_is_idempotent(self):
        channel = ProgressChannel()
        channel.close()
        channel.close()

        assert channel.get(timeout=0) is None
        with pytest.raises(queue.Empty):
            channel.get(timeout=0)


class TestTelemetryReporter:
    """Tests for TelemetryReporter class."""

    def test_renders_final_line_on_close(self):
        channel = ProgressChannel()
        stream = io.StringIO()
        reporter = TelemetryReporter(channel, sampler=lambda: "CPU Usage: 5.0%", stream=stream)

        assert reporter.state is ReporterState.IDLE
        reporter.start()
        channel.emit(1234)
        channel.close()
        reporter.join(timeout=2)

        assert reporter.state is ReporterState.STOPPED
        assert stream.getvalue().endswith("\r1,234 processed | CPU Usage: 5.0%\n")
        assert reporter.last_count == 1234

    def test_renders_on_each_tick(self):
        channel = ProgressChannel()
        stream = io.StringIO()
        reporter = TelemetryReporter(
            channel, sampler=lambda: "ok", interval=0.05, stream=stream, poll_interval=0.01
        )
        reporter.start()
        channel.emit(7)
        time.sleep(0.3)
        reporter.stop(timeout=1)

        assert reporter.lines_rendered >= 2
        assert "7 processed | ok" in stream.getvalue()
        assert reporter.state is ReporterState.STOPPED

    def test_rendering_is_decoupled_from_throughput(self):
        channel = ProgressChannel(maxsize=100)
        stream = io.StringIO()
        reporter = TelemetryReporter(channel, sampler=lambda: "ok", interval=1.0, stream=stream)
        reporter.start()

        for count in range(1, 10_001):
            channel.emit(count)
        channel.close()
        reporter.join(timeout=5)

        # ~1 line per elapsed second plus the final line, never one per record
        assert reporter.lines_rendered <= 3
        assert stream.getvalue().endswith("10,000 processed | ok\n")

    def test_sampler_failure_renders_unavailable(self):
        def broken() -> str:
            raise OSError("no counters")

        channel = ProgressChannel()
        stream = io.StringIO()
        reporter = TelemetryReporter(channel, sampler=broken, stream=stream)
        reporter.start()
        channel.close()
        reporter.join(timeout=2)

        assert f"0 processed | {UNAVAILABLE}" in stream.getvalue()

    def test_stop_without_close(self):
        channel = ProgressChannel()
        reporter = TelemetryReporter(channel, sampler=lambda: "ok", stream=io.StringIO())
        reporter.start()
        reporter.stop(timeout=2)

        assert not reporter.is_alive()
        assert reporter.state is ReporterState.STOPPED

    def test_does_not_block_producer(self):
        channel = ProgressChannel(maxsize=10)
        reporter = TelemetryReporter(channel, sampler=lambda: "ok", stream=io.StringIO())
        reporter.start()
        done = threading.Event()

        def produce() -> None:
            for count in range(1, 1001):
                channel.emit(count)
            channel.close()
            done.set()

        threading.Thread(target=produce).start()

        assert done.wait(timeout=5)
        reporter.join(timeout=2)
        assert reporter.last_count == 1000

    def test_stop_after_natural_finish_reports_stopped(self):
        channel = ProgressChannel()
        reporter = TelemetryReporter(channel, sampler=lambda: "ok", stream=io.StringIO())
        reporter.start()
        channel.close()
        reporter.join(timeout=2)
        # stale state as seen by a stop() racing the thread's exit
        reporter.state = ReporterState.RUNNING

        reporter.stop(timeout=1)

        assert reporter.state is ReporterState.STOPPED

    def test_stop_before_start_stays_idle(self):
        reporter = TelemetryReporter(ProgressChannel(), sampler=lambda: "ok", stream=io.StringIO())

        reporter.stop()

        assert reporter.state is ReporterState.IDLE
