"""Unit tests for sentence sources."""

import threading
import time

import pytest
import serial

from gnss_diag.gps_core.config import DiagConfig
from gnss_diag.gps_core.pipeline import NMEAPipeline
from gnss_diag.gps_core.sources import ReplaySentenceSource, SentenceSource, SerialSentenceSource
from gnss_diag.runtime import SerialMonitor
from tests.nmea_samples import GGA, GSA, RMC


def wait_until(predicate, timeout=2.0, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class MockSerial:
    """Serial port stand-in that returns queued lines, then times out."""

    def __init__(self, lines, fail_after=False):
        self._lines = list(lines)
        self._fail_after = fail_after
        self.closed = False

    def readline(self):
        if self._lines:
            return self._lines.pop(0)
        if self._fail_after:
            raise serial.SerialException("device disconnected")
        time.sleep(0.01)
        return b""

    def close(self):
        self.closed = True


class ListSource(SentenceSource):
    """Minimal synchronous source."""

    def __init__(self):
        super().__init__()
        self._running = False

    @property
    def is_running(self):
        return self._running

    def start(self):
        self._running = True
        return True

    def stop(self):
        self._running = False

    def push(self, sentence):
        self._emit(sentence)


class TestSentenceSource:
    """Test subscriber handling in the base class."""

    def test_subscribe_unsubscribe(self):
        source = ListSource()
        received = []
        source.subscribe(received.append)
        source.subscribe(received.append)
        source.push("a")
        source.unsubscribe(received.append)
        source.push("b")
        assert received == ["a"]

    def test_failing_subscriber_isolated(self):
        source = ListSource()
        received = []

        def broken(sentence):
            raise RuntimeError("nope")

        source.subscribe(broken)
        source.subscribe(received.append)
        source.push("a")
        assert received == ["a"]

    def test_context_manager(self):
        with ListSource() as source:
            assert source.is_running
        assert not source.is_running


class TestSerialSentenceSource:
    """Test SerialSentenceSource with a mock serial port."""

    def test_emits_nmea_lines_only(self):
        port = MockSerial([b"$GPGGA,1\r\n", b"noise\r\n", b"\xff$GPRMC,2\r\n", b"$GPGSA,3\r\n"])
        opened = []

        def factory(*args, **kwargs):
            opened.append((args, kwargs))
            return port

        source = SerialSentenceSource("/dev/ttyTEST", 4800, read_timeout=0.1, serial_factory=factory)
        received = []
        source.subscribe(received.append)

        assert source.start()
        try:
            assert wait_until(lambda: len(received) == 3)
        finally:
            source.stop()

        assert received == ["$GPGGA,1", "$GPRMC,2", "$GPGSA,3"]
        assert opened == [(("/dev/ttyTEST", 4800), {"timeout": 0.1})]
        assert port.closed
        assert not source.is_running

    def test_open_failure(self):
        def factory(*args, **kwargs):
            raise serial.SerialException("no such port")

        source = SerialSentenceSource("/dev/missing", serial_factory=factory)
        assert source.start() is False
        assert source.last_error == "no such port"
        assert not source.is_running

    def test_read_error_ends_loop(self):
        port = MockSerial([b"$GPGGA,1\r\n"], fail_after=True)
        source = SerialSentenceSource("/dev/ttyTEST", serial_factory=lambda *a, **k: port)

        assert source.start()
        assert wait_until(lambda: not source.is_running)
        assert source.last_error == "device disconnected"
        assert port.closed
        source.stop()

    def test_restart_after_read_error_opens_fresh_port(self):
        ports = [MockSerial([b"$GPGGA,1\r\n"], fail_after=True), MockSerial([b"$GPRMC,2\r\n"])]
        opened = []

        def factory(*args, **kwargs):
            opened.append(ports[len(opened)])
            return opened[-1]

        source = SerialSentenceSource("/dev/ttyTEST", read_timeout=0.1, serial_factory=factory)
        received = []
        source.subscribe(received.append)

        assert source.start()
        assert wait_until(lambda: not source.is_running)
        assert source.start()
        try:
            assert wait_until(lambda: "$GPRMC,2" in received)
        finally:
            source.stop()

        assert opened == ports
        assert all(port.closed for port in ports)

    def test_from_config(self):
        config = DiagConfig(serial_port="/dev/ttyAMA0", baud_rate=115200, read_timeout_s=0.25)
        opened = []

        def factory(*args, **kwargs):
            opened.append((args, kwargs))
            return MockSerial([])

        source = SerialSentenceSource.from_config(config, serial_factory=factory)
        assert (source.port, source.baudrate, source.read_timeout) == ("/dev/ttyAMA0", 115200, 0.25)

        assert source.start()
        source.stop()
        assert opened == [(("/dev/ttyAMA0", 115200), {"timeout": 0.25})]

    def test_feeds_pipeline(self):
        port = MockSerial([(GGA + "\r\n").encode("ascii"), (RMC + "\r\n").encode("ascii")])
        config = DiagConfig(publish_interval_s=0.02, worker_poll_timeout_s=0.01)
        source = SerialSentenceSource("/dev/ttyTEST", read_timeout=0.1, serial_factory=lambda *a, **k: port)

        with NMEAPipeline(config) as pipeline:
            source.subscribe(pipeline.offer)
            source.start()
            try:
                assert wait_until(lambda: pipeline.snapshot.speed.endswith("km/h"))
            finally:
                source.stop()

        assert pipeline.snapshot.altitude == "545.4 M"

    @pytest.mark.hardware
    def test_real_receiver(self):
        source = SerialSentenceSource.from_config(DiagConfig())
        received = []
        source.subscribe(received.append)
        assert source.start(), source.last_error
        try:
            assert wait_until(lambda: received, timeout=5.0)
        finally:
            source.stop()
        assert received[0].startswith("$")


class TestReplaySentenceSource:
    """Test ReplaySentenceSource."""

    def test_replay_file(self, nmea_file, nmea_burst):
        source = ReplaySentenceSource.from_file(nmea_file)
        received = []
        source.subscribe(received.append)

        assert source.start()
        assert source.wait_done(2.0)
        source.stop()

        assert received == ["garbage", *nmea_burst]
        assert source.emitted_count == len(nmea_burst) + 1

    def test_empty_replay(self):
        assert ReplaySentenceSource(["", "  \n"]).start() is False

    def test_loop_until_stopped(self):
        source = ReplaySentenceSource([GGA], interval=0.001, loop=True)
        source.start()
        try:
            assert wait_until(lambda: source.emitted_count >= 5)
        finally:
            source.stop()
        assert not source.is_running

    def test_replay_into_pipeline(self, nmea_file):
        config = DiagConfig(publish_interval_s=0.02, worker_poll_timeout_s=0.01)
        done = threading.Event()

        with NMEAPipeline(config) as pipeline:
            pipeline.publisher.add_listener(
                lambda snapshot: done.set()
                if len(snapshot.satellites) == 13 and snapshot.used_count == 5
                else None
            )
            source = ReplaySentenceSource.from_file(nmea_file)
            source.subscribe(pipeline.offer)
            source.start()
            assert done.wait(2.0)
            source.stop()

        snapshot = pipeline.snapshot
        assert snapshot.used_count == 5
        assert snapshot.hdop == "1.3"


class TestSerialMonitor:
    """Test the config-driven serial runtime."""

    def _config(self):
        return DiagConfig(
            serial_port="/dev/ttyTEST",
            baud_rate=4800,
            read_timeout_s=0.1,
            publish_interval_s=0.02,
            worker_poll_timeout_s=0.01,
        )

    def test_end_to_end(self):
        config = self._config()
        lines = [(sentence + "\r\n").encode("ascii") for sentence in (GGA, RMC, GSA)]
        opened = []

        def factory(*args, **kwargs):
            opened.append(args)
            return MockSerial(lines)

        source = SerialSentenceSource.from_config(config, serial_factory=factory)
        done = threading.Event()

        with SerialMonitor(config, source=source) as monitor:
            monitor.add_snapshot_listener(
                lambda snapshot: done.set()
                if snapshot.used_count == 5 and snapshot.speed.endswith("km/h")
                else None
            )
            assert monitor.is_running
            assert done.wait(2.0)

        assert opened == [("/dev/ttyTEST", 4800)]
        assert not monitor.is_running
        assert monitor.snapshot.altitude == "545.4 M"
        assert monitor.snapshot.hdop == "1.3"

    def test_open_failure_stops_pipeline(self, caplog):
        config = self._config()

        def factory(*args, **kwargs):
            raise serial.SerialException("no such port")

        monitor = SerialMonitor(
            config, source=SerialSentenceSource.from_config(config, serial_factory=factory)
        )
        with caplog.at_level("ERROR", logger="gnss_diag"):
            assert monitor.start() is False

        assert not monitor.pipeline.is_running
        assert "Serial receiver unavailable: no such port" in caplog.text

    def test_builds_source_from_config(self):
        monitor = SerialMonitor(self._config())
        assert monitor.source.port == "/dev/ttyTEST"
        assert monitor.source.baudrate == 4800
        assert monitor.source.read_timeout == 0.1
