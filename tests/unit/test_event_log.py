"""Unit tests for the bounded event log."""

import re
import time

import pytest

from gnss_diag.gps_core.event_log import EventLog

LINE_PATTERN = re.compile(r"^\[\d{2}:\d{2}:\d{2}\] .+$")


class TestEventLog:
    """Test EventLog buffering."""

    def test_line_format(self):
        log = EventLog()
        line = log.add("NMEA listener started")
        assert LINE_PATTERN.match(line)
        assert line.endswith("] NMEA listener started")
        assert log.lines() == [line]

    def test_fixed_clock(self):
        fixed = time.mktime((2024, 3, 1, 14, 3, 27, 0, 0, -1))
        log = EventLog(clock=lambda: fixed)
        assert log.add("tick") == "[14:03:27] tick"

    def test_trim_on_overflow(self):
        log = EventLog()
        for i in range(200):
            log.add(f"event {i}")
        assert len(log) == 200

        log.add("event 200")

        lines = log.lines()
        assert len(lines) == 150
        assert lines[0].endswith("event 51")
        assert lines[-1].endswith("event 200")

    def test_tail(self):
        log = EventLog()
        for i in range(5):
            log.add(str(i))
        assert [line[-1] for line in log.tail(2)] == ["3", "4"]
        assert log.tail(0) == []

    def test_clear(self):
        log = EventLog()
        log.add("x")
        log.clear()
        assert len(log) == 0

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            EventLog(max_entries=10, trim_target=11)


class TestEventLogSave:
    """Test persisting the event log."""

    def test_save_writes_lines(self, tmp_path):
        fixed = time.mktime((2024, 3, 1, 14, 3, 27, 0, 0, -1))
        log = EventLog(clock=lambda: fixed)
        log.add("first")
        log.add("émission")
        messages = []

        path = log.save(tmp_path / "logs", notify=messages.append)

        assert path == tmp_path / "logs" / "gps_log_20240301_140327.txt"
        assert path.read_text(encoding="utf-8") == "[14:03:27] first\n[14:03:27] émission\n"
        assert messages == [f"Log saved: {path}"]
        assert len(log) == 2

    def test_save_failure_notifies(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("occupied")
        log = EventLog()
        log.add("first")
        messages = []

        assert log.save(blocker, notify=messages.append) is None

        assert len(messages) == 1
        assert messages[0].startswith("Save failed: ")

    def test_save_without_notifier(self, tmp_path):
        log = EventLog()
        assert log.save(tmp_path).exists()
