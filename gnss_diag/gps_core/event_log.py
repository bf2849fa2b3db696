"""Bounded, human-readable event log with on-demand persistence.

Lines look like ``[14:03:27] NMEA listener started``. The buffer keeps at
most ``max_entries`` lines; on overflow the oldest lines are dropped down
to ``trim_target``. Saving writes the buffer verbatim, one line per entry.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..core.logging_utils import get_module_logger
from .constants import (
    EVENT_LOG_FILE_PREFIX,
    EVENT_LOG_MAX_ENTRIES,
    EVENT_LOG_TIME_FORMAT,
    EVENT_LOG_TRIM_TARGET,
)

logger = get_module_logger(__name__)

Notifier = Callable[[str], None]
Clock = Callable[[], float]


class EventLog:
    """Thread-safe ring of timestamped event lines."""

    def __init__(
        self,
        max_entries: int = EVENT_LOG_MAX_ENTRIES,
        trim_target: int = EVENT_LOG_TRIM_TARGET,
        *,
        clock: Clock = time.time,
    ):
        if trim_target > max_entries:
            raise ValueError("trim_target must not exceed max_entries")
        self.max_entries = max_entries
        self.trim_target = trim_target
        self._clock = clock
        self._lines: List[str] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def _timestamp(self) -> str:
        return time.strftime(EVENT_LOG_TIME_FORMAT, time.localtime(self._clock()))

    def add(self, event: str) -> str:
        """Append an event, returning the formatted line."""
        line = f"[{self._timestamp()}] {event}"
        with self._lock:
            self._lines.append(line)
            if len(self._lines) > self.max_entries:
                del self._lines[: len(self._lines) - self.trim_target]
        logger.debug("%s", line)
        return line

    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def tail(self, count: int) -> List[str]:
        with self._lock:
            return self._lines[-count:] if count > 0 else []

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def save(self, directory: Path, notify: Optional[Notifier] = None) -> Optional[Path]:
        """Write the buffer to ``gps_log_YYYYMMDD_HHMMSS.txt`` in ``directory``.

        Returns the written path, or None on failure. ``notify`` receives a
        single user-facing message either way; the buffer is not modified.
        """
        stamp = time.strftime("%Y%m%d_%H%M%S", time.localtime(self._clock()))
        path = Path(directory) / f"{EVENT_LOG_FILE_PREFIX}_{stamp}.txt"
        lines = self.lines()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8", newline="\n") as handle:
                for line in lines:
                    handle.write(line + "\n")
        except OSError as exc:
            logger.error("Failed to save event log to %s: %s", path, exc)
            if notify:
                notify(f"Save failed: {exc}")
            return None

        logger.info("Saved %d event log lines to %s", len(lines), path)
        if notify:
            notify(f"Log saved: {path}")
        return path


__all__ = ["EventLog"]
