"""Replays recorded NMEA lines as if they came from a receiver."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable, List, Optional

from ...core.logging_utils import get_module_logger
from .base_source import SentenceSource

logger = get_module_logger(__name__)


class ReplaySentenceSource(SentenceSource):
    """Emits a fixed sequence of sentences on a background thread.

    ``interval`` is the pause between sentences; ``loop`` restarts from the
    first sentence when the end is reached.
    """

    def __init__(self, sentences: Iterable[str], interval: float = 0.0, loop: bool = False):
        super().__init__()
        self._sentences: List[str] = [s.strip() for s in sentences if s and s.strip()]
        self.interval = interval
        self.loop = loop
        self._stop = threading.Event()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._emitted = 0

    @classmethod
    def from_file(cls, path: Path, interval: float = 0.0, loop: bool = False) -> "ReplaySentenceSource":
        with Path(path).open("r", encoding="ascii", errors="ignore") as handle:
            return cls(handle.readlines(), interval=interval, loop=loop)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def emitted_count(self) -> int:
        return self._emitted

    def start(self) -> bool:
        if self.is_running:
            return True
        if not self._sentences:
            logger.warning("Nothing to replay")
            return False
        self._stop.clear()
        self._done.clear()
        self._thread = threading.Thread(target=self._run, name="ReplaySource", daemon=True)
        self._thread.start()
        logger.info("Replaying %d sentences", len(self._sentences))
        return True

    def stop(self) -> None:
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread and thread is not threading.current_thread():
            thread.join(timeout=2.0)

    def wait_done(self, timeout: Optional[float] = None) -> bool:
        """Block until a non-looping replay has emitted everything."""
        return self._done.wait(timeout)

    def _run(self) -> None:
        try:
            while not self._stop.is_set():
                for sentence in self._sentences:
                    if self._stop.is_set():
                        return
                    self._emit(sentence)
                    self._emitted += 1
                    if self.interval and self._stop.wait(self.interval):
                        return
                if not self.loop:
                    return
        finally:
            self._done.set()


__all__ = ["ReplaySentenceSource"]
