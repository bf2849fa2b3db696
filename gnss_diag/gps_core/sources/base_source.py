"""Base class for NMEA sentence sources.

A source delivers raw sentences to subscribed callbacks from whatever
thread it runs on. The pipeline only depends on this contract, not on
how sentences are obtained (platform listener, serial port, recording).
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Callable, List

from ...core.logging_utils import get_module_logger

logger = get_module_logger(__name__)

SentenceCallback = Callable[[str], None]


class SentenceSource(ABC):
    """Abstract publisher of raw NMEA sentences."""

    def __init__(self) -> None:
        self._subscribers: List[SentenceCallback] = []
        self._subscribers_lock = threading.Lock()

    def subscribe(self, callback: SentenceCallback) -> None:
        with self._subscribers_lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: SentenceCallback) -> None:
        with self._subscribers_lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def _emit(self, sentence: str) -> None:
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(sentence)
            except Exception as exc:
                logger.error("Sentence subscriber %r failed: %s", callback, exc)

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """True while the source is delivering sentences."""

    @abstractmethod
    def start(self) -> bool:
        """Begin delivering sentences. Returns False if the source could not open."""

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering sentences and release resources."""

    def __enter__(self) -> "SentenceSource":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


__all__ = ["SentenceCallback", "SentenceSource"]
