"""Threaded NMEA pipeline: ingest queue, parser worker, publisher and janitor.

Data flow::

    source callback -> IngestQueue -> ParserWorker -> StagingBuffers
                                                   -> SnapshotPublisher -> SnapshotStore

The producer never blocks. The parser worker is the only writer of the
staging buffers and the publisher is the only writer of the snapshot's
GNSS fields. Stopping is cooperative for the worker and immediate for the
periodic tasks; sentences still queued at shutdown are dropped.
"""

from __future__ import annotations

import queue
import threading
import time
from typing import Callable, List, Optional

from ..core.logging_utils import get_module_logger
from .config import DiagConfig
from .parsers.nmea_parser import parse_sentence
from .registry import SatelliteRegistry
from .snapshot import Snapshot, SnapshotStore
from .staging import LOCATION_FIELDS, StagingBuffers

logger = get_module_logger(__name__)

Dispatcher = Callable[[Callable[[], None]], None]
SnapshotListener = Callable[[Snapshot], None]


def run_inline(callback: Callable[[], None]) -> None:
    """Default dispatcher: run on the calling (publisher) thread."""
    callback()


class IngestQueue:
    """Unbounded FIFO of raw sentences.

    ``offer`` never blocks, so it is safe to call from a platform callback
    thread. ``poll`` blocks up to ``timeout`` for the next item.
    """

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[str]" = queue.SimpleQueue()

    def offer(self, sentence: str) -> None:
        self._queue.put_nowait(sentence)

    def poll(self, timeout: Optional[float] = None) -> Optional[str]:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    def clear(self) -> int:
        """Discard pending sentences, returning how many were dropped."""
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return dropped
            dropped += 1


class ParserWorker:
    """Dedicated thread that parses queued sentences into the staging buffers."""

    def __init__(
        self,
        ingest: IngestQueue,
        staging: StagingBuffers,
        poll_timeout: float = 0.1,
    ):
        self.ingest = ingest
        self.staging = staging
        self.poll_timeout = poll_timeout

        self._running = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._processed = 0
        self._errors = 0

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    @property
    def processed_count(self) -> int:
        return self._processed

    @property
    def error_count(self) -> int:
        return self._errors

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            logger.warning("Parser worker already running")
            return
        self._running.set()
        self._thread = threading.Thread(
            target=self._run,
            name="NMEAParserWorker",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Parser worker started")

    def stop(self, timeout: float = 2.0) -> None:
        self._running.clear()
        thread = self._thread
        self._thread = None
        if thread and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Parser worker did not stop within %.1fs", timeout)
        logger.debug(
            "Parser worker stopped (processed=%d, errors=%d)",
            self._processed,
            self._errors,
        )

    def process(self, sentence: str) -> bool:
        """Parse one sentence and fold its deltas; False if it raised."""
        try:
            for delta in parse_sentence(sentence):
                self.staging.apply(delta)
        except Exception as exc:
            self._errors += 1
            logger.error("Failed to process sentence %r: %s", sentence[:60], exc)
            return False
        self._processed += 1
        return True

    def _run(self) -> None:
        while self._running.is_set():
            sentence = self.ingest.poll(timeout=self.poll_timeout)
            if sentence is None:
                continue
            self.process(sentence)


class PeriodicTask:
    """Runs ``action`` every ``interval`` seconds on its own thread.

    The first run happens one interval after ``start``. Runs are scheduled
    at a fixed rate; an overrunning action delays, but does not pile up,
    the following runs. Exceptions from ``action`` are logged and the
    schedule continues.
    """

    def __init__(self, name: str, interval: float, action: Callable[[], None]):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self.action = action
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            logger.warning("Periodic task %s already running", self.name)
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def cancel(self, timeout: float = 2.0) -> None:
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Periodic task %s did not stop within %.1fs", self.name, timeout)

    def _run(self) -> None:
        next_run = time.monotonic() + self.interval
        while not self._stop.wait(max(0.0, next_run - time.monotonic())):
            try:
                self.action()
            except Exception as exc:
                logger.error("Periodic task %s failed: %s", self.name, exc)
            next_run = max(next_run + self.interval, time.monotonic())


class SnapshotPublisher:
    """Copies staging buffers into the published snapshot."""

    def __init__(
        self,
        staging: StagingBuffers,
        store: SnapshotStore,
        *,
        dispatcher: Dispatcher = run_inline,
        display_max_size: int = 50,
        display_trim_target: int = 40,
    ):
        self.staging = staging
        self.store = store
        self.dispatcher = dispatcher
        self.display_max_size = display_max_size
        self.display_trim_target = display_trim_target
        self._listeners: List[SnapshotListener] = []
        self._listeners_lock = threading.Lock()

    def add_listener(self, listener: SnapshotListener) -> None:
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _collect_changes(self) -> dict:
        """Read each staging buffer under its own lock, one at a time."""
        changes = {}

        location = self.staging.location.read()
        for name in LOCATION_FIELDS:
            if name in location:
                changes[name] = location[name]

        counts = self.staging.counts.read()
        if counts.visible_count is not None:
            changes["visible_count"] = counts.visible_count
        if counts.used_count is not None:
            changes["used_count"] = counts.used_count
        if counts.hdop is not None:
            changes["hdop"] = counts.hdop

        satellites = self.staging.satellites.display_copy(
            self.display_max_size, self.display_trim_target
        )
        if satellites:
            changes["satellites"] = satellites

        return changes

    def publish(self) -> None:
        """Run one publish tick."""
        changes = self._collect_changes()
        self.dispatcher(lambda: self._apply(changes))

    def _apply(self, changes: dict) -> None:
        snapshot = self.store.update(
            lambda current: current.replace(sequence=current.sequence + 1, **changes)
        )
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as exc:
                logger.error("Snapshot listener %r failed: %s", listener, exc)


class RegistryJanitor:
    """Trims the staging satellite registry to its soft cap."""

    def __init__(self, registry: SatelliteRegistry):
        self.registry = registry

    def run_once(self) -> int:
        removed = self.registry.trim()
        if removed:
            logger.debug("Trimmed %d stale satellite records", removed)
        return removed


class NMEAPipeline:
    """Owns the queue, worker and periodic tasks for one sentence source.

    Example:
        pipeline = NMEAPipeline(DiagConfig())
        pipeline.start()
        source.subscribe(pipeline.offer)
        ...
        pipeline.stop()
    """

    def __init__(
        self,
        config: Optional[DiagConfig] = None,
        *,
        store: Optional[SnapshotStore] = None,
        dispatcher: Dispatcher = run_inline,
    ):
        self.config = config or DiagConfig()
        self.store = store or SnapshotStore()
        self.ingest = IngestQueue()
        self.staging = StagingBuffers(
            SatelliteRegistry(
                max_size=self.config.registry_max_size,
                trim_target=self.config.registry_trim_target,
            )
        )
        self.worker = ParserWorker(
            self.ingest,
            self.staging,
            poll_timeout=self.config.worker_poll_timeout_s,
        )
        self.publisher = SnapshotPublisher(
            self.staging,
            self.store,
            dispatcher=dispatcher,
            display_max_size=self.config.display_max_size,
            display_trim_target=self.config.display_trim_target,
        )
        self.janitor = RegistryJanitor(self.staging.satellites)

        self._publish_task = PeriodicTask(
            "SnapshotPublisher", self.config.publish_interval_s, self.publisher.publish
        )
        self._janitor_task = PeriodicTask(
            "RegistryJanitor", self.config.janitor_interval_s, self.janitor.run_once
        )
        self._running = False
        self._state_lock = threading.Lock()

    def __enter__(self) -> "NMEAPipeline":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def snapshot(self) -> Snapshot:
        return self.store.get()

    def offer(self, sentence: str) -> None:
        """Producer entry point; never blocks. Dropped when not running."""
        if self._running:
            self.ingest.offer(sentence)

    def start(self) -> None:
        with self._state_lock:
            if self._running:
                logger.warning("Pipeline already running")
                return
            self._running = True
            self.worker.start()
            self._publish_task.start()
            self._janitor_task.start()
        logger.info(
            "NMEA pipeline started (publish=%.2fs, janitor=%.0fs)",
            self.config.publish_interval_s,
            self.config.janitor_interval_s,
        )

    def stop(self) -> None:
        with self._state_lock:
            if not self._running:
                return
            self._running = False
            self.worker.stop()
            self._publish_task.cancel()
            self._janitor_task.cancel()
            dropped = self.ingest.clear()
        logger.info("NMEA pipeline stopped (%d queued sentences dropped)", dropped)


__all__ = [
    "Dispatcher",
    "IngestQueue",
    "NMEAPipeline",
    "ParserWorker",
    "PeriodicTask",
    "RegistryJanitor",
    "SnapshotPublisher",
    "run_inline",
]
