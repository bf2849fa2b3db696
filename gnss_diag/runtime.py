"""Standalone runtime: a serial GPS receiver feeding the NMEA pipeline.

Hosts that receive sentences from a platform location service use
:class:`~gnss_diag.session.DiagnosticSession` instead; this module covers
the case where the receiver is wired straight to a UART.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from .core.logging_config import configure_logging
from .core.logging_utils import get_module_logger
from .gps_core.config import DiagConfig
from .gps_core.pipeline import Dispatcher, NMEAPipeline, run_inline
from .gps_core.snapshot import Snapshot
from .gps_core.sources.serial_source import SerialSentenceSource

logger = get_module_logger(__name__)

PROCESS_LOG_NAME = "gnss_diag.log"


def setup_logging(config: DiagConfig, log_file: Optional[Path] = None) -> Path:
    """Apply ``log_level``/``console_output`` and log to a file under ``log_dir``.

    Returns the process log path.
    """
    path = Path(log_file) if log_file else Path(config.log_dir) / PROCESS_LOG_NAME
    configure_logging(config.log_level, console=config.console_output, log_file=path)
    logger.info("Process logs will be written to %s", path)
    return path


class SerialMonitor:
    """Serial receiver plus pipeline, started and stopped together.

    Example:
        config = load_config()
        setup_logging(config)
        with SerialMonitor(config) as monitor:
            monitor.add_snapshot_listener(render)
            ...
    """

    def __init__(
        self,
        config: Optional[DiagConfig] = None,
        *,
        dispatcher: Dispatcher = run_inline,
        source: Optional[SerialSentenceSource] = None,
    ):
        self.config = config or DiagConfig()
        self.pipeline = NMEAPipeline(self.config, dispatcher=dispatcher)
        self.source = source or SerialSentenceSource.from_config(self.config)
        self.source.subscribe(self.pipeline.offer)

    def __enter__(self) -> "SerialMonitor":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def snapshot(self) -> Snapshot:
        return self.pipeline.snapshot

    @property
    def is_running(self) -> bool:
        return self.pipeline.is_running and self.source.is_running

    def add_snapshot_listener(self, listener: Callable[[Snapshot], None]) -> None:
        self.pipeline.publisher.add_listener(listener)

    def start(self) -> bool:
        """Start the pipeline, then open the port. False if the port would not open."""
        self.pipeline.start()
        if self.source.start():
            return True
        logger.error("Serial receiver unavailable: %s", self.source.last_error)
        self.pipeline.stop()
        return False

    def stop(self) -> None:
        self.source.stop()
        self.pipeline.stop()


__all__ = ["PROCESS_LOG_NAME", "SerialMonitor", "setup_logging"]
