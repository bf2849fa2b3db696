"""Serial UART sentence source for GPS receivers.

Reads NMEA lines with pyserial on a background thread and hands each
``$``-prefixed line to the subscribers.
"""

from __future__ import annotations

import contextlib
import threading
from typing import Any, Callable, Optional

import serial

from ...core.logging_utils import get_module_logger
from ..config import DiagConfig
from ..constants import DEFAULT_BAUD_RATE, DEFAULT_READ_TIMEOUT_S
from .base_source import SentenceSource

logger = get_module_logger(__name__)

SerialFactory = Callable[..., Any]


class SerialSentenceSource(SentenceSource):
    """Serial UART source.

    Example:
        source = SerialSentenceSource("/dev/serial0", 9600)
        source.subscribe(pipeline.offer)
        source.start()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUD_RATE,
        read_timeout: float = DEFAULT_READ_TIMEOUT_S,
        serial_factory: SerialFactory = serial.Serial,
    ):
        """Initialize the serial source.

        Args:
            port: Serial port path (e.g., '/dev/serial0' or '/dev/ttyUSB0')
            baudrate: Serial baudrate (default 9600 for most GPS)
            read_timeout: Per-readline timeout, bounds shutdown latency
            serial_factory: Callable returning a ``serial.Serial``-like object
        """
        super().__init__()
        self.port = port
        self.baudrate = baudrate
        self.read_timeout = read_timeout
        self._serial_factory = serial_factory

        self._serial: Optional[Any] = None
        self._serial_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._last_error: Optional[str] = None

    @classmethod
    def from_config(cls, config: DiagConfig, **kwargs: Any) -> "SerialSentenceSource":
        """Build a source from the ``serial_port``, ``baud_rate`` and ``read_timeout_s`` settings."""
        return cls(config.serial_port, config.baud_rate, config.read_timeout_s, **kwargs)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def last_error(self) -> Optional[str]:
        """Get the last error message, if any."""
        return self._last_error

    def start(self) -> bool:
        if self.is_running:
            logger.debug("Already reading from %s", self.port)
            return True

        self._close_port()

        try:
            port = self._serial_factory(
                self.port,
                self.baudrate,
                timeout=self.read_timeout,
            )
        except (serial.SerialException, OSError, ValueError) as exc:
            self._last_error = str(exc)
            logger.warning("Cannot open %s at %d baud: %s", self.port, self.baudrate, exc)
            return False

        with self._serial_lock:
            self._serial = port

        self._last_error = None
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._read_loop,
            name=f"SerialSource-{self.port}",
            daemon=True,
        )
        self._thread.start()
        logger.info("Connected to GPS on %s at %d baud", self.port, self.baudrate)
        return True

    def stop(self) -> None:
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread and thread is not threading.current_thread():
            thread.join(timeout=self.read_timeout + 1.0)

        if self._close_port():
            logger.info("Disconnected from GPS on %s", self.port)

    def _close_port(self) -> bool:
        """Close and forget the open handle; False if there was none."""
        with self._serial_lock:
            port = self._serial
            self._serial = None
        if port is None:
            return False
        with contextlib.suppress(serial.SerialException, OSError):
            port.close()
        return True

    def _read_loop(self) -> None:
        port = self._serial
        while port is not None and not self._stop.is_set():
            try:
                raw = port.readline()
            except (serial.SerialException, OSError) as exc:
                self._last_error = str(exc)
                logger.warning("Read error on %s: %s", self.port, exc)
                self._close_port()
                break

            if not raw:
                continue

            line = raw.decode("ascii", errors="ignore").strip()
            if line.startswith("$"):
                self._emit(line)


__all__ = ["SerialSentenceSource"]
