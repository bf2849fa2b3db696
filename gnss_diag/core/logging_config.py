"""Process logging setup for hosts running the diagnostic pipeline.

Handlers installed here are remembered so a later call swaps them out
instead of stacking duplicates; handlers a host attached to the root
logger itself are left alone.
"""

from __future__ import annotations

import contextlib
import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, List, Optional, Union

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
DEFAULT_MAX_BYTES = 512 * 1024
DEFAULT_BACKUP_COUNT = 2

# pyserial logs every port open/close at INFO
NOISY_LOGGERS = ("serial",)

_LEVEL_NAMES = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_installed: List[logging.Handler] = []
_install_lock = threading.Lock()


def coerce_level(level: Union[int, str]) -> int:
    """Accept ``"info"``-style names as well as numeric levels."""
    if isinstance(level, int):
        return level
    try:
        return _LEVEL_NAMES[level.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{level}'") from None


def _file_handler(path: Path, max_bytes: int, backup_count: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> List[logging.Handler]:
    """Install console and/or rotating-file handlers on the root logger.

    Args:
        level: Root level, numeric or a name such as ``"debug"``.
        console: Attach a stdout handler.
        log_file: Attach a rotating file handler writing to this path.
        max_bytes: Rotation size for ``log_file``.
        backup_count: Rotated files kept next to ``log_file``.
        quiet_loggers: Logger names capped at WARNING.

    Returns:
        The handlers now installed by this module.
    """
    numeric_level = coerce_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        handlers.append(_file_handler(Path(log_file), max_bytes, backup_count))
    for handler in handlers:
        handler.setFormatter(formatter)

    root = logging.getLogger()
    with _install_lock:
        for handler in _installed:
            root.removeHandler(handler)
            with contextlib.suppress(OSError, ValueError):
                handler.close()
        _installed[:] = handlers
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(numeric_level)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return list(handlers)


def installed_handlers() -> List[logging.Handler]:
    with _install_lock:
        return list(_installed)


__all__ = [
    "DEFAULT_BACKUP_COUNT",
    "DEFAULT_MAX_BYTES",
    "LOG_DATEFMT",
    "LOG_FORMAT",
    "NOISY_LOGGERS",
    "coerce_level",
    "configure_logging",
    "installed_handlers",
]
