"""Typed configuration for the diagnostic pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.config_loader import ConfigLoader
from ..core.logging_utils import get_module_logger
from .constants import (
    DEFAULT_BAUD_RATE,
    DEFAULT_READ_TIMEOUT_S,
    DEFAULT_SERIAL_PORT,
    DISPLAY_MAX_SIZE,
    DISPLAY_TRIM_TARGET,
    EVENT_LOG_MAX_ENTRIES,
    EVENT_LOG_TRIM_TARGET,
    JANITOR_INTERVAL_S,
    MAIN_SENTENCE_INTERVAL_S,
    PUBLISH_INTERVAL_S,
    REGISTRY_MAX_SIZE,
    REGISTRY_TRIM_TARGET,
    WORKER_POLL_TIMEOUT_S,
)

logger = get_module_logger("DiagConfig")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.txt"


@dataclass(slots=True)
class DiagConfig:
    """Typed configuration for the diagnostic pipeline."""

    # Pipeline cadence
    publish_interval_s: float = PUBLISH_INTERVAL_S
    janitor_interval_s: float = JANITOR_INTERVAL_S
    worker_poll_timeout_s: float = WORKER_POLL_TIMEOUT_S

    # Satellite list bounds
    registry_max_size: int = REGISTRY_MAX_SIZE
    registry_trim_target: int = REGISTRY_TRIM_TARGET
    display_max_size: int = DISPLAY_MAX_SIZE
    display_trim_target: int = DISPLAY_TRIM_TARGET

    # Event log
    event_log_max_entries: int = EVENT_LOG_MAX_ENTRIES
    event_log_trim_target: int = EVENT_LOG_TRIM_TARGET
    main_sentence_interval_s: float = MAIN_SENTENCE_INTERVAL_S
    log_dir: Path = field(default_factory=lambda: Path("gps_logs"))

    # Serial source
    serial_port: str = DEFAULT_SERIAL_PORT
    baud_rate: int = DEFAULT_BAUD_RATE
    read_timeout_s: float = DEFAULT_READ_TIMEOUT_S

    # Process logging
    log_level: str = "info"
    console_output: bool = True

    def __post_init__(self) -> None:
        if self.registry_trim_target > self.registry_max_size:
            raise ValueError("registry_trim_target must not exceed registry_max_size")
        if self.display_trim_target > self.display_max_size:
            raise ValueError("display_trim_target must not exceed display_max_size")
        if self.event_log_trim_target > self.event_log_max_entries:
            raise ValueError("event_log_trim_target must not exceed event_log_max_entries")
        if self.publish_interval_s <= 0 or self.janitor_interval_s <= 0:
            raise ValueError("task intervals must be positive")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "DiagConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        kwargs = {key: value for key, value in values.items() if key in known}
        if "log_dir" in kwargs:
            kwargs["log_dir"] = Path(kwargs["log_dir"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Export config values as dictionary."""
        return asdict(self)


def load_config(config_path: Optional[Path] = None) -> DiagConfig:
    """Load ``config.txt`` over the built-in defaults."""
    path = config_path or DEFAULT_CONFIG_PATH
    logger.debug("Loading diagnostic config from: %s", path)
    values = ConfigLoader.load(path, defaults=DiagConfig().to_dict(), strict=True)
    return DiagConfig.from_dict(values)


__all__ = ["DEFAULT_CONFIG_PATH", "DiagConfig", "load_config"]
