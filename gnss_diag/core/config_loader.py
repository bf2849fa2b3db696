"""Loader for plain ``key = value`` config files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from .logging_utils import get_module_logger

logger = get_module_logger(__name__)

_TRUE_WORDS = ("true", "yes", "on", "1")
_BOOL_WORDS = _TRUE_WORDS + ("false", "no", "off", "0")


class ConfigLoader:
    """Reads ``config.txt`` style files.

    Lines are ``key = value``; blank lines and ``#`` comments (whole-line or
    trailing) are ignored. When a default exists for a key, the raw value is
    coerced to the default's type; otherwise the type is guessed.
    """

    @staticmethod
    def load(
        config_path: Path,
        defaults: Optional[Dict[str, Any]] = None,
        strict: bool = False,
    ) -> Dict[str, Any]:
        config = dict(defaults) if defaults else {}

        if not config_path.exists():
            logger.debug("Config file not found at %s, using defaults", config_path)
            return config

        try:
            with config_path.open("r", encoding="utf-8") as handle:
                lines = handle.readlines()
        except OSError as exc:
            logger.error("Failed to read config file %s: %s", config_path, exc)
            return config

        for line_num, line in enumerate(lines, 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                logger.warning("Invalid config line %d (missing '='): %s", line_num, line)
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.split("#", 1)[0].strip()

            if defaults is not None and key in defaults:
                config[key] = ConfigLoader._parse_value_with_type(value, defaults[key])
            elif strict and defaults is not None:
                logger.warning("Unknown config key '%s' (line %d) ignored", key, line_num)
            else:
                config[key] = ConfigLoader._parse_value(value)

        logger.info("Loaded config from %s (%d values)", config_path, len(config))
        return config

    @staticmethod
    def _parse_value(value: str) -> Any:
        if value.lower() in _BOOL_WORDS:
            return value.lower() in _TRUE_WORDS
        for cast in (int, float):
            try:
                return cast(value)
            except ValueError:
                pass
        return value

    @staticmethod
    def _parse_value_with_type(value: str, default: Any) -> Any:
        target_type = type(default)
        if target_type is bool:
            return value.lower() in _TRUE_WORDS
        if target_type is int:
            # Base 0 accepts 0x/0o/0b prefixes but rejects zero-padded decimals
            for base in (0, 10):
                try:
                    return int(value, base)
                except ValueError:
                    continue
            logger.warning("Failed to parse '%s' as int, keeping default", value)
            return default
        if target_type is float:
            try:
                return float(value)
            except ValueError:
                logger.warning("Failed to parse '%s' as float, keeping default", value)
                return default
        if isinstance(default, Path):
            return Path(value)
        return value


__all__ = ["ConfigLoader"]
