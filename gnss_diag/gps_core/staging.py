"""Staging buffers written by the parser worker and read by the publisher.

Each buffer owns its lock and no operation holds two of them at once, so
there is no lock ordering to get wrong. Values only ever move from
"unknown" to known: a sentence that lacks a field never clears it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from .constants import UNKNOWN
from .parsers.nmea_types import (
    LocationUpdate,
    SatelliteCountUpdate,
    SatelliteDetails,
    SentenceDelta,
)
from .registry import SatelliteRegistry

LOCATION_FIELDS = ("latitude", "longitude", "altitude", "speed")


@dataclass(frozen=True, slots=True)
class SatelliteCounts:
    """Copy of the satellite count buffer; ``None`` means never reported."""

    visible_count: Optional[int] = None
    used_count: Optional[int] = None
    hdop: Optional[str] = None


class LocationStaging:
    """Latest known latitude/longitude/altitude/speed strings."""

    def __init__(self) -> None:
        self._fields: Dict[str, str] = {}
        self._lock = threading.Lock()

    def apply(self, update: LocationUpdate) -> None:
        with self._lock:
            for name in LOCATION_FIELDS:
                value = getattr(update, name)
                if value != UNKNOWN:
                    self._fields[name] = value

    def read(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._fields)


class SatelliteCountStaging:
    """Latest visible/used counts and HDOP."""

    def __init__(self) -> None:
        self._counts = SatelliteCounts()
        self._lock = threading.Lock()

    def apply(self, update: SatelliteCountUpdate) -> None:
        with self._lock:
            current = self._counts
            self._counts = SatelliteCounts(
                visible_count=update.visible_count if update.visible_count > 0 else current.visible_count,
                used_count=update.used_count if update.used_count > 0 else current.used_count,
                hdop=update.hdop if update.hdop != UNKNOWN else current.hdop,
            )

    def read(self) -> SatelliteCounts:
        with self._lock:
            return self._counts


class StagingBuffers:
    """The three buffers the parser worker folds deltas into."""

    def __init__(self, registry: Optional[SatelliteRegistry] = None) -> None:
        self.location = LocationStaging()
        self.counts = SatelliteCountStaging()
        self.satellites = registry if registry is not None else SatelliteRegistry()

    def apply(self, delta: SentenceDelta) -> None:
        """Fold one parser delta into the matching buffer."""
        if isinstance(delta, LocationUpdate):
            self.location.apply(delta)
        elif isinstance(delta, SatelliteCountUpdate):
            self.counts.apply(delta)
        elif isinstance(delta, SatelliteDetails):
            self.satellites.merge(delta.records)
        else:
            raise TypeError(f"Unsupported delta type: {type(delta).__name__}")


__all__ = [
    "LOCATION_FIELDS",
    "LocationStaging",
    "SatelliteCountStaging",
    "SatelliteCounts",
    "StagingBuffers",
]
