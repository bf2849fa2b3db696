"""Insertion-ordered satellite table keyed by (PRN, constellation)."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Tuple

from .constants import (
    DISPLAY_MAX_SIZE,
    DISPLAY_TRIM_TARGET,
    REGISTRY_MAX_SIZE,
    REGISTRY_TRIM_TARGET,
)
from .parsers.nmea_types import Constellation, SatelliteRecord

SatelliteKey = Tuple[str, Constellation]


def trim_oldest(records: List[SatelliteRecord], max_size: int, target_size: int) -> int:
    """Drop oldest entries once ``max_size`` is exceeded, down to ``target_size``.

    Returns the number of entries removed. The gap between the two bounds
    keeps a steadily growing list from being trimmed on every insertion.
    """
    if len(records) <= max_size:
        return 0
    excess = len(records) - target_size
    del records[:excess]
    return excess


class SatelliteRegistry:
    """Thread-safe merge table of satellite sightings.

    A later sighting of the same (PRN, constellation) replaces the earlier
    record in place, keeping its first-sighted position; new satellites are
    appended. No history is kept.
    """

    def __init__(
        self,
        max_size: int = REGISTRY_MAX_SIZE,
        trim_target: int = REGISTRY_TRIM_TARGET,
    ):
        if trim_target > max_size:
            raise ValueError("trim_target must not exceed max_size")
        self.max_size = max_size
        self.trim_target = trim_target
        self._records: List[SatelliteRecord] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _index_by_key(self) -> Dict[SatelliteKey, int]:
        return {record.key: index for index, record in enumerate(self._records)}

    def merge(self, records: Iterable[SatelliteRecord]) -> int:
        """Merge a batch of records atomically.

        Returns the number of newly appended satellites.
        """
        added = 0
        with self._lock:
            positions = self._index_by_key()
            for record in records:
                index = positions.get(record.key)
                if index is None:
                    positions[record.key] = len(self._records)
                    self._records.append(record)
                    added += 1
                else:
                    self._records[index] = record
        return added

    def trim(self) -> int:
        """Apply the soft cap, returning how many oldest records were dropped."""
        with self._lock:
            return trim_oldest(self._records, self.max_size, self.trim_target)

    def snapshot(self) -> Tuple[SatelliteRecord, ...]:
        """Return all records in first-sighted order."""
        with self._lock:
            return tuple(self._records)

    def display_copy(
        self,
        max_size: int = DISPLAY_MAX_SIZE,
        trim_target: int = DISPLAY_TRIM_TARGET,
    ) -> Tuple[SatelliteRecord, ...]:
        """Return a bounded copy for display; the registry itself is untouched."""
        with self._lock:
            copied = list(self._records)
        trim_oldest(copied, max_size, trim_target)
        return tuple(copied)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._records

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


__all__ = ["SatelliteKey", "SatelliteRegistry", "trim_oldest"]
