"""Display-facing snapshot and the lock that guards it."""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass, field
from typing import Tuple

from ..telephony.signal import CellLocation, NetworkIdentity, SignalReading
from .constants import UNKNOWN
from .parsers.nmea_types import SatelliteRecord


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Everything the display layer renders, replaced wholesale per publish."""

    latitude: str = UNKNOWN
    longitude: str = UNKNOWN
    altitude: str = UNKNOWN
    speed: str = UNKNOWN
    visible_count: int = 0
    used_count: int = 0
    hdop: str = UNKNOWN
    satellites: Tuple[SatelliteRecord, ...] = ()
    signal: SignalReading = field(default_factory=SignalReading)
    cell: CellLocation = field(default_factory=CellLocation)
    identity: NetworkIdentity = field(default_factory=NetworkIdentity)
    gps_status: str = "checking"
    nmea_message: str = "waiting for GPS data"
    sequence: int = 0

    def replace(self, **changes) -> "Snapshot":
        return dataclasses.replace(self, **changes)


class SnapshotStore:
    """Holds the current :class:`Snapshot`.

    Writers pass a function from the old snapshot to the new one; it runs
    under the store lock so concurrent writers never lose each other's
    fields and readers see either the old or the new snapshot.
    """

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._snapshot = initial or Snapshot()
        self._lock = threading.Lock()

    def get(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    def update(self, transform) -> Snapshot:
        with self._lock:
            self._snapshot = transform(self._snapshot)
            return self._snapshot

    def set_fields(self, **changes) -> Snapshot:
        return self.update(lambda current: current.replace(**changes))


__all__ = ["Snapshot", "SnapshotStore"]
