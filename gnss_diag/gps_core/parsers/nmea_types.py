"""Value types produced by the NMEA parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from ..constants import UNKNOWN


class Constellation(str, Enum):
    """Satellite system a GSV record belongs to."""

    GPS = "GPS"
    GLONASS = "GLONASS"
    GALILEO = "Galileo"
    BEIDOU = "BeiDou"
    UNKNOWN = "Unknown"

    @classmethod
    def from_talker(cls, sentence: str) -> "Constellation":
        """Resolve the constellation from the ``$XX`` talker prefix."""
        return _TALKER_CONSTELLATIONS.get(sentence[1:3], cls.UNKNOWN)


_TALKER_CONSTELLATIONS = {
    "GP": Constellation.GPS,
    "GL": Constellation.GLONASS,
    "GA": Constellation.GALILEO,
    "GB": Constellation.BEIDOU,
    "BD": Constellation.BEIDOU,
}


@dataclass(frozen=True, slots=True)
class SatelliteRecord:
    """One satellite sighting from a GSV block."""

    prn: str
    elevation: str
    azimuth: str
    snr: str
    constellation: Constellation

    @property
    def key(self) -> Tuple[str, Constellation]:
        """Identity of the satellite: two sightings are the same entity iff keys match."""
        return (self.prn, self.constellation)


@dataclass(frozen=True, slots=True)
class LocationUpdate:
    """Position fields from GGA/RMC; ``UNKNOWN`` marks an absent field."""

    latitude: str = UNKNOWN
    longitude: str = UNKNOWN
    altitude: str = UNKNOWN
    speed: str = UNKNOWN


@dataclass(frozen=True, slots=True)
class SatelliteCountUpdate:
    """Satellite counts and HDOP; zero counts mean "not reported"."""

    visible_count: int = 0
    used_count: int = 0
    hdop: str = UNKNOWN


@dataclass(frozen=True, slots=True)
class SatelliteDetails:
    """Satellite records carried by a single GSV sentence."""

    records: Tuple[SatelliteRecord, ...]


SentenceDelta = Union[LocationUpdate, SatelliteCountUpdate, SatelliteDetails]


__all__ = [
    "Constellation",
    "LocationUpdate",
    "SatelliteCountUpdate",
    "SatelliteDetails",
    "SatelliteRecord",
    "SentenceDelta",
]
