"""NMEA parsing components."""

from .coordinates import format_coordinate, format_latitude, format_longitude, to_decimal_degrees
from .nmea_parser import is_supported, parse_sentence, sentence_tag
from .nmea_types import (
    Constellation,
    LocationUpdate,
    SatelliteCountUpdate,
    SatelliteDetails,
    SatelliteRecord,
    SentenceDelta,
)

__all__ = [
    "Constellation",
    "LocationUpdate",
    "SatelliteCountUpdate",
    "SatelliteDetails",
    "SatelliteRecord",
    "SentenceDelta",
    "format_coordinate",
    "format_latitude",
    "format_longitude",
    "is_supported",
    "parse_sentence",
    "sentence_tag",
    "to_decimal_degrees",
]
