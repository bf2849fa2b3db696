"""NMEA sentence parsing for the diagnostic pipeline.

Parsing is stateless: each raw line maps to zero or more immutable delta
messages (:mod:`.nmea_types`). Accumulating those deltas is the job of the
staging buffers, so the parser can run on any thread without locking.

Only GGA, RMC, GSV and GSA are decoded. Checksums are not validated; a
trailing ``*hh`` is tolerated where it lands inside a field we read.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from ..constants import (
    GGA_MIN_FIELDS,
    GGA_TAGS,
    GSA_MIN_FIELDS,
    GSA_PRN_SLOTS,
    GSA_TAGS,
    GSV_BLOCK_SIZE,
    GSV_FIRST_BLOCK,
    GSV_MAX_BLOCKS,
    GSV_MIN_FIELDS,
    GSV_TAGS,
    KMH_PER_KNOT,
    RMC_MIN_FIELDS,
    RMC_TAGS,
    UNKNOWN,
)
from .coordinates import format_latitude, format_longitude
from .nmea_types import (
    Constellation,
    LocationUpdate,
    SatelliteCountUpdate,
    SatelliteDetails,
    SatelliteRecord,
    SentenceDelta,
)


def _parse_int(value: str, default: int = 0) -> int:
    """Parse an integer field, ``default`` on failure."""
    try:
        return int(value)
    except ValueError:
        return default


def _parse_float(value: str, default: float = 0.0) -> float:
    """Parse a float field, ``default`` on failure."""
    try:
        return float(value)
    except ValueError:
        return default


def _or_unknown(value: str) -> str:
    return value if value else UNKNOWN


def _strip_checksum(value: str) -> str:
    """Drop a ``*hh`` checksum suffix glued to the last field."""
    return value.split("*", 1)[0]


def _format_speed(knots_field: str) -> str:
    """Knots to ``"41.48 km/h"``. Non-numeric input is treated as zero."""
    if not knots_field:
        return UNKNOWN
    knots = _parse_float(knots_field)
    return f"{knots * KMH_PER_KNOT:.2f} km/h"


# ----------------------------------------------------------------------
# Sentence-specific parsers
# ----------------------------------------------------------------------

def _parse_gga(parts: List[str]) -> List[SentenceDelta]:
    """$GPGGA: position, used satellites, HDOP, altitude."""
    if len(parts) < GGA_MIN_FIELDS:
        return []

    altitude = f"{parts[9]} {parts[10]}" if parts[9] else UNKNOWN
    location = LocationUpdate(
        latitude=format_latitude(parts[2], parts[3]),
        longitude=format_longitude(parts[4], parts[5]),
        altitude=altitude,
        speed=UNKNOWN,
    )
    counts = SatelliteCountUpdate(
        visible_count=0,
        used_count=_parse_int(parts[7]),
        hdop=_or_unknown(parts[8]),
    )
    return [location, counts]


def _parse_rmc(parts: List[str]) -> List[SentenceDelta]:
    """$GPRMC: position and ground speed."""
    if len(parts) < RMC_MIN_FIELDS:
        return []

    return [
        LocationUpdate(
            latitude=format_latitude(parts[3], parts[4]),
            longitude=format_longitude(parts[5], parts[6]),
            altitude=UNKNOWN,
            speed=_format_speed(parts[7]),
        )
    ]


def _parse_gsv(parts: List[str]) -> List[SentenceDelta]:
    """$GPGSV: satellites in view, up to four per sentence.

    The visible total is reported only by the first sentence of a group so
    that a multi-sentence group is not counted more than once; satellite
    records come from every sentence.
    """
    if len(parts) < GSV_MIN_FIELDS:
        return []

    total_visible = _parse_int(parts[3])
    message_number = _parse_int(parts[2])
    constellation = Constellation.from_talker(parts[0])

    records = []
    for block in range(GSV_MAX_BLOCKS):
        start = GSV_FIRST_BLOCK + block * GSV_BLOCK_SIZE
        if start + GSV_BLOCK_SIZE > len(parts):
            break
        prn, elevation, azimuth, snr = parts[start:start + GSV_BLOCK_SIZE]
        if not prn:
            continue
        records.append(
            SatelliteRecord(
                prn=prn,
                elevation=_or_unknown(elevation),
                azimuth=_or_unknown(azimuth),
                snr=_or_unknown(_strip_checksum(snr)),
                constellation=constellation,
            )
        )

    deltas: List[SentenceDelta] = []
    if message_number == 1:
        deltas.append(SatelliteCountUpdate(visible_count=total_visible))
    if records:
        deltas.append(SatelliteDetails(records=tuple(records)))
    return deltas


def _parse_gsa(parts: List[str]) -> List[SentenceDelta]:
    """$GPGSA: active satellites and HDOP."""
    if len(parts) < GSA_MIN_FIELDS:
        return []

    used = sum(1 for slot in parts[GSA_PRN_SLOTS] if slot)
    return [
        SatelliteCountUpdate(
            visible_count=0,
            used_count=used,
            hdop=_or_unknown(parts[16]),
        )
    ]


_Handler = Callable[[List[str]], List[SentenceDelta]]

_HANDLERS: Dict[str, _Handler] = {}
for _tags, _handler in (
    (GGA_TAGS, _parse_gga),
    (RMC_TAGS, _parse_rmc),
    (GSV_TAGS, _parse_gsv),
    (GSA_TAGS, _parse_gsa),
):
    for _tag in _tags:
        _HANDLERS[_tag] = _handler


def sentence_tag(sentence: str) -> str:
    """Talker + sentence type tag, e.g. ``"$GPGGA"``."""
    return sentence[:6]


def is_supported(sentence: str) -> bool:
    """True when the sentence type is one the parser decodes."""
    return sentence_tag(sentence) in _HANDLERS


def parse_sentence(sentence: Optional[str]) -> List[SentenceDelta]:
    """Parse one raw NMEA line into delta messages.

    Unsupported or truncated sentences return an empty list; nothing is
    raised for malformed input.
    """
    if not sentence:
        return []
    line = sentence.strip()
    handler = _HANDLERS.get(sentence_tag(line))
    if handler is None:
        return []
    return handler(line.split(","))


__all__ = ["is_supported", "parse_sentence", "sentence_tag"]
