"""Conversion of NMEA ``DDDMM.MMMM`` coordinates to display strings."""

from __future__ import annotations

from ..constants import PARSE_ERROR, UNKNOWN

_NEGATIVE_HEMISPHERES = frozenset({"S", "W"})


def to_decimal_degrees(value: str, hemisphere: str) -> float:
    """Convert a degree-minute field to signed decimal degrees.

    Degrees are the integer part of ``value / 100`` and minutes the
    remainder, so the same rule serves both 2-digit latitude and 3-digit
    longitude degree fields.

    Raises:
        ValueError: ``value`` is not a finite number.
    """
    raw = float(value)
    try:
        degrees = int(raw / 100)
    except OverflowError as exc:
        raise ValueError(f"coordinate out of range: {value!r}") from exc
    minutes = raw - degrees * 100
    decimal = degrees + minutes / 60
    if hemisphere in _NEGATIVE_HEMISPHERES:
        decimal = -decimal
    return decimal


def format_coordinate(value: str, hemisphere: str) -> str:
    """Format a coordinate as ``"48.117300°N"``.

    Empty value or hemisphere gives ``UNKNOWN``; a value that is present but
    not numeric gives ``PARSE_ERROR``.
    """
    if not value or not hemisphere:
        return UNKNOWN
    try:
        decimal = to_decimal_degrees(value, hemisphere)
    except ValueError:
        return PARSE_ERROR
    return f"{abs(decimal):.6f}°{hemisphere}"


format_latitude = format_coordinate
format_longitude = format_coordinate


__all__ = [
    "format_coordinate",
    "format_latitude",
    "format_longitude",
    "to_decimal_degrees",
]
