"""Decoding of cellular signal-strength and cell-location events.

The host telephony service is opaque; it hands us plain event objects
(:class:`SignalStrengthEvent`, :class:`CellLocationEvent`) and we reduce
them to display strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from ..core.logging_utils import get_module_logger
from ..gps_core.constants import PARSE_ERROR, UNKNOWN

logger = get_module_logger(__name__)

GSM_ASU_UNKNOWN = 99
READ_FAILED = "read failed"


class CellTechnology(str, Enum):
    NR = "5G NR"
    LTE = "LTE"
    WCDMA = "WCDMA"
    GSM = "GSM"
    OTHER = "other"


# Highest-generation technology wins when a device reports several cells.
_TECHNOLOGY_PRIORITY: Tuple[Tuple[CellTechnology, str, str], ...] = (
    (CellTechnology.NR, "5G", "5G band"),
    (CellTechnology.LTE, "4G", "LTE band"),
    (CellTechnology.WCDMA, "3G", UNKNOWN),
    (CellTechnology.GSM, "2G", UNKNOWN),
)


@dataclass(frozen=True, slots=True)
class CellSignalStrength:
    """Signal strength of one serving/neighbour cell."""

    technology: CellTechnology
    dbm: Optional[int] = None


@dataclass(frozen=True, slots=True)
class SignalStrengthEvent:
    """Signal-strength change delivered by the telephony service.

    Newer platforms report per-cell strengths; older ones only report the
    GSM ASU value, in which case ``cell_signals`` is ``None``.
    """

    cell_signals: Optional[Sequence[CellSignalStrength]] = None
    gsm_asu: int = GSM_ASU_UNKNOWN


@dataclass(frozen=True, slots=True)
class CellLocationEvent:
    """Cell-location change; only GSM-family locations carry CID/LAC."""

    cid: Optional[int] = None
    lac: Optional[int] = None
    gsm: bool = True


@dataclass(frozen=True, slots=True)
class SignalReading:
    """Decoded signal strength."""

    dbm: str = UNKNOWN
    signal_type: str = ""
    generation: str = UNKNOWN
    frequency: str = UNKNOWN

    @classmethod
    def unavailable(cls, reason: str) -> "SignalReading":
        return cls(dbm=reason, signal_type=UNKNOWN)


@dataclass(frozen=True, slots=True)
class CellLocation:
    cell_id: str = UNKNOWN
    lac: str = UNKNOWN


@dataclass(frozen=True, slots=True)
class NetworkIdentity:
    """Operator and subscriber fields read once from the telephony service."""

    operator_name: str = UNKNOWN
    mcc: str = UNKNOWN
    mnc: str = UNKNOWN
    subscriber_id: str = UNKNOWN
    phone_number: str = UNKNOWN


def _dbm_text(dbm: Optional[int]) -> str:
    return UNKNOWN if dbm is None else str(int(dbm))


def _decode(event: SignalStrengthEvent) -> SignalReading:
    if event.cell_signals is None:
        asu = int(event.gsm_asu)
        dbm = UNKNOWN if asu == GSM_ASU_UNKNOWN else str(-113 + 2 * asu)
        return SignalReading(dbm=dbm, signal_type="GSM", generation="2G/3G")

    cells = list(event.cell_signals)
    for technology, generation, frequency in _TECHNOLOGY_PRIORITY:
        match = next((cell for cell in cells if cell.technology == technology), None)
        if match is not None:
            return SignalReading(
                dbm=_dbm_text(match.dbm),
                signal_type=technology.value,
                generation=generation,
                frequency=frequency,
            )

    primary = cells[0] if cells else None
    return SignalReading(
        dbm=_dbm_text(primary.dbm if primary else None),
        signal_type=UNKNOWN,
        generation=UNKNOWN,
    )


def decode_signal_strength(event: SignalStrengthEvent) -> SignalReading:
    """Reduce a signal-strength event to a :class:`SignalReading`.

    A malformed event gives ``PARSE_ERROR`` in the dBm field.
    """
    try:
        return _decode(event)
    except (AttributeError, TypeError, ValueError) as exc:
        logger.error("Signal strength decode failed: %s", exc)
        return SignalReading(dbm=PARSE_ERROR, signal_type=UNKNOWN)


def decode_cell_location(event: CellLocationEvent) -> CellLocation:
    """Reduce a cell-location event to display strings."""
    if not event.gsm:
        return CellLocation()
    try:
        cell_id = UNKNOWN if event.cid is None else str(int(event.cid))
        lac = UNKNOWN if event.lac is None else str(int(event.lac))
    except (TypeError, ValueError) as exc:
        logger.error("Cell location decode failed: %s", exc)
        return CellLocation(cell_id=PARSE_ERROR, lac=PARSE_ERROR)
    return CellLocation(cell_id=cell_id, lac=lac)


def split_operator_code(code: Optional[str]) -> Tuple[str, str]:
    """Split a numeric operator code (``"46000"``) into MCC and MNC."""
    if code and len(code) >= 5 and code.isdigit():
        return code[:3], code[3:]
    return UNKNOWN, UNKNOWN


__all__ = [
    "CellLocation",
    "CellLocationEvent",
    "CellSignalStrength",
    "CellTechnology",
    "NetworkIdentity",
    "READ_FAILED",
    "SignalReading",
    "SignalStrengthEvent",
    "decode_cell_location",
    "decode_signal_strength",
    "split_operator_code",
]
