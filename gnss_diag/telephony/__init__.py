"""Cellular signal and network identity decoding."""

from .signal import (
    CellLocation,
    CellLocationEvent,
    CellSignalStrength,
    CellTechnology,
    NetworkIdentity,
    SignalReading,
    SignalStrengthEvent,
    decode_cell_location,
    decode_signal_strength,
    split_operator_code,
)

__all__ = [
    "CellLocation",
    "CellLocationEvent",
    "CellSignalStrength",
    "CellTechnology",
    "NetworkIdentity",
    "SignalReading",
    "SignalStrengthEvent",
    "decode_cell_location",
    "decode_signal_strength",
    "split_operator_code",
]
