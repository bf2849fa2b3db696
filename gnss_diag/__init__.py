"""Real-time GNSS/NMEA and cellular signal diagnostics."""

from .gps_core import DiagConfig, NMEAPipeline, Snapshot, load_config, parse_sentence
from .telephony import SignalReading
from .session import DiagnosticSession
from .runtime import SerialMonitor, setup_logging

__version__ = "1.0.0"

__all__ = [
    "DiagConfig",
    "DiagnosticSession",
    "NMEAPipeline",
    "SerialMonitor",
    "SignalReading",
    "Snapshot",
    "load_config",
    "parse_sentence",
    "setup_logging",
]
