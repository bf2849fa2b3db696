"""GPS core package - parsing, staging and the threaded pipeline."""

from .constants import (
    DISPLAY_MAX_SIZE,
    DISPLAY_TRIM_TARGET,
    JANITOR_INTERVAL_S,
    KMH_PER_KNOT,
    PARSE_ERROR,
    PUBLISH_INTERVAL_S,
    REGISTRY_MAX_SIZE,
    REGISTRY_TRIM_TARGET,
    UNKNOWN,
)
from .parsers import (
    Constellation,
    LocationUpdate,
    SatelliteCountUpdate,
    SatelliteDetails,
    SatelliteRecord,
    format_coordinate,
    parse_sentence,
)
from .registry import SatelliteRegistry
from .staging import StagingBuffers
from .snapshot import Snapshot, SnapshotStore
from .config import DiagConfig, load_config
from .event_log import EventLog
from .pipeline import (
    IngestQueue,
    NMEAPipeline,
    ParserWorker,
    PeriodicTask,
    RegistryJanitor,
    SnapshotPublisher,
)

__all__ = [
    # Constants
    "DISPLAY_MAX_SIZE",
    "DISPLAY_TRIM_TARGET",
    "JANITOR_INTERVAL_S",
    "KMH_PER_KNOT",
    "PARSE_ERROR",
    "PUBLISH_INTERVAL_S",
    "REGISTRY_MAX_SIZE",
    "REGISTRY_TRIM_TARGET",
    "UNKNOWN",
    # Parsing
    "Constellation",
    "LocationUpdate",
    "SatelliteCountUpdate",
    "SatelliteDetails",
    "SatelliteRecord",
    "format_coordinate",
    "parse_sentence",
    # State
    "SatelliteRegistry",
    "StagingBuffers",
    "Snapshot",
    "SnapshotStore",
    "EventLog",
    # Config
    "DiagConfig",
    "load_config",
    # Pipeline
    "IngestQueue",
    "NMEAPipeline",
    "ParserWorker",
    "PeriodicTask",
    "RegistryJanitor",
    "SnapshotPublisher",
]
