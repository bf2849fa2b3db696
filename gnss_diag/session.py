"""Host-facing diagnostic session.

Binds the platform's location and telephony services to the NMEA
pipeline and the published snapshot. Platform services are opaque: they
are reached only through the small protocols below, and any of them may
be missing or refuse access. Every failure degrades one snapshot field
to a status string; nothing here stops the pipeline.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from .core.logging_utils import get_module_logger
from .gps_core.config import DiagConfig
from .gps_core.constants import (
    MAIN_SENTENCE_PREVIEW_CHARS,
    MAIN_SENTENCE_TAGS,
    UNKNOWN,
)
from .gps_core.event_log import EventLog, Notifier
from .gps_core.parsers.nmea_parser import sentence_tag
from .gps_core.pipeline import Dispatcher, NMEAPipeline, run_inline
from .gps_core.snapshot import Snapshot, SnapshotStore
from .telephony.signal import (
    READ_FAILED,
    CellLocationEvent,
    NetworkIdentity,
    SignalReading,
    SignalStrengthEvent,
    decode_cell_location,
    decode_signal_strength,
    split_operator_code,
)

logger = get_module_logger(__name__)

GPS_PROVIDER = "gps"
NETWORK_PROVIDER = "network"

STATUS_GPS_ENABLED = "GPS enabled"
STATUS_NETWORK_ENABLED = "network location enabled"
STATUS_LOCATION_DISABLED = "location services disabled"
STATUS_NEEDS_PERMISSION = "needs permission"
STATUS_LOCATION_UNAVAILABLE = "location service unavailable"
STATUS_NEEDS_PHONE_PERMISSION = "needs phone permission"
STATUS_TELEPHONY_UNAVAILABLE = "telephony service unavailable"

MESSAGE_NEEDS_LOCATION = "location permission is required for GPS data"
MESSAGE_ENABLE_LOCATION = "GPS and network location are disabled; enable location services"


class LocationService(Protocol):
    """What the session needs from the platform location service."""

    def is_provider_enabled(self, provider: str) -> bool: ...

    def add_nmea_listener(self, listener: Callable[[str], None]) -> None: ...

    def remove_nmea_listener(self, listener: Callable[[str], None]) -> None: ...


class TelephonyService(Protocol):
    """What the session needs from the platform telephony service."""

    def operator_name(self) -> Optional[str]: ...

    def operator_code(self) -> Optional[str]: ...

    def subscriber_id(self) -> Optional[str]: ...

    def phone_number(self) -> Optional[str]: ...

    def register_listener(
        self,
        on_signal_strength: Callable[[SignalStrengthEvent], None],
        on_cell_location: Callable[[CellLocationEvent], None],
    ) -> None: ...

    def unregister_listener(self) -> None: ...


class DiagnosticSession:
    """One running diagnostic display back end.

    Example:
        session = DiagnosticSession(config, location, telephony)
        session.start()
        session.on_permissions_result(location=True, phone=True)
        snapshot = session.snapshot
        ...
        session.stop()
    """

    def __init__(
        self,
        config: Optional[DiagConfig] = None,
        location_service: Optional[LocationService] = None,
        telephony_service: Optional[TelephonyService] = None,
        *,
        dispatcher: Dispatcher = run_inline,
        event_log: Optional[EventLog] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or DiagConfig()
        self.location_service = location_service
        self.telephony_service = telephony_service
        self.store = SnapshotStore()
        self.pipeline = NMEAPipeline(self.config, store=self.store, dispatcher=dispatcher)
        self.event_log = event_log or EventLog(
            self.config.event_log_max_entries,
            self.config.event_log_trim_target,
        )
        self._clock = clock

        self._location_permission = False
        self._phone_permission = False
        self._phone_number_permission = False
        self._nmea_registered = False
        self._telephony_registered = False
        self._last_main_sentence: Optional[float] = None
        self._throttle_lock = threading.Lock()

    @property
    def snapshot(self) -> Snapshot:
        return self.store.get()

    def add_snapshot_listener(self, listener: Callable[[Snapshot], None]) -> None:
        self.pipeline.publisher.add_listener(listener)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        self.event_log.add("application started, initializing")
        self.pipeline.start()

    def stop(self) -> None:
        self._unbind_location()
        self._unbind_telephony()
        self.pipeline.stop()
        self.event_log.add("diagnostic session stopped")

    def on_permissions_result(
        self,
        location: bool,
        phone: bool,
        phone_number: Optional[bool] = None,
    ) -> None:
        """Apply a permission-grant result and (re)bind the services."""
        if phone_number is None:
            phone_number = phone
        self._location_permission = location
        self._phone_permission = phone
        self._phone_number_permission = phone_number
        self.event_log.add(
            f"permission result - location:{location}, phone:{phone}, number:{phone_number}"
        )
        self._bind_location()
        self._bind_telephony()

    # =========================================================================
    # Location / NMEA
    # =========================================================================

    def _provider_enabled(self, provider: str) -> bool:
        try:
            return bool(self.location_service.is_provider_enabled(provider))
        except Exception as exc:
            logger.error("Failed to check %s provider: %s", provider, exc)
            return False

    def _bind_location(self) -> None:
        self._unbind_location()
        self.event_log.add(f"location binding, permission: {self._location_permission}")

        if not self._location_permission or self.location_service is None:
            status = (
                STATUS_LOCATION_UNAVAILABLE
                if self.location_service is None
                else STATUS_NEEDS_PERMISSION
            )
            self.store.set_fields(gps_status=status, nmea_message=MESSAGE_NEEDS_LOCATION)
            self.event_log.add(f"location not bound: {status}")
            logger.warning("Location not bound: %s", status)
            return

        gps_enabled = self._provider_enabled(GPS_PROVIDER)
        network_enabled = self._provider_enabled(NETWORK_PROVIDER)
        self.event_log.add(f"location providers - GPS:{gps_enabled}, network:{network_enabled}")

        if gps_enabled:
            status = STATUS_GPS_ENABLED
        elif network_enabled:
            status = STATUS_NETWORK_ENABLED
        else:
            self.store.set_fields(
                gps_status=STATUS_LOCATION_DISABLED,
                nmea_message=MESSAGE_ENABLE_LOCATION,
            )
            self.event_log.add("location services disabled")
            return
        self.store.set_fields(gps_status=status)

        try:
            self.location_service.add_nmea_listener(self.on_nmea)
        except PermissionError as exc:
            self.store.set_fields(gps_status=f"{STATUS_NEEDS_PERMISSION}: {exc}")
            self.event_log.add("NMEA listener failed to start: permission denied")
            logger.error("NMEA listener registration denied: %s", exc)
            return
        except Exception as exc:
            self.store.set_fields(gps_status=f"start failed: {exc}")
            self.event_log.add(f"NMEA listener failed to start: {exc}")
            logger.error("NMEA listener registration failed: %s", exc)
            return

        self._nmea_registered = True
        self.event_log.add("NMEA listener started")

    def _unbind_location(self) -> None:
        if not self._nmea_registered:
            return
        self._nmea_registered = False
        try:
            self.location_service.remove_nmea_listener(self.on_nmea)
        except Exception as exc:
            self.event_log.add(f"error stopping NMEA listener: {exc}")
            logger.error("Failed to remove NMEA listener: %s", exc)
            return
        self.event_log.add("NMEA listener stopped")

    def on_nmea(self, sentence: str) -> None:
        """Platform NMEA callback; may be called from several threads."""
        self.pipeline.offer(sentence)
        if sentence_tag(sentence) not in MAIN_SENTENCE_TAGS:
            return

        with self._throttle_lock:
            now = self._clock()
            last = self._last_main_sentence
            if last is not None and now - last <= self.config.main_sentence_interval_s:
                return
            self._last_main_sentence = now
        self.store.set_fields(nmea_message=sentence)
        self.event_log.add(f"NMEA: {sentence[:MAIN_SENTENCE_PREVIEW_CHARS]}...")

    # =========================================================================
    # Telephony
    # =========================================================================

    def _read_identity_field(self, label: str, reader: Callable[[], Optional[str]]) -> str:
        try:
            value = reader()
        except PermissionError as exc:
            self.event_log.add(f"{label} read denied: {exc}")
            return f"{STATUS_NEEDS_PERMISSION} ({exc})"
        except Exception as exc:
            self.event_log.add(f"{label} read failed: {type(exc).__name__}")
            logger.error("Failed to read %s: %s", label, exc)
            return READ_FAILED
        return value or UNKNOWN

    def _read_identity(self) -> NetworkIdentity:
        service = self.telephony_service
        operator_name = self._read_identity_field("operator name", service.operator_name)
        operator_code = self._read_identity_field("operator code", service.operator_code)
        if operator_code == READ_FAILED:
            mcc = mnc = READ_FAILED
        else:
            mcc, mnc = split_operator_code(operator_code)
        subscriber_id = self._read_identity_field("subscriber id", service.subscriber_id)
        if self._phone_number_permission:
            phone_number = self._read_identity_field("phone number", service.phone_number)
        else:
            phone_number = STATUS_NEEDS_PERMISSION

        identity = NetworkIdentity(
            operator_name=operator_name,
            mcc=mcc,
            mnc=mnc,
            subscriber_id=subscriber_id,
            phone_number=phone_number,
        )
        self.event_log.add(f"phone info read - operator:{operator_name}")
        return identity

    def _bind_telephony(self) -> None:
        self._unbind_telephony()

        if not self._phone_permission or self.telephony_service is None:
            reason = (
                STATUS_TELEPHONY_UNAVAILABLE
                if self.telephony_service is None
                else STATUS_NEEDS_PHONE_PERMISSION
            )
            self.store.set_fields(signal=SignalReading.unavailable(reason))
            self.event_log.add(f"signal listener not started: {reason}")
            logger.warning("Telephony not bound: %s", reason)
            return

        self.store.set_fields(identity=self._read_identity())

        try:
            self.telephony_service.register_listener(
                self.on_signal_strength,
                self.on_cell_location,
            )
        except PermissionError as exc:
            self.store.set_fields(
                signal=SignalReading.unavailable(f"{STATUS_NEEDS_PERMISSION}: {exc}")
            )
            self.event_log.add("signal listener failed to start: permission denied")
            logger.error("Telephony listener registration denied: %s", exc)
            return
        except Exception as exc:
            self.store.set_fields(signal=SignalReading.unavailable(f"start failed: {exc}"))
            self.event_log.add(f"signal listener failed to start: {exc}")
            logger.error("Telephony listener registration failed: %s", exc)
            return

        self._telephony_registered = True
        self.event_log.add("signal listener started")

    def _unbind_telephony(self) -> None:
        if not self._telephony_registered:
            return
        self._telephony_registered = False
        try:
            self.telephony_service.unregister_listener()
        except Exception as exc:
            self.event_log.add(f"error stopping signal listener: {exc}")
            logger.error("Failed to unregister telephony listener: %s", exc)
            return
        self.event_log.add("signal listener stopped")

    def on_signal_strength(self, event: SignalStrengthEvent) -> None:
        reading = decode_signal_strength(event)
        self.store.set_fields(signal=reading)
        logger.debug(
            "Signal: %s dBm (%s, %s)", reading.dbm, reading.signal_type, reading.generation
        )

    def on_cell_location(self, event: CellLocationEvent) -> None:
        self.store.set_fields(cell=decode_cell_location(event))

    # =========================================================================
    # Log persistence
    # =========================================================================

    def save_log(self, notify: Optional[Notifier] = None, directory: Optional[Path] = None) -> Optional[Path]:
        """Persist the event log; see :meth:`EventLog.save`."""
        return self.event_log.save(directory or self.config.log_dir, notify)


__all__ = [
    "DiagnosticSession",
    "LocationService",
    "TelephonyService",
]
