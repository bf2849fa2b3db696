"""Unit tests for the staging buffers."""

import pytest

from gnss_diag.gps_core.constants import UNKNOWN
from gnss_diag.gps_core.parsers import parse_sentence
from gnss_diag.gps_core.parsers.nmea_types import LocationUpdate, SatelliteCountUpdate
from gnss_diag.gps_core.staging import SatelliteCounts, StagingBuffers
from tests.nmea_samples import GGA, GLGSV, GSA, GSV_GROUP, RMC


def _feed(staging, *sentences):
    for sentence in sentences:
        for delta in parse_sentence(sentence):
            staging.apply(delta)


class TestLocationStaging:
    """Test the partial-update policy for location fields."""

    def test_starts_empty(self):
        assert StagingBuffers().location.read() == {}

    def test_unknown_does_not_overwrite(self):
        staging = StagingBuffers()
        staging.apply(LocationUpdate(latitude="1.000000°N", speed="10.00 km/h"))
        staging.apply(LocationUpdate(latitude="2.000000°N"))

        fields = staging.location.read()
        assert fields == {"latitude": "2.000000°N", "speed": "10.00 km/h"}

    def test_gga_keeps_speed_from_rmc(self):
        staging = StagingBuffers()
        _feed(staging, RMC)
        speed = staging.location.read()["speed"]

        no_altitude = GGA.replace("545.4,M", ",M")
        _feed(staging, no_altitude)

        fields = staging.location.read()
        assert fields["speed"] == speed
        assert "altitude" not in fields
        assert fields["latitude"] == "48.117300°N"

    def test_read_returns_copy(self):
        staging = StagingBuffers()
        _feed(staging, GGA)
        fields = staging.location.read()
        fields["latitude"] = "tampered"
        assert staging.location.read()["latitude"] == "48.117300°N"


class TestSatelliteCountStaging:
    """Test the partial-update policy for counts and HDOP."""

    def test_starts_unreported(self):
        assert StagingBuffers().counts.read() == SatelliteCounts()

    def test_zero_does_not_overwrite(self):
        staging = StagingBuffers()
        staging.apply(SatelliteCountUpdate(visible_count=11, used_count=8, hdop="0.9"))
        staging.apply(SatelliteCountUpdate(visible_count=0, used_count=0, hdop=UNKNOWN))
        assert staging.counts.read() == SatelliteCounts(11, 8, "0.9")

    def test_mixed_sources(self):
        staging = StagingBuffers()
        _feed(staging, GGA, GSV_GROUP[0], GSA)

        counts = staging.counts.read()
        assert counts.visible_count == 11
        assert counts.used_count == 5
        assert counts.hdop == "1.3"

    def test_last_first_of_group_gsv_sets_visible(self):
        staging = StagingBuffers()

        _feed(staging, *GSV_GROUP, GLGSV)
        assert staging.counts.read().visible_count == 2

        _feed(staging, GSV_GROUP[0])
        assert staging.counts.read().visible_count == 11

    def test_later_gsv_sentences_leave_visible(self):
        staging = StagingBuffers()
        _feed(staging, GLGSV, *GSV_GROUP[1:])
        assert staging.counts.read().visible_count == 2


class TestStagingBuffers:
    """Test delta dispatch and merge idempotence."""

    def test_full_burst(self, nmea_burst):
        staging = StagingBuffers()
        _feed(staging, *nmea_burst)

        assert len(staging.satellites) == 13
        assert staging.location.read()["altitude"] == "545.4 M"

    def test_idempotent(self, nmea_burst):
        for sentence in nmea_burst:
            once = StagingBuffers()
            twice = StagingBuffers()
            _feed(once, sentence)
            _feed(twice, sentence, sentence)

            assert once.location.read() == twice.location.read()
            assert once.counts.read() == twice.counts.read()
            assert once.satellites.snapshot() == twice.satellites.snapshot()

    def test_unsupported_delta(self):
        with pytest.raises(TypeError):
            StagingBuffers().apply("not a delta")
