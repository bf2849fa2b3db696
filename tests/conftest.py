"""Shared pytest configuration and fixtures for the gnss_diag test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.nmea_samples import GGA, GLGSV, GSA, GSV_GROUP, RMC  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring a physical GPS receiver"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require physical hardware",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def nmea_burst() -> list:
    """One receiver cycle worth of sentences."""
    return [GGA, RMC, GSA, *GSV_GROUP, GLGSV]


@pytest.fixture
def nmea_file(tmp_path, nmea_burst) -> Path:
    """Recorded NMEA log with CRLF line endings and a stray non-NMEA line."""
    path = tmp_path / "capture.nmea"
    path.write_bytes(("\r\n".join(["garbage", *nmea_burst]) + "\r\n").encode("ascii"))
    return path
