"""
Shared test fixtures.

Environment is configured before the application is imported so the
global settings pick up the test API key.
"""

import os
import tempfile

os.environ["API_KEY"] = "test-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DEGRADE_ON_UPSTREAM_ERROR"] = "true"
os.environ["CORE_STATION_IDS"] = "159880,98210"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="metobs-logs-")

import pytest
from fastapi.testclient import TestClient

from metobs_api.dependencies.services import get_observation_source
from metobs_api.main import app
from metobs_api.schemas import Station

from fakes import FakeSource

TEST_API_KEY = "test-key"


@pytest.fixture
def catalog():
    """Small station catalog."""
    return [
        Station(id="159880", name="Luleå-Kallax Flygplats", lat=65.5436, lon=22.1120),
        Station(id="98210", name="Stockholm", lat=59.3417, lon=18.0549),
        Station(id="71420", name="Göteborg A", lat=57.7156, lon=11.9924),
        Station(id="52350", name="Malmö A", lat=55.5714, lon=13.0734),
    ]


@pytest.fixture
def fake_source(catalog):
    """Fake source with the catalog and no series data."""
    return FakeSource(catalog=catalog)


@pytest.fixture
def client():
    """Test client fixture."""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Return authentication headers with API key."""
    return {"x-api-key": TEST_API_KEY}


@pytest.fixture
def override_source():
    """Install a source for the app; cleans up overrides afterwards."""
    def install(source):
        app.dependency_overrides[get_observation_source] = lambda: source
        return source

    yield install
    app.dependency_overrides.clear()
