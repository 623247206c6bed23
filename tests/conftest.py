"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import MagicMock
from datetime import datetime

from config import Settings
from integrations.scan_logger import ScanLoggerClient
from services.local_store import LocalStore
from services.part_map_service import PartMapService
from services.history_service import HistoryService
from services.station_service import StationService
from services.scan_service import ScanService

from tests.factories import GS1_PREFIX, TZ, FrozenClock

# ===================
# FIXTURES
# ===================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a fake logging service, no retry delays."""
    return Settings(
        scan_logger_url="https://logger.test/exec",
        shared_secret="test-secret",
        retry_delay_seconds=0,
        network_retry_delay_seconds=0,
        data_dir=tmp_path,
    )


@pytest.fixture
def part_map() -> dict:
    return {GS1_PREFIX: "PART-X"}


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 10, 14, 30, 0, tzinfo=TZ))


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "local_store.json")


@pytest.fixture
def mock_client(part_map) -> MagicMock:
    """
    Mock scan logger client.

    Usage:
        def test_something(mock_client):
            mock_client.send.return_value = "DUPLICATE"
    """
    client = MagicMock(spec=ScanLoggerClient)
    client.configured = True
    client.online = True
    client.consecutive_failures = 0
    client.url = "https://logger.test/exec"
    client.send.return_value = "OK"
    client.ping.return_value = True
    client.fetch_part_map.return_value = dict(part_map)
    return client


@pytest.fixture
def part_map_service(mock_client) -> PartMapService:
    service = PartMapService(client=mock_client)
    service.load()
    return service


@pytest.fixture
def history_service(store, clock) -> HistoryService:
    return HistoryService(store=store, limit=100, clock=clock)


@pytest.fixture
def station_service(store) -> StationService:
    return StationService(store=store)


@pytest.fixture
def scan_service(
    part_map_service, mock_client, history_service, station_service, test_settings
) -> ScanService:
    return ScanService(
        part_maps=part_map_service,
        client=mock_client,
        history=history_service,
        station=station_service,
        config=test_settings,
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(
    monkeypatch,
    store,
    mock_client,
    part_map_service,
    history_service,
    station_service,
    scan_service,
):
    """
    FastAPI test client with all service singletons replaced.

    Usage:
        def test_endpoint(test_client, mock_client):
            response = test_client.post("/api/scans", json={"raw": "..."})
    """
    from fastapi.testclient import TestClient
    import integrations.scan_logger
    import services.local_store
    import services.part_map_service
    import services.history_service
    import services.station_service
    import services.scan_service
    from main import app

    monkeypatch.setattr(integrations.scan_logger, "_scan_logger_client", mock_client)
    monkeypatch.setattr(services.local_store, "_local_store", store)
    monkeypatch.setattr(services.part_map_service, "_part_map_service", part_map_service)
    monkeypatch.setattr(services.history_service, "_history_service", history_service)
    monkeypatch.setattr(services.station_service, "_station_service", station_service)
    monkeypatch.setattr(services.scan_service, "_scan_service", scan_service)

    return TestClient(app)
