"""
Unit tests for PartMapService.

Run: pytest tests/unit/test_part_map_service.py -v
"""

import pytest
import requests

from services.part_map_service import PartMapService
from tests.factories import GS1_PREFIX


class TestPartMapLoad:
    """Tests for PartMapService.load()"""

    def test_loads_map(self, mock_client):
        service = PartMapService(client=mock_client)

        part_map = service.load()

        assert part_map[GS1_PREFIX] == "PART-X"
        assert service.loaded is True

    def test_loads_only_once(self, mock_client):
        service = PartMapService(client=mock_client)

        service.load()
        mock_client.fetch_part_map.return_value = {"other": "PART-Y"}
        part_map = service.load()

        assert mock_client.fetch_part_map.call_count == 1
        assert "other" not in part_map

    def test_empty_fetch_leaves_empty_map(self, mock_client):
        mock_client.fetch_part_map.return_value = {}
        service = PartMapService(client=mock_client)

        assert dict(service.load()) == {}
        assert service.loaded is True

    def test_unexpected_error_leaves_empty_map(self, mock_client):
        mock_client.fetch_part_map.side_effect = requests.exceptions.ConnectionError("down")
        service = PartMapService(client=mock_client)

        assert dict(service.load()) == {}

    def test_map_is_read_only(self, part_map_service):
        with pytest.raises(TypeError):
            part_map_service.part_map["new"] = "X"

    def test_not_loaded_before_load(self, mock_client):
        service = PartMapService(client=mock_client)

        assert service.loaded is False
        assert dict(service.part_map) == {}


class TestPartMapStatus:
    """Tests for PartMapService.status()"""

    def test_loaded_status(self, part_map_service):
        status = part_map_service.status()

        assert status.loaded is True
        assert status.entries == 1
        assert status.loaded_at is not None
        assert status.source == "scan_logger"

    def test_unconfigured_source(self, mock_client):
        mock_client.configured = False
        mock_client.fetch_part_map.return_value = {}
        service = PartMapService(client=mock_client)
        service.load()

        status = service.status()

        assert status.entries == 0
        assert status.source is None
