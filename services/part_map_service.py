"""
Part number map service.

The map (GS1 prefix -> part number) is fetched once when the application
starts and is read-only afterwards. A failed fetch leaves an empty map:
GS1 scans then decode as UNKNOWN parts instead of blocking the station.
"""

from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional
import structlog

from integrations.scan_logger import ScanLoggerClient, get_scan_logger_client
from models.scan import PartMapStatus
from utils.time_utils import local_now

logger = structlog.get_logger(__name__)

SAMPLE_SIZE = 3


class PartMapService:
    """
    Holds the session's part number map.

    load() is best-effort and only runs once; part_map can be read from any
    thread once it has completed.
    """

    def __init__(self, client: Optional[ScanLoggerClient] = None):
        self.client = client or get_scan_logger_client()
        self._part_map: Mapping[str, str] = MappingProxyType({})
        self._loaded_at: Optional[datetime] = None

    @property
    def part_map(self) -> Mapping[str, str]:
        return self._part_map

    @property
    def loaded(self) -> bool:
        return self._loaded_at is not None

    def load(self) -> Mapping[str, str]:
        """
        Fetch the part number map from the logging service.

        Returns:
            The session map (empty if the fetch failed). Never raises.
        """
        if self.loaded:
            return self._part_map

        try:
            fetched = self.client.fetch_part_map()
        except Exception as e:
            logger.error("part_map_load_failed", error=str(e), error_type=type(e).__name__)
            fetched = {}

        self._part_map = MappingProxyType(dict(fetched))
        self._loaded_at = local_now()

        size = len(self._part_map)
        if size:
            sample = list(self._part_map.items())[:SAMPLE_SIZE]
            logger.info("part_map_loaded", entries=size, sample=sample)
        else:
            logger.warning(
                "part_map_empty",
                hint="GS1-128 scans will decode as UNKNOWN parts"
            )

        return self._part_map

    def status(self) -> PartMapStatus:
        return PartMapStatus(
            loaded=self.loaded,
            entries=len(self._part_map),
            loaded_at=self._loaded_at,
            source="scan_logger" if self.client.configured else None,
        )


# Singleton instance
_part_map_service: Optional[PartMapService] = None


def get_part_map_service() -> PartMapService:
    """Get or create PartMapService instance."""
    global _part_map_service
    if _part_map_service is None:
        _part_map_service = PartMapService()
    return _part_map_service
