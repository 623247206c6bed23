"""
Business logic services.

Each service handles one domain area.
"""

from services.local_store import LocalStore, get_local_store
from services.part_map_service import PartMapService, get_part_map_service
from services.history_service import HistoryService, get_history_service
from services.station_service import StationService, get_station_service
from services.scan_service import ScanService, ScanLock, get_scan_service

__all__ = [
    "LocalStore",
    "get_local_store",
    "PartMapService",
    "get_part_map_service",
    "HistoryService",
    "get_history_service",
    "StationService",
    "get_station_service",
    "ScanService",
    "ScanLock",
    "get_scan_service",
]
