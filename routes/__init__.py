"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.scans import router as scans_router
from routes.station import router as station_router
from routes.system import router as system_router

__all__ = [
    "scans_router",
    "station_router",
    "system_router",
]
