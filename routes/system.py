"""
System API routes.

Part number map status and logging service connectivity.
"""

from fastapi import APIRouter
import structlog

from integrations.scan_logger import get_scan_logger_client
from models.scan import ConnectivityStatus, PartMapStatus
from services.part_map_service import get_part_map_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["System"])


@router.get("/part-map", response_model=PartMapStatus)
async def part_map_status():
    """
    Part number map load state.

    The map is loaded once at startup and never refreshed during a session.
    """
    return get_part_map_service().status()


@router.post("/connectivity/check", response_model=ConnectivityStatus)
def check_connectivity():
    """Ping the logging service (e.g. after the tablet wakes up)."""
    client = get_scan_logger_client()
    online = client.ping()
    logger.info("connectivity_checked", online=online)
    return ConnectivityStatus(
        configured=client.configured,
        online=online,
        consecutive_failures=client.consecutive_failures,
    )
