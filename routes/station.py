"""
Station API routes.

Operator/station preferences, station lock and batch comment lock.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.station import (
    BatchCommentLock,
    BatchCommentResponse,
    BatchCommentUnlock,
    PreferencesUpdate,
    StationPreferences,
)
from services.station_service import get_station_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/station", tags=["Station"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# PREFERENCES
# ===================

@router.get("/preferences", response_model=StationPreferences)
async def get_preferences():
    """Current operator, station and lock state."""
    try:
        return get_station_service().get_preferences()
    except Exception as e:
        return handle_error(e)


@router.put("/preferences", response_model=StationPreferences)
async def update_preferences(data: PreferencesUpdate):
    """
    Change operator and station.

    Returns 409 while the station is locked.
    """
    try:
        return get_station_service().save_preferences(data.operator, data.station)
    except Exception as e:
        return handle_error(e)


@router.post("/lock", response_model=StationPreferences)
async def lock_station():
    """Lock operator/station. Requires an operator."""
    try:
        return get_station_service().lock()
    except Exception as e:
        return handle_error(e)


@router.post("/unlock", response_model=StationPreferences)
async def unlock_station():
    """Unlock operator/station."""
    try:
        return get_station_service().unlock()
    except Exception as e:
        return handle_error(e)


# ===================
# BATCH COMMENT
# ===================

@router.get("/batch-comment", response_model=BatchCommentResponse)
async def get_batch_comment(
    operator: Optional[str] = Query(None, description="Operator name"),
    station: Optional[str] = Query(None, description="Station code")
):
    """Batch comment state for an operator/station."""
    try:
        return get_station_service().get_batch_comment(operator, station)
    except Exception as e:
        return handle_error(e)


@router.post("/batch-comment/lock", response_model=BatchCommentResponse)
async def lock_batch_comment(data: BatchCommentLock):
    """Lock a comment so it is sent with every scan."""
    try:
        return get_station_service().lock_batch_comment(
            data.operator, data.station, data.comment
        )
    except Exception as e:
        return handle_error(e)


@router.post("/batch-comment/unlock", response_model=BatchCommentResponse)
async def unlock_batch_comment(data: BatchCommentUnlock):
    """Unlock the batch comment."""
    try:
        return get_station_service().unlock_batch_comment(data.operator, data.station)
    except Exception as e:
        return handle_error(e)
