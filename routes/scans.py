"""
Scan API routes.

Submitting scans, decoding previews, history, last scan and correction notes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.scan import (
    CorrectionCreate,
    CorrectionResult,
    DecodeRequest,
    DecodeResponse,
    HistoryListResponse,
    LastScanResponse,
    ScanResult,
    ScanSubmission,
)
from services.history_service import get_history_service
from services.scan_service import get_scan_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


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
# ROUTES
# ===================

@router.post("", response_model=ScanResult, status_code=201)
def submit_scan(data: ScanSubmission):
    """
    Submit a scan.

    Decodes the label, sends it to the logging service and records it in
    the local history. Invalid formats are rejected with 422 before sending.
    """
    try:
        service = get_scan_service()
        return service.submit(data)

    except Exception as e:
        return handle_error(e)


@router.post("/decode", response_model=DecodeResponse)
async def decode_scan(data: DecodeRequest):
    """
    Decode a scan without sending it.

    Useful to check a label before scanning for real.
    """
    try:
        service = get_scan_service()
        return service.preview(data.raw)

    except Exception as e:
        return handle_error(e)


@router.get("/history", response_model=HistoryListResponse)
async def get_history(
    operator: Optional[str] = Query(None, description="Operator name (blank = UNNAMED)")
):
    """Today's scans for an operator, newest first."""
    try:
        service = get_history_service()
        return service.list_history(operator)

    except Exception as e:
        return handle_error(e)


@router.get("/last", response_model=Optional[LastScanResponse])
async def get_last_scan(
    operator: Optional[str] = Query(None, description="Operator name"),
    station: Optional[str] = Query(None, description="Station code")
):
    """Last OK/DUPLICATE scan for an operator/station, or null."""
    try:
        service = get_history_service()
        return service.get_last_scan(operator, station)

    except Exception as e:
        return handle_error(e)


@router.post("/corrections", response_model=CorrectionResult, status_code=201)
def add_correction(data: CorrectionCreate):
    """Attach a correction note to a logged scan."""
    try:
        service = get_scan_service()
        return service.submit_correction(data)

    except Exception as e:
        return handle_error(e)
