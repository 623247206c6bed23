"""
Scan schemas for validation and serialization.

Covers the scan submission request, the payloads posted to the remote
logging service, and the history/last-scan records kept locally.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import Field

from models.base import BaseSchema


class ScanStatus(str, Enum):
    """
    Known scan outcome statuses.

    OK and DUPLICATE come from the logging service. ERROR and OFFLINE are
    produced by the client when the service could not be reached or answered
    badly. FAILED is only used for display.
    """
    OK = "OK"
    DUPLICATE = "DUPLICATE"
    ERROR = "ERROR"
    OFFLINE = "OFFLINE"
    FAILED = "FAILED"


class FeedbackKind(str, Enum):
    """Operator feedback class for a scan outcome."""
    OK = "ok"
    DUPLICATE = "dup"
    ERROR = "err"


# ===================
# REQUESTS
# ===================

class ScanSubmission(BaseSchema):
    """A scan posted by the capture station."""

    raw: str = Field(..., min_length=1, max_length=500, description="Scanner output")
    operator: Optional[str] = Field(None, max_length=100, description="Operator name")
    station: Optional[str] = Field(None, max_length=50, description="Station code")
    comment: Optional[str] = Field(None, max_length=500, description="General note")


class DecodeRequest(BaseSchema):
    """Decode a scan without sending it."""

    raw: str = Field(..., min_length=1, max_length=500, description="Scanner output")


class CorrectionCreate(BaseSchema):
    """Note attached to an already logged scan."""

    part: str = Field("", max_length=100, description="Part number of the scan")
    serial: str = Field(..., min_length=1, max_length=100, description="Serial number of the scan")
    note: str = Field(..., min_length=1, max_length=1000, description="Correction note")


# ===================
# WIRE PAYLOADS
# ===================

class ScanPayload(BaseSchema):
    """Body posted to the logging service for a scan."""

    secret: Optional[str] = None
    operator: str
    station: str
    raw_scan: str
    part_number: str
    serial_number: str
    comment: str = ""


class CorrectionPayload(BaseSchema):
    """Body posted to the logging service for a correction note."""

    secret: Optional[str] = None
    action: str = "CORRECTION"
    part_number: str
    serial_number: str
    note: str


# ===================
# RECORDS & RESPONSES
# ===================

class HistoryEntry(BaseSchema):
    """Stored history record for one scan."""

    part: str
    serial: str
    status: str
    timestamp: datetime


class HistoryEntryResponse(HistoryEntry):
    """History record with display fields."""

    display_time: str = Field(..., description="MM/DD/YY HH:MM:SS")
    relative_time: str = Field(..., description="e.g. '5 mins ago'")
    display_class: str = Field(..., description="ok, dup, or queued")


class HistoryListResponse(BaseSchema):
    """Today's scans for one operator."""

    operator: str
    data: list[HistoryEntryResponse]
    total: int


class LastScanResponse(HistoryEntry):
    """Last successful scan for an operator/station."""

    display_time: str
    relative_time: str


class DecodeResponse(BaseSchema):
    """Result of decoding a scan."""

    raw_scan: str = Field(..., description="Normalized scan text")
    part: str
    serial: str
    symbology: str
    recognized: bool
    unknown_part: bool


class ScanResult(BaseSchema):
    """Outcome of a scan submission."""

    status: str = Field(..., description="Status from the logging service or client")
    display_status: str = Field(..., description="Status shown to the operator")
    feedback: FeedbackKind
    message: str
    part: str
    serial: str
    symbology: str
    unknown_part: bool = False
    local_duplicate: bool = False
    timestamp: datetime


class CorrectionResult(BaseSchema):
    """Outcome of a correction note."""

    status: str
    message: str


class PartMapStatus(BaseSchema):
    """Load state of the part number map."""

    loaded: bool
    entries: int
    loaded_at: Optional[datetime] = None
    source: Optional[str] = None


class ConnectivityStatus(BaseSchema):
    """Reachability of the logging service."""

    configured: bool
    online: bool
    consecutive_failures: int
