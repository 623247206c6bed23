"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.scan import (
    ScanStatus,
    FeedbackKind,
    ScanSubmission,
    DecodeRequest,
    CorrectionCreate,
    ScanPayload,
    CorrectionPayload,
    HistoryEntry,
    HistoryEntryResponse,
    HistoryListResponse,
    LastScanResponse,
    DecodeResponse,
    ScanResult,
    CorrectionResult,
    PartMapStatus,
    ConnectivityStatus,
)
from models.station import (
    StationPreferences,
    PreferencesUpdate,
    BatchCommentResponse,
    BatchCommentLock,
    BatchCommentUnlock,
)

__all__ = [
    # Base
    "BaseSchema",

    # Scans
    "ScanStatus",
    "FeedbackKind",
    "ScanSubmission",
    "DecodeRequest",
    "CorrectionCreate",
    "ScanPayload",
    "CorrectionPayload",
    "HistoryEntry",
    "HistoryEntryResponse",
    "HistoryListResponse",
    "LastScanResponse",
    "DecodeResponse",
    "ScanResult",
    "CorrectionResult",
    "PartMapStatus",
    "ConnectivityStatus",

    # Station
    "StationPreferences",
    "PreferencesUpdate",
    "BatchCommentResponse",
    "BatchCommentLock",
    "BatchCommentUnlock",
]
