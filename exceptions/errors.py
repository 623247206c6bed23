"""
Custom exception classes for the application.

Every error raised above the barcode decoder derives from AppError so routes
can turn it into the standard error response.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "SCAN_EMPTY_SERIAL")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class StorageError(AppError):
    """Local store operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="STORAGE_ERROR",
            message=f"Local store {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# SCAN ERRORS
# ===================

class InvalidScanFormatError(ValidationError):
    """
    Scan cannot be turned into a part/serial pair.

    Raised before anything is sent to the logging service.
    """

    EMPTY = "SCAN_EMPTY"
    UNRECOGNIZED = "SCAN_UNRECOGNIZED_FORMAT"
    EMPTY_SERIAL = "SCAN_EMPTY_SERIAL"

    _MESSAGES = {
        EMPTY: "Scan is empty",
        UNRECOGNIZED: "Scan matches no known barcode format",
        EMPTY_SERIAL: "No serial number found in scan",
    }

    def __init__(self, code: str, raw_scan: str, symbology: Optional[str] = None):
        details = {"raw_scan": raw_scan}
        if symbology:
            details["symbology"] = symbology
        super().__init__(
            code=code,
            message=self._MESSAGES.get(code, "Invalid scan format"),
            details=details
        )


class ScanInProgressError(ConflictError):
    """Another scan submission is still in flight."""

    def __init__(self, held_seconds: float):
        super().__init__(
            code="SCAN_IN_PROGRESS",
            message="A scan is already being processed",
            details={"held_seconds": round(held_seconds, 1)}
        )


# ===================
# STATION ERRORS
# ===================

class StationLockedError(ConflictError):
    """Operator/station cannot change while the station is locked."""

    def __init__(self, operator: str, station: str):
        super().__init__(
            code="STATION_LOCKED",
            message="Unlock the station to change operator or station",
            details={"operator": operator, "station": station}
        )


class OperatorRequiredError(ValidationError):
    """Station lock needs an operator."""

    def __init__(self):
        super().__init__(
            code="OPERATOR_REQUIRED",
            message="Select an operator before locking the station"
        )
