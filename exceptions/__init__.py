"""
Custom exceptions module.

Import from here rather than from exceptions.errors.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    StorageError,

    # Scans
    InvalidScanFormatError,
    ScanInProgressError,

    # Station
    StationLockedError,
    OperatorRequiredError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "StorageError",

    # Scans
    "InvalidScanFormatError",
    "ScanInProgressError",

    # Station
    "StationLockedError",
    "OperatorRequiredError",
]
