"""
Scan service.

Runs one scan from raw scanner text to a logged result:

    normalize -> decode -> sanitize serial -> validate -> send -> history

Invalid scans are rejected before anything is sent. Only one submission is
in flight at a time; a second one arriving meanwhile is rejected.
"""

import threading
import time
from typing import Callable, Optional
import structlog

from config import settings as app_settings, Settings
from exceptions import ExternalServiceError, InvalidScanFormatError, ScanInProgressError
from integrations.scan_logger import ScanLoggerClient, get_scan_logger_client
from models.scan import (
    CorrectionCreate,
    CorrectionPayload,
    CorrectionResult,
    DecodeResponse,
    FeedbackKind,
    ScanPayload,
    ScanResult,
    ScanStatus,
    ScanSubmission,
)
from parsers.barcode_parser import (
    GS1_PREFIX_LENGTH,
    DecodedScan,
    decode,
    normalize_scan,
    sanitize_serial,
)
from services.history_service import HistoryService, get_history_service, operator_key
from services.part_map_service import PartMapService, get_part_map_service
from services.station_service import StationService, get_station_service

logger = structlog.get_logger(__name__)


# status -> (display status, feedback, message)
_OUTCOMES = {
    ScanStatus.OK.value: (ScanStatus.OK.value, FeedbackKind.OK, "SAVED"),
    ScanStatus.DUPLICATE.value: (ScanStatus.DUPLICATE.value, FeedbackKind.DUPLICATE, "DUPLICATE"),
    ScanStatus.OFFLINE.value: (
        ScanStatus.OFFLINE.value, FeedbackKind.ERROR, "CONNECTION LOST - Retrying failed"
    ),
}
_FAILED_OUTCOME = (ScanStatus.FAILED.value, FeedbackKind.ERROR, "FAILED - Try again")


def describe_outcome(status: str) -> tuple[str, FeedbackKind, str]:
    """Display status, feedback kind and operator message for a status."""
    return _OUTCOMES.get(status, _FAILED_OUTCOME)


class ScanLock:
    """
    Non-blocking single-holder lock for scan submissions.

    A holder older than timeout_seconds is treated as stuck and replaced, so
    a hung request can never leave the station unable to scan. Each acquire
    returns a token; release only frees the lock for its current holder.
    """

    def __init__(
        self,
        timeout_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._guard = threading.Lock()
        self._acquired_at: Optional[float] = None
        self._holder = 0
        self._next_token = 0

    @property
    def held(self) -> bool:
        return self._acquired_at is not None

    def acquire(self) -> int:
        """
        Take the lock.

        Returns:
            Token to pass to release()

        Raises:
            ScanInProgressError: If a live submission holds it
        """
        with self._guard:
            now = self._clock()
            if self._acquired_at is not None:
                held_for = now - self._acquired_at
                if held_for < self.timeout_seconds:
                    raise ScanInProgressError(held_for)
                logger.warning("scan_lock_timeout", held_seconds=round(held_for, 1))
            self._next_token += 1
            self._holder = self._next_token
            self._acquired_at = now
            return self._holder

    def release(self, token: int) -> bool:
        """
        Free the lock if token still holds it.

        Returns:
            False if the lock was taken over in the meantime
        """
        with self._guard:
            if self._acquired_at is None or token != self._holder:
                logger.warning("scan_lock_release_ignored", token=token, holder=self._holder)
                return False
            self._acquired_at = None
            return True


class ScanService:
    """Scan submission, preview and correction notes."""

    def __init__(
        self,
        part_maps: Optional[PartMapService] = None,
        client: Optional[ScanLoggerClient] = None,
        history: Optional[HistoryService] = None,
        station: Optional[StationService] = None,
        config: Optional[Settings] = None,
        lock: Optional[ScanLock] = None,
    ):
        self.config = config or app_settings
        self.part_maps = part_maps or get_part_map_service()
        self.client = client or get_scan_logger_client()
        self.history = history or get_history_service()
        self.station = station or get_station_service()
        self.lock = lock or ScanLock(self.config.processing_timeout_seconds)

    # ===================
    # DECODING
    # ===================

    def _decode(self, raw: str) -> tuple[str, DecodedScan, str]:
        """Normalize, decode and sanitize. Returns (normalized, decoded, serial)."""
        normalized = normalize_scan(raw)
        decoded = decode(normalized, self.part_maps.part_map)
        return normalized, decoded, sanitize_serial(decoded.serial)

    def preview(self, raw: str) -> DecodeResponse:
        """Decode a scan without validating or sending it."""
        normalized, decoded, serial = self._decode(raw)
        return DecodeResponse(
            raw_scan=normalized,
            part=decoded.part,
            serial=serial,
            symbology=decoded.symbology.value,
            recognized=decoded.is_recognized,
            unknown_part=decoded.is_unknown_part,
        )

    def _validate(self, raw: str) -> tuple[str, DecodedScan, str]:
        """
        Decode and reject scans that cannot be logged.

        Raises:
            InvalidScanFormatError: Empty scan, unknown format, or no serial
        """
        normalized, decoded, serial = self._decode(raw)

        if not normalized:
            raise InvalidScanFormatError(InvalidScanFormatError.EMPTY, raw)

        if not decoded.is_recognized:
            logger.warning("scan_unrecognized_format", raw_scan=normalized)
            raise InvalidScanFormatError(InvalidScanFormatError.UNRECOGNIZED, normalized)

        if not serial:
            logger.warning(
                "scan_empty_serial",
                raw_scan=normalized,
                symbology=decoded.symbology.value
            )
            raise InvalidScanFormatError(
                InvalidScanFormatError.EMPTY_SERIAL,
                normalized,
                decoded.symbology.value
            )

        if decoded.is_unknown_part:
            # Logged anyway; the part is fixed up later from the raw scan
            logger.warning(
                "scan_unknown_part",
                prefix=normalized[:GS1_PREFIX_LENGTH],
                serial=serial
            )

        return normalized, decoded, serial

    # ===================
    # SUBMISSION
    # ===================

    def submit(self, submission: ScanSubmission) -> ScanResult:
        """
        Log a scan with the remote service and record it locally.

        Args:
            submission: Raw scan plus operator/station/comment. Missing
                operator or station fall back to the saved preferences.

        Returns:
            ScanResult (transport failures are reported as statuses)

        Raises:
            InvalidScanFormatError: If the scan cannot be decoded
            ScanInProgressError: If another scan is being processed
        """
        normalized, decoded, serial = self._validate(submission.raw)

        prefs = self.station.get_preferences()
        operator = submission.operator if submission.operator is not None else prefs.operator
        station = submission.station or prefs.station

        token = self.lock.acquire()
        try:
            local_duplicate = self.history.is_duplicate(operator, serial)

            if local_duplicate and self.config.block_local_duplicates:
                logger.info("scan_local_duplicate_blocked", serial=serial)
                status = ScanStatus.DUPLICATE.value
            else:
                if local_duplicate:
                    logger.info("scan_local_duplicate", serial=serial)
                payload = ScanPayload(
                    secret=self.config.shared_secret,
                    operator=operator_key(operator),
                    station=station,
                    raw_scan=normalized,
                    part_number=decoded.part,
                    serial_number=serial,
                    comment=self.station.resolve_comment(operator, station, submission.comment),
                )
                logger.info(
                    "sending_scan",
                    operator=payload.operator,
                    station=station,
                    part=decoded.part,
                    serial=serial
                )
                status = self.client.send(payload.model_dump())

            entry = self.history.add(operator, decoded.part, serial, status)
            self.history.save_last_scan(operator, station, entry)
        finally:
            self.lock.release(token)

        display_status, feedback, message = describe_outcome(status)
        logger.info("scan_processed", serial=serial, status=status)

        return ScanResult(
            status=status,
            display_status=display_status,
            feedback=feedback,
            message=message,
            part=decoded.part,
            serial=serial,
            symbology=decoded.symbology.value,
            unknown_part=decoded.is_unknown_part,
            local_duplicate=local_duplicate,
            timestamp=entry.timestamp,
        )

    def submit_correction(self, correction: CorrectionCreate) -> CorrectionResult:
        """
        Attach a note to a logged scan.

        Raises:
            ExternalServiceError: If the logging service does not accept it
        """
        payload = CorrectionPayload(
            secret=self.config.shared_secret,
            part_number=correction.part,
            serial_number=correction.serial,
            note=correction.note,
        )
        logger.info("sending_correction", part=correction.part, serial=correction.serial)

        status = self.client.send(payload.model_dump())
        if status != ScanStatus.OK.value:
            logger.error("correction_rejected", serial=correction.serial, status=status)
            raise ExternalServiceError(
                "scan_logger",
                "Error saving note",
                details={"status": status}
            )

        return CorrectionResult(status=status, message="Note Attached")


# Singleton instance
_scan_service: Optional[ScanService] = None


def get_scan_service() -> ScanService:
    """Get or create ScanService instance."""
    global _scan_service
    if _scan_service is None:
        _scan_service = ScanService()
    return _scan_service
