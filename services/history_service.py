"""
Scan history service.

Keeps today's scans per operator (newest first) and the last successful scan
per operator/station in the local store. History from a previous day is
dropped the first time it is read.
"""

from datetime import datetime
from typing import Callable, Optional
from pydantic import ValidationError as PydanticValidationError
import structlog

from config import settings
from models.scan import (
    HistoryEntry,
    HistoryEntryResponse,
    HistoryListResponse,
    LastScanResponse,
    ScanStatus,
)
from services.local_store import LocalStore, get_local_store
from utils.time_utils import (
    format_timestamp,
    is_same_local_day,
    local_now,
    relative_time,
)

logger = structlog.get_logger(__name__)

UNNAMED_OPERATOR = "UNNAMED"

# Statuses that do not count as a logged scan for duplicate detection
NON_LOGGED_STATUSES = {"ERR", ScanStatus.ERROR.value}

# Only these outcomes become the station's "last scan"
LAST_SCAN_STATUSES = {ScanStatus.OK.value, ScanStatus.DUPLICATE.value}


def operator_key(operator: Optional[str]) -> str:
    """Operator name used in storage keys and payloads."""
    return (operator or "").strip() or UNNAMED_OPERATOR


def display_class(status: str) -> str:
    """
    Map a status to its history badge class.

    DUPLICATE -> dup; OFFLINE, ERROR, PENDING, QUEUED -> queued; else ok.
    """
    status = (status or "ERR").lower()
    if "dup" in status:
        return "dup"
    if any(marker in status for marker in ("off", "err", "pend", "queue")):
        return "queued"
    return "ok"


class HistoryService:
    """
    Local scan history and last-scan cache.

    History is capped at settings.history_limit entries per operator.
    """

    def __init__(
        self,
        store: Optional[LocalStore] = None,
        limit: Optional[int] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.store = store or get_local_store()
        self.limit = limit or settings.history_limit
        self._clock = clock

    # ===================
    # KEYS
    # ===================

    @staticmethod
    def _history_key(operator: Optional[str]) -> str:
        return f"history_{operator_key(operator)}"

    def _last_scan_key(self, operator: Optional[str], station: Optional[str]) -> str:
        station = (station or "").strip() or settings.default_station
        return f"lastScan_{operator_key(operator)}_{station}"

    # ===================
    # HISTORY
    # ===================

    def get_history(self, operator: Optional[str]) -> list[HistoryEntry]:
        """
        Get today's history for an operator, newest first.

        Clears stored history when the newest entry is from an earlier day.
        """
        key = self._history_key(operator)
        raw_entries = self.store.get(key, [])

        try:
            entries = [HistoryEntry(**item) for item in raw_entries]
        except (PydanticValidationError, TypeError) as e:
            logger.error("history_unreadable", operator=operator_key(operator), error=str(e))
            return []

        if entries and not is_same_local_day(entries[0].timestamp, self._clock()):
            logger.info(
                "history_reset_new_day",
                operator=operator_key(operator),
                dropped=len(entries)
            )
            self.store.set(key, [])
            return []

        return entries

    def add(
        self,
        operator: Optional[str],
        part: str,
        serial: str,
        status: str,
        timestamp: Optional[datetime] = None,
    ) -> HistoryEntry:
        """Prepend a scan to the operator's history."""
        entry = HistoryEntry(
            part=part,
            serial=serial,
            status=status,
            timestamp=timestamp or self._clock(),
        )

        entries = [entry] + self.get_history(operator)
        entries = entries[: self.limit]

        self.store.set(
            self._history_key(operator),
            [e.model_dump(mode="json") for e in entries]
        )
        logger.debug(
            "history_entry_added",
            operator=operator_key(operator),
            serial=serial,
            status=status
        )
        return entry

    def is_duplicate(self, operator: Optional[str], serial: str) -> bool:
        """True if the serial was already logged today by this operator."""
        return any(
            entry.serial == serial and entry.status not in NON_LOGGED_STATUSES
            for entry in self.get_history(operator)
        )

    def list_history(self, operator: Optional[str]) -> HistoryListResponse:
        """History with display fields."""
        now = self._clock()
        data = [
            HistoryEntryResponse(
                **entry.model_dump(),
                display_time=format_timestamp(entry.timestamp),
                relative_time=relative_time(entry.timestamp, now),
                display_class=display_class(entry.status),
            )
            for entry in self.get_history(operator)
        ]
        return HistoryListResponse(
            operator=operator_key(operator),
            data=data,
            total=len(data)
        )

    # ===================
    # LAST SCAN
    # ===================

    def save_last_scan(
        self,
        operator: Optional[str],
        station: Optional[str],
        entry: HistoryEntry,
    ) -> bool:
        """
        Remember the scan as the station's last scan.

        Returns:
            False if the status is not OK/DUPLICATE (nothing saved)
        """
        if entry.status not in LAST_SCAN_STATUSES:
            return False
        self.store.set(
            self._last_scan_key(operator, station),
            entry.model_dump(mode="json")
        )
        return True

    def get_last_scan(
        self,
        operator: Optional[str],
        station: Optional[str],
    ) -> Optional[LastScanResponse]:
        """Last successful scan for an operator/station, if any."""
        stored = self.store.get(self._last_scan_key(operator, station))
        if not stored:
            return None

        try:
            entry = HistoryEntry(**stored)
        except (PydanticValidationError, TypeError) as e:
            logger.warning("last_scan_unreadable", error=str(e))
            return None

        return LastScanResponse(
            **entry.model_dump(),
            display_time=format_timestamp(entry.timestamp),
            relative_time=relative_time(entry.timestamp, self._clock()),
        )


# Singleton instance
_history_service: Optional[HistoryService] = None


def get_history_service() -> HistoryService:
    """Get or create HistoryService instance."""
    global _history_service
    if _history_service is None:
        _history_service = HistoryService()
    return _history_service
