"""
Station service.

Operator/station preferences, the station lock that freezes them, and the
batch comment that can be locked per operator/station so every scan in a
batch carries the same note.
"""

from typing import Optional
import structlog

from config import settings
from exceptions import OperatorRequiredError, StationLockedError
from models.station import BatchCommentResponse, StationPreferences
from services.history_service import operator_key
from services.local_store import LocalStore, get_local_store

logger = structlog.get_logger(__name__)

OPERATOR_KEY = "operator"
STATION_KEY = "station"
LOCKED_KEY = "isLocked"


class StationService:
    """Preferences and locks for the capture station."""

    def __init__(self, store: Optional[LocalStore] = None):
        self.store = store or get_local_store()

    # ===================
    # PREFERENCES
    # ===================

    def get_preferences(self) -> StationPreferences:
        return StationPreferences(
            operator=self.store.get(OPERATOR_KEY, ""),
            station=self.store.get(STATION_KEY) or settings.default_station,
            locked=bool(self.store.get(LOCKED_KEY, False)),
        )

    def save_preferences(self, operator: str, station: str) -> StationPreferences:
        """
        Change operator and station.

        Raises:
            StationLockedError: If the station is locked
        """
        current = self.get_preferences()
        if current.locked:
            raise StationLockedError(current.operator, current.station)

        self.store.set(OPERATOR_KEY, (operator or "").strip())
        self.store.set(STATION_KEY, (station or "").strip() or settings.default_station)

        prefs = self.get_preferences()
        logger.info("preferences_saved", operator=prefs.operator, station=prefs.station)
        return prefs

    def lock(self) -> StationPreferences:
        """
        Lock operator/station.

        Raises:
            OperatorRequiredError: If no operator is selected
        """
        current = self.get_preferences()
        if not current.operator.strip():
            raise OperatorRequiredError()

        self.store.set(LOCKED_KEY, True)
        logger.info("station_locked", operator=current.operator, station=current.station)
        return self.get_preferences()

    def unlock(self) -> StationPreferences:
        self.store.set(LOCKED_KEY, False)
        logger.info("station_unlocked")
        return self.get_preferences()

    # ===================
    # BATCH COMMENT
    # ===================

    @staticmethod
    def _batch_keys(operator: Optional[str], station: Optional[str]) -> tuple[str, str]:
        station = (station or "").strip() or settings.default_station
        suffix = f"{operator_key(operator)}_{station}"
        return f"batchComment_{suffix}", f"batchLocked_{suffix}"

    def get_batch_comment(
        self,
        operator: Optional[str],
        station: Optional[str],
    ) -> BatchCommentResponse:
        comment_key, lock_key = self._batch_keys(operator, station)
        locked = bool(self.store.get(lock_key, False))
        return BatchCommentResponse(
            operator=operator_key(operator),
            station=(station or "").strip() or settings.default_station,
            comment=self.store.get(comment_key, "") if locked else "",
            locked=locked,
        )

    def lock_batch_comment(
        self,
        operator: Optional[str],
        station: Optional[str],
        comment: str,
    ) -> BatchCommentResponse:
        comment_key, lock_key = self._batch_keys(operator, station)
        self.store.set(comment_key, (comment or "").strip())
        self.store.set(lock_key, True)
        logger.info("batch_comment_locked", operator=operator_key(operator), station=station)
        return self.get_batch_comment(operator, station)

    def unlock_batch_comment(
        self,
        operator: Optional[str],
        station: Optional[str],
    ) -> BatchCommentResponse:
        _, lock_key = self._batch_keys(operator, station)
        self.store.set(lock_key, False)
        logger.info("batch_comment_unlocked", operator=operator_key(operator), station=station)
        return self.get_batch_comment(operator, station)

    def resolve_comment(
        self,
        operator: Optional[str],
        station: Optional[str],
        provided: Optional[str],
    ) -> str:
        """Comment to send with a scan: the locked batch comment wins."""
        batch = self.get_batch_comment(operator, station)
        if batch.locked:
            return batch.comment
        return (provided or "").strip()


# Singleton instance
_station_service: Optional[StationService] = None


def get_station_service() -> StationService:
    """Get or create StationService instance."""
    global _station_service
    if _station_service is None:
        _station_service = StationService()
    return _station_service
