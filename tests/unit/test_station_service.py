"""
Unit tests for StationService.

Run: pytest tests/unit/test_station_service.py -v
"""

import pytest

from exceptions import OperatorRequiredError, StationLockedError


class TestPreferences:
    """Tests for get_preferences() / save_preferences()"""

    def test_defaults(self, station_service):
        prefs = station_service.get_preferences()

        assert prefs.operator == ""
        assert prefs.station == "MAIN"
        assert prefs.locked is False

    def test_save(self, station_service):
        prefs = station_service.save_preferences(" ANA ", "LINE-2")

        assert prefs.operator == "ANA"
        assert prefs.station == "LINE-2"

    def test_blank_station_falls_back_to_default(self, station_service):
        prefs = station_service.save_preferences("ANA", "  ")

        assert prefs.station == "MAIN"

    def test_save_rejected_while_locked(self, station_service):
        station_service.save_preferences("ANA", "LINE-2")
        station_service.lock()

        with pytest.raises(StationLockedError) as exc_info:
            station_service.save_preferences("LUIS", "LINE-3")

        assert exc_info.value.status_code == 409
        assert station_service.get_preferences().operator == "ANA"


class TestStationLock:
    """Tests for lock() / unlock()"""

    def test_lock_requires_operator(self, station_service):
        with pytest.raises(OperatorRequiredError) as exc_info:
            station_service.lock()

        assert exc_info.value.code == "OPERATOR_REQUIRED"
        assert station_service.get_preferences().locked is False

    def test_lock_and_unlock(self, station_service):
        station_service.save_preferences("ANA", "MAIN")

        assert station_service.lock().locked is True
        assert station_service.unlock().locked is False

    def test_save_after_unlock(self, station_service):
        station_service.save_preferences("ANA", "MAIN")
        station_service.lock()
        station_service.unlock()

        assert station_service.save_preferences("LUIS", "MAIN").operator == "LUIS"

    def test_lock_persists_in_store(self, station_service, store):
        station_service.save_preferences("ANA", "MAIN")
        station_service.lock()

        assert store.get("isLocked") is True


class TestBatchComment:
    """Tests for the batch comment lock."""

    def test_unlocked_by_default(self, station_service):
        batch = station_service.get_batch_comment("ANA", "MAIN")

        assert batch.locked is False
        assert batch.comment == ""

    def test_lock_comment(self, station_service, store):
        batch = station_service.lock_batch_comment("ANA", "MAIN", " Lot 42 ")

        assert batch.locked is True
        assert batch.comment == "Lot 42"
        assert store.get("batchComment_ANA_MAIN") == "Lot 42"
        assert store.get("batchLocked_ANA_MAIN") is True

    def test_unlock_hides_comment(self, station_service):
        station_service.lock_batch_comment("ANA", "MAIN", "Lot 42")

        batch = station_service.unlock_batch_comment("ANA", "MAIN")

        assert batch.locked is False
        assert batch.comment == ""

    def test_scoped_to_operator_and_station(self, station_service):
        station_service.lock_batch_comment("ANA", "MAIN", "Lot 42")

        assert station_service.get_batch_comment("ANA", "LINE-2").locked is False
        assert station_service.get_batch_comment("LUIS", "MAIN").locked is False

    def test_blank_operator_uses_unnamed(self, station_service, store):
        station_service.lock_batch_comment("", "MAIN", "Lot 7")

        assert store.get("batchComment_UNNAMED_MAIN") == "Lot 7"

    def test_resolve_uses_locked_comment(self, station_service):
        station_service.lock_batch_comment("ANA", "MAIN", "Lot 42")

        assert station_service.resolve_comment("ANA", "MAIN", "scratched") == "Lot 42"

    def test_resolve_uses_provided_comment(self, station_service):
        assert station_service.resolve_comment("ANA", "MAIN", " scratched ") == "scratched"

    def test_resolve_without_comment(self, station_service):
        assert station_service.resolve_comment("ANA", "MAIN", None) == ""
