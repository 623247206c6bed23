"""
Unit tests for LocalStore.

Run: pytest tests/unit/test_local_store.py -v
"""

import json
import pytest

from exceptions import StorageError
from services.local_store import LocalStore


class TestLocalStore:
    """Tests for get/set"""

    def test_get_missing_returns_default(self, store):
        assert store.get("operator") is None
        assert store.get("operator", "") == ""

    def test_set_then_get(self, store):
        store.set("station", "LINE-2")

        assert store.get("station") == "LINE-2"

    def test_set_persists_to_file(self, tmp_path):
        path = tmp_path / "store.json"
        LocalStore(path).set("history_ANA", [{"serial": "1"}])

        reopened = LocalStore(path)

        assert reopened.get("history_ANA") == [{"serial": "1"}]
        assert json.loads(path.read_text(encoding="utf-8")) == {"history_ANA": [{"serial": "1"}]}

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.json"

        LocalStore(path).set("isLocked", True)

        assert path.exists()

    def test_no_temp_files_left(self, tmp_path):
        store = LocalStore(tmp_path / "store.json")
        store.set("a", 1)
        store.set("b", 2)

        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


class TestLocalStoreCorruption:
    """Unreadable store contents"""

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        store = LocalStore(path)

        assert store.get("operator") is None

    def test_corrupt_file_replaced_on_write(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        LocalStore(path).set("operator", "ANA")

        assert json.loads(path.read_text(encoding="utf-8")) == {"operator": "ANA"}

    def test_non_object_file_starts_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        assert LocalStore(path).get("operator") is None

    def test_unwritable_location_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = LocalStore(blocker / "store.json")

        with pytest.raises(StorageError) as exc_info:
            store.set("operator", "ANA")

        assert exc_info.value.code == "STORAGE_ERROR"
        assert exc_info.value.details["operation"] == "write"

    def test_unwritable_location_keeps_nothing_in_memory(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = LocalStore(blocker / "store.json")

        with pytest.raises(StorageError):
            store.set("operator", "ANA")

        assert store.get("operator") is None


class TestLocalStoreFailedWrite:
    """A write that fails leaves memory and disk unchanged."""

    @pytest.fixture
    def break_disk(self, monkeypatch):
        """Call to make every later os.replace fail."""
        def fail(src, dst):
            raise OSError("disk full")

        return lambda: monkeypatch.setattr("services.local_store.os.replace", fail)

    def test_old_value_kept(self, tmp_path, break_disk):
        path = tmp_path / "store.json"
        store = LocalStore(path)
        store.set("operator", "ANA")
        break_disk()

        with pytest.raises(StorageError):
            store.set("operator", "LUIS")

        assert store.get("operator") == "ANA"
        assert json.loads(path.read_text(encoding="utf-8")) == {"operator": "ANA"}

    def test_new_key_not_cached(self, store, break_disk):
        break_disk()

        with pytest.raises(StorageError):
            store.set("station", "LINE-2")

        assert store.get("station") is None

    def test_temp_file_removed(self, tmp_path, break_disk):
        store = LocalStore(tmp_path / "store.json")
        break_disk()

        with pytest.raises(StorageError):
            store.set("operator", "ANA")

        assert list(tmp_path.iterdir()) == []
