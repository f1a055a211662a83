"""Tests for the JSON-backed custom threshold store."""
import json

import threshold_store
from crop_thresholds import ThresholdSet
from threshold_store import THRESHOLD_KEY, CustomThresholdStore

WHEAT = ThresholdSet((10, 20), (2, 10), 4, 0)


def failing_replace(src, dst):
    raise OSError("disk full")


class TestCustomThresholdStore:
    def test_missing_file_loads_empty(self, store):
        assert store.load() == {}
        assert store.get("Punjab", "wheat") is None

    def test_put_persists_under_versioned_key(self, store):
        assert store.put("Punjab", "Wheat", WHEAT)
        document = json.loads(store.path.read_text(encoding="utf-8"))
        assert "Punjab::wheat" in document[THRESHOLD_KEY]
        assert CustomThresholdStore(store.path).get("Punjab", "wheat") == WHEAT

    def test_default_zone_key(self, store):
        store.put(None, "rice", WHEAT)
        assert "default::rice" in store.load()

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "thresholds.json"
        path.write_text("{not json", encoding="utf-8")
        assert CustomThresholdStore(path).load() == {}

    def test_invalid_entry_is_skipped(self, tmp_path):
        path = tmp_path / "thresholds.json"
        path.write_text(json.dumps({THRESHOLD_KEY: {
            "Punjab::wheat": WHEAT.to_dict(),
            "Punjab::rice": {"ideal_max": [30, 20], "ideal_min": [1, 2]},
        }}), encoding="utf-8")
        assert list(CustomThresholdStore(path).load()) == ["Punjab::wheat"]

    def test_reset_and_undo(self, store):
        store.put("Punjab", "wheat", WHEAT)
        assert store.reset("Punjab", "wheat")
        assert store.get("Punjab", "wheat") is None
        assert store.undo() == "Punjab::wheat"
        assert store.get("Punjab", "wheat") == WHEAT

    def test_undo_is_one_shot(self, store):
        store.put("Punjab", "wheat", WHEAT)
        store.reset("Punjab", "wheat")
        store.undo()
        assert store.undo() is None

    def test_unwritable_location_fails_put(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = CustomThresholdStore(blocker / "sub" / "thresholds.json")
        assert store.put("Punjab", "wheat", WHEAT) is False
        assert store.load() == {}

    def test_failed_replace_leaves_no_partial_file(self, store, monkeypatch):
        monkeypatch.setattr(threshold_store.os, "replace", failing_replace)
        assert store.put("Punjab", "wheat", WHEAT) is False
        assert not store.path.exists()
        assert list(store.path.parent.glob("*.tmp")) == []

    def test_failed_save_keeps_override_for_reset(self, store, monkeypatch):
        store.put("Punjab", "wheat", WHEAT)
        monkeypatch.setattr(threshold_store.os, "replace", failing_replace)
        assert store.reset("Punjab", "wheat") is False
        assert store.get("Punjab", "wheat") == WHEAT
        assert store.undo() is None

    def test_reset_unknown_key(self, store):
        assert not store.reset("Punjab", "wheat")
        assert store.undo() is None
