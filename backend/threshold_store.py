"""
FarmerAid - Custom threshold store.
User overrides keyed by "<zone>::<crop>", persisted as JSON under one versioned
key so a format change can be migrated by bumping the key name. Storage errors
are logged and never reach the evaluator, which always has a built-in fallback.
"""
import json
import os
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Tuple

from app_logging import get_logger
from crop_thresholds import ThresholdSet, custom_key

logger = get_logger("threshold_store")

THRESHOLD_KEY = "farmeraid_thresholds_v1"


class CustomThresholdStore:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = Lock()
        # Last entry removed by reset(); kept in memory only for a one-shot undo
        self._last_deleted: Optional[Tuple[str, ThresholdSet]] = None

    # --- raw persistence ---

    def load(self) -> Dict[str, ThresholdSet]:
        """All overrides; {} when the file is missing or unreadable."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to load thresholds from %s: %s", self.path, e)
            return {}

        raw = document.get(THRESHOLD_KEY) if isinstance(document, dict) else None
        if not isinstance(raw, dict):
            return {}

        overrides: Dict[str, ThresholdSet] = {}
        for key, value in raw.items():
            try:
                overrides[key] = ThresholdSet.from_dict(value)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping invalid custom threshold %r: %s", key, e)
        return overrides

    def save(self, overrides: Dict[str, ThresholdSet]) -> bool:
        """Write all overrides; returns False (after logging) if the write failed."""
        document = {THRESHOLD_KEY: {key: value.to_dict() for key, value in overrides.items()}}
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to save thresholds to %s: %s", self.path, e)
            self._discard(tmp_path)
            return False
        return True

    def _discard(self, tmp_path: Path):
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove partial write %s: %s", tmp_path, e)

    # --- keyed operations ---

    def get(self, zone: Optional[str], crop: Optional[str]) -> Optional[ThresholdSet]:
        return self.load().get(custom_key(zone, crop))

    def put(self, zone: Optional[str], crop: Optional[str], thresholds: ThresholdSet) -> bool:
        key = custom_key(zone, crop)
        with self._lock:
            overrides = self.load()
            overrides[key] = thresholds
            saved = self.save(overrides)
        if saved:
            logger.info("Saved custom thresholds for %s", key)
        return saved

    def reset(self, zone: Optional[str], crop: Optional[str]) -> bool:
        """Delete an override; the removed value is cached for undo(). False if none existed."""
        key = custom_key(zone, crop)
        with self._lock:
            overrides = self.load()
            if key not in overrides:
                return False
            removed = overrides.pop(key)
            if not self.save(overrides):
                return False
            self._last_deleted = (key, removed)
        logger.info("Reset custom thresholds for %s", key)
        return True

    def undo(self) -> Optional[str]:
        """Restore the last reset entry once; returns its key, or None if nothing to undo."""
        with self._lock:
            if self._last_deleted is None:
                return None
            key, value = self._last_deleted
            overrides = self.load()
            overrides[key] = value
            if not self.save(overrides):
                return None
            self._last_deleted = None
        logger.info("Restored custom thresholds for %s", key)
        return key
