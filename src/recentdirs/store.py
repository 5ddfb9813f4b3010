"""JSON snapshot persistence for the directory history.

The whole map is written on every save: history size is bounded by one
user's shell activity. Writes go to ``<path>.tmp`` and are renamed over the
final path only after a complete write, so a crash never leaves a truncated
snapshot behind.
"""

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

from .errors import StoreError
from .models import DirUsage

log = logging.getLogger("recentdirs.store")

FORMAT_VERSION = 1


def _encode(history: dict[str, DirUsage]) -> dict:
    return {
        "version": FORMAT_VERSION,
        "dirs": {
            path: {"path": usage.path, "access_time": usage.access_time.isoformat()}
            for path, usage in history.items()
        },
    }


def _parse_time(value: str) -> datetime:
    t = datetime.fromisoformat(value)
    if t.tzinfo is None:
        # snapshots are always written in UTC
        return t.replace(tzinfo=timezone.utc)
    return t


def _decode(data: object) -> dict[str, DirUsage]:
    if not isinstance(data, dict) or data.get("version") != FORMAT_VERSION:
        raise StoreError("unsupported history format")
    dirs = data.get("dirs")
    if not isinstance(dirs, dict):
        raise StoreError("history has no 'dirs' mapping")
    result: dict[str, DirUsage] = {}
    for path, entry in dirs.items():
        if entry["path"] != path:
            log.warning("Skipping history entry %s recorded as %s", path, entry["path"])
            continue
        result[path] = DirUsage(path=path, access_time=_parse_time(entry["access_time"]))
    return result


class RecentDirStore:
    """Loads and saves the (path -> DirUsage) map as a single JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        # a save cancelled on the event loop side may still be running in its thread
        self._save_lock = threading.Lock()

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    def load(self) -> dict[str, DirUsage]:
        """Return the stored history, or an empty map if it cannot be read."""
        if not self.path.exists():
            log.info("No history at %s, starting empty", self.path)
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                result = _decode(json.load(f))
        except (OSError, ValueError, KeyError, TypeError, StoreError) as e:
            log.warning("Failed to load history from %s: %s", self.path, e)
            return {}
        log.info("Loaded %d entries", len(result))
        return result

    def save(self, history: dict[str, DirUsage]) -> bool:
        """Atomically replace the snapshot. Failures are logged, never raised."""
        with self._save_lock:
            return self._save(history)

    def _save(self, history: dict[str, DirUsage]) -> bool:
        tmp = self.temp_path
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(_encode(history), f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            log.error("Failed to store history to %s: %s", self.path, e)
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                log.debug("Could not remove temp file %s", tmp)
            return False
        log.debug("Saved %d entries to %s", len(history), self.path)
        return True
