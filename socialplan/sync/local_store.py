"""
On-device cache: one JSON file per key, stored as {"data": ..., "timestamp": <epoch ms>}.
A failing disk degrades to a cache miss.
"""
import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

PROFILE_MAX_AGE = 24 * 60 * 60


def profile_key(uid: str) -> str:
    return f"profile:{uid}"


def tasks_key(uid: str) -> str:
    return f"tasks:{uid}"


def tasks_dirty_key(uid: str) -> str:
    return f"tasks_dirty:{uid}"


def free_time_key(uid: str, other_uid: str) -> str:
    return f"free_time:{uid}:{other_uid}"


def now_ms() -> int:
    return int(time.time() * 1000)


class LocalStore:
    """Key/value JSON store rooted at a directory"""

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{re.sub(r'[^A-Za-z0-9_.-]', '_', key)}.json"

    def get(self, key: str, max_age: Optional[float] = None) -> Optional[Any]:
        """Cached data for `key`, or None when missing, unreadable or older than `max_age` seconds"""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
            data, timestamp = entry["data"], entry["timestamp"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"⚠️ Unreadable cache entry {key}: {e}")
            return None

        if max_age is not None and now_ms() - timestamp > max_age * 1000:
            logger.debug(f"⌛ Cache entry {key} is stale")
            return None
        return data

    def set(self, key: str, data: Any) -> bool:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(key).write_text(
                json.dumps({"data": data, "timestamp": now_ms()}, default=str), encoding="utf-8"
            )
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"❌ Failed to write cache entry {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            self._path(key).unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.error(f"❌ Failed to delete cache entry {key}: {e}")
            return False
