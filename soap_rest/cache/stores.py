"""
Cache stores - key/value backends with TTL expiry.

The schema cache only needs get/put/forget; expiry is enforced here.
"""

import hashlib
import json
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class CacheStore(ABC):
    """Key/value store with per-entry TTL (seconds)"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None on miss or expiry"""

    @abstractmethod
    def put(self, key: str, value: Any, ttl: int) -> None:
        """Store a JSON-serializable value for ``ttl`` seconds"""

    @abstractmethod
    def forget(self, key: str) -> None:
        """Remove a key; missing keys are ignored"""


class NullCacheStore(CacheStore):
    """Store used when caching is disabled: every read misses."""

    def get(self, key: str) -> Optional[Any]:
        return None

    def put(self, key: str, value: Any, ttl: int) -> None:
        pass

    def forget(self, key: str) -> None:
        pass


class MemoryCacheStore(CacheStore):
    """Process-local store"""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if self._clock() >= expires_at:
            logger.debug(f"Cache entry expired: {key}")
            del self._entries[key]
            return None

        return value

    def put(self, key: str, value: Any, ttl: int) -> None:
        self._entries[key] = (self._clock() + ttl, value)

    def forget(self, key: str) -> None:
        self._entries.pop(key, None)


class FileCacheStore(CacheStore):
    """
    JSON files on disk, one per key

    Validity is checked against the file's modification time, so an entry
    written with a given TTL stays valid for that long after the write.
    """

    def __init__(self, cache_dir: Optional[Path] = None):
        self.cache_dir = Path(cache_dir or ".cache/soap")
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def get(self, key: str) -> Optional[Any]:
        try:
            cache_file = self._get_cache_file_path(key)
            if not cache_file.exists():
                return None

            with open(cache_file, "r") as f:
                entry = json.load(f)

            # Check if cache is still valid (TTL)
            file_time = cache_file.stat().st_mtime
            if time.time() - file_time > entry.get("ttl", 0):
                logger.debug(f"Cache file expired: {cache_file}")
                return None

            logger.debug(f"Loaded {key} from cache file: {cache_file}")
            return entry.get("value")

        except (OSError, ValueError) as e:
            logger.warning(f"Error loading cache file for {key}: {e}")
            return None

    def put(self, key: str, value: Any, ttl: int) -> None:
        try:
            cache_file = self._get_cache_file_path(key)
            cache_file.parent.mkdir(parents=True, exist_ok=True)

            with open(cache_file, "w") as f:
                json.dump({"key": key, "ttl": ttl, "value": value}, f, indent=2)
                logger.debug(f"Saved {key} to cache file: {cache_file}")

        except (OSError, TypeError) as e:
            logger.warning(f"Error saving cache file for {key}: {e}")

    def forget(self, key: str) -> None:
        try:
            self._get_cache_file_path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Error removing cache file for {key}: {e}")

    def _get_cache_file_path(self, key: str) -> Path:
        """Get cache file path for a key"""
        # Hash the key to avoid filesystem issues
        key_hash = hashlib.md5(key.encode()).hexdigest()[:16]
        return self.cache_dir / f"cache_{key_hash}.json"
