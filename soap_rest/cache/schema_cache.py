"""Namespaced, TTL-bound cache for one SOAP service's schema tables."""

import logging
from typing import Any, List, Optional

from .stores import CacheStore, MemoryCacheStore

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 300

KEY_INDEX = "__keys__"


class SchemaCache:
    """
    Caches schema tables under ``service_<id>:<key>``

    Keys stored with ``persist=True`` are recorded in a per-service key index
    so that ``flush()`` can remove them all later.
    """

    def __init__(
        self,
        service_id: Any,
        store: Optional[CacheStore] = None,
        ttl: Optional[int] = None,
    ):
        self.service_id = service_id
        self.store = store if store is not None else MemoryCacheStore()
        self.ttl = DEFAULT_CACHE_TTL if ttl is None else int(ttl)
        self.prefix = f"service_{service_id}:"

    def make_key(self, key: str) -> str:
        return self.prefix + key

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss"""
        value = self.store.get(self.make_key(key))
        logger.debug(f"Cache {'hit' if value is not None else 'miss'}: {self.make_key(key)}")
        return value

    def put(self, key: str, value: Any, persist: bool = False, ttl: Optional[int] = None) -> None:
        ttl = self.ttl if ttl is None else int(ttl)
        self.store.put(self.make_key(key), value, ttl)
        if persist:
            self._remember(key)

    def remove(self, key: str) -> None:
        self.store.forget(self.make_key(key))

    def flush(self) -> None:
        """Remove every persisted key of this service"""
        for key in self._known_keys():
            self.remove(key)
        self.remove(KEY_INDEX)

    def _known_keys(self) -> List[str]:
        return list(self.store.get(self.make_key(KEY_INDEX)) or [])

    def _remember(self, key: str) -> None:
        keys = self._known_keys()
        if key not in keys:
            keys.append(key)
        # The index outlives the entries it points at.
        self.store.put(self.make_key(KEY_INDEX), keys, max(self.ttl, DEFAULT_CACHE_TTL) * 24)
