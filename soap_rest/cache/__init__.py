from .schema_cache import DEFAULT_CACHE_TTL, SchemaCache
from .stores import CacheStore, FileCacheStore, MemoryCacheStore, NullCacheStore

__all__ = [
    "DEFAULT_CACHE_TTL",
    "SchemaCache",
    "CacheStore",
    "FileCacheStore",
    "MemoryCacheStore",
    "NullCacheStore",
]
