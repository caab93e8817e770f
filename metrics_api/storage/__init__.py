"""
Cache storage layer.

Backends:
- memory: in-process dict (tests, single-worker dev)
- redis: shared cache with native key expiry
- duckdb: local ``metrics_cache`` table, staleness checked at read time
"""

from typing import Optional

from metrics_api.config import Settings, get_settings

from .base import CacheEntry, CacheKey, CacheStore, CacheStoreError
from .duckdb_store import DuckDBCacheStore
from .memory import InMemoryCacheStore
from .metrics_cache import CachedMetrics, MetricsCache
from .redis_store import RedisCacheStore


def build_cache_store(settings: Optional[Settings] = None) -> CacheStore:
    """
    Construct the cache backend selected by ``settings.cache_backend``.

    Returns:
        CacheStore implementation instance
    """
    settings = settings or get_settings()
    if settings.cache_backend == "redis":
        return RedisCacheStore(
            settings.redis_url,
            stale_retention_seconds=settings.cache_stale_retention_seconds,
            max_connections=settings.redis_max_connections,
        )
    if settings.cache_backend == "duckdb":
        return DuckDBCacheStore(db_path=settings.cache_db_path)
    return InMemoryCacheStore(native_expiry=settings.cache_stale_retention_seconds <= 0)


__all__ = [
    "CacheEntry",
    "CacheKey",
    "CacheStore",
    "CacheStoreError",
    "CachedMetrics",
    "DuckDBCacheStore",
    "InMemoryCacheStore",
    "MetricsCache",
    "RedisCacheStore",
    "build_cache_store",
]
