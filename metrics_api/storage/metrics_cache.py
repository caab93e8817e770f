"""
Metrics cache: freshness policy on top of a cache store.

``lookup`` is the strict read used by the orchestrator: it raises
CacheStoreError when the backend is down so that the caller can bypass the
cache for the whole request. ``get`` is the lenient read and fails open to
a miss.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, NamedTuple, Optional

import structlog

from metrics_api.storage.base import CacheEntry, CacheKey, CacheStore, CacheStoreError
from metrics_api.utils.dates import utc_now

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 15 * 60


class CachedMetrics(NamedTuple):
    payload: Any
    fetched_at: datetime
    is_stale: bool


class MetricsCache:
    """
    Keyed bundle cache with a fixed freshness window.

    Attributes:
        store: Backend holding the entries
        ttl_seconds: Freshness window
    """

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @staticmethod
    def key(product: str, metric_type: str, date_start: str, date_end: str) -> CacheKey:
        return CacheKey(product, metric_type, date_start, date_end)

    def is_stale(self, entry: CacheEntry) -> bool:
        if self.store.native_expiry:
            return False
        return self._clock() - entry.fetched_at > timedelta(seconds=self.ttl_seconds)

    async def lookup(
        self, product: str, metric_type: str, date_start: str, date_end: str
    ) -> Optional[CachedMetrics]:
        """
        Read a cached bundle.

        Returns:
            The bundle with its fetch time and staleness, or None on a miss
            (including a malformed stored entry)

        Raises:
            CacheStoreError: If the store is unreachable
        """
        key = self.key(product, metric_type, date_start, date_end)
        entry = await self.store.read(key)
        if entry is None:
            logger.debug("cache_miss", key=key.render())
            return None

        stale = self.is_stale(entry)
        logger.debug("cache_hit", key=key.render(), is_stale=stale)
        return CachedMetrics(payload=entry.payload, fetched_at=entry.fetched_at, is_stale=stale)

    async def get(
        self, product: str, metric_type: str, date_start: str, date_end: str
    ) -> Optional[CachedMetrics]:
        """Like ``lookup``, but a store failure reads as a miss."""
        try:
            return await self.lookup(product, metric_type, date_start, date_end)
        except CacheStoreError as e:
            logger.warning("cache_read_failed", product=product, metric_type=metric_type, error=str(e))
            return None

    async def set(
        self, product: str, metric_type: str, date_start: str, date_end: str, payload: Any
    ) -> CacheEntry:
        """
        Insert or replace a bundle, stamped with the current instant.

        Raises:
            CacheStoreError: If the store is unreachable
        """
        key = self.key(product, metric_type, date_start, date_end)
        entry = CacheEntry(payload=payload, fetched_at=self._clock())
        await self.store.write(key, entry, self.ttl_seconds)
        logger.debug("cache_written", key=key.render())
        return entry
