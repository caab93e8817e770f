"""In-process cache store, used in tests and single-worker development."""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

from metrics_api.storage.base import CacheEntry, CacheKey, CacheStore
from metrics_api.utils.dates import utc_now


class InMemoryCacheStore(CacheStore):
    """
    Dict-backed cache store.

    Args:
        native_expiry: If True, entries vanish once their TTL passes (like
            Redis). If False, entries are kept and the cache judges staleness
            from ``fetched_at`` (like the DuckDB table).
        clock: Source of the current instant
    """

    def __init__(
        self,
        native_expiry: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.native_expiry = native_expiry
        self._clock = clock
        self._entries: dict[str, tuple[CacheEntry, Optional[datetime]]] = {}
        self._lock = asyncio.Lock()

    async def read(self, key: CacheKey) -> Optional[CacheEntry]:
        rendered = key.render()
        async with self._lock:
            stored = self._entries.get(rendered)
            if stored is None:
                return None
            entry, expires_at = stored
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[rendered]
                return None
            return entry

    async def write(self, key: CacheKey, entry: CacheEntry, ttl_seconds: int) -> None:
        expires_at = None
        if self.native_expiry:
            expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        async with self._lock:
            self._entries[key.render()] = (entry, expires_at)

    def __len__(self) -> int:
        return len(self._entries)
