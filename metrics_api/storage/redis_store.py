"""
Redis cache store.

Values are JSON documents ``{"payload": ..., "fetchedAt": ...}``. By default
keys expire after the TTL and presence means fresh. With a stale-retention
window the key lives for TTL + retention instead, so an expired bundle can
still be served when the upstream is down; freshness is then judged from
``fetchedAt``.
"""

from typing import Optional

import structlog
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from metrics_api.storage.base import CacheEntry, CacheKey, CacheStore, CacheStoreError

logger = structlog.get_logger(__name__)


class RedisCacheStore(CacheStore):
    def __init__(
        self,
        redis_url: str,
        stale_retention_seconds: int = 0,
        max_connections: int = 10,
        client: Optional[aioredis.Redis] = None,
    ):
        self.stale_retention_seconds = stale_retention_seconds
        self.native_expiry = stale_retention_seconds <= 0
        self._client = client or aioredis.from_url(
            redis_url,
            max_connections=max_connections,
            decode_responses=True,
        )

        logger.info(
            "redis_cache_store_initialized",
            native_expiry=self.native_expiry,
            stale_retention_seconds=stale_retention_seconds,
        )

    async def read(self, key: CacheKey) -> Optional[CacheEntry]:
        rendered = key.render()
        try:
            raw = await self._client.get(rendered)
        except RedisError as e:
            logger.warning("redis_read_failed", key=rendered, error=str(e))
            raise CacheStoreError(f"Redis read failed: {e}") from e

        if raw is None:
            return None
        return CacheEntry.from_json(raw, rendered)

    async def write(self, key: CacheKey, entry: CacheEntry, ttl_seconds: int) -> None:
        rendered = key.render()
        expiry = ttl_seconds if self.native_expiry else ttl_seconds + self.stale_retention_seconds
        try:
            await self._client.set(rendered, entry.to_json(), ex=expiry)
        except RedisError as e:
            logger.warning("redis_write_failed", key=rendered, error=str(e))
            raise CacheStoreError(f"Redis write failed: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
