"""
Aggregation orchestrator.

Serves one bundle request through the cache:

1. Fresh cache hit → cached payload, ``cached=True``.
2. Miss or stale → fetch from the providers.
   - success → schedule a background write-through, return fresh payload
   - failure with a stale entry → serve the stale entry with its original
     timestamp
   - failure without one → generic failure envelope (502)
3. Cache store unreachable → fetch directly; the cache is neither read nor
   written for the rest of the request.

Only ProviderError counts as a failed fetch. Anything else is a bug and
propagates to the request middleware.
"""

import asyncio
from typing import Any, Awaitable, Callable

import structlog

from metrics_api.connectors.errors import ProviderError
from metrics_api.models.envelope import EnvelopeResult, failure, success
from metrics_api.storage.base import CacheStoreError
from metrics_api.storage.metrics_cache import MetricsCache
from metrics_api.utils.dates import DateRange

logger = structlog.get_logger()

BundleFetch = Callable[[], Awaitable[Any]]


def _to_payload(bundle: Any) -> Any:
    return bundle.to_payload() if hasattr(bundle, "to_payload") else bundle


class MetricsOrchestrator:
    """
    Cache-aside bundle serving with stale fallback.

    Background cache writes are tracked so that ``drain`` can await them at
    shutdown; a failed write is logged and never affects a response.
    """

    def __init__(self, cache: MetricsCache):
        self.cache = cache
        self._pending_writes: set[asyncio.Task] = set()

    async def serve(
        self,
        product: str,
        metric_type: str,
        date_range: DateRange,
        fetch: BundleFetch,
        failure_message: str,
    ) -> EnvelopeResult:
        """
        Serve one bundle.

        Args:
            product: Product slug, part of the cache key
            metric_type: Bundle kind, part of the cache key
            date_range: Literal request tokens, part of the cache key
            fetch: Coroutine factory that fetches and transforms the bundle
            failure_message: Generic error shown when nothing can be served

        Returns:
            Envelope and HTTP status
        """
        log = logger.bind(
            product=product, metric_type=metric_type, start=date_range.start, end=date_range.end
        )

        try:
            cached = await self.cache.lookup(product, metric_type, date_range.start, date_range.end)
        except CacheStoreError as e:
            log.warning("cache_unavailable", error=str(e))
            return await self._fetch_uncached(log, fetch, failure_message)

        if cached is not None and not cached.is_stale:
            log.info("cache_hit", cached_at=cached.fetched_at.isoformat())
            return success(cached.payload, cached=True, cached_at=cached.fetched_at)

        try:
            bundle = await fetch()
        except ProviderError as e:
            log.warning("provider_fetch_failed", provider=e.provider, error=str(e))
            if cached is not None:
                log.info("serving_stale_cache", cached_at=cached.fetched_at.isoformat())
                return success(cached.payload, cached=True, cached_at=cached.fetched_at)
            return failure(failure_message)

        payload = _to_payload(bundle)
        self._schedule_write(product, metric_type, date_range, payload)
        log.info("bundle_fetched", had_stale_entry=cached is not None)
        return success(payload)

    async def _fetch_uncached(
        self, log, fetch: BundleFetch, failure_message: str
    ) -> EnvelopeResult:
        try:
            bundle = await fetch()
        except ProviderError as e:
            log.warning(
                "provider_fetch_failed", provider=e.provider, error=str(e), cache_bypassed=True
            )
            return failure(failure_message)
        return success(_to_payload(bundle))

    def _schedule_write(
        self, product: str, metric_type: str, date_range: DateRange, payload: Any
    ) -> None:
        task = asyncio.create_task(self._write_through(product, metric_type, date_range, payload))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_through(
        self, product: str, metric_type: str, date_range: DateRange, payload: Any
    ) -> None:
        try:
            await self.cache.set(product, metric_type, date_range.start, date_range.end, payload)
        except Exception as e:
            logger.warning(
                "cache_write_failed",
                product=product,
                metric_type=metric_type,
                error=str(e),
                error_type=type(e).__name__,
            )

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    async def drain(self) -> None:
        """Wait for outstanding background cache writes."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)
