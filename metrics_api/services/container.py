"""
Service container.

Builds the long-lived collaborators once per process (HTTP clients,
adapters, cache, orchestrator) and hands them to request handlers through
``app.state``. Nothing here holds per-request state.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from metrics_api.adapters import AnalyticsAdapter, PushFireAdapter, SomaraAdapter, ULinkAdapter
from metrics_api.config import Settings, get_settings
from metrics_api.connectors import (
    GoogleAnalyticsClient,
    ServiceAccountTokenProvider,
    SupabaseRestClient,
)
from metrics_api.engine import BundleFetcher, MetricsOrchestrator
from metrics_api.products import ProductConfig, get_products
from metrics_api.storage import MetricsCache, build_cache_store
from metrics_api.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    analytics_client: GoogleAnalyticsClient
    platform_clients: dict[str, SupabaseRestClient]
    fetcher: BundleFetcher
    cache: MetricsCache
    orchestrator: MetricsOrchestrator
    products: list[ProductConfig]

    def product(self, slug: str) -> Optional[ProductConfig]:
        for product in self.products:
            if product.slug.value == slug:
                return product
        return None

    async def aclose(self) -> None:
        """Flush pending cache writes, then release clients and the cache store."""
        await self.orchestrator.drain()
        await self.analytics_client.aclose()
        for client in self.platform_clients.values():
            await client.aclose()
        await self.cache.store.aclose()
        logger.info("service_container_closed")


def build_container(settings: Optional[Settings] = None) -> ServiceContainer:
    settings = settings or get_settings()
    timeout = settings.upstream_timeout_seconds

    analytics_client = GoogleAnalyticsClient(
        ServiceAccountTokenProvider(settings.ga_service_account_json),
        base_url=settings.ga_api_base_url,
        timeout=timeout,
    )
    platform_clients = {
        "ulink": SupabaseRestClient(
            "ulink", settings.ulink_supabase_url, settings.ulink_supabase_service_key, timeout
        ),
        "pushfire": SupabaseRestClient(
            "pushfire",
            settings.pushfire_supabase_url,
            settings.pushfire_supabase_service_key,
            timeout,
        ),
        "somara": SupabaseRestClient(
            "somara", settings.somara_supabase_url, settings.somara_supabase_service_key, timeout
        ),
    }

    fetcher = BundleFetcher(
        analytics=AnalyticsAdapter(analytics_client),
        ulink=ULinkAdapter(platform_clients["ulink"]),
        pushfire=PushFireAdapter(platform_clients["pushfire"]),
        somara=SomaraAdapter(platform_clients["somara"]),
        ulink_property_id=settings.ga_property_id_ulink,
    )
    cache = MetricsCache(build_cache_store(settings), ttl_seconds=settings.cache_ttl_seconds)

    logger.info(
        "service_container_built",
        cache_backend=settings.cache_backend,
        cache_ttl_seconds=settings.cache_ttl_seconds,
    )

    return ServiceContainer(
        settings=settings,
        analytics_client=analytics_client,
        platform_clients=platform_clients,
        fetcher=fetcher,
        cache=cache,
        orchestrator=MetricsOrchestrator(cache),
        products=get_products(settings),
    )


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency: the container built at startup."""
    return request.app.state.container
