"""
Pytest configuration and shared fixtures for the metrics API test suite.

Provides raw-row factories, in-process fakes for the analytics and
platform clients, a controllable clock, failing cache stores, and a fully
wired app with session verification overridden.
"""

import os

# Set testing environment BEFORE importing app
os.environ["TESTING"] = "true"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["GA_PROPERTY_ID_ULINK"] = "prop-ulink"
os.environ["GA_PROPERTY_ID_SOMARA"] = "prop-somara"
os.environ["GA_PROPERTY_ID_PUSHFIRE"] = "prop-pushfire"

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from metrics_api.adapters import AnalyticsAdapter, PushFireAdapter, SomaraAdapter, ULinkAdapter
from metrics_api.auth import require_session
from metrics_api.config import get_settings
from metrics_api.engine import BundleFetcher, MetricsOrchestrator
from metrics_api.models.ulink import RawProjectHealth, RawSubscriptionRow
from metrics_api.products import get_products
from metrics_api.services import ServiceContainer
from metrics_api.storage import CacheStore, CacheStoreError, InMemoryCacheStore, MetricsCache
from metrics_api.utils.dates import DateRange, parse_date_range

REFERENCE_NOW = datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = REFERENCE_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


# ---------------------------------------------------------------------------
# Raw row factories
# ---------------------------------------------------------------------------


def make_range(start: str = "2024-01-01", end: str = "2024-01-07"):
    """Literal range plus its resolved instants."""
    return DateRange(start=start, end=end), parse_date_range(start, end, now=REFERENCE_NOW)


def make_report_row(dimensions: list, metrics: list) -> dict:
    return {"dimension_values": list(dimensions), "metric_values": [str(m) for m in metrics]}


def make_project_health(
    project_id: str = "proj-1",
    links_created: int = 0,
    recent_clicks: int = 0,
    steps: int = 0,
    is_configured: bool = False,
    **overrides,
) -> RawProjectHealth:
    """Project health row with the first ``steps`` onboarding steps completed."""
    step_names = [
        "domain_setup",
        "platform_selection",
        "platform_config",
        "cli_verified",
        "sdk_setup_viewed",
        "platform_implementation_viewed",
    ]
    defaults: dict[str, Any] = dict(
        project_id=project_id,
        project_name=f"Project {project_id}",
        project_created_at="2023-12-01T00:00:00Z",
        member_count=1,
        is_configured=is_configured,
        links_created=links_created,
        total_clicks=recent_clicks * 3,
        recent_clicks=recent_clicks,
    )
    defaults.update({name: i < steps for i, name in enumerate(step_names)})
    defaults.update(overrides)
    return RawProjectHealth(**defaults)


def make_subscription(
    sub_id: str = "sub-1",
    status: str = "active",
    price_monthly: Optional[float] = 29.0,
    environment: str = "production",
    **overrides,
) -> RawSubscriptionRow:
    defaults: dict[str, Any] = dict(
        id=sub_id,
        status=status,
        environment=environment,
        price_monthly=price_monthly,
        price_yearly=None if price_monthly is None else price_monthly * 10,
    )
    defaults.update(overrides)
    return RawSubscriptionRow(**defaults)


# ---------------------------------------------------------------------------
# Client fakes
# ---------------------------------------------------------------------------


class FakeAnalyticsClient:
    """
    Stand-in for GoogleAnalyticsClient.

    Reports are keyed by the requested dimensions; the KPI report has none
    and is keyed by the empty tuple.
    """

    def __init__(self, reports: Optional[dict] = None, error: Optional[Exception] = None):
        self.reports = reports or {}
        self.error = error
        self.calls: list[dict] = []
        self.closed = False

    async def run_report(
        self,
        property_id,
        date_range,
        dimensions,
        metrics,
        dimension_filter=None,
        order_bys=None,
        limit=None,
    ):
        self.calls.append(
            {
                "property_id": property_id,
                "date_range": date_range,
                "dimensions": tuple(dimensions),
                "metrics": tuple(metrics),
                "dimension_filter": dimension_filter,
                "limit": limit,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reports.get(tuple(dimensions), [])

    async def aclose(self):
        self.closed = True


class FakePlatformClient:
    """
    Stand-in for SupabaseRestClient.

    Results are looked up by procedure or table name. A result that is an
    exception instance is raised instead of returned. Counts can be split
    into an all-time value and a value for range-filtered requests.
    """

    def __init__(
        self,
        provider: str,
        rpc_results: Optional[dict] = None,
        counts: Optional[dict] = None,
        range_counts: Optional[dict] = None,
        selects: Optional[dict] = None,
    ):
        self.provider = provider
        self.rpc_results = rpc_results or {}
        self.counts = counts or {}
        self.range_counts = range_counts or {}
        self.selects = selects or {}
        self.calls: list[tuple] = []
        self.closed = False

    @staticmethod
    def _resolve(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def rpc(self, function, params=None):
        self.calls.append(("rpc", function, params))
        return self._resolve(self.rpc_results.get(function, []))

    async def count(self, table, filters=()):
        self.calls.append(("count", table, list(filters)))
        if filters and table in self.range_counts:
            return self._resolve(self.range_counts[table])
        return self._resolve(self.counts.get(table, 0))

    async def select(self, table, columns="*", filters=(), count=False):
        self.calls.append(("select", table, columns, list(filters)))
        rows = self._resolve(self.selects.get(table, []))
        return rows, (len(rows) if count else None)

    async def aclose(self):
        self.closed = True


# ---------------------------------------------------------------------------
# Cache store fakes
# ---------------------------------------------------------------------------


class FailingCacheStore(CacheStore):
    """Cache store whose reads and/or writes raise CacheStoreError."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.inner = InMemoryCacheStore()
        self.read_attempts = 0
        self.write_attempts = 0

    async def read(self, key):
        self.read_attempts += 1
        if self.fail_reads:
            raise CacheStoreError("connection refused")
        return await self.inner.read(key)

    async def write(self, key, entry, ttl_seconds):
        self.write_attempts += 1
        if self.fail_writes:
            raise CacheStoreError("connection refused")
        await self.inner.write(key, entry, ttl_seconds)


# ---------------------------------------------------------------------------
# Wiring helpers
# ---------------------------------------------------------------------------


def build_test_container(
    analytics: Optional[FakeAnalyticsClient] = None,
    ulink: Optional[FakePlatformClient] = None,
    pushfire: Optional[FakePlatformClient] = None,
    somara: Optional[FakePlatformClient] = None,
    store: Optional[CacheStore] = None,
    clock: Optional[FixedClock] = None,
) -> ServiceContainer:
    settings = get_settings()
    analytics = analytics or FakeAnalyticsClient()
    platform_clients = {
        "ulink": ulink or FakePlatformClient("ulink"),
        "pushfire": pushfire or FakePlatformClient("pushfire"),
        "somara": somara or FakePlatformClient("somara"),
    }
    cache = MetricsCache(
        store if store is not None else InMemoryCacheStore(clock=clock or FixedClock()),
        ttl_seconds=settings.cache_ttl_seconds,
        clock=clock or FixedClock(),
    )
    fetcher = BundleFetcher(
        analytics=AnalyticsAdapter(analytics),
        ulink=ULinkAdapter(platform_clients["ulink"]),
        pushfire=PushFireAdapter(platform_clients["pushfire"]),
        somara=SomaraAdapter(platform_clients["somara"]),
        ulink_property_id=settings.ga_property_id_ulink,
    )
    return ServiceContainer(
        settings=settings,
        analytics_client=analytics,
        platform_clients=platform_clients,
        fetcher=fetcher,
        cache=cache,
        orchestrator=MetricsOrchestrator(cache),
        products=get_products(settings),
    )


def make_test_client(container: ServiceContainer, authenticated: bool = True) -> TestClient:
    """App wired to ``container``; use as a context manager so the lifespan runs."""
    from metrics_api.main import create_app

    app = create_app()
    app.state.container = container
    if authenticated:
        app.dependency_overrides[require_session] = lambda: "test-user"
    return TestClient(app)


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def memory_store(clock):
    return InMemoryCacheStore(clock=clock)


@pytest.fixture
def table_store(clock):
    """In-memory store that keeps expired entries, like the DuckDB table."""
    return InMemoryCacheStore(native_expiry=False, clock=clock)


@pytest.fixture
def cache(table_store, clock):
    return MetricsCache(table_store, ttl_seconds=900, clock=clock)


@pytest.fixture
def orchestrator(cache):
    return MetricsOrchestrator(cache)


@pytest.fixture
def date_range():
    return make_range()


@pytest.fixture
def sample_projects():
    return [
        make_project_health("inactive-1"),
        make_project_health("healthy-1", links_created=5, recent_clicks=12, steps=5, is_configured=True),
        make_project_health("at-risk-1", links_created=2, recent_clicks=0, steps=3),
        make_project_health("at-risk-2", steps=2),
        make_project_health("healthy-2", links_created=1, recent_clicks=1, steps=4, is_configured=True),
    ]
