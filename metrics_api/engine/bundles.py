"""
Bundle fetchers.

One coroutine per metric type. Each issues all of its facet queries
concurrently, then runs the pure transform. If any facet fails, the whole
bundle fails; a partially populated bundle is never returned or cached.
"""

import asyncio
from typing import Optional

import structlog

from metrics_api.adapters import AnalyticsAdapter, PushFireAdapter, SomaraAdapter, ULinkAdapter
from metrics_api.engine.transforms import (
    transform_business_metrics,
    transform_client_health,
    transform_ga_bundle,
    transform_pushfire_metrics,
    transform_somara_metrics,
)
from metrics_api.engine.transforms.analytics import transform_kpis
from metrics_api.models.analytics import GAMetricsBundle, ReportFilter
from metrics_api.models.pushfire import PushFireMetrics
from metrics_api.models.somara import SomaraMetrics
from metrics_api.models.ulink import ULinkBusinessMetrics, ULinkClientHealth
from metrics_api.utils.dates import DateRange, NormalizedDateRange

logger = structlog.get_logger()

DASHBOARD_PATH_PREFIX = "/dashboard"

# ULink marketing site vs logged-in dashboard, split on page path
WEBSITE_FILTER = ReportFilter.path_prefix(DASHBOARD_PATH_PREFIX, negate=True)
DASHBOARD_USERS_FILTER = ReportFilter.path_prefix(DASHBOARD_PATH_PREFIX)


class BundleFetcher:
    """
    Fetches and transforms every bundle kind.

    Analytics facets take the literal date tokens (the reporting API
    resolves relative tokens itself); platform facets take the normalized
    instants.
    """

    def __init__(
        self,
        analytics: AnalyticsAdapter,
        ulink: ULinkAdapter,
        pushfire: PushFireAdapter,
        somara: SomaraAdapter,
        ulink_property_id: str = "",
    ):
        self.analytics = analytics
        self.ulink = ulink
        self.pushfire = pushfire
        self.somara = somara
        self.ulink_property_id = ulink_property_id

    async def ga_bundle(
        self,
        property_id: str,
        date_range: DateRange,
        normalized: NormalizedDateRange,
        report_filter: Optional[ReportFilter] = None,
    ) -> GAMetricsBundle:
        kpis, visitors, pages, referrers, countries, devices = await asyncio.gather(
            self.analytics.fetch_kpis(property_id, date_range, report_filter),
            self.analytics.fetch_visitors_over_time(property_id, date_range, report_filter),
            self.analytics.fetch_top_pages(property_id, date_range, report_filter),
            self.analytics.fetch_referrers(property_id, date_range, report_filter),
            self.analytics.fetch_country_breakdown(property_id, date_range, report_filter),
            self.analytics.fetch_device_breakdown(property_id, date_range, report_filter),
        )
        return transform_ga_bundle(normalized, kpis, visitors, pages, referrers, countries, devices)

    async def ulink_website(
        self, date_range: DateRange, normalized: NormalizedDateRange
    ) -> GAMetricsBundle:
        return await self.ga_bundle(self.ulink_property_id, date_range, normalized, WEBSITE_FILTER)

    async def ulink_dashboard_users(
        self, date_range: DateRange, normalized: NormalizedDateRange
    ) -> GAMetricsBundle:
        return await self.ga_bundle(
            self.ulink_property_id, date_range, normalized, DASHBOARD_USERS_FILTER
        )

    async def ulink_business(
        self, date_range: DateRange, normalized: NormalizedDateRange
    ) -> ULinkBusinessMetrics:
        """
        Business funnel for ULink. Visitors are all users of the ULink
        analytics property for the range, unfiltered.
        """
        signups, subscriptions, mrr_history, active_projects, ga_kpis = await asyncio.gather(
            self.ulink.fetch_signups(normalized),
            self.ulink.fetch_active_subscriptions(),
            self.ulink.fetch_mrr_over_time(normalized),
            self.ulink.fetch_active_projects(normalized),
            self.analytics.fetch_kpis(self.ulink_property_id, date_range),
        )
        return transform_business_metrics(
            normalized,
            signups=signups,
            subscriptions=subscriptions,
            active_projects=active_projects,
            mrr_history=mrr_history,
            ga_visitors=transform_kpis(ga_kpis).total_users,
        )

    async def ulink_health(
        self, date_range: DateRange, normalized: NormalizedDateRange
    ) -> ULinkClientHealth:
        return transform_client_health(await self.ulink.fetch_project_health(normalized))

    async def pushfire_platform(
        self, date_range: DateRange, normalized: NormalizedDateRange
    ) -> PushFireMetrics:
        kpis, business, subscribers, notifications, executions, devices = await asyncio.gather(
            self.pushfire.fetch_platform_kpis(normalized),
            self.pushfire.fetch_business_kpis(),
            self.pushfire.fetch_daily_subscribers(normalized),
            self.pushfire.fetch_daily_notifications(normalized),
            self.pushfire.fetch_daily_executions(normalized),
            self.pushfire.fetch_device_breakdown(),
        )
        return transform_pushfire_metrics(
            normalized, kpis, business, subscribers, notifications, executions, devices
        )

    async def somara_platform(
        self, date_range: DateRange, normalized: NormalizedDateRange
    ) -> SomaraMetrics:
        (
            kpis,
            business,
            activity,
            signups,
            tokens,
            subscriptions,
            credit_purchases,
            org_billing,
            top_models,
            credits,
        ) = await asyncio.gather(
            self.somara.fetch_kpis(normalized),
            self.somara.fetch_business_kpis(),
            self.somara.fetch_activity_over_time(normalized),
            self.somara.fetch_signups_over_time(normalized),
            self.somara.fetch_token_usage_over_time(normalized),
            self.somara.fetch_subscriptions_over_time(normalized),
            self.somara.fetch_credit_purchases_over_time(normalized),
            self.somara.fetch_org_billing_breakdown(),
            self.somara.fetch_top_models(),
            self.somara.fetch_credits_overview(),
        )
        return transform_somara_metrics(
            normalized,
            kpis=kpis,
            business_kpis=business,
            activity=activity,
            signups=signups,
            tokens=tokens,
            subscriptions=subscriptions,
            credit_purchases=credit_purchases,
            org_billing=org_billing,
            top_models=top_models,
            credits=credits,
        )
