"""
Web-analytics query adapter.

One report per facet. Every facet accepts an optional ReportFilter so the
same queries can be restricted to a slice of the site (e.g. only the
logged-in dashboard, or only the marketing pages).
"""

from typing import Optional

from metrics_api.adapters.base_adapter import BaseAdapter
from metrics_api.connectors.google_analytics import GoogleAnalyticsClient
from metrics_api.models.analytics import RawReportRow, ReportFilter
from metrics_api.utils.dates import DateRange

KPI_METRICS = [
    "totalUsers",
    "newUsers",
    "sessions",
    "screenPageViews",
    "averageSessionDuration",
    "bounceRate",
]

TOP_PAGES_LIMIT = 20
REFERRERS_LIMIT = 20
COUNTRIES_LIMIT = 15


def _order_by_metric(name: str) -> list[dict]:
    return [{"metric": {"metricName": name}, "desc": True}]


class AnalyticsAdapter(BaseAdapter):
    """Query adapter for the analytics reporting API."""

    def __init__(self, client: GoogleAnalyticsClient):
        super().__init__("analytics")
        self.client = client

    async def _report(
        self,
        facet: str,
        property_id: str,
        date_range: DateRange,
        dimensions: list[str],
        metrics: list[str],
        report_filter: Optional[ReportFilter] = None,
        order_bys: Optional[list[dict]] = None,
        limit: Optional[int] = None,
    ) -> list[RawReportRow]:
        rows = await self.client.run_report(
            property_id,
            date_range,
            dimensions=dimensions,
            metrics=metrics,
            dimension_filter=report_filter.to_expression() if report_filter else None,
            order_bys=order_bys,
            limit=limit,
        )
        return self._validate_rows(RawReportRow, rows, facet)

    async def fetch_kpis(
        self, property_id: str, date_range: DateRange, report_filter: Optional[ReportFilter] = None
    ) -> list[RawReportRow]:
        return await self._report("kpis", property_id, date_range, [], KPI_METRICS, report_filter)

    async def fetch_visitors_over_time(
        self, property_id: str, date_range: DateRange, report_filter: Optional[ReportFilter] = None
    ) -> list[RawReportRow]:
        return await self._report(
            "visitors_over_time",
            property_id,
            date_range,
            ["date"],
            ["activeUsers", "newUsers", "sessions"],
            report_filter,
            order_bys=[{"dimension": {"dimensionName": "date", "orderType": "ALPHANUMERIC"}}],
        )

    async def fetch_top_pages(
        self, property_id: str, date_range: DateRange, report_filter: Optional[ReportFilter] = None
    ) -> list[RawReportRow]:
        return await self._report(
            "top_pages",
            property_id,
            date_range,
            ["pagePath", "pageTitle"],
            ["screenPageViews", "totalUsers"],
            report_filter,
            order_bys=_order_by_metric("screenPageViews"),
            limit=TOP_PAGES_LIMIT,
        )

    async def fetch_referrers(
        self, property_id: str, date_range: DateRange, report_filter: Optional[ReportFilter] = None
    ) -> list[RawReportRow]:
        return await self._report(
            "referrers",
            property_id,
            date_range,
            ["sessionSource", "sessionMedium"],
            ["sessions", "totalUsers"],
            report_filter,
            order_bys=_order_by_metric("sessions"),
            limit=REFERRERS_LIMIT,
        )

    async def fetch_country_breakdown(
        self, property_id: str, date_range: DateRange, report_filter: Optional[ReportFilter] = None
    ) -> list[RawReportRow]:
        return await self._report(
            "country_breakdown",
            property_id,
            date_range,
            ["country", "countryId"],
            ["totalUsers"],
            report_filter,
            order_bys=_order_by_metric("totalUsers"),
            limit=COUNTRIES_LIMIT,
        )

    async def fetch_device_breakdown(
        self, property_id: str, date_range: DateRange, report_filter: Optional[ReportFilter] = None
    ) -> list[RawReportRow]:
        return await self._report(
            "device_breakdown",
            property_id,
            date_range,
            ["deviceCategory"],
            ["totalUsers"],
            report_filter,
            order_bys=_order_by_metric("totalUsers"),
        )
