"""Analytics report rows → GAMetricsBundle."""

from metrics_api.engine.transforms.series import days_in, index_by_day, widen_days, zero_fill
from metrics_api.models.analytics import (
    KPIs,
    CountryBreakdown,
    DailyVisitors,
    DeviceBreakdown,
    GAMetricsBundle,
    RawReportRow,
    ReferrerSource,
    TopPage,
)
from metrics_api.utils.dates import NormalizedDateRange


def transform_kpis(rows: list[RawReportRow]) -> KPIs:
    """A KPI report has no dimensions, so at most one row."""
    if not rows:
        return KPIs()
    row = rows[0]
    return KPIs(
        total_users=row.metric(0),
        new_users=row.metric(1),
        sessions=row.metric(2),
        pageviews=row.metric(3),
        avg_session_duration=row.metric(4),
        bounce_rate=row.metric(5),
    )


def transform_visitors(
    rows: list[RawReportRow], date_range: NormalizedDateRange
) -> list[DailyVisitors]:
    observed = index_by_day(rows, lambda row: row.dimension(0))
    days = widen_days(days_in(date_range), observed)
    empty = RawReportRow()
    return [
        DailyVisitors(
            date=day,
            active_users=row.metric(0),
            new_users=row.metric(1),
            sessions=row.metric(2),
        )
        for day, row in zero_fill(days, observed, empty)
    ]


def transform_top_pages(rows: list[RawReportRow]) -> list[TopPage]:
    return [
        TopPage(
            page_path=row.dimension(0),
            page_title=row.dimension(1),
            pageviews=row.metric(0),
            users=row.metric(1),
        )
        for row in rows
    ]


def transform_referrers(rows: list[RawReportRow]) -> list[ReferrerSource]:
    return [
        ReferrerSource(
            source=row.dimension(0),
            medium=row.dimension(1),
            sessions=row.metric(0),
            users=row.metric(1),
        )
        for row in rows
    ]


def transform_countries(rows: list[RawReportRow]) -> list[CountryBreakdown]:
    return [
        CountryBreakdown(country=row.dimension(0), country_id=row.dimension(1), users=row.metric(0))
        for row in rows
    ]


def transform_devices(rows: list[RawReportRow]) -> list[DeviceBreakdown]:
    return [DeviceBreakdown(device_category=row.dimension(0), users=row.metric(0)) for row in rows]


def transform_ga_bundle(
    date_range: NormalizedDateRange,
    kpis: list[RawReportRow],
    visitors: list[RawReportRow],
    top_pages: list[RawReportRow],
    referrers: list[RawReportRow],
    countries: list[RawReportRow],
    devices: list[RawReportRow],
) -> GAMetricsBundle:
    return GAMetricsBundle(
        kpis=transform_kpis(kpis),
        visitors_over_time=transform_visitors(visitors, date_range),
        top_pages=transform_top_pages(top_pages),
        referrers=transform_referrers(referrers),
        countries=transform_countries(countries),
        devices=transform_devices(devices),
    )
