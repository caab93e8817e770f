"""PushFire raw rows → PushFireMetrics."""

from metrics_api.engine.transforms.series import days_in, index_by_day, safe_rate, zero_fill
from metrics_api.models.pushfire import (
    DailyExecutions,
    DailyNewSubscribers,
    DailyNotifications,
    DeviceOSBreakdown,
    PushFireBusinessKPIs,
    PushFireKPIs,
    PushFireMetrics,
    RawBusinessKPIs,
    RawDailyExecutions,
    RawDailyNotifications,
    RawDailySubscribers,
    RawDeviceBreakdown,
    RawPlatformKPIs,
)
from metrics_api.utils.dates import NormalizedDateRange


def transform_business_kpis(raw: RawBusinessKPIs) -> PushFireBusinessKPIs:
    return PushFireBusinessKPIs(
        mrr=raw.mrr,
        paid_projects=raw.paid_projects,
        signup_to_paid_rate=safe_rate(raw.paid_projects, raw.total_projects),
    )


def transform_pushfire_metrics(
    date_range: NormalizedDateRange,
    kpis: RawPlatformKPIs,
    business_kpis: RawBusinessKPIs,
    subscribers: list[RawDailySubscribers],
    notifications: list[RawDailyNotifications],
    executions: list[RawDailyExecutions],
    devices: list[RawDeviceBreakdown],
) -> PushFireMetrics:
    days = days_in(date_range)

    subscribers_by_day = index_by_day(subscribers, lambda row: row.date)
    notifications_by_day = index_by_day(notifications, lambda row: row.date)
    executions_by_day = index_by_day(executions, lambda row: row.date)

    return PushFireMetrics(
        kpis=PushFireKPIs(
            total_users=kpis.total_users,
            total_projects=kpis.total_projects,
            total_subscribers=kpis.total_subscribers,
            total_devices=kpis.total_devices,
            notifications_sent=kpis.notifications_sent,
            delivery_success_rate=kpis.delivery_success_rate,
        ),
        business_kpis=transform_business_kpis(business_kpis),
        subscribers_over_time=[
            DailyNewSubscribers(date=day, count=row.count if row else 0)
            for day, row in zero_fill(days, subscribers_by_day, None)
        ],
        notifications_over_time=[
            DailyNotifications(
                date=day,
                push=row.push if row else 0,
                email=row.email if row else 0,
            )
            for day, row in zero_fill(days, notifications_by_day, None)
        ],
        executions_over_time=[
            DailyExecutions(date=day, executions=row.executions if row else 0)
            for day, row in zero_fill(days, executions_by_day, None)
        ],
        device_breakdown=[DeviceOSBreakdown(os=row.os, count=row.count) for row in devices],
    )
