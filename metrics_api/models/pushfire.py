"""PushFire models: raw RPC rows and the platform metrics bundle."""

from metrics_api.models.common import CamelModel, Count, Number, RawRow, Text


class RawPlatformKPIs(RawRow):
    total_users: Count = 0
    total_projects: Count = 0
    total_subscribers: Count = 0
    total_devices: Count = 0
    notifications_sent: Count = 0
    delivery_success_rate: Number = 0.0


class RawBusinessKPIs(RawRow):
    mrr: Number = 0.0
    paid_projects: Count = 0
    total_projects: Count = 0


class RawDailySubscribers(RawRow):
    date: Text
    count: Count = 0


class RawDailyNotifications(RawRow):
    date: Text
    push: Count = 0
    email: Count = 0


class RawDailyExecutions(RawRow):
    date: Text
    executions: Count = 0


class RawDeviceBreakdown(RawRow):
    os: Text
    count: Count = 0


class PushFireKPIs(CamelModel):
    total_users: int
    total_projects: int
    total_subscribers: int
    total_devices: int
    notifications_sent: int
    delivery_success_rate: float


class PushFireBusinessKPIs(CamelModel):
    mrr: float
    paid_projects: int
    signup_to_paid_rate: float


class DailyNewSubscribers(CamelModel):
    date: str
    count: int = 0


class DailyNotifications(CamelModel):
    date: str
    push: int = 0
    email: int = 0


class DailyExecutions(CamelModel):
    date: str
    executions: int = 0


class DeviceOSBreakdown(CamelModel):
    os: str
    count: int


class PushFireMetrics(CamelModel):
    kpis: PushFireKPIs
    business_kpis: PushFireBusinessKPIs
    subscribers_over_time: list[DailyNewSubscribers]
    notifications_over_time: list[DailyNotifications]
    executions_over_time: list[DailyExecutions]
    device_breakdown: list[DeviceOSBreakdown]
