"""
PushFire database query adapter.

Every facet is a single stored procedure. Business KPIs and the device
breakdown are global snapshots and take no date parameters.
"""

from metrics_api.adapters.base_adapter import BaseAdapter
from metrics_api.connectors.supabase_rest import SupabaseRestClient
from metrics_api.models.pushfire import (
    RawBusinessKPIs,
    RawDailyExecutions,
    RawDailyNotifications,
    RawDailySubscribers,
    RawDeviceBreakdown,
    RawPlatformKPIs,
)
from metrics_api.utils.dates import NormalizedDateRange


class PushFireAdapter(BaseAdapter):
    def __init__(self, client: SupabaseRestClient):
        super().__init__("pushfire")
        self.client = client

    async def fetch_platform_kpis(self, date_range: NormalizedDateRange) -> RawPlatformKPIs:
        rows = await self.client.rpc("get_pushfire_platform_kpis", self._range_params(date_range))
        return self._validate_row(RawPlatformKPIs, self._first_row(rows), "platform_kpis")

    async def fetch_business_kpis(self) -> RawBusinessKPIs:
        rows = await self.client.rpc("get_pushfire_business_kpis")
        return self._validate_row(RawBusinessKPIs, self._first_row(rows), "business_kpis")

    async def fetch_daily_subscribers(
        self, date_range: NormalizedDateRange
    ) -> list[RawDailySubscribers]:
        rows = await self.client.rpc(
            "get_pushfire_daily_subscribers", self._range_params(date_range)
        )
        return self._validate_rows(RawDailySubscribers, rows, "daily_subscribers")

    async def fetch_daily_notifications(
        self, date_range: NormalizedDateRange
    ) -> list[RawDailyNotifications]:
        rows = await self.client.rpc(
            "get_pushfire_daily_notifications", self._range_params(date_range)
        )
        return self._validate_rows(RawDailyNotifications, rows, "daily_notifications")

    async def fetch_daily_executions(
        self, date_range: NormalizedDateRange
    ) -> list[RawDailyExecutions]:
        rows = await self.client.rpc(
            "get_pushfire_daily_executions", self._range_params(date_range)
        )
        return self._validate_rows(RawDailyExecutions, rows, "daily_executions")

    async def fetch_device_breakdown(self) -> list[RawDeviceBreakdown]:
        rows = await self.client.rpc("get_pushfire_device_breakdown")
        return self._validate_rows(RawDeviceBreakdown, rows, "device_breakdown")
