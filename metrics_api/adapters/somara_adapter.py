"""
Somara database query adapter.

KPIs combine exact table counts with two aggregate procedures; the
remaining facets are one stored procedure each.
"""

import asyncio

from metrics_api.adapters.base_adapter import BaseAdapter
from metrics_api.connectors.supabase_rest import SupabaseRestClient
from metrics_api.models.common import coerce_float, coerce_int
from metrics_api.models.somara import (
    RawBusinessKPIs,
    RawCredits,
    RawDailyActivity,
    RawDailyCreditPurchases,
    RawDailySignup,
    RawDailySubscriptions,
    RawDailyTokens,
    RawKPIs,
    RawModelUsage,
    RawOrgBilling,
)
from metrics_api.utils.dates import NormalizedDateRange


class SomaraAdapter(BaseAdapter):
    def __init__(self, client: SupabaseRestClient):
        super().__init__("somara")
        self.client = client

    async def fetch_kpis(self, date_range: NormalizedDateRange) -> RawKPIs:
        """
        Headline counts for the range.

        Total users is all-time; every other figure is scoped to the range.
        Active users is a distinct count, so it comes from a procedure rather
        than a row count over messages.
        """
        in_range = self._range_filters("created_at", date_range)
        params = self._range_params(date_range)

        (
            total_users,
            new_signups,
            total_messages,
            total_chats,
            tokens_rows,
            active_rows,
        ) = await asyncio.gather(
            self.client.count("profiles"),
            self.client.count("profiles", in_range),
            self.client.count("messages", in_range),
            self.client.count("chats", in_range),
            self.client.rpc("get_somara_tokens_sum", params),
            self.client.rpc("get_somara_active_users", params),
        )

        tokens = self._first_row(tokens_rows) or {}
        active = self._first_row(active_rows) or {}
        return self._validate_row(
            RawKPIs,
            {
                "total_users": total_users,
                "active_users": coerce_int(active.get("count", active.get("value"))),
                "new_signups": new_signups,
                "total_messages": total_messages,
                "total_chats": total_chats,
                "tokens_used": coerce_int(coerce_float(tokens.get("total", tokens.get("value")))),
            },
            "kpis",
        )

    async def fetch_activity_over_time(
        self, date_range: NormalizedDateRange
    ) -> list[RawDailyActivity]:
        rows = await self.client.rpc("get_somara_daily_activity", self._range_params(date_range))
        return self._validate_rows(RawDailyActivity, rows, "activity_over_time")

    async def fetch_signups_over_time(
        self, date_range: NormalizedDateRange
    ) -> list[RawDailySignup]:
        rows = await self.client.rpc("get_somara_daily_signups", self._range_params(date_range))
        return self._validate_rows(RawDailySignup, rows, "signups_over_time")

    async def fetch_token_usage_over_time(
        self, date_range: NormalizedDateRange
    ) -> list[RawDailyTokens]:
        rows = await self.client.rpc("get_somara_daily_tokens", self._range_params(date_range))
        return self._validate_rows(RawDailyTokens, rows, "token_usage_over_time")

    async def fetch_org_billing_breakdown(self) -> list[RawOrgBilling]:
        rows = await self.client.rpc("get_somara_org_billing_breakdown")
        return self._validate_rows(RawOrgBilling, rows, "org_billing_breakdown")

    async def fetch_top_models(self) -> list[RawModelUsage]:
        rows = await self.client.rpc("get_somara_top_models")
        return self._validate_rows(RawModelUsage, rows, "top_models")

    async def fetch_credits_overview(self) -> list[RawCredits]:
        rows = await self.client.rpc("get_somara_credits_overview")
        return self._validate_rows(RawCredits, rows, "credits_overview")

    async def fetch_business_kpis(self) -> RawBusinessKPIs:
        rows = await self.client.rpc("get_somara_business_kpis")
        return self._validate_row(RawBusinessKPIs, self._first_row(rows), "business_kpis")

    async def fetch_subscriptions_over_time(
        self, date_range: NormalizedDateRange
    ) -> list[RawDailySubscriptions]:
        rows = await self.client.rpc(
            "get_somara_subscriptions_over_time", self._range_params(date_range)
        )
        return self._validate_rows(RawDailySubscriptions, rows, "subscriptions_over_time")

    async def fetch_credit_purchases_over_time(
        self, date_range: NormalizedDateRange
    ) -> list[RawDailyCreditPurchases]:
        rows = await self.client.rpc(
            "get_somara_credit_purchases_over_time", self._range_params(date_range)
        )
        return self._validate_rows(RawDailyCreditPurchases, rows, "credit_purchases_over_time")
