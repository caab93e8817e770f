"""
ULink database query adapter.

Signups, subscriptions, MRR history, project activity and per-project
health come from the ULink PostgREST endpoint.
"""

import asyncio

from metrics_api.adapters.base_adapter import BaseAdapter
from metrics_api.connectors.supabase_rest import SupabaseRestClient
from metrics_api.models.ulink import (
    RawMRRRow,
    RawProjectHealth,
    RawSignupRow,
    RawSignups,
    RawSubscriptionRow,
    RawSubscriptions,
)
from metrics_api.utils.dates import NormalizedDateRange

PAID_STATUSES = ("active", "trialing")
PRODUCTION_ENVIRONMENT = "production"

SUBSCRIPTION_COLUMNS = (
    "id,status,environment,current_period_start,current_period_end,"
    "subscription_plans(price_monthly,price_yearly),created_at"
)


class ULinkAdapter(BaseAdapter):
    def __init__(self, client: SupabaseRestClient):
        super().__init__("ulink")
        self.client = client

    async def fetch_signups(self, date_range: NormalizedDateRange) -> RawSignups:
        """Daily signups plus the exact total for the range."""
        total, daily = await asyncio.gather(
            self.client.count("users_view", self._range_filters("created_at", date_range)),
            self.client.rpc("get_daily_signups", self._range_params(date_range)),
        )
        return RawSignups(
            daily=self._validate_rows(RawSignupRow, daily, "daily_signups"),
            total=total,
        )

    async def fetch_active_subscriptions(self) -> RawSubscriptions:
        """Production subscriptions that are active or trialing, with plan pricing."""
        rows, total = await self.client.select(
            "subscriptions",
            SUBSCRIPTION_COLUMNS,
            filters=[
                ("status", f"in.({','.join(PAID_STATUSES)})"),
                ("environment", f"eq.{PRODUCTION_ENVIRONMENT}"),
            ],
            count=True,
        )

        flattened = []
        for row in rows:
            plan = row.get("subscription_plans") or {}
            flattened.append(
                {
                    **{k: v for k, v in row.items() if k != "subscription_plans"},
                    "price_monthly": plan.get("price_monthly"),
                    "price_yearly": plan.get("price_yearly"),
                }
            )

        return RawSubscriptions(
            subscriptions=self._validate_rows(RawSubscriptionRow, flattened, "subscriptions"),
            total_paid_users=total if total is not None else len(flattened),
        )

    async def fetch_mrr_over_time(self, date_range: NormalizedDateRange) -> list[RawMRRRow]:
        rows = await self.client.rpc("get_mrr_over_time", self._range_params(date_range))
        return self._validate_rows(RawMRRRow, rows, "mrr_over_time")

    async def fetch_active_projects(self, date_range: NormalizedDateRange) -> int:
        """
        Distinct projects with activity in the range: links created or SDK
        sessions started.
        """
        (link_rows, _), (session_rows, _) = await asyncio.gather(
            self.client.select(
                "links", "project_id", filters=self._range_filters("created_at", date_range)
            ),
            self.client.select(
                "user_sessions",
                "project_id",
                filters=self._range_filters("session_start", date_range),
            ),
        )
        project_ids = {
            row.get("project_id") for row in [*link_rows, *session_rows] if row.get("project_id")
        }
        self.logger.debug("active_projects_counted", count=len(project_ids))
        return len(project_ids)

    async def fetch_project_health(
        self, date_range: NormalizedDateRange
    ) -> list[RawProjectHealth]:
        """Per-project onboarding and activity summary in one round-trip."""
        rows = await self.client.rpc("get_project_health_summary", self._range_params(date_range))
        return self._validate_rows(RawProjectHealth, rows, "project_health")
