"""Somara models: raw RPC rows and the platform metrics bundle."""

from pydantic import ConfigDict

from metrics_api.models.common import CamelModel, Count, Number, RawRow, Text


class RawKPIs(RawRow):
    total_users: Count = 0
    active_users: Count = 0
    new_signups: Count = 0
    total_messages: Count = 0
    total_chats: Count = 0
    tokens_used: Count = 0


class RawDailyActivity(RawRow):
    date: Text
    messages: Count = 0
    active_users: Count = 0


class RawDailySignup(RawRow):
    date: Text
    count: Count = 0


class RawDailyTokens(RawRow):
    date: Text
    tokens: Count = 0


class RawOrgBilling(RawRow):
    owner_type: Text
    count: Count = 0


class RawModelUsage(RawRow):
    model_config = ConfigDict(protected_namespaces=())

    model_id: Text
    provider: Text = ""
    assistant_count: Count = 0


class RawCredits(RawRow):
    source: Text
    total_granted: Number = 0.0
    total_consumed: Number = 0.0
    total_remaining: Number = 0.0


class RawBusinessKPIs(RawRow):
    active_subscribers: Count = 0
    credits_purchased: Number = 0.0


class RawDailySubscriptions(RawRow):
    date: Text
    cumulative: Count = 0


class RawDailyCreditPurchases(RawRow):
    date: Text
    credits: Number = 0.0


class SomaraKPIs(CamelModel):
    total_users: int
    active_users: int
    new_signups: int
    total_messages: int
    total_chats: int
    tokens_used: int


class SomaraBusinessKPIs(CamelModel):
    active_subscribers: int
    credits_purchased: float


class DailyActivity(CamelModel):
    date: str
    messages: int = 0
    active_users: int = 0


class DailySignupCount(CamelModel):
    date: str
    signups: int = 0


class DailyTokens(CamelModel):
    date: str
    tokens: int = 0


class DailySubscriptions(CamelModel):
    date: str
    cumulative: int = 0


class DailyCreditPurchases(CamelModel):
    date: str
    credits: float = 0.0


class OrgBillingBreakdown(CamelModel):
    billing_type: str  # usage_based | byok_user | byok_enterprise | internal
    count: int


class ModelUsage(CamelModel):
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    provider: str
    assistant_count: int


class CreditsOverview(CamelModel):
    source: str  # subscription | purchase | bonus | rollover
    total_granted: float
    total_consumed: float
    total_remaining: float


class SomaraMetrics(CamelModel):
    kpis: SomaraKPIs
    business_kpis: SomaraBusinessKPIs
    activity_over_time: list[DailyActivity]
    signups_over_time: list[DailySignupCount]
    token_usage_over_time: list[DailyTokens]
    subscriptions_over_time: list[DailySubscriptions]
    credit_purchases_over_time: list[DailyCreditPurchases]
    org_billing_breakdown: list[OrgBillingBreakdown]
    top_models: list[ModelUsage]
    credits_overview: list[CreditsOverview]
