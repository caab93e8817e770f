"""
Somara raw rows → SomaraMetrics.

Activity, signups, tokens and credit purchases are flows and are
zero-filled. The subscriptions series is a running total and is carried
forward across days with no row.
"""

from metrics_api.engine.transforms.series import days_in, forward_fill, index_by_day, zero_fill
from metrics_api.models.somara import (
    CreditsOverview,
    DailyActivity,
    DailyCreditPurchases,
    DailySignupCount,
    DailySubscriptions,
    DailyTokens,
    ModelUsage,
    OrgBillingBreakdown,
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
    SomaraBusinessKPIs,
    SomaraKPIs,
    SomaraMetrics,
)
from metrics_api.utils.dates import NormalizedDateRange


def _by_day(rows, value_of) -> dict:
    return {day: value_of(row) for day, row in index_by_day(rows, lambda row: row.date).items()}


def transform_somara_metrics(
    date_range: NormalizedDateRange,
    kpis: RawKPIs,
    business_kpis: RawBusinessKPIs,
    activity: list[RawDailyActivity],
    signups: list[RawDailySignup],
    tokens: list[RawDailyTokens],
    subscriptions: list[RawDailySubscriptions],
    credit_purchases: list[RawDailyCreditPurchases],
    org_billing: list[RawOrgBilling],
    top_models: list[RawModelUsage],
    credits: list[RawCredits],
) -> SomaraMetrics:
    days = days_in(date_range)
    activity_by_day = index_by_day(activity, lambda row: row.date)

    return SomaraMetrics(
        kpis=SomaraKPIs(
            total_users=kpis.total_users,
            active_users=kpis.active_users,
            new_signups=kpis.new_signups,
            total_messages=kpis.total_messages,
            total_chats=kpis.total_chats,
            tokens_used=kpis.tokens_used,
        ),
        business_kpis=SomaraBusinessKPIs(
            active_subscribers=business_kpis.active_subscribers,
            credits_purchased=business_kpis.credits_purchased,
        ),
        activity_over_time=[
            DailyActivity(
                date=day,
                messages=row.messages if row else 0,
                active_users=row.active_users if row else 0,
            )
            for day, row in zero_fill(days, activity_by_day, None)
        ],
        signups_over_time=[
            DailySignupCount(date=day, signups=count)
            for day, count in zero_fill(days, _by_day(signups, lambda row: row.count), 0)
        ],
        token_usage_over_time=[
            DailyTokens(date=day, tokens=count)
            for day, count in zero_fill(days, _by_day(tokens, lambda row: row.tokens), 0)
        ],
        subscriptions_over_time=[
            DailySubscriptions(date=day, cumulative=int(total))
            for day, total in forward_fill(
                days, _by_day(subscriptions, lambda row: row.cumulative)
            )
        ],
        credit_purchases_over_time=[
            DailyCreditPurchases(date=day, credits=amount)
            for day, amount in zero_fill(
                days, _by_day(credit_purchases, lambda row: row.credits), 0.0
            )
        ],
        org_billing_breakdown=[
            OrgBillingBreakdown(billing_type=row.owner_type, count=row.count)
            for row in org_billing
        ],
        top_models=[
            ModelUsage(
                model_id=row.model_id,
                provider=row.provider,
                assistant_count=row.assistant_count,
            )
            for row in top_models
        ],
        credits_overview=[
            CreditsOverview(
                source=row.source,
                total_granted=row.total_granted,
                total_consumed=row.total_consumed,
                total_remaining=row.total_remaining,
            )
            for row in credits
        ],
    )
