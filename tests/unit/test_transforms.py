"""
Unit tests for the pure transforms: series densification, rates, MRR,
health scoring and the per-product bundle builders.
"""

import pytest

from metrics_api.engine.transforms import (
    calculate_mrr,
    compute_health_score,
    forward_fill,
    safe_rate,
    transform_business_metrics,
    transform_client_health,
    transform_ga_bundle,
    transform_pushfire_metrics,
    transform_somara_metrics,
    zero_fill,
)
from metrics_api.engine.transforms.series import day_key, widen_days
from metrics_api.models.analytics import RawReportRow
from metrics_api.models.enums import HealthScore
from metrics_api.models.pushfire import (
    RawBusinessKPIs as RawPushFireBusinessKPIs,
    RawDailyExecutions,
    RawDailyNotifications,
    RawDailySubscribers,
    RawDeviceBreakdown,
    RawPlatformKPIs,
)
from metrics_api.models.somara import (
    RawBusinessKPIs as RawSomaraBusinessKPIs,
    RawDailyActivity,
    RawDailyCreditPurchases,
    RawDailySignup,
    RawDailySubscriptions,
    RawKPIs,
    RawModelUsage,
    RawOrgBilling,
)
from metrics_api.models.ulink import RawMRRRow, RawSignupRow, RawSignups, RawSubscriptions
from tests.conftest import make_project_health, make_range, make_report_row, make_subscription

DAYS = ["d1", "d2", "d3", "d4", "d5"]


# =============================================================================
# Series densification
# =============================================================================


class TestSeriesFill:
    def test_forward_fill_carries_last_value(self):
        filled = forward_fill(DAYS, {"d2": 5, "d4": 9})
        assert [value for _, value in filled] == [0, 5, 5, 9, 9]

    def test_zero_fill_defaults_missing_days(self):
        filled = zero_fill(DAYS, {"d2": 5, "d4": 9}, 0)
        assert [value for _, value in filled] == [0, 5, 0, 9, 0]

    def test_fill_preserves_day_order(self):
        assert [day for day, _ in zero_fill(DAYS, {}, 0)] == DAYS
        assert [day for day, _ in forward_fill(DAYS, {})] == DAYS

    def test_values_outside_range_are_ignored(self):
        filled = zero_fill(DAYS, {"d0": 3, "d9": 4}, 0)
        assert [value for _, value in filled] == [0, 0, 0, 0, 0]

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-01-05", "2024-01-05"),
            ("20240105", "2024-01-05"),
            ("2024-01-05T00:00:00+00:00", "2024-01-05"),
        ],
    )
    def test_day_key_normalizes_upstream_formats(self, raw, expected):
        assert day_key(raw) == expected

    def test_widen_days_covers_observed_days_without_gaps(self):
        days = ["2024-01-02", "2024-01-03"]
        assert widen_days(days, {"2024-01-04": 1}) == ["2024-01-02", "2024-01-03", "2024-01-04"]
        assert widen_days(days, {"2023-12-31": 1})[0] == "2023-12-31"
        assert len(widen_days(days, {"2023-12-31": 1})) == 4

    def test_widen_days_keeps_range_when_observations_fit(self):
        days = ["2024-01-02", "2024-01-03"]
        assert widen_days(days, {"2024-01-03": 1, "(other)": 2}) == days


class TestSafeRate:
    def test_zero_denominator_is_zero(self):
        assert safe_rate(10, 0) == 0.0

    def test_zero_over_zero_is_zero(self):
        assert safe_rate(0, 0) == 0.0

    def test_regular_ratio(self):
        assert safe_rate(1, 4) == 0.25


# =============================================================================
# ULink business metrics
# =============================================================================


class TestCalculateMRR:
    def test_sums_monthly_price_of_paid_production_subscriptions(self):
        subscriptions = [
            make_subscription("a", status="active", price_monthly=29.0),
            make_subscription("b", status="trialing", price_monthly=49.0),
            make_subscription("c", status="active", price_monthly=None),
            make_subscription("d", status="canceled", price_monthly=99.0),
            make_subscription("e", status="active", price_monthly=10.0, environment="staging"),
        ]
        assert calculate_mrr(subscriptions) == pytest.approx(78.0)

    def test_yearly_plans_contribute_monthly_list_price(self):
        subscription = make_subscription(price_monthly=20.0, price_yearly=200.0)
        assert calculate_mrr([subscription]) == pytest.approx(20.0)

    def test_empty_is_zero(self):
        assert calculate_mrr([]) == 0


class TestBusinessMetrics:
    def test_signups_zero_filled_and_total_from_raw_count(self):
        _, normalized = make_range("2024-01-01", "2024-01-03")
        signups = RawSignups(daily=[RawSignupRow(date="2024-01-02", count=4)], total=7)

        metrics = transform_business_metrics(
            normalized,
            signups=signups,
            subscriptions=RawSubscriptions(),
            active_projects=0,
            mrr_history=[],
            ga_visitors=0,
        )

        assert [(p.date, p.signups) for p in metrics.signups_over_time] == [
            ("2024-01-01", 0),
            ("2024-01-02", 4),
            ("2024-01-03", 0),
        ]
        assert metrics.total_signups == 7

    def test_mrr_history_forward_filled(self):
        _, normalized = make_range("2024-01-01", "2024-01-05")
        history = [RawMRRRow(date="2024-01-02", mrr=100), RawMRRRow(date="2024-01-04", mrr=150)]

        metrics = transform_business_metrics(
            normalized,
            signups=RawSignups(),
            subscriptions=RawSubscriptions(),
            active_projects=0,
            mrr_history=history,
            ga_visitors=0,
        )

        assert [p.mrr for p in metrics.mrr_over_time] == [0, 100, 100, 150, 150]

    def test_funnel_rates(self):
        _, normalized = make_range("2024-01-01", "2024-01-01")
        metrics = transform_business_metrics(
            normalized,
            signups=RawSignups(total=20),
            subscriptions=RawSubscriptions(
                subscriptions=[make_subscription(price_monthly=29.0)], total_paid_users=5
            ),
            active_projects=3,
            mrr_history=[],
            ga_visitors=400,
        )

        assert metrics.visitor_to_signup_rate == pytest.approx(0.05)
        assert metrics.signup_to_paid_rate == pytest.approx(0.25)
        assert metrics.mrr == pytest.approx(29.0)
        assert metrics.active_projects == 3

    def test_rates_are_zero_without_denominators(self):
        _, normalized = make_range("2024-01-01", "2024-01-01")
        metrics = transform_business_metrics(
            normalized,
            signups=RawSignups(total=0),
            subscriptions=RawSubscriptions(total_paid_users=3),
            active_projects=0,
            mrr_history=[],
            ga_visitors=0,
        )
        assert metrics.visitor_to_signup_rate == 0.0
        assert metrics.signup_to_paid_rate == 0.0

    def test_payload_uses_camel_case_keys(self):
        _, normalized = make_range("2024-01-01", "2024-01-01")
        payload = transform_business_metrics(
            normalized,
            signups=RawSignups(),
            subscriptions=RawSubscriptions(),
            active_projects=0,
            mrr_history=[],
            ga_visitors=0,
        ).to_payload()

        assert {"totalSignups", "signupsOverTime", "visitorToSignupRate"} <= set(payload)
        assert payload["signupsOverTime"][0] == {"date": "2024-01-01", "signups": 0}


# =============================================================================
# ULink client health
# =============================================================================


class TestHealthScore:
    @pytest.mark.parametrize(
        "links, clicks, onboarding, expected",
        [
            (2, 3, 5, HealthScore.HEALTHY),
            (1, 1, 4, HealthScore.HEALTHY),
            (0, 0, 1, HealthScore.INACTIVE),
            (1, 0, 1, HealthScore.AT_RISK),
            (1, 5, 3, HealthScore.AT_RISK),
            (0, 5, 6, HealthScore.AT_RISK),
            (0, 0, 2, HealthScore.AT_RISK),
            (0, 9, 0, HealthScore.INACTIVE),
        ],
    )
    def test_scoring_rule(self, links, clicks, onboarding, expected):
        assert compute_health_score(links, clicks, onboarding) == expected


class TestClientHealth:
    def test_aggregates(self, sample_projects):
        health = transform_client_health(sample_projects)

        assert health.total_projects == 5
        assert health.healthy_count == 2
        assert health.at_risk_count == 2
        assert health.inactive_count == 1
        assert health.avg_onboarding_progress == pytest.approx(14 / 30)
        assert health.configured_rate == pytest.approx(0.4)
        assert health.projects_with_links == 3

    def test_projects_sorted_healthy_first_and_stable(self, sample_projects):
        health = transform_client_health(sample_projects)
        assert [p.project_id for p in health.projects] == [
            "healthy-1",
            "healthy-2",
            "at-risk-1",
            "at-risk-2",
            "inactive-1",
        ]

    def test_onboarding_progress_counts_completed_steps(self):
        health = transform_client_health([make_project_health(steps=3)])
        project = health.projects[0]
        assert project.onboarding_progress == 3
        assert project.onboarding_steps.domain_setup is True
        assert project.onboarding_steps.platform_implementation_viewed is False

    def test_empty_project_set(self):
        health = transform_client_health([])
        assert health.total_projects == 0
        assert health.avg_onboarding_progress == 0.0
        assert health.configured_rate == 0.0
        assert health.projects == []

    def test_health_score_serializes_as_hyphenated_value(self):
        payload = transform_client_health([make_project_health(links_created=1)]).to_payload()
        assert payload["projects"][0]["healthScore"] == "at-risk"
        assert payload["atRiskCount"] == 1


# =============================================================================
# Analytics bundle
# =============================================================================


class TestGABundle:
    def test_builds_bundle_and_fills_visitor_days(self):
        _, normalized = make_range("2024-01-01", "2024-01-03")
        bundle = transform_ga_bundle(
            normalized,
            kpis=[RawReportRow.model_validate(make_report_row([], [120, 80, 150, 400, 63.5, 0.42]))],
            visitors=[RawReportRow.model_validate(make_report_row(["20240102"], [10, 4, 12]))],
            top_pages=[
                RawReportRow.model_validate(make_report_row(["/pricing", "Pricing"], [90, 40]))
            ],
            referrers=[RawReportRow.model_validate(make_report_row(["google", "organic"], [70, 50]))],
            countries=[
                RawReportRow.model_validate(make_report_row(["United States", "US"], [60]))
            ],
            devices=[RawReportRow.model_validate(make_report_row(["desktop"], [100]))],
        )

        assert bundle.kpis.total_users == 120
        assert bundle.kpis.pageviews == 400
        assert bundle.kpis.bounce_rate == pytest.approx(0.42)
        assert [(d.date, d.active_users) for d in bundle.visitors_over_time] == [
            ("2024-01-01", 0),
            ("2024-01-02", 10),
            ("2024-01-03", 0),
        ]
        assert bundle.top_pages[0].page_path == "/pricing"
        assert bundle.referrers[0].medium == "organic"
        assert bundle.countries[0].country_id == "US"
        assert bundle.devices[0].users == 100

    def test_empty_reports_yield_zero_kpis(self):
        _, normalized = make_range("2024-01-01", "2024-01-02")
        bundle = transform_ga_bundle(normalized, [], [], [], [], [], [])
        assert bundle.kpis.total_users == 0
        assert len(bundle.visitors_over_time) == 2
        assert bundle.top_pages == []

    def test_visitor_days_reported_outside_the_utc_range_are_kept(self):
        _, normalized = make_range("2024-01-02", "2024-01-03")
        bundle = transform_ga_bundle(
            normalized,
            kpis=[],
            visitors=[
                RawReportRow.model_validate(make_report_row(["20240101"], [7, 2, 9])),
                RawReportRow.model_validate(make_report_row(["20240103"], [5, 1, 6])),
            ],
            top_pages=[],
            referrers=[],
            countries=[],
            devices=[],
        )

        assert [(d.date, d.active_users) for d in bundle.visitors_over_time] == [
            ("2024-01-01", 7),
            ("2024-01-02", 0),
            ("2024-01-03", 5),
        ]

    def test_unparseable_visitor_day_is_ignored(self):
        _, normalized = make_range("2024-01-01", "2024-01-02")
        bundle = transform_ga_bundle(
            normalized,
            kpis=[],
            visitors=[RawReportRow.model_validate(make_report_row(["(other)"], [3, 1, 3]))],
            top_pages=[],
            referrers=[],
            countries=[],
            devices=[],
        )

        assert [d.date for d in bundle.visitors_over_time] == ["2024-01-01", "2024-01-02"]


# =============================================================================
# PushFire and Somara bundles
# =============================================================================


class TestPushFireMetrics:
    def test_series_zero_filled_and_paid_rate_derived(self):
        _, normalized = make_range("2024-01-01", "2024-01-03")
        metrics = transform_pushfire_metrics(
            normalized,
            kpis=RawPlatformKPIs(total_users=10, delivery_success_rate=0.97),
            business_kpis=RawPushFireBusinessKPIs(mrr=500, paid_projects=4, total_projects=16),
            subscribers=[RawDailySubscribers(date="2024-01-01", count=3)],
            notifications=[RawDailyNotifications(date="2024-01-03", push=8, email=2)],
            executions=[],
            devices=[RawDeviceBreakdown(os="ios", count=12)],
        )

        assert metrics.business_kpis.signup_to_paid_rate == pytest.approx(0.25)
        assert [p.count for p in metrics.subscribers_over_time] == [3, 0, 0]
        assert [(p.push, p.email) for p in metrics.notifications_over_time] == [
            (0, 0),
            (0, 0),
            (8, 2),
        ]
        assert [p.executions for p in metrics.executions_over_time] == [0, 0, 0]
        assert metrics.device_breakdown[0].os == "ios"

    def test_paid_rate_zero_without_projects(self):
        _, normalized = make_range("2024-01-01", "2024-01-01")
        metrics = transform_pushfire_metrics(
            normalized,
            RawPlatformKPIs(),
            RawPushFireBusinessKPIs(paid_projects=2, total_projects=0),
            [],
            [],
            [],
            [],
        )
        assert metrics.business_kpis.signup_to_paid_rate == 0.0


class TestSomaraMetrics:
    def test_fill_policies_per_series(self):
        _, normalized = make_range("2024-01-01", "2024-01-04")
        metrics = transform_somara_metrics(
            normalized,
            kpis=RawKPIs(total_users=50, tokens_used=1000),
            business_kpis=RawSomaraBusinessKPIs(active_subscribers=4, credits_purchased=250.5),
            activity=[RawDailyActivity(date="2024-01-02", messages=30, active_users=6)],
            signups=[RawDailySignup(date="2024-01-01", count=2)],
            tokens=[],
            subscriptions=[RawDailySubscriptions(date="2024-01-02", cumulative=3)],
            credit_purchases=[RawDailyCreditPurchases(date="2024-01-03", credits=100)],
            org_billing=[RawOrgBilling(owner_type="usage_based", count=9)],
            top_models=[RawModelUsage(model_id="gpt-4o", provider="openai", assistant_count=5)],
            credits=[],
        )

        assert [p.messages for p in metrics.activity_over_time] == [0, 30, 0, 0]
        assert [p.signups for p in metrics.signups_over_time] == [2, 0, 0, 0]
        assert [p.tokens for p in metrics.token_usage_over_time] == [0, 0, 0, 0]
        assert [p.cumulative for p in metrics.subscriptions_over_time] == [0, 3, 3, 3]
        assert [p.credits for p in metrics.credit_purchases_over_time] == [0, 0, 100, 0]
        assert metrics.org_billing_breakdown[0].billing_type == "usage_based"
        assert metrics.to_payload()["topModels"][0] == {
            "modelId": "gpt-4o",
            "provider": "openai",
            "assistantCount": 5,
        }
