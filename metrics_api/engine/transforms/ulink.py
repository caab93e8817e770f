"""
ULink transforms: business metrics and client health.

Health scoring
--------------
Each project is graded from three signals: links created, clicks in the
recent window, and onboarding steps completed (0-6).

- healthy: has links AND recent clicks AND at least 4 onboarding steps
- at-risk: not healthy, but has links OR at least 2 onboarding steps
- inactive: everything else
"""

from typing import Iterable

import structlog

from metrics_api.engine.transforms.series import (
    days_in,
    forward_fill,
    index_by_day,
    safe_rate,
    zero_fill,
)
from metrics_api.models.enums import HEALTH_ORDER, HealthScore
from metrics_api.models.ulink import (
    ONBOARDING_STEP_COUNT,
    DailyMRR,
    DailySignups,
    OnboardingSteps,
    ProjectHealthSummary,
    RawMRRRow,
    RawProjectHealth,
    RawSignups,
    RawSubscriptionRow,
    RawSubscriptions,
    ULinkBusinessMetrics,
    ULinkClientHealth,
)
from metrics_api.utils.dates import NormalizedDateRange

logger = structlog.get_logger()

PAID_STATUSES = frozenset({"active", "trialing"})
PRODUCTION_ENVIRONMENT = "production"

HEALTHY_MIN_ONBOARDING = 4
AT_RISK_MIN_ONBOARDING = 2


# ============================================================================
# Business metrics
# ============================================================================


def calculate_mrr(subscriptions: Iterable[RawSubscriptionRow]) -> float:
    """
    Monthly recurring revenue at list price.

    Yearly plans contribute their monthly list price, not yearly / 12.
    """
    return sum(
        sub.price_monthly or 0.0
        for sub in subscriptions
        if sub.status in PAID_STATUSES and sub.environment == PRODUCTION_ENVIRONMENT
    )


def transform_business_metrics(
    date_range: NormalizedDateRange,
    signups: RawSignups,
    subscriptions: RawSubscriptions,
    active_projects: int,
    mrr_history: list[RawMRRRow],
    ga_visitors: int,
) -> ULinkBusinessMetrics:
    """
    Build the ULink business bundle.

    Args:
        ga_visitors: Total users of the ULink analytics property for the
            same range; the top of the visitor → signup funnel
    """
    days = days_in(date_range)

    signups_by_day = {
        day: row.count for day, row in index_by_day(signups.daily, lambda row: row.date).items()
    }
    mrr_by_day = {
        day: row.mrr for day, row in index_by_day(mrr_history, lambda row: row.date).items()
    }

    total_signups = signups.total
    total_paid_users = subscriptions.total_paid_users

    return ULinkBusinessMetrics(
        mrr=calculate_mrr(subscriptions.subscriptions),
        total_signups=total_signups,
        total_paid_users=total_paid_users,
        active_projects=active_projects,
        visitor_to_signup_rate=safe_rate(total_signups, ga_visitors),
        signup_to_paid_rate=safe_rate(total_paid_users, total_signups),
        signups_over_time=[
            DailySignups(date=day, signups=count)
            for day, count in zero_fill(days, signups_by_day, 0)
        ],
        mrr_over_time=[
            DailyMRR(date=day, mrr=mrr) for day, mrr in forward_fill(days, mrr_by_day)
        ],
    )


# ============================================================================
# Client health
# ============================================================================


def compute_health_score(
    links_created: int, recent_clicks: int, onboarding_progress: int
) -> HealthScore:
    has_links = links_created > 0
    if has_links and recent_clicks > 0 and onboarding_progress >= HEALTHY_MIN_ONBOARDING:
        return HealthScore.HEALTHY
    if has_links or onboarding_progress >= AT_RISK_MIN_ONBOARDING:
        return HealthScore.AT_RISK
    return HealthScore.INACTIVE


def summarize_project(raw: RawProjectHealth) -> ProjectHealthSummary:
    steps = OnboardingSteps(
        domain_setup=raw.domain_setup,
        platform_selection=raw.platform_selection,
        platform_config=raw.platform_config,
        cli_verified=raw.cli_verified,
        sdk_setup_viewed=raw.sdk_setup_viewed,
        platform_implementation_viewed=raw.platform_implementation_viewed,
    )
    progress = steps.completed()

    return ProjectHealthSummary(
        project_id=raw.project_id,
        project_name=raw.project_name,
        created_at=raw.project_created_at,
        member_count=raw.member_count,
        onboarding_steps=steps,
        onboarding_progress=progress,
        is_configured=raw.is_configured,
        links_created=raw.links_created,
        total_clicks=raw.total_clicks,
        recent_clicks=raw.recent_clicks,
        health_score=compute_health_score(raw.links_created, raw.recent_clicks, progress),
    )


def transform_client_health(raw_projects: list[RawProjectHealth]) -> ULinkClientHealth:
    """
    Score every project and aggregate.

    Aggregates cover the whole project set. The project list is ordered
    healthy, at-risk, inactive; ties keep upstream order.
    """
    projects = sorted(
        (summarize_project(raw) for raw in raw_projects),
        key=lambda project: HEALTH_ORDER[project.health_score],
    )

    total = len(projects)
    counts = {score: 0 for score in HealthScore}
    for project in projects:
        counts[project.health_score] += 1

    total_onboarding = sum(project.onboarding_progress for project in projects)
    configured = sum(1 for project in projects if project.is_configured)

    logger.debug(
        "client_health_scored",
        total_projects=total,
        healthy=counts[HealthScore.HEALTHY],
        at_risk=counts[HealthScore.AT_RISK],
        inactive=counts[HealthScore.INACTIVE],
    )

    return ULinkClientHealth(
        total_projects=total,
        healthy_count=counts[HealthScore.HEALTHY],
        at_risk_count=counts[HealthScore.AT_RISK],
        inactive_count=counts[HealthScore.INACTIVE],
        avg_onboarding_progress=safe_rate(total_onboarding, total * ONBOARDING_STEP_COUNT),
        configured_rate=safe_rate(configured, total),
        projects_with_links=sum(1 for project in projects if project.links_created > 0),
        projects=projects,
    )
