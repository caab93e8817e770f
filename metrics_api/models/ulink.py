"""
ULink models: raw rows from the ULink database and the business and
client-health bundles derived from them.
"""

from typing import Optional

from pydantic import Field

from metrics_api.models.common import CamelModel, Count, Flag, Number, RawRow, Text
from metrics_api.models.enums import HealthScore

# ---------------------------------------------------------------------------
# Raw rows
# ---------------------------------------------------------------------------


class RawSignupRow(RawRow):
    date: Text
    count: Count = 0


class RawSignups(RawRow):
    """Daily signups plus the exact total count for the range."""

    daily: list[RawSignupRow] = Field(default_factory=list)
    total: Count = 0


class RawSubscriptionRow(RawRow):
    id: Text
    status: Text
    environment: Text = "production"
    price_monthly: Optional[Number] = None
    price_yearly: Optional[Number] = None
    current_period_start: Text = ""
    current_period_end: Text = ""
    created_at: Text = ""


class RawSubscriptions(RawRow):
    subscriptions: list[RawSubscriptionRow] = Field(default_factory=list)
    total_paid_users: Count = 0


class RawMRRRow(RawRow):
    date: Text
    mrr: Number = 0.0


class RawProjectHealth(RawRow):
    project_id: Text
    project_name: Text = ""
    project_created_at: Text = ""
    member_count: Count = 0
    domain_setup: Flag = False
    platform_selection: Flag = False
    platform_config: Flag = False
    cli_verified: Flag = False
    sdk_setup_viewed: Flag = False
    platform_implementation_viewed: Flag = False
    is_configured: Flag = False
    links_created: Count = 0
    total_clicks: Count = 0
    recent_clicks: Count = 0


# ---------------------------------------------------------------------------
# Business bundle
# ---------------------------------------------------------------------------


class DailySignups(CamelModel):
    date: str
    signups: Count = 0


class DailyMRR(CamelModel):
    date: str
    mrr: Number = 0.0


class ULinkBusinessMetrics(CamelModel):
    mrr: Number
    total_signups: Count
    total_paid_users: Count
    active_projects: Count
    visitor_to_signup_rate: Number
    signup_to_paid_rate: Number
    signups_over_time: list[DailySignups]
    mrr_over_time: list[DailyMRR]


# ---------------------------------------------------------------------------
# Client health bundle
# ---------------------------------------------------------------------------

ONBOARDING_STEP_COUNT = 6


class OnboardingSteps(CamelModel):
    domain_setup: bool = False
    platform_selection: bool = False
    platform_config: bool = False
    cli_verified: bool = False
    sdk_setup_viewed: bool = False
    platform_implementation_viewed: bool = False

    def completed(self) -> int:
        return sum(
            [
                self.domain_setup,
                self.platform_selection,
                self.platform_config,
                self.cli_verified,
                self.sdk_setup_viewed,
                self.platform_implementation_viewed,
            ]
        )


class ProjectHealthSummary(CamelModel):
    project_id: str
    project_name: str
    created_at: str
    member_count: int
    onboarding_steps: OnboardingSteps
    onboarding_progress: int = Field(ge=0, le=ONBOARDING_STEP_COUNT)
    is_configured: bool
    links_created: int
    total_clicks: int
    recent_clicks: int
    health_score: HealthScore


class ULinkClientHealth(CamelModel):
    total_projects: int
    healthy_count: int
    at_risk_count: int
    inactive_count: int
    avg_onboarding_progress: float  # 0-1
    configured_rate: float  # 0-1
    projects_with_links: int
    projects: list[ProjectHealthSummary]
