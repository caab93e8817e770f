"""
Enumeration types for the metrics service.

All enums inherit from str to ensure JSON serialization compatibility.
"""

from enum import Enum


class ProductSlug(str, Enum):
    """Products whose metrics the dashboard aggregates."""

    SOMARA = "somara"
    ULINK = "ulink"
    PUSHFIRE = "pushfire"


class MetricType(str, Enum):
    """
    Bundle kinds. Each product caches each kind independently, so the
    metric type is part of every cache key.
    """

    GA_BUNDLE = "ga_bundle"
    ULINK_BUSINESS = "ulink_business"
    ULINK_HEALTH = "ulink_health"
    ULINK_WEBSITE = "ulink_website"
    ULINK_DASHBOARD_USERS = "ulink_dashboard_users"
    PUSHFIRE_PLATFORM = "pushfire_platform"
    SOMARA_PLATFORM = "somara_platform"


class HealthScore(str, Enum):
    """Derived engagement health of a ULink project."""

    HEALTHY = "healthy"
    AT_RISK = "at-risk"
    INACTIVE = "inactive"


# Sort order for the project list; healthy first, inactive last
HEALTH_ORDER: dict[HealthScore, int] = {
    HealthScore.HEALTHY: 0,
    HealthScore.AT_RISK: 1,
    HealthScore.INACTIVE: 2,
}
