"""
ULink router: business funnel, client health, and the website / dashboard
analytics split.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from metrics_api.models.enums import MetricType, ProductSlug
from metrics_api.routers.params import envelope_response, require_date_range
from metrics_api.services import ServiceContainer, get_container
from metrics_api.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()

PRODUCT = ProductSlug.ULINK.value


@router.get("")
async def get_business_metrics(
    start: Optional[str] = None,
    end: Optional[str] = None,
    container: ServiceContainer = Depends(get_container),
):
    """MRR, signups, paid users, active projects and funnel rates."""
    date_range, normalized = require_date_range(start, end)
    logger.info("ulink_business_requested", start=start, end=end)

    result = await container.orchestrator.serve(
        PRODUCT,
        MetricType.ULINK_BUSINESS.value,
        date_range,
        lambda: container.fetcher.ulink_business(date_range, normalized),
        "Failed to fetch ULink business metrics",
    )
    return envelope_response(result)


@router.get("/health")
async def get_client_health(
    start: Optional[str] = None,
    end: Optional[str] = None,
    container: ServiceContainer = Depends(get_container),
):
    """Per-project onboarding and engagement health."""
    date_range, normalized = require_date_range(start, end)

    result = await container.orchestrator.serve(
        PRODUCT,
        MetricType.ULINK_HEALTH.value,
        date_range,
        lambda: container.fetcher.ulink_health(date_range, normalized),
        "Failed to fetch ULink client health data",
    )
    return envelope_response(result)


@router.get("/website")
async def get_website_metrics(
    start: Optional[str] = None,
    end: Optional[str] = None,
    container: ServiceContainer = Depends(get_container),
):
    """Analytics for the marketing site (every page outside /dashboard)."""
    date_range, normalized = require_date_range(start, end)

    result = await container.orchestrator.serve(
        PRODUCT,
        MetricType.ULINK_WEBSITE.value,
        date_range,
        lambda: container.fetcher.ulink_website(date_range, normalized),
        "Failed to fetch website analytics data",
    )
    return envelope_response(result)


@router.get("/dashboard-users")
async def get_dashboard_users_metrics(
    start: Optional[str] = None,
    end: Optional[str] = None,
    container: ServiceContainer = Depends(get_container),
):
    """Analytics for the logged-in dashboard (pages under /dashboard)."""
    date_range, normalized = require_date_range(start, end)

    result = await container.orchestrator.serve(
        PRODUCT,
        MetricType.ULINK_DASHBOARD_USERS.value,
        date_range,
        lambda: container.fetcher.ulink_dashboard_users(date_range, normalized),
        "Failed to fetch dashboard users analytics data",
    )
    return envelope_response(result)
