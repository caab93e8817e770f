"""
Web analytics router.

Wired to:
- BundleFetcher for the six analytics facets
- MetricsOrchestrator for caching and stale fallback
"""

from typing import Optional

from fastapi import APIRouter, Depends

from metrics_api.models.enums import MetricType
from metrics_api.products import is_valid_product_slug
from metrics_api.routers.params import (
    MISSING_PRODUCT_RANGE,
    MetricsRequestError,
    envelope_response,
    require_date_range,
)
from metrics_api.services import ServiceContainer, get_container
from metrics_api.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/ga")
async def get_ga_metrics(
    product: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    container: ServiceContainer = Depends(get_container),
):
    """Traffic overview for one product's analytics property."""
    if not product or not start or not end:
        raise MetricsRequestError(MISSING_PRODUCT_RANGE)
    if not is_valid_product_slug(product):
        raise MetricsRequestError(f"Invalid product: {product}")

    date_range, normalized = require_date_range(start, end, MISSING_PRODUCT_RANGE)
    config = container.product(product)

    logger.info("ga_metrics_requested", product=product, start=start, end=end)

    result = await container.orchestrator.serve(
        product,
        MetricType.GA_BUNDLE.value,
        date_range,
        lambda: container.fetcher.ga_bundle(config.ga_property_id, date_range, normalized),
        "Failed to fetch analytics data",
    )
    return envelope_response(result)
