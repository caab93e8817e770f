"""
Product registry router.

Wired to:
- ServiceContainer for the configured product list
"""

from fastapi import APIRouter, Depends

from metrics_api.services import ServiceContainer, get_container

router = APIRouter()


@router.get("")
async def list_products(container: ServiceContainer = Depends(get_container)):
    """
    Products the dashboard can display.
    GA property ids are deployment configuration and are not exposed.
    """
    return {
        "data": [
            {
                "slug": product.slug.value,
                "name": product.name,
                "color": product.color,
                "hasGaMetrics": product.has_ga_metrics and bool(product.ga_property_id),
                "hasBusinessMetrics": product.has_business_metrics,
                "hasPlatformMetrics": product.has_platform_metrics,
            }
            for product in container.products
        ],
        "error": None,
    }
