"""
Product registry.

Static per-product configuration; the GA property id is resolved from
settings so that it can differ per deployment.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from metrics_api.config import Settings, get_settings
from metrics_api.models.enums import ProductSlug


class ProductConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: ProductSlug
    name: str
    color: str
    ga_property_id: str
    has_ga_metrics: bool = True
    has_business_metrics: bool = False
    has_platform_metrics: bool = False


def get_products(settings: Optional[Settings] = None) -> list[ProductConfig]:
    settings = settings or get_settings()
    return [
        ProductConfig(
            slug=ProductSlug.SOMARA,
            name="Somara",
            color="#6366f1",
            ga_property_id=settings.ga_property_id_somara,
            has_platform_metrics=True,
        ),
        ProductConfig(
            slug=ProductSlug.ULINK,
            name="ULink",
            color="#f59e0b",
            ga_property_id=settings.ga_property_id_ulink,
            has_business_metrics=True,
        ),
        ProductConfig(
            slug=ProductSlug.PUSHFIRE,
            name="PushFire",
            color="#ef4444",
            ga_property_id=settings.ga_property_id_pushfire,
            has_platform_metrics=True,
        ),
    ]


def is_valid_product_slug(slug: str) -> bool:
    return slug in {p.value for p in ProductSlug}
