"""PushFire platform metrics router."""

from typing import Optional

from fastapi import APIRouter, Depends

from metrics_api.models.enums import MetricType, ProductSlug
from metrics_api.routers.params import envelope_response, require_date_range
from metrics_api.services import ServiceContainer, get_container

router = APIRouter()


@router.get("")
async def get_pushfire_metrics(
    start: Optional[str] = None,
    end: Optional[str] = None,
    container: ServiceContainer = Depends(get_container),
):
    date_range, normalized = require_date_range(start, end)

    result = await container.orchestrator.serve(
        ProductSlug.PUSHFIRE.value,
        MetricType.PUSHFIRE_PLATFORM.value,
        date_range,
        lambda: container.fetcher.pushfire_platform(date_range, normalized),
        "Failed to fetch PushFire platform metrics",
    )
    return envelope_response(result)
