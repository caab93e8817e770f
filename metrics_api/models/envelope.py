"""
Response envelope returned by every metrics endpoint.

The presentation layer depends only on this shape:
``{data, error, cached, cachedAt}`` where exactly one of data/error is set.
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import status
from pydantic import model_validator

from metrics_api.models.common import CamelModel

UPSTREAM_UNAVAILABLE = status.HTTP_502_BAD_GATEWAY


class MetricsResponse(CamelModel):
    data: Optional[Any] = None
    error: Optional[str] = None
    cached: bool = False
    cached_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_exactly_one_outcome(self) -> "MetricsResponse":
        if (self.data is None) == (self.error is None):
            raise ValueError("exactly one of data or error must be set")
        return self

    @classmethod
    def success(
        cls, data: Any, cached: bool = False, cached_at: Optional[datetime] = None
    ) -> "MetricsResponse":
        return cls(data=data, cached=cached, cached_at=cached_at if cached else None)

    @classmethod
    def failure(cls, error: str) -> "MetricsResponse":
        return cls(error=error)


class EnvelopeResult(CamelModel):
    """An envelope paired with the HTTP status it should be served with."""

    envelope: MetricsResponse
    status_code: int = status.HTTP_200_OK


def success(data: Any, cached: bool = False, cached_at: Optional[datetime] = None) -> EnvelopeResult:
    return EnvelopeResult(envelope=MetricsResponse.success(data, cached, cached_at))


def failure(error: str, status_code: int = UPSTREAM_UNAVAILABLE) -> EnvelopeResult:
    return EnvelopeResult(envelope=MetricsResponse.failure(error), status_code=status_code)


def to_json_content(result: EnvelopeResult) -> dict:
    """Serialize the envelope, including any bundle model in ``data``, to camelCase JSON."""
    envelope = result.envelope
    data = envelope.data
    if hasattr(data, "to_payload"):
        data = data.to_payload()
    return {
        "data": data,
        "error": envelope.error,
        "cached": envelope.cached,
        "cachedAt": envelope.cached_at.isoformat() if envelope.cached_at else None,
    }
