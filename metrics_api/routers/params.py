"""
Shared request parsing and response rendering for metrics routes.

Validation failures are raised as MetricsRequestError and rendered by the
app-level handler as a failure envelope with status 400.
"""

from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

from metrics_api.models.envelope import EnvelopeResult, failure, to_json_content
from metrics_api.utils.dates import (
    DateRange,
    InvalidDateRangeError,
    NormalizedDateRange,
    parse_date_range,
)

MISSING_RANGE = "Missing required params: start, end"
MISSING_PRODUCT_RANGE = "Missing required params: product, start, end"


class MetricsRequestError(Exception):
    """A metrics request that fails validation before any upstream call."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_result(self) -> EnvelopeResult:
        return failure(self.message, status_code=self.status_code)


def require_date_range(
    start: Optional[str], end: Optional[str], missing_message: str = MISSING_RANGE
) -> tuple[DateRange, NormalizedDateRange]:
    """
    Validate the start/end query params.

    Returns:
        The literal range (cache key, analytics queries) and its resolved
        instants (platform queries, series densification)

    Raises:
        MetricsRequestError: If either param is missing or malformed
    """
    if not start or not end:
        raise MetricsRequestError(missing_message)

    try:
        normalized = parse_date_range(start, end)
    except InvalidDateRangeError as e:
        raise MetricsRequestError(f"Invalid date range: {e}") from e

    return DateRange(start=start, end=end), normalized


def envelope_response(result: EnvelopeResult) -> JSONResponse:
    return JSONResponse(content=to_json_content(result), status_code=result.status_code)
