"""
Analytics Data API client.

Thin async client over the GA4 ``runReport`` REST method. Authentication
uses a service account (base64-encoded JSON in settings) exchanged for an
OAuth2 access token by google-auth; the token is cached on the credentials
object and refreshed when it expires.

The client is constructed once by the service container and shared by all
requests. It holds no per-request state.
"""

import asyncio
import base64
import json
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from metrics_api.connectors.errors import (
    ProviderConfigError,
    ProviderResponseError,
    translate_http_error,
)
from metrics_api.utils.dates import DateRange

logger = structlog.get_logger(__name__)

TokenProvider = Callable[[], Awaitable[str]]

ANALYTICS_SCOPES = ["https://www.googleapis.com/auth/analytics.readonly"]


class ServiceAccountTokenProvider:
    """
    Supplies bearer tokens for a Google service account.

    Credentials are parsed on first use so that a missing or broken
    configuration only fails the analytics calls, not application startup.
    """

    provider = "analytics"

    def __init__(self, service_account_json_b64: str):
        self._encoded = service_account_json_b64
        self._credentials: Any = None
        self._lock = asyncio.Lock()

    def _load_credentials(self) -> Any:
        if not self._encoded:
            raise ProviderConfigError(
                self.provider, "GA_SERVICE_ACCOUNT_JSON environment variable is not set"
            )
        try:
            info = json.loads(base64.b64decode(self._encoded).decode("utf-8"))
            return service_account.Credentials.from_service_account_info(
                info, scopes=ANALYTICS_SCOPES
            )
        except (ValueError, KeyError) as e:
            raise ProviderConfigError(self.provider, f"invalid service account JSON: {e}") from e

    async def __call__(self) -> str:
        async with self._lock:
            if self._credentials is None:
                self._credentials = self._load_credentials()

            if not self._credentials.valid:
                try:
                    # google-auth refresh is blocking
                    await asyncio.to_thread(self._credentials.refresh, Request())
                except GoogleAuthError as e:
                    logger.warning("analytics_token_refresh_failed", error=str(e))
                    raise ProviderConfigError(self.provider, "token refresh failed") from e
                logger.debug("analytics_token_refreshed")

            return self._credentials.token


class GoogleAnalyticsClient:
    """
    Async Analytics Data API client.

    Attributes:
        base_url: API root, e.g. https://analyticsdata.googleapis.com/v1beta
    """

    provider = "analytics"

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str = "https://analyticsdata.googleapis.com/v1beta",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

        logger.info("analytics_client_initialized", base_url=self.base_url)

    async def aclose(self) -> None:
        await self._http_client.aclose()

    async def run_report(
        self,
        property_id: str,
        date_range: DateRange,
        dimensions: list[str],
        metrics: list[str],
        dimension_filter: Optional[dict] = None,
        order_bys: Optional[list[dict]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        Run a report and return its rows.

        Relative tokens ("30daysAgo", "today") are passed through untouched;
        the API resolves them itself.

        Returns:
            Rows as ``{"dimension_values": [...], "metric_values": [...]}``,
            empty when the report has no data

        Raises:
            ProviderError: On configuration, auth, transport or payload failure
        """
        if not property_id:
            raise ProviderConfigError(self.provider, "GA property id is not configured")

        body: dict[str, Any] = {
            "dateRanges": [{"startDate": date_range.start, "endDate": date_range.end}],
            "metrics": [{"name": name} for name in metrics],
        }
        if dimensions:
            body["dimensions"] = [{"name": name} for name in dimensions]
        if dimension_filter:
            body["dimensionFilter"] = dimension_filter
        if order_bys:
            body["orderBys"] = order_bys
        if limit:
            body["limit"] = limit

        token = await self._token_provider()
        url = f"{self.base_url}/properties/{property_id}:runReport"

        try:
            response = await self._http_client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            error = translate_http_error(self.provider, e)
            logger.warning(
                "analytics_request_failed",
                property_id=property_id,
                status_code=error.status_code,
                error=str(error),
            )
            raise error from e

        if not isinstance(payload, dict):
            raise ProviderResponseError(self.provider, "runReport returned a non-object payload")

        rows = payload.get("rows") or []
        logger.debug(
            "analytics_report_fetched",
            property_id=property_id,
            dimensions=dimensions,
            row_count=len(rows),
        )
        return [
            {
                "dimension_values": [
                    (value or {}).get("value") for value in row.get("dimensionValues") or []
                ],
                "metric_values": [
                    (value or {}).get("value") for value in row.get("metricValues") or []
                ],
            }
            for row in rows
        ]
