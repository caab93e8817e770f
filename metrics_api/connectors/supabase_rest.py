"""
Platform database client.

Each product's application database is exposed through a PostgREST
endpoint. The dashboard only needs three read operations:

- ``rpc``: call a stored procedure that returns pre-aggregated rows
- ``count``: exact row count for a filtered table (HEAD + Content-Range)
- ``select``: filtered rows from a table or view

Filters are PostgREST operator strings, e.g. ``("created_at", "gte.2024-01-01")``.
A column may appear more than once, so filters are a list of pairs.
"""

from typing import Any, Optional, Sequence

import httpx
import structlog

from metrics_api.connectors.errors import (
    ProviderConfigError,
    ProviderResponseError,
    translate_http_error,
)

logger = structlog.get_logger(__name__)

Filters = Sequence[tuple[str, str]]


class SupabaseRestClient:
    """
    Read-only PostgREST client for one platform database.

    Attributes:
        provider: Name used in logs and errors (e.g. "ulink")
        url: Project URL, without the /rest/v1 suffix
    """

    def __init__(
        self,
        provider: str,
        url: str,
        service_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.provider = provider
        self.url = url.rstrip("/")
        self._service_key = service_key
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

        logger.info(
            "platform_client_initialized",
            provider=provider,
            has_credentials=bool(url and service_key),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self._service_key)

    async def aclose(self) -> None:
        await self._http_client.aclose()

    def _headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        if not self.is_configured:
            raise ProviderConfigError(
                self.provider,
                f"{self.provider.upper()}_SUPABASE_URL and "
                f"{self.provider.upper()}_SUPABASE_SERVICE_KEY must be set",
            )
        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[list[tuple[str, str]]] = None,
        json: Optional[dict] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        request_headers = self._headers(headers)
        try:
            response = await self._http_client.request(
                method,
                f"{self.url}/rest/v1/{path}",
                params=params,
                json=json,
                headers=request_headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            error = translate_http_error(self.provider, e)
            logger.warning(
                "platform_request_failed",
                provider=self.provider,
                operation=operation,
                status_code=error.status_code,
                error=str(error),
            )
            raise error from e

        logger.debug(
            "platform_request_success",
            provider=self.provider,
            operation=operation,
            status_code=response.status_code,
        )
        return response

    def _json(self, response: httpx.Response, operation: str) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ProviderResponseError(self.provider, f"{operation} returned invalid JSON") from e

    async def rpc(self, function: str, params: Optional[dict[str, Any]] = None) -> list[dict]:
        """
        Call a stored procedure.

        Returns:
            Result rows; a scalar or single-object result is wrapped in a list,
            and a null result is an empty list
        """
        response = await self._request(
            "POST", f"rpc/{function}", operation=function, json=params or {},
            headers={"Content-Type": "application/json"},
        )
        data = self._json(response, function)
        if data is None:
            return []
        if isinstance(data, list):
            return [row if isinstance(row, dict) else {"value": row} for row in data]
        if isinstance(data, dict):
            return [data]
        return [{"value": data}]

    async def count(self, table: str, filters: Filters = ()) -> int:
        """Exact row count of ``table`` matching ``filters``."""
        params = [("select", "*"), *filters]
        response = await self._request(
            "HEAD", table, operation=f"count:{table}", params=params,
            headers={"Prefer": "count=exact"},
        )
        return _parse_content_range(self.provider, response.headers.get("content-range"))

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Filters = (),
        count: bool = False,
    ) -> tuple[list[dict], Optional[int]]:
        """
        Filtered rows from a table or view.

        Returns:
            (rows, exact count when ``count`` is requested else None)
        """
        params = [("select", columns), *filters]
        headers = {"Prefer": "count=exact"} if count else None
        response = await self._request(
            "GET", table, operation=f"select:{table}", params=params, headers=headers
        )
        data = self._json(response, f"select:{table}") or []
        if not isinstance(data, list):
            raise ProviderResponseError(self.provider, f"select:{table} returned a non-list payload")
        total = None
        if count:
            total = _parse_content_range(self.provider, response.headers.get("content-range"))
        return data, total


def _parse_content_range(provider: str, header: Optional[str]) -> int:
    """Total from a PostgREST Content-Range header such as ``0-24/3573`` or ``*/0``."""
    if not header or "/" not in header:
        raise ProviderResponseError(provider, "missing Content-Range header on count request")
    total = header.rsplit("/", 1)[1]
    if total == "*":
        return 0
    try:
        return int(total)
    except ValueError as e:
        raise ProviderResponseError(provider, f"invalid Content-Range header: {header}") from e
