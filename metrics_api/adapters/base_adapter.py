"""
Base adapter class for provider query adapters.

Adapters marshal query parameters, call a provider client, and validate the
returned rows into raw-row models. They never aggregate: platform
databases return pre-aggregated rows, and transforms run elsewhere.
"""

from datetime import datetime
from typing import Any, Iterable, Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from metrics_api.connectors.errors import ProviderResponseError
from metrics_api.utils.dates import NormalizedDateRange

logger = structlog.get_logger()

RowModel = TypeVar("RowModel", bound=BaseModel)


class BaseAdapter:
    """
    Common plumbing for provider adapters.

    Attributes:
        provider: Identifier for the upstream (e.g. "analytics", "ulink")
    """

    def __init__(self, provider: str):
        self.provider = provider
        self.logger = logger.bind(adapter=provider)

    def _validate_rows(
        self, model: type[RowModel], rows: Iterable[Any], facet: str
    ) -> list[RowModel]:
        """
        Validate raw rows into ``model`` instances.

        Numeric coercion and null defaults live on the row models; anything
        that still fails validation means the upstream schema drifted.

        Raises:
            ProviderResponseError: If a row cannot be validated
        """
        try:
            validated = [model.model_validate(row) for row in rows]
        except ValidationError as e:
            self.logger.warning(
                "adapter_row_validation_failed",
                facet=facet,
                error_count=e.error_count(),
            )
            raise ProviderResponseError(self.provider, f"unexpected row shape for {facet}") from e

        self.logger.debug("adapter_rows_fetched", facet=facet, row_count=len(validated))
        return validated

    def _validate_row(self, model: type[RowModel], row: Optional[dict], facet: str) -> RowModel:
        """Validate a single-row snapshot; a missing row yields the model defaults."""
        return self._validate_rows(model, [row or {}], facet)[0]

    @staticmethod
    def _first_row(rows: list[dict]) -> Optional[dict]:
        return rows[0] if rows else None

    @staticmethod
    def _iso(value: datetime) -> str:
        return value.isoformat()

    def _range_params(self, date_range: NormalizedDateRange) -> dict[str, str]:
        """Standard RPC parameters for range-scoped procedures."""
        return {
            "start_date": self._iso(date_range.start_date),
            "end_date": self._iso(date_range.end_date),
        }

    def _range_filters(
        self, column: str, date_range: NormalizedDateRange
    ) -> list[tuple[str, str]]:
        """PostgREST filters restricting ``column`` to the range, inclusive."""
        return [
            (column, f"gte.{self._iso(date_range.start_date)}"),
            (column, f"lte.{self._iso(date_range.end_date)}"),
        ]
