"""
Shared model bases and boundary coercion helpers.

Upstream rows are loosely typed: numbers arrive as strings, nulls appear
where counts are expected, and booleans may be 0/1. The annotated types
below normalize those values at the edge so that transforms only ever see
clean numbers.
"""

import math
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def coerce_float(value: Any) -> float:
    """Numeric coercion with a zero default for null or unparseable input."""
    if value is None or isinstance(value, bool):
        return float(value or 0)
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def coerce_int(value: Any) -> int:
    return int(coerce_float(value))


def coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "t", "1", "yes")
    return bool(value)


def coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


Number = Annotated[float, BeforeValidator(coerce_float)]
Count = Annotated[int, BeforeValidator(coerce_int)]
Flag = Annotated[bool, BeforeValidator(coerce_bool)]
Text = Annotated[str, BeforeValidator(coerce_str)]


class RawRow(BaseModel):
    """Validated upstream row. Unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class CamelModel(BaseModel):
    """
    Canonical metrics value object.

    Python attributes are snake_case; the JSON wire format (and the cached
    payload) is camelCase, which is what the presentation layer consumes.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_payload(self) -> dict:
        """JSON-compatible camelCase dict, as cached and returned."""
        return self.model_dump(mode="json", by_alias=True)
