"""
Daily series densification.

Upstream daily rows are sparse: a day with no activity has no row. Every
series in a bundle is filled so that it has exactly one entry per calendar
day of the range, ascending.

- ``zero_fill`` is for flow quantities (messages, signups, notifications):
  a missing day means nothing happened.
- ``forward_fill`` is for cumulative or stateful quantities (MRR, running
  subscription counts): a missing day carries the last known value, and
  days before the first observation are 0.
"""

import math
import re
from datetime import date, datetime
from typing import Iterable, Mapping, Sequence, TypeVar

from metrics_api.utils.dates import NormalizedDateRange, generate_date_range

V = TypeVar("V")

_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")


def day_key(value: str) -> str:
    """
    Normalize an upstream date to ``YYYY-MM-DD``.

    Accepts ISO dates, ISO timestamps and the compact ``YYYYMMDD`` form used
    by analytics reports.
    """
    match = _COMPACT_DATE.match(value)
    if match:
        return "-".join(match.groups())
    return value[:10]


def days_in(date_range: NormalizedDateRange) -> list[str]:
    return generate_date_range(date_range.start_date, date_range.end_date)


def _is_day(value: str) -> bool:
    if len(value) != 10:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def widen_days(days: Sequence[str], observed: Mapping[str, object]) -> list[str]:
    """
    Extend ``days`` so it also covers every observed day, without gaps.

    Analytics reports bucket days in the property's own timezone, which can
    sit a day either side of the UTC range.
    """
    keys = set(days) | {day for day in observed if _is_day(day)}
    if not keys:
        return []
    first, last = min(keys), max(keys)
    return generate_date_range(datetime.fromisoformat(first), datetime.fromisoformat(last))


def index_by_day(rows: Iterable[V], date_of) -> dict[str, V]:
    """Map rows by normalized day. A later duplicate replaces an earlier one."""
    return {day_key(date_of(row)): row for row in rows}


def zero_fill(days: Sequence[str], observed: Mapping[str, V], empty: V) -> list[tuple[str, V]]:
    return [(day, observed.get(day, empty)) for day in days]


def forward_fill(
    days: Sequence[str], observed: Mapping[str, float], initial: float = 0
) -> list[tuple[str, float]]:
    filled = []
    last = initial
    for day in days:
        if day in observed:
            last = observed[day]
        filled.append((day, last))
    return filled


def safe_rate(numerator: float, denominator: float) -> float:
    """Ratio that is 0 instead of NaN or infinity."""
    if not denominator:
        return 0.0
    rate = numerator / denominator
    if math.isnan(rate) or math.isinf(rate):
        return 0.0
    return rate
