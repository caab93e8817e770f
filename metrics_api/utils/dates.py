"""
Date range normalization.

Requests carry analytics-style date tokens ("30daysAgo", "today",
"yesterday") or absolute ISO dates. Platform queries need concrete
instants, and the transforms need the list of calendar days in between.
All instants are UTC.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import NamedTuple, Optional

_DAYS_AGO_PATTERN = re.compile(r"^(\d+)daysAgo$")

# Widest range a dashboard request may ask for (about ten years).
MAX_RANGE_DAYS = 3660


class InvalidDateRangeError(ValueError):
    """Raised when a date token cannot be resolved or the range is unusable."""

    pass


class DateRange(NamedTuple):
    """Date range exactly as requested, e.g. ("30daysAgo", "today")."""

    start: str
    end: str


class NormalizedDateRange(NamedTuple):
    """Concrete start/end instants for a requested range."""

    start_date: datetime
    end_date: datetime


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max, tzinfo=value.tzinfo)


def parse_date_token(token: str, now: Optional[datetime] = None) -> datetime:
    """
    Resolve a single date token to a UTC instant.

    An ISO datetime keeps its own wall-clock date and time; a UTC offset, if
    present, is dropped rather than applied, so "2024-01-01T23:00:00+05:00"
    stays on 2024-01-01.

    Args:
        token: "today", "yesterday", "<N>daysAgo" or an ISO date/datetime
        now: Reference instant (defaults to the current UTC time)

    Returns:
        Timezone-aware datetime

    Raises:
        InvalidDateRangeError: If the token is not recognised or falls
            outside the representable calendar
    """
    now = now or datetime.now(timezone.utc)
    token = token.strip()

    if token == "today":
        return end_of_day(now)
    if token == "yesterday":
        return end_of_day(now - timedelta(days=1))

    match = _DAYS_AGO_PATTERN.match(token)
    if match:
        try:
            return start_of_day(now - timedelta(days=int(match.group(1))))
        except (OverflowError, ValueError) as e:
            raise InvalidDateRangeError(f"date token '{token}' is out of range") from e

    try:
        parsed = datetime.fromisoformat(token)
    except ValueError as e:
        raise InvalidDateRangeError(f"unrecognised date token '{token}'") from e

    return parsed.replace(tzinfo=timezone.utc)


def parse_date_range(
    start: str, end: str, now: Optional[datetime] = None
) -> NormalizedDateRange:
    """
    Convert a pair of date tokens into concrete start/end instants.

    Both tokens are resolved against the same reference instant so that
    "7daysAgo".."today" always spans eight calendar days.

    Raises:
        InvalidDateRangeError: If either token is malformed, end < start, or
            the range covers more than MAX_RANGE_DAYS calendar days
    """
    now = now or datetime.now(timezone.utc)
    start_date = parse_date_token(start, now)
    end_date = parse_date_token(end, now)

    if end_date < start_date:
        raise InvalidDateRangeError(f"end '{end}' is before start '{start}'")

    span = (end_date.date() - start_date.date()).days + 1
    if span > MAX_RANGE_DAYS:
        raise InvalidDateRangeError(
            f"range '{start}'..'{end}' covers {span} days, the maximum is {MAX_RANGE_DAYS}"
        )

    return NormalizedDateRange(start_date=start_date, end_date=end_date)


def generate_date_range(start_date: datetime, end_date: datetime) -> list[str]:
    """Every calendar date (YYYY-MM-DD) between start and end, inclusive."""
    first: date = start_date.date()
    last: date = end_date.date()
    return [(first + timedelta(days=i)).isoformat() for i in range((last - first).days + 1)]
