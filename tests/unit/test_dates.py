"""
Unit tests for date token resolution and range expansion.
"""

from datetime import datetime, timedelta, timezone

import pytest

from metrics_api.utils.dates import (
    MAX_RANGE_DAYS,
    InvalidDateRangeError,
    generate_date_range,
    parse_date_range,
    parse_date_token,
)
from tests.conftest import REFERENCE_NOW


class TestParseDateToken:
    def test_today_is_end_of_current_day(self):
        result = parse_date_token("today", now=REFERENCE_NOW)
        assert result.date() == REFERENCE_NOW.date()
        assert (result.hour, result.minute, result.second) == (23, 59, 59)

    def test_yesterday_is_end_of_previous_day(self):
        result = parse_date_token("yesterday", now=REFERENCE_NOW)
        assert result.date().isoformat() == "2024-01-30"
        assert result.hour == 23

    def test_days_ago_is_start_of_day(self):
        result = parse_date_token("7daysAgo", now=REFERENCE_NOW)
        assert result == datetime(2024, 1, 24, tzinfo=timezone.utc)

    def test_zero_days_ago_is_start_of_today(self):
        result = parse_date_token("0daysAgo", now=REFERENCE_NOW)
        assert result == datetime(2024, 1, 31, tzinfo=timezone.utc)

    def test_iso_date_is_utc_midnight(self):
        result = parse_date_token("2024-01-01", now=REFERENCE_NOW)
        assert result == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_iso_datetime_with_offset_keeps_its_own_calendar_date(self):
        result = parse_date_token("2024-01-01T02:00:00+02:00", now=REFERENCE_NOW)
        assert result == datetime(2024, 1, 1, 2, tzinfo=timezone.utc)

    def test_late_evening_offset_does_not_roll_into_next_day(self):
        result = parse_date_token("2024-01-01T23:00:00-05:00", now=REFERENCE_NOW)
        assert result.date().isoformat() == "2024-01-01"

    @pytest.mark.parametrize(
        "token", ["800000daysAgo", "99999999999daysAgo", "9" * 5000 + "daysAgo"]
    )
    def test_days_ago_beyond_calendar_is_rejected(self, token):
        with pytest.raises(InvalidDateRangeError, match="out of range"):
            parse_date_token(token, now=REFERENCE_NOW)

    @pytest.mark.parametrize("token", ["30daysago", "sevendaysAgo", "2024-13-01", "", "tomorrow"])
    def test_malformed_tokens_are_rejected(self, token):
        with pytest.raises(InvalidDateRangeError):
            parse_date_token(token, now=REFERENCE_NOW)


class TestParseDateRange:
    def test_relative_range_resolves_against_same_instant(self):
        normalized = parse_date_range("30daysAgo", "today", now=REFERENCE_NOW)
        assert normalized.start_date == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert normalized.end_date.date() == REFERENCE_NOW.date()

    def test_single_day_range_is_allowed(self):
        normalized = parse_date_range("2024-01-05", "2024-01-05", now=REFERENCE_NOW)
        assert normalized.start_date == normalized.end_date

    def test_end_before_start_is_rejected(self):
        with pytest.raises(InvalidDateRangeError):
            parse_date_range("2024-01-10", "2024-01-01", now=REFERENCE_NOW)

    def test_malformed_start_is_rejected(self):
        with pytest.raises(InvalidDateRangeError):
            parse_date_range("30daysago", "today", now=REFERENCE_NOW)

    def test_invalid_range_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_date_range("nope", "today", now=REFERENCE_NOW)

    def test_range_longer_than_maximum_is_rejected(self):
        with pytest.raises(InvalidDateRangeError, match="maximum"):
            parse_date_range("1900-01-01", "today", now=REFERENCE_NOW)

    def test_range_of_exactly_maximum_length_is_allowed(self):
        start = (REFERENCE_NOW - timedelta(days=MAX_RANGE_DAYS - 1)).date().isoformat()
        normalized = parse_date_range(start, "today", now=REFERENCE_NOW)
        assert len(generate_date_range(*normalized)) == MAX_RANGE_DAYS


class TestGenerateDateRange:
    def test_inclusive_of_both_ends(self):
        normalized = parse_date_range("2024-01-01", "2024-01-07", now=REFERENCE_NOW)
        dates = generate_date_range(*normalized)
        assert dates[0] == "2024-01-01"
        assert dates[-1] == "2024-01-07"
        assert len(dates) == 7

    def test_relative_week_spans_eight_days(self):
        normalized = parse_date_range("7daysAgo", "today", now=REFERENCE_NOW)
        assert len(generate_date_range(*normalized)) == 8

    def test_crosses_month_boundary(self):
        normalized = parse_date_range("2024-01-30", "2024-02-02", now=REFERENCE_NOW)
        assert generate_date_range(*normalized) == [
            "2024-01-30",
            "2024-01-31",
            "2024-02-01",
            "2024-02-02",
        ]

    def test_last_representable_days(self):
        normalized = parse_date_range("9999-12-30", "9999-12-31", now=REFERENCE_NOW)
        assert generate_date_range(*normalized) == ["9999-12-30", "9999-12-31"]

    def test_offset_datetimes_expand_to_their_own_day(self):
        normalized = parse_date_range(
            "2024-01-01T00:00:00+05:00", "2024-01-01T23:00:00+05:00", now=REFERENCE_NOW
        )
        assert generate_date_range(*normalized) == ["2024-01-01"]
