"""Tests for date normalization and the typed-date formatter."""

import pytest
from datetime import date

from expense_tracker.dates import (
    epoch_millis_to_iso,
    format_typed_date,
    normalize_date,
    normalize_stored_date,
    parse_stored_date,
)


# 2024-03-05 12:00:00 UTC
NOON_MARCH_5_SECONDS = "1709640000"
NOON_MARCH_5_MILLIS = "1709640000000"


class TestNormalizeDate:
    """Tests for normalize_date."""

    def test_canonical_is_unchanged(self):
        assert normalize_date("2024-03-05") == "2024-03-05"

    def test_canonical_is_trimmed(self):
        assert normalize_date("  2024-03-05 ") == "2024-03-05"

    def test_canonical_shape_is_not_calendar_checked(self):
        assert normalize_date("2024-13-45") == "2024-13-45"

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
    def test_empty_is_none(self, raw):
        assert normalize_date(raw) is None

    def test_garbage_is_none(self):
        assert normalize_date("not-a-date-at-all-xyz") is None

    def test_ten_digits_are_seconds(self):
        assert normalize_date(NOON_MARCH_5_SECONDS) == "2024-03-05"

    def test_thirteen_digits_are_millis(self):
        assert normalize_date(NOON_MARCH_5_MILLIS) == "2024-03-05"

    def test_nine_digits_are_millis(self):
        # 170,964,000 ms is just under two days after the epoch
        assert normalize_date("170964000") == "1970-01-02"

    def test_eleven_digits_are_millis(self):
        # 17,096,400 seconds is day 197 of 1970
        assert normalize_date("17096400000") == "1970-07-17"

    def test_zero_is_epoch(self):
        assert normalize_date("0") == "1970-01-01"

    def test_out_of_range_timestamp_is_none(self):
        assert normalize_date("9" * 20) is None

    def test_freeform_with_utc_offset(self):
        assert normalize_date("2024-03-05T10:00:00+00:00") == "2024-03-05"

    def test_freeform_is_converted_to_utc(self):
        # 23:30 in UTC-5 is already the next day in UTC
        assert normalize_date("2024-03-05T23:30:00-05:00") == "2024-03-06"

    def test_freeform_month_name(self):
        assert normalize_date("5 March 2024 12:00 UTC") == "2024-03-05"

    def test_never_raises_on_odd_input(self):
        for raw in ["--", "2024-", "31/31/31", "12:99", "été"]:
            result = normalize_date(raw)
            assert result is None or len(result) == 10


class TestFormatTypedDate:
    """Tests for format_typed_date."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("20240305", "2024-03-05"),
            ("2024", "2024"),
            ("abc2024def03", "2024-03"),
            ("202", "202"),
            ("20240", "2024-0"),
            ("2024030", "2024-03-0"),
            ("2024030512", "2024-03-05"),
            ("2024-03-05", "2024-03-05"),
            ("", ""),
        ],
    )
    def test_format(self, raw, expected):
        assert format_typed_date(raw) == expected

    def test_none_is_empty(self):
        assert format_typed_date(None) == ""

    def test_does_not_check_calendar(self):
        assert format_typed_date("20241399") == "2024-13-99"


class TestStoredDates:
    """Tests for parse_stored_date / normalize_stored_date."""

    def test_canonical_string(self):
        assert parse_stored_date("2024-03-05") == date(2024, 3, 5)

    def test_impossible_canonical_string(self):
        assert parse_stored_date("2024-13-45") is None
        assert parse_stored_date("2023-02-29") is None

    def test_missing(self):
        assert parse_stored_date(None) is None
        assert parse_stored_date("") is None

    def test_garbage(self):
        assert parse_stored_date("garbage") is None

    def test_integer_is_millis(self):
        assert parse_stored_date(int(NOON_MARCH_5_MILLIS)) == date(2024, 3, 5)

    def test_digit_string_follows_normalize_rules(self):
        assert parse_stored_date(NOON_MARCH_5_SECONDS) == date(2024, 3, 5)

    def test_non_finite_number(self):
        assert normalize_stored_date(float("nan")) is None
        assert normalize_stored_date(float("inf")) is None

    def test_bool_is_not_a_date(self):
        assert normalize_stored_date(True) is None


class TestEpochMillis:

    def test_negative_millis(self):
        assert epoch_millis_to_iso(-86_400_000) == "1969-12-31"

    def test_overflow(self):
        assert epoch_millis_to_iso(10 ** 30) is None
