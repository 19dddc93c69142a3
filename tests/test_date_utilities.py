"""
Tests for timestamp and day parsing helpers.
"""

import argparse
from datetime import date, datetime

import pytest

from date_utilities import (
    format_date_ddmmyyyy,
    parse_date_argument,
    parse_date_input,
    parse_datetime,
)


class TestParseDatetime:

    def test_trailing_z_converted_to_local_time(self, pacific_time):
        assert parse_datetime("2025-03-01T10:15:00Z") == datetime(2025, 3, 1, 2, 15)

    def test_offset_converted_to_local_time(self, pacific_time):
        assert parse_datetime("2025-03-01T10:15:00+01:00") == datetime(2025, 3, 1, 1, 15)

    def test_naive_value_taken_as_local(self, pacific_time):
        assert parse_datetime("2025-03-01T10:15:00") == datetime(2025, 3, 1, 10, 15)

    def test_utc_evening_can_fall_on_previous_local_day(self, pacific_time):
        assert parse_datetime("2025-01-11T03:00:00Z") == datetime(2025, 1, 10, 19, 0)

    def test_plain_date_is_midnight(self):
        assert parse_datetime("2025-03-01") == datetime(2025, 3, 1)
        assert parse_datetime(date(2025, 3, 1)) == datetime(2025, 3, 1)

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2025-13-45"])
    def test_bad_values_give_none(self, value):
        assert parse_datetime(value) is None


class TestParseDateInput:

    @pytest.mark.parametrize("value", ["2025-03-01", "01.03.2025", "01/03/2025"])
    def test_supported_formats(self, value):
        assert parse_date_input(value) == date(2025, 3, 1)

    def test_datetime_is_truncated(self):
        assert parse_date_input(datetime(2025, 3, 1, 18, 0)) == date(2025, 3, 1)

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_date_input("March first")

    def test_argument_error_for_cli(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_date_argument("31-31-2025")


def test_format_date_ddmmyyyy():
    assert format_date_ddmmyyyy(datetime(2025, 3, 1, 9, 0)) == "01/03/2025"
    assert format_date_ddmmyyyy(None) == ""
