"""
Tests for the calendar utilities: named ranges, week/month/day bucketing and
the labels used as grouping keys.
"""

from datetime import date, datetime, time

import pytest

from constants import Weekday
from date_range_filter import (
    DateRange,
    DateRangePreset,
    create_date_range,
    day_label,
    end_of_week,
    get_date_ranges,
    get_month_range,
    get_preset_range,
    iter_days,
    iter_months,
    iter_week_starts,
    month_label,
    shift_month,
    start_of_week,
    week_label,
)


class TestDateRange:
    """Construction and membership of DateRange."""

    def test_start_after_end_raises(self):
        with pytest.raises(ValueError):
            DateRange(start=datetime(2025, 1, 2), end=datetime(2025, 1, 1))

    def test_bounds_are_inclusive(self):
        date_range = get_month_range(2025, 1)
        assert date_range.contains(datetime(2025, 1, 1, 0, 0, 0))
        assert date_range.contains(datetime(2025, 1, 31, 23, 59, 59))
        assert not date_range.contains(datetime(2025, 2, 1, 0, 0, 0))

    def test_none_is_never_contained(self):
        assert not get_month_range(2025, 1).contains(None)

    def test_days_in_range(self):
        assert get_month_range(2024, 2).days_in_range == 29

    def test_to_dict(self):
        data = get_month_range(2025, 3).to_dict()
        assert data["start"] == "2025-03-01T00:00:00"
        assert data["preset"] == "custom"
        assert data["days_in_range"] == 31


class TestPresetRanges:
    """Named ranges relative to Friday 10 January 2025, 12:00."""

    def test_today_live_ends_now(self, now):
        today = get_preset_range(DateRangePreset.TODAY, now=now)
        assert today.start == datetime(2025, 1, 10)
        assert today.end == now

    def test_today_report_mode_covers_whole_day(self, now):
        today = get_preset_range(DateRangePreset.TODAY, now=now, live=False)
        assert today.end == datetime.combine(date(2025, 1, 10), time.max)

    def test_yesterday(self, now):
        yesterday = get_preset_range(DateRangePreset.YESTERDAY, now=now)
        assert yesterday.start_date == date(2025, 1, 9)
        assert yesterday.end_date == date(2025, 1, 9)
        assert yesterday.end.time() == time.max

    def test_this_week_follows_week_start(self, now):
        week = get_preset_range(DateRangePreset.THIS_WEEK, now=now, week_start=Weekday.WEDNESDAY)
        assert week.start_date == date(2025, 1, 8)
        assert week.end_date == date(2025, 1, 14)

    def test_this_week_monday_default(self, now):
        week = get_preset_range(DateRangePreset.THIS_WEEK, now=now)
        assert week.start_date == date(2025, 1, 6)
        assert week.end_date == date(2025, 1, 12)

    def test_this_month(self, now):
        month = get_preset_range(DateRangePreset.THIS_MONTH, now=now)
        assert (month.start_date, month.end_date) == (date(2025, 1, 1), date(2025, 1, 31))

    def test_previous_month_crosses_year(self, now):
        month = get_preset_range(DateRangePreset.PREVIOUS_MONTH, now=now)
        assert (month.start_date, month.end_date) == (date(2024, 12, 1), date(2024, 12, 31))

    def test_last_7_days_is_seven_days(self, now):
        window = get_preset_range(DateRangePreset.LAST_7_DAYS, now=now)
        assert window.start_date == date(2025, 1, 4)
        assert window.end_date == date(2025, 1, 10)
        assert window.days_in_range == 7

    def test_custom_preset_rejected(self, now):
        with pytest.raises(ValueError):
            get_preset_range(DateRangePreset.CUSTOM, now=now)

    def test_get_date_ranges_has_every_named_preset(self, now):
        ranges = get_date_ranges(now=now)
        assert set(ranges) == {
            "today", "yesterday", "this_week", "this_month", "previous_month", "last_7_days",
        }
        assert ranges["this_month"].preset == DateRangePreset.THIS_MONTH


class TestCustomRange:

    def test_mixed_formats(self):
        date_range = create_date_range("01.01.2025", "2025-01-31")
        assert date_range.start == datetime(2025, 1, 1)
        assert date_range.end_date == date(2025, 1, 31)
        assert date_range.preset == DateRangePreset.CUSTOM

    def test_reversed_range_raises(self):
        with pytest.raises(ValueError):
            create_date_range(date(2025, 2, 1), date(2025, 1, 1))

    def test_unparseable_bound_raises(self):
        with pytest.raises(ValueError):
            create_date_range("someday", "2025-01-31")


class TestWeekBuckets:
    """Week boundaries and labels for a configurable week start."""

    def test_wednesday_week_label_is_stable_within_week(self):
        first = week_label(date(2025, 1, 1), Weekday.WEDNESDAY)
        last = week_label(date(2025, 1, 7), Weekday.WEDNESDAY)
        assert first == last == "1/1 - 7/1"

    def test_next_wednesday_starts_new_week(self):
        assert week_label(date(2025, 1, 8), Weekday.WEDNESDAY) == "8/1 - 14/1"
        assert week_label(date(2025, 1, 8), Weekday.WEDNESDAY) != week_label(
            date(2025, 1, 7), Weekday.WEDNESDAY
        )

    def test_monday_week_spanning_new_year(self):
        assert week_label(date(2025, 1, 1)) == "30/12 - 5/1"

    def test_start_and_end_of_week(self):
        assert start_of_week(date(2025, 1, 7), Weekday.WEDNESDAY) == date(2025, 1, 1)
        assert end_of_week(date(2025, 1, 7), Weekday.WEDNESDAY) == date(2025, 1, 7)
        assert start_of_week(date(2025, 1, 12), Weekday.SUNDAY) == date(2025, 1, 12)

    def test_iter_week_starts_covers_overlapping_weeks(self):
        starts = iter_week_starts(date(2025, 1, 1), date(2025, 1, 31), Weekday.WEDNESDAY)
        assert starts == [date(2025, 1, d) for d in (1, 8, 15, 22, 29)]

        monday_starts = iter_week_starts(date(2025, 1, 1), date(2025, 1, 31))
        assert monday_starts[0] == date(2024, 12, 30)
        assert len(monday_starts) == 5


class TestDayAndMonthBuckets:

    def test_labels(self):
        assert month_label(2025, 3) == "Mar 2025"
        assert day_label(date(2025, 3, 1)) == "Mar 1"

    def test_iter_days_inclusive(self):
        days = iter_days(date(2025, 1, 30), date(2025, 2, 2))
        assert days == [date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1), date(2025, 2, 2)]

    def test_iter_days_empty_when_reversed(self):
        assert iter_days(date(2025, 2, 2), date(2025, 1, 30)) == []

    def test_iter_months_skips_excluded(self):
        months = iter_months(date(2024, 11, 5), date(2025, 2, 1), frozenset({(2024, 12)}))
        assert months == [(2024, 11), (2025, 1), (2025, 2)]

    def test_shift_month(self):
        assert shift_month(2025, 1, -1) == (2024, 12)
        assert shift_month(2024, 12, 1) == (2025, 1)
        assert shift_month(2025, 3, -14) == (2024, 1)
