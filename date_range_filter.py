"""
Date Range Filter Module

Provides the calendar utilities of the dashboard: named date ranges (today,
yesterday, this week, this month, previous month, last 7 days), week/month/day
bucket enumeration and the labels used as grouping keys.

Every week computation takes a ``week_start`` weekday. The default is
``constants.DEFAULT_WEEK_START``; callers pass the configured value through so
the weekly buckets, the week labels and the "this week" range always agree.

Usage:
    from date_range_filter import (
        DateRange,
        DateRangePreset,
        get_preset_range,
        get_date_ranges,
        create_date_range,
        start_of_week,
        week_label,
        month_label,
        day_label,
        iter_days,
        iter_week_starts,
        iter_months,
    )
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, date, time
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from constants import (
    DAYS_PER_WEEK,
    DEFAULT_WEEK_START,
    LAST_N_DAYS_WINDOW,
    MONTH_ABBREVIATIONS,
)
from date_utilities import parse_date_input

logger = logging.getLogger(__name__)

YearMonth = Tuple[int, int]


class DateRangePreset(Enum):
    """Named date ranges offered by the dashboard."""
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    PREVIOUS_MONTH = "previous_month"
    LAST_7_DAYS = "last_7_days"
    CUSTOM = "custom"


@dataclass(frozen=True)
class DateRange:
    """An inclusive range of moments.

    Attributes:
        start: First moment in the range (normally 00:00:00 of the first day)
        end: Last moment in the range (normally 23:59:59.999999 of the last
            day, or "now" for the live view of today)
        preset: The preset used to create this range (CUSTOM if built manually)
    """
    start: datetime
    end: datetime
    preset: DateRangePreset = DateRangePreset.CUSTOM

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(
                f"Start ({self.start}) must be before or equal to end ({self.end})"
            )

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    @property
    def days_in_range(self) -> int:
        """Number of calendar days touched by the range (inclusive)."""
        return (self.end_date - self.start_date).days + 1

    def contains(self, moment: Optional[datetime]) -> bool:
        """Check whether a moment falls inside the range. None never does."""
        if moment is None:
            return False
        return self.start <= moment <= self.end

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "preset": self.preset.value,
            "days_in_range": self.days_in_range,
        }


def start_of_day(day: date) -> datetime:
    """Midnight at the start of ``day``."""
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    """Last representable moment of ``day``."""
    return datetime.combine(day, time.max)


def day_range(
    start_day: date,
    end_day: date,
    preset: DateRangePreset = DateRangePreset.CUSTOM
) -> DateRange:
    """Build a full-day range from ``start_day`` 00:00 to ``end_day`` 23:59:59.999999."""
    return DateRange(start=start_of_day(start_day), end=end_of_day(end_day), preset=preset)


def start_of_week(day: date, week_start: int = DEFAULT_WEEK_START) -> date:
    """Get the first day of the calendar week containing ``day``.

    Example:
        >>> start_of_week(date(2025, 1, 7), Weekday.WEDNESDAY)
        datetime.date(2025, 1, 1)
    """
    offset = (day.weekday() - int(week_start)) % DAYS_PER_WEEK
    return day - timedelta(days=offset)


def end_of_week(day: date, week_start: int = DEFAULT_WEEK_START) -> date:
    """Get the last day of the calendar week containing ``day``."""
    return start_of_week(day, week_start) + timedelta(days=DAYS_PER_WEEK - 1)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a calendar month."""
    _, days_in_month = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, days_in_month)


def shift_month(year: int, month: int, delta: int) -> YearMonth:
    """Move ``delta`` months forward (negative moves back)."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def get_preset_range(
    preset: DateRangePreset,
    now: Optional[datetime] = None,
    week_start: int = DEFAULT_WEEK_START,
    live: bool = True
) -> DateRange:
    """Get the DateRange for a named preset.

    Args:
        preset: The preset to use
        now: Reference moment (defaults to datetime.now())
        week_start: First weekday of a calendar week, used by THIS_WEEK
        live: When True, TODAY ends at ``now`` (live dashboard). When False
            every range, TODAY included, ends at the end of its last day
            (report generation).

    Returns:
        DateRange for the preset

    Raises:
        ValueError: If preset is CUSTOM (use create_date_range instead)
    """
    if preset == DateRangePreset.CUSTOM:
        raise ValueError("Use create_date_range() for custom date ranges")

    if now is None:
        now = datetime.now()
    today = now.date()

    if preset == DateRangePreset.TODAY:
        end = now if live else end_of_day(today)
        return DateRange(start=start_of_day(today), end=end, preset=preset)

    if preset == DateRangePreset.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return day_range(yesterday, yesterday, preset)

    if preset == DateRangePreset.THIS_WEEK:
        return day_range(start_of_week(today, week_start), end_of_week(today, week_start), preset)

    if preset == DateRangePreset.THIS_MONTH:
        first, last = month_bounds(today.year, today.month)
        return day_range(first, last, preset)

    if preset == DateRangePreset.PREVIOUS_MONTH:
        year, month = shift_month(today.year, today.month, -1)
        first, last = month_bounds(year, month)
        return day_range(first, last, preset)

    if preset == DateRangePreset.LAST_7_DAYS:
        return day_range(today - timedelta(days=LAST_N_DAYS_WINDOW - 1), today, preset)

    raise ValueError(f"Unknown preset: {preset}")


def get_date_ranges(
    now: Optional[datetime] = None,
    week_start: int = DEFAULT_WEEK_START,
    live: bool = True
) -> Dict[str, DateRange]:
    """Get every named range keyed by its preset value.

    Returns:
        Dictionary with keys today, yesterday, this_week, this_month,
        previous_month and last_7_days.
    """
    if now is None:
        now = datetime.now()
    return {
        preset.value: get_preset_range(preset, now=now, week_start=week_start, live=live)
        for preset in DateRangePreset
        if preset != DateRangePreset.CUSTOM
    }


def get_month_range(year: int, month: int) -> DateRange:
    """Full-day range covering one calendar month."""
    first, last = month_bounds(year, month)
    return day_range(first, last)


def create_date_range(
    start_date: Union[date, str],
    end_date: Union[date, str],
) -> DateRange:
    """Create a custom full-day range from dates or date strings.

    Raises:
        ValueError: If either bound cannot be parsed or start is after end.
    """
    return day_range(parse_date_input(start_date), parse_date_input(end_date))


def week_label(day: date, week_start: int = DEFAULT_WEEK_START) -> str:
    """Label of the calendar week containing ``day``.

    Any two days of the same week produce the identical string, so the label
    doubles as a grouping key.

    Example:
        >>> week_label(date(2025, 1, 7), Weekday.WEDNESDAY)
        '1/1 - 7/1'
    """
    first = start_of_week(day, week_start)
    last = first + timedelta(days=DAYS_PER_WEEK - 1)
    return f"{first.day}/{first.month} - {last.day}/{last.month}"


def month_label(year: int, month: int) -> str:
    """Label of a calendar month, e.g. 'Mar 2025'."""
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


def day_label(day: date) -> str:
    """Label of a single day, e.g. 'Mar 1'."""
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.day}"


def iter_days(start_day: date, end_day: date) -> List[date]:
    """Every calendar day from ``start_day`` to ``end_day`` inclusive."""
    if start_day > end_day:
        return []
    return [start_day + timedelta(days=offset) for offset in range((end_day - start_day).days + 1)]


def iter_week_starts(
    start_day: date,
    end_day: date,
    week_start: int = DEFAULT_WEEK_START
) -> List[date]:
    """First day of every calendar week overlapping ``start_day``..``end_day``."""
    starts: List[date] = []
    current = start_of_week(start_day, week_start)
    while current <= end_day:
        starts.append(current)
        current += timedelta(days=DAYS_PER_WEEK)
    return starts


def iter_months(
    start_day: date,
    end_day: date,
    excluded_months: FrozenSet[YearMonth] = frozenset()
) -> List[YearMonth]:
    """Every (year, month) from ``start_day``'s month to ``end_day``'s month.

    Months listed in ``excluded_months`` are left out of the sequence.
    """
    months: List[YearMonth] = []
    year, month = start_day.year, start_day.month
    while (year, month) <= (end_day.year, end_day.month):
        if (year, month) in excluded_months:
            logger.debug(f"Skipping excluded month {month_label(year, month)}")
        else:
            months.append((year, month))
        year, month = shift_month(year, month, 1)
    return months
