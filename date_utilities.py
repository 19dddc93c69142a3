"""
Date Utilities Module

Provides the date parsing helpers shared by the record model, the calendar
utilities and the command-line interface. Upstream site records carry ISO
timestamps (sometimes with a trailing "Z" or an offset), while the CLI accepts
a few human-friendly day formats.

Usage:
    from date_utilities import (
        parse_datetime,
        parse_date_input,
        parse_date_argument,
        format_date_ddmmyyyy,
        SUPPORTED_DATE_FORMATS,
    )
"""

import logging
from datetime import datetime, date
from typing import Optional, Union
import argparse

logger = logging.getLogger(__name__)

# Day formats accepted from people, in order of preference
SUPPORTED_DATE_FORMATS = (
    '%Y-%m-%d',           # ISO format date only
    '%d.%m.%Y',           # European format
    '%d/%m/%Y',           # UK format
)


def parse_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse an upstream timestamp into a naive datetime.

    Timezone-aware values are converted to the host's local time and the
    offset is dropped, so records sit on the same naive local clock as
    datetime.now() and every window bound. Naive values are taken as local
    time already. Plain dates become midnight of that day.

    Args:
        value: ISO-8601 string ("2025-03-01", "2025-03-01T10:15:00Z",
            "2025-03-01T10:15:00+01:00"), a date, a datetime, or None.

    Returns:
        datetime: The parsed, naive datetime.
        None: If the value is empty or cannot be parsed. Invalid values are
            logged at DEBUG level; bad upstream dates are routine.

    Example:
        >>> parse_datetime("2025-03-01T10:15:00")
        datetime.datetime(2025, 3, 1, 10, 15)
        >>> parse_datetime("not a date") is None
        True
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        cleaned = str(value).strip()
        if not cleaned:
            return None
        if cleaned.endswith(('Z', 'z')):
            cleaned = cleaned[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(cleaned)
        except ValueError:
            logger.debug(f"Unparseable timestamp ignored: '{value}'")
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_date_input(value: Union[str, date, datetime]) -> date:
    """
    Parse a day from a date, datetime or string, raising on failure.

    Args:
        value: The value to parse. Strings may use any of
            SUPPORTED_DATE_FORMATS or full ISO format.

    Returns:
        datetime.date: The parsed day.

    Raises:
        ValueError: If the value cannot be parsed as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Cannot parse date from type: {type(value)}")

    cleaned = value.strip()
    for fmt in SUPPORTED_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    parsed = parse_datetime(cleaned)
    if parsed is None:
        raise ValueError(f"Cannot parse date from string: '{value}'")
    return parsed.date()


def parse_date_argument(date_str: str) -> date:
    """
    Parse a date given on the command line.

    Designed as an argparse ``type=`` callable.

    Raises:
        argparse.ArgumentTypeError: If the string cannot be parsed.

    Example:
        >>> parser.add_argument('--from', type=parse_date_argument)
    """
    if not date_str:
        raise argparse.ArgumentTypeError("Date string cannot be empty")

    try:
        return parse_date_input(date_str)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: '{date_str}'. "
            f"Use YYYY-MM-DD, DD.MM.YYYY, or DD/MM/YYYY format."
        )


def format_date_ddmmyyyy(value: Optional[Union[date, datetime]]) -> str:
    """Format a day as DD/MM/YYYY, or an empty string when missing."""
    if value is None:
        return ""
    return value.strftime('%d/%m/%Y')
