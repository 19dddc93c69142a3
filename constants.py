"""
Centralized Constants Module for the Carbon Site Dashboard

This module provides named constants for the values shared across the
aggregation modules. Centralizing them keeps the record filter, the calendar
utilities and the summary assembler in agreement about week boundaries,
sentinel labels and rounding.

Categories:
- Weekdays and Week Boundaries
- Record Status and Eligibility
- Sentinel Labels
- Calendar Labels
- Output Formatting
"""

from enum import IntEnum


# ============================================================================
# WEEKDAYS AND WEEK BOUNDARIES
# ============================================================================

class Weekday(IntEnum):
    """Days of the week, numbered like ``datetime.date.weekday()``."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


# First day of a calendar week. Every weekly bucket, week label and the
# "this week" range read this value unless a configuration overrides it.
DEFAULT_WEEK_START = Weekday.MONDAY

DAYS_PER_WEEK = 7

# "Last 7 days" covers today plus the six days before it
LAST_N_DAYS_WINDOW = 7


# ============================================================================
# RECORD STATUS AND ELIGIBILITY
# ============================================================================

ACTIVE_STATUS = "ACTIVE"

# Organisation e-mail domain agents must belong to
DEFAULT_ORG_DOMAIN = "edfenergy.com"


# ============================================================================
# SENTINEL LABELS
# ============================================================================

UNKNOWN_RECOMMENDATION_TYPE = "Unknown"
UNKNOWN_TEAM_LEAD = "Unknown"
NOT_AVAILABLE = "N/A"


# ============================================================================
# CALENDAR LABELS
# ============================================================================

# Fixed English abbreviations so labels do not depend on the process locale
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


# ============================================================================
# OUTPUT FORMATTING
# ============================================================================

# Currency and mass amounts are rounded to this many places in output rows
AMOUNT_DECIMAL_PLACES = 2
