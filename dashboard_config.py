"""
Dashboard Configuration Module

Loads the parameters of the aggregation engine from the environment (and an
optional .env file via python-dotenv). Nothing in the aggregation modules is
hard-coded to one deployment: the organisation domain, the week start, the
status-filter exemptions, the months left out of the all-time view and the
team roster all come from here.

Environment variables:
    DASHBOARD_ORG_DOMAIN          Organisation e-mail domain (default: edfenergy.com)
    DASHBOARD_WEEK_START          Weekday name weeks start on (default: monday)
    DASHBOARD_STATUS_EXEMPTIONS   Comma-separated agent identifier substrings whose
                                  inactive sites stay in the daily breakdown
    DASHBOARD_EXCLUDED_MONTHS     Comma-separated YYYY-MM months left out of the
                                  all-time monthly view (default: none)
    DASHBOARD_TEAMS_FILE          Path of the team roster JSON file

Usage:
    from dashboard_config import DashboardConfig, load_config, ConfigurationError

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(e)
        sys.exit(1)
"""

import os
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from dotenv import load_dotenv

from constants import DEFAULT_ORG_DOMAIN, DEFAULT_WEEK_START, Weekday
from team_mapping import TeamResolver, load_team_roster

logger = logging.getLogger(__name__)

ORG_DOMAIN_ENV_VAR = "DASHBOARD_ORG_DOMAIN"
WEEK_START_ENV_VAR = "DASHBOARD_WEEK_START"
STATUS_EXEMPTIONS_ENV_VAR = "DASHBOARD_STATUS_EXEMPTIONS"
EXCLUDED_MONTHS_ENV_VAR = "DASHBOARD_EXCLUDED_MONTHS"
TEAMS_FILE_ENV_VAR = "DASHBOARD_TEAMS_FILE"


class ConfigurationError(ValueError):
    """Raised when a configuration value is missing or malformed."""

    def __init__(self, message, setting=None, hint=None):
        super().__init__(message)
        self.setting = setting
        self.hint = hint

    def __str__(self):
        base_msg = super().__str__()
        if self.setting and self.hint:
            return f"{self.setting}: {base_msg} - Hint: {self.hint}"
        if self.setting:
            return f"{self.setting}: {base_msg}"
        return base_msg


@dataclass(frozen=True)
class DashboardConfig:
    """Parameters shared by every aggregation.

    Attributes:
        org_domain: E-mail domain agents must belong to
        week_start: First weekday of a calendar week
        status_filter_exemptions: Agent identifier substrings exempt from the
            active-status rule in the daily breakdown
        excluded_months: (year, month) pairs left out of the all-time view
        team_resolver: Read-only team roster lookup
    """
    org_domain: str = DEFAULT_ORG_DOMAIN
    week_start: Weekday = DEFAULT_WEEK_START
    status_filter_exemptions: FrozenSet[str] = frozenset()
    excluded_months: FrozenSet[Tuple[int, int]] = frozenset()
    team_resolver: TeamResolver = field(default_factory=TeamResolver)


def parse_csv_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated setting, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def parse_weekday(value: str) -> Weekday:
    """Parse a weekday name ("wednesday", "Wed") or number (0 = Monday).

    Raises:
        ConfigurationError: If the value names no weekday.
    """
    cleaned = value.strip().upper()
    if cleaned.isdigit() and 0 <= int(cleaned) <= 6:
        return Weekday(int(cleaned))
    for day in Weekday:
        if cleaned and (day.name == cleaned or (len(cleaned) >= 3 and day.name.startswith(cleaned))):
            return day
    raise ConfigurationError(
        f"Unknown weekday '{value}'",
        setting=WEEK_START_ENV_VAR,
        hint="use a day name such as 'monday' or 'wednesday'",
    )


def parse_month_key(value: str, setting: str = EXCLUDED_MONTHS_ENV_VAR) -> Tuple[int, int]:
    """Parse a 'YYYY-MM' month into a (year, month) tuple.

    Raises:
        ConfigurationError: If the value is not a valid month.
    """
    try:
        year_text, month_text = value.strip().split('-')
        year, month = int(year_text), int(month_text)
    except ValueError:
        raise ConfigurationError(
            f"Invalid month '{value}'",
            setting=setting,
            hint="use YYYY-MM, e.g. 2025-08",
        )
    if not 1 <= month <= 12:
        raise ConfigurationError(
            f"Invalid month '{value}'",
            setting=setting,
            hint="month must be between 01 and 12",
        )
    return year, month


def load_team_resolver(teams_file: Optional[str]) -> TeamResolver:
    """Build the team resolver from a roster file (empty roster when None).

    Raises:
        ConfigurationError: If the roster file is missing or malformed.
    """
    if not teams_file:
        logger.info("No team roster configured; team views will be empty")
        return TeamResolver()

    try:
        return TeamResolver(load_team_roster(teams_file))
    except FileNotFoundError:
        raise ConfigurationError(
            f"Team roster not found: {teams_file}",
            setting=TEAMS_FILE_ENV_VAR,
        )
    except ValueError as e:
        raise ConfigurationError(str(e), setting=TEAMS_FILE_ENV_VAR)


def load_config(
    env_file: Optional[str] = None,
    teams_file: Optional[str] = None,
) -> DashboardConfig:
    """Load the dashboard configuration from the environment.

    Args:
        env_file: Optional .env file to load first (python-dotenv default
            lookup when None). Existing environment variables win.
        teams_file: Roster path overriding DASHBOARD_TEAMS_FILE.

    Returns:
        DashboardConfig

    Raises:
        ConfigurationError: If any setting is malformed.
    """
    load_dotenv(dotenv_path=env_file)

    org_domain = os.getenv(ORG_DOMAIN_ENV_VAR, DEFAULT_ORG_DOMAIN).strip().lstrip('@')
    if not org_domain:
        raise ConfigurationError("Organisation domain cannot be empty", setting=ORG_DOMAIN_ENV_VAR)

    week_start_value = os.getenv(WEEK_START_ENV_VAR)
    week_start = parse_weekday(week_start_value) if week_start_value else DEFAULT_WEEK_START

    exemptions = frozenset(parse_csv_list(os.getenv(STATUS_EXEMPTIONS_ENV_VAR)))
    excluded_months = frozenset(
        parse_month_key(item) for item in parse_csv_list(os.getenv(EXCLUDED_MONTHS_ENV_VAR))
    )

    resolver = load_team_resolver(teams_file or os.getenv(TEAMS_FILE_ENV_VAR))

    logger.debug(
        f"Configuration: domain={org_domain}, week_start={week_start.name}, "
        f"exemptions={len(exemptions)}, excluded_months={len(excluded_months)}, "
        f"team_members={len(resolver)}"
    )

    return DashboardConfig(
        org_domain=org_domain,
        week_start=week_start,
        status_filter_exemptions=exemptions,
        excluded_months=excluded_months,
        team_resolver=resolver,
    )
