"""
Pytest Configuration and Shared Fixtures for the Carbon Dashboard Tests.

Provides:
- A fixed reference moment so window calculations are reproducible
- A SiteRecord factory with sensible defaults
- A Wednesday-start configuration for the "edf.com" organisation
- A small team roster and a configuration that uses it
- Isolation from DASHBOARD_* and LOG_LEVEL variables of the host environment
"""

import time
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional

import pytest

from constants import Weekday
from dashboard_config import DashboardConfig
from site_record import Recommendation, SiteRecord
from team_mapping import Team, TeamMember, TeamResolver


DASHBOARD_ENV_VARS = (
    "DASHBOARD_ORG_DOMAIN",
    "DASHBOARD_WEEK_START",
    "DASHBOARD_STATUS_EXEMPTIONS",
    "DASHBOARD_EXCLUDED_MONTHS",
    "DASHBOARD_TEAMS_FILE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host settings out of configuration tests."""
    for name in DASHBOARD_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def pacific_time(monkeypatch):
    """Run the test with the process clock on America/Los_Angeles."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/Los_Angeles")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def now() -> datetime:
    """Friday 10 January 2025, midday."""
    return datetime(2025, 1, 10, 12, 0, 0)


@pytest.fixture
def make_record() -> Callable[..., SiteRecord]:
    """Factory for SiteRecord objects.

    Recommendations may be given as Recommendation objects or as dicts of
    Recommendation fields.
    """
    def _make(
        agent: str = "a@edf.com",
        status: str = "ACTIVE",
        onboard: Optional[datetime] = None,
        contact: Optional[str] = None,
        login_count: int = 0,
        recommendations: Iterable[Any] = (),
        **extra: Any
    ) -> SiteRecord:
        recs = tuple(
            rec if isinstance(rec, Recommendation) else Recommendation(**rec)
            for rec in recommendations
        )
        return SiteRecord(
            agent_identifier=agent,
            status=status,
            onboard_date=onboard,
            contact_identifier=contact,
            login_count=login_count,
            recommendations=recs,
            **extra
        )
    return _make


@pytest.fixture
def config() -> DashboardConfig:
    return DashboardConfig(org_domain="edf.com", week_start=Weekday.WEDNESDAY)


@pytest.fixture
def roster() -> list:
    return [
        Team(
            name="Team North",
            lead="Alex Morgan",
            members=(
                TeamMember(name="A", identifier="a@edf.com"),
                TeamMember(name="C", identifier="C@EDF.COM"),
            ),
        ),
        Team(
            name="Team South",
            lead="Chris Lee",
            members=(TeamMember(name="D", identifier="d@edf.com"),),
        ),
    ]


@pytest.fixture
def resolver(roster) -> TeamResolver:
    return TeamResolver(roster)


@pytest.fixture
def team_config(resolver) -> DashboardConfig:
    return DashboardConfig(
        org_domain="edf.com",
        week_start=Weekday.WEDNESDAY,
        team_resolver=resolver,
    )


@pytest.fixture
def raw_site() -> Dict[str, Any]:
    """One site object as returned by the site-activity API."""
    return {
        "agent_name": "jane.doe@edf.com",
        "site_status": "ACTIVE",
        "onboard_date": "2025-01-08T09:30:00",
        "contact_email": "Owner@Customer.com",
        "logged_in_contacts": 2,
        "siteAddress": "1 High Street, Leeds",
        "company_name": "Customer Ltd",
        "elecMeter": {"1200000000001": {}},
        "gasMeter": {},
        "recommendations": [
            {"type": "LED Lighting", "potential_savings": 120.5, "potential_carbon_savings": 40,
             "upgrade_cost": 300},
            {"potentialSavings": "15", "potentialCost": 5},
        ],
    }
