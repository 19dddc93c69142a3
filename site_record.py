"""
Site Record Model

Typed, immutable views of the site-activity records returned by the upstream
site API. The API is loosely typed: keys appear in snake_case or camelCase,
numbers sometimes arrive as strings and most fields are optional. The
``from_dict`` constructors absorb those differences so the aggregation modules
only ever see defaults (empty strings, zeros, None dates), never missing keys.

Usage:
    from site_record import SiteRecord, Recommendation

    record = SiteRecord.from_dict(raw_site)
    if record.has_interaction:
        ...
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from constants import UNKNOWN_RECOMMENDATION_TYPE
from date_utilities import parse_datetime

logger = logging.getLogger(__name__)


def _first_present(raw: Dict[str, Any], *keys: str) -> Any:
    """Return the value of the first key that is present and not None."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _to_float(value: Any) -> float:
    """Coerce a numeric-looking value to a finite float, defaulting to 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _to_int(value: Any) -> int:
    """Coerce a count to int, defaulting to 0."""
    if isinstance(value, bool):
        return int(value)
    return int(_to_float(value))


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _meter_ids(value: Any) -> Tuple[str, ...]:
    """Meter numbers are the keys of the elecMeter/gasMeter objects."""
    if isinstance(value, dict):
        return tuple(str(key) for key in value.keys())
    return ()


@dataclass(frozen=True)
class Recommendation:
    """One energy-saving recommendation attached to a site.

    Attributes:
        type: Recommendation category ("Unknown" when the API omits it)
        potential_savings: Estimated yearly saving in GBP
        potential_carbon_savings: Estimated yearly carbon saving in kg CO2
        upgrade_cost: Investment needed to realise the recommendation in GBP
    """
    type: str = UNKNOWN_RECOMMENDATION_TYPE
    potential_savings: float = 0.0
    potential_carbon_savings: float = 0.0
    upgrade_cost: float = 0.0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Recommendation':
        rec_type = _to_text(raw.get("type")).strip() or UNKNOWN_RECOMMENDATION_TYPE
        return cls(
            type=rec_type,
            potential_savings=_to_float(
                _first_present(raw, "potential_savings", "potentialSavings")
            ),
            potential_carbon_savings=_to_float(
                _first_present(raw, "potential_carbon_savings", "potentialCarbonSavings")
            ),
            upgrade_cost=_to_float(
                _first_present(raw, "upgrade_cost", "upgradeCost", "potential_cost", "potentialCost")
            ),
        )


@dataclass(frozen=True)
class SiteRecord:
    """A single site (customer account) as reported by the site API.

    Attributes:
        agent_identifier: E-mail of the agent who onboarded the site
        status: Site status, e.g. "ACTIVE"
        onboard_date: When the site was added (naive local time), None if unknown
        contact_identifier: E-mail of the customer contact, if any
        login_count: Number of contacts that have logged in
        recommendations: Recommendations produced for the site
        site_address: Display address for the site listing
        company_name: Customer company name for the site listing
        mpans: Electricity meter numbers
        mprns: Gas meter numbers
    """
    agent_identifier: str = ""
    status: str = ""
    onboard_date: Optional[datetime] = None
    contact_identifier: Optional[str] = None
    login_count: int = 0
    recommendations: Tuple[Recommendation, ...] = ()
    site_address: str = ""
    company_name: str = ""
    mpans: Tuple[str, ...] = ()
    mprns: Tuple[str, ...] = ()

    @property
    def contact_key(self) -> Optional[str]:
        """Lower-cased contact identifier used for distinct-customer counting."""
        if not self.contact_identifier:
            return None
        key = self.contact_identifier.strip().lower()
        return key or None

    @property
    def has_interaction(self) -> bool:
        """True when at least one contact of the site has logged in."""
        return self.login_count > 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'SiteRecord':
        """Build a SiteRecord from one raw API site object.

        Never raises for malformed field values; they fall back to defaults.
        """
        raw_recommendations = raw.get("recommendations")
        recommendations: Iterable[Any] = (
            raw_recommendations if isinstance(raw_recommendations, list) else ()
        )
        contact = _first_present(raw, "contact_email", "contactIdentifier", "contact_identifier")

        return cls(
            agent_identifier=_to_text(
                _first_present(raw, "agent_name", "agentIdentifier", "agent_identifier")
            ),
            status=_to_text(_first_present(raw, "site_status", "status")),
            onboard_date=parse_datetime(_first_present(raw, "onboard_date", "onboardDate")),
            contact_identifier=_to_text(contact) if contact is not None else None,
            login_count=_to_int(
                _first_present(raw, "logged_in_contacts", "loginCount", "login_count")
            ),
            recommendations=tuple(
                Recommendation.from_dict(rec) for rec in recommendations if isinstance(rec, dict)
            ),
            site_address=_to_text(_first_present(raw, "siteAddress", "site_address", "display_name")),
            company_name=_to_text(raw.get("company_name")),
            mpans=_meter_ids(raw.get("elecMeter")),
            mprns=_meter_ids(raw.get("gasMeter")),
        )
