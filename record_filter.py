"""
Record Filter Module

Decides which site records take part in an aggregation. A record is eligible
when its site is ACTIVE and it was onboarded by an agent of the organisation's
e-mail domain. Date-range membership is a separate predicate so callers can
compose "eligible" with "inside this window" as needed.

Status-filter exemptions name agent identifiers (matched as case-insensitive
substrings) whose inactive sites stay visible. Only the daily breakdown passes
exemptions; every other aggregation uses the plain rule.

Usage:
    from record_filter import (
        is_eligible,
        is_status_exempt,
        belongs_to_domain,
        has_date_in,
        filter_eligible,
    )
"""

import logging
from typing import Iterable, List, Optional

from constants import ACTIVE_STATUS
from date_range_filter import DateRange
from site_record import SiteRecord

logger = logging.getLogger(__name__)


def belongs_to_domain(agent_identifier: str, domain: str) -> bool:
    """Check whether an agent identifier carries the organisation's domain."""
    if not agent_identifier or not domain:
        return False
    return f"@{domain.lower()}" in agent_identifier.strip().lower()


def is_status_exempt(agent_identifier: str, status_filter_exemptions: Iterable[str]) -> bool:
    """Check whether an agent is exempt from the active-status rule."""
    if not agent_identifier:
        return False
    lowered = agent_identifier.lower()
    return any(exemption.lower() in lowered for exemption in status_filter_exemptions if exemption)


def is_eligible(
    record: SiteRecord,
    domain: str,
    status_filter_exemptions: Iterable[str] = frozenset()
) -> bool:
    """Check whether a record takes part in aggregation.

    Args:
        record: The site record
        domain: Organisation e-mail domain, e.g. "edfenergy.com"
        status_filter_exemptions: Identifier substrings that bypass the
            ACTIVE status check

    Returns:
        True when the record passes the status and domain checks.
    """
    if not belongs_to_domain(record.agent_identifier, domain):
        return False
    if record.status == ACTIVE_STATUS:
        return True
    return is_status_exempt(record.agent_identifier, status_filter_exemptions)


def has_date_in(record: SiteRecord, date_range: DateRange) -> bool:
    """Check whether a record's onboard date lies in the range (False when undated)."""
    return date_range.contains(record.onboard_date)


def filter_eligible(
    records: Iterable[SiteRecord],
    domain: str,
    status_filter_exemptions: Iterable[str] = frozenset(),
    date_range: Optional[DateRange] = None
) -> List[SiteRecord]:
    """Keep the eligible records, optionally restricted to a date range.

    Returns:
        Eligible records in input order.
    """
    exemptions = frozenset(status_filter_exemptions)
    total = 0
    eligible: List[SiteRecord] = []

    for record in records:
        total += 1
        if not is_eligible(record, domain, exemptions):
            continue
        if date_range is not None and not has_date_in(record, date_range):
            continue
        eligible.append(record)

    logger.debug(f"Record filter kept {len(eligible)} of {total} records")
    return eligible
