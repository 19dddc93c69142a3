"""
Grouping Engine Module

Folds site records into per-key accumulators. The engine does not know what
it is grouping by: callers pass a key function (formatted agent name, team,
day, week or month) and every record whose key resolves to None is left out
of that aggregation without complaint.

Each bucket tracks the number of sites, the set of distinct contacts
(lower-cased), the number of sites with a customer interaction and the
recommendation amounts from the savings extractor. Buckets from separate
shards of the input can be merged with merge_bucket_maps; sorting only
happens when buckets are projected to output rows.

Interaction rule: a site counts as one interaction when at least one of its
contacts has logged in (login_count > 0). The number of logins is not summed.

Usage:
    from grouping_engine import (
        AggregationBucket,
        group_by,
        project_buckets,
        merge_bucket_maps,
        group_by_week_and_key,
        agent_key,
        make_team_key,
        day_key,
        make_week_key,
        month_key,
        composite_key,
        format_agent_name,
    )

    buckets = group_by(eligible_records, make_team_key(resolver), date_range)
    rows = project_buckets(buckets, include_savings=True)
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Set

from constants import AMOUNT_DECIMAL_PLACES, DEFAULT_WEEK_START
from date_range_filter import DateRange, start_of_week, week_label
from record_filter import has_date_in
from savings_extractor import extract_savings
from site_record import SiteRecord
from team_mapping import TeamResolver

logger = logging.getLogger(__name__)

KeyFunction = Callable[[SiteRecord], Optional[Hashable]]


@dataclass
class AggregationBucket:
    """Accumulator for one grouping key.

    Attributes:
        key: The grouping key (agent name, team, day, or a tuple of those)
        site_count: Number of sites folded into the bucket
        distinct_contacts: Lower-cased contact identifiers seen
        interaction_count: Number of sites with at least one contact login
        total_savings: Sum of positive potential savings
        total_carbon_savings: Sum of positive potential carbon savings
        total_cost: Sum of all upgrade costs
    """
    key: Hashable
    site_count: int = 0
    distinct_contacts: Set[str] = field(default_factory=set)
    interaction_count: int = 0
    total_savings: float = 0.0
    total_carbon_savings: float = 0.0
    total_cost: float = 0.0

    @property
    def unique_contacts(self) -> int:
        return len(self.distinct_contacts)

    def add(self, record: SiteRecord) -> None:
        """Fold one record into the bucket."""
        self.site_count += 1

        contact = record.contact_key
        if contact:
            self.distinct_contacts.add(contact)

        if record.has_interaction:
            self.interaction_count += 1

        savings = extract_savings(record.recommendations)
        self.total_savings += savings.savings
        self.total_carbon_savings += savings.carbon_savings
        self.total_cost += savings.cost

    def merge(self, other: 'AggregationBucket') -> None:
        """Fold another bucket for the same key into this one."""
        self.site_count += other.site_count
        self.distinct_contacts |= other.distinct_contacts
        self.interaction_count += other.interaction_count
        self.total_savings += other.total_savings
        self.total_carbon_savings += other.total_carbon_savings
        self.total_cost += other.total_cost

    def metrics(self, include_savings: bool = True) -> Dict[str, Any]:
        """The bucket's metrics without its key."""
        row: Dict[str, Any] = {
            "sites": self.site_count,
            "unique_contacts": self.unique_contacts,
            "customer_interaction": self.interaction_count,
        }
        if include_savings:
            row["total_savings"] = round(self.total_savings, AMOUNT_DECIMAL_PLACES)
            row["total_carbon_savings"] = round(self.total_carbon_savings, AMOUNT_DECIMAL_PLACES)
            row["total_cost"] = round(self.total_cost, AMOUNT_DECIMAL_PLACES)
        return row

    def to_dict(self, name_field: str = "name", include_savings: bool = False) -> Dict[str, Any]:
        """Convert to an output row keyed by ``name_field``."""
        row: Dict[str, Any] = {name_field: self.key}
        row.update(self.metrics(include_savings=include_savings))
        return row


# ============================================================================
# KEY FUNCTIONS
# ============================================================================

def format_agent_name(identifier: str) -> str:
    """Turn an agent e-mail into a display name.

    Example:
        >>> format_agent_name("jane.doe@edfenergy.com")
        'Jane Doe'
        >>> format_agent_name("not-an-email")
        'not-an-email'
    """
    if not identifier or '@' not in identifier:
        return identifier
    local_part = identifier.strip().split('@')[0]
    return ' '.join(word[:1].upper() + word[1:].lower() for word in local_part.split('.'))


def agent_key(record: SiteRecord) -> Optional[str]:
    """Group by the formatted name of the onboarding agent."""
    if not record.agent_identifier:
        return None
    return format_agent_name(record.agent_identifier)


def make_team_key(resolver: TeamResolver) -> KeyFunction:
    """Group by team; agents without a team drop out."""
    def team_key(record: SiteRecord) -> Optional[str]:
        return resolver.resolve_team(record.agent_identifier)
    return team_key


def day_key(record: SiteRecord) -> Optional[str]:
    """Group by onboard day (ISO date)."""
    if record.onboard_date is None:
        return None
    return record.onboard_date.date().isoformat()


def make_week_key(week_start: int = DEFAULT_WEEK_START) -> KeyFunction:
    """Group by the first day of the onboard week.

    The date rather than the "d/m - d/m" label: labels repeat across years.
    """
    def week_key(record: SiteRecord) -> Optional[date]:
        if record.onboard_date is None:
            return None
        return start_of_week(record.onboard_date.date(), week_start)
    return week_key


def month_key(record: SiteRecord) -> Optional[str]:
    """Group by onboard month ("YYYY-MM")."""
    if record.onboard_date is None:
        return None
    return record.onboard_date.strftime('%Y-%m')


def composite_key(*key_fns: KeyFunction) -> KeyFunction:
    """Group by a tuple of keys, e.g. (day, agent).

    A record drops out when any part of its key is None.
    """
    def key(record: SiteRecord) -> Optional[tuple]:
        parts = tuple(key_fn(record) for key_fn in key_fns)
        if any(part is None for part in parts):
            return None
        return parts
    return key


# ============================================================================
# GROUPING
# ============================================================================

def group_by(
    records: Iterable[SiteRecord],
    key_fn: KeyFunction,
    date_range: Optional[DateRange] = None
) -> Dict[Hashable, AggregationBucket]:
    """Fold records into buckets keyed by ``key_fn``.

    Args:
        records: Records that already passed the record filter
        key_fn: Maps a record to its grouping key, or None to leave it out
        date_range: Optional range the onboard date must fall in; undated
            records are left out whenever a range is given

    Returns:
        Dictionary mapping keys to their buckets. Empty input gives {}.
    """
    buckets: Dict[Hashable, AggregationBucket] = {}
    unkeyed = 0

    for record in records:
        if date_range is not None and not has_date_in(record, date_range):
            continue

        key = key_fn(record)
        if key is None:
            unkeyed += 1
            continue

        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = AggregationBucket(key=key)
        bucket.add(record)

    if unkeyed:
        logger.debug(f"{unkeyed} records had no grouping key and were left out")

    return buckets


def merge_bucket_maps(*bucket_maps: Dict[Hashable, AggregationBucket]) -> Dict[Hashable, AggregationBucket]:
    """Merge bucket maps computed over disjoint shards of the input.

    The inputs are not modified. Distinct contacts are combined by set union,
    counts and amounts by addition.
    """
    merged: Dict[Hashable, AggregationBucket] = {}
    for bucket_map in bucket_maps:
        for key, bucket in bucket_map.items():
            target = merged.get(key)
            if target is None:
                target = merged[key] = AggregationBucket(key=key)
            target.merge(bucket)
    return merged


def sort_buckets(buckets: Iterable[AggregationBucket]) -> List[AggregationBucket]:
    """Most sites first; ties broken by key so output is deterministic."""
    return sorted(buckets, key=lambda b: (-b.site_count, b.key))


def project_buckets(
    buckets: Dict[Hashable, AggregationBucket],
    include_savings: bool = False,
    name_field: str = "name"
) -> List[Dict[str, Any]]:
    """Project buckets to output rows sorted by sites (desc) then name.

    Returns:
        Rows with name, sites, unique_contacts and customer_interaction, plus
        total_savings, total_carbon_savings and total_cost when requested.
    """
    return [
        bucket.to_dict(name_field=name_field, include_savings=include_savings)
        for bucket in sort_buckets(buckets.values())
    ]


def group_by_week_and_key(
    records: Iterable[SiteRecord],
    key_fn: KeyFunction,
    week_start: int = DEFAULT_WEEK_START,
    date_range: Optional[DateRange] = None
) -> List[Dict[str, Any]]:
    """Group records by (week, key), e.g. the weekly trend per agent.

    Rows come out in chronological week order; within a week they follow the
    usual sites-then-name order. The week start used for ordering is not part
    of the output.

    Returns:
        Rows with week, name, sites, unique_contacts and customer_interaction.
    """
    buckets = group_by(records, composite_key(make_week_key(week_start), key_fn), date_range)

    ordered = sorted(
        buckets.items(),
        key=lambda item: (item[0][0], -item[1].site_count, item[0][1])
    )

    rows = []
    for (first_day, name), bucket in ordered:
        row: Dict[str, Any] = {"week": week_label(first_day, week_start), "name": name}
        row.update(bucket.metrics(include_savings=False))
        rows.append(row)
    return rows

