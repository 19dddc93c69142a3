"""
Summary Assembler Module

Builds the rows the dashboard and the report generator display, by composing
the calendar utilities, the record filter, the grouping engine, the savings
extractor and the team resolver. It adds windowing and zero-filling and
nothing else: every number comes from the lower modules.

Organisation view, per window (last 7 days, current month, previous month,
all time, plus an optional focus month or custom range):
    daily_stats             one row per day, days without sites included as zeros
    weekly_stats            one row per calendar week overlapping the window
    monthly_stats           all-time window only, one row per calendar month
    totals                  a single row for the whole window
    by_recommendation_type  one row per recommendation type

Agent view:
    site activity charts    sites per agent/team for today, yesterday, this
                            week and all time (the custom range applies to
                            the all-time chart only)
    daily breakdown         sites per day and agent/team with interaction %
    weekly trend            sites per week and agent/team
    site listing            every site, newest first

Usage:
    from summary_assembler import (
        ViewType,
        DashboardWindow,
        get_daily_stats,
        get_weekly_stats,
        get_monthly_stats,
        get_totals,
        get_recommendation_type_stats,
        get_window_summary,
        get_organisation_summary,
        get_agent_site_counts,
        get_site_activity_charts,
        get_daily_breakdown,
        get_weekly_agent_trend,
        get_site_listing,
        get_dashboard_summary,
    )
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from constants import NOT_AVAILABLE
from dashboard_config import DashboardConfig
from date_range_filter import (
    DateRange,
    DateRangePreset,
    create_date_range,
    day_label,
    get_date_ranges,
    get_month_range,
    get_preset_range,
    iter_days,
    iter_months,
    iter_week_starts,
    month_label,
    week_label,
)
from date_utilities import format_date_ddmmyyyy
from grouping_engine import (
    AggregationBucket,
    KeyFunction,
    agent_key,
    composite_key,
    day_key,
    format_agent_name,
    group_by,
    group_by_week_and_key,
    make_team_key,
    make_week_key,
    month_key,
    project_buckets,
)
from record_filter import filter_eligible
from savings_extractor import accumulate_by_type, sort_type_stats
from site_record import SiteRecord

logger = logging.getLogger(__name__)


class ViewType(Enum):
    """Grouping dimension of the agent views."""
    INDIVIDUAL = "individual"
    TEAM = "team"


class DashboardWindow(Enum):
    """Named windows of the organisation view."""
    LAST_7_DAYS = "last_7_days"
    CURRENT_MONTH = "current_month"
    PREVIOUS_MONTH = "previous_month"
    TOTAL = "total"


_WINDOW_PRESETS = {
    DashboardWindow.LAST_7_DAYS: DateRangePreset.LAST_7_DAYS,
    DashboardWindow.CURRENT_MONTH: DateRangePreset.THIS_MONTH,
    DashboardWindow.PREVIOUS_MONTH: DateRangePreset.PREVIOUS_MONTH,
}

_WINDOW_LABELS = {
    DashboardWindow.LAST_7_DAYS: "Last 7 Days",
    DashboardWindow.CURRENT_MONTH: "Current Month",
    DashboardWindow.PREVIOUS_MONTH: "Previous Month",
    DashboardWindow.TOTAL: "Total (All Time)",
}


@dataclass
class WindowSummary:
    """Everything the organisation view shows for one window.

    Attributes:
        name: Window identifier, e.g. "last_7_days"
        label: Human-readable window title
        date_range: The window's range, None for all time
        daily_stats: Zero-filled per-day rows
        weekly_stats: Zero-filled per-week rows
        monthly_stats: Per-month rows (all-time window only)
        totals: Single totals row
        by_recommendation_type: Per-type rows, highest savings first
    """
    name: str
    label: str
    date_range: Optional[DateRange] = None
    daily_stats: List[Dict[str, Any]] = field(default_factory=list)
    weekly_stats: List[Dict[str, Any]] = field(default_factory=list)
    monthly_stats: List[Dict[str, Any]] = field(default_factory=list)
    totals: Dict[str, Any] = field(default_factory=dict)
    by_recommendation_type: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "label": self.label,
            "date_range": self.date_range.to_dict() if self.date_range else None,
            "daily_stats": self.daily_stats,
            "weekly_stats": self.weekly_stats,
            "monthly_stats": self.monthly_stats,
            "totals": self.totals,
            "by_recommendation_type": self.by_recommendation_type,
        }


@dataclass
class OrganisationSummary:
    """Window summaries of the organisation view, in display order."""
    generated_at: datetime
    windows: Dict[str, WindowSummary] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "generated_at": self.generated_at.isoformat(),
            "windows": {name: summary.to_dict() for name, summary in self.windows.items()},
        }


def _total_key(record: SiteRecord) -> Optional[str]:
    return "total"


def get_key_function(view: ViewType, config: DashboardConfig) -> KeyFunction:
    """Key function for an agent view."""
    if view == ViewType.TEAM:
        return make_team_key(config.team_resolver)
    return agent_key


def _time_row(label: str, bucket: Optional[AggregationBucket]) -> Dict[str, Any]:
    row: Dict[str, Any] = {"date": label}
    row.update((bucket or AggregationBucket(key=label)).metrics(include_savings=True))
    return row


# ============================================================================
# ORGANISATION VIEW
# ============================================================================

def get_daily_stats(
    records: Sequence[SiteRecord],
    date_range: DateRange,
    config: DashboardConfig
) -> List[Dict[str, Any]]:
    """One row per calendar day of the range, zero-filled.

    Returns:
        Rows with date ("Mar 1"), sites, unique_contacts, customer_interaction,
        total_savings, total_carbon_savings and total_cost.
    """
    eligible = filter_eligible(records, config.org_domain)
    buckets = group_by(eligible, day_key, date_range)

    return [
        _time_row(day_label(day), buckets.get(day.isoformat()))
        for day in iter_days(date_range.start_date, date_range.end_date)
    ]


def get_weekly_stats(
    records: Sequence[SiteRecord],
    date_range: DateRange,
    config: DashboardConfig
) -> List[Dict[str, Any]]:
    """One row per calendar week overlapping the range, zero-filled.

    Weeks at the edges may stick out of the range; only sites inside the
    range are counted in them.
    """
    eligible = filter_eligible(records, config.org_domain)
    buckets = group_by(eligible, make_week_key(config.week_start), date_range)

    return [
        _time_row(week_label(first_day, config.week_start), buckets.get(first_day))
        for first_day in iter_week_starts(date_range.start_date, date_range.end_date, config.week_start)
    ]


def get_monthly_stats(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    now: Optional[datetime] = None
) -> List[Dict[str, Any]]:
    """One row per calendar month from the first dated site to now.

    Months in ``config.excluded_months`` are left out. Empty months in
    between are zero-filled.

    Returns:
        Rows labelled "Mar 2025", or [] when no eligible site has a date.
    """
    if now is None:
        now = datetime.now()

    dated = [r for r in filter_eligible(records, config.org_domain) if r.onboard_date is not None]
    if not dated:
        return []

    buckets = group_by(dated, month_key)
    first_day = min(r.onboard_date for r in dated).date()
    last_day = max(max(r.onboard_date for r in dated).date(), now.date())

    return [
        _time_row(month_label(year, month), buckets.get(f"{year:04d}-{month:02d}"))
        for year, month in iter_months(first_day, last_day, config.excluded_months)
    ]


def get_totals(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    date_range: Optional[DateRange] = None
) -> Dict[str, Any]:
    """A single totals row; all zeros when nothing matches.

    Without a range, sites lacking an onboard date are still counted.
    """
    eligible = filter_eligible(records, config.org_domain)
    buckets = group_by(eligible, _total_key, date_range)
    bucket = buckets.get("total") or AggregationBucket(key="total")
    return bucket.metrics(include_savings=True)


def get_recommendation_type_stats(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    date_range: Optional[DateRange] = None
) -> List[Dict[str, Any]]:
    """Per-type recommendation totals, highest savings first."""
    eligible = filter_eligible(records, config.org_domain, date_range=date_range)
    return [stats.to_dict() for stats in sort_type_stats(accumulate_by_type(eligible))]


def summarise_range(
    records: Sequence[SiteRecord],
    date_range: DateRange,
    config: DashboardConfig,
    name: str,
    label: str
) -> WindowSummary:
    """Daily, weekly, totals and per-type rows for one dated window."""
    return WindowSummary(
        name=name,
        label=label,
        date_range=date_range,
        daily_stats=get_daily_stats(records, date_range, config),
        weekly_stats=get_weekly_stats(records, date_range, config),
        totals=get_totals(records, config, date_range),
        by_recommendation_type=get_recommendation_type_stats(records, config, date_range),
    )


def get_window_summary(
    records: Sequence[SiteRecord],
    window: DashboardWindow,
    config: DashboardConfig,
    now: Optional[datetime] = None,
) -> WindowSummary:
    """Summary of one named window of the organisation view."""
    if now is None:
        now = datetime.now()

    if window == DashboardWindow.TOTAL:
        return WindowSummary(
            name=window.value,
            label=_WINDOW_LABELS[window],
            monthly_stats=get_monthly_stats(records, config, now),
            totals=get_totals(records, config),
            by_recommendation_type=get_recommendation_type_stats(records, config),
        )

    date_range = get_preset_range(
        _WINDOW_PRESETS[window], now=now, week_start=config.week_start, live=False
    )
    return summarise_range(records, date_range, config, window.value, _WINDOW_LABELS[window])


def get_organisation_summary(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    now: Optional[datetime] = None,
    focus_month: Optional[Tuple[int, int]] = None
) -> OrganisationSummary:
    """All organisation windows, plus the focus month when one is given.

    Args:
        records: Every loaded site record
        config: Dashboard configuration
        now: Reference moment (defaults to datetime.now())
        focus_month: Optional (year, month) shown as an extra window
    """
    if now is None:
        now = datetime.now()

    summary = OrganisationSummary(generated_at=now)
    for window in DashboardWindow:
        summary.windows[window.value] = get_window_summary(records, window, config, now)

    if focus_month is not None:
        year, month = focus_month
        summary.windows["focus_month"] = summarise_range(
            records, get_month_range(year, month), config, "focus_month", month_label(year, month)
        )

    logger.debug(f"Organisation summary built with {len(summary.windows)} windows")
    return summary


# ============================================================================
# AGENT VIEW
# ============================================================================

def get_agent_site_counts(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    view: ViewType = ViewType.INDIVIDUAL,
    date_range: Optional[DateRange] = None,
    include_savings: bool = False
) -> List[Dict[str, Any]]:
    """Sites per agent (or team), most sites first."""
    eligible = filter_eligible(records, config.org_domain)
    buckets = group_by(eligible, get_key_function(view, config), date_range)
    return project_buckets(buckets, include_savings=include_savings)


def get_site_activity_charts(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    view: ViewType = ViewType.INDIVIDUAL,
    now: Optional[datetime] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    live: bool = True
) -> Dict[str, Dict[str, Any]]:
    """Per-agent site counts for today, yesterday, this week and all time.

    The optional ``date_from``/``date_to`` range narrows the all-time chart
    only, and only when both ends are given.

    Returns:
        Dictionary keyed by chart name, each with "rows" and "total_sites".
    """
    ranges = get_date_ranges(now=now, week_start=config.week_start, live=live)

    all_time_range = None
    if date_from is not None and date_to is not None:
        all_time_range = create_date_range(date_from, date_to)

    chart_ranges = {
        "today": ranges[DateRangePreset.TODAY.value],
        "yesterday": ranges[DateRangePreset.YESTERDAY.value],
        "this_week": ranges[DateRangePreset.THIS_WEEK.value],
        "all_time": all_time_range,
    }

    charts: Dict[str, Dict[str, Any]] = {}
    for name, chart_range in chart_ranges.items():
        rows = get_agent_site_counts(records, config, view, chart_range)
        charts[name] = {
            "date_range": chart_range.to_dict() if chart_range else None,
            "rows": rows,
            "total_sites": sum(row["sites"] for row in rows),
        }
    return charts


def _interaction_percentage(interactions: int, unique_contacts: int) -> int:
    """Interactions as a whole percentage of unique contacts (halves round up)."""
    if unique_contacts <= 0:
        return 0
    return int(math.floor(interactions / unique_contacts * 100 + 0.5))


def get_daily_breakdown(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    view: ViewType = ViewType.INDIVIDUAL
) -> List[Dict[str, Any]]:
    """Sites per day and agent (or team), newest day first.

    This is the one aggregation that honours the status-filter exemptions:
    inactive sites of exempt agents are included.

    Returns:
        Rows with date (ISO), name, team_lead (individual view only),
        sites, unique_contacts, customer_interaction and
        interaction_percentage.
    """
    eligible = filter_eligible(records, config.org_domain, config.status_filter_exemptions)
    key_fn = get_key_function(view, config)

    buckets = group_by(eligible, composite_key(day_key, key_fn))

    identifiers: Dict[str, str] = {}
    if view == ViewType.INDIVIDUAL:
        for record in eligible:
            if record.onboard_date is None:
                continue
            name = key_fn(record)
            if name is not None:
                identifiers.setdefault(name, record.agent_identifier)

    ordered = sorted(buckets.items(), key=lambda item: item[0][1])
    ordered.sort(key=lambda item: item[0][0], reverse=True)

    rows = []
    for (day, name), bucket in ordered:
        team_lead = ""
        if view == ViewType.INDIVIDUAL:
            team_lead = config.team_resolver.resolve_team_lead(identifiers.get(name))
        row: Dict[str, Any] = {"date": day, "name": name, "team_lead": team_lead}
        row.update(bucket.metrics(include_savings=False))
        row["interaction_percentage"] = _interaction_percentage(
            bucket.interaction_count, bucket.unique_contacts
        )
        rows.append(row)
    return rows


def get_weekly_agent_trend(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    view: ViewType = ViewType.INDIVIDUAL,
    date_range: Optional[DateRange] = None
) -> List[Dict[str, Any]]:
    """Sites per week and agent (or team), in week order."""
    eligible = filter_eligible(records, config.org_domain)
    return group_by_week_and_key(eligible, get_key_function(view, config), config.week_start, date_range)


def get_site_listing(records: Sequence[SiteRecord]) -> List[Dict[str, Any]]:
    """Every site (no eligibility filter), newest first, undated sites last."""
    dated = sorted(
        (r for r in records if r.onboard_date is not None),
        key=lambda r: r.onboard_date,
        reverse=True,
    )
    undated = [r for r in records if r.onboard_date is None]

    return [
        {
            "address": record.site_address or NOT_AVAILABLE,
            "agent_name": format_agent_name(record.agent_identifier or "Unknown"),
            "site_added_date": format_date_ddmmyyyy(record.onboard_date) or NOT_AVAILABLE,
            "site_status": record.status or NOT_AVAILABLE,
            "mpan": ", ".join(record.mpans) or NOT_AVAILABLE,
            "mprn": ", ".join(record.mprns) or NOT_AVAILABLE,
            "company_name": record.company_name or NOT_AVAILABLE,
        }
        for record in dated + undated
    ]


def get_dashboard_summary(
    records: Sequence[SiteRecord],
    config: DashboardConfig,
    view: ViewType = ViewType.INDIVIDUAL,
    now: Optional[datetime] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    focus_month: Optional[Tuple[int, int]] = None,
    live: bool = True,
    include_site_listing: bool = False
) -> Dict[str, Any]:
    """Everything the dashboard shows, as one JSON-serialisable dictionary."""
    if now is None:
        now = datetime.now()

    summary: Dict[str, Any] = {
        "generated_at": now.isoformat(),
        "view": view.value,
        "site_activity": get_site_activity_charts(
            records, config, view, now=now, date_from=date_from, date_to=date_to, live=live
        ),
        "daily_breakdown": get_daily_breakdown(records, config, view),
        "weekly_trend": get_weekly_agent_trend(records, config, view),
        "organisation": get_organisation_summary(records, config, now, focus_month).to_dict(),
    }
    if include_site_listing:
        summary["site_listing"] = get_site_listing(records)
    return summary
