"""
Carbon Dashboard CLI

Builds the dashboard summary from a site export and writes it as JSON, with
the daily breakdown optionally exported as CSV for spreadsheet users.

Examples:
  Individual view, JSON to stdout:
    python carbon_dashboard.py --input sites.json

  Team view with a roster, written to a file:
    python carbon_dashboard.py --input sites.json --view team \\
        --teams-file teams.json --output dashboard.json

  Restrict the all-time agent chart and add a focus month:
    python carbon_dashboard.py --input sites.json --from 2025-03-01 --to 31.03.2025 \\
        --focus-month 2025-10

  Report mode (today covers the whole day) with the breakdown as CSV:
    python carbon_dashboard.py --input sites.json --report --breakdown-csv breakdown.csv
"""

import csv
import sys
import json
import logging
import argparse
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from dashboard_config import ConfigurationError, load_config, parse_month_key
from date_utilities import parse_date_argument
from logging_config import add_log_level_argument, configure_logging
from performance_timing import timed_operation
from site_data_loader import load_site_records
from summary_assembler import ViewType, get_dashboard_summary

logger = logging.getLogger(__name__)

LOG_FILE = "carbon_dashboard.log"

BREAKDOWN_CSV_FIELDS = [
    "date",
    "name",
    "team_lead",
    "sites",
    "unique_contacts",
    "customer_interaction",
    "interaction_percentage",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build the carbon savings dashboard from a site export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Date formats supported for --from and --to:
  - YYYY-MM-DD (ISO format, preferred): 2025-03-01
  - DD.MM.YYYY (European format): 01.03.2025
  - DD/MM/YYYY (European format with slashes): 01/03/2025
        """
    )
    parser.add_argument("--input", required=True, help="Site export JSON file")
    parser.add_argument("--output", help="Write the summary JSON here instead of stdout")
    parser.add_argument(
        "--view",
        choices=[view.value for view in ViewType],
        default=ViewType.INDIVIDUAL.value,
        help="Group agent charts by agent or by team (default: individual)",
    )
    parser.add_argument("--from", type=parse_date_argument, dest="date_from",
                        help="Start of the custom range for the all-time agent chart")
    parser.add_argument("--to", type=parse_date_argument, dest="date_to",
                        help="End of the custom range for the all-time agent chart")
    parser.add_argument("--focus-month", dest="focus_month",
                        help="Extra organisation window for one month (YYYY-MM)")
    parser.add_argument("--teams-file", dest="teams_file",
                        help="Team roster JSON (overrides DASHBOARD_TEAMS_FILE)")
    parser.add_argument("--env-file", dest="env_file", help="Load settings from this .env file")
    parser.add_argument("--breakdown-csv", dest="breakdown_csv",
                        help="Also write the daily breakdown to this CSV file")
    parser.add_argument("--report", action="store_true",
                        help="Use whole-day bounds for today instead of the current time")
    parser.add_argument("--site-listing", action="store_true", dest="site_listing",
                        help="Include the full site listing in the output")
    add_log_level_argument(parser)
    return parser


def write_breakdown_csv(rows: List[Dict[str, Any]], file_path: str) -> None:
    with open(file_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=BREAKDOWN_CSV_FIELDS)
        writer.writeheader()
        writer.writerows(rows)
    logger.info(f"Daily breakdown written to {file_path} ({len(rows)} rows)")


def write_summary(summary: Dict[str, Any], file_path: Optional[str]) -> None:
    if file_path is None:
        json.dump(summary, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(summary, f, indent=2)
    logger.info(f"Dashboard summary written to {file_path}")


def main(argv: Optional[Sequence[str]] = None, now: Optional[datetime] = None) -> int:
    """Run the CLI and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(log_file=LOG_FILE, log_level=args.log_level)
    except ValueError as e:
        # No handlers exist yet, so report on stderr directly
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if (args.date_from is None) != (args.date_to is None):
        logger.error("--from and --to must be given together")
        return 1
    if args.date_from is not None and args.date_from > args.date_to:
        logger.error(f"--from ({args.date_from}) is after --to ({args.date_to})")
        return 1

    try:
        config = load_config(env_file=args.env_file, teams_file=args.teams_file)
        focus_month = None
        if args.focus_month:
            focus_month = parse_month_key(args.focus_month, setting="--focus-month")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        with timed_operation("load_sites", path=args.input):
            records = load_site_records(args.input)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load site export: {e}")
        return 1

    view = ViewType(args.view)
    with timed_operation("aggregate", view=view.value, records=len(records)):
        summary = get_dashboard_summary(
            records,
            config,
            view=view,
            now=now,
            date_from=args.date_from,
            date_to=args.date_to,
            focus_month=focus_month,
            live=not args.report,
            include_site_listing=args.site_listing,
        )

    with timed_operation("write_output"):
        write_summary(summary, args.output)
        if args.breakdown_csv:
            write_breakdown_csv(summary["daily_breakdown"], args.breakdown_csv)

    return 0


if __name__ == "__main__":
    sys.exit(main())
