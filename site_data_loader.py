"""
Site Data Loader Module

Loads site records exported from the upstream site-activity API and turns
them into SiteRecord objects. The fetch itself (paging, retries, credentials)
happens upstream; this module receives the fully materialised JSON document.

The API and its proxies have wrapped the site list in several envelopes over
time, all of which are accepted:

    [...]                            bare list
    {"data": {"sites": [...]}}       site-activity API response
    {"sites": [...]}
    {"records": [...]}
    {"data": [...]}

Usage:
    from site_data_loader import (
        load_site_records,
        parse_site_records,
        extract_site_payloads,
        LoadStats,
    )
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from site_record import SiteRecord

logger = logging.getLogger(__name__)


@dataclass
class LoadStats:
    """Statistics for one load of site records."""
    total_rows: int = 0
    loaded_rows: int = 0
    skipped_rows: int = 0
    undated_rows: int = 0
    skipped_by_reason: Dict[str, int] = field(default_factory=dict)

    def record_skip(self, reason: str) -> None:
        """Count a skipped row under ``reason``."""
        self.skipped_rows += 1
        self.skipped_by_reason[reason] = self.skipped_by_reason.get(reason, 0) + 1

    def get_summary(self) -> str:
        """Get a summary of the load."""
        lines = [
            "Site Load Summary:",
            f"  Total rows: {self.total_rows}",
            f"  Loaded rows: {self.loaded_rows}",
            f"  Rows without onboard date: {self.undated_rows}",
            f"  Skipped rows: {self.skipped_rows}",
        ]
        if self.skipped_by_reason:
            lines.append("  Skip reasons:")
            for reason, count in sorted(self.skipped_by_reason.items(), key=lambda x: -x[1]):
                lines.append(f"    - {reason}: {count}")
        return "\n".join(lines)

    def log_summary(self, log_level: int = logging.INFO) -> None:
        logger.log(log_level, self.get_summary())


def extract_site_payloads(payload: Any) -> List[Any]:
    """Unwrap the site list from any of the known response envelopes.

    Returns:
        The list of raw site entries, or an empty list when the document holds
        no recognisable site list.
    """
    if isinstance(payload, list):
        return payload

    if not isinstance(payload, dict):
        logger.warning(f"Unexpected site payload type: {type(payload).__name__}")
        return []

    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("sites"), list):
        return data["sites"]

    for key in ("sites", "records"):
        if isinstance(payload.get(key), list):
            return payload[key]

    if isinstance(data, list):
        return data

    logger.warning(
        f"No site list found in payload (keys: {', '.join(sorted(payload.keys()))})"
    )
    return []


def parse_site_records(payloads: List[Any]) -> Tuple[List[SiteRecord], LoadStats]:
    """Convert raw site entries into SiteRecord objects.

    Entries that are not JSON objects are skipped and counted; everything else
    is loaded, since field-level problems already degrade to defaults inside
    SiteRecord.from_dict.

    Returns:
        Tuple of (records, stats)
    """
    stats = LoadStats()
    records: List[SiteRecord] = []

    for index, raw in enumerate(payloads):
        stats.total_rows += 1
        if not isinstance(raw, dict):
            logger.debug(f"Skipping site entry {index}: expected object, got {type(raw).__name__}")
            stats.record_skip("not_an_object")
            continue

        record = SiteRecord.from_dict(raw)
        if record.onboard_date is None:
            stats.undated_rows += 1
        records.append(record)
        stats.loaded_rows += 1

    return records, stats


def load_site_records(
    file_path: str,
    log_stats: bool = True,
    encoding: Optional[str] = 'utf-8'
) -> List[SiteRecord]:
    """Load site records from a JSON export.

    Args:
        file_path: Path to the JSON document (a list or an API envelope)
        log_stats: Whether to log the load summary
        encoding: File encoding

    Returns:
        List of SiteRecord objects in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON.
    """
    with open(file_path, 'r', encoding=encoding) as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Site export {file_path} is not valid JSON: {e}") from e

    records, stats = parse_site_records(extract_site_payloads(payload))

    if log_stats:
        stats.log_summary()

    return records
