"""
Performance timing for the dashboard builder.

Measures how long the load, aggregation and output phases take and logs one
line per phase, so slow exports can be traced to the phase responsible.

Usage:
    from performance_timing import timed_operation

    with timed_operation("load_sites", path=args.input):
        records = load_site_records(args.input)

Log Output Format:
    PERF: [load_sites] completed in 1.23s {path=sites.json}
"""

import time
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimingResult:
    """Outcome of one timed phase."""
    operation: str
    duration_seconds: float
    start_time: datetime
    end_time: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000

    def format_duration(self) -> str:
        return _format_duration(self.duration_seconds)


class PerformanceTimer:
    """Timer for one phase."""

    def __init__(self, operation: str, log_level: int = logging.INFO, **metadata: Any):
        self.operation = operation
        self.log_level = log_level
        self.metadata = metadata
        self._start_time: Optional[float] = None
        self._start_datetime: Optional[datetime] = None
        self.result: Optional[TimingResult] = None

    def start(self) -> 'PerformanceTimer':
        self._start_time = time.perf_counter()
        self._start_datetime = datetime.now()
        logger.debug(f"PERF: [{self.operation}] started")
        return self

    def stop(self) -> TimingResult:
        """Log the total duration and return it.

        Raises:
            RuntimeError: If the timer was never started.
        """
        if self._start_time is None:
            raise RuntimeError(f"Timer '{self.operation}' not started")

        duration = time.perf_counter() - self._start_time
        logger.log(
            self.log_level,
            f"PERF: [{self.operation}] completed in "
            f"{_format_duration(duration)}{_format_metadata(self.metadata)}"
        )

        self.result = TimingResult(
            operation=self.operation,
            duration_seconds=duration,
            start_time=self._start_datetime,
            end_time=datetime.now(),
            metadata=dict(self.metadata),
        )
        return self.result


@contextmanager
def timed_operation(
    operation: str,
    log_level: int = logging.INFO,
    **metadata: Any
) -> Iterator[PerformanceTimer]:
    """Time a block of code; the duration is logged even if the block raises.

    Example:
        with timed_operation("aggregate", view="team"):
            summary = get_dashboard_summary(records, config, ViewType.TEAM)
    """
    timer = PerformanceTimer(operation, log_level=log_level, **metadata)
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()


def _format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds % 60:.1f}s"


def _format_metadata(metadata: Dict[str, Any]) -> str:
    if not metadata:
        return ""
    return " {" + ", ".join(f"{k}={v}" for k, v in metadata.items()) + "}"
