"""
Centralized logging configuration for the carbon site dashboard.

Log level resolution, highest priority first:
1. Command-line argument (--log-level)
2. LOG_LEVEL environment variable
3. INFO

ERROR and CRITICAL records are rendered with the function name and line
number appended so failures in the CLI can be traced without a debugger.

Usage:
    from logging_config import add_log_level_argument, configure_logging

    parser = argparse.ArgumentParser(description="Carbon dashboard")
    add_log_level_argument(parser)
    args = parser.parse_args()
    configure_logging(log_file="carbon_dashboard.log", log_level=args.log_level)

    # In library modules, just get a logger:
    logger = logging.getLogger(__name__)
"""

import os
import logging
import argparse
from typing import Optional

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']

DEFAULT_LOG_LEVEL = 'INFO'

LOG_LEVEL_ENV_VAR = 'LOG_LEVEL'

STANDARD_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'

DETAILED_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(funcName)s:%(lineno)d - %(message)s'


def get_log_level(cli_level: Optional[str] = None) -> int:
    """
    Resolve the effective log level.

    Args:
        cli_level: Level given on the command line, if any.

    Returns:
        The logging level as an integer constant (e.g., logging.DEBUG).

    Raises:
        ValueError: If the resolved level name is not one of VALID_LOG_LEVELS.

    Example:
        >>> get_log_level('debug') == logging.DEBUG
        True
    """
    level_str = cli_level or os.getenv(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL
    level_str = level_str.upper()

    if level_str not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {', '.join(VALID_LOG_LEVELS)}"
        )

    return getattr(logging, level_str)


class DetailedErrorFormatter(logging.Formatter):
    """Formatter that adds function and line details to ERROR and above."""

    def __init__(
        self,
        standard_fmt: str = STANDARD_LOG_FORMAT,
        detailed_fmt: str = DETAILED_LOG_FORMAT,
        datefmt: Optional[str] = None
    ):
        super().__init__(fmt=standard_fmt, datefmt=datefmt)
        self.standard_fmt = standard_fmt
        self.detailed_fmt = detailed_fmt

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.ERROR:
            self._style._fmt = self.detailed_fmt
        else:
            self._style._fmt = self.standard_fmt
        return super().format(record)


def configure_logging(
    log_file: Optional[str] = None,
    log_level: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger with a console handler and an optional file handler.

    Existing root handlers are removed first so repeated calls (for example
    from tests invoking ``main()`` several times) do not duplicate output.

    Args:
        log_file: Optional path of a log file to append to.
        log_level: Level name from the command line, if any.

    Returns:
        The configured root logger.
    """
    level = get_log_level(log_level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    formatter = DetailedErrorFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    source = "command-line" if log_level else (
        "environment variable" if os.getenv(LOG_LEVEL_ENV_VAR) else "default"
    )
    logging.debug(f"Logging configured: level={logging.getLevelName(level)} (from {source})")

    return root_logger


def add_log_level_argument(parser: argparse.ArgumentParser) -> None:
    """Add the shared --log-level option to an ArgumentParser."""
    parser.add_argument(
        '--log-level',
        type=str,
        choices=VALID_LOG_LEVELS,
        default=None,
        metavar='LEVEL',
        help=(
            f"Logging verbosity. Choices: {', '.join(VALID_LOG_LEVELS)}. "
            f"Falls back to the {LOG_LEVEL_ENV_VAR} environment variable, "
            f"then {DEFAULT_LOG_LEVEL}."
        )
    )
