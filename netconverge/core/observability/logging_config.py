"""
Logging configuration — one-time setup for the CLI process.

Library code only does ``logger = logging.getLogger(__name__)``; the
CLI calls ``setup_logging`` once.  When netconverge is embedded in an
outer reconcile loop, that loop owns logging and this module is unused.

Level precedence:
    --debug / --verbose / --quiet  >  NETCONVERGE_LOG_LEVEL  >  WARNING

NETCONVERGE_LOG_FILE adds a file handler, at NETCONVERGE_LOG_FILE_LEVEL
if set.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LOG_LEVEL = "NETCONVERGE_LOG_LEVEL"
ENV_LOG_FILE = "NETCONVERGE_LOG_FILE"
ENV_LOG_FILE_LEVEL = "NETCONVERGE_LOG_FILE_LEVEL"

_FMT_CONSOLE = "%(message)s"
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_FMT_DETAIL = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# The AWS SDK logs every request at DEBUG
_SDK_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LOG_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_sdk: bool = True,
) -> None:
    """Configure the root logger.

    Args:
        level: Console level name.
        log_file: Optional log file path.
        log_file_level: File level name; defaults to ``level``.
        quiet_sdk: Hold AWS SDK loggers at WARNING unless at DEBUG.
    """
    console_level = _parse_level(level)

    if console_level <= logging.DEBUG:
        console_fmt = logging.Formatter(_FMT_DETAIL, datefmt="%H:%M:%S")
    elif console_level <= logging.INFO:
        console_fmt = logging.Formatter(_FMT_VERBOSE, datefmt="%H:%M:%S")
    else:
        console_fmt = logging.Formatter(_FMT_CONSOLE)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(console_fmt)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root_level = min(root_level, file_level)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DETAIL, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(fh)

    root.setLevel(root_level)

    if quiet_sdk and console_level > logging.DEBUG:
        for name in _SDK_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def _parse_level(level: str | None) -> int:
    """Level name to numeric constant, WARNING when unknown."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
