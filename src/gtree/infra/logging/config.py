from __future__ import annotations

"""
Settings for the diagnostic stream.

The tree itself goes to stdout; everything described here goes to stderr
and, when requested, to a size-capped log file.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Options consumed by configure_logging.

    Attributes:
        level: Level name; unknown names fall back to WARNING.
        console: Write diagnostics to stderr.
        log_file: Also append diagnostics to this file when set.
        max_bytes: Log file size that triggers a rollover.
        backup_count: Rolled-over files kept next to the active one.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
