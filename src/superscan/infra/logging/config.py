from __future__ import annotations

"""
Logging Settings.

A frozen description of how SuperScan should log: severity, the stderr
stream used for progress output, an optional rotating log file and the
third-party SDK loggers to keep quiet during traversals.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# boto3/botocore and urllib3 log every request at INFO/DEBUG
DEFAULT_QUIET_LOGGERS: Tuple[str, ...] = ("boto3", "botocore", "urllib3")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Attributes:
        level: Severity name ('DEBUG', 'INFO', ...); unknown names mean INFO.
        console: Emit progress lines on stderr, keeping stdout for the tree.
        log_file: Rotating log file, or None for console only.
        max_bytes: Size at which the log file rolls over.
        backup_count: Rolled-over files kept next to the active one.
        quiet_loggers: Loggers never allowed below WARNING.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 3

    quiet_loggers: Tuple[str, ...] = DEFAULT_QUIET_LOGGERS

    console_fmt: str = "%(asctime)s [%(levelname)s] %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s:%(lineno)d | %(message)s"
    datefmt: str = "%Y/%m/%d %H:%M:%S"

    @classmethod
    def for_cli(cls, debug: bool, log_file: Optional[str] = None) -> "LoggingConfig":
        """Settings used by the command line: INFO, or DEBUG with --debug."""
        return cls(level="DEBUG" if debug else "INFO", log_file=log_file)
