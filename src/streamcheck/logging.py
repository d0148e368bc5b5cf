"""Logging setup for streamcheck runs.

Warnings and errors go to stderr so stdout stays free for the run report
(``--json`` output is piped into other tools). A rotating log file is only
written when a log directory is configured, since scheduled runs usually
collect stderr instead.
"""

from __future__ import annotations

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TextIO

LOG_FILE = "streamcheck.log"
MAX_BYTES = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SENSITIVE_PATTERNS = [
    (r"ghp_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),  # GitHub PAT
    (r"gho_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),  # GitHub OAuth
    (r"ghs_[a-zA-Z0-9]{36}", "[GITHUB_TOKEN]"),  # Actions installation token
    (r"github_pat_[a-zA-Z0-9_]{82}", "[GITHUB_TOKEN]"),  # Fine-grained PAT
    (r"Bearer [a-zA-Z0-9._-]+", "Bearer [REDACTED]"),
    (r"token=[a-zA-Z0-9._-]+", "token=[REDACTED]"),
]


class RedactingFilter(logging.Filter):
    """Strips credentials from records before any handler formats them."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        sanitized = sanitize_for_log(message)
        if sanitized != message:
            record.msg = sanitized
            record.args = None
        return True


def setup_logging(
    log_dir: str | Path | None = None,
    level: str | None = None,
    verbose: bool = False,
    stream: TextIO | None = None,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> logging.Logger:
    """Configure the ``streamcheck`` logger for one CLI invocation.

    Args:
        log_dir: Directory for ``streamcheck.log``. No file is written when None.
        level: Level name for the log file (default INFO).
        verbose: Show DEBUG output on stderr. Without it only warnings and
                 errors reach the console.
        stream: Console stream, stderr by default.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.

    Returns:
        The ``streamcheck`` logger.
    """
    file_level = logging.getLevelName((level or "INFO").upper())
    if not isinstance(file_level, int):
        file_level = logging.INFO
    console_level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger("streamcheck")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = False

    redact = RedactingFilter()

    console = logging.StreamHandler(stream or sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console.addFilter(redact)
    logger.addHandler(console)

    log_path = None
    if log_dir is not None:
        log_path = Path(log_dir) / LOG_FILE
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        file_handler.addFilter(redact)
        logger.addHandler(file_handler)
        logger.setLevel(min(file_level, console_level))
    else:
        logger.setLevel(console_level)

    logger.debug("Logging to %s", log_path or "stderr only")
    return logger


def truncate_output(output: str, max_length: int = 2000) -> str:
    """Shorten response bodies quoted in errors."""
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Remove credentials from text that ends up in logs or error messages.

    Args:
        text: Text that may contain sensitive data.

    Returns:
        Sanitized text safe for logging.
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = re.sub(pattern, replacement, result)
    return result
