from __future__ import annotations

"""
Logging Configuration Models.

pendant logs to stderr with a clock prefix matching the analysis summary
lines, and to a rotating file in the user data directory that also records
the worker thread (analyzer pool or watch debounce) behind each record.
"""

import logging
from dataclasses import dataclass
from typing import Optional

CONSOLE_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging setup of one pendant invocation.

    Attributes:
        level: 'DEBUG' for --debug/--verbose, 'INFO' otherwise.
        console: Mirror records to stderr.
        log_file: Persistent log path (see get_default_log_path).
        max_bytes: Size of a log segment before rotation.
        backup_count: Rotated segments kept next to the log file.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None
    max_bytes: int = 1024 * 1024
    backup_count: int = 3

    def numeric_level(self) -> int:
        """Resolve the level name; unknown names fall back to INFO."""
        value = logging.getLevelName(str(self.level or "").strip().upper())
        return value if isinstance(value, int) else logging.INFO
