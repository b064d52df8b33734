from __future__ import annotations

from .config import LoggingConfig
from .core import (
    clean_log_files,
    configure_logging,
    get_default_log_path,
    get_log_dir,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "configure_logging",
    "shutdown_logging",
    "clean_log_files",
    "get_default_log_path",
    "get_log_dir",
]
