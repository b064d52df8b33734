from __future__ import annotations

"""
Logging Handler Factories.

Handlers built here are tagged so shutdown_logging() only removes what
pendant installed, leaving pytest's capture handlers and library handlers
attached to the root logger alone.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List

from pendant.infra.logging.config import (
    CONSOLE_DATEFMT,
    CONSOLE_FORMAT,
    FILE_DATEFMT,
    FILE_FORMAT,
    LoggingConfig,
)

_HANDLER_TAG_ATTR: str = "_pendant_handler"


def tag_handler(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def is_pendant_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def build_handlers(cfg: LoggingConfig) -> List[logging.Handler]:
    """
    Create the stderr and rotating file handlers requested by cfg.

    An unwritable log file only costs the file handler; a warning goes to
    stderr and the run continues with console logging.

    Args:
        cfg: Logging setup of the invocation.

    Returns:
        List[logging.Handler]: Tagged handlers, possibly empty.
    """
    level = cfg.numeric_level()
    handlers: List[logging.Handler] = []

    if cfg.console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setLevel(level)
        sh.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
        handlers.append(tag_handler(sh))

    if cfg.log_file:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(cfg.log_file)), exist_ok=True)
            fh = RotatingFileHandler(
                cfg.log_file,
                maxBytes=cfg.max_bytes,
                backupCount=cfg.backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            sys.stderr.write(f"WARNING: Unable to open log file '{cfg.log_file}': {e}\n")
        else:
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
            handlers.append(tag_handler(fh))

    return handlers
