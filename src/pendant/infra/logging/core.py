from __future__ import annotations

"""
Logging Core Orchestrator.

Maintains the idempotent lifecycle of the logging subsystem. A QueueHandler
on the root logger feeds a QueueListener that owns the real handlers, so
file I/O never blocks the analyzer threads or the watch loop.
"""

import atexit
import glob
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from pendant.infra.fs import get_user_data_dir
from pendant.infra.logging.config import LoggingConfig
from pendant.infra.logging.handlers import build_handlers, is_pendant_handler, tag_handler

# Internal state flags for idempotency and lifecycle tracking
_CONFIGURED_FLAG_ATTR: str = "_pendant_configured"
_QUEUE_LISTENER_ATTR: str = "_pendant_queue_listener"

LOG_FILE_NAME = "pendant.log"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_log_dir() -> str:
    """Return '<user data dir>/logs'."""
    return os.path.join(get_user_data_dir(), "logs")


def get_default_log_path(file_name: str = LOG_FILE_NAME) -> str:
    """
    Resolve the persistent log path within the user data directory.

    Args:
        file_name: Target log filename.

    Returns:
        str: Absolute path to the log file.
    """
    return os.path.join(get_log_dir(), file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Route the root logger through a queue to pendant's handlers.

    A second call is a no-op unless force is set, so the CLI and the test
    suite can both call it freely.

    Args:
        cfg: Logging setup of the invocation.
        force: Rebuild the handlers even when already configured.

    Returns:
        logging.Logger: The initialized root logger instance.
    """
    root = logging.getLogger()

    try:
        # 1. Idempotency Check
        already_configured = bool(getattr(root, _CONFIGURED_FLAG_ATTR, False))
        if already_configured and not force:
            return root

        root.setLevel(cfg.numeric_level())

        _remove_our_handlers(root)
        _stop_existing_listener(root)

        # 2. Handler Definition
        handlers_list = build_handlers(cfg)
        if not handlers_list:
            return root

        # 3. Queue-Based Orchestration
        log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)

        queue_handler = QueueHandler(log_queue)
        tag_handler(queue_handler)

        listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
        listener.start()

        root.addHandler(queue_handler)

        setattr(root, _QUEUE_LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_FLAG_ATTR, True)

        # Flush pending records on shutdown
        atexit.register(_safe_stop_listener, listener)

        return root

    # Emergency console logging if the infrastructure fails
    except Exception as e:
        _stop_existing_listener(root)
        _remove_our_handlers(root)
        root.setLevel(logging.INFO)

        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
        tag_handler(sh)
        root.addHandler(sh)

        root.warning(f"Logging infrastructure failed ({e}). Switched to emergency console.")
        return root


def shutdown_logging() -> None:
    """Stop the listener and detach pendant handlers from the root logger."""
    root = logging.getLogger()
    _stop_existing_listener(root)
    _remove_our_handlers(root)
    setattr(root, _CONFIGURED_FLAG_ATTR, False)


def clean_log_files(log_dir: Optional[str] = None) -> List[str]:
    """
    Delete persisted log files, rotated segments included.

    Args:
        log_dir: Directory to clean (defaults to the user log directory).

    Returns:
        List[str]: Paths of the removed files.
    """
    directory = log_dir or get_log_dir()
    removed: List[str] = []
    for path in sorted(glob.glob(os.path.join(directory, "*.log*"))):
        if not os.path.isfile(path):
            continue
        os.remove(path)
        removed.append(path)
    return removed


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _remove_our_handlers(root: logging.Logger) -> None:
    """Detach all internally-managed handlers from the root."""
    for h in list(root.handlers):
        if is_pendant_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    """Terminate and release the existing QueueListener."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a QueueListener, tolerating double-stop calls.

    The listener may already be stopped by a forced re-configuration when
    the atexit hook runs.
    """
    if not listener:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
