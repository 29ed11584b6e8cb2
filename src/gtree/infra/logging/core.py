from __future__ import annotations

"""
Logging lifecycle for gtree.

Records from every module reach the root logger's single QueueHandler; a
QueueListener thread hands them to the real stderr/file handlers. Calling
configure_logging again is a no-op unless force=True, and
shutdown_logging undoes everything so tests and embedders can start clean.
"""

import atexit
import logging
import queue
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from gtree.infra.logging.config import _LEVEL_MAP, LoggingConfig
from gtree.infra.logging.handlers import (
    _create_console_handler,
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

# Attributes set on the root logger
_CONFIGURED_FLAG_ATTR: str = "_gtree_configured"
_QUEUE_LISTENER_ATTR: str = "_gtree_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Attach gtree's handlers to the root logger.

    Args:
        cfg: Level, destinations and formats.
        force: Replace an existing gtree configuration.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)
    shutdown_logging()

    sinks = _build_sinks(cfg, level_int)
    if sinks:
        _start_listener(root, sinks)
    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Flush pending records and detach every handler gtree installed."""
    root = logging.getLogger()
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener is not None:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)

    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()
    setattr(root, _CONFIGURED_FLAG_ATTR, False)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    return _LEVEL_MAP.get(str(level or "").strip().upper(), logging.WARNING)


def _build_sinks(cfg: LoggingConfig, level_int: int) -> List[logging.Handler]:
    sinks: List[logging.Handler] = []
    if cfg.console:
        sinks.append(_create_console_handler(level_int, logging.Formatter(cfg.console_fmt)))
    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if fh:
            sinks.append(fh)
    return sinks


def _start_listener(root: logging.Logger, sinks: List[logging.Handler]) -> None:
    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)

    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *sinks, respect_handler_level=True)
    listener.start()
    root.addHandler(queue_handler)

    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)
    atexit.register(_safe_stop_listener, listener)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop the listener once; both shutdown_logging and atexit may call this."""
    if listener is not None and getattr(listener, "_thread", None) is not None:
        listener.stop()
