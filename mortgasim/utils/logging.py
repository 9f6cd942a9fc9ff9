"""Logging helpers shared by every mortgasim module."""

from __future__ import annotations

import logging

DEFAULT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
DEFAULT_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str = 'INFO') -> None:
    """Configure a single console handler on the package root logger."""
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    root = logging.getLogger('mortgasim')
    root.setLevel(log_level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
        root.addHandler(handler)
    # Reduce noise from the HTTP stack.
    logging.getLogger('urllib3').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, usually called with ``__name__``."""
    return logging.getLogger(name)
