"""Logging configuration for TickerScore.

Every module logger is a child of the ``tickerscore`` logger, which owns the
single stderr handler. Changing the level on the parent (``set_level``) is
enough for the whole package.
"""

import logging
import sys

ROOT_NAME = "tickerscore"
LOG_FORMAT = "%(asctime)s | %(name)-28s | %(levelname)-7s | %(message)s"


def _package_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return root


def setup_logger(name: str, level: str | None = None) -> logging.Logger:
    """Return the ``tickerscore.<name>`` logger, creating the package handler on first use."""
    root = _package_logger()
    if level:
        set_level(level)
    return root.getChild(name)


def set_level(level: str) -> None:
    """Apply *level* to the package logger; children inherit it."""
    _package_logger().setLevel(getattr(logging, level.upper(), logging.INFO))
