"""Logging helpers for steplex."""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a standard library logger under the "steplex." namespace."""
    if not (name == "steplex" or name.startswith("steplex.")):
        name = f"steplex.{name}"
    return logging.getLogger(name)
