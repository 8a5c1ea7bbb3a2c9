"""
Package logger setup.

Library modules only ask for a child logger via `get_logger(__name__)` and
never attach handlers themselves. `make_logger` is called from the entry
points that report to the user (the gradient checker), once per run, with a
level picked from their config.
"""

from __future__ import annotations

import logging

PACKAGE_LOGGER_NAME = "sfm_ba"


def make_logger(name: str = PACKAGE_LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """
    Package logger with a single stream handler.

    Repeated calls only update the level, so entry points can call this on
    every run without stacking handlers.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Child logger under the package logger, e.g. sfm_ba.ba.cost_functions."""
    if module_name.startswith(PACKAGE_LOGGER_NAME):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{module_name}")


__all__ = ["PACKAGE_LOGGER_NAME", "make_logger", "get_logger"]
