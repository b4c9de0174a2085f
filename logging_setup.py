#!/usr/bin/env python3
"""
logging_setup.py
================
Configures the root logger with a console handler and a rotating file
handler (``collision_warning.log``, 1 MB, 2 backups).

Call :func:`setup_logging` once at startup before any other ``import``
triggers ``logging.getLogger()``.
"""

import logging
from logging.handlers import RotatingFileHandler

from config import DEBUG_LOG_FILE, LOG_FILE


def setup_logging(level: int = logging.INFO, log_file: str = LOG_FILE,
                  debug_log_file: str = DEBUG_LOG_FILE) -> None:
    """Apply a unified log format to both console and file output.

    Parameters
    ----------
    level : int
        Minimum severity level (e.g. ``logging.DEBUG``, ``logging.INFO``).
    log_file : str
        Main rotating log file.
    debug_log_file : str
        Dedicated DEBUG file for the prediction core; empty disables it.
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(fmt)

    fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2)
    fh.setLevel(level)
    fh.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)
    root.addHandler(fh)

    # ── Dedicated debug file for forecasts and skipped vehicles ───────
    predictor_logger = logging.getLogger("predictor")
    for handler in list(predictor_logger.handlers):
        predictor_logger.removeHandler(handler)
        handler.close()
    if debug_log_file:
        predictor_logger.setLevel(logging.DEBUG)
        dfh = RotatingFileHandler(
            debug_log_file, maxBytes=5_000_000, backupCount=2
        )
        dfh.setLevel(logging.DEBUG)
        dfh.setFormatter(fmt)
        predictor_logger.addHandler(dfh)
