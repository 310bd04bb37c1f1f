"""
Logging configuration for ar1-ssm.

Estimation logs at INFO, rejected optimizer trials at DEBUG. Warnings issued
by numpy and scipy during a fit (overflow in a trial, line-search notices)
are routed through the ``py.warnings`` logger so they land in the same
handlers as the fit log.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    capture_warnings: bool = True,
) -> None:
    """
    Configure logging for the package.

    Parameters
    ----------
    level : str
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_file : str, optional
        Path to log file, e.g. the config's ``logging.file``. If None, only
        console output.
    format_string : str, optional
        Custom format string for log messages (default: LOG_FORMAT)
    capture_warnings : bool
        Route ``warnings.warn`` output from numpy/scipy into logging
    """
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    formatter = logging.Formatter(format_string or LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)
    logging.captureWarnings(capture_warnings)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module of the package (pass ``__name__``)."""
    return logging.getLogger(name)
