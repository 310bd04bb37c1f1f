"""Utility modules for ar1-ssm."""

from ar1_ssm.utils.logging import setup_logging, get_logger
from ar1_ssm.utils.io import (
    DEFAULT_CONFIG,
    load_config,
    save_config,
    save_results,
    load_results,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "DEFAULT_CONFIG",
    "load_config",
    "save_config",
    "save_results",
    "load_results",
]
