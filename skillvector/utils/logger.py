"""Logging configuration for the SkillVector service."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _default_level() -> int:
    name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_default_level())
    if level is not None:
        logger.setLevel(level)
    return logger


def set_package_level(level_name: str) -> None:
    """Apply a level to every logger already created under the package namespace."""
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    for name, obj in logging.Logger.manager.loggerDict.items():
        if name.startswith("skillvector") and isinstance(obj, logging.Logger):
            obj.setLevel(level)
