"""Utility functions for dashrecord."""

import sys
from enum import Enum
from typing import Any

from loguru import logger


def canonical_name(name: Any) -> str:
    """Normalize a property name to its canonical string form.

    Plain strings are used as-is. String-valued Enum members are accepted so
    callers can keep property names in an Enum; their value is the key.

    Raises:
        TypeError: If the name is neither a string nor a string-valued Enum.
    """
    if isinstance(name, Enum):
        name = name.value
    if not isinstance(name, str):
        raise TypeError(f"Property names must be strings, got {type(name).__name__}")
    return name


def setup_logging(level: str | None = None) -> None:
    """Enable dashrecord log output on stderr.

    The library is silent by default. Applications (and the CLI) call this to
    see declaration and cascade activity.

    Args:
        level: Log level name. Defaults to the configured ``log_level``.
    """
    from dashrecord.config import get_config

    log_level = level or get_config().log_level

    logger.remove()
    logger.add(sys.stderr, level=log_level, colorize=True, backtrace=False)
    logger.enable("dashrecord")
    logger.debug(f"dashrecord logging enabled at {log_level}")
