"""Logging setup shared by the CLI and the web backend.

Both drivers call ``configure_logging`` once at startup. The level comes from
the caller, then ``GROVE_LOG_LEVEL``, then INFO. Library modules never
configure logging themselves; they only create module loggers.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable

from grove.exceptions import ConfigurationError

LOG_LEVEL_ENV = "GROVE_LOG_LEVEL"
DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGERS = ("grove", "backend")
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(level: str | None = None) -> int:
    """Turn a level name (or None) into a numeric logging level.

    Raises:
        ConfigurationError: If the name is not a standard logging level
    """
    name = (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LEVEL).strip().upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        raise ConfigurationError(f"Unknown log level {name!r}")
    return numeric


def configure_logging(
    *,
    level: str | None = None,
    format: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
    include_uvicorn: bool = False,
    extra_loggers: Iterable[str] | None = None,
) -> logging.Logger:
    """Install the root handler and align Grove's loggers on one level.

    Calling it again keeps the existing root handler and only moves levels.

    Args:
        level: Level name; falls back to ``GROVE_LOG_LEVEL`` or INFO
        format: Log record format for the root handler
        datefmt: Timestamp format for the root handler
        include_uvicorn: Also set uvicorn's loggers to the resolved level
        extra_loggers: More logger names to set to the resolved level

    Returns:
        The ``grove`` package logger
    """
    numeric = resolve_level(level)
    logging.basicConfig(level=numeric, format=format, datefmt=datefmt)

    names = list(PACKAGE_LOGGERS)
    if include_uvicorn:
        names.extend(UVICORN_LOGGERS)
    names.extend(extra_loggers or ())
    for name in names:
        logging.getLogger(name).setLevel(numeric)

    package_logger = logging.getLogger("grove")
    package_logger.debug("Logging configured at %s", logging.getLevelName(numeric))
    return package_logger
