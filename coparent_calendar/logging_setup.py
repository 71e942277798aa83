"""
Central logging configuration for coparent_calendar.

Keeps the package's own loggers at INFO (or DEBUG when asked) and quietens
third-party libraries that log every parsed property.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"

_NOISY_LOGGERS = ("icalendar", "dateutil")


def configure_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    level_name: Optional[str] = None,
) -> None:
    """
    Configure logging levels for coparent_calendar.

    Args:
        debug_mode: Whether to enable debug logging for coparent_calendar modules
        force_debug: Override debug mode setting (None to use env var detection)
        level_name: Root level name from settings (DEBUG, INFO, WARNING, ERROR)

    Environment Variables:
        COPARENT_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        COPARENT_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("COPARENT_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("COPARENT_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    for candidate in (level_name, env_log_level):
        if candidate and candidate.upper() in ("DEBUG", "INFO", "WARNING", "ERROR"):
            root_level = getattr(logging, candidate.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if the host application has not configured one
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("coparent_calendar").setLevel(
        logging.DEBUG if final_debug else max(root_level, logging.INFO)
    )

    if final_debug:
        root_logger.debug("Debug logging enabled for coparent_calendar modules")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ("coparent_calendar", *_NOISY_LOGGERS):
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
