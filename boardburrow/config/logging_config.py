"""
Logger lookup shared by every module of the package.

Loggers live under the ``boardburrow`` namespace so that one call to
``configure_logging`` sets up handlers for the whole package.
"""

import logging
from typing import Optional

from boardburrow.config.settings import Settings
from boardburrow.utils.logging_utils import setup_logger

ROOT_LOGGER_NAME = "boardburrow"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        logging.Logger: Logger nested under the package root logger
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    config: Settings,
    level: Optional[str] = None,
    session_id: Optional[str] = None,
) -> logging.Logger:
    """
    Attach handlers to the package root logger.

    Args:
        config: Application settings
        level: Optional level overriding the configured one
        session_id: Optional session ID for the session log directory

    Returns:
        logging.Logger: The configured package root logger
    """
    if level is None:
        level = "DEBUG" if config.debug_mode else config.logging.level

    return setup_logger(
        ROOT_LOGGER_NAME,
        level=level,
        session_id=session_id,
        log_dir=config.logs_dir,
        log_format=config.logging.format,
        console_enabled=config.logging.console_enabled,
        file_enabled=config.logging.file_enabled,
    )
