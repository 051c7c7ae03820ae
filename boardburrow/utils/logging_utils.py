# boardburrow/utils/logging_utils.py
import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(
    name: str,
    level: str = None,
    session_id: str = None,
    log_dir: Union[str, Path] = "logs",
    log_format: str = DEFAULT_FORMAT,
    console_enabled: bool = True,
    file_enabled: bool = True,
) -> logging.Logger:
    """
    Set up and configure logger with session-based logging

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        session_id: Optional session ID for session-specific logs
        log_dir: Directory holding the session log directories
        log_format: Format of console log lines
        console_enabled: Whether to log to stdout
        file_enabled: Whether to write component and session log files

    Returns:
        Configured logger
    """
    # Create logger
    logger = logging.getLogger(name)

    # If logger is already configured, return it
    if logger.handlers:
        return logger

    # Determine log level
    if level:
        log_level = getattr(logging, level.upper(), logging.INFO)
    else:
        log_level = logging.INFO

    logger.setLevel(log_level)

    # Create formatters
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    )

    simple_formatter = logging.Formatter(log_format)

    # 1. Console handler
    if console_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(simple_formatter)
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

    if not session_id:
        session_id = f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"

    if file_enabled:
        session_dir = Path(log_dir) / session_id
        session_dir.mkdir(parents=True, exist_ok=True)

        # 2. Component-specific log file
        component_handler = RotatingFileHandler(
            session_dir / f"{name}.log",
            maxBytes=10485760,  # 10MB
            backupCount=5
        )
        component_handler.setFormatter(detailed_formatter)
        component_handler.setLevel(log_level)
        logger.addHandler(component_handler)

        # 3. Combined session log file
        session_handler = RotatingFileHandler(
            session_dir / "session.log",
            maxBytes=10485760,  # 10MB
            backupCount=5
        )
        session_handler.setFormatter(detailed_formatter)
        session_handler.setLevel(log_level)
        logger.addHandler(session_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    # Store session ID in logger for reference
    logger.session_id = session_id

    return logger


def get_session_id(logger: logging.Logger) -> Optional[str]:
    """
    Get the session ID from a logger

    Args:
        logger: Logger to get session ID from

    Returns:
        str: Session ID
    """
    return getattr(logger, "session_id", None)
