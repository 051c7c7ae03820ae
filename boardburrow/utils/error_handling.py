"""
Error types and helpers shared across the rental engine.

Domain errors carry a severity so callers can decide whether a failure
is worth surfacing to the user or only worth a log line.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

from boardburrow.config.logging_config import get_logger

logger = get_logger("errors")

T = TypeVar("T")


class ErrorSeverity(Enum):
    """How serious an application error is."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AppError(Exception):
    """Base class for all application errors."""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the error.

        Args:
            message: Human-readable description
            severity: How serious the error is
            cause: Underlying exception, if any
            details: Extra structured context
        """
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by {type(self.cause).__name__}: {self.cause})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


class InvalidDurationError(AppError):
    """Rental length outside the allowed day range."""

    def __init__(self, days: int, min_days: int, max_days: int):
        super().__init__(
            f"Rental duration must be between {min_days} and {max_days} days, got {days}",
            severity=ErrorSeverity.WARNING,
            details={"days": days, "min_days": min_days, "max_days": max_days},
        )
        self.days = days


class StageTransitionError(AppError):
    """Onboarding command issued from a stage that does not allow it."""

    def __init__(self, command: str, stage: Any):
        stage_value = getattr(stage, "value", stage)
        super().__init__(
            f"Cannot {command} while in stage '{stage_value}'",
            severity=ErrorSeverity.WARNING,
            details={"command": command, "stage": stage_value},
        )
        self.command = command
        self.stage = stage


class PersistenceError(AppError):
    """Reading or writing a persisted record failed."""


class NotificationError(AppError):
    """A reminder could not be scheduled."""


def safe_execute(
    func: Callable[..., T],
    *args: Any,
    error_message: str = "Operation failed",
    default: Optional[T] = None,
    log_level: int = logging.ERROR,
    **kwargs: Any,
) -> Optional[T]:
    """
    Run a best-effort call, logging instead of raising on failure.

    Args:
        func: Callable to run
        *args: Positional arguments for the callable
        error_message: Prefix of the log line written on failure
        default: Value returned when the call raises
        log_level: Level of the failure log line
        **kwargs: Keyword arguments for the callable

    Returns:
        The callable's result, or ``default`` if it raised
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        logger.log(log_level, f"{error_message}: {type(e).__name__}: {e}")
        return default
