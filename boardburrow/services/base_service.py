"""
Base service interface for external collaborators.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from boardburrow.config.logging_config import get_logger

logger = get_logger(__name__)


class BaseService(ABC):
    """Base class for all collaborator implementations.

    This abstract class defines the interface that all service
    implementations should follow. It provides common functionality
    like configuration checks and error reporting.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize the service with configuration.

        Args:
            config: Configuration dictionary for the service
        """
        self.config = config or {}
        self._validate_config()

    @abstractmethod
    def _validate_config(self) -> None:
        """Validate the service configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        pass

    def health_check(self) -> Dict[str, Any]:
        """Report the service's status.

        Returns:
            Dict[str, Any]: Health status information
        """
        return {"service": self.__class__.__name__, "status": "ok"}

    def handle_error(
        self,
        error: Exception,
        operation: str,
        additional_info: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Handle service errors in a consistent way.

        Args:
            error: The exception that occurred
            operation: Name of the operation that failed
            additional_info: Any additional context information

        Returns:
            Dict[str, Any]: Error information in a structured format
        """
        error_info = {
            "service": self.__class__.__name__,
            "operation": operation,
            "error_type": type(error).__name__,
            "error_message": str(error)
        }

        if additional_info:
            error_info["additional_info"] = additional_info

        logger.error(f"Service error: {error_info}")
        return error_info
