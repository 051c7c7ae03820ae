"""
Base repository interface for key-value persistence.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from boardburrow.config.logging_config import get_logger

logger = get_logger(__name__)


class BaseRepository(ABC):
    """Base class for all repository implementations.

    This abstract class defines the interface that all repository
    implementations should follow: a durable key-value store of
    JSON-serialized text records, plus consistent error reporting.
    """

    def __init__(self, connection_config: Dict[str, Any]):
        """Initialize the repository with connection configuration.

        Args:
            connection_config: Backend parameters
        """
        self.connection_config = connection_config
        self._connection = None

    @abstractmethod
    def connect(self) -> bool:
        """Open the backing store.

        Returns:
            bool: True if connection successful, False otherwise
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the backing store."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Read a record.

        Args:
            key: Record key

        Returns:
            Optional[str]: Stored text if present, None otherwise
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a record, replacing any previous value.

        Args:
            key: Record key
            value: Serialized record
        """
        pass

    @abstractmethod
    def set_many(self, records: Dict[str, str]) -> None:
        """Write several records as one logical save.

        Args:
            records: Mapping of key to serialized record
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a record.

        Args:
            key: Record key

        Returns:
            bool: True if deleted, False if absent
        """
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys."""
        pass

    def handle_db_error(self, error: Exception, operation: str) -> Dict[str, Any]:
        """Handle storage errors in a consistent way.

        Args:
            error: The exception that occurred
            operation: Name of the storage operation that failed

        Returns:
            Dict[str, Any]: Error information
        """
        error_info = {
            "repository": self.__class__.__name__,
            "operation": operation,
            "error_type": type(error).__name__,
            "error_message": str(error)
        }

        logger.error(f"Storage error: {error_info}")
        return error_info
