"""
In-memory repository implementation for testing.
"""
from typing import Any, Dict, List, Optional

from boardburrow.config.logging_config import get_logger

from .base_repository import BaseRepository

logger = get_logger(__name__)


class InMemoryRepository(BaseRepository):
    """In-memory repository implementation.

    This repository keeps records in a dictionary, primarily for
    testing and development purposes. Nothing survives the process.
    """

    def __init__(self, connection_config: Dict[str, Any] = None):
        """Initialize the repository with an empty store.

        Args:
            connection_config: Not used for in-memory repository
        """
        super().__init__(connection_config or {})
        self._store: Dict[str, str] = {}
        self._is_connected = False

    def connect(self) -> bool:
        """Simulate opening a store.

        Returns:
            bool: Always returns True
        """
        self._is_connected = True
        logger.info("Connected to in-memory repository")
        return True

    def disconnect(self) -> None:
        """Simulate closing a store."""
        self._is_connected = False
        logger.info("Disconnected from in-memory repository")

    def get(self, key: str) -> Optional[str]:
        self._check_connection()
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_connection()
        self._store[key] = value

    def set_many(self, records: Dict[str, str]) -> None:
        self._check_connection()
        self._store.update(records)

    def delete(self, key: str) -> bool:
        self._check_connection()

        if key not in self._store:
            logger.warning(f"Record {key} not found")
            return False

        del self._store[key]
        return True

    def keys(self) -> List[str]:
        self._check_connection()
        return list(self._store.keys())

    def _check_connection(self) -> None:
        """Check if the repository is connected.

        Raises:
            RuntimeError: If not connected
        """
        if not self._is_connected:
            raise RuntimeError("Repository is not connected")
