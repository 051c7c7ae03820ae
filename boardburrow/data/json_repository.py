"""
JSON file repository: every record lives in one JSON object on disk.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from boardburrow.config.logging_config import get_logger

from .base_repository import BaseRepository

logger = get_logger(__name__)


class JsonFileRepository(BaseRepository):
    """Repository persisting all records to a single JSON file.

    Writes go to a temporary file in the same directory which then
    replaces the target, so a crash never leaves a half-written store.
    """

    def __init__(self, connection_config: Dict[str, Any]):
        """Initialize the repository.

        Args:
            connection_config: Must contain ``path``, the JSON file location
        """
        super().__init__(connection_config)
        self._validate_config()
        self.path = Path(connection_config["path"])
        self._store: Dict[str, str] = {}
        self._is_connected = False

    def connect(self) -> bool:
        """Load the file into memory, starting empty if it is missing or unreadable.

        Returns:
            bool: True once the repository is usable
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._store = {}

        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    self._store = {str(k): v for k, v in data.items() if isinstance(v, str)}
                else:
                    logger.warning(f"Ignoring malformed store file {self.path}")
            except (OSError, ValueError) as e:
                self.handle_db_error(e, "connect")

        self._is_connected = True
        logger.info(f"Connected to JSON repository at {self.path}")
        return True

    def disconnect(self) -> None:
        self._is_connected = False
        logger.info("Disconnected from JSON repository")

    def get(self, key: str) -> Optional[str]:
        self._check_connection()
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, records: Dict[str, str]) -> None:
        self._check_connection()
        updated = dict(self._store)
        updated.update(records)
        self._flush(updated)
        self._store = updated

    def delete(self, key: str) -> bool:
        self._check_connection()

        if key not in self._store:
            logger.warning(f"Record {key} not found")
            return False

        updated = dict(self._store)
        del updated[key]
        self._flush(updated)
        self._store = updated
        return True

    def keys(self) -> List[str]:
        self._check_connection()
        return list(self._store.keys())

    def _flush(self, data: Dict[str, str]) -> None:
        """Atomically replace the store file with ``data``."""
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _check_connection(self) -> None:
        """Check if the repository is connected.

        Raises:
            RuntimeError: If not connected
        """
        if not self._is_connected:
            raise RuntimeError("Repository is not connected")

    def _validate_config(self) -> None:
        """Validate the repository configuration.

        Raises:
            ValueError: If no file path is configured
        """
        if not self.connection_config.get("path"):
            raise ValueError("JsonFileRepository requires a 'path' setting")
