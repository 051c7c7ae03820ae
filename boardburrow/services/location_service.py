"""
Location collaborator.

A location service turns a position fix into "City, Region, Country" text
and hands it to a callback once resolved. The app store only ever sees the
text, through ``set_location``.
"""

from abc import abstractmethod
from typing import Any, Callable, Dict, List, Optional

from boardburrow.config.logging_config import get_logger
from boardburrow.domain.onboarding.location_gate import format_placemark
from boardburrow.services.base_service import BaseService

logger = get_logger(__name__)

PlacemarkCallback = Callable[[str], None]


class LocationService(BaseService):
    """Interface of the location collaborator."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.resolved_placemark = ""
        self._callbacks: List[PlacemarkCallback] = []

    def on_resolved(self, callback: PlacemarkCallback) -> None:
        """Register a callback for the resolved placemark text."""
        self._callbacks.append(callback)

    @abstractmethod
    def request(self) -> None:
        """Ask for a position fix; callbacks fire when it resolves."""
        pass

    def _resolved(self, placemark: str) -> None:
        self.resolved_placemark = placemark
        logger.info(f"Resolved location: {placemark or '<empty>'}")
        for callback in list(self._callbacks):
            try:
                callback(placemark)
            except Exception as e:
                self.handle_error(e, "on_resolved")


class StaticLocationService(LocationService):
    """
    Location service answering with a configured place.

    Config keys: ``city``, ``region``, ``country``.
    """

    def _validate_config(self) -> None:
        unknown = set(self.config) - {"city", "region", "country"}
        if unknown:
            raise ValueError(f"Unknown location settings: {sorted(unknown)}")

    def request(self) -> None:
        self._resolved(format_placemark(
            self.config.get("city"),
            self.config.get("region"),
            self.config.get("country"),
        ))
