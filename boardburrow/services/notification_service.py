"""
Local notification collaborator.

The app store hands reminder requests to a ``NotificationService`` and does
not look at the outcome; delivery problems are the service's to report.
"""

from abc import abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from boardburrow.config.logging_config import get_logger
from boardburrow.services.base_service import BaseService

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScheduledNotification:
    """A notification accepted for later delivery."""

    title: str
    body: str
    fire_at: datetime
    identifier: str


class NotificationService(BaseService):
    """Interface of the notification collaborator."""

    @abstractmethod
    def request_authorization(self) -> bool:
        """Ask the platform for permission to show notifications."""
        pass

    @abstractmethod
    def schedule(self, title: str, body: str, fire_at: datetime, identifier: str) -> None:
        """
        Schedule a one-off notification.

        Args:
            title: Notification title
            body: Notification text
            fire_at: Local date and time to show it
            identifier: Unique id; scheduling the same id again replaces it
        """
        pass


class LocalNotificationService(NotificationService):
    """
    Keeps scheduled notifications in memory and logs them.

    Stands in for the platform's notification center on hosts that have none.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.authorized = bool(self.config.get("authorized", True))
        self._scheduled: Dict[str, ScheduledNotification] = {}

    def _validate_config(self) -> None:
        pass

    @property
    def scheduled(self) -> List[ScheduledNotification]:
        return sorted(self._scheduled.values(), key=lambda n: n.fire_at)

    def request_authorization(self) -> bool:
        logger.debug(f"Notification authorization: {self.authorized}")
        return self.authorized

    def schedule(self, title: str, body: str, fire_at: datetime, identifier: str) -> None:
        if not self.authorized:
            logger.info(f"Notifications not authorized, dropping {identifier}")
            return
        self._scheduled[identifier] = ScheduledNotification(title, body, fire_at, identifier)
        logger.info(f"Scheduled '{title}' at {fire_at.isoformat(timespec='minutes')} ({identifier})")

    def cancel(self, identifier: str) -> bool:
        return self._scheduled.pop(identifier, None) is not None

    def due(self, now: datetime) -> List[ScheduledNotification]:
        """Notifications whose fire time has passed."""
        return [n for n in self.scheduled if n.fire_at <= now]
