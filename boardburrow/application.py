"""
Application wiring for the BoardBurrow rental engine.

This module brings together the persistence backend, the collaborators and
the app store, following the settings.
"""

import logging
from typing import Optional

from boardburrow.config import settings as default_settings
from boardburrow.config.logging_config import get_logger
from boardburrow.config.settings import Settings
from boardburrow.data.persistence import Persistence, create_repository
from boardburrow.domain.store import AppStore
from boardburrow.events.event_interface import EventEmitter
from boardburrow.services.location_service import LocationService
from boardburrow.services.notification_service import (
    LocalNotificationService,
    NotificationService,
)
from boardburrow.utils.clock import Clock
from boardburrow.utils.error_handling import safe_execute
from boardburrow.utils.timers import Scheduler

logger = get_logger(__name__)


def create_app_store(
    config: Optional[Settings] = None,
    notifications: Optional[NotificationService] = None,
    clock: Optional[Clock] = None,
    scheduler: Optional[Scheduler] = None,
    emitter: Optional[EventEmitter] = None,
    location_service: Optional[LocationService] = None,
) -> AppStore:
    """
    Build an app store on the configured storage backend.

    Args:
        config: Application settings, defaults to the environment-driven ones
        notifications: Reminder delivery, defaults to a local in-memory service
        clock: Calendar arithmetic, defaults to the system clock
        scheduler: Delayed callbacks, defaults to timer threads
        emitter: Event emitter for observers
        location_service: Resolves the customer location; each resolved
            placemark is fed to the store's location step

    Returns:
        AppStore: Store loaded from the persisted snapshot
    """
    config = config or default_settings
    if config.storage.backend == "json":
        config.ensure_directories()

    repository = create_repository(config)
    notifications = notifications or LocalNotificationService()
    safe_execute(
        notifications.request_authorization,
        error_message="Notification authorization request failed",
        default=False,
        log_level=logging.WARNING,
    )

    store = AppStore(
        persistence=Persistence(repository),
        notifications=notifications,
        clock=clock,
        scheduler=scheduler,
        emitter=emitter,
        config=config,
    )
    if location_service is not None:
        location_service.on_resolved(store.set_location)
    logger.info(f"{config.app_name} {config.app_version} ready ({config.storage.backend} storage)")
    return store
