"""
App store: the single owner of the rental engine's state.

The store exposes the commands presentation layers call (sign-in, profile,
location, rentals, subscription), delegates the rules to the stage machine
and the rental manager, saves a snapshot after every mutation, hands
reminder intents to the notification service, and emits an event for each
change so views can observe it.
"""

import functools
import random
import threading
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from boardburrow.config import settings as default_settings
from boardburrow.config.logging_config import get_logger
from boardburrow.config.settings import Settings
from boardburrow.data.catalog import load_catalog
from boardburrow.data.models import (
    AppStage,
    BoardGame,
    Celebration,
    Genre,
    Rental,
    Subscription,
    UserProfile,
)
from boardburrow.data.persistence import Persistence, Snapshot
from boardburrow.domain import pricing
from boardburrow.domain.catalog import search_catalog
from boardburrow.domain.onboarding.stage_machine import OnboardingStageMachine
from boardburrow.domain.rental.confirmation import ConfirmationCodeGenerator
from boardburrow.domain.rental.manager import RentalLifecycleManager
from boardburrow.domain.rental.reminders import ReminderIntent
from boardburrow.events.event_interface import Event, EventEmitter, EventType
from boardburrow.services.notification_service import NotificationService
from boardburrow.utils.clock import Clock, SystemClock
from boardburrow.utils.error_handling import (
    ErrorSeverity,
    NotificationError,
    PersistenceError,
)
from boardburrow.utils.timers import Scheduler

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def serialized(method: F) -> F:
    """Run a store command while holding the store's lock."""

    @functools.wraps(method)
    def wrapper(self: "AppStore", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class AppStore:
    """
    Domain-state object behind every screen.

    All commands are serialized on one lock, so the celebration timer
    thread and the caller never mutate state at the same time.
    """

    def __init__(
        self,
        persistence: Persistence,
        notifications: Optional[NotificationService] = None,
        clock: Optional[Clock] = None,
        scheduler: Optional[Scheduler] = None,
        emitter: Optional[EventEmitter] = None,
        config: Optional[Settings] = None,
        catalog: Optional[List[BoardGame]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the store from the persisted snapshot.

        Args:
            persistence: Persistence adapter holding the snapshot records
            notifications: Reminder delivery; reminders are skipped if None
            clock: Calendar arithmetic, defaults to the system clock
            scheduler: Delayed callbacks for the celebration timer
            emitter: Event emitter observers subscribe to
            config: Application settings
            catalog: Games on offer, defaults to the seed catalog
            rng: Random source for facts and confirmation codes
        """
        self.config = config or default_settings
        self.persistence = persistence
        self.notifications = notifications
        self.clock = clock or SystemClock()
        self.scheduler = scheduler or Scheduler()
        self.events = emitter or EventEmitter()
        self.catalog: List[BoardGame] = list(catalog) if catalog is not None else load_catalog()
        self._lock = threading.RLock()

        snapshot = persistence.load_snapshot()
        rental_cfg = self.config.rentals

        self.rentals = RentalLifecycleManager(
            clock=self.clock,
            code_generator=ConfirmationCodeGenerator(
                self.clock,
                prefix=rental_cfg.confirmation_prefix,
                rng=rng,
            ),
            state=snapshot.state,
            min_days=rental_cfg.min_days,
            max_days=rental_cfg.max_days,
            pickup_reminder_lead_hours=rental_cfg.pickup_reminder_lead_hours,
            return_reminder_hour=rental_cfg.return_reminder_hour,
        )
        self.onboarding = OnboardingStageMachine(
            stage=snapshot.stage,
            profile=snapshot.profile,
            supported_location=self.config.onboarding.supported_location,
            rng=rng,
            celebration_message=snapshot.celebration.message,
        )
        self.subscription: Subscription = snapshot.subscription
        self.celebration: Celebration = snapshot.celebration

        logger.info(
            f"Store loaded at stage {self.stage.value} with "
            f"{len(snapshot.state.active)} active and {len(snapshot.state.past)} past rental(s)"
        )

        # A restart during the celebration resumes its timer
        if self.stage == AppStage.CELEBRATION:
            self._resume_celebration()

    # ---- read-only views ---------------------------------------------

    @property
    def stage(self) -> AppStage:
        return self.onboarding.stage

    @property
    def profile(self) -> UserProfile:
        return self.onboarding.profile

    @property
    def celebration_message(self) -> str:
        return self.onboarding.celebration_message

    @property
    def active_rentals(self) -> List[Rental]:
        return self.rentals.active_rentals

    @property
    def past_rentals(self) -> List[Rental]:
        return self.rentals.past_rentals

    @property
    def has_subscription(self) -> bool:
        return self.subscription.active

    def snapshot(self) -> Snapshot:
        return Snapshot(
            state=self.rentals.snapshot(),
            profile=self.profile.model_copy(),
            stage=self.stage,
            subscription=self.subscription.model_copy(),
            celebration=self.celebration.model_copy(),
        )

    # ---- onboarding commands -----------------------------------------

    @serialized
    def signed_in(self, email: Optional[str], name: Optional[str] = None) -> AppStage:
        self.onboarding.signed_in(email, name)
        return self._stage_changed()

    @serialized
    def complete_profile(self, first: str, last: str, phone: str) -> AppStage:
        self.onboarding.complete_profile(first, last, phone)
        return self._stage_changed()

    @serialized
    def set_location(self, location: str) -> AppStage:
        """Apply the service-area gate; a supported location starts the celebration timer."""
        stage = self.onboarding.set_location(location)
        if stage == AppStage.CELEBRATION:
            self.celebration = Celebration(started_at=self.clock.now(), message=self.celebration_message)
        else:
            self.celebration = Celebration()
        self._stage_changed()
        if stage == AppStage.CELEBRATION:
            self._schedule_celebration_exit(self.config.onboarding.celebration_delay_seconds)
        return stage

    @serialized
    def finish_celebration(self) -> bool:
        if not self.onboarding.finish_celebration():
            return False
        self.celebration = Celebration()
        self._stage_changed()
        return True

    @serialized
    def change_location(self) -> AppStage:
        self.onboarding.change_location()
        return self._stage_changed()

    @serialized
    def sign_out(self) -> AppStage:
        self.onboarding.sign_out()
        self.celebration = Celebration()
        return self._stage_changed()

    @serialized
    def update_profile(self, **fields: str) -> UserProfile:
        profile = self.onboarding.update_profile(**fields)
        self._persist()
        self._emit(EventType.PROFILE_UPDATED, {"profile": profile.to_dict()})
        return profile

    # ---- rental commands ---------------------------------------------

    @serialized
    def create_rental(self, game: BoardGame, pickup: datetime, days: int) -> Rental:
        """
        Book one game, save, and request its reminders.

        Reminder failures are logged and never undo the booking.

        Raises:
            InvalidDurationError: If ``days`` is outside the allowed range
        """
        rental = self.rentals.create_rental(game, pickup, days)
        self._persist()
        self._emit(EventType.RENTAL_CREATED, {"rental": rental.to_dict()})
        self._dispatch_reminders(self.rentals.reminders_for(rental))
        return rental

    @serialized
    def create_bundle_rentals(self, games: Sequence[BoardGame], pickup: datetime, days: int) -> List[Rental]:
        """
        Book each game of a bundle as its own rental.

        Bookings are not atomic as a set: rentals created before a failure
        stay booked.
        """
        created = [self.create_rental(game, pickup, days) for game in games]
        self._emit(EventType.BUNDLE_CREATED, {
            "rental_ids": [r.id for r in created],
            "total": str(sum((r.total_paid for r in created), Decimal("0"))),
        })
        return created

    @serialized
    def mark_picked_up(self, rental: Rental) -> Optional[Rental]:
        current = self.rentals.find_active(rental.id)
        previous = current.status if current is not None else None
        updated = self.rentals.mark_picked_up(rental)
        # Picking up an already picked-up rental changes nothing
        if updated is not None and updated.status != previous:
            self._persist()
            self._emit(EventType.RENTAL_PICKED_UP, {"rental": updated.to_dict()})
        return updated

    @serialized
    def mark_returned(self, rental: Rental) -> Optional[Rental]:
        returned = self.rentals.mark_returned(rental)
        if returned is not None:
            self._persist()
            self._emit(EventType.RENTAL_RETURNED, {"rental": returned.to_dict()})
        return returned

    @serialized
    def activate_subscription(self, monthly_price: Optional[Decimal] = None) -> Subscription:
        """Start the monthly unlimited plan (mock payment). Idempotent."""
        if self.subscription.active:
            return self.subscription
        price = monthly_price if monthly_price is not None else self.config.pricing.subscription_monthly_price
        self.subscription = Subscription(active=True, monthly_price=price, activated_at=self.clock.now())
        self._persist()
        self._emit(EventType.SUBSCRIPTION_ACTIVATED, {"subscription": self.subscription.to_dict()})
        return self.subscription

    # ---- queries -----------------------------------------------------

    def find_game(self, game_id: str) -> Optional[BoardGame]:
        return next((g for g in self.catalog if g.id == game_id), None)

    def find_rental(self, rental_id: str) -> Optional[Rental]:
        return self.rentals.find(rental_id)

    def search_catalog(self, query: str = "", genre: Optional[Genre] = None) -> List[BoardGame]:
        return search_catalog(self.catalog, query, genre)

    def quote_rental(self, game: BoardGame, days: int) -> Decimal:
        return pricing.single_rental_total(game, days)

    def quote_bundle(self, games: Sequence[BoardGame], days: int) -> pricing.BundleQuote:
        cfg = self.config.pricing
        return pricing.bundle_quote(games, days, cfg.bundle_daily_discount, cfg.bundle_deposit_discount)

    def default_pickup(self) -> datetime:
        """Pickup time offered by the rental form: a couple of hours from now."""
        return self.clock.add_hours(self.clock.now(), self.config.rentals.default_pickup_offset_hours)

    # ---- internals ---------------------------------------------------

    def _stage_changed(self) -> AppStage:
        self._persist()
        self._emit(EventType.STAGE_CHANGED, {
            "stage": self.stage.value,
            "profile": self.profile.to_dict(),
            "celebration_message": self.celebration_message,
        })
        return self.stage

    def _persist(self) -> None:
        """Save the whole snapshot as one write; failures are logged only."""
        try:
            self.persistence.save_snapshot(self.snapshot())
        except PersistenceError as e:
            logger.error(f"Could not persist state: {e}")
            self._emit(EventType.PERSISTENCE_FAILED, e.to_dict())
            return
        self._emit(EventType.STATE_PERSISTED, {"stage": self.stage.value})

    def _dispatch_reminders(self, intents: List[ReminderIntent]) -> None:
        if self.notifications is None:
            logger.debug("No notification service, skipping reminders")
            return
        for intent in intents:
            try:
                self.notifications.schedule(intent.title, intent.body, intent.fire_at, intent.identifier)
            except Exception as e:
                error = NotificationError(
                    f"Failed to schedule reminder {intent.identifier}",
                    severity=ErrorSeverity.WARNING,
                    cause=e,
                )
                logger.warning(str(error))
                self._emit(EventType.REMINDER_FAILED, {"reminder": intent.to_dict(), "error": error.to_dict()})
                continue
            self._emit(EventType.REMINDER_SCHEDULED, {"reminder": intent.to_dict()})

    def _schedule_celebration_exit(self, delay: float) -> None:
        self.scheduler.schedule(delay, self.finish_celebration)

    def _resume_celebration(self) -> None:
        """
        Continue a celebration loaded from storage.

        The exit timer is scheduled for whatever is left of the delay; when
        the delay already passed (or the start time is unknown) the store
        enters the main stage right away.
        """
        delay = self.config.onboarding.celebration_delay_seconds
        started_at = self.celebration.started_at
        if started_at is None:
            remaining = 0.0
        else:
            elapsed = (self.clock.now() - started_at).total_seconds()
            remaining = min(delay, delay - elapsed)

        if remaining <= 0:
            logger.info("Celebration delay elapsed while stopped, entering main")
            self.finish_celebration()
        else:
            self._schedule_celebration_exit(remaining)

    def _emit(self, event_type: EventType, data: dict) -> None:
        self.events.emit(Event(type=event_type, data=data))
