"""
Rental lifecycle manager.

Each rental moves ``booked -> picked_up -> returned`` and never backwards.
Active and past rentals are kept in two disjoint lists; a rental leaves the
active list exactly once, when it is returned, and is never deleted.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from boardburrow.config.logging_config import get_logger
from boardburrow.data.models import (
    BoardGame,
    PaymentStatus,
    Rental,
    RentalState,
    RentalStatus,
)
from boardburrow.domain.pricing import single_rental_total
from boardburrow.domain.rental.confirmation import ConfirmationCodeGenerator
from boardburrow.domain.rental.reminders import ReminderIntent, reminders_for
from boardburrow.utils.clock import Clock
from boardburrow.utils.error_handling import InvalidDurationError

logger = get_logger(__name__)

MIN_RENTAL_DAYS = 1
MAX_RENTAL_DAYS = 14


class RentalLifecycleManager:
    """
    Owns the active and past rental collections.

    This class is responsible for:
    - Booking rentals with captured prices and a confirmation code
    - Advancing rentals through pick-up and return
    - Describing the reminders each booking needs
    """

    def __init__(
        self,
        clock: Clock,
        code_generator: ConfirmationCodeGenerator,
        state: Optional[RentalState] = None,
        min_days: int = MIN_RENTAL_DAYS,
        max_days: int = MAX_RENTAL_DAYS,
        pickup_reminder_lead_hours: int = 1,
        return_reminder_hour: int = 18,
    ):
        """
        Initialize the manager.

        Args:
            clock: Calendar arithmetic for return dates and reminders
            code_generator: Source of confirmation codes
            state: Previously persisted rentals, if any
            min_days: Shortest allowed rental
            max_days: Longest allowed rental
            pickup_reminder_lead_hours: Lead time of the pickup reminder
            return_reminder_hour: Local hour of the return-day reminder
        """
        self.clock = clock
        self.code_generator = code_generator
        self.min_days = min_days
        self.max_days = max_days
        self.pickup_reminder_lead_hours = pickup_reminder_lead_hours
        self.return_reminder_hour = return_reminder_hour

        self._active: List[Rental] = []
        self._past: List[Rental] = []
        if state is not None:
            self.load(state)

    @property
    def active_rentals(self) -> List[Rental]:
        return list(self._active)

    @property
    def past_rentals(self) -> List[Rental]:
        return list(self._past)

    def load(self, state: RentalState) -> None:
        """Replace the collections with a persisted state."""
        self._active = list(state.active)
        self._past = list(state.past)

    def snapshot(self) -> RentalState:
        """Current collections as a persistable record."""
        return RentalState(active=list(self._active), past=list(self._past))

    def validate_days(self, days: int) -> None:
        """
        Check a rental length.

        Raises:
            InvalidDurationError: If ``days`` is outside the allowed range
        """
        if isinstance(days, bool) or not isinstance(days, int) or not self.min_days <= days <= self.max_days:
            raise InvalidDurationError(days, self.min_days, self.max_days)

    def create_rental(self, game: BoardGame, pickup: datetime, days: int) -> Rental:
        """
        Book one game.

        Payment is mocked and always succeeds, so the rental starts paid.

        Args:
            game: Catalog game; a snapshot of it is embedded in the rental
            pickup: Pickup date and time
            days: Rental length

        Returns:
            Rental: The booked rental, already appended to the active list

        Raises:
            InvalidDurationError: If ``days`` is outside the allowed range
        """
        self.validate_days(days)

        rental = Rental(
            game=game.model_copy(),
            pickup=pickup,
            return_date=self.clock.add_days(pickup, days),
            days=days,
            daily_price=game.daily_price,
            deposit=game.deposit,
            total_paid=single_rental_total(game, days),
            status=RentalStatus.BOOKED,
            payment_status=PaymentStatus.PAID,
            confirmation_code=self.code_generator.generate(),
        )

        self._active.append(rental)
        logger.info(f"Booked {game.title} for {days} day(s), confirmation {rental.confirmation_code}")
        return rental

    def create_bundle_rentals(self, games: Sequence[BoardGame], pickup: datetime, days: int) -> List[Rental]:
        """
        Book every game of a bundle, one rental each.

        There is no rollback: if a later booking fails, earlier ones stay.
        """
        return [self.create_rental(game, pickup, days) for game in games]

    def reminders_for(self, rental: Rental) -> List[ReminderIntent]:
        """Reminder intents for a booked rental."""
        return reminders_for(
            rental,
            self.clock,
            pickup_lead_hours=self.pickup_reminder_lead_hours,
            return_hour=self.return_reminder_hour,
        )

    def find_active(self, rental_id: str) -> Optional[Rental]:
        index = self._index_of(rental_id)
        return self._active[index] if index is not None else None

    def find(self, rental_id: str) -> Optional[Rental]:
        """Look a rental up by id in either collection."""
        for rental in self._active + self._past:
            if rental.id == rental_id:
                return rental
        return None

    def mark_picked_up(self, rental: Rental) -> Optional[Rental]:
        """
        Record that the customer collected the game.

        Returns:
            Optional[Rental]: The updated rental, or None if the rental is
            not active (stale references are ignored)
        """
        index = self._index_of(rental.id)
        if index is None:
            logger.debug(f"Ignoring pick-up for inactive rental {rental.id}")
            return None

        current = self._active[index]
        if current.status.rank >= RentalStatus.PICKED_UP.rank:
            return current

        updated = current.model_copy(update={"status": RentalStatus.PICKED_UP})
        self._active[index] = updated
        logger.info(f"Rental {updated.confirmation_code} picked up")
        return updated

    def mark_returned(self, rental: Rental) -> Optional[Rental]:
        """
        Close a rental and refund its deposit.

        The rental moves from the active list to the front of the past list.

        Returns:
            Optional[Rental]: The returned rental, or None if the rental is
            not active
        """
        index = self._index_of(rental.id)
        if index is None:
            logger.debug(f"Ignoring return for inactive rental {rental.id}")
            return None

        current = self._active.pop(index)
        returned = current.model_copy(update={
            "status": RentalStatus.RETURNED,
            "payment_status": PaymentStatus.REFUNDED,
        })
        self._past.insert(0, returned)
        logger.info(f"Rental {returned.confirmation_code} returned, deposit refunded")
        return returned

    def _index_of(self, rental_id: str) -> Optional[int]:
        for i, rental in enumerate(self._active):
            if rental.id == rental_id:
                return i
        return None
