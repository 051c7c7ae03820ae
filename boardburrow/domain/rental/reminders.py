"""
Reminder intents produced when a rental is booked.

The rental manager only describes the reminders; delivering them is the
notification service's job, dispatched by the app store.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List

from boardburrow.data.models import Rental
from boardburrow.utils.clock import Clock


@dataclass(frozen=True)
class ReminderIntent:
    """A request to show a local notification at ``fire_at``."""

    title: str
    body: str
    fire_at: datetime
    identifier: str

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["fire_at"] = self.fire_at.isoformat()
        return result


def reminders_for(
    rental: Rental,
    clock: Clock,
    pickup_lead_hours: int = 1,
    return_hour: int = 18,
) -> List[ReminderIntent]:
    """
    Build the pickup and return reminders for a new rental.

    Args:
        rental: The rental just booked
        clock: Calendar arithmetic
        pickup_lead_hours: How long before pickup the first reminder fires
        return_hour: Local hour on the return day for the second reminder

    Returns:
        List[ReminderIntent]: Pickup reminder, then return reminder
    """
    title = rental.game.title
    return [
        ReminderIntent(
            title="Pickup reminder",
            body=f"Pick up {title} by your scheduled time.",
            fire_at=clock.add_hours(rental.pickup, -pickup_lead_hours),
            identifier=f"pickup_{rental.id}",
        ),
        ReminderIntent(
            title="Return due today",
            body=f"Please return {title} by end of day.",
            fire_at=clock.at_hour(rental.return_date, return_hour),
            identifier=f"return_{rental.id}",
        ),
    ]
