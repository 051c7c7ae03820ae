# tests/test_rental_manager.py
import random
from datetime import datetime
from decimal import Decimal

import pytest

from boardburrow.data.models import PaymentStatus, RentalState, RentalStatus
from boardburrow.domain.rental.confirmation import (
    CODE_ALPHABET,
    CODE_PATTERN,
    ConfirmationCodeGenerator,
    is_valid_confirmation_code,
)
from boardburrow.domain.rental.manager import RentalLifecycleManager
from boardburrow.utils.error_handling import InvalidDurationError
from tests.conftest import make_game

PICKUP = datetime(2025, 8, 25, 12, 30)


@pytest.fixture
def manager(clock):
    """Rental manager with a seeded code generator"""
    return RentalLifecycleManager(
        clock=clock,
        code_generator=ConfirmationCodeGenerator(clock, prefix="BB", rng=random.Random(1)),
    )


def test_create_rental(manager, game):
    """Test that a new rental is booked, paid and active"""
    rental = manager.create_rental(game, PICKUP, 3)

    assert rental.status == RentalStatus.BOOKED
    assert rental.payment_status == PaymentStatus.PAID
    assert rental.days == 3
    assert rental.pickup == PICKUP
    assert rental.return_date == datetime(2025, 8, 28, 12, 30)
    assert rental.daily_price == Decimal("7.99")
    assert rental.deposit == Decimal("25")
    assert rental.total_paid == Decimal("48.97")
    assert manager.active_rentals == [rental]
    assert manager.past_rentals == []


def test_confirmation_code_format(manager, game):
    """Test prefix, issue date and unambiguous suffix"""
    rental = manager.create_rental(game, PICKUP, 1)
    code = rental.confirmation_code

    assert CODE_PATTERN.match(code)
    assert code.startswith("BB250825-")
    assert all(ch in CODE_ALPHABET for ch in code.split("-")[1])
    assert is_valid_confirmation_code(code)


def test_code_alphabet_excludes_confusable_characters():
    """Test that 0, 1, O and I never appear in codes"""
    assert len(CODE_ALPHABET) == 32
    for ch in "01OI":
        assert ch not in CODE_ALPHABET
    assert not is_valid_confirmation_code("BB250825-0OI1AA")
    assert not is_valid_confirmation_code(None)


def test_rental_embeds_game_snapshot(manager, game):
    """Test that the rental keeps its own copy of the game"""
    rental = manager.create_rental(game, PICKUP, 2)

    assert rental.game == game
    assert rental.game is not game


@pytest.mark.parametrize("days", [0, -1, 15, 100])
def test_create_rental_rejects_invalid_duration(manager, game, days):
    """Test that rentals outside 1-14 days are rejected"""
    with pytest.raises(InvalidDurationError) as exc_info:
        manager.create_rental(game, PICKUP, days)

    assert exc_info.value.days == days
    assert manager.active_rentals == []


def test_create_rental_rejects_non_integer_days(manager, game):
    """Test that booleans and floats are not day counts"""
    with pytest.raises(InvalidDurationError):
        manager.create_rental(game, PICKUP, True)
    with pytest.raises(InvalidDurationError):
        manager.create_rental(game, PICKUP, 2.5)


@pytest.mark.parametrize("days", [1, 14])
def test_create_rental_accepts_range_bounds(manager, game, days):
    """Test the inclusive bounds"""
    assert manager.create_rental(game, PICKUP, days).days == days


def test_reminders_for_rental(manager, game):
    """Test the pickup and return reminder intents"""
    rental = manager.create_rental(game, PICKUP, 3)
    pickup_reminder, return_reminder = manager.reminders_for(rental)

    assert pickup_reminder.identifier == f"pickup_{rental.id}"
    assert pickup_reminder.fire_at == datetime(2025, 8, 25, 11, 30)
    assert game.title in pickup_reminder.body

    assert return_reminder.identifier == f"return_{rental.id}"
    assert return_reminder.title == "Return due today"
    assert return_reminder.fire_at == datetime(2025, 8, 28, 18, 0)


def test_mark_picked_up(manager, game):
    """Test advancing a booked rental"""
    rental = manager.create_rental(game, PICKUP, 2)
    updated = manager.mark_picked_up(rental)

    assert updated.status == RentalStatus.PICKED_UP
    assert manager.active_rentals[0].status == RentalStatus.PICKED_UP
    # A second pick-up leaves it where it is
    assert manager.mark_picked_up(rental).status == RentalStatus.PICKED_UP


def test_mark_picked_up_unknown_rental_is_noop(manager, game):
    """Test that a stale rental reference is ignored"""
    other = RentalLifecycleManager(manager.clock, manager.code_generator)
    stranger = other.create_rental(game, PICKUP, 2)
    manager.create_rental(game, PICKUP, 2)

    assert manager.mark_picked_up(stranger) is None
    assert manager.active_rentals[0].status == RentalStatus.BOOKED


def test_mark_returned_moves_rental_once(manager, game):
    """Test the active -> past move and deposit refund"""
    rental = manager.create_rental(game, PICKUP, 2)
    manager.mark_picked_up(rental)

    returned = manager.mark_returned(rental)

    assert returned.status == RentalStatus.RETURNED
    assert returned.payment_status == PaymentStatus.REFUNDED
    assert manager.active_rentals == []
    assert manager.past_rentals == [returned]

    assert manager.mark_returned(rental) is None
    assert len(manager.past_rentals) == 1
    assert manager.mark_picked_up(rental) is None
    assert manager.past_rentals[0].status == RentalStatus.RETURNED


def test_past_rentals_most_recent_first(manager, game):
    """Test that returned rentals are prepended"""
    first = manager.create_rental(game, PICKUP, 1)
    second = manager.create_rental(make_game("Other"), PICKUP, 1)

    manager.mark_returned(first)
    manager.mark_returned(second)

    assert [r.id for r in manager.past_rentals] == [second.id, first.id]


def test_active_and_past_stay_disjoint(manager, game):
    """Test that no id is ever in both collections"""
    rentals = [manager.create_rental(game, PICKUP, d) for d in (1, 2, 3)]
    manager.mark_returned(rentals[1])

    active_ids = {r.id for r in manager.active_rentals}
    past_ids = {r.id for r in manager.past_rentals}
    assert active_ids.isdisjoint(past_ids)
    assert active_ids | past_ids == {r.id for r in rentals}


def test_create_bundle_rentals(manager):
    """Test one rental per bundle game"""
    games = [make_game(f"Game {i}") for i in range(3)]
    rentals = manager.create_bundle_rentals(games, PICKUP, 2)

    assert [r.game.title for r in rentals] == ["Game 0", "Game 1", "Game 2"]
    assert len(manager.active_rentals) == 3
    assert len({r.confirmation_code for r in rentals}) == 3


def test_snapshot_and_load(manager, game, clock):
    """Test rebuilding a manager from its snapshot"""
    kept = manager.create_rental(game, PICKUP, 2)
    done = manager.create_rental(game, PICKUP, 4)
    manager.mark_returned(done)

    state = manager.snapshot()
    restored = RentalLifecycleManager(clock, manager.code_generator, state=state)

    assert restored.active_rentals == [kept]
    assert restored.past_rentals[0].id == done.id
    assert restored.find(done.id).status == RentalStatus.RETURNED
    assert restored.find_active(done.id) is None
    assert restored.snapshot() == state
    assert RentalLifecycleManager(clock, manager.code_generator, state=RentalState()).active_rentals == []
