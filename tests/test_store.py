# tests/test_store.py
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from boardburrow.data.memory_repository import InMemoryRepository
from boardburrow.data.models import AppStage, RentalStatus
from boardburrow.data.persistence import Persistence
from boardburrow.domain.store import AppStore
from boardburrow.events.event_interface import EventType
from boardburrow.utils.error_handling import InvalidDurationError, StageTransitionError
from tests.conftest import NOW, make_game

PICKUP = NOW + timedelta(hours=2)


class FailingWrites(InMemoryRepository):
    """Repository that reads fine but cannot write"""

    def set_many(self, records):
        raise OSError("read-only filesystem")


def record_events(store):
    events = []
    store.events.on_any(events.append)
    return events


def test_fresh_store_starts_at_auth(store):
    """Test the empty initial state"""
    assert store.stage == AppStage.AUTH
    assert store.active_rentals == []
    assert store.past_rentals == []
    assert store.has_subscription is False
    assert [g.title for g in store.catalog][:2] == ["Catan", "Ticket to Ride"]


def test_celebration_timer_enters_main(store, scheduler, config):
    """Test that the celebration leaves for main after the delay"""
    store.signed_in("ada@example.com")
    store.complete_profile("Ada", "Lovelace", "407-555-0100")
    assert store.set_location("Orlando, FL") == AppStage.CELEBRATION
    assert store.celebration_message

    assert [delay for delay, _ in scheduler.pending] == [config.onboarding.celebration_delay_seconds]
    assert scheduler.run_pending() == 1
    assert store.stage == AppStage.MAIN


def test_late_celebration_timer_is_ignored(store, scheduler):
    """Test that a timer firing after sign-out does nothing"""
    store.signed_in("ada@example.com")
    store.complete_profile("Ada", "Lovelace", "1")
    store.set_location("Orlando")
    store.finish_celebration()
    store.sign_out()

    scheduler.run_pending()

    assert store.stage == AppStage.AUTH


def test_unsupported_location_skips_timer(store, scheduler):
    """Test the unavailable branch"""
    store.signed_in("ada@example.com")
    store.complete_profile("Ada", "Lovelace", "1")

    assert store.set_location("Nowhere") == AppStage.UNAVAILABLE
    assert scheduler.pending == []
    assert store.change_location() == AppStage.LOCATION


def test_state_survives_restart(main_store, make_store, game):
    """Test that a new store on the same storage sees the same state"""
    kept = main_store.create_rental(game, PICKUP, 3)
    done = main_store.create_rental(game, PICKUP, 1)
    main_store.mark_returned(done)
    main_store.activate_subscription()

    reloaded = make_store()

    assert reloaded.stage == AppStage.MAIN
    assert reloaded.profile.full_name == "Ada Lovelace"
    assert reloaded.profile.email == "ada@example.com"
    assert [r.id for r in reloaded.active_rentals] == [kept.id]
    assert [r.id for r in reloaded.past_rentals] == [done.id]
    assert reloaded.has_subscription


def test_restart_during_celebration_reschedules_exit(store, make_store, scheduler):
    """Test that a store loaded mid-celebration still leaves it"""
    store.signed_in("ada@example.com")
    store.complete_profile("Ada", "Lovelace", "1")
    store.set_location("Orlando")
    scheduler.pending.clear()

    reloaded = make_store()

    assert reloaded.stage == AppStage.CELEBRATION
    assert len(scheduler.pending) == 1
    scheduler.run_pending()
    assert reloaded.stage == AppStage.MAIN


def test_restart_resumes_remaining_celebration_time(store, make_store, scheduler, clock):
    """Test that a reload waits only for what is left of the delay"""
    store.signed_in("ada@example.com")
    store.complete_profile("Ada", "Lovelace", "1")
    store.set_location("Orlando")
    message = store.celebration_message
    scheduler.pending.clear()
    clock.advance(seconds=2)

    reloaded = make_store()

    assert reloaded.stage == AppStage.CELEBRATION
    assert [delay for delay, _ in scheduler.pending] == [3.0]
    assert reloaded.celebration_message == message


def test_restart_after_celebration_delay_enters_main(store, make_store, scheduler, clock):
    """Test that a reload after the delay has passed goes straight to main"""
    store.signed_in("ada@example.com")
    store.complete_profile("Ada", "Lovelace", "1")
    store.set_location("Orlando")
    scheduler.pending.clear()
    clock.advance(seconds=6)

    reloaded = make_store()

    assert reloaded.stage == AppStage.MAIN
    assert scheduler.pending == []
    assert make_store().stage == AppStage.MAIN


def test_create_rental_schedules_two_reminders(main_store, notifications, game):
    """Test pickup and return reminders"""
    rental = main_store.create_rental(game, PICKUP, 3)

    identifiers = [n.identifier for n in notifications.scheduled]
    assert identifiers == [f"pickup_{rental.id}", f"return_{rental.id}"]
    assert notifications.scheduled[0].fire_at == PICKUP - timedelta(hours=1)
    assert notifications.scheduled[1].fire_at == datetime(2025, 8, 28, 18, 0)


def test_failing_notifications_do_not_block_booking(make_store, game):
    """Test that reminder failures are logged and the rental stays"""
    notifier = MagicMock()
    notifier.schedule.side_effect = RuntimeError("notification center unavailable")
    store = make_store(notifications=notifier)
    events = record_events(store)

    rental = store.create_rental(game, PICKUP, 2)

    assert store.active_rentals == [rental]
    assert notifier.schedule.call_count == 2
    failed = [e for e in events if e.type == EventType.REMINDER_FAILED]
    assert len(failed) == 2
    assert failed[0].data["error"]["error_type"] == "NotificationError"


def test_store_without_notifications(make_store, game):
    """Test that reminders are optional"""
    store = make_store(notifications=None)
    assert store.create_rental(game, PICKUP, 2).status == RentalStatus.BOOKED


def test_invalid_duration_is_not_persisted(main_store, make_store, game):
    """Test that rejected bookings leave no trace"""
    with pytest.raises(InvalidDurationError):
        main_store.create_rental(game, PICKUP, 15)

    assert main_store.active_rentals == []
    assert make_store().active_rentals == []


def test_bundle_partial_failure_keeps_earlier_rentals(main_store, monkeypatch, game):
    """Test that bundle bookings are not rolled back"""
    games = [make_game("A"), make_game("B"), make_game("C")]
    original = main_store.rentals.create_rental
    calls = []

    def flaky(game, pickup, days):
        calls.append(game.title)
        if len(calls) == 3:
            raise RuntimeError("boom")
        return original(game, pickup, days)

    monkeypatch.setattr(main_store.rentals, "create_rental", flaky)

    with pytest.raises(RuntimeError):
        main_store.create_bundle_rentals(games, PICKUP, 2)

    assert [r.game.title for r in main_store.active_rentals] == ["A", "B"]


def test_bundle_emits_total(main_store):
    """Test the bundle event and per-game rentals"""
    events = record_events(main_store)
    games = [make_game("A"), make_game("B"), make_game("C")]

    rentals = main_store.create_bundle_rentals(games, PICKUP, 2)

    assert len(rentals) == 3
    bundle_events = [e for e in events if e.type == EventType.BUNDLE_CREATED]
    assert len(bundle_events) == 1
    assert bundle_events[0].data["rental_ids"] == [r.id for r in rentals]
    assert Decimal(bundle_events[0].data["total"]) == Decimal("3") * (Decimal("7.99") * 2 + 25)


def test_persistence_failure_is_reported_not_raised(clock, scheduler, notifications, config, game):
    """Test that write failures keep the in-memory state"""
    repository = FailingWrites()
    repository.connect()
    store = AppStore(Persistence(repository), notifications, clock, scheduler, config=config)
    events = record_events(store)

    store.signed_in("ada@example.com")

    assert store.stage == AppStage.PROFILE
    failures = [e for e in events if e.type == EventType.PERSISTENCE_FAILED]
    assert failures and failures[0].data["error_type"] == "PersistenceError"


def test_pickup_and_return_flow(main_store, make_store, game):
    """Test the rental lifecycle through the store"""
    events = record_events(main_store)
    rental = main_store.create_rental(game, PICKUP, 2)

    picked = main_store.mark_picked_up(rental)
    returned = main_store.mark_returned(picked)

    assert returned.status == RentalStatus.RETURNED
    assert main_store.mark_returned(rental) is None
    assert main_store.mark_picked_up(rental) is None
    assert main_store.past_rentals == [returned]

    types = [e.type for e in events if e.type != EventType.STATE_PERSISTED]
    assert types.count(EventType.RENTAL_RETURNED) == 1
    assert make_store().find_rental(rental.id).status == RentalStatus.RETURNED


def test_second_pickup_changes_nothing(main_store, game):
    """Test that picking up twice saves and announces only once"""
    rental = main_store.create_rental(game, PICKUP, 2)
    events = record_events(main_store)

    first = main_store.mark_picked_up(rental)
    second = main_store.mark_picked_up(first)

    assert second.status == RentalStatus.PICKED_UP
    types = [e.type for e in events]
    assert types.count(EventType.RENTAL_PICKED_UP) == 1
    assert types.count(EventType.STATE_PERSISTED) == 1


def test_subscription_is_idempotent(main_store, clock):
    """Test activating the monthly plan"""
    events = record_events(main_store)

    first = main_store.activate_subscription()
    second = main_store.activate_subscription()

    assert first.active
    assert first.monthly_price == Decimal("29.99")
    assert first.activated_at == clock.now()
    assert second == first
    assert [e.type for e in events].count(EventType.SUBSCRIPTION_ACTIVATED) == 1


def test_sign_out_keeps_rentals(main_store, make_store, game):
    """Test that rentals outlive the session"""
    main_store.create_rental(game, PICKUP, 2)
    main_store.sign_out()

    reloaded = make_store()
    assert reloaded.stage == AppStage.AUTH
    assert reloaded.profile.email == ""
    assert len(reloaded.active_rentals) == 1


def test_stage_commands_are_guarded(store):
    """Test that the store propagates stage errors"""
    with pytest.raises(StageTransitionError):
        store.sign_out()
    assert store.finish_celebration() is False


def test_update_profile_persists(main_store, make_store):
    """Test profile edits from main"""
    main_store.update_profile(phone="555-0199")
    assert make_store().profile.phone == "555-0199"


def test_stage_events(store):
    """Test that stage changes are observable"""
    events = record_events(store)
    store.signed_in("ada@example.com")

    changed = [e for e in events if e.type == EventType.STAGE_CHANGED]
    assert changed[0].data["stage"] == "profile"
    assert changed[0].data["profile"]["email"] == "ada@example.com"


def test_queries(main_store, catalog, clock):
    """Test catalog search, quotes and the default pickup"""
    catan = main_store.search_catalog("catan")[0]

    assert main_store.find_game(catan.id) == catan
    assert main_store.find_game("missing") is None
    assert main_store.quote_rental(catan, 3) == Decimal("48.97")
    assert main_store.quote_bundle(catalog[:3], 2).total > 0
    assert main_store.default_pickup() == clock.now() + timedelta(hours=2)
