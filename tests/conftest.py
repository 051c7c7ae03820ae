# tests/conftest.py
import random
from datetime import datetime
from decimal import Decimal

import pytest

from boardburrow.config.settings import Settings, StorageSettings
from boardburrow.data.catalog import load_catalog
from boardburrow.data.memory_repository import InMemoryRepository
from boardburrow.data.models import BoardGame, Difficulty, Genre
from boardburrow.data.persistence import Persistence
from boardburrow.domain.store import AppStore
from boardburrow.events.event_interface import EventEmitter
from boardburrow.services.notification_service import LocalNotificationService
from boardburrow.utils.clock import FixedClock
from boardburrow.utils.timers import ManualScheduler

NOW = datetime(2025, 8, 25, 10, 0)


def make_game(title="Test Game", daily_price="7.99", deposit="25", genre=Genre.STRATEGY):
    """Build a catalog game with the given pricing"""
    return BoardGame(
        title=title,
        genre=genre,
        min_players=2,
        max_players=4,
        min_age=8,
        difficulty=Difficulty.MEDIUM,
        daily_price=Decimal(daily_price),
        deposit=Decimal(deposit),
        description="A game for tests",
        rating=4.0,
    )


@pytest.fixture
def clock():
    """Clock frozen at 2025-08-25 10:00"""
    return FixedClock(NOW)


@pytest.fixture
def scheduler():
    """Scheduler that only runs callbacks on demand"""
    return ManualScheduler()


@pytest.fixture
def notifications():
    """Notification service that records what was scheduled"""
    return LocalNotificationService()


@pytest.fixture
def repository():
    """Connected in-memory repository"""
    repo = InMemoryRepository()
    repo.connect()
    return repo


@pytest.fixture
def persistence(repository):
    return Persistence(repository)


@pytest.fixture
def config():
    """Settings on the in-memory backend"""
    return Settings(storage=StorageSettings(backend="memory"))


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def game():
    return make_game("Catan-like")


@pytest.fixture
def make_store(persistence, notifications, clock, scheduler, config):
    """Factory building stores that share one persistence backend"""

    def _make(**overrides):
        kwargs = dict(
            persistence=persistence,
            notifications=notifications,
            clock=clock,
            scheduler=scheduler,
            emitter=EventEmitter(),
            config=config,
            rng=random.Random(7),
        )
        kwargs.update(overrides)
        return AppStore(**kwargs)

    return _make


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture
def main_store(store):
    """Store that has finished onboarding"""
    store.signed_in("ada@example.com")
    store.complete_profile("Ada", "Lovelace", "407-555-0100")
    store.set_location("Orlando, FL, US")
    store.finish_celebration()
    return store
