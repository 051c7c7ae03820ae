"""
Seed catalog loaded at start-up.

Ids are derived from the titles so that a catalog rebuilt on the next run
matches the games embedded in persisted rentals.
"""
import uuid
from decimal import Decimal
from typing import List, Optional

from .models import BoardGame, Difficulty, Genre

_CATALOG_NAMESPACE = uuid.UUID("6f1c2b1e-8d1a-4c55-9a57-2f6d8e0b4b11")


def _game_id(title: str) -> str:
    return str(uuid.uuid5(_CATALOG_NAMESPACE, title.lower()))


SEED_GAMES: List[BoardGame] = [
    BoardGame(
        id=_game_id("Catan"),
        title="Catan",
        genre=Genre.STRATEGY,
        min_players=3,
        max_players=4,
        min_age=10,
        difficulty=Difficulty.MEDIUM,
        daily_price=Decimal("7.99"),
        deposit=Decimal("25"),
        image_name="Catan",
        description="Trade, build, and settle the island of Catan. Manage resources and outsmart your opponents.",
        rating=4.6,
    ),
    BoardGame(
        id=_game_id("Ticket to Ride"),
        title="Ticket to Ride",
        genre=Genre.FAMILY,
        min_players=2,
        max_players=5,
        min_age=8,
        difficulty=Difficulty.EASY,
        daily_price=Decimal("6.99"),
        deposit=Decimal("20"),
        image_name="ticket to ride",
        description="Collect cards, claim railway routes, and connect cities across the map.",
        rating=4.7,
    ),
    BoardGame(
        id=_game_id("Pandemic"),
        title="Pandemic",
        genre=Genre.COOPERATIVE,
        min_players=2,
        max_players=4,
        min_age=8,
        difficulty=Difficulty.MEDIUM,
        daily_price=Decimal("7.49"),
        deposit=Decimal("25"),
        image_name="Pandemic",
        description="Work together to stop global outbreaks. Each player has a unique role to help cure diseases.",
        rating=4.5,
    ),
    BoardGame(
        id=_game_id("Codenames"),
        title="Codenames",
        genre=Genre.PARTY,
        min_players=4,
        max_players=8,
        min_age=10,
        difficulty=Difficulty.EASY,
        daily_price=Decimal("5.49"),
        deposit=Decimal("15"),
        image_name="Codenames",
        description="Give one-word clues to help your team find the right agents before the other team.",
        rating=4.4,
    ),
    BoardGame(
        id=_game_id("Chess"),
        title="Chess",
        genre=Genre.ABSTRACT,
        min_players=2,
        max_players=2,
        min_age=6,
        difficulty=Difficulty.HARD,
        daily_price=Decimal("4.99"),
        deposit=Decimal("30"),
        image_name="Chess",
        description="Classic strategy game. Outmaneuver your opponent and checkmate the king.",
        rating=4.9,
    ),
]


def load_catalog() -> List[BoardGame]:
    """Return a fresh list of the seed games."""
    return list(SEED_GAMES)


def find_by_title(games: List[BoardGame], title: str) -> Optional[BoardGame]:
    """Find a game by case-insensitive exact title."""
    wanted = title.strip().lower()
    for game in games:
        if game.title.lower() == wanted:
            return game
    return None
