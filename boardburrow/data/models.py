"""
Data models for persistence and business logic.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Genre(str, Enum):
    """Catalog genres."""

    STRATEGY = "strategy"
    FAMILY = "family"
    PARTY = "party"
    COOPERATIVE = "cooperative"
    ABSTRACT = "abstract"
    THEMATIC = "thematic"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Difficulty(str, Enum):
    """How hard a game is to learn."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class PurchasePlan(str, Enum):
    """Ways a customer can pay for games."""

    ONE_TIME = "one_time"
    BUNDLE = "bundle"
    SUBSCRIPTION = "subscription"

    @property
    def label(self) -> str:
        return {
            PurchasePlan.ONE_TIME: "One-time",
            PurchasePlan.BUNDLE: "Bundle (3 games)",
            PurchasePlan.SUBSCRIPTION: "Monthly Unlimited",
        }[self]


class RentalStatus(str, Enum):
    """Rental lifecycle states, in the only order they may be visited."""

    BOOKED = "booked"
    PICKED_UP = "picked_up"
    RETURNED = "returned"

    @property
    def rank(self) -> int:
        return list(RentalStatus).index(self)


class PaymentStatus(str, Enum):
    """Mock payment states."""

    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


class AppStage(str, Enum):
    """Top-level onboarding screens."""

    AUTH = "auth"
    PROFILE = "profile"
    LOCATION = "location"
    CELEBRATION = "celebration"
    MAIN = "main"
    UNAVAILABLE = "unavailable"


class BoardGame(BaseModel):
    """Immutable catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = Field(..., min_length=1)
    genre: Genre
    min_players: int = Field(..., gt=0)
    max_players: int = Field(..., gt=0)
    min_age: int = Field(default=0, ge=0)
    difficulty: Difficulty
    daily_price: Decimal = Field(..., gt=0)
    deposit: Decimal = Field(default=Decimal("0"), ge=0)
    image_name: str = ""
    description: str = ""
    rating: float = Field(default=0.0, ge=0.0, le=5.0)

    @model_validator(mode="after")
    def check_player_range(self) -> "BoardGame":
        if self.min_players > self.max_players:
            raise ValueError(
                f"min_players ({self.min_players}) cannot exceed max_players ({self.max_players})"
            )
        return self

    @property
    def players_text(self) -> str:
        return f"{self.min_players}-{self.max_players} players"

    @property
    def age_text(self) -> str:
        return f"Ages {self.min_age}+"

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BoardGame':
        """Create a model from a dictionary."""
        return cls.model_validate(data)


class Rental(BaseModel):
    """A booked, in-progress or finished rental of one game.

    ``game`` is a snapshot taken when the rental was created, so later
    catalog changes never touch existing rentals.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    game: BoardGame
    pickup: datetime
    return_date: datetime
    days: int = Field(..., ge=1, le=14)
    daily_price: Decimal
    deposit: Decimal
    total_paid: Decimal
    status: RentalStatus = RentalStatus.BOOKED
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    confirmation_code: Optional[str] = None

    @property
    def is_returned(self) -> bool:
        return self.status == RentalStatus.RETURNED

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Rental':
        """Create a model from a dictionary."""
        return cls.model_validate(data)


class RentalState(BaseModel):
    """Active and past rentals, persisted together as one record."""

    active: List[Rental] = Field(default_factory=list)
    past: List[Rental] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_disjoint(self) -> "RentalState":
        overlap = {r.id for r in self.active} & {r.id for r in self.past}
        if overlap:
            raise ValueError(f"Rentals cannot be both active and past: {sorted(overlap)}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RentalState':
        """Create a model from a dictionary."""
        return cls.model_validate(data)


class UserProfile(BaseModel):
    """The single local user's details."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProfile':
        """Create a model from a dictionary."""
        return cls.model_validate(data)


class Celebration(BaseModel):
    """The celebration screen in progress, so a restart can resume its timer."""

    started_at: Optional[datetime] = None
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Celebration':
        """Create a model from a dictionary."""
        return cls.model_validate(data)


class Subscription(BaseModel):
    """Monthly unlimited plan (mocked payment)."""

    active: bool = False
    monthly_price: Optional[Decimal] = None
    activated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Subscription':
        """Create a model from a dictionary."""
        return cls.model_validate(data)
