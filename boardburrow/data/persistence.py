"""
Persistence adapter for the app store's snapshots.

Five logical records live in the key-value repository:

- ``rental_state_v1``: ``{"active": [...], "past": [...]}``
- ``user_profile_v1``: the user profile
- ``app_stage_v1``: one ``AppStage`` value
- ``subscription_v1``: the monthly plan flag
- ``celebration_v1``: start time and fact of the celebration in progress

Missing or unreadable records load as empty defaults. Write failures are
raised as ``PersistenceError`` and it is up to the caller to decide whether
they matter.
"""
import json
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, TypeVar

from boardburrow.config.logging_config import get_logger
from boardburrow.config.settings import Settings
from boardburrow.utils.error_handling import ErrorSeverity, PersistenceError

from .base_repository import BaseRepository
from .json_repository import JsonFileRepository
from .memory_repository import InMemoryRepository
from .models import AppStage, Celebration, RentalState, Subscription, UserProfile

logger = get_logger(__name__)

STATE_KEY = "rental_state_v1"
PROFILE_KEY = "user_profile_v1"
STAGE_KEY = "app_stage_v1"
SUBSCRIPTION_KEY = "subscription_v1"
CELEBRATION_KEY = "celebration_v1"

T = TypeVar("T")

# Errors a read may hit: backend I/O, closed repository, bad JSON or schema
_READ_ERRORS = (OSError, RuntimeError, ValueError)


@dataclass
class Snapshot:
    """Everything the app store persists, saved as one logical write."""

    state: RentalState = field(default_factory=RentalState)
    profile: UserProfile = field(default_factory=UserProfile)
    stage: AppStage = AppStage.AUTH
    subscription: Subscription = field(default_factory=Subscription)
    celebration: Celebration = field(default_factory=Celebration)

    def to_records(self) -> Dict[str, str]:
        """Serialize the snapshot to repository records."""
        return {
            STATE_KEY: json.dumps(self.state.to_dict()),
            PROFILE_KEY: json.dumps(self.profile.to_dict()),
            STAGE_KEY: self.stage.value,
            SUBSCRIPTION_KEY: json.dumps(self.subscription.to_dict()),
            CELEBRATION_KEY: json.dumps(self.celebration.to_dict()),
        }


class Persistence:
    """Reads and writes app store records through a repository."""

    def __init__(self, repository: BaseRepository):
        """
        Initialize the adapter.

        Args:
            repository: Connected key-value repository
        """
        self.repository = repository

    # ---- reads --------------------------------------------------------

    def load_state(self) -> RentalState:
        return self._load_json(STATE_KEY, RentalState.from_dict, RentalState)

    def load_profile(self) -> UserProfile:
        return self._load_json(PROFILE_KEY, UserProfile.from_dict, UserProfile)

    def load_subscription(self) -> Subscription:
        return self._load_json(SUBSCRIPTION_KEY, Subscription.from_dict, Subscription)

    def load_celebration(self) -> Celebration:
        return self._load_json(CELEBRATION_KEY, Celebration.from_dict, Celebration)

    def load_stage(self) -> AppStage:
        raw = self._read(STAGE_KEY)
        if raw is None:
            return AppStage.AUTH
        try:
            return AppStage(raw)
        except ValueError:
            logger.warning(f"Unknown stage '{raw}' in store, starting at auth")
            return AppStage.AUTH

    def load_snapshot(self) -> Snapshot:
        """Load every record, substituting defaults for anything unreadable."""
        return Snapshot(
            state=self.load_state(),
            profile=self.load_profile(),
            stage=self.load_stage(),
            subscription=self.load_subscription(),
            celebration=self.load_celebration(),
        )

    # ---- writes -------------------------------------------------------

    def save_state(self, state: RentalState) -> None:
        self._write({STATE_KEY: json.dumps(state.to_dict())}, "save_state")

    def save_profile(self, profile: UserProfile) -> None:
        self._write({PROFILE_KEY: json.dumps(profile.to_dict())}, "save_profile")

    def save_stage(self, stage: AppStage) -> None:
        self._write({STAGE_KEY: stage.value}, "save_stage")

    def save_subscription(self, subscription: Subscription) -> None:
        self._write({SUBSCRIPTION_KEY: json.dumps(subscription.to_dict())}, "save_subscription")

    def save_celebration(self, celebration: Celebration) -> None:
        self._write({CELEBRATION_KEY: json.dumps(celebration.to_dict())}, "save_celebration")

    def save_snapshot(self, snapshot: Snapshot) -> None:
        """Write all records in one repository call."""
        self._write(snapshot.to_records(), "save_snapshot")

    # ---- helpers ------------------------------------------------------

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.repository.get(key)
        except _READ_ERRORS as e:
            self.repository.handle_db_error(e, f"get:{key}")
            return None

    def _load_json(self, key: str, parse: Callable[[dict], T], default: Callable[[], T]) -> T:
        raw = self._read(key)
        if raw is None:
            return default()
        try:
            return parse(json.loads(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"Record {key} is corrupt, using defaults: {e}")
            return default()

    def _write(self, records: Dict[str, str], operation: str) -> None:
        try:
            self.repository.set_many(records)
        except Exception as e:
            self.repository.handle_db_error(e, operation)
            raise PersistenceError(
                f"Failed to {operation.replace('_', ' ')}",
                severity=ErrorSeverity.WARNING,
                cause=e,
                details={"keys": sorted(records)},
            ) from e


def create_repository(config: Settings) -> BaseRepository:
    """
    Build and connect the repository selected in the settings.

    Args:
        config: Application settings

    Returns:
        BaseRepository: A connected repository
    """
    if config.storage.backend == "json":
        repository: BaseRepository = JsonFileRepository({"path": config.storage_path})
    else:
        repository = InMemoryRepository()
    repository.connect()
    return repository
