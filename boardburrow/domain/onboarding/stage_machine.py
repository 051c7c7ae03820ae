"""
Onboarding stage machine.

Stages run ``auth -> profile -> location -> celebration -> main``. A location
outside the service area leads to ``unavailable`` instead of the
celebration. The only ways back are signing out (to ``auth``) and changing
location from ``unavailable`` (to ``location``).
"""

import random
from enum import Enum
from typing import Dict, FrozenSet, Optional

from boardburrow.config.logging_config import get_logger
from boardburrow.data.models import AppStage, UserProfile
from boardburrow.domain.onboarding.location_gate import (
    DEFAULT_SUPPORTED_LOCATION,
    is_supported_location,
)
from boardburrow.utils.error_handling import StageTransitionError

logger = get_logger(__name__)

BOARD_GAME_FACTS = [
    "Do you know board games sharpen strategic thinking and planning?",
    "Do you know board games boost memory, attention, and focus skills?",
    "Do you know playing together builds stronger communication?",
    "Do you know board games reduce screen time in a fun way?",
    "Do you know cooperative games encourage teamwork and trust?",
    "Do you know board games teach patience, turn-taking, and fair play?",
    "Do you know board games connect people across generations?",
    "Do you know board games inspire creativity and storytelling?",
    "Do you know many games improve math and logic practice?",
    "Do you know playing board games create traditions and joyful shared moments?",
]

# Stages each command may be issued from
ALLOWED_STAGES: Dict[str, FrozenSet[AppStage]] = {
    "signed_in": frozenset({AppStage.AUTH}),
    "complete_profile": frozenset({AppStage.PROFILE}),
    "set_location": frozenset({AppStage.LOCATION, AppStage.MAIN}),
    "finish_celebration": frozenset({AppStage.CELEBRATION}),
    "change_location": frozenset({AppStage.UNAVAILABLE}),
    "sign_out": frozenset({AppStage.MAIN, AppStage.UNAVAILABLE}),
    "update_profile": frozenset({AppStage.MAIN}),
}

EDITABLE_PROFILE_FIELDS = ("first_name", "last_name", "email", "phone", "location")


class AuthStep(Enum):
    """Transient sub-step of the auth screen; never persisted."""

    CHOOSER = "chooser"
    EMAIL = "email"

    def back(self) -> "AuthStep":
        return AuthStep.CHOOSER


def profile_fields_complete(first: str, last: str, phone: str) -> bool:
    """True when first name, last name and phone are all non-blank."""
    return all(value and value.strip() for value in (first, last, phone))


def welcome_message(profile: UserProfile) -> str:
    return f"Welcome, {profile.first_name} {profile.last_name}!"


class OnboardingStageMachine:
    """Holds the current stage and the profile fields onboarding collects."""

    def __init__(
        self,
        stage: AppStage = AppStage.AUTH,
        profile: Optional[UserProfile] = None,
        supported_location: str = DEFAULT_SUPPORTED_LOCATION,
        rng: Optional[random.Random] = None,
        celebration_message: str = "",
    ):
        self.stage = stage
        self.profile = profile or UserProfile()
        self.supported_location = supported_location
        self.celebration_message = celebration_message
        self._rng = rng or random.Random()

    def can(self, command: str) -> bool:
        """Whether ``command`` is allowed from the current stage."""
        return self.stage in ALLOWED_STAGES.get(command, frozenset())

    def signed_in(self, email: Optional[str], name: Optional[str] = None) -> AppStage:
        """
        Finish sign-in.

        Identity providers may offer a display name; it is ignored so the
        user always types their real name on the profile screen.
        """
        self._require("signed_in")
        if email:
            self.profile.email = email
        self.profile.first_name = ""
        self.profile.last_name = ""
        return self._move_to(AppStage.PROFILE)

    def complete_profile(self, first: str, last: str, phone: str) -> AppStage:
        """Store the profile fields. Callers reject blank values beforehand."""
        self._require("complete_profile")
        self.profile.first_name = first
        self.profile.last_name = last
        self.profile.phone = phone
        return self._move_to(AppStage.LOCATION)

    def set_location(self, location: str) -> AppStage:
        """
        Record the user's location and apply the service-area gate.

        A supported location leads to the celebration with a random fact;
        anything else, including an empty string, leads to ``unavailable``
        with the rejected text kept on the profile for display.
        """
        self._require("set_location")
        self.profile.location = location
        if is_supported_location(location, self.supported_location):
            self.celebration_message = self._rng.choice(BOARD_GAME_FACTS)
            return self._move_to(AppStage.CELEBRATION)
        return self._move_to(AppStage.UNAVAILABLE)

    def finish_celebration(self) -> bool:
        """
        Leave the celebration for the main stage.

        Driven by a timer that cannot be cancelled, so a late firing after
        the stage already changed is ignored.

        Returns:
            bool: True if the stage changed
        """
        if not self.can("finish_celebration"):
            logger.debug(f"Celebration timer fired in stage {self.stage.value}, ignoring")
            return False
        self._move_to(AppStage.MAIN)
        return True

    def change_location(self) -> AppStage:
        """Go back from ``unavailable`` to the location screen."""
        self._require("change_location")
        return self._move_to(AppStage.LOCATION)

    def sign_out(self) -> AppStage:
        """Clear the profile and return to the auth screen."""
        self._require("sign_out")
        self.profile = UserProfile()
        self.celebration_message = ""
        return self._move_to(AppStage.AUTH)

    def update_profile(self, **fields: str) -> UserProfile:
        """
        Edit profile fields from the profile screen.

        Raises:
            ValueError: If an unknown field is given
        """
        self._require("update_profile")
        unknown = set(fields) - set(EDITABLE_PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")
        for name, value in fields.items():
            setattr(self.profile, name, value)
        return self.profile

    def _require(self, command: str) -> None:
        if not self.can(command):
            raise StageTransitionError(command, self.stage)

    def _move_to(self, stage: AppStage) -> AppStage:
        previous = self.stage
        self.stage = stage
        logger.info(f"Stage {previous.value} -> {stage.value}")
        return stage
