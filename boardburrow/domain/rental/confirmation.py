"""
Confirmation codes printed on rental receipts.

Format: two-letter prefix, issue date as YYMMDD, a hyphen, then six
characters from an alphabet without 0, 1, O or I, e.g. ``BB250825-7XK9QH``.
Codes are not checked for collisions; with 32**6 suffixes per prefix and
day the chance of a repeat for one local user is negligible.
"""

import random
import re
from typing import Optional

from boardburrow.utils.clock import Clock

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_SUFFIX_LENGTH = 6
CODE_PATTERN = re.compile(r"^[A-Z]{2}\d{6}-[A-HJ-NP-Z2-9]{6}$")


class ConfirmationCodeGenerator:
    """Issues confirmation codes stamped with the clock's current date."""

    def __init__(self, clock: Clock, prefix: str = "BB", rng: Optional[random.Random] = None):
        self.clock = clock
        self.prefix = prefix.upper()
        self._rng = rng or random.SystemRandom()

    def generate(self) -> str:
        date_part = self.clock.now().strftime("%y%m%d")
        suffix = "".join(self._rng.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
        return f"{self.prefix}{date_part}-{suffix}"


def is_valid_confirmation_code(code: Optional[str]) -> bool:
    """Check a code against the receipt format."""
    return bool(code) and CODE_PATTERN.match(code) is not None
