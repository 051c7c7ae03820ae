"""
Pricing rules for single rentals, bundles and the monthly plan.

Everything is computed in ``Decimal`` at full precision; rounding to cents
happens only when an amount is displayed.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Sequence

from boardburrow.data.models import BoardGame

BUNDLE_SIZE = 3
BUNDLE_DAILY_DISCOUNT = Decimal("0.15")
BUNDLE_DEPOSIT_DISCOUNT = Decimal("0.10")

_CENT = Decimal("0.01")
_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "CAD": "CA$"}


@dataclass(frozen=True)
class BundleQuote:
    """Breakdown of a bundle price."""

    subtotal: Decimal
    daily_discount: Decimal
    deposit_total: Decimal
    deposit_discount: Decimal

    @property
    def total(self) -> Decimal:
        return (self.subtotal - self.daily_discount) + (self.deposit_total - self.deposit_discount)


def rental_subtotal(game: BoardGame, days: int) -> Decimal:
    """Daily price times days, without the deposit."""
    return game.daily_price * days


def single_rental_total(game: BoardGame, days: int) -> Decimal:
    """
    Amount due now for renting one game.

    ``days`` must already be inside the allowed range; it is not checked here.
    """
    return rental_subtotal(game, days) + game.deposit


def bundle_quote(
    games: Sequence[BoardGame],
    days: int,
    daily_discount: Decimal = BUNDLE_DAILY_DISCOUNT,
    deposit_discount: Decimal = BUNDLE_DEPOSIT_DISCOUNT,
) -> BundleQuote:
    """Price breakdown for renting ``games`` together for ``days`` days."""
    subtotal = sum((g.daily_price for g in games), Decimal("0")) * days
    deposit_total = sum((g.deposit for g in games), Decimal("0"))
    return BundleQuote(
        subtotal=subtotal,
        daily_discount=subtotal * daily_discount,
        deposit_total=deposit_total,
        deposit_discount=deposit_total * deposit_discount,
    )


def bundle_total(
    games: Sequence[BoardGame],
    days: int,
    daily_discount: Decimal = BUNDLE_DAILY_DISCOUNT,
    deposit_discount: Decimal = BUNDLE_DEPOSIT_DISCOUNT,
) -> Decimal:
    """
    Amount due now for a bundle: 15% off the daily subtotal plus 10% off
    the summed deposits.
    """
    return bundle_quote(games, days, daily_discount, deposit_discount).total


def is_bundle_complete(games: Sequence[BoardGame], size: int = BUNDLE_SIZE) -> bool:
    """True when ``games`` holds exactly ``size`` distinct games."""
    return len(games) == size and len({g.id for g in games}) == size


def bundle_candidates(catalog: Iterable[BoardGame], anchor: BoardGame) -> List[BoardGame]:
    """Games that can be added to a bundle anchored on ``anchor``."""
    return [g for g in catalog if g.id != anchor.id]


def build_bundle(anchor: BoardGame, picks: Sequence[BoardGame], size: int = BUNDLE_SIZE) -> List[BoardGame]:
    """
    Combine the anchor game with the picked extras.

    Returns:
        The anchor followed by the picks, or an empty list while the
        selection is incomplete (wrong count, duplicates, or the anchor
        picked again).
    """
    games = [anchor] + list(picks)
    if not is_bundle_complete(games, size):
        return []
    return games


def round_cents(amount: Decimal) -> Decimal:
    """Round half-up to whole cents."""
    return Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, code: str = "USD") -> str:
    """Render an amount as display currency, e.g. ``$48.97``."""
    rounded = round_cents(amount)
    symbol = _CURRENCY_SYMBOLS.get(code.upper())
    sign = "-" if rounded < 0 else ""
    body = f"{abs(rounded):,.2f}"
    if symbol is None:
        return f"{sign}{body} {code.upper()}"
    return f"{sign}{symbol}{body}"
