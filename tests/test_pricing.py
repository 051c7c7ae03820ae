# tests/test_pricing.py
from decimal import Decimal

import pytest

from boardburrow.data.models import Genre
from boardburrow.domain.catalog import search_catalog
from boardburrow.domain.pricing import (
    build_bundle,
    bundle_candidates,
    bundle_quote,
    bundle_total,
    format_currency,
    is_bundle_complete,
    round_cents,
    single_rental_total,
)
from tests.conftest import make_game


@pytest.mark.parametrize("days", [1, 3, 7, 14])
def test_single_rental_total_is_daily_price_times_days_plus_deposit(days):
    """Test the single rental formula across the allowed range"""
    game = make_game(daily_price="6.99", deposit="20")
    assert single_rental_total(game, days) == Decimal("6.99") * days + Decimal("20")


def test_single_rental_example():
    """Test the 7.99/day, 25 deposit, 3 day example"""
    game = make_game(daily_price="7.99", deposit="25")
    total = single_rental_total(game, 3)

    assert total == Decimal("48.97")
    assert format_currency(total) == "$48.97"


def test_bundle_example_keeps_full_precision():
    """Test three identically priced games for two days"""
    games = [make_game(f"Game {i}", "7.99", "25") for i in range(3)]
    quote = bundle_quote(games, 2)

    assert quote.subtotal == Decimal("47.94")
    assert quote.subtotal - quote.daily_discount == Decimal("40.749")
    assert quote.deposit_total == Decimal("75")
    assert quote.deposit_total - quote.deposit_discount == Decimal("67.5")
    assert bundle_total(games, 2) == Decimal("108.249")
    assert round_cents(bundle_total(games, 2)) == Decimal("108.25")


def test_bundle_total_matches_discount_formula(catalog):
    """Test 85% of the daily subtotal plus 90% of the deposits"""
    games = catalog[:3]
    days = 5
    expected = Decimal("0.85") * (sum(g.daily_price for g in games) * days) + \
        Decimal("0.90") * sum(g.deposit for g in games)

    assert bundle_total(games, days) == expected


def test_bundle_custom_discounts():
    """Test that discounts can be overridden"""
    games = [make_game(f"Game {i}", "10", "10") for i in range(3)]
    assert bundle_total(games, 1, Decimal("0"), Decimal("0")) == Decimal("60")


def test_bundle_completeness():
    """Test that a bundle needs exactly three distinct games"""
    a, b, c = (make_game(f"Game {i}") for i in range(3))

    assert is_bundle_complete([a, b, c])
    assert not is_bundle_complete([a, b])
    assert not is_bundle_complete([a, b, b])
    assert not is_bundle_complete([a, b, c, make_game("Extra")])


def test_build_bundle(catalog):
    """Test combining the anchor with two picks"""
    anchor = catalog[0]
    candidates = bundle_candidates(catalog, anchor)

    assert anchor not in candidates
    assert len(candidates) == len(catalog) - 1

    assert build_bundle(anchor, candidates[:2]) == [anchor] + candidates[:2]
    assert build_bundle(anchor, candidates[:1]) == []
    assert build_bundle(anchor, [candidates[0], candidates[0]]) == []
    assert build_bundle(anchor, [anchor, candidates[0]]) == []


def test_round_cents_rounds_half_up():
    """Test half-up rounding to cents"""
    assert round_cents(Decimal("0.005")) == Decimal("0.01")
    assert round_cents(Decimal("2.344")) == Decimal("2.34")


def test_format_currency():
    """Test currency rendering"""
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("-3")) == "-$3.00"
    assert format_currency(Decimal("5"), "EUR") == "€5.00"
    assert format_currency(Decimal("5"), "JPY") == "5.00 JPY"


def test_search_catalog(catalog):
    """Test title search and genre filter"""
    assert [g.title for g in search_catalog(catalog, "CAT")] == ["Catan"]
    assert [g.title for g in search_catalog(catalog, "", Genre.PARTY)] == ["Codenames"]
    assert search_catalog(catalog, "") == catalog
    assert search_catalog(catalog, "chess", Genre.FAMILY) == []
