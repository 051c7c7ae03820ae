"""
Command-line interface for the BoardBurrow rental engine.

Each invocation runs one command against a JSON-file store, so a sequence of
invocations walks through onboarding and the rental lifecycle the way the
app's screens would.
"""

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from boardburrow.application import create_app_store
from boardburrow.config.logging_config import configure_logging, get_logger
from boardburrow.config.settings import Settings, StorageSettings
from boardburrow.data.catalog import find_by_title
from boardburrow.data.models import AppStage, BoardGame, Genre, PurchasePlan, Rental
from boardburrow.domain.onboarding.stage_machine import profile_fields_complete, welcome_message
from boardburrow.domain.pricing import build_bundle, format_currency
from boardburrow.domain.store import AppStore
from boardburrow.events.event_interface import Event, EventEmitter, EventHandler, EventType
from boardburrow.services.location_service import StaticLocationService
from boardburrow.utils.error_handling import AppError
from boardburrow.utils.timers import ManualScheduler

logger = get_logger(__name__)


class CliInterface(EventHandler):
    """
    Terminal rendering of store state and events.

    Registers on the store's emitter so that every change a command causes
    is echoed as one line.
    """

    def __init__(self, emitter: EventEmitter, color_output: bool = True, out: Optional[TextIO] = None):
        """
        Initialize the CLI interface.

        Args:
            emitter: Emitter of the store being driven
            color_output: Whether to use colored output
            out: Stream to write to, defaults to stdout
        """
        self.out = out or sys.stdout
        self.color_output = color_output and self._supports_color()
        self.currency = "USD"

        # Terminal colors
        if self.color_output:
            self.RESET = "\033[0m"
            self.BOLD = "\033[1m"
            self.RED = "\033[31m"
            self.GREEN = "\033[32m"
            self.YELLOW = "\033[33m"
            self.GRAY = "\033[90m"
        else:
            self.RESET = ""
            self.BOLD = ""
            self.RED = ""
            self.GREEN = ""
            self.YELLOW = ""
            self.GRAY = ""

        super().__init__(emitter)

    def register_handlers(self) -> None:
        self.emitter.on(EventType.STAGE_CHANGED, self._on_stage_changed)
        self.emitter.on(EventType.REMINDER_SCHEDULED, self._on_reminder_scheduled)
        self.emitter.on(EventType.REMINDER_FAILED, self._on_reminder_failed)
        self.emitter.on(EventType.PERSISTENCE_FAILED, self._on_persistence_failed)

    def unregister_handlers(self) -> None:
        self.emitter.off(EventType.STAGE_CHANGED, self._on_stage_changed)
        self.emitter.off(EventType.REMINDER_SCHEDULED, self._on_reminder_scheduled)
        self.emitter.off(EventType.REMINDER_FAILED, self._on_reminder_failed)
        self.emitter.off(EventType.PERSISTENCE_FAILED, self._on_persistence_failed)

    # ---- event handlers ----------------------------------------------

    def _on_stage_changed(self, event: Event) -> None:
        self.line(f"{self.GRAY}stage -> {event.data.get('stage')}{self.RESET}")

    def _on_reminder_scheduled(self, event: Event) -> None:
        reminder = event.data.get("reminder", {})
        self.line(f"{self.GRAY}reminder '{reminder.get('title')}' at {reminder.get('fire_at')}{self.RESET}")

    def _on_reminder_failed(self, event: Event) -> None:
        reminder = event.data.get("reminder", {})
        self.line(f"{self.YELLOW}could not schedule reminder {reminder.get('identifier')}{self.RESET}")

    def _on_persistence_failed(self, event: Event) -> None:
        self.line(f"{self.YELLOW}warning: state not saved ({event.data.get('message')}){self.RESET}")

    # ---- rendering ---------------------------------------------------

    def line(self, text: str = "") -> None:
        print(text, file=self.out)

    def error(self, text: str) -> None:
        self.line(f"{self.RED}error: {text}{self.RESET}")

    def money(self, amount) -> str:
        return format_currency(amount, self.currency)

    def print_status(self, store: AppStore) -> None:
        profile = store.profile
        self.line(f"{self.BOLD}Stage:{self.RESET} {store.stage.value}")
        if profile.first_name or profile.last_name:
            self.line(f"Name: {profile.full_name}")
        if profile.email:
            self.line(f"Email: {profile.email}")
        if profile.location:
            self.line(f"Location: {profile.location}")
        if store.stage == AppStage.CELEBRATION:
            self.line(welcome_message(profile))
            self.line(store.celebration_message)
        if store.stage == AppStage.UNAVAILABLE:
            self.line(f"Sorry, we currently do not have service in \"{profile.location}\".")
        self.line(f"Subscription: {'active' if store.has_subscription else 'none'}")
        self.line(f"Active rentals: {len(store.active_rentals)}, past rentals: {len(store.past_rentals)}")

    def print_catalog(self, games: Sequence[BoardGame]) -> None:
        if not games:
            self.line("No games. Try a different search or filter.")
            return
        for game in games:
            self.line(
                f"{self.BOLD}{game.title}{self.RESET}  {game.genre.label} / {game.difficulty.label}  "
                f"{game.players_text}, {game.age_text}  "
                f"{self.money(game.daily_price)}/day + {self.money(game.deposit)} deposit  "
                f"rating {game.rating:.1f}"
            )

    def print_rental(self, rental: Rental, pickup_address: str = "") -> None:
        self.line(f"{self.GREEN}{rental.confirmation_code or '-'}{self.RESET}  {rental.game.title}")
        self.line(f"  id:      {rental.id}")
        if pickup_address:
            self.line(f"  at:      {pickup_address}")
        self.line(f"  pickup:  {rental.pickup.strftime('%Y-%m-%d %H:%M')}")
        self.line(f"  return:  {rental.return_date.strftime('%Y-%m-%d')} ({rental.days}d)")
        self.line(f"  paid:    {self.money(rental.total_paid)} "
                  f"({self.money(rental.daily_price)}/day, {self.money(rental.deposit)} deposit)")
        self.line(f"  status:  {rental.status.value}, payment {rental.payment_status.value}")

    def _supports_color(self) -> bool:
        """Check if the terminal supports colors."""
        if os.environ.get("NO_COLOR"):
            return False
        return hasattr(self.out, "isatty") and self.out.isatty()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="boardburrow", description="BoardBurrow board-game rentals")
    parser.add_argument("--store", help="Path of the JSON store file")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show the current stage and profile")

    catalog = sub.add_parser("catalog", help="List games")
    catalog.add_argument("--search", default="", help="Title search")
    catalog.add_argument("--genre", choices=[g.value for g in Genre], help="Genre filter")

    sign_in = sub.add_parser("sign-in", help="Sign in with an email address")
    sign_in.add_argument("email")

    profile = sub.add_parser("profile", help="Complete the profile")
    profile.add_argument("first")
    profile.add_argument("last")
    profile.add_argument("phone")

    location = sub.add_parser("location", help="Set the location (City, Region, Country)")
    location.add_argument("text", nargs="?", default="", help="Location text; empty skips")

    locate = sub.add_parser("locate", help="Resolve the location from place parts")
    locate.add_argument("--city", required=True)
    locate.add_argument("--region")
    locate.add_argument("--country")

    sub.add_parser("change-location", help="Go back to the location step")
    sub.add_parser("enter-main", help="Finish the celebration now")

    rent = sub.add_parser("rent", help="Rent one game")
    rent.add_argument("title")
    rent.add_argument("--days", type=int, default=None)
    rent.add_argument("--pickup", help="Pickup time, ISO format")

    bundle = sub.add_parser("bundle", help="Rent three games with the bundle discount")
    bundle.add_argument("anchor")
    bundle.add_argument("picks", nargs=2)
    bundle.add_argument("--days", type=int, default=None)
    bundle.add_argument("--pickup", help="Pickup time, ISO format")

    sub.add_parser("plans", help="List purchase plans")
    sub.add_parser("rentals", help="List active and past rentals")

    pickup = sub.add_parser("pickup", help="Mark a rental as picked up")
    pickup.add_argument("rental", help="Rental id, id prefix or confirmation code")

    ret = sub.add_parser("return", help="Mark a rental as returned and refund the deposit")
    ret.add_argument("rental", help="Rental id, id prefix or confirmation code")

    sub.add_parser("subscribe", help="Start the monthly unlimited plan")
    sub.add_parser("sign-out", help="Sign out and clear the profile")

    return parser


def find_rental_ref(store: AppStore, ref: str) -> Optional[Rental]:
    """Resolve a rental id, unique id prefix (6+ chars) or confirmation code."""
    ref = ref.strip()
    rentals = store.active_rentals + store.past_rentals
    for rental in rentals:
        if rental.id == ref or (rental.confirmation_code or "").upper() == ref.upper():
            return rental
    if len(ref) >= 6:
        matches = [r for r in rentals if r.id.startswith(ref)]
        if len(matches) == 1:
            return matches[0]
    return None


def _resolve_pickup(store: AppStore, raw: Optional[str]) -> datetime:
    if not raw:
        return store.default_pickup()
    pickup = datetime.fromisoformat(raw)
    if pickup < store.clock.now():
        raise ValueError("Pickup time cannot be in the past")
    return pickup


def _resolve_games(store: AppStore, titles: Sequence[str]) -> List[BoardGame]:
    games = []
    for title in titles:
        game = find_by_title(store.catalog, title)
        if game is None:
            raise ValueError(f"No game titled '{title}'")
        games.append(game)
    return games


def execute(args: argparse.Namespace, store: AppStore, cli: CliInterface) -> int:
    """Run one parsed command against the store; returns the exit code."""
    command = args.command
    rental_cfg = store.config.rentals

    if command == "status":
        cli.print_status(store)
    elif command == "catalog":
        genre = Genre(args.genre) if args.genre else None
        cli.print_catalog(store.search_catalog(args.search, genre))
    elif command == "sign-in":
        if not args.email.strip():
            cli.error("email is required")
            return 2
        store.signed_in(args.email.strip())
    elif command == "profile":
        if not profile_fields_complete(args.first, args.last, args.phone):
            cli.error("first name, last name and phone are required")
            return 2
        store.complete_profile(args.first.strip(), args.last.strip(), args.phone.strip())
    elif command == "location":
        store.set_location(args.text)
        cli.print_status(store)
    elif command == "locate":
        service = StaticLocationService({"city": args.city, "region": args.region, "country": args.country})
        service.request()
        store.set_location(service.resolved_placemark)
        cli.print_status(store)
    elif command == "change-location":
        store.change_location()
    elif command == "enter-main":
        if not store.finish_celebration():
            cli.error(f"not celebrating (stage is {store.stage.value})")
            return 1
    elif command == "rent":
        game = _resolve_games(store, [args.title])[0]
        days = args.days if args.days is not None else rental_cfg.default_days
        rental = store.create_rental(game, _resolve_pickup(store, args.pickup), days)
        cli.print_rental(rental, rental_cfg.pickup_address)
    elif command == "bundle":
        anchor, *picks = _resolve_games(store, [args.anchor] + list(args.picks))
        games = build_bundle(anchor, picks, store.config.pricing.bundle_size)
        if not games:
            cli.error("pick two other, different games to complete the bundle")
            return 2
        days = args.days if args.days is not None else rental_cfg.default_days
        store.rentals.validate_days(days)
        quote = store.quote_bundle(games, days)
        for rental in store.create_bundle_rentals(games, _resolve_pickup(store, args.pickup), days):
            cli.print_rental(rental, rental_cfg.pickup_address)
        cli.line(f"Bundle total due now: {cli.money(quote.total)}")
    elif command == "plans":
        pricing_cfg = store.config.pricing
        daily = int(pricing_cfg.bundle_daily_discount * 100)
        deposit = int(pricing_cfg.bundle_deposit_discount * 100)
        cli.line(f"{PurchasePlan.ONE_TIME.label}: daily price x days + deposit")
        cli.line(f"{PurchasePlan.BUNDLE.label}: {daily}% off daily prices, {deposit}% off deposits")
        active = " (active)" if store.has_subscription else ""
        cli.line(f"{PurchasePlan.SUBSCRIPTION.label}: "
                 f"{cli.money(pricing_cfg.subscription_monthly_price)}/month{active}")
    elif command == "rentals":
        cli.line("Active:")
        for rental in store.active_rentals:
            cli.print_rental(rental)
        cli.line("History:")
        for rental in store.past_rentals:
            cli.print_rental(rental)
    elif command in ("pickup", "return"):
        rental = find_rental_ref(store, args.rental)
        if rental is None:
            cli.error(f"no rental matches '{args.rental}'")
            return 1
        updated = store.mark_picked_up(rental) if command == "pickup" else store.mark_returned(rental)
        if updated is None:
            cli.line(f"Rental {rental.confirmation_code} is not active, nothing to do.")
        else:
            cli.print_rental(updated)
    elif command == "subscribe":
        subscription = store.activate_subscription()
        cli.line(f"Monthly Unlimited active ({cli.money(subscription.monthly_price)}/month)")
    elif command == "sign-out":
        store.sign_out()
    return 0


def run(argv: Optional[Sequence[str]] = None, store: Optional[AppStore] = None, out: Optional[TextIO] = None) -> int:
    """
    Parse arguments and run one command.

    Args:
        argv: Arguments, defaults to ``sys.argv[1:]``
        store: Store to drive; built from a JSON-file store if None
        out: Output stream

    Returns:
        int: Process exit code
    """
    args = build_parser().parse_args(argv)

    if store is None:
        config = Settings(storage=StorageSettings(backend="json"))
        if args.store:
            config.data_dir = Path(args.store).resolve().parent
            config.storage.file_name = os.path.basename(args.store)
        configure_logging(config, level=args.log_level)
        store = create_app_store(config, scheduler=ManualScheduler())

    cli = CliInterface(store.events, color_output=not args.no_color, out=out)
    cli.currency = store.config.pricing.currency

    try:
        return execute(args, store, cli)
    except AppError as e:
        cli.error(e.message)
        return 1
    except ValueError as e:
        cli.error(str(e))
        return 2
    finally:
        cli.unregister_handlers()


def main() -> None:
    sys.exit(run())
