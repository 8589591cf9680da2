"""Command-line interface for nstimes.

Examples:
    nstimes trip "Den Haag C" Amersfoort
    nstimes --cache prices.json price Utrecht Schiphol --class 1
    nstimes stations Amsterdam
    nstimes cache stats --cache prices.json

Lookup failures and upstream errors are printed on stderr and the
process exits with status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from . import __version__
from .config import AppConfig, get_config
from .container import Container
from .domain.errors import (
    AmbiguousStationError,
    NSTimesError,
    StationNotFoundError,
)
from .domain.models import (
    Ambiguous,
    NoMatch,
    PriceQuote,
    StationRecord,
    TravelClass,
    TravelType,
    Trip,
)
from .logging_config import setup_logging
from .ports.cache import PriceCachePort
from .ports.ns_api import NSApiPort
from .services import PriceService, StationService, TripService
from .stations import write_directory

logger = logging.getLogger(__name__)

_BOLD = "\033[1m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_RESET = "\033[0m"


class Output:
    """Writes command output, with ANSI styling on terminals only."""

    def __init__(self, out: TextIO, err: TextIO) -> None:
        self.out = out
        self.err = err
        self.color = out.isatty()

    def style(self, text: str, code: str) -> str:
        return f"{code}{text}{_RESET}" if self.color else text

    def line(self, text: str = "") -> None:
        print(text, file=self.out)

    def error(self, text: str) -> None:
        prefix = f"{_RED}Error:{_RESET}" if self.err.isatty() else "Error:"
        print(f"{prefix} {text}", file=self.err)


def euros(cents: int) -> str:
    """Format an amount in cents as euros (e.g. 1140 -> '€11.40')."""
    return f"€{cents / 100:.2f}"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="nstimes",
        description="Dutch railway journeys and ticket prices from the NS API.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--cache",
        metavar="PATH",
        type=Path,
        help="Enable price caching in the given JSON file",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Disable price caching",
    )
    parser.add_argument(
        "--resolver",
        choices=["local", "remote", "fallback"],
        help="Station lookup strategy (default from NSTIMES_STATIONS_STRATEGY)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    trip = sub.add_parser("trip", help="Find train trips between two stations")
    trip.add_argument("origin", metavar="FROM", help="Departure station")
    trip.add_argument("destination", metavar="TO", help="Arrival station")

    price = sub.add_parser("price", help="Get ticket prices for a trip")
    price.add_argument("origin", metavar="FROM", help="Departure station")
    price.add_argument("destination", metavar="TO", help="Arrival station")
    price.add_argument(
        "--class",
        dest="travel_class",
        type=int,
        choices=[1, 2],
        default=2,
        help="Travel class: 1 or 2 (default: 2)",
    )
    price.add_argument(
        "--return",
        dest="is_return",
        action="store_true",
        help="Price a return trip instead of a single trip",
    )

    stations = sub.add_parser("stations", help="Look up stations by name")
    stations.add_argument("query", nargs="?", help="Station name to look up")
    stations.add_argument(
        "--dump",
        metavar="FILE",
        nargs="?",
        const="",
        help="Download the full station table (default: the bundled table)",
    )

    cache = sub.add_parser("cache", help="Inspect or maintain the price cache")
    cache.add_argument("action", choices=["stats", "purge"])

    return parser


def config_from_args(args: argparse.Namespace, base: Optional[AppConfig] = None) -> AppConfig:
    """Apply command-line overrides on top of the loaded configuration."""
    config = base or get_config()

    cache_update: dict[str, object] = {}
    if args.cache is not None:
        cache_update.update(enabled=True, path=args.cache)
    if args.no_cache:
        cache_update["enabled"] = False

    update: dict[str, object] = {}
    if cache_update:
        update["cache"] = config.cache.model_copy(update=cache_update)
    if args.resolver:
        update["stations"] = config.stations.model_copy(update={"strategy": args.resolver})

    return config.model_copy(update=update) if update else config


def print_trip(output: Output, trip: Trip) -> None:
    cancelled = output.style(" (cancelled)", _RED) if trip.cancelled else ""
    output.line(
        f"{trip.origin_name} -> {trip.destination_name} [{trip.train_type}] "
        f"tr.{trip.track} {trip.departure_time:%H:%M}->{trip.arrival_time:%H:%M}"
        f"{cancelled}"
    )


def print_quote(output: Output, quote: PriceQuote) -> None:
    line = (
        f"{euros(quote.total_price_cents)} - "
        f"{output.style(quote.display_name, _BOLD)} ({quote.travel_class.label})"
    )
    if quote.is_best_option:
        line = f"{line} {output.style('⭐ Best option', _GREEN)}"

    output.line(line)
    output.line(f"  Per adult: {euros(quote.price_per_adult_cents)}")
    if quote.discount_cents:
        output.line(f"  Discount: {euros(quote.discount_cents)}")
    if quote.discount_type != "NONE":
        output.line(f"  Discount type: {quote.discount_type}")
    if quote.operator_name:
        output.line(f"  Operator: {quote.operator_name}")
    output.line()


def print_candidates(output: Output, query: str, candidates: Sequence[StationRecord]) -> None:
    output.line(f"Your query `{query}` was ambiguous, multiple stations matched:")
    for record in candidates:
        output.line(f"{record.uic_code} - {record.name}")


def print_suggestions(output: Output, suggestions: Sequence[str]) -> None:
    if suggestions:
        output.line(f"Did you mean: {', '.join(suggestions)}?")


def cmd_trip(container: Container, args: argparse.Namespace, output: Output) -> int:
    plan = container.resolve(TripService).trips(args.origin, args.destination)
    output.line(f"Finding journey from {plan.origin.name} to {plan.destination.name}")
    for trip in plan.trips:
        print_trip(output, trip)
    return 0


def cmd_price(container: Container, args: argparse.Namespace, output: Output) -> int:
    result = container.resolve(PriceService).prices(
        args.origin,
        args.destination,
        travel_class=TravelClass.from_number(args.travel_class),
        travel_type=TravelType.RETURN if args.is_return else TravelType.SINGLE,
    )
    output.line(f"Getting prices from {result.origin.name} to {result.destination.name}")
    output.line()
    for quote in result.quotes:
        print_quote(output, quote)
    return 0


def cmd_stations(container: Container, args: argparse.Namespace, output: Output) -> int:
    if args.dump is not None:
        target = Path(args.dump) if args.dump else container.config.stations.data_path
        records = container.resolve(NSApiPort).list_stations()
        try:
            count = write_directory(records, target)
        except OSError as e:
            output.error(f"Cannot write station table {target}: {e}")
            return 1
        output.line(f"Wrote {count} stations to {target}")
        return 0

    if not args.query:
        output.error("A station query is required (or use --dump)")
        return 2

    service = container.resolve(StationService)
    outcome = service.lookup(args.query)
    if isinstance(outcome, NoMatch):
        output.error(f"No stations found for query: {args.query}")
        print_suggestions(output, service.suggest(args.query))
        return 1
    if isinstance(outcome, Ambiguous):
        print_candidates(output, args.query, outcome.candidates)
        return 0
    output.line(f"{outcome.record.uic_code} - {outcome.record.name}")
    return 0


def cmd_cache(container: Container, args: argparse.Namespace, output: Output) -> int:
    settings = container.config.cache
    if not settings.enabled or settings.path is None:
        output.error("No price cache file configured (use --cache PATH or NSTIMES_CACHE_PATH)")
        return 1

    cache = container.resolve(PriceCachePort)
    if args.action == "purge":
        removed = cache.purge_expired()
        output.line(f"Removed {removed} expired entries")
        return 0

    stats = cache.stats()
    output.line(f"Entries: {stats.total_entries}")
    output.line(f"  Valid: {stats.valid_entries}")
    output.line(f"  Expired: {stats.expired_entries}")
    return 0


_COMMANDS = {
    "trip": cmd_trip,
    "price": cmd_price,
    "stations": cmd_stations,
    "cache": cmd_cache,
}


def run(
    args: argparse.Namespace,
    container: Container,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Execute a parsed command and return the process exit status."""
    output = Output(out or sys.stdout, err or sys.stderr)
    try:
        return _COMMANDS[args.command](container, args, output)
    except AmbiguousStationError as e:
        print_candidates(output, e.query, e.candidates)
        output.error(e.message)
    except StationNotFoundError as e:
        output.error(e.message)
        print_suggestions(output, e.suggestions)
    except NSTimesError as e:
        logger.debug("Command failed", exc_info=True)
        output.error(str(e))
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point of the ``nstimes`` command."""
    args = build_parser().parse_args(argv)

    level = {0: None, 1: "INFO"}.get(args.verbose, "DEBUG")
    config = config_from_args(args)
    setup_logging(config.observability, level=level)

    return run(args, Container.create_default(config))


if __name__ == "__main__":
    sys.exit(main())
