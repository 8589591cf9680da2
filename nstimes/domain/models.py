"""Immutable domain models for nstimes.

All models are frozen dataclasses with slots for memory efficiency.
These models have no external dependencies and represent the core
business concepts of the application: stations, the outcome of a
station lookup, cached prices, trips and price quotes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union


class TravelClass(Enum):
    """Travel class as understood by the NS price API."""

    FIRST = 1
    SECOND = 2

    @classmethod
    def from_number(cls, value: int) -> TravelClass:
        """Map 1/2 to a travel class.

        Raises:
            ValueError: If the value is neither 1 nor 2.
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Travel class must be 1 or 2, got {value}") from None

    @classmethod
    def from_api(cls, value: str) -> TravelClass:
        """Map the API name (FIRST_CLASS / SECOND_CLASS) to a travel class."""
        return cls.FIRST if value == "FIRST_CLASS" else cls.SECOND

    @property
    def api_name(self) -> str:
        """Name used in upstream requests and responses."""
        return "FIRST_CLASS" if self is TravelClass.FIRST else "SECOND_CLASS"

    @property
    def label(self) -> str:
        """Human-readable label."""
        return "1st class" if self is TravelClass.FIRST else "2nd class"


class TravelType(Enum):
    """Single or return journey."""

    SINGLE = "single"
    RETURN = "return"


@dataclass(frozen=True, slots=True)
class StationRecord:
    """A railway station known to the directory.

    Attributes:
        name: Canonical display name (e.g. 'Amsterdam Centraal')
        uic_code: Numeric UIC station identifier
        aliases: Alternate names and abbreviations (e.g. 'Asd', 'Amsterdam C')
    """

    name: str
    uic_code: int
    aliases: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class NoMatch:
    """No station matched the query."""

    query: str

    @property
    def candidates(self) -> tuple[StationRecord, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class SingleMatch:
    """Exactly one station matched the query."""

    query: str
    record: StationRecord

    @property
    def candidates(self) -> tuple[StationRecord, ...]:
        return (self.record,)


@dataclass(frozen=True, slots=True)
class Ambiguous:
    """Several stations matched the query and none of them exactly.

    Candidates are kept in directory order.
    """

    query: str
    candidates: tuple[StationRecord, ...]


StationLookup = Union[NoMatch, SingleMatch, Ambiguous]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached price with its expiration date.

    Attributes:
        price_cents: Price in cents
        travel_class: Travel class number (1 or 2)
        expires_at: First day on which the entry is no longer valid
    """

    price_cents: int
    travel_class: int
    expires_at: date

    def is_expired(self, today: date) -> bool:
        """Check whether the entry is expired on the given day."""
        return today >= self.expires_at


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Snapshot of the cache contents."""

    total_entries: int
    valid_entries: int
    expired_entries: int
    hits: int = 0
    misses: int = 0


@dataclass(frozen=True, slots=True)
class Trip:
    """First leg of a journey returned by the trips API.

    Attributes:
        origin_name: Name of the departure station
        destination_name: Name of the arrival station
        track: Departure track (actual if known, else planned, else '?')
        cancelled: Whether the leg is cancelled
        departure_time: Planned departure
        arrival_time: Planned arrival
        train_type: Category code of the train (IC, SPR, ...)
    """

    origin_name: str
    destination_name: str
    track: str
    cancelled: bool
    departure_time: datetime
    arrival_time: datetime
    train_type: str


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """A single price row returned by the price API (or the cache)."""

    total_price_cents: int
    price_per_adult_cents: int
    travel_class: TravelClass
    display_name: str
    discount_type: str = "NONE"
    discount_cents: Optional[int] = None
    operator_name: Optional[str] = None
    is_best_option: bool = False
    cached: bool = False


@dataclass(frozen=True, slots=True)
class TripPlan:
    """Journeys found between two resolved stations."""

    origin: StationRecord
    destination: StationRecord
    trips: tuple[Trip, ...] = ()


@dataclass(frozen=True, slots=True)
class PriceResult:
    """Prices found between two resolved stations.

    Attributes:
        origin: Resolved departure station
        destination: Resolved arrival station
        travel_class: Requested travel class
        travel_type: Single or return
        quotes: Price rows, possibly a single cached row
    """

    origin: StationRecord
    destination: StationRecord
    travel_class: TravelClass
    travel_type: TravelType
    quotes: tuple[PriceQuote, ...] = ()

    @property
    def cached(self) -> bool:
        """Check if the prices came from the cache."""
        return any(quote.cached for quote in self.quotes)

    @property
    def first(self) -> Optional[PriceQuote]:
        """Return the first price row, if any."""
        return self.quotes[0] if self.quotes else None
