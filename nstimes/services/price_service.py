"""Price service - ticket prices with a cache-aside layer.

Single journeys are looked up in the price cache first, keyed on the
canonical station names. A miss goes upstream and the first row's total
is stored for the rest of the calendar year. Return journeys always go
upstream.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..domain.errors import NoPriceFoundError
from ..domain.models import (
    PriceQuote,
    PriceResult,
    StationRecord,
    TravelClass,
    TravelType,
)
from ..ports.cache import PriceCachePort
from ..ports.ns_api import NSApiPort
from .station_service import StationService

CACHED_DISPLAY_NAME = "Cached Price"


@dataclass
class PriceService:
    """Resolve both stations and fetch ticket prices.

    Attributes:
        stations: Station lookup service
        api: NS API client
        cache: Price cache (use NullPriceCache to disable caching)
    """

    stations: StationService
    api: NSApiPort
    cache: PriceCachePort

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def prices(
        self,
        origin: str,
        destination: str,
        travel_class: TravelClass = TravelClass.SECOND,
        travel_type: TravelType = TravelType.SINGLE,
    ) -> PriceResult:
        """Find ticket prices between two free-text station names.

        Args:
            origin: Departure station as typed by the user.
            destination: Arrival station as typed by the user.
            travel_class: First or second class.
            travel_type: Single or return journey.

        Returns:
            The resolved stations and the price rows. A cache hit yields
            a single row named "Cached Price".

        Raises:
            StationNotFoundError: If a station cannot be resolved.
            AmbiguousStationError: If a station query is ambiguous.
            UpstreamError: If the price API fails.
            NoPriceFoundError: If the price API returns no rows.
        """
        station_from = self.stations.pick(origin)
        station_to = self.stations.pick(destination)

        quotes = self._quotes(station_from, station_to, travel_class, travel_type)
        if not quotes:
            raise NoPriceFoundError(
                f"No prices found from {station_from.name} to {station_to.name}",
                origin=station_from.name,
                destination=station_to.name,
            )

        return PriceResult(
            origin=station_from,
            destination=station_to,
            travel_class=travel_class,
            travel_type=travel_type,
            quotes=quotes,
        )

    def _quotes(
        self,
        station_from: StationRecord,
        station_to: StationRecord,
        travel_class: TravelClass,
        travel_type: TravelType,
    ) -> tuple[PriceQuote, ...]:
        cacheable = travel_type is TravelType.SINGLE

        if cacheable:
            cached = self.cache.get(station_from.name, station_to.name, travel_class.value)
            if cached is not None:
                self._logger.debug(
                    "Price served from cache",
                    extra={"origin": station_from.name, "destination": station_to.name},
                )
                return (cached_quote(cached, travel_class),)

        quotes = tuple(
            self.api.prices(
                station_from.uic_code, station_to.uic_code, travel_class, travel_type
            )
        )
        self._logger.info(
            "Prices fetched",
            extra={
                "origin": station_from.name,
                "destination": station_to.name,
                "travel_type": travel_type.value,
                "rows": len(quotes),
            },
        )

        if cacheable and quotes:
            stored = self.cache.set(
                station_from.name,
                station_to.name,
                travel_class.value,
                quotes[0].total_price_cents,
            )
            if not stored:
                self._logger.warning(
                    "Price not persisted, cache is degraded",
                    extra={"origin": station_from.name, "destination": station_to.name},
                )

        return quotes


def cached_quote(price_cents: int, travel_class: TravelClass) -> PriceQuote:
    """Build the synthetic row returned for a cache hit."""
    return PriceQuote(
        total_price_cents=price_cents,
        price_per_adult_cents=price_cents,
        travel_class=travel_class,
        display_name=CACHED_DISPLAY_NAME,
        discount_type="NONE",
        discount_cents=0,
        is_best_option=True,
        cached=True,
    )
