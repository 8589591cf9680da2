"""Shared fixtures: a small station table, a fake NS API and a fixed clock."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

import pytest

from nstimes.adapters.cache import PriceCache
from nstimes.config import AppConfig, reset_config
from nstimes.container import Container, reset_container
from nstimes.domain.models import (
    PriceQuote,
    StationRecord,
    TravelClass,
    TravelType,
    Trip,
)
from nstimes.ports.cache import PriceCachePort
from nstimes.ports.ns_api import NSApiPort
from nstimes.stations import StationDirectory

AMSTERDAM_CENTRAAL = StationRecord(
    "Amsterdam Centraal", 8400058, frozenset({"Amsterdam C", "Asd"})
)
AMSTERDAM_SLOTERDIJK = StationRecord("Amsterdam Sloterdijk", 8400131, frozenset({"Ass"}))
DEN_HAAG_CENTRAAL = StationRecord(
    "Den Haag Centraal", 8400282, frozenset({"Den Haag C", "Gvc"})
)
AMERSFOORT_CENTRAAL = StationRecord(
    "Amersfoort Centraal", 8400055, frozenset({"Amersfoort C", "Amf"})
)
UTRECHT_CENTRAAL = StationRecord("Utrecht Centraal", 8400621, frozenset({"Utrecht C", "Ut"}))
MARIENBERG = StationRecord("Mariënberg", 8400428)
DEN_BOSCH = StationRecord("'s-Hertogenbosch", 8400319, frozenset({"Den Bosch"}))

STATIONS = (
    AMSTERDAM_CENTRAAL,
    AMSTERDAM_SLOTERDIJK,
    DEN_HAAG_CENTRAAL,
    AMERSFOORT_CENTRAAL,
    UTRECHT_CENTRAAL,
    MARIENBERG,
    DEN_BOSCH,
)

_ENV_VARS = (
    "NS_API_TOKEN",
    "NS_BASE_URL",
    "NSTIMES_STATIONS_STRATEGY",
    "NSTIMES_STATIONS_DATA_PATH",
    "NSTIMES_CACHE_ENABLED",
    "NSTIMES_CACHE_PATH",
    "NSTIMES_CACHE_TIMEZONE",
    "NSTIMES_SERVER_HOST",
    "NSTIMES_SERVER_PORT",
    "NSTIMES_LOG_LEVEL",
    "NSTIMES_LOG_STRUCTURED",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    reset_container()
    yield
    reset_config()
    reset_container()


class FixedClock:
    """Clock returning a settable date."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


def make_quote(
    cents: int,
    display_name: str = "Enkele reis",
    travel_class: TravelClass = TravelClass.SECOND,
    **kwargs,
) -> PriceQuote:
    return PriceQuote(
        total_price_cents=cents,
        price_per_adult_cents=cents,
        travel_class=travel_class,
        display_name=display_name,
        **kwargs,
    )


def make_trip(origin: str = "Den Haag Centraal", destination: str = "Amersfoort Centraal") -> Trip:
    tz = timezone(timedelta(hours=1))
    return Trip(
        origin_name=origin,
        destination_name=destination,
        track="11",
        cancelled=False,
        departure_time=datetime(2025, 3, 1, 10, 4, tzinfo=tz),
        arrival_time=datetime(2025, 3, 1, 11, 0, tzinfo=tz),
        train_type="IC",
    )


@dataclass
class FakeNSApi:
    """In-memory NSApiPort recording every call."""

    stations: List[StationRecord] = field(default_factory=list)
    trip_rows: List[Trip] = field(default_factory=list)
    price_rows: List[PriceQuote] = field(default_factory=list)
    error: Optional[Exception] = None
    calls: list = field(default_factory=list)

    def _call(self, *call) -> None:
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def search_stations(self, query: str, limit: int = 10) -> List[StationRecord]:
        self._call("search_stations", query, limit)
        return self.stations[:limit]

    def list_stations(self) -> List[StationRecord]:
        self._call("list_stations")
        return list(self.stations)

    def trips(self, origin_uic: int, destination_uic: int) -> List[Trip]:
        self._call("trips", origin_uic, destination_uic)
        return list(self.trip_rows)

    def prices(
        self,
        origin_uic: int,
        destination_uic: int,
        travel_class: TravelClass,
        travel_type: TravelType,
    ) -> List[PriceQuote]:
        self._call("prices", origin_uic, destination_uic, travel_class, travel_type)
        return list(self.price_rows)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


@pytest.fixture
def directory() -> StationDirectory:
    return StationDirectory.from_records(STATIONS)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(date(2025, 6, 15))


@pytest.fixture
def fake_api() -> FakeNSApi:
    return FakeNSApi(
        trip_rows=[make_trip()],
        price_rows=[
            make_quote(1140, is_best_option=True),
            make_quote(1260, display_name="Enkele reis flex", operator_name="NS"),
        ],
    )


@pytest.fixture
def price_cache(clock) -> PriceCache:
    return PriceCache(clock=clock)


@pytest.fixture
def container(directory, fake_api, price_cache) -> Container:
    """Production wiring with the station table, NS API and cache replaced."""
    container = Container.create_default(AppConfig())
    container.register(StationDirectory, lambda: directory)
    container.register(NSApiPort, lambda: fake_api)
    container.register(PriceCachePort, lambda: price_cache)
    return container
