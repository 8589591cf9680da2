"""Trip service - journeys between two stations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..domain.models import TripPlan
from ..ports.ns_api import NSApiPort
from .station_service import StationService


@dataclass
class TripService:
    """Resolve both stations and fetch upcoming journeys.

    Attributes:
        stations: Station lookup service
        api: NS API client
    """

    stations: StationService
    api: NSApiPort

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def trips(self, origin: str, destination: str) -> TripPlan:
        """Find journeys between two free-text station names.

        Args:
            origin: Departure station as typed by the user.
            destination: Arrival station as typed by the user.

        Returns:
            The resolved departure and arrival stations with their trips.

        Raises:
            StationNotFoundError: If a station cannot be resolved.
            AmbiguousStationError: If a station query is ambiguous.
            UpstreamError: If the trips API fails.
        """
        station_from = self.stations.pick(origin)
        station_to = self.stations.pick(destination)

        trips = tuple(self.api.trips(station_from.uic_code, station_to.uic_code))
        self._logger.info(
            "Trips fetched",
            extra={
                "origin": station_from.name,
                "destination": station_to.name,
                "trips": len(trips),
            },
        )
        return TripPlan(origin=station_from, destination=station_to, trips=trips)
