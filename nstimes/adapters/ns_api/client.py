"""NS API client adapter.

Thin wrapper around the NS API gateway (apiportal.ns.nl) with:
- Configuration injection (token, base URL, timeout)
- A shared requests session
- Typed errors instead of raw HTTP failures
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from ...config import NSApiConfig, get_config
from ...domain.errors import ConfigurationError, UpstreamError
from ...domain.models import PriceQuote, StationRecord, TravelClass, TravelType, Trip
from .schemas import PriceApiResponse, StationsResponse, TripsResponse

M = TypeVar("M", bound=BaseModel)

STATIONS_PATH = "/nsapp-stations/v3"
TRIPS_PATH = "/reisinformatie-api/api/v3/trips"
PRICE_PATH = "/reisinformatie-api/api/v3/price"


@dataclass
class NSApiClient:
    """Client for the NS travel information API.

    This adapter implements NSApiPort.

    Attributes:
        config: API configuration (token, base URL, timeout)
        session: HTTP session reused across calls
    """

    config: NSApiConfig = field(default_factory=lambda: get_config().ns_api)
    session: requests.Session = field(default_factory=requests.Session, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def search_stations(self, query: str, limit: int = 10) -> List[StationRecord]:
        """Search plannable stations by free text."""
        response = self._get(
            STATIONS_PATH,
            StationsResponse,
            params={
                "q": query,
                "includeNonPlannableStations": "false",
                "limit": limit,
            },
        )
        return [station.to_record() for station in response.payload]

    def list_stations(self) -> List[StationRecord]:
        """List every station known to the service."""
        response = self._get(STATIONS_PATH, StationsResponse)
        return [station.to_record() for station in response.payload]

    def trips(self, origin_uic: int, destination_uic: int) -> List[Trip]:
        """Fetch upcoming journeys; only the first leg of each is kept."""
        response = self._get(
            TRIPS_PATH,
            TripsResponse,
            params={
                "originUicCode": origin_uic,
                "destinationUicCode": destination_uic,
            },
        )
        trips = [raw.to_trip() for raw in response.trips]
        return [trip for trip in trips if trip is not None]

    def prices(
        self,
        origin_uic: int,
        destination_uic: int,
        travel_class: TravelClass,
        travel_type: TravelType,
    ) -> List[PriceQuote]:
        """Fetch prices for one adult travelling without companions."""
        response = self._get(
            PRICE_PATH,
            PriceApiResponse,
            params={
                "fromStation": origin_uic,
                "toStation": destination_uic,
                "travelClass": travel_class.api_name,
                "travelType": travel_type.value,
                "isJointJourney": "false",
                "adults": 1,
                "children": 0,
            },
        )
        return [price.to_quote() for price in response.payload.prices]

    def _get(
        self,
        path: str,
        model: Type[M],
        params: Optional[Dict[str, Any]] = None,
    ) -> M:
        """GET ``path`` and validate the JSON body against ``model``.

        Raises:
            ConfigurationError: If no API token is configured.
            UpstreamError: On network errors, non-2xx answers or
                payloads that do not match the schema.
        """
        token = self.config.api_token
        if not token:
            raise ConfigurationError(
                "NS_API_TOKEN not found",
                setting_name="NS_API_TOKEN",
            )

        url = f"{self.config.base_url.rstrip('/')}{path}"
        self._logger.debug("NS API request", extra={"path": path, "params": params})

        try:
            response = self.session.get(
                url,
                params=params,
                headers={
                    "Cache-Control": "no-cache",
                    "Ocp-Apim-Subscription-Key": token,
                },
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            self._logger.warning(
                "NS API unreachable",
                extra={"path": path, "error": str(e)},
            )
            raise UpstreamError(f"Request to {path} failed", endpoint=path, cause=e)

        if not response.ok:
            self._logger.warning(
                "NS API error response",
                extra={"path": path, "status_code": response.status_code},
            )
            raise UpstreamError(
                f"{path} answered HTTP {response.status_code}",
                endpoint=path,
                status_code=response.status_code,
            )

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(
                f"Unexpected response from {path}",
                endpoint=path,
                status_code=response.status_code,
                cause=e,
            )
