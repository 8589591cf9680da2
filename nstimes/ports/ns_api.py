"""NS API port - Abstraction over the upstream travel information service.

Only the parts of the upstream responses that the application uses
are exposed; implementations translate payloads into domain models.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import (
        PriceQuote,
        StationRecord,
        TravelClass,
        TravelType,
        Trip,
    )


class NSApiPort(Protocol):
    """Port for the NS travel information API.

    Implementation: adapters/ns_api/client.py (NSApiClient)

    All methods raise UpstreamError when the service cannot be reached
    or answers with an unusable response.
    """

    def search_stations(self, query: str, limit: int = 10) -> Sequence[StationRecord]:
        """Search stations by free text.

        Args:
            query: The station name as typed by the user.
            limit: Maximum number of stations to return.

        Returns:
            Matching stations in the order the service ranks them.
        """
        ...

    def list_stations(self) -> Sequence[StationRecord]:
        """List every plannable station known to the service."""
        ...

    def trips(self, origin_uic: int, destination_uic: int) -> Sequence[Trip]:
        """Fetch upcoming journeys between two stations.

        Args:
            origin_uic: UIC code of the departure station.
            destination_uic: UIC code of the arrival station.

        Returns:
            The first leg of each proposed journey.
        """
        ...

    def prices(
        self,
        origin_uic: int,
        destination_uic: int,
        travel_class: TravelClass,
        travel_type: TravelType,
    ) -> Sequence[PriceQuote]:
        """Fetch ticket prices between two stations for one adult.

        Args:
            origin_uic: UIC code of the departure station.
            destination_uic: UIC code of the arrival station.
            travel_class: First or second class.
            travel_type: Single or return journey.

        Returns:
            Price rows in the order the service returns them.
        """
        ...
