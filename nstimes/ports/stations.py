"""Station resolver port - Abstraction for free-text station lookup.

This protocol defines the contract shared by every resolution
strategy, so the services, the CLI and the HTTP handlers depend only
on ``resolve`` and never on where station data comes from.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import StationLookup


class StationResolverPort(Protocol):
    """Port for station resolution.

    Implementations:
    - adapters/stations/local_resolver.py (LocalStationResolver) - static table
    - adapters/stations/remote_resolver.py (RemoteStationResolver) - NS API
    - adapters/stations/fallback_resolver.py (FallbackStationResolver) - local first
    """

    def resolve(self, query: str) -> StationLookup:
        """Resolve a free-text query to station matches.

        Args:
            query: The station name as typed by the user.

        Returns:
            NoMatch, SingleMatch or Ambiguous.
        """
        ...
