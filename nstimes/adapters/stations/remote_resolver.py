"""Remote station resolver adapter.

This adapter asks the live NS station search instead of the static
table. The service ranks its own matches; when one of them carries
exactly the queried name it wins, mirroring the local precedence rule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...domain.models import StationLookup
from ...ports.ns_api import NSApiPort
from ...stations.directory import canonicalize, to_lookup


@dataclass
class RemoteStationResolver:
    """Station resolver backed by the NS station search API.

    This adapter implements StationResolverPort.

    Attributes:
        api: Client for the NS API
        limit: Maximum number of stations requested per search
    """

    api: NSApiPort
    limit: int = 10
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def resolve(self, query: str) -> StationLookup:
        """Resolve a free-text query with the upstream station search.

        Args:
            query: The station name as typed by the user.

        Returns:
            NoMatch, SingleMatch or Ambiguous.

        Raises:
            UpstreamError: If the station search is unavailable.
        """
        needle = canonicalize(query)
        if not needle:
            return to_lookup(query, ())

        candidates = tuple(self.api.search_stations(query.strip(), limit=self.limit))
        exact = tuple(
            record
            for record in candidates
            if needle in {canonicalize(text) for text in (record.name, *record.aliases)}
        )
        outcome = to_lookup(query, exact or candidates)

        self._logger.debug(
            "Station lookup (remote)",
            extra={
                "query": query,
                "outcome": type(outcome).__name__,
                "returned": len(candidates),
            },
        )

        return outcome
