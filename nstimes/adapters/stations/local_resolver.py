"""Local station resolver adapter.

This adapter answers lookups from the static station table shipped
with the package; it never touches the network.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...domain.models import StationLookup
from ...stations.directory import StationDirectory


@dataclass
class LocalStationResolver:
    """Station resolver backed by the in-memory directory.

    This adapter implements StationResolverPort. The directory is
    immutable, so one resolver can be shared by any number of threads.

    Attributes:
        directory: The station directory to search
    """

    directory: StationDirectory
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def resolve(self, query: str) -> StationLookup:
        """Resolve a free-text query against the directory.

        Args:
            query: The station name as typed by the user.

        Returns:
            NoMatch, SingleMatch or Ambiguous.
        """
        outcome = self.directory.lookup(query)

        self._logger.debug(
            "Station lookup (local)",
            extra={
                "query": query,
                "outcome": type(outcome).__name__,
                "candidates": len(outcome.candidates),
            },
        )

        return outcome
