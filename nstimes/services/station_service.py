"""Station service - turns lookup outcomes into one station or an error.

The resolvers report "no match" and "ambiguous" as data. Commands that
need exactly one station (trips, prices) go through this service,
which raises typed errors the CLI and the HTTP API know how to present.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..domain.errors import AmbiguousStationError, StationNotFoundError
from ..domain.models import Ambiguous, SingleMatch, StationLookup, StationRecord
from ..ports.stations import StationResolverPort
from ..stations.directory import StationDirectory


@dataclass
class StationService:
    """Resolve user input to a single station.

    Attributes:
        resolver: Strategy used to resolve queries
        directory: Optional local directory used for "did you mean" hints
        suggestion_limit: Maximum number of hints on NoMatch
    """

    resolver: StationResolverPort
    directory: Optional[StationDirectory] = None
    suggestion_limit: int = 5

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def lookup(self, query: str) -> StationLookup:
        """Resolve a query without interpreting the outcome."""
        return self.resolver.resolve(query)

    def pick(self, query: str) -> StationRecord:
        """Resolve a query that must denote exactly one station.

        Args:
            query: The station name as typed by the user.

        Returns:
            The matching station.

        Raises:
            StationNotFoundError: If no station matches.
            AmbiguousStationError: If several stations match.
        """
        outcome = self.resolver.resolve(query)

        if isinstance(outcome, SingleMatch):
            return outcome.record

        if isinstance(outcome, Ambiguous):
            self._logger.info(
                "Ambiguous station query",
                extra={"query": query, "candidates": len(outcome.candidates)},
            )
            raise AmbiguousStationError(
                f"Multiple stations matched for query: {query}. Please refine your query.",
                query=query,
                candidates=outcome.candidates,
            )

        raise StationNotFoundError(
            f"No stations found for query: {query}",
            query=query,
            suggestions=self.suggest(query),
        )

    def suggest(self, query: str) -> tuple[str, ...]:
        """Return "did you mean" hints from the local directory."""
        if self.directory is None:
            return ()
        return self.directory.suggest(query, limit=self.suggestion_limit)
