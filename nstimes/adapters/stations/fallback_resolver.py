"""Local-first station resolver with a remote fallback.

The static table answers almost every query without network access.
Only when it knows no station at all for the query is the fallback
resolver consulted; ambiguity found locally is reported as is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...domain.errors import ConfigurationError, UpstreamError
from ...domain.models import NoMatch, StationLookup
from ...ports.stations import StationResolverPort


@dataclass
class FallbackStationResolver:
    """Resolver that tries ``primary`` first and ``fallback`` on NoMatch.

    This adapter implements StationResolverPort.

    Attributes:
        primary: Resolver consulted first (usually the local table)
        fallback: Resolver consulted when the primary finds nothing
    """

    primary: StationResolverPort
    fallback: StationResolverPort
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def resolve(self, query: str) -> StationLookup:
        """Resolve with the primary resolver, falling back on NoMatch.

        An unavailable fallback (upstream failure or missing API token)
        degrades to the primary's NoMatch.

        Args:
            query: The station name as typed by the user.

        Returns:
            NoMatch, SingleMatch or Ambiguous.
        """
        outcome = self.primary.resolve(query)
        if not isinstance(outcome, NoMatch):
            return outcome

        primary_name = type(self.primary).__name__
        fallback_name = type(self.fallback).__name__
        self._logger.info(
            "No local match, using fallback resolver",
            extra={"query": query, "primary": primary_name, "fallback": fallback_name},
        )

        try:
            return self.fallback.resolve(query)
        except (ConfigurationError, UpstreamError) as e:
            self._logger.warning(
                "Fallback resolver unavailable",
                extra={"query": query, "fallback": fallback_name, "error": str(e)},
            )
            return outcome
