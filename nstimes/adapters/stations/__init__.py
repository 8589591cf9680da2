"""Station resolver adapters - Implementations of the StationResolverPort.

Available implementations:
- LocalStationResolver: Static station table, no network access
- RemoteStationResolver: Live NS station search
- FallbackStationResolver: Local first, remote when nothing matches
"""

from .fallback_resolver import FallbackStationResolver
from .local_resolver import LocalStationResolver
from .remote_resolver import RemoteStationResolver

__all__ = ["LocalStationResolver", "RemoteStationResolver", "FallbackStationResolver"]
