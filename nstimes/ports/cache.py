"""Price cache port - Injectable caching abstraction for prices.

This protocol defines the contract for the price cache used by the
price service and the HTTP handlers. Lookups are direction
independent: (A, B, class) and (B, A, class) address the same entry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import CacheStats


class PriceCachePort(Protocol):
    """Port for price caching.

    Implementations:
    - adapters/cache/price_cache.py (PriceCache) - Production
    - adapters/cache/null_cache.py (NullPriceCache) - Caching disabled

    Implementations must be safe to call from several request
    handling threads at once.
    """

    def get(self, station_a: str, station_b: str, travel_class: int) -> Optional[int]:
        """Get a cached price.

        Args:
            station_a: One end of the route.
            station_b: The other end of the route.
            travel_class: Travel class number (1 or 2).

        Returns:
            The price in cents, or None if not cached or expired.
        """
        ...

    def set(
        self, station_a: str, station_b: str, travel_class: int, price_cents: int
    ) -> bool:
        """Cache a price until the start of next calendar year.

        Args:
            station_a: One end of the route.
            station_b: The other end of the route.
            travel_class: Travel class number (1 or 2).
            price_cents: Price in cents.

        Returns:
            True if stored (and persisted when configured), False if
            persistence failed and the cache is running degraded.
        """
        ...

    def purge_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries that were removed.
        """
        ...

    def stats(self) -> CacheStats:
        """Return entry counts.

        Returns:
            Total, valid and expired entry counts.
        """
        ...
