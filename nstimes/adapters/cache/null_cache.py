"""Null price cache used when caching is disabled.

This cache always misses, so every price lookup goes upstream. The
CLI uses it for ``--no-cache`` and tests use it to rule out cached
state from previous tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...domain.models import CacheStats


@dataclass
class NullPriceCache:
    """No-op price cache - always misses.

    This cache implements the PriceCachePort protocol but never
    stores anything.
    """

    name: str = "null"

    def get(self, station_a: str, station_b: str, travel_class: int) -> Optional[int]:
        """Always returns None (cache miss)."""
        return None

    def set(
        self, station_a: str, station_b: str, travel_class: int, price_cents: int
    ) -> bool:
        """Does nothing.

        Returns:
            Always True; there is nothing to persist.
        """
        return True

    def purge_expired(self) -> int:
        """Does nothing, returns 0."""
        return 0

    def stats(self) -> CacheStats:
        """Return empty stats."""
        return CacheStats(total_entries=0, valid_entries=0, expired_entries=0)
