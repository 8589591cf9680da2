"""Cache adapters - Implementations of the PriceCachePort.

Available implementations:
- PriceCache: Thread-safe price cache with calendar expiry and optional file
- NullPriceCache: No-op cache (always misses)
"""

from .null_cache import NullPriceCache
from .price_cache import PriceCache, cache_key, next_january_first

__all__ = ["PriceCache", "NullPriceCache", "cache_key", "next_january_first"]
