"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    AmbiguousStationError,
    CacheCorruptedError,
    CachePersistenceError,
    ConfigurationError,
    NoPriceFoundError,
    NSTimesError,
    StationNotFoundError,
    UpstreamError,
)
from .models import (
    Ambiguous,
    CacheEntry,
    CacheStats,
    NoMatch,
    PriceQuote,
    PriceResult,
    SingleMatch,
    StationLookup,
    StationRecord,
    TravelClass,
    TravelType,
    Trip,
    TripPlan,
)

__all__ = [
    # Models
    "StationRecord",
    "StationLookup",
    "NoMatch",
    "SingleMatch",
    "Ambiguous",
    "CacheEntry",
    "CacheStats",
    "TravelClass",
    "TravelType",
    "Trip",
    "PriceQuote",
    "PriceResult",
    "TripPlan",
    # Errors
    "NSTimesError",
    "CacheCorruptedError",
    "CachePersistenceError",
    "UpstreamError",
    "ConfigurationError",
    "StationNotFoundError",
    "AmbiguousStationError",
    "NoPriceFoundError",
]
