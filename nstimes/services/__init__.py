"""Services layer - Orchestration of stations, the NS API and the cache.

Services depend on ports only; concrete adapters are wired in the
dependency container.
"""

from .price_service import PriceService
from .station_service import StationService
from .trip_service import TripService

__all__ = ["PriceService", "StationService", "TripService"]
