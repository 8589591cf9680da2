"""HTTP API for nstimes.

Routes:
    GET /health                      -> {"status": "ok"}
    GET /price?from=..&to=..&class=2 -> cheapest single-trip price
    GET /trips?from=..&to=..         -> upcoming journeys
    GET /stations?q=..               -> station lookup

Errors are returned as ``{"error": ..., "matches": [...]}`` with status
400 for lookup problems, 404 when no price exists, 502 when the NS API
fails and 500 for configuration problems.

Handlers are plain functions, so FastAPI runs them in its worker thread
pool; they all share the container's single price cache.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .container import Container
from .domain.errors import (
    AmbiguousStationError,
    ConfigurationError,
    NoPriceFoundError,
    NSTimesError,
    StationNotFoundError,
    UpstreamError,
)
from .domain.models import StationRecord, TravelClass, TravelType, Trip
from .ports.cache import PriceCachePort
from .services import PriceService, StationService, TripService

logger = logging.getLogger(__name__)


def station_json(record: StationRecord) -> Dict[str, Any]:
    return {"name": record.name, "uic_code": record.uic_code}


def trip_json(trip: Trip) -> Dict[str, Any]:
    return {
        "origin": trip.origin_name,
        "destination": trip.destination_name,
        "track": trip.track,
        "cancelled": trip.cancelled,
        "departure_time": trip.departure_time.isoformat(),
        "arrival_time": trip.arrival_time.isoformat(),
        "train_type": trip.train_type,
    }


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def parse_travel_class(raw: Optional[str]) -> TravelClass:
    """Parse the ``class`` query parameter (default: second class).

    Raises:
        ValueError: If the value is not 1 or 2.
    """
    if raw is None or raw == "":
        return TravelClass.SECOND
    try:
        number = int(raw)
    except ValueError:
        raise ValueError(f"Travel class must be 1 or 2, got {raw}") from None
    return TravelClass.from_number(number)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        container: Dependency container (defaults to production bindings).

    Returns:
        The configured application.
    """
    container = container or Container.create_default()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Load the station table and the persisted cache before serving,
        # so a corrupted cache file stops the server at startup.
        stats = container.resolve(PriceCachePort).stats()
        container.resolve(StationService)
        logger.info(
            "Server ready",
            extra={"cache_entries": stats.total_entries},
        )
        yield
        stats = container.resolve(PriceCachePort).stats()
        logger.info(
            "Server stopped",
            extra={
                "cache_entries": stats.total_entries,
                "cache_hits": stats.hits,
                "cache_misses": stats.misses,
            },
        )

    app = FastAPI(title="nstimes", version=__version__, lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(AmbiguousStationError)
    async def ambiguous_handler(request: Request, exc: AmbiguousStationError) -> JSONResponse:
        return error_response(
            400,
            exc.message,
            matches=[station_json(record) for record in exc.candidates],
        )

    @app.exception_handler(StationNotFoundError)
    async def not_found_handler(request: Request, exc: StationNotFoundError) -> JSONResponse:
        return error_response(
            400, exc.message, matches=[], suggestions=list(exc.suggestions)
        )

    @app.exception_handler(NoPriceFoundError)
    async def no_price_handler(request: Request, exc: NoPriceFoundError) -> JSONResponse:
        return error_response(404, exc.message)

    @app.exception_handler(UpstreamError)
    async def upstream_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.warning(
            "Upstream request failed",
            extra={"endpoint": exc.endpoint, "status_code": exc.status_code},
        )
        return error_response(502, str(exc))

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Configuration error", extra={"setting": exc.setting_name})
        return error_response(500, exc.message)

    @app.exception_handler(NSTimesError)
    async def domain_handler(request: Request, exc: NSTimesError) -> JSONResponse:
        logger.error("Request failed", exc_info=exc)
        return error_response(500, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        missing = [".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()]
        return error_response(400, f"Invalid or missing parameters: {', '.join(missing)}")

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/price")
    def price(
        origin: str = Query(..., alias="from"),
        destination: str = Query(..., alias="to"),
        travel_class: Optional[str] = Query(None, alias="class"),
    ) -> Any:
        try:
            cls = parse_travel_class(travel_class)
        except ValueError as e:
            return error_response(400, str(e))

        result = container.resolve(PriceService).prices(
            origin, destination, travel_class=cls, travel_type=TravelType.SINGLE
        )
        quote = result.first
        if quote is None:
            raise NoPriceFoundError(
                f"No prices found from {result.origin.name} to {result.destination.name}",
                origin=result.origin.name,
                destination=result.destination.name,
            )
        return {
            "from": result.origin.name,
            "to": result.destination.name,
            "price_cents": quote.total_price_cents,
            "travel_class": cls.label,
            "cached": result.cached,
        }

    @app.get("/trips")
    def trips(
        origin: str = Query(..., alias="from"),
        destination: str = Query(..., alias="to"),
    ) -> Dict[str, Any]:
        plan = container.resolve(TripService).trips(origin, destination)
        return {
            "from": plan.origin.name,
            "to": plan.destination.name,
            "trips": [trip_json(trip) for trip in plan.trips],
        }

    @app.get("/stations")
    def stations(q: str = Query(...)) -> Dict[str, Any]:
        service = container.resolve(StationService)
        outcome = service.lookup(q)
        suggestions = service.suggest(q) if not outcome.candidates else ()
        return {
            "query": q,
            "matches": [station_json(record) for record in outcome.candidates],
            "suggestions": list(suggestions),
        }

    return app


def main() -> None:
    """Entry point of the ``nstimes-server`` command."""
    import uvicorn

    from .config import get_config
    from .logging_config import setup_logging

    config = get_config()
    setup_logging(config.observability, level="INFO")
    app = create_app(Container.create_default(config))
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
