"""Typed domain errors for nstimes.

"Not found" situations in the resolver and the cache are return values,
not exceptions. The errors below cover the truly exceptional cases and
the points where the orchestration layer turns a lookup outcome into a
user-facing failure.

All errors inherit from NSTimesError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .models import StationRecord


@dataclass
class NSTimesError(Exception):
    """Base error for the nstimes domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class CacheCorruptedError(NSTimesError):
    """The persisted price cache could not be parsed at startup.

    Attributes:
        file_path: Path of the malformed cache file
    """

    file_path: Optional[str] = None


@dataclass
class CachePersistenceError(NSTimesError):
    """Writing the price cache to disk failed.

    Attributes:
        file_path: Path of the cache file
    """

    file_path: Optional[str] = None


@dataclass
class UpstreamError(NSTimesError):
    """The NS API could not be reached or returned an unusable response.

    Attributes:
        endpoint: API path that was called
        status_code: HTTP status code, if a response was received
    """

    endpoint: str = ""
    status_code: Optional[int] = None


@dataclass
class ConfigurationError(NSTimesError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
    """

    setting_name: str = ""


@dataclass
class StationNotFoundError(NSTimesError):
    """No station matches the user's query.

    Attributes:
        query: The query as typed by the user
        suggestions: Closest station names, for "did you mean" hints
    """

    query: str = ""
    suggestions: tuple[str, ...] = ()


@dataclass
class AmbiguousStationError(NSTimesError):
    """Several stations match the user's query.

    Attributes:
        query: The query as typed by the user
        candidates: Matching stations in directory order
    """

    query: str = ""
    candidates: tuple[StationRecord, ...] = ()


@dataclass
class NoPriceFoundError(NSTimesError):
    """The price API returned no price for the route.

    Attributes:
        origin: Name of the departure station
        destination: Name of the arrival station
    """

    origin: str = ""
    destination: str = ""
