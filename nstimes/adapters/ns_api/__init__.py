"""NS API adapter - Implementation of the NSApiPort over HTTP."""

from .client import NSApiClient

__all__ = ["NSApiClient"]
