"""Thread-safe price cache with calendar expiry and optional persistence.

Ticket prices change once a year, on January 1st, so every entry
expires at the start of the calendar year following its creation.
Dates are evaluated in one fixed time zone (Europe/Amsterdam unless
configured otherwise) so expiry does not depend on the host clock's
zone.

Keys are direction independent: the two stations are sorted before the
key is composed, because a ticket A->B costs the same as B->A.

Persistence is a pretty-printed JSON object with sorted keys, written
through a temporary sibling file and an atomic rename after each
mutation. A missing file starts an empty cache; a malformed file is a
startup error.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import TypeAdapter, ValidationError

from ...config import CacheConfig
from ...domain.errors import (
    CacheCorruptedError,
    CachePersistenceError,
    ConfigurationError,
)
from ...domain.models import CacheEntry, CacheStats

Clock = Callable[[], date]

_ENTRIES_ADAPTER: TypeAdapter[Dict[str, CacheEntry]] = TypeAdapter(Dict[str, CacheEntry])


def cache_key(station_a: str, station_b: str, travel_class: int) -> str:
    """Build the direction-independent key for a route and class.

    The key is only ever compared whole, never split. Station names may
    contain hyphens ("Etten-Leur"), so two routes could in principle
    share a key; the bundled station table has no such pair, and the
    format stays compatible with existing cache files.

    Example:
        >>> cache_key("Utrecht Centraal", "Amsterdam Centraal", 2)
        'Amsterdam Centraal-Utrecht Centraal-2'
    """
    first, second = sorted((station_a, station_b))
    return f"{first}-{second}-{travel_class}"


def next_january_first(today: date) -> date:
    """Expiration date for an entry created on ``today``."""
    return date(today.year + 1, 1, 1)


@dataclass
class PriceCache:
    """Thread-safe price cache, optionally backed by a JSON file.

    This cache implements the PriceCachePort protocol. One re-entrant
    lock guards the entry map and the file write, so every call is
    atomic with respect to every other call.

    Attributes:
        path: Backing file (None = in-memory only)
        timezone: Reference time zone for "today"
        clock: Optional override returning today's date (tests)
        name: Cache name for logging

    Example:
        cache = PriceCache(path=Path("prices.json"))
        if cache.get("Den Haag C", "Amersfoort C", 2) is None:
            cache.set("Den Haag C", "Amersfoort C", 2, 1140)
    """

    path: Optional[Path] = None
    timezone: str = "Europe/Amsterdam"
    clock: Optional[Clock] = field(default=None, repr=False)
    name: str = "prices"

    _entries: Dict[str, CacheEntry] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)
    _zone: ZoneInfo = field(init=False, repr=False)

    # Statistics
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")
        try:
            self._zone = ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Unknown time zone {self.timezone!r}",
                setting_name="cache.timezone",
                cause=e,
            )
        if self.path is not None:
            self.path = Path(self.path)
            self._load()

    @classmethod
    def from_config(cls, config: CacheConfig) -> PriceCache:
        """Create a cache from configuration.

        Raises:
            CacheCorruptedError: If the configured file is malformed.
            ConfigurationError: If the time zone is unknown.
        """
        return cls(path=config.path, timezone=config.timezone)

    def get(self, station_a: str, station_b: str, travel_class: int) -> Optional[int]:
        """Get a cached price.

        Args:
            station_a: One end of the route.
            station_b: The other end of the route.
            travel_class: Travel class number (1 or 2).

        Returns:
            The price in cents, or None if not cached or expired.
        """
        key = cache_key(station_a, station_b, travel_class)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(self._today()):
                self._misses += 1
                self._logger.debug(
                    "Cache miss",
                    extra={"key": key, "expired": entry is not None},
                )
                return None

            self._hits += 1
            self._logger.debug("Cache hit", extra={"key": key})
            return entry.price_cents

    def set(
        self, station_a: str, station_b: str, travel_class: int, price_cents: int
    ) -> bool:
        """Cache a price until the start of next calendar year.

        Any previous entry for the route is replaced and expired
        entries are dropped. When a backing file is configured the
        whole map is written before the lock is released.

        Args:
            station_a: One end of the route.
            station_b: The other end of the route.
            travel_class: Travel class number (1 or 2).
            price_cents: Price in cents.

        Returns:
            True on success, False if the file write failed (the
            in-memory entry is kept).
        """
        key = cache_key(station_a, station_b, travel_class)
        with self._lock:
            today = self._today()
            self._entries[key] = CacheEntry(
                price_cents=price_cents,
                travel_class=travel_class,
                expires_at=next_january_first(today),
            )
            removed = self._drop_expired(today)
            self._logger.debug(
                "Cache entry set",
                extra={"key": key, "price_cents": price_cents, "purged": removed},
            )
            return self._flush_or_log()

    def purge_expired(self) -> int:
        """Remove expired entries and persist the result.

        Returns:
            Number of entries that were removed.
        """
        with self._lock:
            removed = self._drop_expired(self._today())
            if removed:
                self._logger.info("Expired prices purged", extra={"removed": removed})
                self._flush_or_log()
            return removed

    def stats(self) -> CacheStats:
        """Return entry counts and hit/miss statistics."""
        with self._lock:
            today = self._today()
            expired = sum(1 for e in self._entries.values() if e.is_expired(today))
            total = len(self._entries)
            return CacheStats(
                total_entries=total,
                valid_entries=total - expired,
                expired_entries=expired,
                hits=self._hits,
                misses=self._misses,
            )

    def _today(self) -> date:
        if self.clock is not None:
            return self.clock()
        return datetime.now(self._zone).date()

    def _drop_expired(self, today: date) -> int:
        expired = [k for k, e in self._entries.items() if e.is_expired(today)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _load(self) -> None:
        if self.path is None:
            return

        if not self.path.exists():
            self._logger.info(
                "No price cache file yet, starting empty",
                extra={"path": str(self.path)},
            )
            return

        try:
            content = self.path.read_text(encoding="utf-8")
            entries = _ENTRIES_ADAPTER.validate_json(content)
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            raise CacheCorruptedError(
                f"Failed to load price cache {self.path}",
                file_path=str(self.path),
                cause=e,
            )

        self._entries.update(entries)
        self._logger.info(
            "Price cache loaded",
            extra={"path": str(self.path), "entries": len(entries)},
        )

    def _flush(self) -> None:
        if self.path is None:
            return

        payload = _ENTRIES_ADAPTER.dump_python(self._entries, mode="json")
        document = json.dumps(payload, indent=2, sort_keys=True) + "\n"
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(document, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise CachePersistenceError(
                f"Failed to write price cache {self.path}",
                file_path=str(self.path),
                cause=e,
            )

    def _flush_or_log(self) -> bool:
        try:
            self._flush()
        except CachePersistenceError as e:
            self._logger.error(
                "Price cache write failed, continuing in memory",
                extra={"path": e.file_path, "error": str(e)},
            )
            return False
        return True
