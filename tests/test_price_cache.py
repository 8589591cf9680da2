"""Tests for the price cache: keys, expiry, persistence and concurrency."""

import json
import os
import threading
from datetime import date
from itertools import combinations
from pathlib import Path

import pytest

from conftest import FixedClock
from nstimes.adapters.cache import (
    NullPriceCache,
    PriceCache,
    cache_key,
    next_january_first,
)
from nstimes.config import CacheConfig, StationsConfig
from nstimes.domain.errors import CacheCorruptedError, ConfigurationError
from nstimes.domain.models import CacheStats
from nstimes.stations import load_directory


def test_cache_key_is_direction_independent():
    assert cache_key("Den Haag C", "Amersfoort C", 2) == "Amersfoort C-Den Haag C-2"
    assert cache_key("Amersfoort C", "Den Haag C", 2) == "Amersfoort C-Den Haag C-2"
    assert cache_key("Amersfoort C", "Den Haag C", 1) != cache_key("Amersfoort C", "Den Haag C", 2)


def test_hyphenated_names_keep_keys_distinct():
    assert cache_key("Etten-Leur", "Breda", 2) == "Breda-Etten-Leur-2"

    names = [record.name for record in load_directory(StationsConfig().data_path)]
    pairs = list(combinations(names, 2))
    keys = {cache_key(a, b, 2) for a, b in pairs}

    assert len(keys) == len(pairs)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2025, 1, 1), date(2026, 1, 1)),
        (date(2025, 6, 15), date(2026, 1, 1)),
        (date(2025, 12, 31), date(2026, 1, 1)),
    ],
)
def test_next_january_first(today, expected):
    assert next_january_first(today) == expected


def test_set_then_get_in_both_directions(price_cache):
    assert price_cache.set("Den Haag C", "Amersfoort C", 2, 1140) is True

    assert price_cache.get("Den Haag C", "Amersfoort C", 2) == 1140
    assert price_cache.get("Amersfoort C", "Den Haag C", 2) == 1140
    assert price_cache.get("Amersfoort C", "Den Haag C", 1) is None


def test_set_overwrites_previous_entry(price_cache):
    price_cache.set("Utrecht C", "Schiphol", 2, 900)
    price_cache.set("Schiphol", "Utrecht C", 2, 950)

    assert price_cache.get("Utrecht C", "Schiphol", 2) == 950
    assert price_cache.stats().total_entries == 1


def test_entry_expires_on_january_first():
    clock = FixedClock(date(2025, 12, 31))
    cache = PriceCache(clock=clock)
    cache.set("Den Haag C", "Amersfoort C", 2, 1140)

    assert cache.get("Den Haag C", "Amersfoort C", 2) == 1140


def test_failed_rename_removes_temporary_file(tmp_path: Path, clock, monkeypatch):
    def refuse(src, dst):
        raise PermissionError("read-only target")

    monkeypatch.setattr(os, "replace", refuse)
    cache = PriceCache(path=tmp_path / "prices.json", clock=clock)

    assert cache.set("Den Haag C", "Amersfoort C", 2, 1140) is False
    assert list(tmp_path.iterdir()) == []

    clock.today = date(2026, 1, 1)
    assert cache.get("Den Haag C", "Amersfoort C", 2) is None


def test_expired_get_does_not_mutate_and_next_set_purges():
    clock = FixedClock(date(2025, 3, 1))
    cache = PriceCache(clock=clock)
    cache.set("Den Haag C", "Amersfoort C", 2, 1140)

    clock.today = date(2026, 2, 1)
    assert cache.get("Den Haag C", "Amersfoort C", 2) is None
    assert cache.stats() == CacheStats(
        total_entries=1, valid_entries=0, expired_entries=1, hits=0, misses=1
    )

    cache.set("Utrecht C", "Schiphol", 2, 900)
    stats = cache.stats()
    assert stats.total_entries == 1
    assert stats.expired_entries == 0


def test_expired_entry_is_replaced_by_set():
    clock = FixedClock(date(2025, 3, 1))
    cache = PriceCache(clock=clock)
    cache.set("Den Haag C", "Amersfoort C", 2, 1140)

    clock.today = date(2026, 3, 1)
    cache.set("Den Haag C", "Amersfoort C", 2, 1190)

    assert cache.get("Amersfoort C", "Den Haag C", 2) == 1190


def test_purge_expired():
    clock = FixedClock(date(2025, 3, 1))
    cache = PriceCache(clock=clock)
    cache.set("A", "B", 2, 100)
    cache.set("A", "C", 2, 200)

    assert cache.purge_expired() == 0

    clock.today = date(2026, 1, 1)
    assert cache.purge_expired() == 2
    assert cache.stats().total_entries == 0


def test_stats_count_hits_and_misses(price_cache):
    price_cache.set("A", "B", 2, 100)
    price_cache.get("A", "B", 2)
    price_cache.get("B", "A", 2)
    price_cache.get("A", "B", 1)

    stats = price_cache.stats()
    assert stats.hits == 2
    assert stats.misses == 1
    assert stats.valid_entries == 1


def test_missing_file_starts_empty(tmp_path: Path, clock):
    path = tmp_path / "prices.json"

    cache = PriceCache(path=path, clock=clock)

    assert cache.stats().total_entries == 0
    assert not path.exists()


def test_persisted_cache_survives_restart(tmp_path: Path, clock):
    path = tmp_path / "prices.json"
    cache = PriceCache(path=path, clock=clock)
    cache.set("Den Haag C", "Amersfoort C", 2, 1140)
    cache.set("Utrecht C", "Schiphol", 1, 1500)

    reloaded = PriceCache(path=path, clock=clock)

    assert reloaded.get("Amersfoort C", "Den Haag C", 2) == 1140
    assert reloaded.get("Schiphol", "Utrecht C", 1) == 1500
    assert reloaded.stats().total_entries == 2


def test_persisted_file_format(tmp_path: Path, clock):
    path = tmp_path / "prices.json"
    cache = PriceCache(path=path, clock=clock)
    cache.set("Den Haag C", "Amersfoort C", 2, 1140)

    document = json.loads(path.read_text(encoding="utf-8"))

    assert document == {
        "Amersfoort C-Den Haag C-2": {
            "price_cents": 1140,
            "travel_class": 2,
            "expires_at": "2026-01-01",
        }
    }
    assert not (tmp_path / ".prices.json.tmp").exists()


def test_expired_entries_are_not_served_after_restart(tmp_path: Path):
    path = tmp_path / "prices.json"
    PriceCache(path=path, clock=FixedClock(date(2025, 5, 1))).set("A", "B", 2, 100)

    reloaded = PriceCache(path=path, clock=FixedClock(date(2026, 1, 1)))

    assert reloaded.get("A", "B", 2) is None


@pytest.mark.parametrize(
    "content",
    [
        b"not json at all",
        b'["a", "list"]',
        b'{"A-B-2": {"price_cents": "lots", "travel_class": 2, "expires_at": "2026-01-01"}}',
        b'{"A-B-2": {"price_cents": 100}}',
        b'{"A-B-2": \xff\xfe}',
    ],
)
def test_corrupted_file_is_a_startup_error(tmp_path: Path, clock, content):
    path = tmp_path / "prices.json"
    path.write_bytes(content)

    with pytest.raises(CacheCorruptedError) as excinfo:
        PriceCache(path=path, clock=clock)

    assert excinfo.value.file_path == str(path)


def test_write_failure_degrades_to_memory(tmp_path: Path, clock):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    cache = PriceCache(path=blocker / "prices.json", clock=clock)

    assert cache.set("Den Haag C", "Amersfoort C", 2, 1140) is False
    assert cache.get("Den Haag C", "Amersfoort C", 2) == 1140


def test_unknown_time_zone_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as excinfo:
        PriceCache(timezone="Mars/Olympus_Mons")

    assert excinfo.value.setting_name == "cache.timezone"


def test_from_config(tmp_path: Path):
    path = tmp_path / "prices.json"
    cache = PriceCache.from_config(CacheConfig(path=path, timezone="Europe/Amsterdam"))

    assert cache.set("A", "B", 2, 100) is True
    assert cache.get("B", "A", 2) == 100
    assert path.exists()


def test_concurrent_writers_on_same_key(price_cache):
    barrier = threading.Barrier(2)

    def writer(price: int) -> None:
        barrier.wait()
        for _ in range(200):
            price_cache.set("Den Haag C", "Amersfoort C", 2, price)

    threads = [threading.Thread(target=writer, args=(p,)) for p in (1000, 1200)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert price_cache.get("Den Haag C", "Amersfoort C", 2) in (1000, 1200)
    assert price_cache.stats().total_entries == 1


def test_concurrent_writers_do_not_lose_updates(tmp_path: Path, clock):
    path = tmp_path / "prices.json"
    cache = PriceCache(path=path, clock=clock)

    def writer(worker: int) -> None:
        for i in range(10):
            cache.set(f"S{worker}", f"T{i}", 2, worker * 100 + i)
            cache.get(f"T{i}", f"S{worker}", 2)

    threads = [threading.Thread(target=writer, args=(w,)) for w in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cache.stats().total_entries == 80

    reloaded = PriceCache(path=path, clock=clock)
    assert reloaded.stats().total_entries == 80
    assert reloaded.get("T3", "S5", 2) == 503


def test_null_cache_never_stores():
    cache = NullPriceCache()

    assert cache.set("A", "B", 2, 100) is True
    assert cache.get("A", "B", 2) is None
    assert cache.purge_expired() == 0
    assert cache.stats() == CacheStats(total_entries=0, valid_entries=0, expired_entries=0)
