"""Tests for the local, remote and fallback station resolvers."""

import pytest

from conftest import (
    AMSTERDAM_CENTRAAL,
    AMSTERDAM_SLOTERDIJK,
    DEN_HAAG_CENTRAAL,
    FakeNSApi,
)
from nstimes.adapters.ns_api import NSApiClient
from nstimes.adapters.stations import (
    FallbackStationResolver,
    LocalStationResolver,
    RemoteStationResolver,
)
from nstimes.config import NSApiConfig
from nstimes.domain.errors import UpstreamError
from nstimes.domain.models import Ambiguous, NoMatch, SingleMatch, StationRecord

ZWOLLE = StationRecord("Zwolle", 8400747, frozenset({"Zl"}))


def test_local_resolver_delegates_to_directory(directory):
    resolver = LocalStationResolver(directory)

    assert resolver.resolve("Den Haag C") == SingleMatch(
        query="Den Haag C", record=DEN_HAAG_CENTRAAL
    )
    assert isinstance(resolver.resolve("Amsterdam"), Ambiguous)
    assert resolver.resolve("Zwolle") == NoMatch(query="Zwolle")


class TestRemoteStationResolver:
    """Resolution through the NS station search."""

    def test_exact_result_is_preferred_over_other_results(self):
        api = FakeNSApi(stations=[AMSTERDAM_CENTRAAL, AMSTERDAM_SLOTERDIJK])
        resolver = RemoteStationResolver(api)

        outcome = resolver.resolve("amsterdam centraal")

        assert outcome == SingleMatch(query="amsterdam centraal", record=AMSTERDAM_CENTRAAL)

    def test_exact_alias_result_is_preferred(self):
        api = FakeNSApi(stations=[AMSTERDAM_SLOTERDIJK, AMSTERDAM_CENTRAAL])
        resolver = RemoteStationResolver(api)

        outcome = resolver.resolve("Asd")

        assert isinstance(outcome, SingleMatch)
        assert outcome.record == AMSTERDAM_CENTRAAL

    def test_several_results_without_exact_match_are_ambiguous(self):
        api = FakeNSApi(stations=[AMSTERDAM_CENTRAAL, AMSTERDAM_SLOTERDIJK])
        resolver = RemoteStationResolver(api)

        outcome = resolver.resolve("Amsterdam")

        assert isinstance(outcome, Ambiguous)
        assert outcome.candidates == (AMSTERDAM_CENTRAAL, AMSTERDAM_SLOTERDIJK)

    def test_single_result_is_a_match(self):
        api = FakeNSApi(stations=[ZWOLLE])
        resolver = RemoteStationResolver(api)

        assert resolver.resolve("Zwol") == SingleMatch(query="Zwol", record=ZWOLLE)

    def test_no_results(self):
        resolver = RemoteStationResolver(FakeNSApi())

        assert resolver.resolve("Nowhere") == NoMatch(query="Nowhere")

    def test_empty_query_does_not_call_upstream(self):
        api = FakeNSApi(stations=[ZWOLLE])
        resolver = RemoteStationResolver(api)

        assert resolver.resolve("  ") == NoMatch(query="  ")
        assert api.calls == []

    def test_query_and_limit_are_forwarded(self):
        api = FakeNSApi(stations=[ZWOLLE])
        resolver = RemoteStationResolver(api, limit=3)

        resolver.resolve(" Zwolle ")

        assert api.calls == [("search_stations", "Zwolle", 3)]

    def test_upstream_errors_propagate(self):
        api = FakeNSApi(error=UpstreamError("boom", endpoint="/nsapp-stations/v3"))
        resolver = RemoteStationResolver(api)

        with pytest.raises(UpstreamError):
            resolver.resolve("Zwolle")


class TestFallbackStationResolver:
    """Local table first, NS station search on NoMatch."""

    def test_local_match_does_not_call_fallback(self, directory):
        api = FakeNSApi(stations=[ZWOLLE])
        resolver = FallbackStationResolver(
            primary=LocalStationResolver(directory),
            fallback=RemoteStationResolver(api),
        )

        outcome = resolver.resolve("Den Haag C")

        assert isinstance(outcome, SingleMatch)
        assert api.calls == []

    def test_local_ambiguity_is_returned_as_is(self, directory):
        api = FakeNSApi(stations=[ZWOLLE])
        resolver = FallbackStationResolver(
            primary=LocalStationResolver(directory),
            fallback=RemoteStationResolver(api),
        )

        assert isinstance(resolver.resolve("Amsterdam"), Ambiguous)
        assert api.calls == []

    def test_no_local_match_uses_fallback(self, directory):
        api = FakeNSApi(stations=[ZWOLLE])
        resolver = FallbackStationResolver(
            primary=LocalStationResolver(directory),
            fallback=RemoteStationResolver(api),
        )

        assert resolver.resolve("Zwolle") == SingleMatch(query="Zwolle", record=ZWOLLE)
        assert api.count("search_stations") == 1

    def test_unavailable_fallback_degrades_to_no_match(self, directory):
        api = FakeNSApi(error=UpstreamError("down", endpoint="/nsapp-stations/v3"))
        resolver = FallbackStationResolver(
            primary=LocalStationResolver(directory),
            fallback=RemoteStationResolver(api),
        )

        assert resolver.resolve("Zwolle") == NoMatch(query="Zwolle")

    def test_missing_token_degrades_to_no_match(self, directory):
        resolver = FallbackStationResolver(
            primary=LocalStationResolver(directory),
            fallback=RemoteStationResolver(NSApiClient(NSApiConfig(api_token=None))),
        )

        assert resolver.resolve("Nowhere") == NoMatch(query="Nowhere")
