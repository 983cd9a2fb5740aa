"""
Unit tests for roadtrip_planner/api/enrichment.py

Tests cover:
- Location deduplication and per-pass caching
- Coordinate attachment to route legs, overnight stays and attractions
- Partial / total failure handling and the attraction fallbacks
- Idempotence and non-mutation of the input itinerary
"""
import random

import pytest

from conftest import KNOWN_LOCATIONS, FakeMaps, all_attraction_places
from roadtrip_planner.api.enrichment import enrich_itinerary, normalize_location
from roadtrip_planner.api.models import GeocodingStatus, Itinerary


def _coords(c):
    return None if c is None else (c.lat, c.lng, c.approximate)


def _all_coordinates(itinerary):
    out = []
    for day in itinerary.days:
        out.append(_coords(day.route.from_coordinates))
        out.append(_coords(day.route.to_coordinates))
        out.append(_coords(day.overnight_coordinates))
        out.extend(_coords(a.coordinates) for a in day.attractions)
    return out


# ---------------------------------------------------------------------------
# normalize_location
# ---------------------------------------------------------------------------

class TestNormalizeLocation:
    def test_collapses_whitespace_and_case(self):
        assert normalize_location("  Bend,   OR ") == normalize_location("bend, or")

    def test_keeps_distinct_names_distinct(self):
        assert normalize_location("Portland, OR") != normalize_location("Portland, ME")


# ---------------------------------------------------------------------------
# Fully available geocoder
# ---------------------------------------------------------------------------

class TestFullyAvailable:
    def test_status_ok_and_all_coordinates(self, itinerary, fake_maps, planner_config):
        enriched = enrich_itinerary(itinerary, fake_maps, planner_config=planner_config)
        assert enriched.geocoding_status is GeocodingStatus.OK
        assert enriched.geocoding_note is None
        assert all(c is not None for c in _all_coordinates(enriched))

    def test_overnight_of_day_one_is_geocoded(self, itinerary, fake_maps, planner_config):
        enriched = enrich_itinerary(itinerary, fake_maps, planner_config=planner_config)
        overnight = enriched.days[0].overnight_coordinates
        assert (overnight.lat, overnight.lng) == KNOWN_LOCATIONS["Olympia, WA"]

    def test_each_distinct_location_geocoded_once(self, itinerary, fake_maps, planner_config):
        enrich_itinerary(itinerary, fake_maps, planner_config=planner_config)
        location_calls = [q for q in fake_maps.geocode_calls if q in KNOWN_LOCATIONS]
        assert sorted(location_calls) == sorted(KNOWN_LOCATIONS)

    def test_case_variants_share_one_lookup(self, raw_itinerary, fake_maps, planner_config):
        raw_itinerary["days"][1]["route"]["from"] = "olympia,  WA"
        itinerary = Itinerary.model_validate(raw_itinerary)
        enriched = enrich_itinerary(itinerary, fake_maps, planner_config=planner_config)
        assert "olympia,  WA" not in fake_maps.geocode_calls
        assert enriched.days[1].route.from_coordinates.lat == KNOWN_LOCATIONS["Olympia, WA"][0]

    def test_attractions_get_place_details(self, itinerary, fake_maps, planner_config):
        enriched = enrich_itinerary(itinerary, fake_maps, planner_config=planner_config)
        attraction = enriched.days[0].attractions[0]
        assert attraction.place_details.rating == 4.5
        assert attraction.coordinates.approximate is False
        assert fake_maps.search_calls[0] == "Olympia Attraction 1, Olympia, WA"

    def test_is_idempotent(self, itinerary, planner_config):
        first = enrich_itinerary(itinerary, FakeMaps(places=all_attraction_places()), planner_config=planner_config)
        second = enrich_itinerary(itinerary, FakeMaps(places=all_attraction_places()), planner_config=planner_config)
        assert _all_coordinates(first) == _all_coordinates(second)

    def test_input_is_not_mutated(self, itinerary, fake_maps, planner_config):
        before = itinerary.to_dict()
        enriched = enrich_itinerary(itinerary, fake_maps, planner_config=planner_config)
        assert itinerary.to_dict() == before
        assert enriched is not itinerary
        assert enriched.days[0].route.from_location == itinerary.days[0].route.from_location
        assert enriched.total_attractions == itinerary.total_attractions


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:
    def test_partial_location_failure(self, itinerary, planner_config):
        maps = FakeMaps(places=all_attraction_places(), fail={"Seattle, WA"})
        enriched = enrich_itinerary(itinerary, maps, planner_config=planner_config)

        assert enriched.geocoding_status is GeocodingStatus.PARTIAL
        assert enriched.days[0].route.from_coordinates is None
        # Olympia still attached everywhere it is referenced
        olympia = KNOWN_LOCATIONS["Olympia, WA"]
        assert (enriched.days[0].route.to_coordinates.lat, enriched.days[0].route.to_coordinates.lng) == olympia
        assert (enriched.days[0].overnight_coordinates.lat, enriched.days[0].overnight_coordinates.lng) == olympia
        assert (enriched.days[1].route.from_coordinates.lat, enriched.days[1].route.from_coordinates.lng) == olympia

    def test_everything_fails(self, itinerary, planner_config):
        maps = FakeMaps(fail_all=True)
        enriched = enrich_itinerary(itinerary, maps, planner_config=planner_config)

        assert enriched.geocoding_status is GeocodingStatus.FAILED
        assert "unavailable" in enriched.geocoding_note
        assert len(enriched.days) == len(itinerary.days)
        assert all(c is None for c in _all_coordinates(enriched))
        assert all(len(d.attractions) == 5 for d in enriched.days)

    def test_attraction_falls_back_to_plain_geocode(self, itinerary, planner_config):
        locations = dict(KNOWN_LOCATIONS)
        locations["Olympia Attraction 1, Olympia, WA"] = (47.1, -122.8)
        maps = FakeMaps(locations=locations)
        enriched = enrich_itinerary(itinerary, maps, planner_config=planner_config)

        attraction = enriched.days[0].attractions[0]
        assert (attraction.coordinates.lat, attraction.coordinates.lng) == (47.1, -122.8)
        assert attraction.coordinates.approximate is False
        assert attraction.place_details is None
        assert enriched.geocoding_status is GeocodingStatus.PARTIAL

    def test_attraction_falls_back_near_overnight(self, itinerary, planner_config):
        maps = FakeMaps()
        enriched = enrich_itinerary(itinerary, maps, rng=random.Random(7), planner_config=planner_config)

        base_lat, base_lng = KNOWN_LOCATIONS["Olympia, WA"]
        for attraction in enriched.days[0].attractions:
            assert attraction.coordinates.approximate is True
            assert abs(attraction.coordinates.lat - base_lat) <= 0.005
            assert abs(attraction.coordinates.lng - base_lng) <= 0.005

    def test_attraction_without_overnight_has_no_coordinates(self, itinerary, planner_config):
        maps = FakeMaps(fail={"Portland, OR"})
        enriched = enrich_itinerary(itinerary, maps, planner_config=planner_config)
        assert all(a.coordinates is None for a in enriched.days[1].attractions)
        assert all(a.coordinates is not None for a in enriched.days[0].attractions)

    def test_unexpected_error_returns_failed_copy(self, itinerary, planner_config):
        class BrokenMaps:
            def geocode(self, query):
                raise RuntimeError("unexpected payload")

            def search_place(self, query):
                raise RuntimeError("unexpected payload")

        enriched = enrich_itinerary(itinerary, BrokenMaps(), planner_config=planner_config)
        assert enriched.geocoding_status is GeocodingStatus.FAILED
        assert len(enriched.days) == 2

    def test_one_broken_attraction_lookup_keeps_the_rest(self, itinerary, planner_config):
        broken = "Portland Attraction 3, Portland, OR"

        class FlakyMaps(FakeMaps):
            def search_place(self, query):
                if query == broken:
                    raise KeyError("geometry")
                return super().search_place(query)

        maps = FlakyMaps(places=all_attraction_places())
        enriched = enrich_itinerary(itinerary, maps, rng=random.Random(3), planner_config=planner_config)

        assert enriched.geocoding_status is GeocodingStatus.PARTIAL
        olympia = KNOWN_LOCATIONS["Olympia, WA"]
        overnight = enriched.days[0].overnight_coordinates
        assert (overnight.lat, overnight.lng) == olympia
        assert all(a.place_details is not None for a in enriched.days[0].attractions)
        fallback = enriched.days[1].attractions[2]
        assert fallback.name == "Portland Attraction 3"
        assert fallback.coordinates.approximate is True

    def test_one_broken_location_lookup_keeps_the_rest(self, itinerary, planner_config):
        class FlakyMaps(FakeMaps):
            def geocode(self, query):
                if query == "Seattle, WA":
                    raise TypeError("unexpected payload")
                return super().geocode(query)

        maps = FlakyMaps(places=all_attraction_places())
        enriched = enrich_itinerary(itinerary, maps, planner_config=planner_config)

        assert enriched.geocoding_status is GeocodingStatus.PARTIAL
        assert enriched.days[0].route.from_coordinates is None
        assert enriched.days[1].overnight_coordinates is not None

    def test_cache_is_not_shared_between_calls(self, itinerary, planner_config):
        maps = FakeMaps(places=all_attraction_places())
        enrich_itinerary(itinerary, maps, planner_config=planner_config)
        enrich_itinerary(itinerary, maps, planner_config=planner_config)
        assert maps.geocode_calls.count("Seattle, WA") == 2


@pytest.mark.parametrize("failed", ["Olympia, WA", "Portland, OR"])
def test_single_location_failure_never_raises(itinerary, planner_config, failed):
    maps = FakeMaps(places=all_attraction_places(), fail={failed})
    enriched = enrich_itinerary(itinerary, maps, planner_config=planner_config)
    assert enriched.geocoding_status is GeocodingStatus.PARTIAL
