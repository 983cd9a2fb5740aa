import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from roadtrip_planner.api.errors import MapsError, MapsErrorKind
from roadtrip_planner.api.models import GeocodeResult, Itinerary, PlaceDetails, TripRequest


PLANNER_CONFIG = {
    "attractions_per_stop": 5,
    "attraction_radius_miles": 100,
    "max_total_stops": 25,
    "default_departure_time": "9:00 AM",
    "max_trip_days": 30,
    "max_photos": 3,
    "photo_max_width": 400,
    "fallback_jitter_degrees": 0.01,
}

KNOWN_LOCATIONS = {
    "Seattle, WA": (47.6062, -122.3321),
    "Olympia, WA": (47.0379, -122.9007),
    "Portland, OR": (45.5152, -122.6784),
}


def _attractions(prefix):
    return [
        {"name": f"{prefix} Attraction {i}", "description": f"Stop {i} near {prefix}"}
        for i in range(1, 6)
    ]


def raw_itinerary_dict():
    """Two-day Seattle -> Portland plan in the LLM's JSON shape."""
    return {
        "totalDays": 2,
        "totalDistance": 175,
        "totalDrivingTime": "3h 05m",
        "totalAttractions": 10,
        "days": [
            {
                "dayNumber": 1,
                "date": "2026-06-01",
                "route": {
                    "from": "Seattle, WA",
                    "to": "Olympia, WA",
                    "distance": 61,
                    "drivingTime": "1h 05m",
                    "departureTime": "9:00 AM",
                    "arrivalTime": "10:05 AM",
                },
                "attractions": _attractions("Olympia"),
                "overnightLocation": "Olympia, WA",
            },
            {
                "dayNumber": 2,
                "date": "2026-06-02",
                "route": {
                    "from": "Olympia, WA",
                    "to": "Portland, OR",
                    "distance": 114,
                    "drivingTime": "2h 00m",
                    "departureTime": "9:00 AM",
                    "arrivalTime": "11:00 AM",
                },
                "attractions": _attractions("Portland"),
                "overnightLocation": "Portland, OR",
            },
        ],
    }


class FakeMaps:
    """In-memory stand-in for GoogleMapsAdapter.

    ``locations`` maps query -> (lat, lng). Attraction queries
    ("<name>, <overnight>") resolve through ``places`` when listed there.
    Anything in ``fail`` raises ``MapsError``.
    """

    def __init__(self, locations=None, places=None, fail=(), fail_all=False):
        self.locations = dict(KNOWN_LOCATIONS if locations is None else locations)
        self.places = dict(places or {})
        self.fail = set(fail)
        self.fail_all = fail_all
        self.geocode_calls = []
        self.search_calls = []

    def geocode(self, query):
        self.geocode_calls.append(query)
        if self.fail_all or query in self.fail or query not in self.locations:
            raise MapsError(MapsErrorKind.NOT_FOUND, f"Failed to find location: {query}")
        lat, lng = self.locations[query]
        return GeocodeResult(lat=lat, lng=lng, formatted_address=query)

    def search_place(self, query):
        self.search_calls.append(query)
        if self.fail_all or query in self.fail or query not in self.places:
            raise MapsError(MapsErrorKind.NOT_FOUND, f"No place for {query}")
        lat, lng = self.places[query]
        return PlaceDetails(
            place_id=f"pid-{len(self.search_calls)}",
            name=query.split(",")[0],
            formatted_address=query,
            rating=4.5,
            user_ratings_total=120,
            coordinates={"lat": lat, "lng": lng, "formattedAddress": query},
        )


def all_attraction_places():
    """Place-search answers for every attraction in ``raw_itinerary_dict``."""
    places = {}
    for day in raw_itinerary_dict()["days"]:
        base = KNOWN_LOCATIONS[day["overnightLocation"]]
        for i, attraction in enumerate(day["attractions"]):
            query = f"{attraction['name']}, {day['overnightLocation']}"
            places[query] = (base[0] + i * 0.01, base[1] + i * 0.01)
    return places


def openai_client_returning(content):
    """MagicMock shaped like ``OpenAI`` whose completion returns ``content``."""
    client = MagicMock()
    response = MagicMock()
    response.choices[0].message.content = content
    client.chat.completions.create.return_value = response
    return client


@pytest.fixture
def planner_config():
    return dict(PLANNER_CONFIG)


@pytest.fixture
def trip_request():
    return TripRequest(
        start_location="Seattle, WA",
        end_location="Portland, OR",
        start_date=date(2026, 6, 1),
        end_date=date(2026, 6, 2),
        interests=["Food and dining"],
    )


@pytest.fixture
def trip_payload():
    return {
        "startLocation": "Seattle, WA",
        "endLocation": "Portland, OR",
        "startDate": "2026-06-01",
        "endDate": "2026-06-02",
        "startTime": "09:00",
        "checkInTime": "22:00",
        "isRoundTrip": "false",
        "interests": ["Food and dining"],
    }


@pytest.fixture
def raw_itinerary():
    return raw_itinerary_dict()


@pytest.fixture
def itinerary():
    return Itinerary.model_validate(raw_itinerary_dict())


@pytest.fixture
def itinerary_json():
    return json.dumps(raw_itinerary_dict())


@pytest.fixture
def fake_maps():
    return FakeMaps(places=all_attraction_places())
