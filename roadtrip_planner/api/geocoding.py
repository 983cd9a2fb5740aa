# roadtrip_planner/api/geocoding.py
"""Google Maps Platform adapter.

Wraps the ``googlemaps`` client calls the planner needs (text search, place
details, directions) and turns every provider failure into a ``MapsError``
with a small set of kinds, so callers never see googlemaps exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import googlemaps
from googlemaps import exceptions as gmaps_exceptions

from roadtrip_planner.api.config import get_google_maps_config, get_planner_config
from roadtrip_planner.api.errors import MapsError, MapsErrorKind
from roadtrip_planner.api.models import Coordinates, GeocodeResult, PlaceDetails

logger = logging.getLogger(__name__)

PLACE_PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"

PLACE_DETAIL_FIELDS = [
    "place_id",
    "name",
    "formatted_address",
    "geometry/location",
    "rating",
    "user_ratings_total",
    "photo",
    "website",
    "formatted_phone_number",
]

_STATUS_KINDS = {
    "REQUEST_DENIED": MapsErrorKind.REQUEST_DENIED,
    "OVER_DAILY_LIMIT": MapsErrorKind.REQUEST_DENIED,
    "INVALID_REQUEST": MapsErrorKind.INVALID_REQUEST,
    "ZERO_RESULTS": MapsErrorKind.NOT_FOUND,
    "NOT_FOUND": MapsErrorKind.NOT_FOUND,
    "OVER_QUERY_LIMIT": MapsErrorKind.UNAVAILABLE,
}


def _translate_error(exc: Exception, what: str) -> MapsError:
    if isinstance(exc, gmaps_exceptions.ApiError):
        kind = _STATUS_KINDS.get(exc.status, MapsErrorKind.UNKNOWN)
        if kind is MapsErrorKind.REQUEST_DENIED:
            message = "Google Maps API request denied. Please check your API key permissions and billing."
        else:
            message = f"Google Maps API error for {what}: {exc.status} {exc.message or ''}".strip()
        return MapsError(kind, message)
    if isinstance(exc, (gmaps_exceptions.Timeout, gmaps_exceptions.TransportError)):
        return MapsError(MapsErrorKind.UNAVAILABLE, f"Google Maps API unreachable for {what}: {exc}")
    return MapsError(MapsErrorKind.UNKNOWN, f"Google Maps API error for {what}: {exc}")


def _location_of(result: Dict[str, Any], what: str):
    """(lat, lng) of a places result; a malformed payload is a MapsError."""
    try:
        loc = result["geometry"]["location"]
        return float(loc["lat"]), float(loc["lng"])
    except (KeyError, TypeError, ValueError) as exc:
        raise MapsError(MapsErrorKind.UNKNOWN, f"Malformed location in Google Maps result for {what}: {exc!r}") from exc


class GoogleMapsAdapter:
    """Geocoding, place lookup and routing on top of ``googlemaps.Client``."""

    def __init__(self, client: Optional[googlemaps.Client] = None, planner_config: Optional[dict] = None):
        self._client = client
        self._planner_config = planner_config or get_planner_config()
        maps_cfg = get_google_maps_config()
        self._photo_key = maps_cfg["frontend_api_key"] or maps_cfg["server_api_key"]

    def _get_client(self) -> googlemaps.Client:
        """Return the googlemaps client, creating it on first use."""
        if self._client is None:
            api_key = get_google_maps_config()["server_api_key"]
            if not api_key:
                logger.error("No Google Maps server API key found in config")
                raise MapsError(
                    MapsErrorKind.REQUEST_DENIED,
                    "Google Maps Server API key is not configured",
                )
            logger.info("Initializing Google Maps client with key: %s...", api_key[:6])
            try:
                self._client = googlemaps.Client(key=api_key)
            except ValueError as exc:
                logger.error(f"Google Maps client rejected the server API key: {exc}")
                raise MapsError(
                    MapsErrorKind.REQUEST_DENIED,
                    f"Google Maps Server API key is invalid: {exc}",
                ) from exc
        return self._client

    # ------------------------------------------------------------------ #
    # Text search / geocoding
    # ------------------------------------------------------------------ #
    def _text_search(self, query: str) -> Dict[str, Any]:
        client = self._get_client()
        try:
            response = client.places(query=query, language="en")
        except (gmaps_exceptions.ApiError, gmaps_exceptions.TransportError, gmaps_exceptions.Timeout) as exc:
            raise _translate_error(exc, repr(query)) from exc

        results = response.get("results") or []
        if not results:
            raise MapsError(
                MapsErrorKind.NOT_FOUND,
                f"Failed to find location: {query}. Status: {response.get('status', 'ZERO_RESULTS')}",
            )
        return results[0]

    def geocode(self, query: str) -> GeocodeResult:
        """Resolve a free-text location to coordinates.

        Raises:
            MapsError: when the provider rejects the call or finds nothing.
        """
        logger.debug("Geocoding place: %s", query)
        result = self._text_search(query)
        lat, lng = _location_of(result, query)
        return GeocodeResult(
            lat=lat,
            lng=lng,
            formatted_address=result.get("formatted_address"),
        )

    # ------------------------------------------------------------------ #
    # Place details
    # ------------------------------------------------------------------ #
    def photo_url(self, photo_reference: str) -> str:
        params = {
            "maxwidth": self._planner_config["photo_max_width"],
            "photo_reference": photo_reference,
            "key": self._photo_key,
        }
        return f"{PLACE_PHOTO_URL}?{urlencode(params)}"

    def place_details(self, place_id: str) -> PlaceDetails:
        client = self._get_client()
        try:
            response = client.place(place_id, fields=PLACE_DETAIL_FIELDS, language="en")
        except (gmaps_exceptions.ApiError, gmaps_exceptions.TransportError, gmaps_exceptions.Timeout) as exc:
            raise _translate_error(exc, f"place {place_id}") from exc

        result = response.get("result")
        if not result:
            raise MapsError(MapsErrorKind.NOT_FOUND, f"No details for place {place_id}")
        return self._to_place_details(result, place_id)

    def _to_place_details(self, result: Dict[str, Any], place_id: str) -> PlaceDetails:
        coordinates = None
        if (result.get("geometry") or {}).get("location"):
            lat, lng = _location_of(result, place_id)
            coordinates = Coordinates(
                lat=lat,
                lng=lng,
                formatted_address=result.get("formatted_address"),
            )
        photos = [
            self.photo_url(photo["photo_reference"])
            for photo in (result.get("photos") or [])[: self._planner_config["max_photos"]]
            if photo.get("photo_reference")
        ]
        return PlaceDetails(
            place_id=result.get("place_id", place_id),
            name=result.get("name", ""),
            formatted_address=result.get("formatted_address"),
            rating=result.get("rating"),
            user_ratings_total=result.get("user_ratings_total"),
            photos=photos,
            website=result.get("website"),
            phone_number=result.get("formatted_phone_number"),
            coordinates=coordinates,
        )

    def search_place(self, query: str) -> PlaceDetails:
        """Find the best match for ``query`` and return its details.

        Raises:
            MapsError: ``not_found`` when nothing matches, other kinds on
                provider failures.
        """
        hit = self._text_search(query)
        place_id = hit.get("place_id")
        if not place_id:
            raise MapsError(MapsErrorKind.NOT_FOUND, f"No place id for {query}")
        details = self.place_details(place_id)
        if details.coordinates is None:
            lat, lng = _location_of(hit, query)
            details.coordinates = Coordinates(
                lat=lat, lng=lng, formatted_address=hit.get("formatted_address")
            )
        return details

    # ------------------------------------------------------------------ #
    # Directions
    # ------------------------------------------------------------------ #
    def compute_route(self, stops: List[Dict[str, float]]) -> Dict[str, Any]:
        """Driving route through ``stops`` (dicts with ``lat``/``lng``) in order.

        Returns the encoded overview polyline plus per-leg distance (meters)
        and duration (seconds), unconverted.
        """
        if len(stops) < 2:
            raise MapsError(MapsErrorKind.INVALID_REQUEST, "A route needs at least two stops")

        points = [(stop["lat"], stop["lng"]) for stop in stops]
        origin, destination, waypoints = points[0], points[-1], points[1:-1]

        client = self._get_client()
        try:
            routes = client.directions(
                origin,
                destination,
                waypoints=waypoints or None,
                mode="driving",
                units="imperial",
            )
        except (gmaps_exceptions.ApiError, gmaps_exceptions.TransportError, gmaps_exceptions.Timeout) as exc:
            raise _translate_error(exc, "directions") from exc

        if not routes:
            raise MapsError(MapsErrorKind.NOT_FOUND, "No driving route found between the stops")

        route = routes[0]
        legs = [
            {
                "distance_meters": (leg.get("distance") or {}).get("value"),
                "duration_seconds": (leg.get("duration") or {}).get("value"),
            }
            for leg in route.get("legs", [])
        ]
        return {
            "polyline": (route.get("overview_polyline") or {}).get("points"),
            "legs": legs,
            "distance_meters": sum(leg["distance_meters"] or 0 for leg in legs),
            "duration_seconds": sum(leg["duration_seconds"] or 0 for leg in legs),
        }


# Re-export for clean imports elsewhere
__all__ = ["GoogleMapsAdapter", "PLACE_DETAIL_FIELDS"]
