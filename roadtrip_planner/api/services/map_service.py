# roadtrip_planner/api/services/map_service.py
"""Service layer for map-related operations."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from roadtrip_planner.api.errors import MapsError, MapsErrorKind
from roadtrip_planner.api.geocoding import GoogleMapsAdapter

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.344


def format_duration(seconds: Optional[float]) -> Optional[str]:
    """Format seconds as ``"2 h 15 m"`` (hours omitted when zero)."""
    if seconds is None:
        return None
    hours = int(seconds // 3600)
    minutes = int(round((seconds % 3600) / 60))
    if minutes == 60:
        hours, minutes = hours + 1, 0
    return f"{hours} h {minutes} m" if hours else f"{minutes} m"


def format_miles(meters: Optional[float]) -> Optional[str]:
    if not meters:
        return None
    return f"{meters / METERS_PER_MILE:.1f} mi"


class MapService:
    """Route summaries and place search for the frontend."""

    def __init__(self, maps: Optional[GoogleMapsAdapter] = None):
        self.maps = maps or GoogleMapsAdapter()

    @staticmethod
    def validate_coordinates(lat: float, lng: float) -> bool:
        """Validate that coordinates are within valid ranges."""
        return -90 <= lat <= 90 and -180 <= lng <= 180

    def resolve_stops(self, payload: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Turn a route request into an ordered list of ``{name, lat, lng}``.

        Accepts either ``{"stops": [{"name", "lat", "lng"}, ...]}`` or
        ``{"ordered_stops": ["City A", "City B", ...]}``; names are geocoded.

        Raises:
            MapsError: ``invalid_request`` for a malformed payload, or the
                geocoding failure for a stop name.
        """
        stops = payload.get("stops")
        if isinstance(stops, list) and len(stops) >= 2:
            resolved = []
            for stop in stops:
                try:
                    lat, lng = float(stop["lat"]), float(stop["lng"])
                except (KeyError, TypeError, ValueError):
                    raise MapsError(MapsErrorKind.INVALID_REQUEST, f"Stop is missing lat/lng: {stop!r}")
                if not self.validate_coordinates(lat, lng):
                    raise MapsError(MapsErrorKind.INVALID_REQUEST, f"Coordinates out of range: {lat}, {lng}")
                resolved.append({"name": stop.get("name"), "lat": lat, "lng": lng})
            return resolved

        names = payload.get("ordered_stops")
        if isinstance(names, list) and len(names) >= 2:
            resolved = []
            for name in names:
                result = self.maps.geocode(str(name))
                resolved.append({"name": name, "lat": result.lat, "lng": result.lng})
            return resolved

        raise MapsError(
            MapsErrorKind.INVALID_REQUEST,
            'Send { "stops":[{ "name": "...", "lat": 0, "lng": 0 }, ...] } '
            'OR { "ordered_stops":["City A","City B", ...] } (min 2)',
        )

    def compute_route(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Driving route through the requested stops, with display units."""
        stops = self.resolve_stops(payload)
        route = self.maps.compute_route(stops)

        legs = [
            {
                "index": i,
                "durationSeconds": leg["duration_seconds"],
                "durationText": format_duration(leg["duration_seconds"]),
                "distanceMeters": leg["distance_meters"],
                "distanceText": format_miles(leg["distance_meters"]),
            }
            for i, leg in enumerate(route["legs"])
        ]
        logger.info(f"Computed route through {len(stops)} stops ({len(legs)} legs)")
        return {
            "polyline": route["polyline"],
            "legs": legs,
            "totals": {
                "durationText": format_duration(route["duration_seconds"]),
                "distanceText": format_miles(route["distance_meters"]),
            },
            "resolvedStops": stops,
        }

    def search_place(self, query: str) -> Optional[Dict[str, Any]]:
        """Place details for ``query`` or None when nothing matches.

        Raises:
            MapsError: for provider failures other than not-found.
        """
        try:
            details = self.maps.search_place(query)
        except MapsError as exc:
            if exc.kind is MapsErrorKind.NOT_FOUND:
                logger.warning(f"No place found for '{query}'")
                return None
            raise

        data = details.to_dict()
        # Frontend expects the Places API field name
        data["formattedPhoneNumber"] = data.pop("phoneNumber")
        return data


# Export for use in other modules
__all__ = ["MapService", "format_duration", "format_miles"]
