# roadtrip_planner/api/enrichment.py
"""Attach coordinates and place details to a freshly generated itinerary.

The pass is intentionally lenient:

* Every distinct route endpoint / overnight location is geocoded once.
  Locations are deduplicated on a whitespace-collapsed, case-folded key, so
  ``"Bend, OR"`` and ``"bend,  or"`` share a single lookup.
* A failed lookup is logged and counted, never raised, so the rest of the
  trip still renders.
* Attractions are resolved after the locations, because their last-resort
  fallback is a marker placed next to the day's overnight stop.

The result is a copy of the input with fields added; the input itinerary is
left untouched.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Dict, Optional, Protocol

from roadtrip_planner.api.config import get_planner_config
from roadtrip_planner.api.errors import MapsError
from roadtrip_planner.api.models import (
    Attraction,
    Coordinates,
    Day,
    GeocodeResult,
    GeocodingStatus,
    Itinerary,
    PlaceDetails,
)

logger = logging.getLogger(__name__)

FAILED_NOTE = "Map display unavailable - Google Maps API configuration required"


class MapsProvider(Protocol):
    def geocode(self, query: str) -> GeocodeResult: ...

    def search_place(self, query: str) -> PlaceDetails: ...


def normalize_location(name: str) -> str:
    """Cache key for a location string."""
    return " ".join(name.split()).casefold()


def _attraction_query(attraction: Attraction, day: Day) -> str:
    return f"{attraction.name}, {day.overnight_location}"


class _EnrichmentPass:
    """State for one call to ``enrich_itinerary``; never shared across trips."""

    def __init__(self, maps: MapsProvider, rng: random.Random, jitter: float):
        self.maps = maps
        self.rng = rng
        self.jitter = jitter
        self.cache: Dict[str, GeocodeResult] = {}
        self.location_errors = 0
        self.attraction_fallbacks = 0

    # -- locations -------------------------------------------------------
    def geocode_locations(self, itinerary: Itinerary) -> int:
        """Geocode each distinct location once. Returns how many were tried."""
        pending: Dict[str, str] = {}
        for day in itinerary.days:
            for name in (day.route.from_location, day.route.to_location, day.overnight_location):
                pending.setdefault(normalize_location(name), name)

        for key, name in pending.items():
            try:
                self.cache[key] = self.maps.geocode(name)
            except MapsError as exc:
                self.location_errors += 1
                logger.warning(f"Failed to geocode {name!r}: {exc.kind.value} {exc}")
            except Exception:
                self.location_errors += 1
                logger.exception(f"Unexpected error geocoding {name!r}")
        return len(pending)

    def lookup(self, name: str) -> Optional[Coordinates]:
        hit = self.cache.get(normalize_location(name))
        return hit.to_coordinates() if hit else None

    # -- attractions -----------------------------------------------------
    def resolve_attraction(self, attraction: Attraction, day: Day, overnight: Optional[Coordinates]) -> None:
        query = _attraction_query(attraction, day)
        try:
            details = self.maps.search_place(query)
            attraction.place_details = details
            attraction.coordinates = details.coordinates
            if details.coordinates is not None:
                return
        except MapsError as exc:
            logger.warning(f"Place search failed for attraction {attraction.name!r}: {exc}")
        except Exception:
            logger.exception(f"Unexpected error searching attraction {attraction.name!r}")

        self.attraction_fallbacks += 1
        try:
            attraction.coordinates = self.maps.geocode(query).to_coordinates()
            return
        except MapsError as exc:
            logger.warning(f"Failed to geocode attraction {attraction.name!r}: {exc}")
        except Exception:
            logger.exception(f"Unexpected error geocoding attraction {attraction.name!r}")

        if overnight is None:
            attraction.coordinates = None
            return
        attraction.coordinates = Coordinates(
            lat=overnight.lat + (self.rng.random() - 0.5) * self.jitter,
            lng=overnight.lng + (self.rng.random() - 0.5) * self.jitter,
            approximate=True,
        )

    # -- days ------------------------------------------------------------
    def enrich_day(self, day: Day) -> None:
        day.route.from_coordinates = self.lookup(day.route.from_location)
        day.route.to_coordinates = self.lookup(day.route.to_location)
        day.overnight_coordinates = self.lookup(day.overnight_location)
        for attraction in day.attractions:
            self.resolve_attraction(attraction, day, day.overnight_coordinates)


def enrich_itinerary(
    itinerary: Itinerary,
    maps: MapsProvider,
    rng: Optional[random.Random] = None,
    planner_config: Optional[dict] = None,
) -> Itinerary:
    """Return a geocoded copy of ``itinerary`` with ``geocoding_status`` set.

    Status is ``failed`` when no location resolved, ``partial`` when some
    location failed or any attraction needed a fallback, ``ok`` otherwise.
    """
    cfg = planner_config or get_planner_config()
    enriched = itinerary.model_copy(deep=True)
    state = _EnrichmentPass(maps, rng or random.Random(), cfg["fallback_jitter_degrees"])
    start_time = time.time()

    try:
        attempted = state.geocode_locations(enriched)
        for day in enriched.days:
            state.enrich_day(day)
    except Exception:
        logger.exception("Error geocoding itinerary")
        fallback = itinerary.model_copy(deep=True)
        fallback.geocoding_status = GeocodingStatus.FAILED
        fallback.geocoding_note = FAILED_NOTE
        return fallback

    resolved = len(state.cache)
    if attempted and resolved == 0:
        enriched.geocoding_status = GeocodingStatus.FAILED
        enriched.geocoding_note = FAILED_NOTE
    elif state.location_errors or state.attraction_fallbacks:
        enriched.geocoding_status = GeocodingStatus.PARTIAL
        enriched.geocoding_note = (
            f"{state.location_errors} locations could not be geocoded; "
            f"{state.attraction_fallbacks} attractions used approximate lookups"
        )
    else:
        enriched.geocoding_status = GeocodingStatus.OK
        enriched.geocoding_note = None

    logger.info(
        "Geocoded %d/%d locations in %.2fs (status=%s)",
        resolved,
        attempted,
        time.time() - start_time,
        enriched.geocoding_status.value,
    )
    return enriched


__all__ = ["enrich_itinerary", "normalize_location", "MapsProvider"]
