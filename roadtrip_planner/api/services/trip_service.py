# roadtrip_planner/api/services/trip_service.py
"""Service layer for trip planning and trip lifecycle."""

import logging
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from roadtrip_planner.api.config import get_planner_config
from roadtrip_planner.api.enrichment import MapsProvider, enrich_itinerary
from roadtrip_planner.api.errors import (
    GenerationErrorKind,
    ItineraryGenerationError,
    TripRequestError,
)
from roadtrip_planner.api.geocoding import GoogleMapsAdapter
from roadtrip_planner.api.llm import generate_trip_itinerary
from roadtrip_planner.api.models import Itinerary, Trip, TripRequest, TripStatus
from roadtrip_planner.api.overlay import ItineraryOverlay
from roadtrip_planner.api.storage import MemoryTripStore, TripStore

logger = logging.getLogger(__name__)

ItineraryGenerator = Callable[[TripRequest], Itinerary]


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "request"
        problems.append(f"{field}: {err['msg']}")
    return "; ".join(problems)


class TripService:
    """Plans trips and keeps their lifecycle in a ``TripStore``."""

    def __init__(
        self,
        store: Optional[TripStore] = None,
        maps: Optional[MapsProvider] = None,
        generator: Optional[ItineraryGenerator] = None,
        planner_config: Optional[dict] = None,
    ):
        self.store = store or MemoryTripStore()
        self.maps = maps or GoogleMapsAdapter()
        self.generator = generator or generate_trip_itinerary
        self.planner_config = planner_config or get_planner_config()

    def validate_request(self, payload: Union[TripRequest, Mapping[str, Any], None]) -> TripRequest:
        """Parse and check a trip request.

        Raises:
            TripRequestError: If the payload is malformed or the trip is too long
        """
        if isinstance(payload, TripRequest):
            request = payload
        else:
            try:
                request = TripRequest.model_validate(payload or {})
            except ValidationError as exc:
                raise TripRequestError(_describe_validation_error(exc)) from exc

        max_days = self.planner_config["max_trip_days"]
        if request.total_days > max_days:
            raise TripRequestError(f"Trips must be between 1 and {max_days} days")
        return request

    def plan_trip(self, payload: Union[TripRequest, Mapping[str, Any], None]) -> Trip:
        """Generate, geocode and store a trip.

        Returns:
            The completed trip

        Raises:
            TripRequestError: Before any external call, on invalid input
            ItineraryGenerationError: If the LLM step fails; the stored trip
                is marked failed first
        """
        request = self.validate_request(payload)
        trip = self.store.create(request)
        logger.info(
            f"Planning trip {trip.id}: {request.start_location} -> {request.end_location}, "
            f"{request.total_days} days, round_trip={request.is_round_trip}"
        )

        try:
            itinerary = self.generator(request)
        except ItineraryGenerationError as exc:
            logger.error(f"Failed to generate itinerary for trip {trip.id}: {exc}")
            exc.trip_id = trip.id
            self.store.update(trip.id, status=TripStatus.FAILED, error=exc.to_dict())
            raise
        except Exception as exc:
            logger.exception(f"Unexpected error generating itinerary for trip {trip.id}")
            wrapped = ItineraryGenerationError(GenerationErrorKind.UNKNOWN, str(exc))
            wrapped.trip_id = trip.id
            self.store.update(trip.id, status=TripStatus.FAILED, error=wrapped.to_dict())
            raise wrapped from exc

        enriched = enrich_itinerary(itinerary, self.maps, planner_config=self.planner_config)
        return self.store.update(trip.id, status=TripStatus.COMPLETED, itinerary=enriched)

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        return self.store.get(trip_id)

    def commit_edits(self, trip_id: str, edits: Mapping[str, Any]) -> Optional[Trip]:
        """Fold removed/custom attractions into the stored itinerary.

        Returns:
            The updated trip, or None if the id is unknown
        """
        trip = self.store.get(trip_id)
        if trip is None:
            return None
        if trip.itinerary is None:
            raise TripRequestError("Trip has no itinerary to update")

        try:
            overlay = ItineraryOverlay.from_payload(trip.itinerary, edits or {})
        except (TypeError, ValueError, AttributeError, ValidationError) as exc:
            raise TripRequestError(f"Invalid itinerary edits: {exc}") from exc

        committed = overlay.commit()
        logger.debug(f"Committed edits to trip {trip_id}: {committed.total_attractions} attractions")
        return self.store.update(trip_id, itinerary=committed)


__all__ = ["TripService"]
