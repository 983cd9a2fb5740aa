"""Trip storage: the latest state of each planned trip, keyed by id."""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Optional

from roadtrip_planner.api.models import Trip, TripRequest, TripStatus

logger = logging.getLogger(__name__)


class TripStore(ABC):
    """Create / get / update trips by id. Writes to one id are last-write-wins."""

    @abstractmethod
    def create(self, request: TripRequest) -> Trip:
        """Store a new pending trip with no itinerary."""

    @abstractmethod
    def get(self, trip_id: str) -> Optional[Trip]:
        """Return the trip or None if the id is unknown."""

    @abstractmethod
    def update(self, trip_id: str, **fields) -> Optional[Trip]:
        """Replace the given fields; None if the id is unknown."""


class MemoryTripStore(TripStore):
    """Volatile in-process store. Contents are lost on restart."""

    _UPDATABLE = {"status", "itinerary", "error"}

    def __init__(self):
        self._trips: Dict[str, Trip] = {}
        self._lock = threading.Lock()

    def create(self, request: TripRequest) -> Trip:
        trip = Trip(id=str(uuid.uuid4()), request=request, status=TripStatus.PENDING)
        with self._lock:
            self._trips[trip.id] = trip
        logger.debug(f"Created trip {trip.id}")
        return trip

    def get(self, trip_id: str) -> Optional[Trip]:
        with self._lock:
            return self._trips.get(trip_id)

    def update(self, trip_id: str, **fields) -> Optional[Trip]:
        unknown = set(fields) - self._UPDATABLE
        if unknown:
            raise TypeError(f"Cannot update trip fields: {', '.join(sorted(unknown))}")
        if "status" in fields:
            fields["status"] = TripStatus(fields["status"])

        with self._lock:
            trip = self._trips.get(trip_id)
            if trip is None:
                return None
            updated = trip.model_copy(update=fields)
            self._trips[trip_id] = updated
        logger.debug(f"Updated trip {trip_id}: {', '.join(sorted(fields))}")
        return updated

    def __len__(self) -> int:
        with self._lock:
            return len(self._trips)


__all__ = ["TripStore", "MemoryTripStore"]
