"""Service layer wrapping the planner API modules."""

from .map_service import MapService
from .trip_service import TripService

__all__ = ["MapService", "TripService"]
