# roadtrip_planner/routes/trips.py
"""Trip planning routes and blueprint configuration."""

import logging

from flask import Blueprint, jsonify, request

from roadtrip_planner.api.config import get_google_maps_config
from roadtrip_planner.api.errors import (
    ItineraryGenerationError,
    MapsError,
    MapsErrorKind,
    TripRequestError,
)

logger = logging.getLogger(__name__)


def create_trip_blueprint(trip_service, map_service):
    """Create and configure the trip planner blueprint.

    Args:
        trip_service: TripService used for planning and trip lookups
        map_service: MapService used for routes and place search

    Returns:
        Configured Flask Blueprint
    """
    trips_bp = Blueprint("trips", __name__)

    @trips_bp.route("/api/config/maps-key")
    def maps_key():
        """Return the browser-side Google Maps key."""
        return jsonify({"apiKey": get_google_maps_config()["frontend_api_key"]})

    @trips_bp.route("/api/trips/plan", methods=["POST"])
    def plan_trip():
        """Generate a new trip itinerary."""
        payload = request.get_json(silent=True)
        try:
            trip = trip_service.plan_trip(payload)
        except TripRequestError as e:
            logger.warning(f"Invalid trip planning request: {e}")
            return jsonify({"error": "Invalid trip planning request", "message": str(e)}), 400
        except ItineraryGenerationError as e:
            return jsonify(e.to_dict()), 502
        except Exception as e:
            logger.exception("Error planning trip")
            return jsonify({"error": "Failed to generate trip itinerary", "message": str(e)}), 500
        return jsonify(trip.to_dict())

    @trips_bp.route("/api/trips/<trip_id>")
    def get_trip(trip_id):
        """Retrieve a planned trip."""
        trip = trip_service.get_trip(trip_id)
        if trip is None:
            return jsonify({"error": "Trip not found"}), 404
        return jsonify(trip.to_dict())

    @trips_bp.route("/api/trips/<trip_id>/itinerary", methods=["POST"])
    def commit_itinerary_edits(trip_id):
        """Apply the user's removed/custom attractions to a stored trip."""
        edits = request.get_json(silent=True) or {}
        if not isinstance(edits, dict):
            return jsonify({"error": "Invalid itinerary update", "message": "Expected a JSON object"}), 400
        try:
            trip = trip_service.commit_edits(trip_id, edits)
        except TripRequestError as e:
            return jsonify({"error": "Invalid itinerary update", "message": str(e)}), 400
        if trip is None:
            return jsonify({"error": "Trip not found"}), 404
        return jsonify(trip.to_dict())

    @trips_bp.route("/api/routes", methods=["POST"])
    def compute_route():
        """Compute a driving route between ordered stops."""
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"error": "Invalid request", "message": "Expected a JSON object"}), 400
        try:
            return jsonify(map_service.compute_route(payload))
        except MapsError as e:
            logger.error(f"Routes request failed ({e.kind.value}): {e}")
            if e.kind is MapsErrorKind.INVALID_REQUEST:
                return jsonify({"error": "Invalid request", "message": str(e)}), 400
            return jsonify(
                {
                    "error": "Routes API request failed",
                    "code": e.kind.value,
                    "message": str(e),
                    "hint": "Ensure the server key allows Directions and Places APIs.",
                }
            ), 400

    @trips_bp.route("/api/places/search", methods=["POST"])
    def search_place():
        """Search for place details."""
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"error": "Invalid request", "message": "Expected a JSON object"}), 400
        query = payload.get("query")
        if not query or not isinstance(query, str):
            return jsonify({"error": "Invalid request", "message": "Query parameter is required"}), 400

        try:
            details = map_service.search_place(query)
        except MapsError as e:
            return jsonify({"error": "Failed to search place details", "message": str(e)}), 500
        if details is None:
            return jsonify({"error": "Place not found", "message": f"No details found for: {query}"}), 404
        return jsonify(details)

    @trips_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "roadtrip-planner"})

    return trips_bp


# Export for backward compatibility
__all__ = ["create_trip_blueprint"]
