# roadtrip_planner/routes/__init__.py
"""HTTP routes for the road-trip planner."""

from .trips import create_trip_blueprint

__all__ = ["create_trip_blueprint"]
