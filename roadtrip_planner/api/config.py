# api/config.py
"""Configuration management for the road-trip planner API."""
import os
from dotenv import load_dotenv

load_dotenv()


def get_openai_api_key():
    """Get OpenAI API key from environment."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise ValueError("OPENAI_API_KEY not set")
    return api_key


def get_chat_model_config():
    """Get chat completion model settings."""
    return {
        "model": os.getenv("OPENAI_CHAT_MODEL", "gpt-4o"),
        "temperature": float(os.getenv("OPENAI_TEMPERATURE", "0.7")),
    }


def get_google_maps_config():
    """Get Google Maps configuration.

    The server key is used for geocoding, places and directions calls. The
    frontend key is handed to the browser for the JS map and photo URLs.
    """
    shared_key = os.getenv("GOOGLE_MAPS_API_KEY", "")
    return {
        "server_api_key": os.getenv("GOOGLE_MAPS_SERVER_API_KEY", shared_key),
        "frontend_api_key": os.getenv("GOOGLE_MAPS_FRONTEND_API_KEY", shared_key),
    }


def get_planner_config():
    """Get the planning rules shared by the prompt and the enrichment pass."""
    return {
        "attractions_per_stop": int(os.getenv("PLANNER_ATTRACTIONS_PER_STOP", "5")),
        "attraction_radius_miles": int(os.getenv("PLANNER_ATTRACTION_RADIUS_MILES", "100")),
        "max_total_stops": int(os.getenv("PLANNER_MAX_TOTAL_STOPS", "25")),
        "default_departure_time": os.getenv("PLANNER_DEFAULT_DEPARTURE_TIME", "9:00 AM"),
        "max_trip_days": int(os.getenv("PLANNER_MAX_TRIP_DAYS", "30")),
        "max_photos": int(os.getenv("PLANNER_MAX_PHOTOS", "3")),
        "photo_max_width": int(os.getenv("PLANNER_PHOTO_MAX_WIDTH", "400")),
        # Spread (in degrees) of the synthetic marker placed near an overnight stop
        "fallback_jitter_degrees": float(os.getenv("PLANNER_FALLBACK_JITTER", "0.01")),
    }


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))
