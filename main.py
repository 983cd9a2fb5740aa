"""
Road-trip planner - main application entry point

* Flask app exposing the trip planning JSON API under `/api/...`.
* `create_app()` builds an app around injectable services so tests can swap
  the OpenAI and Google Maps collaborators; the module-level `app` uses the
  real ones, created lazily on first request.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from roadtrip_planner.api.config import get_port  # noqa: E402
from roadtrip_planner.api.services import MapService, TripService  # noqa: E402
from roadtrip_planner.routes import create_trip_blueprint  # noqa: E402


# --------------------------------------------------------------------------- #
# Flask initialisation
# --------------------------------------------------------------------------- #
def create_app(trip_service=None, map_service=None):
    """Build the Flask app with the trip planner blueprint registered."""
    app = Flask(__name__)

    flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
    if "FLASK_SECRET_KEY" not in os.environ:
        logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
    app.secret_key = flask_secret_key

    # CORS for local dev / cross-origin front-end requests
    CORS(app, origins="*")

    trip_service = trip_service or TripService()
    map_service = map_service or MapService(trip_service.maps)
    app.register_blueprint(create_trip_blueprint(trip_service, map_service))
    logger.info("Trip planner routes registered")
    return app


app = create_app()

# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting road-trip planner on http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=False)

__all__ = ["app", "create_app"]
