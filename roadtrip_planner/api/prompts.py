"""Prompt construction for the road-trip itinerary request.

Every planning rule lives in the prompt text; nothing here can verify that
the model followed them. The JSON shape at the end must stay in sync with
``roadtrip_planner.api.models.Itinerary``.
"""

from __future__ import annotations

from typing import Optional

from roadtrip_planner.api.config import get_planner_config
from roadtrip_planner.api.models import TripRequest

SYSTEM_INSTRUCTION = (
    "You are a professional trip planner. "
    "Always respond with valid JSON matching the exact format requested."
)

# Hints for the interest tags offered by the planning form
INTEREST_EXAMPLES = {
    "Beaches and coast": "beaches, coastal viewpoints, seaside towns, coastal state parks, lighthouses",
    "National parks and nature": "specific national or state parks, scenic overlooks, nature preserves",
    "Museums and culture": "named museums, cultural centers, heritage districts",
    "Food and dining": "well-known local restaurants, food halls, markets, regional specialties",
    "Historic sites": "historic landmarks, battlefields, preserved towns, monuments",
    "Shopping": "notable shopping streets, markets, outlet centers",
    "Adventure and outdoor activities": "hikes, rafting, climbing, zip lines, mountain parks",
    "Art and galleries": "art museums, galleries, public art and sculpture parks",
    "Music and entertainment": "live music venues, theaters, entertainment districts",
    "Architecture": "landmark buildings, bridges, notable architectural districts",
}

_JSON_SHAPE = """{
  "totalDays": number,
  "totalDistance": number (in miles),
  "totalDrivingTime": "string (e.g., '16h 35m')",
  "totalAttractions": number,
  "days": [
    {
      "dayNumber": number (1 for the first day, increasing by one),
      "date": "YYYY-MM-DD",
      "route": {
        "from": "string",
        "to": "string",
        "distance": number (in miles),
        "drivingTime": "string (e.g., '2h 15m')",
        "departureTime": "string (e.g., '9:00 AM')",
        "arrivalTime": "string (e.g., '11:15 AM')"
      },
      "attractions": [
        {
          "name": "string",
          "description": "string",
          "estimatedDuration": "string (e.g., '2h')",
          "category": "string (one of the traveler's interests, or 'General')"
        }
      ],
      "overnightLocation": "string"
    }
  ]
}"""


def _round_trip_section(request: TripRequest) -> str:
    return f"""
ROUND TRIP REQUIREMENTS:
This is a round trip that must form a loop with minimal overlap.

1. OUTBOUND ROUTE ({request.start_location} -> {request.end_location}):
   - Plan one specific route using specific highways, cities and regions.

2. RETURN ROUTE ({request.end_location} -> {request.start_location}):
   - Use a materially different path that avoids the outbound overnight cities.
   - Choose overnight stops that are 100+ miles away from any outbound overnight city.
   - Use different highways, mountain passes, coastal routes or interstate systems.

Route separation strategies:
- If the outbound leg uses an inland interstate, return along the coast or a parallel corridor.
- Cross-country: if the outbound leg crosses northern states, return through southern states.
- Regional: if the outbound leg goes through mountains, return through valleys or coastal plains.
- Never reuse the same overnight city on both legs.

The result should look like a loop on the map, not a back-and-forth on the same roads.
"""


def _interests_section(interests: tuple[str, ...], per_stop: int, radius: int) -> str:
    lines = [
        f"- Travel Interests: {', '.join(interests)}",
        "",
        "INTEREST REQUIREMENTS:",
        "1. Every selected interest must appear in at least one attraction if it is at all feasible on this route.",
        f"2. Prefer attractions matching the selected interests, still within {radius} miles of the overnight stop.",
        "3. When an interest has too few good matches near a stop, fill the remaining slots with "
        f"high-quality general attractions so every day still has exactly {per_stop}.",
        "",
        "For each selected interest:",
    ]
    for interest in interests:
        example = INTEREST_EXAMPLES.get(interest)
        if example:
            lines.append(f"- {interest}: include attractions such as {example}")
        else:
            lines.append(f"- {interest}: include attractions of this type")
    lines.append("")
    lines.append("Distribute interest-based attractions across different days.")
    return "\n".join(lines)


def build_itinerary_prompt(request: TripRequest, planner_config: Optional[dict] = None) -> str:
    """Return the user message asking for a JSON itinerary for ``request``."""
    cfg = planner_config or get_planner_config()
    per_stop = cfg["attractions_per_stop"]
    radius = cfg["attraction_radius_miles"]
    trip_type = (
        "Round Trip (return to starting location)" if request.is_round_trip else "One Way"
    )

    parts = [
        "You are a professional trip planner specializing in road trips.",
        "",
        "Using the trip details provided, create a realistic, day-by-day driving itinerary.",
        f"Include cities or towns for overnight stays and exactly {per_stop} attractions "
        f"within {radius} miles of each overnight city.",
        "",
        "IMPORTANT: The driving route must ONLY connect overnight stops. Do not include "
        "attractions as waypoints in the driving route.",
        "",
        "Trip Details:",
        f"- Start: {request.start_location}",
        f"- End: {request.end_location}",
        f"- Start Date: {request.start_date.isoformat()} at {request.start_time}",
        f"- End Date: {request.end_date.isoformat()}",
        f"- Number of days: {request.total_days}",
        f"- Latest check-in time: {request.check_in_time}",
        f"- Trip Type: {trip_type}",
    ]

    if request.is_round_trip:
        parts.append(_round_trip_section(request))

    if request.interests:
        parts.append(_interests_section(request.interests, per_stop, radius))

    parts.extend(
        [
            "",
            "Rules:",
            "- Assume travel is by car",
            f"- Plan exactly {request.total_days} days; totalDays must equal the number of entries in days",
            f"- Day 1 starts at {request.start_time} on {request.start_date.isoformat()}",
            f"- All subsequent days start at {cfg['default_departure_time']} local time",
            f"- Arrive at each overnight stop no later than {request.check_in_time}",
            "- Keep the total number of stops (including start, overnights, destination, "
            f"and attractions) at or below {cfg['max_total_stops']}",
            "- Ensure realistic driving times and distances between overnight stops only",
            f"- Include exactly {per_stop} attractions per day within {radius} miles of the overnight stop",
            "- If no interests were selected, choose the best-known attractions near each stop",
            "",
            "Return the plan in STRICT JSON format with this exact structure:",
            _JSON_SHAPE,
        ]
    )
    return "\n".join(parts)


__all__ = ["SYSTEM_INSTRUCTION", "INTEREST_EXAMPLES", "build_itinerary_prompt"]
