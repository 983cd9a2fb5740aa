"""LLM helper functions for the road-trip planner.

Generates itineraries via OpenAI Chat Completions. The reply is validated
against the ``Itinerary`` model here, so everything downstream works with a
typed object. Geocoding happens later, in the enrichment pass.
"""

from __future__ import annotations

import logging
from typing import Optional

import openai
from openai import OpenAI
from pydantic import ValidationError

from roadtrip_planner.api.config import get_chat_model_config, get_openai_api_key
from roadtrip_planner.api.errors import GenerationErrorKind, ItineraryGenerationError
from roadtrip_planner.api.models import Itinerary, TripRequest
from roadtrip_planner.api.prompts import SYSTEM_INSTRUCTION, build_itinerary_prompt

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# OpenAI client initialisation
# ---------------------------------------------------------------------------

_client: Optional[OpenAI] = None


def _get_client() -> OpenAI:
    """Return a cached OpenAI client, created on first use."""
    global _client
    if _client is None:
        _client = OpenAI(api_key=get_openai_api_key())
    return _client


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

def classify_openai_error(exc: Exception) -> GenerationErrorKind:
    """Map a provider exception to the kind shown to the user."""
    text = str(exc).lower()
    if "exceeded your current quota" in text or "insufficient_quota" in text:
        return GenerationErrorKind.QUOTA_EXCEEDED
    if (
        isinstance(exc, openai.AuthenticationError)
        or "401" in text
        or "authentication" in text
        or "api_key" in text
    ):
        return GenerationErrorKind.AUTH_FAILED
    if isinstance(exc, openai.RateLimitError) or "rate limit" in text:
        return GenerationErrorKind.RATE_LIMITED
    return GenerationErrorKind.UNKNOWN


def _parse_response(content: Optional[str]) -> Itinerary:
    """Validate the model's raw JSON string into an ``Itinerary``."""
    if not content:
        raise ItineraryGenerationError(
            GenerationErrorKind.INVALID_RESPONSE, "No response from OpenAI"
        )
    try:
        return Itinerary.model_validate_json(content)
    except ValidationError as exc:
        logger.error("Failed to parse LLM response: %s", exc)
        raise ItineraryGenerationError(
            GenerationErrorKind.INVALID_RESPONSE,
            f"Itinerary did not match the expected format: {exc.error_count()} problem(s)",
        ) from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_trip_itinerary(request: TripRequest, client: Optional[OpenAI] = None) -> Itinerary:
    """Ask the model for a day-by-day itinerary and return it validated.

    Raises:
        ItineraryGenerationError: on any provider or parsing failure. Nothing
            is retried here; the caller decides.
    """
    model_cfg = get_chat_model_config()
    messages = [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": build_itinerary_prompt(request)},
    ]

    logger.debug(
        "Calling OpenAI ChatCompletion: model=%s start=%s end=%s days=%d",
        model_cfg["model"],
        request.start_location,
        request.end_location,
        request.total_days,
    )

    try:
        response = (client or _get_client()).chat.completions.create(
            model=model_cfg["model"],
            messages=messages,
            response_format={"type": "json_object"},
            temperature=model_cfg["temperature"],
        )
    except Exception as exc:
        kind = classify_openai_error(exc)
        logger.error("OpenAI API error (%s): %s", kind.value, exc)
        raise ItineraryGenerationError(
            kind, f"Failed to generate trip itinerary: {exc}"
        ) from exc

    raw_content = response.choices[0].message.content
    itinerary = _parse_response(raw_content)
    logger.info(
        "Generated %d-day itinerary from %s to %s",
        itinerary.total_days,
        request.start_location,
        request.end_location,
    )
    return itinerary


__all__ = ["classify_openai_error", "generate_trip_itinerary"]
