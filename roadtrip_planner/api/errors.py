# roadtrip_planner/api/errors.py
"""Typed errors raised by the planner's upstream integrations."""

from __future__ import annotations

from enum import Enum


class GenerationErrorKind(str, Enum):
    AUTH_FAILED = "auth_failed"
    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMITED = "rate_limited"
    INVALID_RESPONSE = "invalid_response"
    UNKNOWN = "unknown"


class MapsErrorKind(str, Enum):
    REQUEST_DENIED = "request_denied"
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


# (short title, remediation hint) shown to the user for each failure kind
_GENERATION_MESSAGES = {
    GenerationErrorKind.AUTH_FAILED: (
        "OpenAI API authentication failed",
        "Please check that your OpenAI API key is valid and has the correct permissions",
    ),
    GenerationErrorKind.QUOTA_EXCEEDED: (
        "OpenAI API quota exceeded",
        "Your OpenAI API key has exceeded its usage quota. Please check your OpenAI "
        "billing and usage limits at https://platform.openai.com/usage",
    ),
    GenerationErrorKind.RATE_LIMITED: (
        "OpenAI API rate limit exceeded",
        "Too many requests to OpenAI API. Please wait a moment and try again",
    ),
    GenerationErrorKind.INVALID_RESPONSE: (
        "Invalid itinerary returned by OpenAI",
        "The trip planner returned an itinerary that could not be read. Please try again",
    ),
    GenerationErrorKind.UNKNOWN: (
        "Failed to generate trip itinerary",
        None,
    ),
}


class TripRequestError(ValueError):
    """An inbound trip request failed validation."""


class ItineraryGenerationError(Exception):
    """The LLM could not produce a usable itinerary.

    ``kind`` tells callers which upstream failure happened so they can show
    a specific message; ``retryable`` marks failures worth a user retry.
    """

    def __init__(self, kind: GenerationErrorKind, message: str):
        super().__init__(message)
        self.kind = GenerationErrorKind(kind)
        self.message = message
        # Set once a stored trip has been marked failed for this error
        self.trip_id = None

    @property
    def error(self) -> str:
        return _GENERATION_MESSAGES[self.kind][0]

    @property
    def user_message(self) -> str:
        # Unknown failures surface the provider's own message
        return _GENERATION_MESSAGES[self.kind][1] or self.message

    @property
    def retryable(self) -> bool:
        return self.kind in (
            GenerationErrorKind.RATE_LIMITED,
            GenerationErrorKind.INVALID_RESPONSE,
            GenerationErrorKind.UNKNOWN,
        )

    def to_dict(self) -> dict:
        return {
            "error": self.error,
            "message": self.user_message,
            "kind": self.kind.value,
            "retryable": self.retryable,
            "tripId": self.trip_id,
        }


class MapsError(Exception):
    """A Google Maps Platform call failed."""

    def __init__(self, kind: MapsErrorKind, message: str):
        super().__init__(message)
        self.kind = MapsErrorKind(kind)
        self.message = message


__all__ = [
    "GenerationErrorKind",
    "ItineraryGenerationError",
    "MapsError",
    "MapsErrorKind",
    "TripRequestError",
]
