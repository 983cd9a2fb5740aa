"""Shared data structures for trip planning.

The itinerary types double as the validation boundary for the LLM's JSON
reply: a document that does not fit these models is rejected before any
geocoding happens. JSON uses camelCase keys (``totalDays``,
``overnightLocation``); Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class GeocodingStatus(str, Enum):
    OK = "ok"
    PARTIAL = "partial"
    FAILED = "failed"


class TripStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


@dataclass
class GeocodeResult:
    """A single forward-geocoding hit."""

    lat: float
    lng: float
    formatted_address: Optional[str] = None

    def to_coordinates(self) -> "Coordinates":
        return Coordinates(lat=self.lat, lng=self.lng, formatted_address=self.formatted_address)


class Coordinates(CamelModel):
    lat: float
    lng: float
    formatted_address: Optional[str] = None
    # True when the position is synthetic (placed near the overnight stop)
    approximate: bool = False


class PlaceDetails(CamelModel):
    place_id: Optional[str] = None
    name: str
    formatted_address: Optional[str] = None
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    photos: list[str] = Field(default_factory=list)
    website: Optional[str] = None
    phone_number: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class Attraction(CamelModel):
    name: str
    description: str = ""
    estimated_duration: Optional[str] = None
    category: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    place_details: Optional[PlaceDetails] = None


class RouteLeg(CamelModel):
    from_location: str = Field(alias="from")
    to_location: str = Field(alias="to")
    distance: float
    driving_time: str
    departure_time: str
    arrival_time: str
    from_coordinates: Optional[Coordinates] = None
    to_coordinates: Optional[Coordinates] = None


class Day(CamelModel):
    day_number: int
    date: str
    route: RouteLeg
    attractions: list[Attraction] = Field(default_factory=list)
    overnight_location: str
    overnight_coordinates: Optional[Coordinates] = None


class Itinerary(CamelModel):
    total_days: int
    total_distance: float
    total_driving_time: str
    total_attractions: int
    days: list[Day]
    geocoding_status: Optional[GeocodingStatus] = None
    geocoding_note: Optional[str] = None

    @model_validator(mode="after")
    def _check_days(self) -> "Itinerary":
        if len(self.days) != self.total_days:
            raise ValueError(
                f"itinerary lists {len(self.days)} days but totalDays is {self.total_days}"
            )
        for position, day in enumerate(self.days, 1):
            if day.day_number != position:
                raise ValueError(f"day at position {position} has dayNumber {day.day_number}")
        return self


class CustomAttraction(CamelModel):
    """An attraction the user added by hand on top of the generated plan."""

    name: str
    description: str = ""
    coordinates: Optional[Coordinates] = None
    is_removed: bool = False

    def to_attraction(self) -> Attraction:
        return Attraction(name=self.name, description=self.description, coordinates=self.coordinates)


class TripRequest(CamelModel):
    """Immutable trip parameters collected by the planning form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    start_location: str
    end_location: str
    start_date: date
    end_date: date
    start_time: str = "09:00"
    check_in_time: str = "22:00"
    is_round_trip: bool = False
    interests: tuple[str, ...] = ()

    @field_validator("start_location", "end_location", "start_time", "check_in_time")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("interests", mode="before")
    @classmethod
    def _clean_interests(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        return tuple(tag.strip() for tag in value if tag and tag.strip())

    @model_validator(mode="after")
    def _check_dates(self) -> "TripRequest":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


class Trip(CamelModel):
    id: str
    request: TripRequest
    status: TripStatus = TripStatus.PENDING
    itinerary: Optional[Itinerary] = None
    error: Optional[dict] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Flatten the request fields next to the trip's own fields."""
        data = self.request.to_dict()
        data.update(
            {
                "id": self.id,
                "status": self.status.value,
                "itinerary": self.itinerary.to_dict() if self.itinerary else None,
                "error": self.error,
                "createdAt": self.created_at.isoformat(),
            }
        )
        return data
