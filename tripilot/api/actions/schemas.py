# tripilot/api/actions/schemas.py
"""Payload schemas for the serialized JSON the assistant passes to actions.

The assistant sends itineraries and search results as JSON strings. Each
string is decoded in one step: either every entry validates against its
schema or the whole payload is rejected with a ParseError. Nothing
half-decoded ever reaches the store.
"""

from __future__ import annotations

import datetime
import json
from typing import Any, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from tripilot.api.errors import ParseError

ActivityType = Literal["sightseeing", "food", "transport", "hotel", "activity"]
FlightClass = Literal["economy", "business", "first"]
PriceLevel = Literal["$", "$$", "$$$", "$$$$"]


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _blank_to_none(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return value


class ActivityPayload(_Payload):
    """One itinerary activity; coordinates arrive flat as lat/lng."""

    time: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    activity: str
    location: str
    lat: float
    lng: float
    type: ActivityType


class DayPayload(_Payload):
    day: int = Field(ge=1)
    date: str
    title: str
    activities: List[ActivityPayload]

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value):
        try:
            datetime.date.fromisoformat(value)
        except ValueError:
            raise ValueError(f"expected an ISO date (YYYY-MM-DD), got '{value}'") from None
        return value


class FlightPayload(_Payload):
    airline: str
    from_city: Optional[str] = Field(default=None, alias="from")
    to_city: Optional[str] = Field(default=None, alias="to")
    depart_time: str
    arrive_time: str
    duration: str
    stops: int = Field(default=0, ge=0)
    price: float = Field(ge=0)
    flight_class: FlightClass = Field(default="economy", alias="class")

    @field_validator("from_city", "to_city", mode="before")
    @classmethod
    def _optional_city(cls, value):
        return _blank_to_none(value)

    @field_validator("stops", mode="before")
    @classmethod
    def _default_stops(cls, value):
        return 0 if value is None else value

    @field_validator("flight_class", mode="before")
    @classmethod
    def _default_class(cls, value):
        value = _blank_to_none(value)
        return "economy" if value is None else str(value).lower()


class HotelPayload(_Payload):
    name: str
    location: Optional[str] = None
    rating: float = Field(ge=0, le=5)
    stars: int = Field(ge=1, le=5)
    price_per_night: float = Field(ge=0)
    amenities: List[str] = Field(default_factory=list)

    @field_validator("location", mode="before")
    @classmethod
    def _optional_location(cls, value):
        return _blank_to_none(value)

    @field_validator("amenities", mode="before")
    @classmethod
    def _default_amenities(cls, value):
        return [] if value is None else value


class RestaurantPayload(_Payload):
    name: str
    cuisine: str
    location: Optional[str] = None
    rating: float = Field(ge=0, le=5)
    price_level: PriceLevel = "$$"
    description: str
    must_try: Optional[str] = None

    @field_validator("location", "must_try", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return _blank_to_none(value)

    @field_validator("price_level", mode="before")
    @classmethod
    def _default_price_level(cls, value):
        value = _blank_to_none(value)
        return "$$" if value is None else value


class CardItemPayload(_Payload):
    label: str
    value: str
    sublabel: Optional[str] = None
    color: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _display_value(cls, value):
        # "value" is display text; the assistant often sends bare numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("sublabel", "color", mode="before")
    @classmethod
    def _optional_text(cls, value):
        return _blank_to_none(value)


P = TypeVar("P", bound=BaseModel)


def decode_list(raw: Any, model: Type[P], what: str) -> List[P]:
    """Decode a JSON array string into a list of ``model`` instances.

    Args:
        raw: The JSON string sent by the assistant
        model: Schema every array entry must satisfy
        what: Human-readable payload name used in error messages

    Returns:
        Validated entries, in payload order

    Raises:
        ParseError: If the string is not JSON, not an array, or any entry
            fails validation
    """
    if not isinstance(raw, str):
        raise ParseError(f"Failed to parse {what}: expected a JSON string")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Failed to parse {what}: {exc.msg} at position {exc.pos}") from exc

    if not isinstance(data, list):
        raise ParseError(f"Failed to parse {what}: expected a JSON array")

    entries = []
    for index, entry in enumerate(data):
        try:
            entries.append(model.model_validate(entry))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'entry'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ParseError(f"Failed to parse {what}: entry {index}: {problems}") from exc
    return entries


__all__ = [
    "ActivityPayload",
    "DayPayload",
    "FlightPayload",
    "HotelPayload",
    "RestaurantPayload",
    "CardItemPayload",
    "decode_list",
]
