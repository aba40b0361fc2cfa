"""Shared data structures for trips, bucket lists, search results and bookings.

Every entity is a frozen dataclass: the store hands the same objects to the
gateway, the map scene and the transport layer, so nobody downstream can
mutate store-owned state behind its back. ``to_dict`` emits the camelCase
field names the browser UI and the assistant are prompted against.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

ACTIVITY_TYPES = ("sightseeing", "food", "transport", "hotel", "activity")
TRIP_STATUSES = ("planned", "booked", "completed")
PRIORITIES = ("dream", "next", "someday")
BOOKING_TYPES = ("flight", "hotel")
BOOKING_STATUSES = ("pending", "confirmed", "cancelled")
FLIGHT_CLASSES = ("economy", "business", "first")
PRICE_LEVELS = ("$", "$$", "$$$", "$$$$")
CARD_TYPES = ("comparison", "summary", "budget", "tips")
TABS = ("trips", "bucket", "bookings")

DEFAULT_PRIORITY = "someday"
DEFAULT_CARD_COLOR = "#6366F1"


@dataclass(frozen=True)
class LatLng:
    """A geographic point."""

    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Destination:
    """A popular destination pin; static reference data."""

    id: str
    name: str
    country: str
    coords: LatLng
    rating: Optional[float] = None
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "coords": self.coords.to_dict(),
            "rating": self.rating,
            "description": self.description,
        }


@dataclass(frozen=True)
class Activity:
    """A single timed stop within an itinerary day."""

    time: str  # "HH:MM"
    activity: str
    location: str
    coords: LatLng
    type: str  # one of ACTIVITY_TYPES

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "activity": self.activity,
            "location": self.location,
            "coords": self.coords.to_dict(),
            "type": self.type,
        }


@dataclass(frozen=True)
class ItineraryDay:
    """One day of a trip."""

    day: int  # 1‑based day index within the trip
    date: str
    title: str
    activities: Tuple[Activity, ...] = ()

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "date": self.date,
            "title": self.title,
            "activities": [a.to_dict() for a in self.activities],
        }


@dataclass(frozen=True)
class Trip:
    """A planned multi-day itinerary tied to one destination."""

    id: str
    destination: str
    country: str
    coords: LatLng
    start_date: str
    end_date: str
    days: Tuple[ItineraryDay, ...]
    total_budget: float
    status: str = "planned"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "destination": self.destination,
            "country": self.country,
            "coords": self.coords.to_dict(),
            "startDate": self.start_date,
            "endDate": self.end_date,
            "days": [d.to_dict() for d in self.days],
            "totalBudget": self.total_budget,
            "status": self.status,
        }


@dataclass(frozen=True)
class BucketListItem:
    """A destination the user wants to visit some day."""

    id: str
    destination: str
    country: str
    coords: LatLng
    added_at: str
    priority: str = DEFAULT_PRIORITY
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "destination": self.destination,
            "country": self.country,
            "coords": self.coords.to_dict(),
            "notes": self.notes,
            "addedAt": self.added_at,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class Flight:
    id: str
    airline: str
    from_city: str
    to_city: str
    depart_time: str
    arrive_time: str
    duration: str
    stops: int
    price: float
    flight_class: str = "economy"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "airline": self.airline,
            "from": self.from_city,
            "to": self.to_city,
            "departTime": self.depart_time,
            "arriveTime": self.arrive_time,
            "duration": self.duration,
            "stops": self.stops,
            "price": self.price,
            "class": self.flight_class,
        }


@dataclass(frozen=True)
class Hotel:
    id: str
    name: str
    location: str
    rating: float
    stars: int
    price_per_night: float
    amenities: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "rating": self.rating,
            "stars": self.stars,
            "pricePerNight": self.price_per_night,
            "amenities": list(self.amenities),
        }


@dataclass(frozen=True)
class Restaurant:
    id: str
    name: str
    cuisine: str
    location: str
    rating: float
    price_level: str
    description: str
    must_try: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "cuisine": self.cuisine,
            "location": self.location,
            "rating": self.rating,
            "priceLevel": self.price_level,
            "description": self.description,
            "mustTry": self.must_try,
        }


@dataclass(frozen=True)
class PendingBooking:
    """A booking staged by the assistant, awaiting explicit user approval."""

    type: str
    item_name: str
    price: float
    details: str

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "itemName": self.item_name,
            "price": self.price,
            "details": self.details,
        }


@dataclass(frozen=True)
class Booking:
    """A confirmed purchase record."""

    id: str
    type: str
    item_name: str
    price: float
    details: str
    status: str = "confirmed"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "itemName": self.item_name,
            "price": self.price,
            "status": self.status,
            "details": self.details,
        }


@dataclass(frozen=True)
class CardItem:
    label: str
    value: str
    sublabel: Optional[str] = None
    color: str = DEFAULT_CARD_COLOR

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "value": self.value,
            "sublabel": self.sublabel,
            "color": self.color,
        }


@dataclass(frozen=True)
class TripCard:
    """A visual comparison / summary card rendered in the chat."""

    type: str
    title: str
    items: Tuple[CardItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "title": self.title,
            "items": [i.to_dict() for i in self.items],
        }


# ---------------------------------------------------------------------------
# Validation predicates
# ---------------------------------------------------------------------------

def is_valid_latlng(coords: Optional[LatLng]) -> bool:
    if coords is None:
        return False
    return -90 <= coords.lat <= 90 and -180 <= coords.lng <= 180


def _parse_iso_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def trip_problems(trip: Trip) -> List[str]:
    """Return every well-formedness problem found in ``trip``.

    An empty list means the trip is well formed: day numbers form the
    contiguous sequence 1..n, start date is not after end date, the budget is
    non-negative and every coordinate is a valid lat/lng.
    """
    problems: List[str] = []

    day_numbers = sorted(d.day for d in trip.days)
    if day_numbers != list(range(1, len(trip.days) + 1)):
        problems.append(f"day numbers must run 1..{len(trip.days)}, got {day_numbers}")

    start = _parse_iso_date(trip.start_date)
    end = _parse_iso_date(trip.end_date)
    if start is None or end is None:
        problems.append("startDate and endDate must be ISO dates (YYYY-MM-DD)")
    elif start > end:
        problems.append(f"startDate {trip.start_date} is after endDate {trip.end_date}")

    if trip.total_budget < 0:
        problems.append("totalBudget must not be negative")

    if trip.status not in TRIP_STATUSES:
        problems.append(f"unknown trip status '{trip.status}'")

    if not is_valid_latlng(trip.coords):
        problems.append(f"trip coordinates out of range: {trip.coords}")

    for day in trip.days:
        for act in day.activities:
            if not is_valid_latlng(act.coords):
                problems.append(f"day {day.day} '{act.activity}' coordinates out of range")
            if act.type not in ACTIVITY_TYPES:
                problems.append(f"day {day.day} '{act.activity}' has unknown type '{act.type}'")

    return problems


def is_well_formed(trip: Trip) -> bool:
    return not trip_problems(trip)


def normalize_priority(value: Any) -> str:
    """Map an unset or unknown priority onto the default."""
    if isinstance(value, str) and value.strip().lower() in PRIORITIES:
        return value.strip().lower()
    return DEFAULT_PRIORITY


def to_dicts(items) -> List[Dict[str, Any]]:
    return [i.to_dict() for i in items]


def round_half_up(value: float, step: int = 1) -> int:
    """Round to the nearest multiple of ``step``, halves away from zero."""
    scaled = abs(value) / step
    rounded = int(math.floor(scaled + 0.5)) * step
    return rounded if value >= 0 else -rounded
