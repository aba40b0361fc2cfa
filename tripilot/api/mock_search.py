# tripilot/api/mock_search.py
"""Offline flight and hotel search.

Produces plausible-looking result sets without calling any travel API. Values
are random but bounded; callers can pass their own ``random.Random`` to get
repeatable output.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from tripilot.api.models import Flight, Hotel, round_half_up

logger = logging.getLogger(__name__)

AIRLINES = [
    "Delta", "United", "Emirates", "Japan Airlines", "Lufthansa",
    "Turkish Airlines", "Singapore Airlines", "British Airways", "Air France", "Qantas",
]

HOTEL_PREFIXES = ["Grand", "Royal", "The", "Hotel", "Boutique", "Park", "Azure", "Golden"]
HOTEL_SUFFIXES = ["Palace", "Inn", "Suites", "Resort", "Lodge", "House", "Gardens", "Residence"]
AMENITIES_POOL = [
    "Free WiFi", "Pool", "Spa", "Gym", "Breakfast", "Restaurant", "Bar",
    "Room Service", "Parking", "Airport Shuttle", "Rooftop Terrace", "Ocean View",
]

# stars -> (lowest base price, number of price steps above it)
PRICE_TIERS = {
    3: (50, 80),
    4: (100, 150),
    5: (180, 250),
}

MIN_RESULTS = 4
MAX_RESULTS = 6


def price_bounds(stars: int):
    """Inclusive nightly price bounds for a star rating after rounding."""
    low, spread = PRICE_TIERS[stars]
    return round_half_up(low, 5), round_half_up(low + spread - 1, 5)


def _clock(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def generate_flights(from_city: str, to_city: str, date: str,
                     rng: Optional[random.Random] = None) -> List[Flight]:
    """Return 4-6 mock flights for a route, cheapest first."""
    rng = rng or random.Random()
    count = rng.randint(MIN_RESULTS, MAX_RESULTS)

    flights = []
    for i in range(count):
        dep_hour = rng.randint(6, 19)
        duration_h = rng.randint(2, 15)
        duration_m = rng.randint(0, 59)
        arr_hour = (dep_hour + duration_h) % 24
        # Only long-haul routes get a connection
        stops = (1 if rng.random() < 0.6 else 0) if duration_h > 8 else 0
        base_price = 200 + duration_h * 60 + rng.randint(0, 299)

        flights.append(Flight(
            id=f"fl-{date}-{i}",
            airline=rng.choice(AIRLINES),
            from_city=from_city,
            to_city=to_city,
            depart_time=_clock(dep_hour, rng.randint(0, 59)),
            arrive_time=_clock(arr_hour, rng.randint(0, 59)),
            duration=f"{duration_h}h {duration_m}m",
            stops=stops,
            price=round_half_up(base_price, 10),
            flight_class="economy",
        ))

    flights.sort(key=lambda f: f.price)
    logger.debug(f"Generated {len(flights)} mock flights {from_city} -> {to_city} on {date}")
    return flights


def generate_hotels(location: str, rng: Optional[random.Random] = None) -> List[Hotel]:
    """Return 4-6 mock hotels in ``location``, best rated first."""
    rng = rng or random.Random()
    count = rng.randint(MIN_RESULTS, MAX_RESULTS)

    hotels = []
    for i in range(count):
        stars = rng.randint(3, 5)
        rating = round(3.5 + rng.random() * 1.5, 1)
        low, spread = PRICE_TIERS[stars]
        price = low + rng.randint(0, spread - 1)
        amenities = rng.sample(AMENITIES_POOL, rng.randint(3, 6))

        hotels.append(Hotel(
            id=f"ht-{location[:3]}-{i}",
            name=f"{rng.choice(HOTEL_PREFIXES)} {location} {rng.choice(HOTEL_SUFFIXES)}",
            location=location,
            rating=rating,
            stars=stars,
            price_per_night=round_half_up(price, 5),
            amenities=tuple(amenities),
        ))

    hotels.sort(key=lambda h: h.rating, reverse=True)
    logger.debug(f"Generated {len(hotels)} mock hotels in {location}")
    return hotels


__all__ = ["generate_flights", "generate_hotels", "price_bounds", "AMENITIES_POOL"]
