# tripilot/api/data.py
"""Reference data: popular destinations, a sample trip and bucket list.

Also home of the id source used for trips, bucket-list items and bookings.
"""

from __future__ import annotations

import itertools
import threading
import time
from typing import Tuple

from tripilot.api.models import (
    Activity,
    BucketListItem,
    Destination,
    ItineraryDay,
    LatLng,
    Trip,
)

# ---------------------------------------------------------------------------
# Popular destinations (map pins)
# ---------------------------------------------------------------------------

DESTINATIONS: Tuple[Destination, ...] = (
    Destination("d-1", "Paris", "France", LatLng(48.8566, 2.3522), 4.8,
                "City of Light: art, cuisine, and iconic landmarks"),
    Destination("d-2", "Tokyo", "Japan", LatLng(35.6762, 139.6503), 4.9,
                "Where ancient temples meet neon-lit streets"),
    Destination("d-3", "New York", "USA", LatLng(40.7128, -74.006), 4.7,
                "The city that never sleeps"),
    Destination("d-4", "Bali", "Indonesia", LatLng(-8.3405, 115.092), 4.8,
                "Tropical paradise of rice terraces and temples"),
    Destination("d-5", "Barcelona", "Spain", LatLng(41.3874, 2.1686), 4.7,
                "Gaudí architecture and Mediterranean vibes"),
    Destination("d-6", "Cape Town", "South Africa", LatLng(-33.9249, 18.4241), 4.6,
                "Where mountains meet the ocean"),
    Destination("d-7", "Kyoto", "Japan", LatLng(35.0116, 135.7681), 4.9,
                "Imperial capital of zen gardens and geisha"),
    Destination("d-8", "Santorini", "Greece", LatLng(36.3932, 25.4615), 4.8,
                "Blue domes and sunset views over the caldera"),
    Destination("d-9", "Machu Picchu", "Peru", LatLng(-13.1631, -72.545), 4.9,
                "Lost city of the Incas above the clouds"),
    Destination("d-10", "Dubai", "UAE", LatLng(25.2048, 55.2708), 4.5,
                "Futuristic skyline in the desert"),
    Destination("d-11", "Rome", "Italy", LatLng(41.9028, 12.4964), 4.8,
                "Eternal city of history, art, and pasta"),
    Destination("d-12", "Reykjavik", "Iceland", LatLng(64.1466, -21.9426), 4.7,
                "Gateway to glaciers, geysers, and northern lights"),
    Destination("d-13", "Marrakech", "Morocco", LatLng(31.6295, -7.9811), 4.5,
                "Vibrant souks, palaces, and Sahara excursions"),
    Destination("d-14", "Sydney", "Australia", LatLng(-33.8688, 151.2093), 4.7,
                "Harbour city of beaches and opera"),
    Destination("d-15", "Istanbul", "Turkey", LatLng(41.0082, 28.9784), 4.6,
                "Where East meets West across the Bosphorus"),
)


def find_destination(destination_id: str):
    for dest in DESTINATIONS:
        if dest.id == destination_id:
            return dest
    return None


# ---------------------------------------------------------------------------
# Sample trip
# ---------------------------------------------------------------------------

def _act(time_, activity, location, lat, lng, type_):
    return Activity(time_, activity, location, LatLng(lat, lng), type_)


SAMPLE_TRIPS: Tuple[Trip, ...] = (
    Trip(
        id="trip-1",
        destination="Kyoto",
        country="Japan",
        coords=LatLng(35.0116, 135.7681),
        start_date="2026-04-10",
        end_date="2026-04-14",
        total_budget=2800,
        status="planned",
        days=(
            ItineraryDay(1, "2026-04-10", "Arrival & Eastern Kyoto", (
                _act("10:00", "Arrive at Kansai Airport, train to Kyoto", "Kyoto Station", 34.9856, 135.7585, "transport"),
                _act("14:00", "Visit Fushimi Inari Shrine", "Fushimi Inari", 34.9671, 135.7727, "sightseeing"),
                _act("18:00", "Dinner in Gion district, try kaiseki cuisine", "Gion", 35.0036, 135.7747, "food"),
            )),
            ItineraryDay(2, "2026-04-11", "Bamboo & Temples", (
                _act("08:00", "Arashiyama Bamboo Grove (go early to beat crowds)", "Arashiyama", 35.0094, 135.6722, "sightseeing"),
                _act("11:00", "Tenryū-ji Temple and garden", "Tenryū-ji", 35.0155, 135.6745, "sightseeing"),
                _act("13:00", "Lunch: matcha and soba noodles", "Arashiyama", 35.0135, 135.6780, "food"),
                _act("15:00", "Kinkaku-ji (Golden Pavilion)", "Kinkaku-ji", 35.0394, 135.7292, "sightseeing"),
            )),
            ItineraryDay(3, "2026-04-12", "Tea & Culture", (
                _act("09:00", "Tea ceremony in a traditional machiya house", "Higashiyama", 34.9986, 135.7809, "activity"),
                _act("12:00", "Nishiki Market food tour", "Nishiki Market", 35.0051, 135.7649, "food"),
                _act("15:00", "Philosopher's Path walk", "Philosopher's Path", 35.0270, 135.7945, "sightseeing"),
            )),
            ItineraryDay(4, "2026-04-13", "Day Trip to Nara", (
                _act("09:00", "Train to Nara (45 min)", "Nara", 34.6851, 135.8048, "transport"),
                _act("10:30", "Nara Park, feed the sacred deer", "Nara Park", 34.6851, 135.8430, "activity"),
                _act("12:00", "Tōdai-ji Temple and the great bronze Buddha", "Tōdai-ji", 34.6889, 135.8398, "sightseeing"),
            )),
            ItineraryDay(5, "2026-04-14", "Cherry Blossoms & Departure", (
                _act("07:00", "Morning walk along Kamogawa River", "Kamogawa", 35.0000, 135.7700, "sightseeing"),
                _act("10:00", "Souvenir shopping on Teramachi Street", "Teramachi", 35.0069, 135.7637, "activity"),
                _act("14:00", "Train to Kansai Airport, departure", "Kyoto Station", 34.9856, 135.7585, "transport"),
            )),
        ),
    ),
)

# ---------------------------------------------------------------------------
# Sample bucket list
# ---------------------------------------------------------------------------

SAMPLE_BUCKET_LIST: Tuple[BucketListItem, ...] = (
    BucketListItem("bl-1", "Santorini", "Greece", LatLng(36.3932, 25.4615), "2026-01-15",
                   "next", "Watch sunset from Oia, blue dome photos"),
    BucketListItem("bl-2", "Machu Picchu", "Peru", LatLng(-13.1631, -72.545), "2026-01-20",
                   "dream", "Hike the Inca Trail, need to book permits early"),
    BucketListItem("bl-3", "Reykjavik", "Iceland", LatLng(64.1466, -21.9426), "2026-02-01",
                   "someday", "Northern lights, Blue Lagoon, Golden Circle"),
)

# ---------------------------------------------------------------------------
# Id source
# ---------------------------------------------------------------------------

_counter = itertools.count(int(time.time() * 1000) + 1)
_counter_lock = threading.Lock()


def uid(prefix: str = "t") -> str:
    """Return a process-wide unique, monotonically increasing id."""
    with _counter_lock:
        return f"{prefix}-{next(_counter)}"


__all__ = [
    "DESTINATIONS",
    "SAMPLE_TRIPS",
    "SAMPLE_BUCKET_LIST",
    "find_destination",
    "uid",
]
