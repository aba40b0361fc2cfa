# tripilot/api/services/map_service.py
"""Service layer for map-related operations."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from tripilot.api.config import get_map_config
from tripilot.api.models import BucketListItem, Destination, LatLng, Trip

logger = logging.getLogger(__name__)

ROUTE_STYLE = {
    "color": "#6366F1",
    "weight": 2,
    "opacity": 0.5,
    "dashArray": "8 6",
}

ACTIVITY_GLYPHS = {
    "food": "🍜",
    "hotel": "🏨",
    "transport": "✈️",
    "activity": "🎯",
    "sightseeing": "📸",
}


class MapService:
    """Builds the declarative scene the map renderer draws."""

    @staticmethod
    def validate_coordinates(lat: float, lng: float) -> bool:
        """Validate that coordinates are within valid ranges.

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            True if valid, False otherwise
        """
        return -90 <= lat <= 90 and -180 <= lng <= 180

    @staticmethod
    def destination_pin(dest: Destination) -> Dict[str, Any]:
        rating = dest.rating if dest.rating is not None else ""
        return {
            "kind": "destination",
            "id": dest.id,
            "coords": dest.coords.to_dict(),
            "glyph": "📍",
            "size": 24,
            "tooltip": f"{dest.name}\n{dest.country}\n⭐ {rating}",
            "name": dest.name,
            "country": dest.country,
            "rating": dest.rating,
        }

    @staticmethod
    def bucket_pin(item: BucketListItem) -> Dict[str, Any]:
        return {
            "kind": "bucket",
            "id": item.id,
            "coords": item.coords.to_dict(),
            "glyph": "⭐",
            "size": 22,
            "tooltip": f"{item.destination}\nBucket list: {item.priority}",
            "destination": item.destination,
            "priority": item.priority,
        }

    @staticmethod
    def itinerary_pin(marker: Dict[str, Any]) -> Dict[str, Any]:
        coords = marker["coords"]
        return {
            "kind": "itinerary",
            "coords": coords.to_dict() if isinstance(coords, LatLng) else coords,
            "glyph": ACTIVITY_GLYPHS.get(marker["type"], ACTIVITY_GLYPHS["sightseeing"]),
            "size": 20,
            "tooltip": marker["label"],
            "label": marker["label"],
            "type": marker["type"],
        }

    @staticmethod
    def trip_route(trip: Trip) -> Optional[Dict[str, Any]]:
        """Ordered route through every activity of a trip.

        Returns:
            Polyline dict, or None when the trip has fewer than two points
        """
        points = [
            act.coords.to_dict()
            for day in trip.days
            for act in day.activities
        ]
        if len(points) < 2:
            return None
        return {"tripId": trip.id, "points": points, **ROUTE_STYLE}

    @staticmethod
    def calculate_bounds(trip: Trip) -> Dict[str, float]:
        """Calculate bounding box for all activities in a trip.

        Args:
            trip: Trip with geocoded activities

        Returns:
            Dictionary with north, south, east, west bounds (empty if no activities)
        """
        lats = [act.coords.lat for day in trip.days for act in day.activities]
        lngs = [act.coords.lng for day in trip.days for act in day.activities]

        if not lats or not lngs:
            return {}

        return {
            'north': max(lats),
            'south': min(lats),
            'east': max(lngs),
            'west': min(lngs)
        }

    @staticmethod
    def build_scene(destinations: Iterable[Destination],
                    trips: Iterable[Trip],
                    bucket_list: Iterable[BucketListItem],
                    trip_markers: Iterable[Dict[str, Any]],
                    fly_to: Optional[LatLng] = None) -> Dict[str, Any]:
        """Describe everything the map should show.

        Args:
            destinations: Popular destination pins
            trips: Trips whose routes are drawn (normally just the selected one)
            bucket_list: Bucket list entries
            trip_markers: Itinerary markers from ``TripStore.trip_markers``
            fly_to: Camera target, if any

        Returns:
            Dictionary with view, markers, polylines, bounds and camera keys
        """
        config = get_map_config()

        markers: List[Dict[str, Any]] = []
        markers.extend(MapService.destination_pin(d) for d in destinations)
        markers.extend(MapService.bucket_pin(b) for b in bucket_list)
        markers.extend(MapService.itinerary_pin(m) for m in trip_markers)

        polylines = []
        bounds = None
        for trip in trips:
            route = MapService.trip_route(trip)
            if route:
                polylines.append(route)
            # Frame the first trip that has any activities
            if bounds is None:
                bounds = MapService.calculate_bounds(trip) or None

        camera = None
        if fly_to is not None:
            if MapService.validate_coordinates(fly_to.lat, fly_to.lng):
                camera = {
                    "center": fly_to.to_dict(),
                    "zoom": config["fly_to_zoom"],
                    "duration": config["fly_to_duration"],
                }
            else:
                logger.warning(f"Ignoring out-of-range fly-to target {fly_to}")

        return {
            "view": {
                "center": config["default_center"],
                "zoom": config["default_zoom"],
                "minZoom": config["min_zoom"],
                "maxZoom": config["max_zoom"],
            },
            "markers": markers,
            "polylines": polylines,
            "bounds": bounds,
            "camera": camera,
        }

    @staticmethod
    def scene_for_store(store, destinations: Iterable[Destination]) -> Dict[str, Any]:
        """Build the scene for a store's current state."""
        with store.lock:
            selected = store.selected_trip
            return MapService.build_scene(
                destinations=destinations,
                trips=[selected] if selected else [],
                bucket_list=store.bucket_list,
                trip_markers=store.trip_markers(),
                fly_to=store.fly_to,
            )


def build_map_scene(destinations, trips, bucket_list, trip_markers, fly_to=None):
    """Module-level alias for ``MapService.build_scene``."""
    return MapService.build_scene(destinations, trips, bucket_list, trip_markers, fly_to)


# Export for use in other modules
__all__ = ['MapService', 'build_map_scene']
