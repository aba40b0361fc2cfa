from dataclasses import replace

import pytest

from conftest import make_trip
from tripilot.api.data import DESTINATIONS
from tripilot.api.models import ItineraryDay, LatLng
from tripilot.api.services.map_service import ACTIVITY_GLYPHS, MapService, build_map_scene
from tripilot.api.services.store import TripStore


def kinds(scene):
    return [m["kind"] for m in scene["markers"]]


def test_default_scene_has_destinations_and_bucket_pins():
    store = TripStore.with_sample_data()
    scene = MapService.scene_for_store(store, DESTINATIONS)

    assert kinds(scene).count("destination") == 15
    assert kinds(scene).count("bucket") == 3
    assert "itinerary" not in kinds(scene)
    assert scene["polylines"] == []
    assert scene["bounds"] is None
    assert scene["camera"] is None
    assert scene["view"]["center"] == {"lat": 25.0, "lng": 10.0}
    assert scene["view"]["zoom"] == 2.5


def test_selected_trip_adds_route_and_markers():
    store = TripStore.with_sample_data()
    store.select_trip_by_id("trip-1")
    scene = MapService.scene_for_store(store, DESTINATIONS)

    itinerary = [m for m in scene["markers"] if m["kind"] == "itinerary"]
    assert len(itinerary) == 16
    assert itinerary[0]["tooltip"] == "Day 1: Arrive at Kansai Airport, train to Kyoto"
    assert itinerary[0]["glyph"] == ACTIVITY_GLYPHS["transport"]

    (route,) = scene["polylines"]
    assert route["tripId"] == "trip-1"
    assert len(route["points"]) == 16
    assert route["points"][0] == {"lat": 34.9856, "lng": 135.7585}
    assert route["dashArray"] == "8 6"

    assert scene["camera"]["center"] == {"lat": 35.0116, "lng": 135.7681}
    assert scene["camera"]["zoom"] == 12
    assert scene["bounds"] == MapService.calculate_bounds(store.selected_trip)
    assert scene["bounds"]["north"] == 35.0394
    assert scene["bounds"]["west"] == 135.6722


def test_single_point_trip_has_no_route():
    trip = make_trip(days=1)
    single = ItineraryDay(1, "2026-05-01", "One", trip.days[0].activities[:1])
    assert MapService.trip_route(replace(trip, days=(single,))) is None


def test_bucket_pin_tooltip():
    store = TripStore.with_sample_data()
    pin = MapService.bucket_pin(store.bucket_list[1])
    assert pin["glyph"] == "⭐"
    assert pin["tooltip"] == "Machu Picchu\nBucket list: dream"


def test_destination_pin():
    pin = MapService.destination_pin(DESTINATIONS[1])
    assert pin["tooltip"] == "Tokyo\nJapan\n⭐ 4.9"
    assert pin["coords"] == {"lat": 35.6762, "lng": 139.6503}


def test_invalid_fly_to_is_ignored():
    scene = build_map_scene([], [], [], [], fly_to=LatLng(200, 0))
    assert scene["camera"] is None


def test_calculate_bounds():
    bounds = MapService.calculate_bounds(make_trip(days=2))
    assert bounds == {
        "north": pytest.approx(48.87),
        "south": pytest.approx(48.86),
        "east": pytest.approx(2.36),
        "west": pytest.approx(2.35),
    }
    assert MapService.calculate_bounds(make_trip(days=0)) == {}


def test_scene_is_pure():
    store = TripStore.with_sample_data()
    store.select_trip_by_id("trip-1")
    version = store.version
    first = MapService.scene_for_store(store, DESTINATIONS)
    second = MapService.scene_for_store(store, DESTINATIONS)
    assert first == second
    assert store.version == version
