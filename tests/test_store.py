import threading

import pytest

from conftest import make_trip
from tripilot.api.models import BucketListItem, LatLng, PendingBooking
from tripilot.api.services.store import TripStore


def bucket_item(item_id="bl-x", priority="dream"):
    return BucketListItem(item_id, "Lisbon", "Portugal", LatLng(38.7223, -9.1393), "2026-03-01", priority)


def pending(name="JAL 001", price=890):
    return PendingBooking("flight", name, price, "NYC -> Tokyo")


class TestTrips:
    def test_add_trip_prepends_and_focuses(self, sample_store):
        trip = make_trip("t-new")
        sample_store.add_trip(trip)

        assert sample_store.trips[0] is trip
        assert sample_store.selected_trip is trip
        assert sample_store.fly_to == trip.coords
        assert sample_store.active_tab == "trips"

    def test_duplicate_id_rejected(self, store):
        store.add_trip(make_trip("t-1"))
        with pytest.raises(ValueError):
            store.add_trip(make_trip("t-1"))
        assert len(store.trips) == 1

    def test_select_and_clear(self, sample_store):
        trip = sample_store.select_trip_by_id("trip-1")
        assert trip is not None
        assert sample_store.selected_trip is trip
        assert sample_store.fly_to == trip.coords

        sample_store.clear_selection()
        assert sample_store.selected_trip is None
        assert sample_store.trip_markers() == []

    def test_select_unknown_trip(self, sample_store):
        assert sample_store.select_trip_by_id("nope") is None
        assert sample_store.selected_trip is None

    def test_trip_markers_follow_itinerary_order(self, store):
        trip = make_trip(days=2)
        store.add_trip(trip)
        markers = store.trip_markers()

        assert len(markers) == 4
        assert [m["label"] for m in markers] == [
            "Day 1: Walk 1", "Day 1: Lunch 1", "Day 2: Walk 2", "Day 2: Lunch 2",
        ]
        assert markers[1]["type"] == "food"
        assert markers[0]["coords"] == trip.days[0].activities[0].coords

    def test_update_trip_status_updates_selection(self, store):
        store.add_trip(make_trip("t-1"))
        updated = store.update_trip_status("t-1", "booked")
        assert updated.status == "booked"
        assert store.selected_trip.status == "booked"
        assert store.update_trip_status("missing", "booked") is None

    def test_update_trip_status_rejects_unknown_status(self, store):
        store.add_trip(make_trip("t-1"))
        version = store.version
        with pytest.raises(ValueError):
            store.update_trip_status("t-1", "dreaming")
        assert store.trips[0].status == "planned"
        assert store.version == version


class TestBucketList:
    def test_add_prepends_and_switches_tab(self, sample_store):
        item = sample_store.add_bucket_item(bucket_item())
        assert sample_store.bucket_list[0] is item
        assert sample_store.active_tab == "bucket"
        assert sample_store.fly_to == item.coords

    def test_unknown_priority_defaults(self, store):
        item = store.add_bucket_item(bucket_item(priority="asap"))
        assert item.priority == "someday"

    def test_remove_is_idempotent(self, sample_store):
        assert sample_store.remove_bucket_item("bl-1") is True
        version = sample_store.version
        assert sample_store.remove_bucket_item("bl-1") is False
        assert sample_store.version == version
        assert [b.id for b in sample_store.bucket_list] == ["bl-2", "bl-3"]


class TestBookings:
    def test_request_then_confirm(self, store):
        store.request_booking(pending())
        assert store.pending_booking.item_name == "JAL 001"
        assert store.bookings == ()

        booking = store.confirm_pending_booking()
        assert booking.status == "confirmed"
        assert booking.item_name == "JAL 001"
        assert booking.price == 890
        assert store.pending_booking is None
        assert store.bookings == (booking,)
        assert store.active_tab == "bookings"

    def test_confirm_without_pending(self, store):
        assert store.confirm_pending_booking() is None
        assert store.bookings == ()

    def test_cancel_discards_pending(self, store):
        store.request_booking(pending())
        store.cancel_pending_booking()
        assert store.pending_booking is None
        assert store.bookings == ()

    def test_second_request_overwrites_first(self, store, caplog):
        store.request_booking(pending("JAL 001"))
        with caplog.at_level("WARNING"):
            store.request_booking(pending("ANA 7", 910))
        assert store.pending_booking.item_name == "ANA 7"
        assert "Replacing pending booking" in caplog.text

    def test_overwritten_request_confirms_latest_only(self, store):
        store.request_booking(pending("JAL 001", 890))
        store.request_booking(pending("ANA 7", 910))
        booking = store.confirm_pending_booking()
        assert len(store.bookings) == 1
        assert (booking.item_name, booking.price) == ("ANA 7", 910)

    def test_bookings_most_recent_first(self, store):
        store.request_booking(pending("first"))
        first = store.confirm_pending_booking()
        store.request_booking(pending("second"))
        second = store.confirm_pending_booking()
        assert store.bookings == (second, first)
        assert first.id != second.id


class TestPanelAndSnapshot:
    def test_set_active_tab(self, store):
        store.set_active_tab("bookings")
        assert store.active_tab == "bookings"
        with pytest.raises(ValueError):
            store.set_active_tab("settings")

    def test_focus(self, store):
        store.focus(LatLng(1, 2))
        assert store.fly_to == LatLng(1, 2)

    def test_every_mutation_bumps_version(self, store):
        versions = [store.version]
        store.add_trip(make_trip())
        versions.append(store.version)
        store.add_bucket_item(bucket_item())
        versions.append(store.version)
        store.request_booking(pending())
        versions.append(store.version)
        store.confirm_pending_booking()
        versions.append(store.version)
        store.set_active_tab("trips")
        versions.append(store.version)
        assert versions == sorted(set(versions))

    def test_snapshot_shape(self, sample_store):
        sample_store.select_trip_by_id("trip-1")
        snap = sample_store.snapshot()

        assert set(snap) == {
            "version", "trips", "bucketList", "bookings", "pendingBooking",
            "selectedTripId", "flyTo", "activeTab", "tripMarkers",
        }
        assert snap["selectedTripId"] == "trip-1"
        assert snap["flyTo"] == {"lat": 35.0116, "lng": 135.7681}
        assert len(snap["tripMarkers"]) == 16
        assert snap["tripMarkers"][0]["coords"] == {"lat": 34.9856, "lng": 135.7585}
        assert snap["pendingBooking"] is None

    def test_empty_store(self, store):
        snap = store.snapshot()
        assert snap["trips"] == [] and snap["bucketList"] == [] and snap["bookings"] == []
        assert snap["activeTab"] == "trips"


def test_concurrent_mutations_are_serialized(store):
    def add_many(offset):
        for i in range(50):
            store.add_trip(make_trip(f"t-{offset}-{i}", days=1))

    threads = [threading.Thread(target=add_many, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store.trips) == 200
    assert store.version == 200
