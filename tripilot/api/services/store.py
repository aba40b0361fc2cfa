# tripilot/api/services/store.py
"""Service layer holding the trip planner's application state."""

import logging
import threading
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from tripilot.api.data import SAMPLE_BUCKET_LIST, SAMPLE_TRIPS, uid
from tripilot.api.models import (
    TABS,
    TRIP_STATUSES,
    Booking,
    BucketListItem,
    LatLng,
    PendingBooking,
    Trip,
    normalize_priority,
    to_dicts,
)

logger = logging.getLogger(__name__)


class TripStore:
    """Single source of truth for trips, bucket list, bookings and map focus.

    All three collections are kept most-recent-first. Every mutation runs
    under one re-entrant lock, so user events and assistant actions touching
    the same store are applied one at a time, in arrival order.
    """

    def __init__(self, trips: Iterable[Trip] = (), bucket_list: Iterable[BucketListItem] = ()):
        self._lock = threading.RLock()
        self._trips: List[Trip] = list(trips)
        self._bucket_list: List[BucketListItem] = list(bucket_list)
        self._bookings: List[Booking] = []
        self._pending_booking: Optional[PendingBooking] = None
        # Pending booking an open checkout is paying for
        self._checkout_hold: Optional[PendingBooking] = None
        self._selected_trip: Optional[Trip] = None
        self._fly_to: Optional[LatLng] = None
        self._active_tab = "trips"
        self._version = 0

    @classmethod
    def with_sample_data(cls) -> "TripStore":
        """Create a store seeded with the sample Kyoto trip and bucket list."""
        return cls(trips=SAMPLE_TRIPS, bucket_list=SAMPLE_BUCKET_LIST)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def trips(self):
        return tuple(self._trips)

    @property
    def bucket_list(self):
        return tuple(self._bucket_list)

    @property
    def bookings(self):
        return tuple(self._bookings)

    @property
    def pending_booking(self) -> Optional[PendingBooking]:
        return self._pending_booking

    @property
    def selected_trip(self) -> Optional[Trip]:
        return self._selected_trip

    @property
    def fly_to(self) -> Optional[LatLng]:
        return self._fly_to

    @property
    def active_tab(self) -> str:
        return self._active_tab

    @property
    def version(self) -> int:
        """Incremented on every mutation; lets the UI skip stale pushes."""
        return self._version

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        with self._lock:
            for trip in self._trips:
                if trip.id == trip_id:
                    return trip
        return None

    def trip_markers(self) -> List[Dict[str, Any]]:
        """Flatten the selected trip's activities into map markers.

        Returns:
            List of {coords, label, type} dicts, empty if no trip is selected
        """
        trip = self._selected_trip
        if trip is None:
            return []
        return [
            {
                "coords": act.coords,
                "label": f"Day {day.day}: {act.activity}",
                "type": act.type,
            }
            for day in trip.days
            for act in day.activities
        ]

    def snapshot(self) -> Dict[str, Any]:
        """Serialize the whole store for the UI and the assistant.

        Returns:
            Dictionary of plain JSON-compatible values
        """
        with self._lock:
            return {
                "version": self._version,
                "trips": to_dicts(self._trips),
                "bucketList": to_dicts(self._bucket_list),
                "bookings": to_dicts(self._bookings),
                "pendingBooking": self._pending_booking.to_dict() if self._pending_booking else None,
                "selectedTripId": self._selected_trip.id if self._selected_trip else None,
                "flyTo": self._fly_to.to_dict() if self._fly_to else None,
                "activeTab": self._active_tab,
                "tripMarkers": [
                    {**m, "coords": m["coords"].to_dict()} for m in self.trip_markers()
                ],
            }

    # ------------------------------------------------------------------
    # Trips
    # ------------------------------------------------------------------

    def add_trip(self, trip: Trip) -> Trip:
        """Store a new trip and focus the map on it.

        Args:
            trip: Trip to add; its id must not already be in the store

        Returns:
            The stored trip
        """
        with self._lock:
            if any(t.id == trip.id for t in self._trips):
                raise ValueError(f"Trip id {trip.id} already exists")
            self._trips.insert(0, trip)
            self._selected_trip = trip
            self._fly_to = trip.coords
            self._active_tab = "trips"
            self._version += 1
        logger.info(f"Added trip {trip.id} to {trip.destination} ({len(trip.days)} days)")
        return trip

    def select_trip(self, trip: Trip) -> None:
        with self._lock:
            self._selected_trip = trip
            self._fly_to = trip.coords
            self._version += 1
        logger.debug(f"Selected trip {trip.id}")

    def select_trip_by_id(self, trip_id: str) -> Optional[Trip]:
        """Select a stored trip by id; returns None when the id is unknown."""
        with self._lock:
            trip = self.get_trip(trip_id)
            if trip is not None:
                self.select_trip(trip)
            return trip

    def clear_selection(self) -> None:
        with self._lock:
            self._selected_trip = None
            self._version += 1

    def update_trip_status(self, trip_id: str, status: str) -> Optional[Trip]:
        """Replace a trip with a copy carrying the new status."""
        if status not in TRIP_STATUSES:
            raise ValueError(f"Unknown trip status '{status}'. Must be one of: {', '.join(TRIP_STATUSES)}")
        with self._lock:
            for i, trip in enumerate(self._trips):
                if trip.id == trip_id:
                    updated = replace(trip, status=status)
                    self._trips[i] = updated
                    if self._selected_trip is not None and self._selected_trip.id == trip_id:
                        self._selected_trip = updated
                    self._version += 1
                    return updated
        return None

    # ------------------------------------------------------------------
    # Bucket list
    # ------------------------------------------------------------------

    def add_bucket_item(self, item: BucketListItem) -> BucketListItem:
        with self._lock:
            priority = normalize_priority(item.priority)
            if priority != item.priority:
                item = replace(item, priority=priority)
            self._bucket_list.insert(0, item)
            self._fly_to = item.coords
            self._active_tab = "bucket"
            self._version += 1
        logger.info(f"Added {item.destination} to bucket list ({item.priority})")
        return item

    def remove_bucket_item(self, item_id: str) -> bool:
        """Remove a bucket-list entry; unknown ids are ignored.

        Returns:
            True if something was removed
        """
        with self._lock:
            before = len(self._bucket_list)
            self._bucket_list = [b for b in self._bucket_list if b.id != item_id]
            removed = len(self._bucket_list) != before
            if removed:
                self._version += 1
        if removed:
            logger.info(f"Removed bucket list item {item_id}")
        return removed

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    def request_booking(self, details: PendingBooking) -> PendingBooking:
        """Stage a booking for user approval, replacing any earlier one."""
        with self._lock:
            if self._pending_booking is not None:
                logger.warning(
                    f"Replacing pending booking '{self._pending_booking.item_name}' "
                    f"with '{details.item_name}'"
                )
            self._pending_booking = details
            self._version += 1
        return details

    def hold_pending_booking(self) -> Optional[PendingBooking]:
        """Reserve the current pending booking for checkout.

        While held it can only be committed or discarded through
        ``commit_bookings``/``cancel_pending_booking`` with ``expected`` set
        to it; ``confirm_pending_booking`` leaves it alone.

        Returns:
            The held booking, or None when nothing is pending
        """
        with self._lock:
            self._checkout_hold = self._pending_booking
            return self._checkout_hold

    def is_held(self, booking: Optional[PendingBooking]) -> bool:
        return booking is not None and self._checkout_hold is booking

    def confirm_pending_booking(self) -> Optional[Booking]:
        """Turn the pending booking into a confirmed one.

        Returns:
            The new Booking, or None when nothing was pending or the pending
            booking belongs to an open checkout
        """
        with self._lock:
            pending = self._pending_booking
            if pending is None:
                return None
            if self.is_held(pending):
                logger.warning(f"Pending booking '{pending.item_name}' is in checkout, not confirming")
                return None
            return self.commit_bookings([pending], expected=pending)[0]

    def cancel_pending_booking(self, expected: Optional[PendingBooking] = None) -> bool:
        """Discard the pending booking.

        Args:
            expected: Only discard if the slot still holds this booking

        Returns:
            True if the slot was cleared
        """
        with self._lock:
            if expected is not None:
                self._release(expected)
                if self._pending_booking is not expected:
                    return False
            elif self.is_held(self._pending_booking):
                logger.warning(f"Pending booking '{self._pending_booking.item_name}' is in checkout, not cancelling")
                return False
            self._pending_booking = None
            self._version += 1
        return True

    def commit_bookings(self, items: Iterable[PendingBooking],
                        expected: Optional[PendingBooking] = None) -> List[Booking]:
        """Record confirmed bookings for ``items``.

        Args:
            items: Staged bookings, in the order they were shown to the user
            expected: The pending booking these items were taken from; the
                slot is cleared only if it still holds that exact object

        Returns:
            The created bookings, in the same order
        """
        with self._lock:
            created = [
                Booking(
                    id=uid(),
                    type=item.type,
                    item_name=item.item_name,
                    price=item.price,
                    details=item.details,
                    status="confirmed",
                )
                for item in items
            ]
            self._bookings[:0] = created
            if expected is not None:
                self._release(expected)
                if self._pending_booking is expected:
                    self._pending_booking = None
            self._active_tab = "bookings"
            self._version += 1
        for booking in created:
            logger.info(f"Booking {booking.id} confirmed: {booking.item_name} (${booking.price})")
        return created

    def _release(self, booking: PendingBooking) -> None:
        if self._checkout_hold is booking:
            self._checkout_hold = None

    # ------------------------------------------------------------------
    # Panel and map focus
    # ------------------------------------------------------------------

    def set_active_tab(self, tab: str) -> None:
        if tab not in TABS:
            raise ValueError(f"Unknown tab '{tab}'. Must be one of: {', '.join(TABS)}")
        with self._lock:
            self._active_tab = tab
            self._version += 1

    def focus(self, coords: LatLng) -> None:
        """Point the map camera at ``coords``."""
        with self._lock:
            self._fly_to = coords
            self._version += 1


__all__ = ["TripStore"]
