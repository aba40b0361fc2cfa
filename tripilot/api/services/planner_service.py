# tripilot/api/services/planner_service.py
"""Service layer for user-driven planner events shared by REST and WebSocket routes."""

import logging
from typing import Any, Callable, Dict, Optional

from tripilot.api.data import DESTINATIONS, find_destination
from tripilot.api.errors import CheckoutError
from tripilot.api.services.checkout_service import CheckoutFlow
from tripilot.api.services.map_service import MapService

logger = logging.getLogger(__name__)


class PlannerService:
    """Applies user events to a planner session's store and checkout."""

    @staticmethod
    def get_view(planner_session) -> Dict[str, Any]:
        """Full state plus map scene, as pushed to the UI.

        Args:
            planner_session: PlannerSession to render

        Returns:
            Dictionary with ``state`` and ``map`` keys
        """
        store = planner_session.store
        with store.lock:
            return {
                "state": store.snapshot(),
                "map": MapService.scene_for_store(store, DESTINATIONS),
                "checkout": PlannerService.get_checkout(planner_session),
            }

    @staticmethod
    def select_trip(planner_session, trip_id: str):
        """Select a trip by id.

        Raises:
            KeyError: If the trip does not exist
        """
        trip = planner_session.store.select_trip_by_id(trip_id)
        if trip is None:
            raise KeyError(f"Unknown trip '{trip_id}'")
        return trip

    @staticmethod
    def focus_destination(planner_session, destination_id: str):
        """Fly the map to a popular destination.

        Raises:
            KeyError: If the destination does not exist
        """
        dest = find_destination(destination_id)
        if dest is None:
            raise KeyError(f"Unknown destination '{destination_id}'")
        planner_session.store.focus(dest.coords)
        return dest

    @staticmethod
    def get_checkout(planner_session) -> Optional[Dict[str, Any]]:
        checkout = planner_session.checkout
        return checkout.to_dict() if checkout is not None else None

    @staticmethod
    def open_checkout(planner_session, delay: Optional[float] = None,
                      on_change: Optional[Callable] = None) -> Dict[str, Any]:
        """Open checkout over the pending booking.

        An already-open checkout is returned as-is.

        Raises:
            CheckoutError: If there is nothing to check out
        """
        current = planner_session.checkout
        if current is not None and current.is_open:
            return current.to_dict()

        planner_session.checkout = CheckoutFlow(
            planner_session.store, delay=delay, on_change=on_change
        )
        logger.info(f"Checkout opened for session {planner_session.session_id}")
        return planner_session.checkout.to_dict()

    @staticmethod
    def checkout_action(planner_session, action: str) -> Dict[str, Any]:
        """Run ``pay``, ``cancel`` or ``complete`` on the open checkout.

        Raises:
            CheckoutError: If no checkout is open or the step does not allow it
        """
        checkout = planner_session.checkout
        if checkout is None:
            raise CheckoutError("No checkout in progress")

        if action == "pay":
            checkout.pay()
        elif action == "cancel":
            checkout.cancel()
        elif action == "complete":
            checkout.complete()
        else:
            raise CheckoutError(f"Unknown checkout action '{action}'")
        return checkout.to_dict()


__all__ = ['PlannerService']
