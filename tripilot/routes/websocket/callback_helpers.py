# tripilot/routes/websocket/callback_helpers.py
"""Helper functions for pushing planner state changes to Socket.IO clients."""

import logging
import time

from tripilot.api.services.planner_service import PlannerService

logger = logging.getLogger(__name__)


def push_view(socketio, planner_session, namespace: str = "/travel/ws") -> None:
    """Emit ``state_update`` with the current state and map scene.

    Every socket bound to the planner session gets the update, so several
    tabs of the same browser stay in sync.
    """
    try:
        view = PlannerService.get_view(planner_session)
        view["timestamp"] = time.time()
    except Exception as exc:
        logger.exception("Failed building state view: %s", exc)
        return

    for sid in list(planner_session.socket_ids):
        try:
            socketio.emit("state_update", view, room=sid, namespace=namespace)
        except Exception as exc:
            logger.exception("Failed emitting state_update: %s", exc)


def make_checkout_notifier(socketio, planner_session, namespace: str = "/travel/ws"):
    """Build the ``on_change`` callback for a CheckoutFlow.

    The callback may fire from the payment timer thread, outside any request,
    so it emits through the server object rather than ``flask_socketio.emit``.
    """

    def _on_checkout_change(checkout) -> None:
        payload = {"checkout": checkout.to_dict(), "timestamp": time.time()}
        for sid in list(planner_session.socket_ids):
            try:
                socketio.emit("checkout_update", payload, room=sid, namespace=namespace)
            except Exception as exc:
                logger.exception("Failed emitting checkout_update: %s", exc)
        # Cancel and complete touch the store as well
        if not checkout.is_open:
            push_view(socketio, planner_session, namespace)

    return _on_checkout_change
