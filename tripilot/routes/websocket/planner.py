# tripilot/routes/websocket/planner.py
"""WebSocket handlers for user-driven planner events and checkout."""

import logging

from .base import BaseWebSocketHandler
from .callback_helpers import make_checkout_notifier, push_view
from tripilot.api.errors import CheckoutError
from tripilot.api.services.planner_service import PlannerService

logger = logging.getLogger(__name__)


class PlannerHandler(BaseWebSocketHandler):
    """Handles clicks from the trips panel, the map and the checkout modal."""

    def _apply(self, event_name, mutate):
        """Run ``mutate(planner)`` and push the new view on success."""
        planner = self.current_planner()
        if planner is None:
            return
        try:
            mutate(planner)
            push_view(self.socketio, planner, self.namespace)
        except (KeyError, ValueError) as exc:
            message = exc.args[0] if exc.args else str(exc)
            logger.warning(f"[WS] Rejected {event_name}: {message}")
            self.emit_to_client('error', {'message': message, 'event': event_name})
        except Exception as exc:
            self.handle_error(exc, event_name)

    def _checkout(self, event_name, action):
        planner = self.current_planner()
        if planner is None:
            return
        try:
            checkout = PlannerService.checkout_action(planner, action)
            self.emit_to_client("checkout_update", {"checkout": checkout})
        except CheckoutError as exc:
            self.emit_to_client('error', {'message': str(exc), 'event': event_name})
        except Exception as exc:
            self.handle_error(exc, event_name)

    def register_handlers(self):
        """Register planner event handlers."""

        @self.socketio.on("get_state", namespace=self.namespace)
        def handle_get_state(data=None):
            planner = self.current_planner()
            if planner is not None:
                push_view(self.socketio, planner, self.namespace)

        @self.socketio.on("select_trip", namespace=self.namespace)
        def handle_select_trip(data=None):
            trip_id = (data or {}).get("trip_id", "")
            self._apply("select_trip", lambda p: PlannerService.select_trip(p, trip_id))

        @self.socketio.on("clear_selection", namespace=self.namespace)
        def handle_clear_selection(data=None):
            self._apply("clear_selection", lambda p: p.store.clear_selection())

        @self.socketio.on("focus_destination", namespace=self.namespace)
        def handle_focus_destination(data=None):
            destination_id = (data or {}).get("destination_id", "")
            self._apply(
                "focus_destination",
                lambda p: PlannerService.focus_destination(p, destination_id),
            )

        @self.socketio.on("set_active_tab", namespace=self.namespace)
        def handle_set_active_tab(data=None):
            tab = (data or {}).get("tab", "")
            self._apply("set_active_tab", lambda p: p.store.set_active_tab(tab))

        @self.socketio.on("remove_bucket_item", namespace=self.namespace)
        def handle_remove_bucket_item(data=None):
            item_id = (data or {}).get("id", "")
            self._apply("remove_bucket_item", lambda p: p.store.remove_bucket_item(item_id))

        @self.socketio.on("confirm_booking", namespace=self.namespace)
        def handle_confirm_booking(data=None):
            self._apply("confirm_booking", lambda p: p.store.confirm_pending_booking())

        @self.socketio.on("cancel_booking", namespace=self.namespace)
        def handle_cancel_booking(data=None):
            self._apply("cancel_booking", lambda p: p.store.cancel_pending_booking())

        # -- checkout ---------------------------------------------------------

        @self.socketio.on("open_checkout", namespace=self.namespace)
        def handle_open_checkout(data=None):
            planner = self.current_planner()
            if planner is None:
                return
            try:
                checkout = PlannerService.open_checkout(
                    planner,
                    on_change=make_checkout_notifier(self.socketio, planner, self.namespace),
                )
                self.emit_to_planner(planner, "checkout_update", {"checkout": checkout})
            except CheckoutError as exc:
                self.emit_to_client('error', {'message': str(exc), 'event': 'open_checkout'})
            except Exception as exc:
                self.handle_error(exc, "open_checkout")

        @self.socketio.on("checkout_status", namespace=self.namespace)
        def handle_checkout_status(data=None):
            planner = self.current_planner()
            if planner is not None:
                self.emit_to_client("checkout_update", {"checkout": PlannerService.get_checkout(planner)})

        @self.socketio.on("checkout_pay", namespace=self.namespace)
        def handle_checkout_pay(data=None):
            self._checkout("checkout_pay", "pay")

        @self.socketio.on("checkout_cancel", namespace=self.namespace)
        def handle_checkout_cancel(data=None):
            self._checkout("checkout_cancel", "cancel")

        @self.socketio.on("checkout_complete", namespace=self.namespace)
        def handle_checkout_complete(data=None):
            self._checkout("checkout_complete", "complete")
