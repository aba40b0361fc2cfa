# tripilot/routes/travel.py
"""Travel routes and blueprint configuration."""

import logging
import secrets

from flask import Blueprint, jsonify, request, session

from tripilot.api.config import get_assistant_config, get_map_config
from tripilot.api.data import DESTINATIONS
from tripilot.api.errors import CheckoutError
from tripilot.api.mock_search import generate_flights, generate_hotels
from tripilot.api.models import to_dicts
from tripilot.api.services.map_service import MapService
from tripilot.api.services.planner_service import PlannerService
from tripilot.routes import NAMESPACE
from tripilot.routes.websocket.callback_helpers import make_checkout_notifier, push_view

logger = logging.getLogger(__name__)


def create_travel_blueprint(session_manager, socketio=None, namespace=NAMESPACE):
    """Create and configure the travel blueprint.

    Args:
        session_manager: SessionManager holding one planner session per browser
        socketio: Optional Flask-SocketIO instance used to push state changes
            made over REST to the browser's open sockets
        namespace: Socket.IO namespace for those pushes

    Returns:
        Configured Flask Blueprint
    """
    travel_bp = Blueprint("travel", __name__, url_prefix="/travel")

    def _planner_session():
        if "_id" not in session:
            session["_id"] = secrets.token_hex(16)
            session.modified = True
        return session_manager.get_or_create(session["_id"])

    def _changed(planner):
        if socketio is not None:
            push_view(socketio, planner, namespace)

    def _body():
        return request.get_json(silent=True) or {}

    @travel_bp.errorhandler(CheckoutError)
    def _checkout_error(exc):
        return jsonify({"error": str(exc)}), 409

    @travel_bp.before_request
    def _require_session():
        if _planner_session() is None:
            return jsonify({"error": "Server at capacity, try again later"}), 503

    @travel_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "travel"})

    @travel_bp.route("/api/config")
    def api_config():
        """Return map and assistant configuration for the frontend."""
        assistant = get_assistant_config()
        return jsonify({
            "map": get_map_config(),
            "assistant": {"title": assistant["title"], "greeting": assistant["greeting"]},
            "namespace": namespace,
        })

    # ------------------------------------------------------------------
    # State views
    # ------------------------------------------------------------------

    @travel_bp.route("/api/state")
    def api_state():
        return jsonify(_planner_session().store.snapshot())

    @travel_bp.route("/api/map")
    def api_map():
        return jsonify(MapService.scene_for_store(_planner_session().store, DESTINATIONS))

    @travel_bp.route("/api/destinations")
    def api_destinations():
        return jsonify(to_dicts(DESTINATIONS))

    # ------------------------------------------------------------------
    # Assistant actions
    # ------------------------------------------------------------------

    @travel_bp.route("/api/actions")
    def api_actions():
        """List the actions the assistant may call."""
        return jsonify(_planner_session().function_handler.get_function_definitions())

    @travel_bp.route("/api/context")
    def api_context():
        """State shared with the assistant as prompt context."""
        return jsonify(_planner_session().function_handler.get_context())

    @travel_bp.route("/api/actions/<name>", methods=["POST"])
    def api_invoke_action(name):
        planner = _planner_session()
        handler = planner.function_handler
        if name not in handler.functions:
            return jsonify({"success": False, "error": "unknown_function",
                            "message": f"Unknown function: {name}"}), 404

        version = planner.store.version
        result = handler.handle_function_call(
            request.headers.get("X-Call-Id") or f"rest_{secrets.token_hex(6)}",
            name,
            _body(),
        )
        if planner.store.version != version:
            _changed(planner)
        return jsonify(result)

    # ------------------------------------------------------------------
    # User events
    # ------------------------------------------------------------------

    @travel_bp.route("/api/trips/<trip_id>/select", methods=["POST"])
    def api_select_trip(trip_id):
        planner = _planner_session()
        try:
            trip = PlannerService.select_trip(planner, trip_id)
        except KeyError as e:
            return jsonify({"error": str(e.args[0])}), 404
        _changed(planner)
        return jsonify(trip.to_dict())

    @travel_bp.route("/api/selection/clear", methods=["POST"])
    def api_clear_selection():
        planner = _planner_session()
        planner.store.clear_selection()
        _changed(planner)
        return jsonify({"ok": True})

    @travel_bp.route("/api/destinations/<destination_id>/focus", methods=["POST"])
    def api_focus_destination(destination_id):
        planner = _planner_session()
        try:
            dest = PlannerService.focus_destination(planner, destination_id)
        except KeyError as e:
            return jsonify({"error": str(e.args[0])}), 404
        _changed(planner)
        return jsonify(dest.to_dict())

    @travel_bp.route("/api/tab", methods=["POST"])
    def api_set_tab():
        planner = _planner_session()
        try:
            planner.store.set_active_tab(_body().get("tab", ""))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        _changed(planner)
        return jsonify({"activeTab": planner.store.active_tab})

    @travel_bp.route("/api/bucket/<item_id>", methods=["DELETE"])
    def api_remove_bucket_item(item_id):
        planner = _planner_session()
        removed = planner.store.remove_bucket_item(item_id)
        if removed:
            _changed(planner)
        return jsonify({"ok": True, "removed": removed})

    @travel_bp.route("/api/bookings/pending/confirm", methods=["POST"])
    def api_confirm_booking():
        planner = _planner_session()
        booking = planner.store.confirm_pending_booking()
        if booking is not None:
            _changed(planner)
        return jsonify({"booking": booking.to_dict() if booking else None})

    @travel_bp.route("/api/bookings/pending/cancel", methods=["POST"])
    def api_cancel_booking():
        planner = _planner_session()
        cancelled = planner.store.cancel_pending_booking()
        if cancelled:
            _changed(planner)
        return jsonify({"ok": True, "cancelled": cancelled})

    # ------------------------------------------------------------------
    # Offline search
    # ------------------------------------------------------------------

    @travel_bp.route("/api/search/flights")
    def api_search_flights():
        from_city = request.args.get("from", "").strip()
        to_city = request.args.get("to", "").strip()
        date = request.args.get("date", "").strip()
        if not from_city or not to_city or not date:
            return jsonify({"error": "from, to and date are required"}), 400
        flights = generate_flights(from_city, to_city, date)
        return jsonify({"flights": to_dicts(flights), "from": from_city, "to": to_city, "date": date})

    @travel_bp.route("/api/search/hotels")
    def api_search_hotels():
        location = request.args.get("location", "").strip()
        if not location:
            return jsonify({"error": "location is required"}), 400
        return jsonify({"hotels": to_dicts(generate_hotels(location)), "location": location})

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @travel_bp.route("/api/checkout", methods=["GET", "POST"])
    def api_checkout():
        planner = _planner_session()
        if request.method == "GET":
            return jsonify({"checkout": PlannerService.get_checkout(planner)})

        notifier = make_checkout_notifier(socketio, planner, namespace) if socketio else None
        checkout = PlannerService.open_checkout(planner, on_change=notifier)
        return jsonify({"checkout": checkout})

    @travel_bp.route("/api/checkout/<action>", methods=["POST"])
    def api_checkout_action(action):
        if action not in ("pay", "cancel", "complete"):
            return jsonify({"error": f"Unknown checkout action '{action}'"}), 404
        planner = _planner_session()
        checkout = PlannerService.checkout_action(planner, action)
        return jsonify({"checkout": checkout, "state": planner.store.snapshot()})

    return travel_bp


__all__ = ['create_travel_blueprint']
