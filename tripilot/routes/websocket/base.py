# tripilot/routes/websocket/base.py
"""Shared plumbing for the planner's Socket.IO handlers."""

import logging
from flask import request, session
from flask_socketio import emit

from tripilot.routes import NAMESPACE

logger = logging.getLogger(__name__)


class BaseWebSocketHandler:
    """Resolves the caller's planner session and emits on its behalf.

    Subclasses implement ``register_handlers``.
    """

    def __init__(self, socketio, session_manager, namespace=NAMESPACE):
        self.socketio = socketio
        self.session_manager = session_manager
        self.namespace = namespace

    def emit_to_client(self, event, data, to=None):
        """Emit to the calling socket, or to ``to`` (a sid or room) if given."""
        try:
            if to:
                self.socketio.emit(event, data, to=to, namespace=self.namespace)
            else:
                emit(event, data, namespace=self.namespace)
        except Exception as e:
            logger.error(f"Failed to emit {event}: {e}")

    def emit_to_planner(self, planner, event, data):
        """Emit to every socket bound to ``planner`` (one per open tab)."""
        for sid in list(planner.socket_ids):
            self.emit_to_client(event, data, to=sid)

    def get_client_info(self):
        return {
            "sid": request.sid,
            "flask_session_id": session.get('_id', f'anon_{request.sid}'),
            "planner_session_id": session.get("planner_session_id"),
        }

    def current_planner(self):
        """Planner session bound to this socket, or None (an error is emitted)."""
        session_id = session.get("planner_session_id")
        planner = self.session_manager.get_session(session_id) if session_id else None
        if planner is None:
            logger.warning(f"[WS] No planner session for client {request.sid}")
            self.emit_to_client("error", {"message": "No session available"})
        return planner

    def log_event(self, event_name, data=None):
        info = self.get_client_info()
        suffix = f", Data: {data}" if data else ""
        logger.info(f"[WS] {event_name} - Client: {info['sid']}, Session: {info['planner_session_id']}{suffix}")

    def handle_error(self, error, event_name=""):
        """Log an unexpected handler failure and report it to the caller."""
        logger.exception(f"[WS] Error in {event_name} - Client: {request.sid}, Error: {error}")
        self.emit_to_client('error', {'message': str(error), 'event': event_name})
