# tripilot/routes/websocket/connection.py
"""WebSocket connection and disconnection handlers."""

import time
import secrets
import logging
from flask import session
from flask_socketio import disconnect

from .base import BaseWebSocketHandler
from .callback_helpers import push_view

logger = logging.getLogger(__name__)


class ConnectionHandler(BaseWebSocketHandler):
    """Handles WebSocket connection lifecycle events."""

    def register_handlers(self):
        """Register connection-related event handlers."""

        @self.socketio.on('connect', namespace=self.namespace)
        def handle_connect(auth=None):
            """Handle WebSocket connection from browser."""
            client_info = self.get_client_info()
            self.log_event('connect')

            try:
                # Ensure Flask session has an ID
                if '_id' not in session:
                    session['_id'] = secrets.token_hex(16)
                    session.modified = True

                planner = self.session_manager.get_or_create(session['_id'])
                if planner is None:
                    logger.error("❌ Failed to create planner session - server at capacity")
                    self.emit_to_client('error', {
                        'message': 'Server at capacity, try again later'
                    })
                    disconnect()
                    return

                session['planner_session_id'] = planner.session_id
                planner.socket_ids.add(client_info['sid'])
                logger.info(f"🔗 Client {client_info['sid']} bound to session {planner.session_id}")

                self.emit_to_client('connected', {
                    'session_id': planner.session_id,
                    'status': 'connected',
                    'flask_session_id': session['_id']
                })
                push_view(self.socketio, planner, self.namespace)

            except Exception as e:
                logger.error(f"Connection error: {e}")
                self.handle_error(e, 'connect')
                disconnect()

        @self.socketio.on('disconnect', namespace=self.namespace)
        def handle_disconnect(reason=None):
            """Handle WebSocket disconnection."""
            session_id = session.get('planner_session_id')
            planner = self.session_manager.get_session(session_id) if session_id else None

            if planner:
                planner.socket_ids.discard(self.get_client_info()['sid'])
                logger.info(f"🔌 WebSocket disconnected from session {session_id}")
            else:
                self.log_event('disconnect', {'no_session': True})

        @self.socketio.on('ping', namespace=self.namespace)
        def handle_ping():
            """Handle ping for connection testing."""
            self.emit_to_client('pong', {'timestamp': time.time()})
