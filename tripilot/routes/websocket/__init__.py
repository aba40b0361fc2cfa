# tripilot/routes/websocket/__init__.py
"""WebSocket route handlers initialization."""

import logging

from .connection import ConnectionHandler
from .planner import PlannerHandler
from .session import SessionHandler
from .base import NAMESPACE

logger = logging.getLogger(__name__)


def register_websocket_handlers(socketio, session_manager, namespace=NAMESPACE):
    """Register all WebSocket event handlers with SocketIO.

    Args:
        socketio: Flask-SocketIO instance
        session_manager: SessionManager shared with the REST blueprint
        namespace: Socket.IO namespace to register under
    """
    logger.info("Registering WebSocket handlers...")

    try:
        handlers = [
            ConnectionHandler(socketio, session_manager, namespace),
            PlannerHandler(socketio, session_manager, namespace),
            SessionHandler(socketio, session_manager, namespace),
        ]

        for handler in handlers:
            logger.info(f"Registering {type(handler).__name__} for namespace: {namespace}")
            handler.register_handlers()

        logger.info("✅ WebSocket handlers registered successfully")

    except Exception as e:
        logger.error(f"❌ Failed to register WebSocket handlers: {e}")
        logger.exception("WebSocket registration error:")
        raise


__all__ = ['register_websocket_handlers', 'NAMESPACE']
